import pyfuse3
import pytest

from icfs.fs import FileSystemOperations
from icfs.store import Store

from helpers import ReaddirRecorder


@pytest.fixture()
def fs_tree1() -> dict:
    return {
        "dir1": {
            "file1.txt": "file1.txt content",
            "file2.txt": "file2.txt content",
        },
        "dir2": {
            "file3.txt": "file3.txt content",
            "file4.txt": "file4.txt content",
            "dir2_dir3": {
                "file5.txt": "file5.txt content",
            },
        },
        "dir3": {
            "dir3_file1.txt": "dir3_file1.txt content",
        },
    }


@pytest.fixture()
def store1(fs_tree1) -> Store:
    return Store.from_tree(fs_tree1)


@pytest.fixture()
def fs() -> FileSystemOperations:
    return FileSystemOperations()


@pytest.fixture()
def fs1(store1) -> FileSystemOperations:
    return FileSystemOperations(store1)


@pytest.fixture()
def readdir_reply(monkeypatch) -> ReaddirRecorder:
    recorder = ReaddirRecorder()
    monkeypatch.setattr(pyfuse3, "readdir_reply", recorder)
    return recorder
