import argparse
import importlib

import pytest

from icfs import cli
from icfs.error import IcfsError
from icfs.store import DirectoryNode

mount_module = importlib.import_module("icfs.cli.mount")


def parse(*argv: str) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    cli.add_mount_arguments(parser)
    return parser.parse_args(argv)


def test_read_config_defaults():
    cfg = cli.read_config(parse("/mnt/x"))

    assert cfg.mount_dir == "/mnt/x"
    assert cfg.mount.debug_fuse is False
    assert cfg.seed == {"aaa.txt": "fgshndiudfhbsduifsd\n", "bbb.txt": ""}


def test_read_config_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("mount_dir: /from/config\nmount:\n  min_tasks: 3\n")

    cfg = cli.read_config(parse("--config", str(path)))
    assert cfg.mount_dir == "/from/config"
    assert cfg.mount.min_tasks == 3

    cfg = cli.read_config(
        parse("/mnt/y", "--config", str(path), "--debug-fuse", "--min-tasks", "7")
    )
    assert cfg.mount_dir == "/mnt/y"
    assert cfg.mount.debug_fuse is True
    assert cfg.mount.min_tasks == 7


def test_read_config_errors(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("mount: {min_tasks: x}")

    with pytest.raises(IcfsError):
        cli.read_config(parse("--config", str(path)))

    with pytest.raises(IcfsError):
        cli.read_config(parse("--min-tasks", "0"))


def test_create_fs():
    fs = cli.create_fs(cli.read_config(parse()))

    assert list(fs.store.root.children) == [b"aaa.txt", b"bbb.txt"]
    assert fs.store.lookup((b"aaa.txt",)).content == b"fgshndiudfhbsduifsd\n"
    assert fs.store.lookup((b"bbb.txt",)).content == b""


def test_create_fs_with_nested_seed(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("seed:\n  d:\n    e:\n      f.txt: text\n")

    fs = cli.create_fs(cli.read_config(parse("--config", str(path))))

    assert isinstance(fs.store.lookup((b"d", b"e")), DirectoryNode)
    assert fs.store.lookup((b"d", b"e", b"f.txt")).content == b"text"


@pytest.mark.asyncio
async def test_mount_without_mount_point_prints_usage(capsys, monkeypatch):
    async def fail(*args, **kwargs):
        raise AssertionError("must not mount")

    monkeypatch.setattr(mount_module, "mount_ops", fail)

    await cli.mount(parse())

    assert capsys.readouterr().out.strip() == cli.USAGE


@pytest.mark.asyncio
async def test_mount(tmp_path, monkeypatch):
    calls = []

    async def fake_mount_ops(fs_ops, *, mount_dir, options):
        calls.append((fs_ops, mount_dir, options))

    monkeypatch.setattr(mount_module, "mount_ops", fake_mount_ops)

    await cli.mount(parse(str(tmp_path), "--min-tasks", "2"))

    [(fs_ops, mount_dir, options)] = calls

    assert mount_dir == str(tmp_path)
    assert options.min_tasks == 2
    assert fs_ops.store.lookup((b"aaa.txt",)) is not None

    with pytest.raises(IcfsError):
        await cli.mount(parse(str(tmp_path / "missing")))
