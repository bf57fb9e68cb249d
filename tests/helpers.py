from dataclasses import dataclass, field
from typing import Optional

import pyfuse3

from icfs.fs import FileSystemOperations, InodesRegistry
from icfs.store import StorePath

ROOT_INODE = InodesRegistry.ROOT_INODE


def p(path: str) -> StorePath:
    """`"/a/b"` as `(b"a", b"b")`"""
    return tuple(name.encode() for name in path.split("/") if name != "")


@dataclass
class ReaddirRecorder:
    """Stands in for `pyfuse3.readdir_reply`, accepting up to `limit` entries"""

    limit: Optional[int] = None
    replies: list[tuple[bytes, int, int]] = field(default_factory=list)

    def __call__(self, token, name: bytes, attrs: pyfuse3.EntryAttributes, next_id):
        if self.limit is not None and len(self.replies) >= self.limit:
            return False

        self.replies.append((name, attrs.st_ino, next_id))
        return True

    @property
    def names(self) -> list[bytes]:
        return [name for name, _, _ in self.replies]

    def clear(self):
        self.replies.clear()


async def lookup_path(fs: FileSystemOperations, *names: str) -> int:
    inode = ROOT_INODE

    for name in names:
        inode = (await fs.lookup(inode, name.encode())).st_ino

    return inode


async def readdir_all(fs: FileSystemOperations, inode: int, start_id=0):
    fh = await fs.opendir(inode)

    try:
        await fs.readdir(fh, start_id, None)
    finally:
        await fs.releasedir(fh)
