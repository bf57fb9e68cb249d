import errno
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

import pyfuse3

from icfs.error import DanglingInode, WriteOutOfBounds
from icfs.store import (
    DirectoryNode,
    FileNode,
    Node,
    NotFound,
    Store,
    StorePath,
    path_join,
    path_parent,
    path_to_str,
)

from .fh import FileSystemHandles
from .inode import InodesRegistry
from .logger import logger as _logger
from .util import (
    MyLock,
    create_directory_attributes,
    create_file_attributes,
    exception_handler,
    measure_time,
)

N = TypeVar("N", bound=Node)

DOT_NAMES = (b".", b"..")

STATFS_BLOCK_SIZE = 512
STATFS_FREE_BLOCKS = 1 << 21
STATFS_FREE_FILES = 1 << 20


@dataclass
class DirEntry:
    inode: int
    position: int
    """`.` is 0, `..` is 1, the n-th child is n + 2"""
    is_dir: bool
    name: bytes


measure_time_logger = _logger.getChild("time", suffix_as_tag=True)


class FileSystemOperations(pyfuse3.Operations):
    """
    pyfuse3 callbacks over an in-memory `Store`.

    The kernel addresses entries by inode only, so every callback resolves
    its inodes to store paths through `InodesRegistry`, does the work on
    the store and binds inodes for the paths it replies with.
    """

    def __init__(
        self,
        store: Optional[Store] = None,
        *,
        timeout: float = 1.0,
    ):
        super(FileSystemOperations, self).__init__()
        self._store = store if store is not None else Store()
        self._timeout = timeout
        self._logger = _logger.getChild("FileSystemOperations")
        self._inodes = InodesRegistry()
        self._handles = FileSystemHandles()
        self._lock = MyLock("FileSystemOperations.lock", logger=self._logger)

    @property
    def store(self) -> Store:
        return self._store

    @property
    def inodes(self) -> InodesRegistry:
        return self._inodes

    @property
    def handles(self) -> FileSystemHandles:
        return self._handles

    def _path_by_inode(self, inode: int) -> StorePath:
        path = self._inodes.get_path(inode)

        if path is None:
            self._logger.debug(f"inode {inode} is not bound")
            raise pyfuse3.FUSEError(errno.ENOENT)

        return path

    def _resolve(
        self, inode: int, getter: Callable[[StorePath], N]
    ) -> tuple[StorePath, N]:
        """Runs a typed store getter on the path bound to `inode`"""
        path = self._path_by_inode(inode)

        try:
            return path, getter(path)
        except NotFound:
            raise DanglingInode(inode, path)

    def _node_by_inode(self, inode: int) -> tuple[StorePath, Node]:
        return self._resolve(inode, self._store.get_node)

    def _directory_by_inode(self, inode: int) -> tuple[StorePath, DirectoryNode]:
        return self._resolve(inode, self._store.get_directory)

    def _file_by_inode(self, inode: int) -> tuple[StorePath, FileNode]:
        return self._resolve(inode, self._store.get_file)

    def _inode_by_fh(self, fh: int) -> int:
        inode, _ = self._handles.get_by_fh(fh)

        if inode is None:
            self._logger.error(f"fh={fh} is missing in open handles")
            raise pyfuse3.FUSEError(errno.ENOENT)

        return inode

    def _create_attributes_for_node(self, node: Node, inode: int):
        if isinstance(node, DirectoryNode):
            return create_directory_attributes(inode, timeout=self._timeout)

        return create_file_attributes(
            size=node.size, inode=inode, timeout=self._timeout
        )

    def get_attributes(self, inode: int) -> pyfuse3.EntryAttributes:
        _, node = self._node_by_inode(inode)
        return self._create_attributes_for_node(node, inode)

    def _reply_entry(self, path: StorePath) -> pyfuse3.EntryAttributes:
        """Binds `path` and counts the reference handed to the kernel"""
        inode = self._inodes.bind(path)
        attrs = self.get_attributes(inode)
        self._inodes.acquire(inode)
        return attrs

    def list_directory(
        self,
        inode: int,
        off: int = 0,
        names: Optional[list[bytes]] = None,
    ) -> list[DirEntry]:
        """
        Entries of the directory `inode` starting at position `off`. `names`
        is the listing snapshot taken by `opendir`; children removed since
        then are skipped without shifting the positions of the rest.
        """
        path, directory = self._directory_by_inode(inode)

        if names is None:
            names = list(directory.children.keys())

        entries: list[DirEntry] = []

        if off <= 0:
            entries.append(DirEntry(inode, 0, True, b"."))

        if off <= 1:
            parent_inode = self._inodes.bind(path_parent(path))
            entries.append(DirEntry(parent_inode, 1, True, b".."))

        for position, name in enumerate(names, 2):
            if position < off:
                continue

            child = directory.children.get(name)

            if child is None:
                continue

            child_inode = self._inodes.bind(path_join(path, name))
            entries.append(
                DirEntry(child_inode, position, isinstance(child, DirectoryNode), name)
            )

        return entries

    @measure_time(logger_func=measure_time_logger.trace)
    @exception_handler
    async def lookup(
        self, parent_inode: int, name: bytes, ctx=None
    ) -> pyfuse3.EntryAttributes:
        self._logger.debug(f"= lookup({parent_inode}, {name})")

        async with self._lock:
            parent_path, directory = self._directory_by_inode(parent_inode)

            if name == b".":
                return self._reply_entry(parent_path)

            if name == b"..":
                return self._reply_entry(path_parent(parent_path))

            if name not in directory.children:
                raise NotFound(path_join(parent_path, name))

            return self._reply_entry(path_join(parent_path, name))

    @exception_handler
    async def forget(self, inode_list):
        self._logger.debug(f"= forget({inode_list})")

        async with self._lock:
            for inode, nlookup in inode_list:
                self._inodes.forget(inode, nlookup)

    @exception_handler
    async def getattr(self, inode: int, ctx=None) -> pyfuse3.EntryAttributes:
        self._logger.debug(f"= getattr({inode})")

        async with self._lock:
            return self.get_attributes(inode)

    @exception_handler
    async def setattr(
        self, inode: int, attr, fields, fh, ctx=None
    ) -> pyfuse3.EntryAttributes:
        self._logger.debug(f"= setattr({inode}, update_size={fields.update_size})")

        async with self._lock:
            if not fields.update_size:
                _, node = self._node_by_inode(inode)
                return self._create_attributes_for_node(node, inode)

            _, node = self._file_by_inode(inode)
            size = attr.st_size

            if size < node.size:
                del node.content[size:]
            else:
                node.content.extend(bytes(size - node.size))

            return self._create_attributes_for_node(node, inode)

    @exception_handler
    async def mkdir(
        self, parent_inode: int, name: bytes, mode: int, ctx=None
    ) -> pyfuse3.EntryAttributes:
        self._logger.debug(f"= mkdir({parent_inode}, {name})")

        async with self._lock:
            parent_path, _ = self._directory_by_inode(parent_inode)
            self._store.insert_child(parent_path, name, DirectoryNode())

            return self._reply_entry(path_join(parent_path, name))

    @exception_handler
    async def create(
        self, parent_inode: int, name: bytes, mode: int, flags: int, ctx=None
    ) -> tuple[pyfuse3.FileInfo, pyfuse3.EntryAttributes]:
        self._logger.debug(f"= create({parent_inode}, {name})")

        async with self._lock:
            parent_path, _ = self._directory_by_inode(parent_inode)
            self._store.insert_child_if_absent(parent_path, name, FileNode())

            attrs = self._reply_entry(path_join(parent_path, name))
            fh = self._handles.open_fh(attrs.st_ino)

            return pyfuse3.FileInfo(fh=fh), attrs

    async def _remove_entry(self, parent_inode: int, name: bytes):
        async with self._lock:
            parent_path, _ = self._directory_by_inode(parent_inode)
            path = path_join(parent_path, name)

            if self._store.remove_child(parent_path, name) is None:
                self._logger.debug(f"{path_to_str(path)} is already absent")
                return

            detached = self._inodes.detach(path)

            self._logger.debug(
                f"removed {path_to_str(path)}, detached inodes: {detached}"
            )

    @exception_handler
    async def unlink(self, parent_inode: int, name: bytes, ctx=None):
        self._logger.debug(f"= unlink({parent_inode}, {name})")
        await self._remove_entry(parent_inode, name)

    @exception_handler
    async def rmdir(self, parent_inode: int, name: bytes, ctx=None):
        self._logger.debug(f"= rmdir({parent_inode}, {name})")
        await self._remove_entry(parent_inode, name)

    @exception_handler
    async def rename(
        self,
        parent_inode_old: int,
        name_old: bytes,
        parent_inode_new: int,
        name_new: bytes,
        flags: int = 0,
        ctx=None,
    ):
        self._logger.debug(
            f"= rename({parent_inode_old}, {name_old}, {parent_inode_new}, {name_new})"
        )

        async with self._lock:
            old_parent_path, _ = self._directory_by_inode(parent_inode_old)
            new_parent_path, _ = self._directory_by_inode(parent_inode_new)

            self._store.move_child(old_parent_path, name_old, new_parent_path, name_new)

            old_path = path_join(old_parent_path, name_old)
            new_path = path_join(new_parent_path, name_new)

            if old_path != new_path:
                self._inodes.move(old_path, new_path)

    @exception_handler
    async def open(self, inode: int, flags: int, ctx=None) -> pyfuse3.FileInfo:
        self._logger.debug(f"= open({inode})")

        async with self._lock:
            self._file_by_inode(inode)
            fh = self._handles.open_fh(inode)

        return pyfuse3.FileInfo(fh=fh)

    @measure_time(logger_func=measure_time_logger.trace)
    @exception_handler
    async def read(self, fh: int, off: int, size: int) -> bytes:
        self._logger.debug(f"= read(fh={fh},off={off},size={size})")

        async with self._lock:
            inode = self._inode_by_fh(fh)
            _, node = self._file_by_inode(inode)

            return bytes(node.content[off : off + size])

    @measure_time(logger_func=measure_time_logger.trace)
    @exception_handler
    async def write(self, fh: int, off: int, buf: bytes) -> int:
        self._logger.debug(f"= write(fh={fh},off={off},size={len(buf)})")

        async with self._lock:
            inode = self._inode_by_fh(fh)
            _, node = self._file_by_inode(inode)

            if off > node.size:
                raise WriteOutOfBounds(inode, off, node.size)

            node.content[off : off + len(buf)] = buf

            return len(buf)

    @exception_handler
    async def flush(self, fh: int):
        pass

    @exception_handler
    async def release(self, fh: int):
        self._logger.debug(f"= release({fh})")
        self._handles.release_fh(fh)

    @exception_handler
    async def opendir(self, inode: int, ctx=None) -> int:
        self._logger.debug(f"= opendir({inode})")

        async with self._lock:
            _, directory = self._directory_by_inode(inode)
            fh = self._handles.open_fh(inode, list(directory.children.keys()))

        self._logger.debug(f"opendir({inode}) = {fh}")
        return fh

    @measure_time(logger_func=measure_time_logger.trace)
    @exception_handler
    async def readdir(self, fh: int, start_id: int, token):
        inode, names = self._handles.get_by_fh(fh)

        if inode is None:
            self._logger.error(f"= readdir(fh={fh}, off={start_id}): missing handle")
            raise pyfuse3.FUSEError(errno.EBADF)

        self._logger.debug(f"= readdir({inode}, fh={fh}, off={start_id})")

        async with self._lock:
            for entry in self.list_directory(inode, start_id, names):
                accepted = pyfuse3.readdir_reply(
                    token,
                    entry.name,
                    self.get_attributes(entry.inode),
                    entry.position + 1,
                )

                if not accepted:
                    break

                if entry.name not in DOT_NAMES:
                    self._inodes.acquire(entry.inode)

    @exception_handler
    async def releasedir(self, fh: int):
        self._logger.debug(f"= releasedir({fh})")
        self._handles.release_fh(fh)

    @exception_handler
    async def statfs(self, ctx=None) -> pyfuse3.StatvfsData:
        async with self._lock:
            files = 0
            used_bytes = 0

            for _, node in self._store.walk():
                files += 1

                if isinstance(node, FileNode):
                    used_bytes += node.size

        used_blocks = -(-used_bytes // STATFS_BLOCK_SIZE)

        stat_ = pyfuse3.StatvfsData()

        stat_.f_bsize = STATFS_BLOCK_SIZE
        stat_.f_frsize = STATFS_BLOCK_SIZE
        stat_.f_blocks = used_blocks + STATFS_FREE_BLOCKS
        stat_.f_bfree = STATFS_FREE_BLOCKS
        stat_.f_bavail = STATFS_FREE_BLOCKS
        stat_.f_files = files + STATFS_FREE_FILES
        stat_.f_ffree = STATFS_FREE_FILES
        stat_.f_favail = STATFS_FREE_FILES
        stat_.f_namemax = 255

        return stat_
