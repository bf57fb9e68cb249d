from dataclasses import dataclass
from typing import Dict, Optional

from icfs.store import ROOT_PATH, StorePath, is_subpath, path_to_str, rebase_path

from .logger import logger as _logger


@dataclass
class RegistryItem:
    inode: int
    path: Optional[StorePath]
    """`None` once the entry was removed while the kernel still holds the inode"""
    lookup_count: int = 0


class InodesRegistry:
    """
    Bidirectional mapping between inode numbers and store paths.

    An inode number is either free (never minted, or recycled), bound to
    exactly one path, or orphaned: its entry is gone from the store but the
    kernel has not forgotten it yet, so the number stays reserved. Recycled
    numbers are handed out before new ones are minted.
    """

    ROOT_INODE: int = 1

    logger = _logger.getChild("InodesRegistry")

    def __init__(self):
        self._last_inode = InodesRegistry.ROOT_INODE

        self._items: Dict[int, RegistryItem] = {
            InodesRegistry.ROOT_INODE: RegistryItem(
                InodesRegistry.ROOT_INODE, ROOT_PATH
            )
        }
        self._inode_by_path: Dict[StorePath, int] = {
            ROOT_PATH: InodesRegistry.ROOT_INODE
        }

        self._free_inodes: set[int] = set()

    @property
    def free_inodes(self) -> frozenset[int]:
        return frozenset(self._free_inodes)

    def get_path(self, inode: int) -> Optional[StorePath]:
        item = self._items.get(inode)

        if item is None:
            return None

        return item.path

    def get_inode(self, path: StorePath) -> Optional[int]:
        return self._inode_by_path.get(path)

    def is_bound(self, inode: int) -> bool:
        return self.get_path(inode) is not None

    def lookup_count(self, inode: int) -> int:
        item = self._items.get(inode)
        return item.lookup_count if item is not None else 0

    def bind(self, path: StorePath) -> int:
        """Returns the inode bound to `path`, binding a new one if there is none yet"""

        if (inode := self._inode_by_path.get(path)) is not None:
            return inode

        inode = self._new_inode()

        self._items[inode] = RegistryItem(inode, path)
        self._inode_by_path[path] = inode

        self.logger.debug(f"bind({path_to_str(path)}) = {inode}")

        return inode

    def acquire(self, inode: int, count: int = 1):
        """The kernel received `inode` in a reply `count` more times"""
        item = self._items.get(inode)

        if item is None:
            self.logger.error(f"acquire({inode}): inode is not registered")
            return

        item.lookup_count += count

    def forget(self, inode: int, nlookup: int) -> bool:
        """Drops `nlookup` kernel references. Returns True if the inode was recycled"""

        if inode == InodesRegistry.ROOT_INODE:
            self.logger.debug(f"forget({inode}, {nlookup}): root is never recycled")
            return False

        item = self._items.get(inode)

        if item is None:
            self.logger.warning(f"forget({inode}, {nlookup}): inode is not bound")
            return False

        if nlookup > item.lookup_count:
            self.logger.debug(
                f"forget({inode}, {nlookup}): only {item.lookup_count} lookups were counted"
            )

        item.lookup_count = max(item.lookup_count - nlookup, 0)

        if item.lookup_count > 0:
            return False

        self._release(item)
        return True

    def move(self, old_path: StorePath, new_path: StorePath):
        """Rebinds every path at or below `old_path` to the same place below `new_path`"""

        moved = [
            (path, inode)
            for path, inode in self._inode_by_path.items()
            if is_subpath(path, old_path)
        ]

        for path, _ in moved:
            del self._inode_by_path[path]

        for path, inode in moved:
            rebased = rebase_path(path, old_path, new_path)
            self._items[inode].path = rebased
            self._inode_by_path[rebased] = inode

        self.logger.debug(
            f"move({path_to_str(old_path)}, {path_to_str(new_path)}): {len(moved)} inodes rebound"
        )

    def detach(self, path: StorePath) -> list[int]:
        """
        Unbinds every path at or below `path`. Inodes the kernel still
        references become orphans until forgotten, the rest are recycled
        right away. Returns the detached inodes.
        """
        if path == ROOT_PATH:
            raise ValueError("Root cannot be detached")

        detached = [
            inode
            for _path, inode in self._inode_by_path.items()
            if is_subpath(_path, path)
        ]

        for inode in detached:
            item = self._items[inode]
            del self._inode_by_path[item.path]
            item.path = None

            if item.lookup_count == 0:
                self._release(item)

        return detached

    def _release(self, item: RegistryItem):
        if item.path is not None:
            del self._inode_by_path[item.path]

        del self._items[item.inode]
        self._free_inodes.add(item.inode)

        self.logger.debug(f"released inode {item.inode}")

    def _new_inode(self):
        if self._free_inodes:
            inode = min(self._free_inodes)
            self._free_inodes.remove(inode)
            return inode

        self._last_inode += 1
        return self._last_inode
