from typing import Any, Dict, Optional, Tuple

from .logger import logger as _logger


class FileSystemHandles:
    """Stores mapping from fh to a tuple of inode and handle data"""

    logger = _logger.getChild("FileSystemHandles")

    LAST_FH = 10

    def __init__(self):
        self._fhs: Dict[int, Tuple[int, Any]] = {}
        self._last_fh = FileSystemHandles.LAST_FH

    def open_fh(self, inode: int, data=None):
        fh = self._new_fh()
        self._fhs[fh] = inode, data

        self.logger.debug(f"open_fh({inode}) = {fh}")

        return fh

    def get_by_fh(self, fh: int) -> Tuple[Optional[int], Optional[Any]]:
        """Given a file handle returns a tuple of inode and related data. If no handle found returns (None, None)"""
        return self._fhs.get(fh, (None, None))

    def release_fh(self, fh: int):
        if self._fhs.pop(fh, None) is None:
            self.logger.debug(f"release_fh({fh}): unknown handle")

    def _new_fh(self):
        self._last_fh += 1
        return self._last_fh
