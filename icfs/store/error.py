import errno as _errno

from .path import path_to_str
from .types import StorePath


class StoreError(Exception):
    """Expected failure of a store operation. `errno` is the code replied to the kernel"""

    errno: int = _errno.EIO

    def __init__(self, path: StorePath, message: str) -> None:
        super().__init__(f"{path_to_str(path)}: {message}")
        self.path = path


class NotFound(StoreError):
    errno = _errno.ENOENT

    def __init__(self, path: StorePath) -> None:
        super().__init__(path, "no such entry")


class NotADirectory(StoreError):
    errno = _errno.ENOTDIR

    def __init__(self, path: StorePath) -> None:
        super().__init__(path, "not a directory")


class IsADirectory(StoreError):
    errno = _errno.EISDIR

    def __init__(self, path: StorePath) -> None:
        super().__init__(path, "is a directory")


class AlreadyExists(StoreError):
    errno = _errno.EEXIST

    def __init__(self, path: StorePath) -> None:
        super().__init__(path, "already exists")


class InvalidMove(StoreError):
    errno = _errno.EINVAL

    def __init__(self, path: StorePath, destination: StorePath) -> None:
        super().__init__(
            path, f"cannot be moved into its own subtree {path_to_str(destination)}"
        )
        self.destination = destination
