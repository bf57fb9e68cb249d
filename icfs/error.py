class IcfsError(Exception):
    pass


class InvariantViolation(IcfsError):
    """Internal state that should never be reachable. Replied as EIO."""


class DanglingInode(InvariantViolation):
    def __init__(self, inode: int, path) -> None:
        super().__init__(f"inode {inode} is bound to {path} which does not resolve")
        self.inode = inode
        self.path = path


class WriteOutOfBounds(InvariantViolation):
    def __init__(self, inode: int, offset: int, size: int) -> None:
        super().__init__(
            f"write at offset {offset} into inode {inode} of size {size} would leave a hole"
        )
        self.inode = inode
        self.offset = offset
        self.size = size
