
from .types import StorePath


def path_join(path: StorePath, name: bytes) -> StorePath:
    return (*path, name)


def path_parent(path: StorePath) -> StorePath:
    """Parent of `path`. The root is its own parent"""
    return path[:-1]


def is_subpath(path: StorePath, prefix: StorePath) -> bool:
    """True if `path` is `prefix` itself or lies below it"""
    return path[: len(prefix)] == prefix


def rebase_path(path: StorePath, old: StorePath, new: StorePath) -> StorePath:
    return (*new, *path[len(old) :])


def path_to_str(path: StorePath) -> str:
    return "/" + "/".join(p.decode("utf-8", errors="replace") for p in path)
