from .types import DirectoryNode, FileNode, Node, ROOT_PATH, StorePath
from .path import (
    is_subpath,
    path_join,
    path_parent,
    path_to_str,
    rebase_path,
)
from .error import (
    AlreadyExists,
    InvalidMove,
    IsADirectory,
    NotADirectory,
    NotFound,
    StoreError,
)
from .store import SeedTree, Store
