from .operations import DirEntry, FileSystemOperations
from .inode import InodesRegistry, RegistryItem
from .fh import FileSystemHandles

from .util import exception_handler
from .logger import logger
