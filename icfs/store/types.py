from dataclasses import dataclass, field
from typing import Union

StorePath = tuple[bytes, ...]
"""Sequence of name components from the root. `()` is the root itself"""

ROOT_PATH: StorePath = ()


@dataclass
class FileNode:
    """A regular file holding its whole content in memory"""

    content: bytearray = field(default_factory=bytearray)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class DirectoryNode:
    """A directory. Children keep the order they were inserted in"""

    children: dict[bytes, "Node"] = field(default_factory=dict)


Node = Union[FileNode, DirectoryNode]
