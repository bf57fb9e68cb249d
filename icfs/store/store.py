from collections.abc import Mapping
from typing import Iterator, Optional

from icfs import icfslog

from .error import AlreadyExists, InvalidMove, IsADirectory, NotADirectory, NotFound
from .path import is_subpath, path_join, path_to_str
from .types import ROOT_PATH, DirectoryNode, FileNode, Node, StorePath

SeedTree = Mapping[str, "str | bytes | SeedTree"]


class Store:
    """
    In-memory tree of files and directories. Everything is addressed by a
    `StorePath` walked from the root, there is no secondary index.

    Structural changes go through `insert_child`, `remove_child` and
    `move_child` so that name uniqueness and the tree shape are checked
    in one place.
    """

    logger = icfslog.getLogger("Store")

    def __init__(self, root: Optional[DirectoryNode] = None) -> None:
        self._root = root if root is not None else DirectoryNode()

    @property
    def root(self) -> DirectoryNode:
        return self._root

    def lookup(self, path: StorePath) -> Optional[Node]:
        current: Node = self._root

        for part in path:
            if not isinstance(current, DirectoryNode):
                return None

            child = current.children.get(part)

            if child is None:
                return None

            current = child

        return current

    def get_node(self, path: StorePath) -> Node:
        node = self.lookup(path)

        if node is None:
            raise NotFound(path)

        return node

    def get_directory(self, path: StorePath) -> DirectoryNode:
        node = self.get_node(path)

        if not isinstance(node, DirectoryNode):
            raise NotADirectory(path)

        return node

    def get_file(self, path: StorePath) -> FileNode:
        node = self.get_node(path)

        if not isinstance(node, FileNode):
            raise IsADirectory(path)

        return node

    def insert_child(self, parent: StorePath, name: bytes, node: Node) -> Node:
        return self._insert(self.get_directory(parent), parent, name, node)

    def _insert(
        self, directory: DirectoryNode, parent: StorePath, name: bytes, node: Node
    ) -> Node:
        if name in directory.children:
            raise AlreadyExists(path_join(parent, name))

        directory.children[name] = node
        return node

    def insert_child_if_absent(
        self, parent: StorePath, name: bytes, node: Node
    ) -> Node:
        """Inserts `node` unless `name` is taken. Returns whatever is stored under `name` afterwards"""
        directory = self.get_directory(parent)
        return directory.children.setdefault(name, node)

    def remove_child(self, parent: StorePath, name: bytes) -> Optional[Node]:
        directory = self.get_directory(parent)
        return directory.children.pop(name, None)

    def move_child(
        self,
        parent: StorePath,
        name: bytes,
        new_parent: StorePath,
        new_name: bytes,
    ) -> Node:
        source = self.get_directory(parent)
        destination = self.get_directory(new_parent)
        source_path = path_join(parent, name)

        node = source.children.get(name)

        if node is None:
            raise NotFound(source_path)

        if parent == new_parent and name == new_name:
            return node

        if new_name in destination.children:
            raise AlreadyExists(path_join(new_parent, new_name))

        if isinstance(node, DirectoryNode) and is_subpath(new_parent, source_path):
            raise InvalidMove(source_path, path_join(new_parent, new_name))

        del source.children[name]
        destination.children[new_name] = node

        self.logger.debug(
            f"move_child: {path_to_str(source_path)} -> {path_to_str(path_join(new_parent, new_name))}"
        )

        return node

    def walk(
        self, path: StorePath = ROOT_PATH
    ) -> Iterator[tuple[StorePath, Node]]:
        """Depth-first, parents before children, children in insertion order"""
        node = self.lookup(path)

        if node is None:
            return

        stack: list[tuple[StorePath, Node]] = [(path, node)]

        while stack:
            path, node = stack.pop()

            yield path, node

            if isinstance(node, DirectoryNode):
                stack.extend(
                    (path_join(path, name), child)
                    for name, child in reversed(node.children.items())
                )

    def populate(self, tree: SeedTree, parent: StorePath = ROOT_PATH):
        """Builds files and directories from a nested mapping. Strings are stored utf-8 encoded"""

        stack = [(parent, self.get_directory(parent), tree)]

        while stack:
            parent, directory, tree = stack.pop()

            for name, value in tree.items():
                bname = name.encode("utf-8")

                if isinstance(value, Mapping):
                    child = directory.children.setdefault(bname, DirectoryNode())

                    if not isinstance(child, DirectoryNode):
                        raise NotADirectory(path_join(parent, bname))

                    stack.append((path_join(parent, bname), child, value))
                    continue

                content = value.encode("utf-8") if isinstance(value, str) else value
                self._insert(directory, parent, bname, FileNode(bytearray(content)))

    @staticmethod
    def from_tree(tree: SeedTree) -> "Store":
        store = Store()
        store.populate(tree)
        return store
