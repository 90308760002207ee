"""Plain Python document tree."""

import copy
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pyqt_treesync.protocols import DocumentStore, Handle, Node

logger = logging.getLogger(__name__)

ROOT_HANDLE = "root"

# Called for every inserted node; may return a default child to auto-populate.
PlaceholderFactory = Callable[[Node], Optional[Node]]


class InMemoryDocumentStore(DocumentStore):
    """
    Document tree held in dictionaries.

    Supports transaction(): writes inside the block are rolled back if the
    block raises.

    Example:
        store = InMemoryDocumentStore()
        region = store.insert_node(create_node("region"), None, store.root_handle)
    """

    def __init__(self, placeholder_factory: Optional[PlaceholderFactory] = None):
        self._nodes: Dict[Handle, Node] = {ROOT_HANDLE: Node(kind="root", handle=ROOT_HANDLE)}
        self._children: Dict[Handle, List[Handle]] = {ROOT_HANDLE: []}
        self._parents: Dict[Handle, Handle] = {}
        self._placeholder_factory = placeholder_factory

    @property
    def root_handle(self) -> Handle:
        return ROOT_HANDLE

    def insert_node(self, node: Node, index: Optional[int], parent: Handle) -> Handle:
        if parent not in self._nodes:
            raise KeyError(f"Unknown parent node: {parent}")
        if node.handle in self._nodes:
            raise ValueError(f"Node {node.handle} is already in the document")

        siblings = self._children[parent]
        position = len(siblings) if index is None else max(0, min(index, len(siblings)))

        self._nodes[node.handle] = Node(kind=node.kind, config=copy.deepcopy(node.config), handle=node.handle)
        self._children[node.handle] = []
        self._parents[node.handle] = parent
        siblings.insert(position, node.handle)

        if self._placeholder_factory is not None:
            placeholder = self._placeholder_factory(node)
            if placeholder is not None:
                self.insert_node(placeholder, 0, node.handle)

        return node.handle

    def remove_nodes(self, handles: Sequence[Handle]) -> None:
        for handle in handles:
            if handle == ROOT_HANDLE:
                raise ValueError("The document root cannot be removed")
            if handle not in self._nodes:
                continue  # already gone with an ancestor
            self._children[self._parents[handle]].remove(handle)
            self._drop_subtree(handle)

    def update_node_config(self, handle: Handle, partial_config: Mapping[str, Any]) -> None:
        self._require(handle).config.update(copy.deepcopy(dict(partial_config)))

    def query_children(self, parent: Handle) -> List[Node]:
        self._require(parent)
        return [self._snapshot(handle) for handle in self._children[parent]]

    def get_node(self, handle: Handle) -> Optional[Node]:
        if handle not in self._nodes:
            return None
        return self._snapshot(handle)

    def get_ancestor_chain(self, handle: Handle) -> List[Handle]:
        self._require(handle)
        chain = []
        current = handle
        while current in self._parents:
            current = self._parents[current]
            chain.append(current)
        return chain

    @contextmanager
    def transaction(self):
        saved = copy.deepcopy((self._nodes, self._children, self._parents))
        try:
            yield
        except Exception:
            self._nodes, self._children, self._parents = saved
            logger.warning("Document transaction rolled back")
            raise

    def _require(self, handle: Handle) -> Node:
        try:
            return self._nodes[handle]
        except KeyError:
            raise KeyError(f"Unknown node: {handle}") from None

    def _snapshot(self, handle: Handle) -> Node:
        node = self._nodes[handle]
        return Node(kind=node.kind, config=copy.deepcopy(node.config), handle=node.handle)

    def _drop_subtree(self, handle: Handle) -> None:
        for child in self._children.pop(handle):
            self._drop_subtree(child)
        del self._nodes[handle]
        self._parents.pop(handle, None)
