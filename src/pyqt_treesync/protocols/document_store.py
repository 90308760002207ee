"""
Document store contract.

The host document is a tree of nodes addressed by opaque handles. The
reconciliation engine only ever talks to it through these primitives; the
calls are synchronous and are not assumed to be transactional across
multiple calls.
"""

import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

Handle = str


@dataclass
class Node:
    """A node of the host document: kind, configuration and handle."""
    kind: str
    config: Dict[str, Any] = field(default_factory=dict)
    handle: Handle = field(default_factory=lambda: uuid.uuid4().hex)


def create_node(kind: str, config: Optional[Mapping[str, Any]] = None) -> Node:
    """Create a detached node with a fresh handle."""
    return Node(kind=kind, config=dict(config or {}))


class DocumentStore(ABC):
    """
    Primitive operations of the shared document tree.

    Implementations:
        InMemoryDocumentStore: plain Python tree
        ItemModelDocumentStore: QStandardItemModel-backed tree for tree views
    """

    @property
    @abstractmethod
    def root_handle(self) -> Handle:
        """Handle of the document root."""

    @abstractmethod
    def insert_node(self, node: Node, index: Optional[int], parent: Handle) -> Handle:
        """Insert node under parent at index (None appends). Returns its handle."""

    @abstractmethod
    def remove_nodes(self, handles: Sequence[Handle]) -> None:
        """Remove nodes and their subtrees. Unknown handles are ignored."""

    @abstractmethod
    def update_node_config(self, handle: Handle, partial_config: Mapping[str, Any]) -> None:
        """Merge partial_config into the node's configuration."""

    @abstractmethod
    def query_children(self, parent: Handle) -> List[Node]:
        """Return snapshots of parent's children, in order."""

    @abstractmethod
    def get_node(self, handle: Handle) -> Optional[Node]:
        """Return a snapshot of one node, or None if it does not exist."""

    @abstractmethod
    def get_ancestor_chain(self, handle: Handle) -> List[Handle]:
        """Return ancestor handles, nearest parent first, ending at the root."""

    @contextmanager
    def transaction(self):
        """
        Group writes that must apply together.

        The default does nothing; stores able to roll back override it so
        that an exception inside the block leaves the tree untouched.
        """
        yield
