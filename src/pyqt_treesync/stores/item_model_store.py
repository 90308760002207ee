"""
QStandardItemModel-backed document tree.

Exposes the synchronized document as a Qt item model, so a QTreeView can
show containers and their content nodes while they are being reconciled.
Node configuration is kept on the Python side; items carry the handle and
a display label.
"""

import copy
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QStandardItem, QStandardItemModel

from pyqt_treesync.protocols import DocumentStore, Handle, Node
from pyqt_treesync.stores.memory_store import PlaceholderFactory

logger = logging.getLogger(__name__)

ROOT_HANDLE = "root"
HANDLE_ROLE = Qt.ItemDataRole.UserRole + 1
KIND_ROLE = Qt.ItemDataRole.UserRole + 2


class ItemModelDocumentStore(DocumentStore):
    """
    DocumentStore whose structure lives in a QStandardItemModel.

    Usage:
        store = ItemModelDocumentStore()
        tree_view.setModel(store.model)
    """

    def __init__(
        self,
        model: Optional[QStandardItemModel] = None,
        placeholder_factory: Optional[PlaceholderFactory] = None,
        label_field: str = "item_id",
    ):
        self._model = model if model is not None else QStandardItemModel()
        self._items: Dict[Handle, QStandardItem] = {}
        self._nodes: Dict[Handle, Node] = {ROOT_HANDLE: Node(kind="root", handle=ROOT_HANDLE)}
        self._placeholder_factory = placeholder_factory
        self._label_field = label_field

    @property
    def model(self) -> QStandardItemModel:
        return self._model

    @property
    def root_handle(self) -> Handle:
        return ROOT_HANDLE

    def insert_node(self, node: Node, index: Optional[int], parent: Handle) -> Handle:
        parent_item = self._item_for(parent)
        if node.handle in self._nodes:
            raise ValueError(f"Node {node.handle} is already in the document")

        stored = Node(kind=node.kind, config=copy.deepcopy(node.config), handle=node.handle)
        item = QStandardItem(self._label(stored))
        item.setEditable(False)
        item.setData(stored.handle, HANDLE_ROLE)
        item.setData(stored.kind, KIND_ROLE)

        row_count = parent_item.rowCount()
        row = row_count if index is None else max(0, min(index, row_count))
        parent_item.insertRow(row, item)

        self._items[stored.handle] = item
        self._nodes[stored.handle] = stored

        if self._placeholder_factory is not None:
            placeholder = self._placeholder_factory(node)
            if placeholder is not None:
                self.insert_node(placeholder, 0, node.handle)

        return stored.handle

    def remove_nodes(self, handles: Sequence[Handle]) -> None:
        for handle in handles:
            if handle == ROOT_HANDLE:
                raise ValueError("The document root cannot be removed")
            item = self._items.get(handle)
            if item is None:
                continue  # already gone with an ancestor
            self._forget_subtree(item)
            parent_item = item.parent() or self._model.invisibleRootItem()
            parent_item.removeRow(item.row())

    def update_node_config(self, handle: Handle, partial_config: Mapping[str, Any]) -> None:
        node = self._require(handle)
        node.config.update(copy.deepcopy(dict(partial_config)))
        item = self._items.get(handle)
        if item is not None:
            item.setText(self._label(node))

    def query_children(self, parent: Handle) -> List[Node]:
        parent_item = self._item_for(parent)
        children = []
        for row in range(parent_item.rowCount()):
            child = parent_item.child(row)
            children.append(self._snapshot(child.data(HANDLE_ROLE)))
        return children

    def get_node(self, handle: Handle) -> Optional[Node]:
        if handle not in self._nodes:
            return None
        return self._snapshot(handle)

    def get_ancestor_chain(self, handle: Handle) -> List[Handle]:
        if handle == ROOT_HANDLE:
            return []
        item = self._item_for(handle)
        chain = []
        parent = item.parent()
        while parent is not None:
            chain.append(parent.data(HANDLE_ROLE))
            parent = parent.parent()
        chain.append(ROOT_HANDLE)
        return chain

    def _item_for(self, handle: Handle) -> QStandardItem:
        if handle == ROOT_HANDLE:
            return self._model.invisibleRootItem()
        try:
            return self._items[handle]
        except KeyError:
            raise KeyError(f"Unknown node: {handle}") from None

    def _require(self, handle: Handle) -> Node:
        try:
            return self._nodes[handle]
        except KeyError:
            raise KeyError(f"Unknown node: {handle}") from None

    def _snapshot(self, handle: Handle) -> Node:
        node = self._nodes[handle]
        return Node(kind=node.kind, config=copy.deepcopy(node.config), handle=node.handle)

    def _label(self, node: Node) -> str:
        value = node.config.get(self._label_field)
        return node.kind if value is None else f"{node.kind}: {value}"

    def _forget_subtree(self, item: QStandardItem) -> None:
        for row in range(item.rowCount()):
            self._forget_subtree(item.child(row))
        handle = item.data(HANDLE_ROLE)
        self._items.pop(handle, None)
        self._nodes.pop(handle, None)
