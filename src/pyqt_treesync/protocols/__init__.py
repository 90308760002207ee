"""
Protocol definitions and configuration hooks.

ABC-based contracts for the host document store, the item list fetcher
protocol, and the global TreeSyncConfig.
"""

from .sync_config import TreeSyncConfig, set_sync_config, get_sync_config
from .document_store import DocumentStore, Handle, Node, create_node
from .item_fetcher import (
    CollectionInfo,
    FetchResult,
    ItemId,
    ItemListFetcher,
    SelectionKey,
    register_item_fetcher,
    get_item_fetcher,
)

__all__ = [
    "TreeSyncConfig",
    "set_sync_config",
    "get_sync_config",
    "DocumentStore",
    "Handle",
    "Node",
    "create_node",
    "CollectionInfo",
    "FetchResult",
    "ItemId",
    "ItemListFetcher",
    "SelectionKey",
    "register_item_fetcher",
    "get_item_fetcher",
]
