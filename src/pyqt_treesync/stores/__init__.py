"""
Concrete document stores.

In-memory tree for headless use and tests, and a QStandardItemModel-backed
tree for display in Qt views.
"""

from .memory_store import InMemoryDocumentStore, PlaceholderFactory
from .item_model_store import ItemModelDocumentStore, HANDLE_ROLE, KIND_ROLE

__all__ = [
    "InMemoryDocumentStore",
    "PlaceholderFactory",
    "ItemModelDocumentStore",
    "HANDLE_ROLE",
    "KIND_ROLE",
]
