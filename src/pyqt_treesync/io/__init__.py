"""
Network IO and error taxonomy.

HTTP implementation of the item list fetcher and the exceptions raised
across pyqt-treesync.
"""

from .exceptions import TreeSyncError, TransportError, MutationFault, ConfigParseFault
from .http_item_fetcher import HttpItemListFetcher

__all__ = [
    "TreeSyncError",
    "TransportError",
    "MutationFault",
    "ConfigParseFault",
    "HttpItemListFetcher",
]
