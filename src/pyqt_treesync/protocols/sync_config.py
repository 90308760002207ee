"""Base configuration for tree synchronization.

Provides hooks for applications to customize timing, endpoints and node kinds.
"""

from typing import FrozenSet, Optional
from dataclasses import dataclass, field


@dataclass
class TreeSyncConfig:
    """Configuration for reconciliation behavior.

    Applications can subclass this to provide custom configuration.

    Attributes:
        debounce_ms: Quiet period between a resolved item list and the build
        default_limit: Number of items mirrored when the caller gives no limit
        limit_oversubscription: Factor applied to the limit when requesting ids,
            so client-side trimming still has enough items
        fetch_timeout_s: HTTP timeout for the item fetcher (None waits forever)
        base_url: Base URL of the listing service
        items_endpoint: Path template for the item list of one selection key
        collections_endpoint: Path of the collection catalogue
        ids_field: Response field holding the ordered item ids
        container_kind: Node kind used for per-item structural wrappers
        content_kind: Node kind carrying item id and shared configuration
        embedding_kinds: Ancestor kinds that mark a region as embedded
        featured_key: Selection key of the default/featured collection
        featured_label: Display name of the featured collection
        collection_label_template: Display name for collections with no known name
        debug_logging: Trace every processed event at INFO level
    """

    debounce_ms: int = 100
    default_limit: int = 4
    limit_oversubscription: int = 2
    fetch_timeout_s: Optional[float] = None
    base_url: str = ""
    items_endpoint: str = "/wp-json/peaches/v1/category-products/{key}"
    collections_endpoint: str = "/wp-json/peaches/v1/categories"
    ids_field: str = "product_ids"
    container_kind: str = "container"
    content_kind: str = "content"
    embedding_kinds: FrozenSet[str] = field(default_factory=lambda: frozenset({"carousel"}))
    featured_key: int = 0
    featured_label: str = "Featured Products"
    collection_label_template: str = "Collection {key}"
    performance_logger_name: str = "pyqt_treesync.performance"
    debug_logging: bool = False


# Global config instance (set by application)
_sync_config: Optional[TreeSyncConfig] = None


def set_sync_config(config: Optional[TreeSyncConfig]) -> None:
    """Set the global synchronization configuration.

    Args:
        config: TreeSyncConfig instance, or None to restore defaults
    """
    global _sync_config
    _sync_config = config


def get_sync_config() -> TreeSyncConfig:
    """Get the current synchronization configuration.

    Returns:
        Current TreeSyncConfig or default if not set
    """
    if _sync_config is None:
        return TreeSyncConfig()
    return _sync_config
