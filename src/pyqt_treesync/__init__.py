"""
pyqt-treesync: keep a document tree in step with a remotely fetched item list.

A reconciliation engine for PyQt6 editors. A region of a document tree
mirrors an ordered list of item ids fetched for a selection key (one
container node per item, one configured content node per container),
while shared display configuration edited by the operator is pushed to
every content node without rebuilding the tree.

Architecture:
- Tier 1 (Core): Pure PyQt6 utilities (debounce timer, background tasks, timing)
- Tier 2 (Protocols): Document store ABC, fetcher protocol, global config hook
- Tier 3 (Services): Reconciliation state, tree mutator, attribute propagator,
  shared-config parsing, ordered event queue
- Tier 4 (Sync): ReconciliationController state machine

Key Features:
- Explicit finite-state machine driven by an ordered event queue
- Stale fetch results discarded by request token (no transport cancellation needed)
- Cancel-on-supersede debounce before every structural build
- Single mutation flag serializing teardown/build
- All-or-nothing configuration propagation
"""

__version__ = "0.1.0"

from .protocols import (
    DocumentStore,
    FetchResult,
    Node,
    TreeSyncConfig,
    create_node,
    get_sync_config,
    set_sync_config,
)
from .services import SharedConfig, SyncPhase, parse_shared_config
from .sync import ReconciliationController

__all__ = [
    "__version__",
    "DocumentStore",
    "FetchResult",
    "Node",
    "TreeSyncConfig",
    "create_node",
    "get_sync_config",
    "set_sync_config",
    "SharedConfig",
    "SyncPhase",
    "parse_shared_config",
    "ReconciliationController",
]
