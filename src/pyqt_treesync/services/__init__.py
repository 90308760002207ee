"""
Service layer for reconciliation.

Reconciliation state, the structural tree mutator, the in-place attribute
propagator, shared-config parsing and the ordered event queue.
"""

from .reconciliation_state import ReconciliationState, SyncPhase
from .shared_config_service import (
    DEFAULT_BUTTON_TEXT,
    ITEM_ID_FIELD,
    PROPAGATED_FIELDS,
    SharedConfig,
    parse_shared_config,
    parse_limit,
    resolve_button_text,
    with_button_text,
)
from .tree_mutator import TreeMutator, MutationOutcome
from .attribute_propagator import AttributePropagator
from .event_queue import SyncEvent, SyncEventKind, SyncEventQueue

__all__ = [
    "ReconciliationState",
    "SyncPhase",
    "DEFAULT_BUTTON_TEXT",
    "ITEM_ID_FIELD",
    "PROPAGATED_FIELDS",
    "SharedConfig",
    "parse_shared_config",
    "parse_limit",
    "resolve_button_text",
    "with_button_text",
    "TreeMutator",
    "MutationOutcome",
    "AttributePropagator",
    "SyncEvent",
    "SyncEventKind",
    "SyncEventQueue",
]
