"""
Ordered, non-reentrant event queue.

Every stimulus of a reconciliation region becomes a SyncEvent. Events are
handled one at a time, in arrival order; an event posted while another is
being handled waits until that handler returns.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Deque, Optional

from pyqt_treesync.protocols import FetchResult, SelectionKey

if TYPE_CHECKING:
    from pyqt_treesync.services.shared_config_service import SharedConfig
    from pyqt_treesync.services.tree_mutator import MutationOutcome

logger = logging.getLogger(__name__)


class SyncEventKind(Enum):
    SELECTION_KEY_CHANGED = "selection_key_changed"
    ITEM_LIST_RESOLVED = "item_list_resolved"
    CONFIG_CHANGED = "config_changed"
    DEBOUNCE_ELAPSED = "debounce_elapsed"
    BUILD_COMPLETED = "build_completed"


@dataclass(frozen=True)
class SyncEvent:
    """Immutable event consumed by the reconciliation state machine."""
    kind: SyncEventKind
    selection_key: SelectionKey = None
    token: int = 0                               # Request the event belongs to
    result: Optional[FetchResult] = None         # ITEM_LIST_RESOLVED (success)
    error: Optional[Exception] = None            # ITEM_LIST_RESOLVED (transport failure)
    config: Optional["SharedConfig"] = None      # CONFIG_CHANGED
    outcome: Optional["MutationOutcome"] = None  # BUILD_COMPLETED
    item_count: int = 0                          # BUILD_COMPLETED


class SyncEventQueue:
    """
    FIFO of SyncEvents drained to completion by the first poster.

    Exceptions escaping the handler are logged and do not stop the drain,
    so no reconciliation error reaches the host event loop.
    """

    def __init__(self, handler: Callable[[SyncEvent], None]):
        self._handler = handler
        self._pending: Deque[SyncEvent] = deque()
        self._draining = False

    @property
    def is_draining(self) -> bool:
        return self._draining

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def post(self, event: SyncEvent) -> None:
        self._pending.append(event)
        if self._draining:
            return  # handled after the current event

        self._draining = True
        try:
            while self._pending:
                current = self._pending.popleft()
                try:
                    self._handler(current)
                except Exception:
                    logger.exception(f"Unhandled error while processing {current.kind.name}")
        finally:
            self._draining = False

    def clear(self) -> None:
        self._pending.clear()
