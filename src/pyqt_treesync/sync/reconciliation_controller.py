"""
Reconciliation Controller.

Keeps one region of a document tree in step with the item list fetched for
the current selection key, while shared configuration edits flow onto the
existing content nodes.

State machine (one event at a time, from an ordered queue):

    SELECTION_KEY_CHANGED  clear applied items, tear down structure,
                           start a fetch tagged with a new request token
                           -> LOADING (or IDLE for no selection)
    ITEM_LIST_RESOLVED     stale token -> discarded
                           failure / not found / empty -> tear down, ERROR
                           items -> debounce a build
    DEBOUNCE_ELAPSED       premise re-validated -> BUILDING, rebuild
    BUILD_COMPLETED        -> STEADY, or re-decide if the build was aborted
    CONFIG_CHANGED         propagate in place when structure is settled

Builds are never queued: only the latest desired (key, items) pair is kept,
and it is recomputed after every completed operation.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_treesync.core import DebounceTimer
from pyqt_treesync.io.exceptions import MutationFault
from pyqt_treesync.protocols import (
    CollectionInfo,
    DocumentStore,
    FetchResult,
    Handle,
    ItemId,
    ItemListFetcher,
    SelectionKey,
    TreeSyncConfig,
    get_item_fetcher,
    get_sync_config,
)
from pyqt_treesync.services import (
    AttributePropagator,
    MutationOutcome,
    ReconciliationState,
    SharedConfig,
    SyncEvent,
    SyncEventKind,
    SyncEventQueue,
    SyncPhase,
    TreeMutator,
    parse_limit,
    parse_shared_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingBuild:
    """The single latest desired build."""
    selection_key: SelectionKey
    items: Tuple[ItemId, ...]
    token: int


class ReconciliationController(QObject):
    """
    Orchestrates fetcher, mutator and propagator for one region.

    Usage:
        controller = ReconciliationController(store, region_handle, fetcher=fetcher)
        controller.phase_changed.connect(indicator.set_phase)
        controller.set_selection_key(5)
        controller.update_shared_config(button_text="Buy now")
    """

    phase_changed = pyqtSignal(object)       # SyncPhase
    error_changed = pyqtSignal(str)          # "" when cleared
    structure_changed = pyqtSignal(int)      # container count after teardown/build
    embedding_changed = pyqtSignal(bool)

    def __init__(
        self,
        store: DocumentStore,
        region: Handle,
        fetcher: Optional[ItemListFetcher] = None,
        shared_config: Optional[SharedConfig] = None,
        limit: Any = None,
        config: Optional[TreeSyncConfig] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._config = config or get_sync_config()
        self._store = store
        self._region = region

        self._fetcher = fetcher if fetcher is not None else get_item_fetcher()
        if self._fetcher is None:
            raise ValueError("No item fetcher given and none registered")

        self._shared_config = shared_config or SharedConfig()
        default_limit = self._config.default_limit
        self._limit = default_limit if limit is None else parse_limit(limit, default_limit)

        self._state = ReconciliationState()
        self._mutator = TreeMutator(store, region, self._state, self._config)
        self._propagator = AttributePropagator(store, region, self._state, self._config)
        self._queue = SyncEventQueue(self._handle_event)
        self._debounce = DebounceTimer(self._config.debounce_ms, self._on_debounce_timeout)

        self._handlers = {
            SyncEventKind.SELECTION_KEY_CHANGED: self._on_selection_key_changed,
            SyncEventKind.ITEM_LIST_RESOLVED: self._on_item_list_resolved,
            SyncEventKind.CONFIG_CHANGED: self._on_config_changed,
            SyncEventKind.DEBOUNCE_ELAPSED: self._on_debounce_elapsed,
            SyncEventKind.BUILD_COMPLETED: self._on_build_completed,
        }

        self._selection_key: SelectionKey = None
        self._request_token = 0
        self._built_token: Optional[int] = None
        self._pending_build: Optional[_PendingBuild] = None
        self._phase = SyncPhase.IDLE
        self._error_message: Optional[str] = None
        self._fault_operation: Optional[str] = None  # set while ERROR comes from a store fault
        self._collections: Dict[Any, CollectionInfo] = {}
        self._embedded = False
        self._disposed = False

    # ========== READ-ONLY STATE ==========

    @property
    def state(self) -> ReconciliationState:
        return self._state

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def selection_key(self) -> SelectionKey:
        return self._selection_key

    @property
    def shared_config(self) -> SharedConfig:
        return self._shared_config

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def region(self) -> Handle:
        return self._region

    @property
    def is_embedded(self) -> bool:
        return self._embedded

    @property
    def has_pending_build(self) -> bool:
        return self._debounce.is_pending

    # ========== INBOUND STIMULI ==========

    def set_selection_key(self, selection_key: SelectionKey) -> None:
        """Select a collection. Setting the current key again re-fetches it."""
        self._post(SyncEvent(SyncEventKind.SELECTION_KEY_CHANGED, selection_key=selection_key))

    def refresh(self) -> None:
        """Re-fetch and rebuild for the current key."""
        self.set_selection_key(self._selection_key)

    def set_limit(self, limit: Any) -> None:
        """Change how many items are mirrored; re-fetches when it changes."""
        parsed = parse_limit(limit, self._limit)
        if parsed == self._limit:
            return
        self._limit = parsed
        logger.info(f"Item limit changed to {parsed}")
        if self._selection_key is not None:
            self.refresh()

    def set_shared_config(self, shared_config: Union[SharedConfig, Mapping[str, Any]]) -> None:
        """Replace the shared configuration (raw mappings are parsed leniently)."""
        if not isinstance(shared_config, SharedConfig):
            shared_config = parse_shared_config(shared_config, base=self._shared_config)
        self._post(SyncEvent(SyncEventKind.CONFIG_CHANGED, config=shared_config))

    def update_shared_config(self, **changes: Any) -> None:
        """Change individual shared-config fields."""
        self.set_shared_config(dataclasses.replace(self._shared_config, **changes))

    def set_collections(self, collections: Iterable[CollectionInfo]) -> None:
        """Provide the collection catalogue used for display names."""
        self._collections = {info.key: info for info in collections}

    def flush_pending_build(self) -> bool:
        """Fire a pending debounced build now. Returns False if none was pending."""
        if not self._debounce.is_pending:
            return False
        self._debounce.force()
        return True

    def shutdown(self) -> None:
        """Stop reacting to events; late fetch results are ignored."""
        self._disposed = True
        self._debounce.cancel()
        self._pending_build = None
        self._queue.clear()
        logger.debug(f"Controller for region {self._region} shut down")

    # ========== DERIVED PRESENTATION ==========

    def display_name(self, selection_key: SelectionKey) -> str:
        """Human-readable name of a collection."""
        if selection_key == self._config.featured_key:
            return self._config.featured_label
        info = self._collections.get(selection_key)
        if info is not None and info.name:
            return info.name
        return self._config.collection_label_template.format(key=selection_key)

    def refresh_embedding(self) -> bool:
        """Re-detect whether the region sits inside an embedding container."""
        try:
            chain = self._store.get_ancestor_chain(self._region)
        except Exception:
            logger.warning(f"Could not read ancestors of region {self._region}", exc_info=True)
            chain = []

        kinds = self._config.embedding_kinds
        embedded = False
        for handle in chain:
            node = self._store.get_node(handle)
            if node is not None and node.kind in kinds:
                embedded = True
                break

        if embedded != self._embedded:
            self._embedded = embedded
            self.embedding_changed.emit(embedded)
        return embedded

    # ========== EVENT PROCESSING ==========

    def _post(self, event: SyncEvent) -> None:
        if self._disposed:
            logger.debug(f"Ignoring {event.kind.name}: controller shut down")
            return
        self._queue.post(event)

    def _handle_event(self, event: SyncEvent) -> None:
        if self._config.debug_logging:
            logger.info(f"🔄 {event.kind.name} key={event.selection_key!r} token={event.token} "
                        f"phase={self._phase.name} state={self._state.snapshot()}")
        self._handlers[event.kind](event)

    def _on_selection_key_changed(self, event: SyncEvent) -> None:
        self._debounce.cancel()
        self._pending_build = None

        key = event.selection_key
        self._selection_key = key
        self._request_token += 1
        token = self._request_token

        # Optimistic clear: nothing of the previous key may be shown as the new key's
        self._state.clear_applied()
        self._set_error(None)
        torn_down = self._teardown_if_present()

        if key is None:
            if torn_down:
                self._set_phase(SyncPhase.IDLE)
            return

        self._set_phase(SyncPhase.LOADING)
        self._start_fetch(key, token)

    def _start_fetch(self, key: SelectionKey, token: int) -> None:
        limit_hint = self._limit * max(1, self._config.limit_oversubscription)
        logger.info(f"Fetching items for {key!r} (limit {limit_hint}, request {token})")

        def on_result(result: FetchResult) -> None:
            self._post(SyncEvent(SyncEventKind.ITEM_LIST_RESOLVED, selection_key=key, token=token, result=result))

        def on_error(error: Exception) -> None:
            self._post(SyncEvent(SyncEventKind.ITEM_LIST_RESOLVED, selection_key=key, token=token, error=error))

        try:
            self._fetcher.fetch_item_list(key, limit_hint, on_result, on_error)
        except Exception as e:
            logger.warning(f"Fetcher refused request for {key!r}: {e}")
            on_error(e)

    def _on_item_list_resolved(self, event: SyncEvent) -> None:
        key = event.selection_key
        if event.token != self._request_token or key != self._selection_key:
            logger.debug(f"Discarding stale item list for {key!r} (request {event.token})")
            return

        if event.error is not None:
            logger.warning(f"Error fetching items for {key!r}: {event.error}")
            self._state.clear_applied()
            if not self._teardown_if_present():
                return  # the store fault stays the reported error
            self._set_error(f"Error loading items: {event.error}")
            self._set_phase(SyncPhase.ERROR)
            return

        result = event.result
        items = tuple(result.items[:self._limit]) if result is not None and result.found else ()
        if not items:
            logger.info(f"No items found for {key!r}")
            self._state.clear_applied()
            if not self._teardown_if_present():
                return
            if key is None:
                self._set_phase(SyncPhase.IDLE)
            else:
                self._set_error(f"No items found in {self.display_name(key)}")
                self._set_phase(SyncPhase.ERROR)
            return

        logger.debug(f"Received {len(items)} items for {key!r}: {list(items)}")
        self._state.applied_items = items
        self._reconcile()

    def _reconcile(self) -> None:
        """Decide whether the latest desired state still needs a build."""
        key = self._selection_key
        items = self._state.applied_items
        if key is None or not items:
            return

        if self._state.mutation_in_progress:
            logger.debug("Build request dropped: mutation in progress")
            return

        if (
            self._state.structure_present
            and self._state.structural_key == key
            and self._built_token == self._request_token
        ):
            self._set_phase(SyncPhase.STEADY)
            return

        self._pending_build = _PendingBuild(key, items, self._request_token)
        self._debounce.trigger()

    def _on_debounce_timeout(self) -> None:
        self._post(SyncEvent(SyncEventKind.DEBOUNCE_ELAPSED))

    def _on_debounce_elapsed(self, event: SyncEvent) -> None:
        pending = self._pending_build
        self._pending_build = None
        if pending is None:
            return

        if not self._is_current(pending):
            logger.info(f"Skipping build for {pending.selection_key!r}: data changed during debounce")
            self._reconcile()
            return

        if self._state.mutation_in_progress:
            logger.debug("Build dropped: mutation in progress")
            return

        self._set_phase(SyncPhase.BUILDING)
        outcome = self._mutator.rebuild(
            pending.selection_key,
            pending.items,
            self._shared_config,
            is_still_desired=lambda: self._is_current(pending),
        )
        self._post(SyncEvent(
            SyncEventKind.BUILD_COMPLETED,
            selection_key=pending.selection_key,
            token=pending.token,
            outcome=outcome,
            item_count=len(pending.items),
        ))

    def _on_build_completed(self, event: SyncEvent) -> None:
        if event.token != self._request_token:
            logger.debug(f"Ignoring completion of superseded build for {event.selection_key!r}")
            return

        if event.outcome is MutationOutcome.APPLIED:
            self._built_token = event.token
            self._set_error(None)
            self._set_phase(SyncPhase.STEADY)
            self.structure_changed.emit(event.item_count)
        elif event.outcome is MutationOutcome.FAULTED:
            self._report_fault(self._mutator.last_fault)
        else:
            self._set_phase(SyncPhase.LOADING)
            self._reconcile()

    def _on_config_changed(self, event: SyncEvent) -> None:
        self._shared_config = event.config
        if not self._may_propagate():
            return  # next build writes the new config

        outcome = self._propagator.propagate(event.config)
        if outcome is MutationOutcome.FAULTED:
            self._report_fault(self._propagator.last_fault)
        elif outcome is MutationOutcome.APPLIED and self._phase is SyncPhase.ERROR:
            self._set_error(None)
            self._set_phase(SyncPhase.STEADY)

    # ========== HELPERS ==========

    def _is_current(self, pending: _PendingBuild) -> bool:
        return (
            pending.token == self._request_token
            and pending.selection_key == self._selection_key
            and pending.items == self._state.applied_items
        )

    def _may_propagate(self) -> bool:
        state = self._state
        if not state.structure_present or state.mutation_in_progress:
            return False
        if state.structural_key != self._selection_key:
            return False  # structure left over from a key whose teardown faulted
        if self._phase is SyncPhase.ERROR:
            # Only a failed propagation can be recovered by propagating again
            return self._fault_operation == "propagate"
        # BUILDING here means the build finished and its completion is still queued
        return self._phase in (SyncPhase.STEADY, SyncPhase.BUILDING)

    def _teardown_if_present(self) -> bool:
        """Empty the region if it may hold containers. False if the store faulted."""
        if not self._state.needs_teardown:
            return True
        outcome = self._mutator.teardown()
        if outcome is MutationOutcome.APPLIED:
            self.structure_changed.emit(0)
        elif outcome is MutationOutcome.FAULTED:
            self._report_fault(self._mutator.last_fault)
            return False
        return True

    def _report_fault(self, fault: Optional[MutationFault]) -> None:
        self._set_error(f"Failed to update document: {fault}")
        self._fault_operation = fault.operation if fault is not None else None
        self._set_phase(SyncPhase.ERROR)

    def _set_phase(self, phase: SyncPhase) -> None:
        if phase is self._phase:
            return
        logger.debug(f"Phase {self._phase.name} -> {phase.name}")
        self._phase = phase
        self.phase_changed.emit(phase)

    def _set_error(self, message: Optional[str]) -> None:
        self._fault_operation = None
        if message == self._error_message:
            return
        self._error_message = message
        self.error_changed.emit(message or "")
