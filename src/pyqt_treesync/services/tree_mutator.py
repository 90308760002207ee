"""
Tree Mutator: the only writer of region structure.

Every structural change is a whole-list batch made under the mutation flag:
either a teardown of all containers, or a rebuild (teardown followed by
one container + content node per item, in list order).
"""

import logging
from enum import Enum
from typing import Callable, Optional, Sequence

from pyqt_treesync.core.performance_monitor import timer
from pyqt_treesync.io.exceptions import MutationFault
from pyqt_treesync.protocols import (
    DocumentStore,
    Handle,
    ItemId,
    SelectionKey,
    TreeSyncConfig,
    create_node,
)
from pyqt_treesync.services.reconciliation_state import ReconciliationState
from pyqt_treesync.services.shared_config_service import ITEM_ID_FIELD, SharedConfig

logger = logging.getLogger(__name__)


class MutationOutcome(Enum):
    """Result of one mutator or propagator call."""
    APPLIED = "applied"    # Writes completed
    ABORTED = "aborted"    # Premise no longer held; nothing written
    DROPPED = "dropped"    # Flag already held (or nothing to write to); not queued
    FAULTED = "faulted"    # Store threw; flag released, see last_fault


class TreeMutator:
    """
    Inserts and removes container/content nodes under one region.

    Usage:
        mutator = TreeMutator(store, region_handle, state, config)
        mutator.rebuild(7, (70, 71), shared_config, is_still_desired=lambda: True)
        mutator.teardown()
    """

    def __init__(
        self,
        store: DocumentStore,
        region: Handle,
        state: ReconciliationState,
        config: TreeSyncConfig,
    ):
        self._store = store
        self._region = region
        self._state = state
        self._config = config
        self.last_fault: Optional[MutationFault] = None

    def teardown(self) -> MutationOutcome:
        """Remove every container (and its content) from the region."""
        if self._state.mutation_in_progress:
            logger.debug("Teardown dropped: mutation already in progress")
            return MutationOutcome.DROPPED

        with self._state.mutation(), timer("Teardown"):
            try:
                removed = self._remove_all()
            except Exception as e:
                return self._fault("teardown", e)

            self._state.mark_region_empty()
            logger.debug(f"Teardown removed {removed} container(s)")
            return MutationOutcome.APPLIED

    def rebuild(
        self,
        selection_key: SelectionKey,
        items: Sequence[ItemId],
        shared_config: SharedConfig,
        is_still_desired: Callable[[], bool],
    ) -> MutationOutcome:
        """
        Replace the region's structure with one container per item.

        Args:
            selection_key: Key the items were resolved for
            items: Item ids, in the order containers must appear
            shared_config: Configuration written onto every content node
            is_still_desired: Re-checked after the flag is acquired; if it
                returns False nothing is written

        Returns:
            MutationOutcome of the attempt
        """
        if self._state.mutation_in_progress:
            logger.debug(f"Build for {selection_key!r} dropped: mutation already in progress")
            return MutationOutcome.DROPPED

        with self._state.mutation():
            if not is_still_desired():
                logger.info(f"Build for {selection_key!r} aborted: selection or items changed")
                return MutationOutcome.ABORTED

            values = shared_config.propagated_values()
            with timer("Build", log_args=True, key=selection_key, items=len(items)):
                try:
                    # Clears leftovers of a faulted build as well as live structure
                    self._remove_all()
                    self._state.mark_region_empty()
                    for index, item_id in enumerate(items):
                        self._insert_item(index, item_id, values)
                except Exception as e:
                    self._state.has_leftovers = True
                    return self._fault("build", e)

            self._state.mark_structure_built(selection_key)
            logger.info(f"Built {len(items)} container(s) for selection {selection_key!r}")
            return MutationOutcome.APPLIED

    def container_count(self) -> int:
        return len(self._store.query_children(self._region))

    def _insert_item(self, index: int, item_id: ItemId, values: dict) -> None:
        container = create_node(self._config.container_kind)
        container_handle = self._store.insert_node(container, index, self._region)

        # Discard whatever default child the store auto-populated
        placeholders = self._store.query_children(container_handle)
        if placeholders:
            self._store.remove_nodes([child.handle for child in placeholders])

        content = create_node(self._config.content_kind, {ITEM_ID_FIELD: item_id, **values})
        self._store.insert_node(content, 0, container_handle)

    def _remove_all(self) -> int:
        handles = [node.handle for node in self._store.query_children(self._region)]
        if handles:
            self._store.remove_nodes(handles)
        return len(handles)

    def _fault(self, operation: str, error: Exception) -> MutationOutcome:
        self.last_fault = MutationFault(operation, error)
        logger.exception(f"Document store failed during {operation}")
        return MutationOutcome.FAULTED
