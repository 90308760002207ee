"""
Attribute Propagator: rewrites content-node configuration in place.

Never touches structure. All writes for one propagation are collected
first and then committed together; if the store throws mid-commit, the
nodes already written are restored so no region is left half-updated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pyqt_treesync.core.performance_monitor import timed
from pyqt_treesync.io.exceptions import MutationFault
from pyqt_treesync.protocols import DocumentStore, Handle, TreeSyncConfig
from pyqt_treesync.services.reconciliation_state import ReconciliationState
from pyqt_treesync.services.shared_config_service import SharedConfig
from pyqt_treesync.services.tree_mutator import MutationOutcome

logger = logging.getLogger(__name__)


@dataclass
class _PendingWrite:
    handle: Handle
    values: Dict[str, Any]
    previous: Dict[str, Any]


class AttributePropagator:
    """Pushes SharedConfig onto every content node of a region."""

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

    @timed("Propagate shared config")
    def propagate(self, shared_config: SharedConfig) -> MutationOutcome:
        """
        Overwrite the propagated fields of every content node.

        Only allowed while structure is present and no structural mutation
        holds the flag; otherwise the call is dropped.

        Returns:
            APPLIED (including "nothing differed"), DROPPED, or FAULTED
        """
        if not self._state.structure_present or self._state.mutation_in_progress:
            logger.debug("Propagation dropped: no settled structure")
            return MutationOutcome.DROPPED

        values = shared_config.propagated_values()

        try:
            writes = self._collect_writes(values)
        except Exception as e:
            return self._fault(e)

        if not writes:
            return MutationOutcome.APPLIED

        committed: List[_PendingWrite] = []
        try:
            with self._store.transaction():
                for write in writes:
                    self._store.update_node_config(write.handle, write.values)
                    committed.append(write)
        except Exception as e:
            self._rollback(committed)
            return self._fault(e)

        logger.debug(f"Propagated {sorted(values)} to {len(writes)} content node(s)")
        return MutationOutcome.APPLIED

    def _collect_writes(self, values: Dict[str, Any]) -> List[_PendingWrite]:
        writes = []
        for container in self._store.query_children(self._region):
            for child in self._store.query_children(container.handle):
                if child.kind != self._config.content_kind:
                    continue
                changed = {k: v for k, v in values.items() if child.config.get(k) != v}
                if changed:
                    previous = {k: child.config.get(k) for k in changed}
                    writes.append(_PendingWrite(child.handle, changed, previous))
        return writes

    def _rollback(self, committed: List[_PendingWrite]) -> None:
        for write in reversed(committed):
            try:
                self._store.update_node_config(write.handle, write.previous)
            except Exception:
                logger.exception(f"Could not restore configuration of node {write.handle}")

    def _fault(self, error: Exception) -> MutationOutcome:
        self.last_fault = MutationFault("propagate", error)
        logger.exception("Document store failed during propagation")
        return MutationOutcome.FAULTED
