"""
Reconciliation state shared by the controller, mutator and propagator.

Invariants (whenever mutation_in_progress is False):
- structure_present is True iff the region holds exactly one container per
  applied item, in applied order.
- structural_key is None iff structure_present is False.
- if both structure_present and has_leftovers are False, the region holds
  no containers.
- mutation_in_progress is True for the whole of a teardown/build and never
  otherwise.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Tuple

from pyqt_treesync.protocols import ItemId, SelectionKey

logger = logging.getLogger(__name__)


class SyncPhase(Enum):
    """Controller phases."""
    IDLE = "idle"            # No selection key
    LOADING = "loading"      # Fetch outstanding (or build debouncing)
    BUILDING = "building"    # Structural mutation in flight
    STEADY = "steady"        # Structure matches data
    ERROR = "error"          # Last fetch failed, found nothing, or a write faulted


@dataclass
class ReconciliationState:
    """Mutable fields every reconciliation component reads and updates."""
    structural_key: SelectionKey = None
    applied_items: Tuple[ItemId, ...] = ()
    mutation_in_progress: bool = False
    structure_present: bool = False
    has_leftovers: bool = False  # a faulted build may have left containers behind

    @property
    def needs_teardown(self) -> bool:
        return self.structure_present or self.has_leftovers

    def clear_applied(self) -> None:
        self.applied_items = ()

    def mark_structure_absent(self) -> None:
        self.structure_present = False
        self.structural_key = None

    def mark_region_empty(self) -> None:
        self.mark_structure_absent()
        self.has_leftovers = False

    def mark_structure_built(self, selection_key: SelectionKey) -> None:
        self.structure_present = True
        self.structural_key = selection_key
        self.has_leftovers = False

    @contextmanager
    def mutation(self):
        """
        Hold the mutation flag for one teardown/build bracket.

        The flag is released even if the body raises. Brackets never nest:
        entering while the flag is held is a programming error.
        """
        if self.mutation_in_progress:
            raise RuntimeError("A structural mutation is already in progress")
        self.mutation_in_progress = True
        try:
            yield
        finally:
            self.mutation_in_progress = False

    def snapshot(self) -> Dict[str, Any]:
        """Plain dict of the current fields, for logging."""
        return asdict(self)
