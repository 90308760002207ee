"""
Reconciliation orchestration.

The ReconciliationController state machine tying fetcher, tree mutator and
attribute propagator together for one synchronized region.
"""

from .reconciliation_controller import ReconciliationController

__all__ = [
    "ReconciliationController",
]
