"""
Widgets for synchronized regions.

Presentation helpers that observe a ReconciliationController.
"""

from .sync_status_indicator import SyncStatusIndicator, get_status_color

__all__ = [
    "SyncStatusIndicator",
    "get_status_color",
]
