"""
Core PyQt6 utilities.

Pure PyQt6 utility components with no reconciliation logic:
timers, worker-thread tasks and timing helpers.
"""

from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskPool

__all__ = [
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskPool",
]
