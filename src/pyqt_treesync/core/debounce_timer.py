"""Cancellable trailing debounce timer."""

from typing import Callable, Optional
from PyQt6.QtCore import QTimer


class DebounceTimer:
    """
    Trailing debounce timer with explicit cancellation.

    Restarts timer on each call. Handler fires only after delay_ms of inactivity,
    and never fires once cancel() has been called for the pending trigger.

    Usage:
        self._debounce = DebounceTimer(delay_ms=100, handler=self._do_build)

        def on_items_resolved(self):
            self._debounce.trigger()  # Restarts timer

        def on_selection_changed(self):
            self._debounce.cancel()  # Pending premise no longer holds
    """

    def __init__(self, delay_ms: int, handler: Callable[[], None]):
        self._delay_ms = delay_ms
        self._handler = handler
        self._timer: Optional[QTimer] = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        """True while a trigger is waiting to fire."""
        return self._timer is not None

    def trigger(self):
        """Trigger debounce; restarts the timer."""
        self.cancel()

        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(timer))
        self._timer = timer
        timer.start(self._delay_ms)

    def cancel(self) -> bool:
        """Cancel pending trigger. Returns True if one was pending."""
        if self._timer is None:
            return False
        self._timer.stop()
        self._timer = None
        return True

    def force(self):
        """Cancel timer and fire handler immediately."""
        self.cancel()
        self._handler()

    def _fire(self, timer: QTimer):
        # A stopped timer may still deliver a queued timeout; ignore it.
        if self._timer is not timer:
            return
        self._timer = None
        self._handler()
