"""Background tasks whose results are delivered back on the Qt main thread."""

from typing import Callable, Any, Optional, Tuple, Set
from PyQt6.QtCore import QThread, pyqtSignal
import logging

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during shutdown


class BackgroundTask(QThread):
    """
    Run a blocking callable on a worker thread.

    Usage:
        task = BackgroundTask(target=client.request_item_list, args=(key, limit))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

    Signals are connected from the main thread, so handlers run there.
    cancel() only silences the signals: the callable itself still runs to
    completion, which is all a blocking HTTP request allows.
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)  # Full exception object

    def cancel(self):
        """Cancel task: signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskPool:
    """
    Keeps overlapping background tasks alive until each one finishes.

    Unlike a "latest task wins" manager, starting a task never cancels the
    previous one: superseded requests still complete their round trip and
    the caller decides whether the result is still relevant.

    Usage:
        self._tasks = BackgroundTaskPool()

        def fetch(self, key):
            self._tasks.run(
                target=self.client.request_item_list,
                args=(key, 8),
                on_success=self._on_items,
                on_error=self._on_error,
            )

        def shutdown(self):
            self._tasks.cleanup()
    """

    def __init__(self):
        self._running: Set[BackgroundTask] = set()

    @property
    def running_count(self) -> int:
        return len(self._running)

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> BackgroundTask:
        """
        Start a background task.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result (main thread)
            on_error: Callback for error (receives Exception, not str)

        Returns:
            The started BackgroundTask
        """
        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)
        task.finished.connect(lambda: self._running.discard(task))

        self._running.add(task)
        task.start()
        logger.debug(f"Started background task ({len(self._running)} running)")
        return task

    def cleanup(self):
        """Silence and wait for every running task. Call on shutdown."""
        for task in list(self._running):
            task.cancel()
            if task.isRunning():
                task.wait(CLEANUP_WAIT_MS)
        self._running.clear()
