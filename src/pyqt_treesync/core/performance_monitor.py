"""Performance monitoring utilities for pyqt-treesync.

Provides a decorator and a context manager for timing tree mutations and
logging how long they took.
"""

import time
import functools
import logging
from contextlib import contextmanager
from typing import Optional, Callable

from pyqt_treesync.protocols import get_sync_config


def get_perf_logger() -> logging.Logger:
    """Return the performance logger named by the active TreeSyncConfig."""
    return logging.getLogger(get_sync_config().performance_logger_name)


@contextmanager
def timer(operation_name: str, threshold_ms: float = 0.0, log_args: bool = False, **kwargs):
    """Context manager for timing operations.

    Args:
        operation_name: Name of the operation being timed
        threshold_ms: Only log if operation takes longer than this (in milliseconds)
        log_args: Whether to log kwargs in the message
        **kwargs: Additional context to include in log message

    Example:
        with timer("Building containers", threshold_ms=5.0, log_args=True, items=len(items)):
            mutator.rebuild(...)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000

        if elapsed_ms >= threshold_ms:
            msg = f"{operation_name}: {elapsed_ms:.2f}ms"
            if log_args and kwargs:
                args_str = ", ".join(f"{k}={v}" for k, v in kwargs.items())
                msg += f" ({args_str})"

            get_perf_logger().debug(msg)


def timed(operation_name: Optional[str] = None, threshold_ms: float = 0.0):
    """Decorator for timing function calls.

    Args:
        operation_name: Name for the operation (defaults to function name)
        threshold_ms: Only log if operation takes longer than this (in milliseconds)

    Example:
        @timed("Propagate shared config", threshold_ms=2.0)
        def propagate(self, config):
            ...
    """
    def decorator(func: Callable) -> Callable:
        name = operation_name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with timer(name, threshold_ms=threshold_ms):
                return func(*args, **kwargs)

        return wrapper

    return decorator
