"""Tests for core utilities."""

import logging

import pytest
from PyQt6.QtTest import QTest


def test_debounce_timer_fires_once_after_quiet_period(qapp):
    """Retriggering restarts the timer; the handler runs once."""
    from pyqt_treesync.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=20, handler=lambda: called.append(1))

    timer.trigger()
    timer.trigger()
    assert timer.is_pending
    assert called == []

    QTest.qWait(150)
    assert called == [1]
    assert not timer.is_pending


def test_debounce_timer_cancel_prevents_firing(qapp):
    from pyqt_treesync.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=10, handler=lambda: called.append(1))

    timer.trigger()
    assert timer.cancel() is True
    assert timer.cancel() is False

    QTest.qWait(80)
    assert called == []


def test_debounce_timer_force_fires_immediately(qapp):
    from pyqt_treesync.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=10_000, handler=lambda: called.append(1))

    timer.trigger()
    timer.force()
    assert called == [1]
    assert not timer.is_pending

    QTest.qWait(20)
    assert called == [1]


def test_background_task_pool_delivers_result(qapp):
    """Results arrive on the main thread through signals."""
    from pyqt_treesync.core import BackgroundTaskPool

    results, errors = [], []
    pool = BackgroundTaskPool()
    pool.run(target=lambda a, b: a + b, args=(2, 3), on_success=results.append, on_error=errors.append)

    for _ in range(200):
        if results:
            break
        QTest.qWait(10)

    assert results == [5]
    assert errors == []
    pool.cleanup()
    assert pool.running_count == 0


def test_background_task_pool_delivers_error(qapp):
    from pyqt_treesync.core import BackgroundTaskPool

    def boom():
        raise ValueError("bad payload")

    errors = []
    pool = BackgroundTaskPool()
    pool.run(target=boom, on_error=errors.append)

    for _ in range(200):
        if errors:
            break
        QTest.qWait(10)

    assert len(errors) == 1
    assert isinstance(errors[0], ValueError)
    pool.cleanup()


def test_timer_logs_to_performance_logger(caplog):
    from pyqt_treesync.core.performance_monitor import timer

    with caplog.at_level(logging.DEBUG, logger="pyqt_treesync.performance"):
        with timer("Build", log_args=True, items=3):
            pass

    assert any("Build:" in record.message and "items=3" in record.message for record in caplog.records)


def test_timed_decorator_returns_value():
    from pyqt_treesync.core.performance_monitor import timed

    @timed("double")
    def double(x):
        return x * 2

    assert double(4) == 8
