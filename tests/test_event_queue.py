"""Tests for SyncEventQueue."""

import logging

from pyqt_treesync.services import SyncEvent, SyncEventKind, SyncEventQueue


def test_events_posted_from_handler_run_after_it():
    order = []
    queue = None

    def handler(event):
        order.append(("start", event.selection_key))
        if event.selection_key == 1:
            queue.post(SyncEvent(SyncEventKind.SELECTION_KEY_CHANGED, selection_key=2))
            assert queue.is_draining
            assert queue.pending_count == 1
        order.append(("end", event.selection_key))

    queue = SyncEventQueue(handler)
    queue.post(SyncEvent(SyncEventKind.SELECTION_KEY_CHANGED, selection_key=1))

    assert order == [("start", 1), ("end", 1), ("start", 2), ("end", 2)]
    assert not queue.is_draining
    assert queue.pending_count == 0


def test_handler_error_is_logged_and_drain_continues(caplog):
    handled = []
    queue = None

    def handler(event):
        if event.kind is SyncEventKind.CONFIG_CHANGED:
            queue.post(SyncEvent(SyncEventKind.BUILD_COMPLETED))
            raise RuntimeError("boom")
        handled.append(event.kind)

    queue = SyncEventQueue(handler)
    with caplog.at_level(logging.ERROR):
        queue.post(SyncEvent(SyncEventKind.CONFIG_CHANGED))

    assert handled == [SyncEventKind.BUILD_COMPLETED]
    assert any("CONFIG_CHANGED" in r.message for r in caplog.records)


def test_clear_drops_pending_events():
    handled = []
    queue = None

    def handler(event):
        handled.append(event.selection_key)
        if event.selection_key == 1:
            queue.post(SyncEvent(SyncEventKind.SELECTION_KEY_CHANGED, selection_key=2))
            queue.clear()

    queue = SyncEventQueue(handler)
    queue.post(SyncEvent(SyncEventKind.SELECTION_KEY_CHANGED, selection_key=1))
    assert handled == [1]
