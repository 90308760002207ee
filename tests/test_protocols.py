"""Tests for protocol types and configuration hooks."""

import pytest


def test_global_sync_config_roundtrip():
    from pyqt_treesync.protocols import TreeSyncConfig, get_sync_config, set_sync_config

    assert get_sync_config() == TreeSyncConfig()
    custom = TreeSyncConfig(debounce_ms=250, default_limit=6)
    set_sync_config(custom)
    try:
        assert get_sync_config() is custom
    finally:
        set_sync_config(None)
    assert get_sync_config().debounce_ms == 100


def test_create_node_assigns_unique_handles():
    from pyqt_treesync.protocols import create_node

    a = create_node("container")
    b = create_node("container", {"item_id": 1})
    assert a.handle != b.handle
    assert a.config == {}
    assert b.config == {"item_id": 1}


def test_document_store_is_abstract():
    from pyqt_treesync.protocols import DocumentStore

    with pytest.raises(TypeError):
        DocumentStore()


def test_fetch_result_not_found():
    from pyqt_treesync.protocols import FetchResult

    result = FetchResult.not_found()
    assert not result.found
    assert result.items == ()


def test_package_exports():
    import pyqt_treesync

    assert pyqt_treesync.__version__ == "0.1.0"
    assert pyqt_treesync.ReconciliationController.__name__ == "ReconciliationController"
