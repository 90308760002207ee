"""pytest configuration and fixtures for pyqt-treesync tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from dataclasses import dataclass
from typing import Any, Callable, List

import pytest
from PyQt6.QtWidgets import QApplication

from pyqt_treesync.protocols import FetchResult, TreeSyncConfig, create_node


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


@dataclass
class PendingFetch:
    selection_key: Any
    limit_hint: int
    on_result: Callable[[FetchResult], None]
    on_error: Callable[[Exception], None]


class ScriptedFetcher:
    """Records fetch requests; tests resolve them explicitly, in any order."""

    def __init__(self):
        self.requests: List[PendingFetch] = []

    def fetch_item_list(self, selection_key, limit_hint, on_result, on_error):
        self.requests.append(PendingFetch(selection_key, limit_hint, on_result, on_error))

    def latest(self, selection_key=None) -> PendingFetch:
        for request in reversed(self.requests):
            if selection_key is None or request.selection_key == selection_key:
                return request
        raise AssertionError(f"No request for {selection_key!r}")

    def resolve(self, selection_key=None, items=(), found=True, request=None):
        request = request or self.latest(selection_key)
        request.on_result(FetchResult(found=found, items=tuple(items), count=len(items)))

    def fail(self, selection_key=None, error=None, request=None):
        request = request or self.latest(selection_key)
        request.on_error(error or RuntimeError("connection refused"))


@pytest.fixture
def fetcher():
    return ScriptedFetcher()


@pytest.fixture
def sync_config():
    return TreeSyncConfig(debounce_ms=10, default_limit=4)


@pytest.fixture
def store():
    from pyqt_treesync.stores import InMemoryDocumentStore
    return InMemoryDocumentStore()


@pytest.fixture
def region(store):
    return store.insert_node(create_node("region"), None, store.root_handle)


@pytest.fixture
def read_items(store, region):
    """Item ids of the region's content nodes, in container order."""
    def _read():
        items = []
        for container in store.query_children(region):
            contents = store.query_children(container.handle)
            assert len(contents) == 1, "each container owns exactly one content node"
            items.append(contents[0].config["item_id"])
        return items
    return _read


@pytest.fixture
def make_controller(qapp, store, region, fetcher, sync_config):
    from pyqt_treesync.sync import ReconciliationController

    created = []

    def _make(**kwargs):
        kwargs.setdefault("fetcher", fetcher)
        kwargs.setdefault("config", sync_config)
        controller = ReconciliationController(store, region, **kwargs)
        created.append(controller)
        return controller

    yield _make
    for controller in created:
        controller.shutdown()
