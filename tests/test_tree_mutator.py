"""Tests for TreeMutator."""

import pytest

from pyqt_treesync.io import MutationFault
from pyqt_treesync.protocols import TreeSyncConfig, create_node
from pyqt_treesync.services import MutationOutcome, ReconciliationState, SharedConfig, TreeMutator
from pyqt_treesync.stores import InMemoryDocumentStore


@pytest.fixture
def state():
    return ReconciliationState()


@pytest.fixture
def mutator(store, region, state):
    return TreeMutator(store, region, state, TreeSyncConfig())


def _always():
    return True


def test_rebuild_inserts_items_in_order(mutator, state, read_items, store, region):
    outcome = mutator.rebuild(3, (30, 10, 20), SharedConfig(), _always)

    assert outcome is MutationOutcome.APPLIED
    assert read_items() == [30, 10, 20]
    assert [c.kind for c in store.query_children(region)] == ["container"] * 3
    assert state.structure_present
    assert state.structural_key == 3
    assert not state.mutation_in_progress
    assert mutator.container_count() == 3


def test_rebuild_replaces_previous_structure(mutator, read_items):
    mutator.rebuild(1, (1, 2, 3), SharedConfig(), _always)
    mutator.rebuild(2, (4,), SharedConfig(), _always)
    assert read_items() == [4]


def test_rebuild_discards_placeholder_children(state):
    store = InMemoryDocumentStore(
        placeholder_factory=lambda node: create_node("paragraph") if node.kind == "container" else None
    )
    region = store.insert_node(create_node("region"), None, store.root_handle)
    mutator = TreeMutator(store, region, state, TreeSyncConfig())

    mutator.rebuild(1, (5, 6), SharedConfig(), _always)

    for container in store.query_children(region):
        children = store.query_children(container.handle)
        assert [c.kind for c in children] == ["content"]


def test_rebuild_aborts_when_no_longer_desired(mutator, state, read_items):
    checks = []

    def still_desired():
        checks.append(state.mutation_in_progress)
        return False

    outcome = mutator.rebuild(1, (1, 2), SharedConfig(), still_desired)

    assert outcome is MutationOutcome.ABORTED
    assert checks == [True]
    assert read_items() == []
    assert not state.structure_present
    assert not state.mutation_in_progress


def test_rebuild_dropped_while_flag_held(mutator, state, read_items):
    with state.mutation():
        assert mutator.rebuild(1, (1,), SharedConfig(), _always) is MutationOutcome.DROPPED
        assert mutator.teardown() is MutationOutcome.DROPPED
    assert read_items() == []


def test_teardown_removes_everything(mutator, state, store, region):
    mutator.rebuild(1, (1, 2), SharedConfig(), _always)

    assert mutator.teardown() is MutationOutcome.APPLIED
    assert store.query_children(region) == []
    assert not state.structure_present
    assert state.structural_key is None


def test_fault_releases_flag(state):
    class FailingStore(InMemoryDocumentStore):
        def insert_node(self, node, index, parent):
            if node.kind == "content":
                raise RuntimeError("quota exceeded")
            return super().insert_node(node, index, parent)

    store = FailingStore()
    region = store.insert_node(create_node("region"), None, store.root_handle)
    mutator = TreeMutator(store, region, state, TreeSyncConfig())

    outcome = mutator.rebuild(1, (1, 2), SharedConfig(), _always)

    assert outcome is MutationOutcome.FAULTED
    assert isinstance(mutator.last_fault, MutationFault)
    assert mutator.last_fault.operation == "build"
    assert str(mutator.last_fault) == "build failed: quota exceeded"
    assert not state.mutation_in_progress
    assert not state.structure_present
    assert state.has_leftovers
    assert state.needs_teardown

    assert mutator.teardown() is MutationOutcome.APPLIED
    assert store.query_children(region) == []
    assert not state.has_leftovers


def test_teardown_fault_keeps_state(mutator, state, store):
    mutator.rebuild(1, (1,), SharedConfig(), _always)

    def refuse(handles):
        raise RuntimeError("locked")

    store.remove_nodes = refuse
    assert mutator.teardown() is MutationOutcome.FAULTED
    assert state.structure_present
    assert not state.mutation_in_progress


def test_content_receives_shared_config(mutator, store, region):
    config = SharedConfig(show_add_to_cart=False, translations={"fr": "Ajouter"})
    mutator.rebuild(1, (9,), config, _always)

    container = store.query_children(region)[0]
    content = store.query_children(container.handle)[0]
    assert content.config == {"item_id": 9, **config.propagated_values()}
