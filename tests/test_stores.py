"""Tests for DocumentStore implementations."""

import pytest

from pyqt_treesync.protocols import create_node


def _container_placeholder(node):
    if node.kind == "container":
        return create_node("placeholder")
    return None


@pytest.fixture(params=["memory", "item_model"])
def make_store(request, qapp):
    def _make(**kwargs):
        if request.param == "memory":
            from pyqt_treesync.stores import InMemoryDocumentStore
            return InMemoryDocumentStore(**kwargs)
        from pyqt_treesync.stores import ItemModelDocumentStore
        return ItemModelDocumentStore(**kwargs)
    return _make


def test_insert_respects_index_and_clamps(make_store):
    store = make_store()
    root = store.root_handle
    a = store.insert_node(create_node("container", {"n": "a"}), None, root)
    b = store.insert_node(create_node("container", {"n": "b"}), 0, root)
    c = store.insert_node(create_node("container", {"n": "c"}), 99, root)
    d = store.insert_node(create_node("container", {"n": "d"}), -5, root)

    assert [n.handle for n in store.query_children(root)] == [d, b, a, c]


def test_insert_rejects_unknown_parent_and_duplicate_handle(make_store):
    store = make_store()
    node = create_node("container")
    store.insert_node(node, None, store.root_handle)

    with pytest.raises(KeyError):
        store.insert_node(create_node("content"), None, "missing")
    with pytest.raises(ValueError):
        store.insert_node(node, None, store.root_handle)


def test_remove_drops_whole_subtree(make_store):
    store = make_store()
    parent = store.insert_node(create_node("container"), None, store.root_handle)
    child = store.insert_node(create_node("content", {"item_id": 1}), None, parent)

    store.remove_nodes([parent, child])

    assert store.query_children(store.root_handle) == []
    assert store.get_node(parent) is None
    assert store.get_node(child) is None


def test_root_cannot_be_removed(make_store):
    store = make_store()
    with pytest.raises(ValueError):
        store.remove_nodes([store.root_handle])


def test_update_merges_partial_config(make_store):
    store = make_store()
    handle = store.insert_node(create_node("content", {"item_id": 3, "button_text": "Buy"}), None, store.root_handle)

    store.update_node_config(handle, {"button_text": "Order"})

    assert store.get_node(handle).config == {"item_id": 3, "button_text": "Order"}


def test_snapshots_are_detached(make_store):
    store = make_store()
    handle = store.insert_node(create_node("content", {"translations": {"fr": "Acheter"}}), None, store.root_handle)

    snapshot = store.get_node(handle)
    snapshot.config["translations"]["fr"] = "changed"

    assert store.get_node(handle).config["translations"] == {"fr": "Acheter"}


def test_ancestor_chain_is_nearest_first(make_store):
    store = make_store()
    carousel = store.insert_node(create_node("carousel"), None, store.root_handle)
    region = store.insert_node(create_node("region"), None, carousel)
    container = store.insert_node(create_node("container"), None, region)

    assert store.get_ancestor_chain(container) == [region, carousel, store.root_handle]
    assert store.get_ancestor_chain(store.root_handle) == []


def test_placeholder_is_auto_inserted(make_store):
    store = make_store(placeholder_factory=_container_placeholder)
    container = store.insert_node(create_node("container"), None, store.root_handle)

    children = store.query_children(container)
    assert [c.kind for c in children] == ["placeholder"]


def test_memory_transaction_rolls_back_on_error():
    from pyqt_treesync.stores import InMemoryDocumentStore

    store = InMemoryDocumentStore()
    handle = store.insert_node(create_node("content", {"button_text": "Buy"}), None, store.root_handle)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.update_node_config(handle, {"button_text": "Order"})
            store.insert_node(create_node("content"), None, store.root_handle)
            raise RuntimeError("abort")

    assert store.get_node(handle).config == {"button_text": "Buy"}
    assert len(store.query_children(store.root_handle)) == 1


def test_item_model_mirrors_structure(qapp):
    from pyqt_treesync.stores import HANDLE_ROLE, KIND_ROLE, ItemModelDocumentStore

    store = ItemModelDocumentStore()
    container = store.insert_node(create_node("container"), None, store.root_handle)
    content = store.insert_node(create_node("content", {"item_id": 42}), None, container)

    model = store.model
    assert model.rowCount() == 1
    container_item = model.item(0)
    assert container_item.data(HANDLE_ROLE) == container
    assert container_item.data(KIND_ROLE) == "container"
    assert container_item.child(0).text() == "content: 42"

    store.update_node_config(content, {"item_id": 43})
    assert container_item.child(0).text() == "content: 43"

    store.remove_nodes([container])
    assert model.rowCount() == 0
