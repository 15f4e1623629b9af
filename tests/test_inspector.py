import pytest

from flow_builder.graph_store import GraphStore
from flow_builder.inspector import InspectorBridge
from flow_builder.models import NodeKind


@pytest.fixture
def store():
    s = GraphStore()
    s.add_node(NodeKind.MESSAGE, (0, 0))
    s.add_node(NodeKind.MESSAGE, (0, 100))
    return s


@pytest.fixture
def inspector(store):
    return InspectorBridge(store)


def test_select_replaces_prior_selection(inspector):
    inspector.select("node_1")
    selection = inspector.select("node_2")

    assert selection.node_id == "node_2"
    assert selection.data == {"message": "New message"}
    assert inspector.selection.node_id == "node_2"


def test_select_unknown_node_clears(inspector):
    inspector.select("node_1")
    assert inspector.select("node_9") is None
    assert inspector.selection is None


def test_clear(inspector):
    inspector.select("node_1")
    inspector.clear()
    assert inspector.selection is None
    assert inspector.selected is None


def test_commit_edit_updates_store(inspector, store):
    store.update_node_data("node_1", {"extra": 1})
    inspector.select("node_1")

    assert inspector.commit_edit("Welcome!") is True
    assert store.get_node("node_1").data == {"message": "Welcome!", "extra": 1}
    assert inspector.selection.data["message"] == "Welcome!"
    assert store.get_node("node_2").message == "New message"


def test_commit_edit_accepts_empty_string(inspector, store):
    inspector.select("node_2")
    assert inspector.commit_edit("") is True
    assert store.get_node("node_2").message == ""


def test_commit_edit_without_selection_is_noop(inspector, store):
    before = store.snapshot()
    assert inspector.commit_edit("ignored") is False
    assert store.snapshot() == before


def test_selection_clears_when_node_disappears(inspector, store):
    inspector.select("node_2")
    del store._nodes["node_2"]

    assert inspector.selection is None
    assert inspector.commit_edit("x") is False
