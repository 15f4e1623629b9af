import pytest

from flow_builder.graph_store import GraphStore
from flow_builder.models import Connection, NodeKind, Position


@pytest.fixture
def store():
    return GraphStore()


def _id_number(node_id):
    return int(node_id.split("_")[1])


def test_add_node_assigns_distinct_increasing_ids(store):
    nodes = [store.add_node(NodeKind.MESSAGE, (i * 10, i * 5)) for i in range(5)]
    ids = [n.id for n in nodes]

    assert ids == ["node_1", "node_2", "node_3", "node_4", "node_5"]
    assert len(set(ids)) == len(ids)
    numbers = [_id_number(i) for i in ids]
    assert numbers == sorted(numbers)
    assert store.counter == 6


def test_add_node_uses_default_data_and_position(store):
    node = store.add_node(NodeKind.MESSAGE, Position(-5.0, 12.5))

    assert node.kind is NodeKind.MESSAGE
    assert node.data == {"message": "New message"}
    assert node.position == Position(-5.0, 12.5)
    assert store.nodes == [node]


def test_counter_is_per_store():
    a = GraphStore()
    b = GraphStore(start_counter=10)
    a.add_node(NodeKind.MESSAGE, (0, 0))
    assert a.add_node(NodeKind.MESSAGE, (0, 0)).id == "node_2"
    assert b.add_node(NodeKind.MESSAGE, (0, 0)).id == "node_10"


def test_update_node_data_merges_shallowly(store):
    node = store.add_node(NodeKind.MESSAGE, (0, 0))
    store.update_node_data(node.id, {"note": "keep me"})

    assert store.update_node_data(node.id, {"message": "Hello"}) is True
    assert store.get_node(node.id).data == {"message": "Hello", "note": "keep me"}


def test_update_node_data_allows_empty_message(store):
    node = store.add_node(NodeKind.MESSAGE, (0, 0))
    store.update_node_data(node.id, {"message": ""})
    assert store.get_node(node.id).message == ""


def test_update_unknown_node_leaves_graph_unchanged(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))
    b = store.add_node(NodeKind.MESSAGE, (1, 1))
    store.add_edge(Connection(a.id, b.id))
    before = store.snapshot()

    assert store.update_node_data("node_99", {"message": "x"}) is False
    assert store.snapshot() == before


def test_add_edge_between_existing_nodes(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))
    b = store.add_node(NodeKind.MESSAGE, (0, 100))

    edge = store.add_edge(Connection(a.id, b.id))

    assert edge is not None
    assert edge.source == a.id and edge.target == b.id
    assert edge.source_handle == "source" and edge.target_handle == "target"
    assert edge.id == "reactflow__edge-node_1source-node_2target"
    assert store.edges == [edge]


def test_add_edge_to_missing_node_is_rejected(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))

    assert store.add_edge(Connection(a.id, "node_42")) is None
    assert store.add_edge(Connection(None, a.id)) is None
    assert store.edges == []


def test_repeated_connection_keeps_edge_ids_unique(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))
    b = store.add_node(NodeKind.MESSAGE, (0, 100))

    first = store.add_edge(Connection(a.id, b.id))
    second = store.add_edge(Connection(a.id, b.id))

    assert second is first
    assert len(store.edges) == 1


def test_apply_node_changes_updates_position_and_selection(store):
    node = store.add_node(NodeKind.MESSAGE, (0, 0))

    applied = store.apply_node_changes([
        {"id": node.id, "type": "position", "position": {"x": 30, "y": 40}},
        {"id": node.id, "type": "select", "selected": True},
        {"id": node.id, "type": "dimensions", "dimensions": {"width": 200, "height": 80}},
        {"id": "node_77", "type": "position", "position": {"x": 1, "y": 1}},
        {"id": node.id, "type": "remove"},
    ])

    assert applied == 3
    stored = store.get_node(node.id)
    assert stored.position == Position(30.0, 40.0)
    assert stored.selected is True
    assert (stored.width, stored.height) == (200, 80)
    # removal is not supported; the node stays
    assert store.has_node(node.id)


@pytest.mark.parametrize("change", [
    {"type": "position", "position": {"x": None, "y": 1}},
    {"type": "position", "position": {"x": "abc", "y": 1}},
    {"type": "position", "position": [1]},
    {"type": "position"},
    {"type": "dimensions", "dimensions": "wide"},
])
def test_apply_node_changes_skips_bad_coordinates(store, change):
    node = store.add_node(NodeKind.MESSAGE, (5, 6))

    assert store.apply_node_changes([{"id": node.id, **change}]) == 0
    assert store.get_node(node.id).position == Position(5.0, 6.0)


def test_apply_changes_skips_entries_that_are_not_dicts(store):
    node = store.add_node(NodeKind.MESSAGE, (0, 0))

    assert store.apply_node_changes([None, "node_1", [node.id], {"id": [node.id]}]) == 0
    assert store.apply_edge_changes([None, 42]) == 0
    assert store.get_node(node.id).position == Position(0.0, 0.0)


def test_apply_edge_changes_removes_edge(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))
    b = store.add_node(NodeKind.MESSAGE, (0, 100))
    edge = store.add_edge(Connection(a.id, b.id))

    assert store.apply_edge_changes([{"id": edge.id, "type": "remove"}]) == 1
    assert store.edges == []
    assert store.apply_edge_changes([{"id": edge.id, "type": "remove"}]) == 0


def test_snapshot_round_trip_resumes_counter(store):
    a = store.add_node(NodeKind.MESSAGE, (0, 0))
    b = store.add_node(NodeKind.MESSAGE, (0, 100))
    store.update_node_data(b.id, {"message": "Bye"})
    store.add_edge(Connection(a.id, b.id))

    restored = GraphStore.from_snapshot(store.snapshot())

    assert restored.snapshot() == store.snapshot()
    assert restored.add_node(NodeKind.MESSAGE, (0, 0)).id == "node_3"


def test_from_snapshot_drops_dangling_edges():
    snapshot = {
        "nodes": [{"id": "node_1", "type": "textNode", "position": {"x": 0, "y": 0},
                   "data": {"message": "Hi"}}],
        "edges": [{"source": "node_1", "target": "node_9"}],
    }
    restored = GraphStore.from_snapshot(snapshot)
    assert restored.edges == []
    assert len(restored) == 1


def test_from_snapshot_drops_edges_with_unknown_handles():
    node = {"type": "textNode", "position": {"x": 0, "y": 0}, "data": {"message": "Hi"}}
    snapshot = {
        "nodes": [{"id": "node_1", **node}, {"id": "node_2", **node}],
        "edges": [
            {"source": "node_1", "target": "node_2", "sourceHandle": "target", "targetHandle": "bogus"},
            {"source": "node_1", "target": "node_2"},
        ],
    }
    restored = GraphStore.from_snapshot(snapshot)
    assert [e.id for e in restored.edges] == ["reactflow__edge-node_1source-node_2target"]
