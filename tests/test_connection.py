"""
The connection policy currently accepts every well-formed connection.
Tightening it (cycle checks, one outgoing edge per node, ...) must break
these tests on purpose.
"""

import pytest

from flow_builder.connection import ConnectionPolicy
from flow_builder.graph_store import GraphStore
from flow_builder.models import Connection, NodeKind


@pytest.fixture
def store():
    s = GraphStore()
    for _ in range(3):
        s.add_node(NodeKind.MESSAGE, (0, 0))
    return s


@pytest.mark.parametrize("source,target", [
    ("node_1", "node_2"),
    ("node_2", "node_1"),
    ("node_1", "node_1"),  # self-loop
    ("node_3", "node_1"),
])
def test_accepts_any_well_formed_connection(store, source, target):
    policy = ConnectionPolicy()
    assert policy.accepts(Connection(source, target), store.has_node) is True


def test_accepts_cycles_and_multiple_outgoing_edges(store):
    assert store.add_edge(Connection("node_1", "node_2"))
    assert store.add_edge(Connection("node_2", "node_3"))
    assert store.add_edge(Connection("node_3", "node_1"))
    assert store.add_edge(Connection("node_1", "node_3"))
    assert len(store.edges) == 4


def test_rejects_missing_endpoints(store):
    policy = ConnectionPolicy()
    assert policy.accepts(Connection("node_1", "node_404"), store.has_node) is False
    assert policy.accepts(Connection("", "node_1"), store.has_node) is False
    assert policy.resolve(Connection(None, None), store.has_node) is None


def test_normalize_adds_presentation_attributes():
    edge = ConnectionPolicy().normalize(Connection("node_1", "node_2"))
    assert edge.kind == "smoothstep"
    assert edge.animated is True
    assert edge.style == {"stroke": "#3b82f6", "strokeWidth": 2}
    assert edge.to_dict()["sourceHandle"] == "source"
    assert edge.to_dict()["targetHandle"] == "target"


@pytest.mark.parametrize("source_handle, target_handle", [
    ("target", "bogus"),
    ("target", "source"),
    ("source", ""),
])
def test_rejects_unknown_handles(store, source_handle, target_handle):
    connection = Connection("node_1", "node_2", source_handle=source_handle, target_handle=target_handle)

    assert ConnectionPolicy().accepts(connection, store.has_node) is False
    assert store.add_edge(connection) is None
    assert store.edges == []
