"""
Graph store for the flow builder.

Holds nodes and edges in insertion order and is the only place they are
mutated. Node ids come from a counter owned by the store ("node_1", "node_2",
...), so two stores never share id state.

Change events coming back from the canvas (drag positions, selection flags,
measured dimensions, edge removal) are merged through `apply_node_changes` and
`apply_edge_changes`. Anything the store does not recognise is dropped with a
debug log line instead of raising; the editor must survive inconsistent
browser events.
"""

import logging
import re
from typing import Dict, Any, List, Optional, Iterable

from flow_builder.config import DEFAULT_MESSAGE
from flow_builder.connection import ConnectionPolicy
from flow_builder.models import (
    Node, Edge, NodeKind, Position, Connection, SOURCE_HANDLE, TARGET_HANDLE,
)

logger = logging.getLogger(__name__)

NODE_ID_PREFIX = "node_"
_NODE_ID_RE = re.compile(r"^node_(\d+)$")


class GraphStore:
    """
    In-memory graph of message nodes and directed edges.

    Invariants:
    - node ids are unique and assigned in strictly increasing counter order
    - edge ids are unique
    - every edge's source and target name an existing node
    """

    def __init__(self, policy: Optional[ConnectionPolicy] = None,
                 start_counter: int = 1, default_message: str = DEFAULT_MESSAGE):
        self.policy = policy or ConnectionPolicy()
        self.default_message = default_message
        self._counter = start_counter
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}

    # --- Read access ---

    @property
    def counter(self) -> int:
        """The value the next node id will be built from."""
        return self._counter

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    # --- Mutations ---

    def add_node(self, kind: NodeKind, position) -> Node:
        """Create a node with a fresh id and default data. Never fails."""
        node_id = f"{NODE_ID_PREFIX}{self._counter}"
        self._counter += 1
        node = Node(
            id=node_id,
            kind=NodeKind(kind),
            position=Position.from_value(position),
            data={"message": self.default_message},
        )
        self._nodes[node_id] = node
        logger.debug(f"Added node {node_id} at ({node.position.x}, {node.position.y})")
        return node

    def update_node_data(self, node_id: str, partial_data: Dict[str, Any]) -> bool:
        """
        Shallow-merge partial_data into the node's data.

        Keys not present in partial_data are preserved. Returns False (and
        changes nothing) if the node does not exist.
        """
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"update_node_data: unknown node {node_id}")
            return False
        node.data = {**node.data, **partial_data}
        return True

    def move_node(self, node_id: str, position) -> bool:
        node = self._nodes.get(node_id)
        if node is None:
            logger.debug(f"move_node: unknown node {node_id}")
            return False
        node.position = Position.from_value(position)
        return True

    def add_edge(self, connection: Connection) -> Optional[Edge]:
        """
        Ask the connection policy about the proposed edge and store it.

        Returns the stored edge, or None when the policy rejects it. Connecting
        the same handles twice returns the edge already stored.
        """
        edge = self.policy.resolve(connection, self.has_node)
        if edge is None:
            return None
        existing = self._edges.get(edge.id)
        if existing is not None:
            return existing
        self._edges[edge.id] = edge
        logger.debug(f"Added edge {edge.id}")
        return edge

    # --- Canvas change events ---

    def apply_node_changes(self, changes: Iterable[Dict[str, Any]]) -> int:
        """
        Merge node change events emitted by the canvas.

        Supported change types: 'position', 'select', 'dimensions'. Node removal
        is not supported and is ignored. Returns the number of changes applied.
        """
        applied = 0
        for change in changes or []:
            if not isinstance(change, dict):
                logger.debug(f"Ignoring malformed node change {change!r}")
                continue
            node = self._nodes.get(change.get("id")) if isinstance(change.get("id"), str) else None
            change_type = change.get("type")
            if node is None:
                logger.debug(f"Ignoring {change_type} change for unknown node {change.get('id')}")
                continue
            if change_type == "position":
                try:
                    node.position = Position.from_value(change["position"])
                except (KeyError, TypeError, ValueError) as e:
                    logger.debug(f"Ignoring bad position for node {node.id}: {e}")
                    continue
                applied += 1
            elif change_type == "select":
                node.selected = bool(change.get("selected"))
                applied += 1
            elif change_type == "dimensions":
                dims = change.get("dimensions")
                if not isinstance(dims, dict):
                    logger.debug(f"Ignoring bad dimensions for node {node.id}: {dims!r}")
                    continue
                node.width = dims.get("width", node.width)
                node.height = dims.get("height", node.height)
                applied += 1
            else:
                logger.debug(f"Ignoring unsupported node change type {change_type!r}")
        return applied

    def apply_edge_changes(self, changes: Iterable[Dict[str, Any]]) -> int:
        """Merge edge change events ('select', 'remove'). Returns the number applied."""
        applied = 0
        for change in changes or []:
            if not isinstance(change, dict):
                logger.debug(f"Ignoring malformed edge change {change!r}")
                continue
            edge_id = change.get("id")
            change_type = change.get("type")
            if not isinstance(edge_id, str) or edge_id not in self._edges:
                logger.debug(f"Ignoring {change_type} change for unknown edge {edge_id}")
                continue
            if change_type == "select":
                self._edges[edge_id].selected = bool(change.get("selected"))
                applied += 1
            elif change_type == "remove":
                del self._edges[edge_id]
                applied += 1
            else:
                logger.debug(f"Ignoring unsupported edge change type {change_type!r}")
        return applied

    # --- Serialization ---

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serializable copy of the graph: {'nodes': [...], 'edges': [...]}."""
        return {
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "edges": [e.to_dict() for e in self._edges.values()],
        }

    @classmethod
    def from_snapshot(cls, snapshot: Dict[str, Any], policy: Optional[ConnectionPolicy] = None,
                      default_message: str = DEFAULT_MESSAGE) -> "GraphStore":
        """
        Rebuild a store from a snapshot.

        The counter resumes after the highest numeric node id. Edges whose
        endpoints are missing are dropped so the endpoint invariant holds.
        """
        store = cls(policy=policy, default_message=default_message)
        highest = 0
        for raw in snapshot.get("nodes", []):
            node = Node.from_dict(raw)
            store._nodes[node.id] = node
            match = _NODE_ID_RE.match(node.id)
            if match:
                highest = max(highest, int(match.group(1)))
        store._counter = highest + 1

        for raw in snapshot.get("edges", []):
            edge = Edge.from_dict(raw)
            if edge.source not in store._nodes or edge.target not in store._nodes:
                logger.warning(f"Dropping edge {edge.id}: endpoint missing from snapshot")
                continue
            if (edge.source_handle, edge.target_handle) != (SOURCE_HANDLE, TARGET_HANDLE):
                logger.warning(f"Dropping edge {edge.id}: unknown handles")
                continue
            store._edges[edge.id] = edge
        return store
