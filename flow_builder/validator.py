"""
Save-time validation of a flow graph.

The check is deliberately loose: a flow may have at most one node that is not
the target of any edge (its entry point). Cycles, unreachable subgraphs and
duplicate edges are not examined.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import networkx as nx

from flow_builder.models import Node, Edge

logger = logging.getLogger(__name__)

MULTIPLE_UNCONNECTED = "multiple unconnected nodes"


class FlowValidationError(Exception):
    """Raised by validate_or_raise when a flow fails validation."""
    def __init__(self, reason: str, unconnected: Optional[List[str]] = None):
        self.reason = reason
        self.unconnected = list(unconnected or [])
        super().__init__(reason)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None
    unconnected: List[str] = field(default_factory=list)


def build_digraph(nodes: Sequence[Node], edges: Sequence[Edge]) -> nx.DiGraph:
    """Build a NetworkX DiGraph; node order follows insertion order."""
    G = nx.DiGraph()
    for node in nodes:
        G.add_node(node.id)
    for edge in edges:
        # Only add edges if both nodes exist
        if edge.source in G.nodes and edge.target in G.nodes:
            G.add_edge(edge.source, edge.target)
    return G


def unconnected_targets(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[str]:
    """Ids of nodes that are not the target of any edge, in node order."""
    G = build_digraph(nodes, edges)
    return [node_id for node_id, degree in G.in_degree() if degree == 0]


class SaveValidator:
    """Structural checks run before a flow is saved. Never mutates its input."""

    def validate(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
        if len(nodes) <= 1:
            return ValidationResult(ok=True)

        unconnected = unconnected_targets(nodes, edges)
        if len(unconnected) > 1:
            logger.info(f"Validation failed: {len(unconnected)} unconnected nodes ({', '.join(unconnected)})")
            return ValidationResult(ok=False, reason=MULTIPLE_UNCONNECTED, unconnected=unconnected)
        return ValidationResult(ok=True, unconnected=unconnected)

    def validate_or_raise(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> ValidationResult:
        result = self.validate(nodes, edges)
        if not result.ok:
            raise FlowValidationError(result.reason, result.unconnected)
        return result
