"""
Connection policy: decides whether a proposed edge is accepted and turns
accepted connections into normalized Edge objects.

Every well-formed connection is accepted right now. There is no cycle check,
no duplicate check and no self-loop rejection. Rules such as "at most one
outgoing edge per node" belong in `accepts`.
"""

import logging
from typing import Callable, Optional

from flow_builder.models import (
    Connection,
    Edge,
    EDGE_KIND,
    EDGE_STROKE,
    EDGE_STROKE_WIDTH,
    SOURCE_HANDLE,
    TARGET_HANDLE,
    edge_id_for,
)

logger = logging.getLogger(__name__)


class ConnectionPolicy:
    """Accepts connections between existing nodes and decorates the resulting edge."""

    edge_kind = EDGE_KIND
    animated = True

    def is_well_formed(self, connection: Connection, node_exists: Callable[[str], bool]) -> bool:
        if not connection.source or not connection.target:
            return False
        # one outgoing and one incoming handle per node
        if (connection.source_handle, connection.target_handle) != (SOURCE_HANDLE, TARGET_HANDLE):
            return False
        return node_exists(connection.source) and node_exists(connection.target)

    def accepts(self, connection: Connection, node_exists: Callable[[str], bool]) -> bool:
        """
        Return True if the connection may become an edge.

        Args:
            connection: The proposed source/target pair with handles
            node_exists: Lookup telling whether a node id is in the graph
        """
        if not self.is_well_formed(connection, node_exists):
            logger.debug(f"Rejecting malformed connection {connection}")
            return False
        return True

    def normalize(self, connection: Connection) -> Edge:
        return Edge(
            id=edge_id_for(connection.source, connection.source_handle,
                           connection.target, connection.target_handle),
            source=connection.source,
            target=connection.target,
            source_handle=connection.source_handle,
            target_handle=connection.target_handle,
            kind=self.edge_kind,
            animated=self.animated,
            style={"stroke": EDGE_STROKE, "strokeWidth": EDGE_STROKE_WIDTH},
        )

    def resolve(self, connection: Connection, node_exists: Callable[[str], bool]) -> Optional[Edge]:
        """Return the normalized edge, or None when the connection is rejected."""
        if not self.accepts(connection, node_exists):
            return None
        return self.normalize(connection)
