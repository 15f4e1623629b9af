"""
Selection / inspector bridge.

Tracks at most one selected node by id and routes edits from the settings
panel back into the graph store. The selection never owns the node: every
read goes back to the store, and a node that has disappeared clears it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from flow_builder.graph_store import GraphStore
from flow_builder.models import Node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    """Snapshot of the selected node taken at select() time."""
    node_id: str
    data: Dict[str, Any] = field(default_factory=dict)


class InspectorBridge:
    def __init__(self, store: GraphStore):
        self.store = store
        self._selection: Optional[Selection] = None

    @property
    def selection(self) -> Optional[Selection]:
        if self._selection and not self.store.has_node(self._selection.node_id):
            self._selection = None
        return self._selection

    @property
    def selected(self) -> Optional[Node]:
        """The live node behind the selection, or None."""
        selection = self.selection
        if selection is None:
            return None
        return self.store.get_node(selection.node_id)

    def select(self, node_id: str) -> Optional[Selection]:
        """Select a node, replacing any prior selection. Unknown ids clear it."""
        node = self.store.get_node(node_id)
        if node is None:
            self._selection = None
            return None
        self._selection = Selection(node_id=node.id, data=dict(node.data))
        return self._selection

    def clear(self) -> None:
        self._selection = None

    def commit_edit(self, message: str) -> bool:
        """
        Write the edit field's text into the selected node.

        Called on blur, not per keystroke. Any string is accepted, including "".
        """
        selection = self.selection
        if selection is None:
            logger.debug("commit_edit with no selection")
            return False
        updated = self.store.update_node_data(selection.node_id, {"message": message})
        if updated:
            self._selection = Selection(node_id=selection.node_id,
                                        data=dict(self.store.get_node(selection.node_id).data))
        return updated
