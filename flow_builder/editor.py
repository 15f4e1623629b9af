"""
Flow editor: applies UI intents to the graph.

The editor owns the graph store, the inspector bridge, the save validator and
the persistence sink. The NiceGUI page never touches the store directly; it
builds an intent and calls `dispatch`, which returns the intent's result and
records a Transition in `history`, which keeps the most recent
`Settings.history_limit` entries.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, Optional

from flow_builder.config import Settings
from flow_builder.connection import ConnectionPolicy
from flow_builder.graph_store import GraphStore
from flow_builder.inspector import InspectorBridge
from flow_builder.intents import (
    DropNode,
    MoveNode,
    ConnectNodes,
    SelectNode,
    ClearSelection,
    CommitEdit,
    SaveFlow,
    ApplyNodeChanges,
    ApplyEdgeChanges,
    Transition,
)
from flow_builder.node_types import NodeTypeCatalog
from flow_builder.persistence import FlowSink, LoggingSink
from flow_builder.placement import read_drag_payload, resolve_drop_position
from flow_builder.validator import SaveValidator

logger = logging.getLogger(__name__)

SAVE_SUCCESS_MESSAGE = "Flow saved successfully!"
SAVE_FAILURE_MESSAGE = "Error: Multiple unconnected nodes."


@dataclass(frozen=True)
class SaveOutcome:
    ok: bool
    message: str
    reason: Optional[str] = None
    unconnected: tuple = ()


class FlowEditor:
    """
    Single entry point for graph changes coming from the UI.

    Intents that find nothing to act on (bad drag payload, unknown node id)
    return None or False and leave the graph untouched.
    """

    def __init__(self, settings: Optional[Settings] = None,
                 sink: Optional[FlowSink] = None,
                 catalog: Optional[NodeTypeCatalog] = None,
                 store: Optional[GraphStore] = None,
                 validator: Optional[SaveValidator] = None):
        self.settings = settings or Settings()
        self.sink = sink or LoggingSink()
        self.catalog = catalog or NodeTypeCatalog()
        self.store = store or GraphStore(policy=ConnectionPolicy(),
                                         default_message=self.settings.default_message)
        self.inspector = InspectorBridge(self.store)
        self.validator = validator or SaveValidator()
        self.history: Deque[Transition] = deque(maxlen=self.settings.history_limit)
        self._handlers = {
            DropNode: self._drop_node,
            MoveNode: self._move_node,
            ConnectNodes: self._connect,
            SelectNode: self._select,
            ClearSelection: self._clear_selection,
            CommitEdit: self._commit_edit,
            SaveFlow: self._save,
            ApplyNodeChanges: self._apply_node_changes,
            ApplyEdgeChanges: self._apply_edge_changes,
        }

    def dispatch(self, intent: Any) -> Any:
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unsupported intent: {type(intent).__name__}")
        result, changed = handler(intent)
        self.history.append(Transition(intent=intent, result=result, changed=changed))
        return result

    # --- Handlers: each returns (result, graph_changed) ---

    def _drop_node(self, intent: DropNode):
        kind = read_drag_payload(intent.payload)
        if kind is None or not self.catalog.is_known(kind):
            logger.debug(f"Ignoring drop with payload {intent.payload!r}")
            return None, False
        position = resolve_drop_position(intent.pointer, intent.bounds, self.settings.node_offset)
        node = self.store.add_node(kind, position)
        default_data = self.catalog.default_data(kind)
        if default_data:
            self.store.update_node_data(node.id, default_data)
        return node, True

    def _move_node(self, intent: MoveNode):
        moved = self.store.move_node(intent.node_id, intent.position)
        return moved, moved

    def _connect(self, intent: ConnectNodes):
        before = len(self.store.edges)
        edge = self.store.add_edge(intent.connection)
        return edge, len(self.store.edges) != before

    def _select(self, intent: SelectNode):
        return self.inspector.select(intent.node_id), False

    def _clear_selection(self, intent: ClearSelection):
        self.inspector.clear()
        return None, False

    def _commit_edit(self, intent: CommitEdit):
        updated = self.inspector.commit_edit(intent.message)
        return updated, updated

    def _save(self, intent: SaveFlow):
        return self.save(), False

    def _apply_node_changes(self, intent: ApplyNodeChanges):
        applied = self.store.apply_node_changes(intent.changes)
        return applied, applied > 0

    def _apply_edge_changes(self, intent: ApplyEdgeChanges):
        applied = self.store.apply_edge_changes(intent.changes)
        return applied, applied > 0

    # --- Save ---

    def save(self) -> SaveOutcome:
        """
        Validate the current graph and, if it passes, emit its snapshot.

        The graph is never modified. Sink errors are logged; the save still
        counts as successful because the sink is fire-and-forget.
        """
        result = self.validator.validate(self.store.nodes, self.store.edges)
        if not result.ok:
            return SaveOutcome(ok=False, message=SAVE_FAILURE_MESSAGE,
                               reason=result.reason, unconnected=tuple(result.unconnected))

        snapshot = self.store.snapshot()
        try:
            self.sink.emit(snapshot)
        except OSError as e:
            logger.error(f"Failed to emit saved flow: {e}")
        return SaveOutcome(ok=True, message=SAVE_SUCCESS_MESSAGE, unconnected=tuple(result.unconnected))

    def load_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """Replace the graph with a saved snapshot and clear the selection."""
        self.store = GraphStore.from_snapshot(snapshot, policy=self.store.policy,
                                              default_message=self.settings.default_message)
        self.inspector = InspectorBridge(self.store)
        logger.info(f"Loaded flow with {len(self.store.nodes)} nodes and {len(self.store.edges)} edges")
