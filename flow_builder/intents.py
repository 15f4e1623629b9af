"""
Intents emitted by the UI layer.

Each intent is an immutable description of one user gesture. The editor
applies them one at a time (see FlowEditor.dispatch), so every graph change is
a discrete, recorded transition.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from flow_builder.models import Connection, Position
from flow_builder.placement import ViewportRect


@dataclass(frozen=True)
class DropNode:
    """A node template dropped on the canvas."""
    payload: Any
    pointer: Tuple[float, float]
    bounds: ViewportRect = field(default_factory=ViewportRect)


@dataclass(frozen=True)
class MoveNode:
    node_id: str
    position: Position


@dataclass(frozen=True)
class ConnectNodes:
    connection: Connection


@dataclass(frozen=True)
class SelectNode:
    node_id: str


@dataclass(frozen=True)
class ClearSelection:
    pass


@dataclass(frozen=True)
class CommitEdit:
    message: str


@dataclass(frozen=True)
class SaveFlow:
    pass


@dataclass(frozen=True)
class ApplyNodeChanges:
    changes: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ApplyEdgeChanges:
    changes: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class Transition:
    """One applied intent and what it produced."""
    intent: Any
    result: Any = None
    changed: bool = False

