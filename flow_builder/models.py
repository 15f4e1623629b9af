"""
Data model for the flow builder graph.

Nodes and edges are plain dataclasses. `to_dict` produces the serializable shape
handed to the persistence sink and the canvas (camelCase handle keys, the same
shape the browser side speaks); `from_dict` reads it back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional

SOURCE_HANDLE = "source"
TARGET_HANDLE = "target"

EDGE_KIND = "smoothstep"
EDGE_STROKE = "#3b82f6"
EDGE_STROKE_WIDTH = 2


class NodeKind(str, Enum):
    """Tag for node variants. The value is the drag payload / renderer key."""
    MESSAGE = "textNode"

    @classmethod
    def from_payload(cls, value: Any) -> Optional["NodeKind"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_value(cls, value: Any) -> "Position":
        """Accept a Position, a {'x', 'y'} dict or an (x, y) pair."""
        if isinstance(value, Position):
            return value
        if isinstance(value, dict):
            return cls(float(value.get("x", 0)), float(value.get("y", 0)))
        x, y = value
        return cls(float(x), float(y))


@dataclass
class Node:
    id: str
    kind: NodeKind
    position: Position
    data: Dict[str, Any] = field(default_factory=dict)
    selected: bool = False
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def message(self) -> str:
        return self.data.get("message", "")

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "type": self.kind.value,
            "position": self.position.to_dict(),
            "data": dict(self.data),
        }
        if self.width is not None:
            out["width"] = self.width
        if self.height is not None:
            out["height"] = self.height
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Node":
        kind = NodeKind.from_payload(raw.get("type"))
        if kind is None:
            raise ValueError(f"Unknown node type: {raw.get('type')!r}")
        return cls(
            id=str(raw["id"]),
            kind=kind,
            position=Position.from_value(raw.get("position", {})),
            data=dict(raw.get("data") or {}),
            width=raw.get("width"),
            height=raw.get("height"),
        )


@dataclass(frozen=True)
class Connection:
    """A proposed edge, as emitted by a connect gesture."""
    source: Optional[str]
    target: Optional[str]
    source_handle: str = SOURCE_HANDLE
    target_handle: str = TARGET_HANDLE


def edge_id_for(source: str, source_handle: str, target: str, target_handle: str) -> str:
    return f"reactflow__edge-{source}{source_handle}-{target}{target_handle}"


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: str = SOURCE_HANDLE
    target_handle: str = TARGET_HANDLE
    # Cosmetic, consumed only by the canvas.
    kind: str = EDGE_KIND
    animated: bool = True
    style: Dict[str, Any] = field(default_factory=lambda: {
        "stroke": EDGE_STROKE,
        "strokeWidth": EDGE_STROKE_WIDTH,
    })
    selected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "sourceHandle": self.source_handle,
            "targetHandle": self.target_handle,
            "type": self.kind,
            "animated": self.animated,
            "style": dict(self.style),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Edge":
        source_handle = raw.get("sourceHandle") or SOURCE_HANDLE
        target_handle = raw.get("targetHandle") or TARGET_HANDLE
        edge_id = raw.get("id") or edge_id_for(raw["source"], source_handle, raw["target"], target_handle)
        return cls(
            id=str(edge_id),
            source=str(raw["source"]),
            target=str(raw["target"]),
            source_handle=source_handle,
            target_handle=target_handle,
            kind=raw.get("type", EDGE_KIND),
            animated=bool(raw.get("animated", True)),
            style=dict(raw.get("style") or {"stroke": EDGE_STROKE, "strokeWidth": EDGE_STROKE_WIDTH}),
        )
