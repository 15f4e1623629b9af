"""
Drop placement for new nodes.

A drop arrives with pointer coordinates in viewport space. Subtracting the
canvas wrapper's bounding rectangle gives canvas coordinates, and subtracting
the node half-size offset centers the node under the cursor. Results are not
clamped and may be negative.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from flow_builder.config import DEFAULT_NODE_OFFSET_X, DEFAULT_NODE_OFFSET_Y
from flow_builder.models import Position, NodeKind

# MIME type under which the nodes panel stores the template type on dragstart
DRAG_PAYLOAD_KEY = "application/reactflow"


@dataclass(frozen=True)
class ViewportRect:
    """The canvas wrapper's bounding client rect."""
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ViewportRect":
        return cls(
            left=float(raw.get("left", raw.get("x", 0)) or 0),
            top=float(raw.get("top", raw.get("y", 0)) or 0),
            width=float(raw.get("width", 0) or 0),
            height=float(raw.get("height", 0) or 0),
        )


def resolve_drop_position(
    pointer: Tuple[float, float],
    bounds: ViewportRect,
    offset: Tuple[float, float] = (DEFAULT_NODE_OFFSET_X, DEFAULT_NODE_OFFSET_Y),
) -> Position:
    """
    Convert a drop pointer into a graph-space node position.

    Args:
        pointer: (clientX, clientY) of the drop event
        bounds: bounding rect of the canvas wrapper
        offset: node half-size, subtracted so the node is centered on the cursor

    Returns:
        Position(pointerX - left - offsetX, pointerY - top - offsetY)
    """
    px, py = pointer
    return Position(px - bounds.left - offset[0], py - bounds.top - offset[1])


def read_drag_payload(payload: Any) -> Optional[NodeKind]:
    """
    Extract the node template type from a drag payload.

    Accepts the bare type string or a dataTransfer-like dict keyed by
    DRAG_PAYLOAD_KEY. Returns None for a missing, empty or unrecognised type.
    """
    if isinstance(payload, dict):
        payload = payload.get(DRAG_PAYLOAD_KEY)
    if not payload:
        return None
    return NodeKind.from_payload(payload)
