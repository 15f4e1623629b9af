"""
Normalization of raw UI event payloads.

NiceGUI delivers event args as dicts, lists or bare strings depending on how
the listener was registered. These helpers turn them into the plain values the
intents expect and return None when a payload is unusable.
"""

from typing import Any, Dict, Optional, Tuple

from flow_builder.canvas import REQUESTED_EVENT_KEYS, NODE_WIDTH, NODE_HEIGHT
from flow_builder.graph_store import GraphStore
from flow_builder.models import Connection


def normalize_click_payload(raw_payload: Any) -> Dict[str, Any]:
    """
    Turn chart event args into a dict keyed like REQUESTED_EVENT_KEYS.

    Positional args are paired with the requested keys in order; a bare string
    is taken as the clicked item's name.
    """
    if isinstance(raw_payload, dict):
        return raw_payload
    if isinstance(raw_payload, str):
        return {'name': raw_payload}
    if isinstance(raw_payload, (list, tuple)):
        return dict(zip(REQUESTED_EVENT_KEYS, raw_payload))
    return {}


def resolve_node_id_from_payload(payload: Dict[str, Any], store: GraphStore) -> Optional[str]:
    """Return a node id from a normalized click payload, or None for background/edge clicks."""
    if not isinstance(payload, dict):
        return None
    if payload.get('componentType') != 'series':
        return None
    if payload.get('dataType', 'node') != 'node':
        return None
    node_id = payload.get('name')
    if node_id and store.has_node(node_id):
        return node_id
    return None


def parse_pointer(args: Any) -> Optional[Tuple[float, float]]:
    """Pull (clientX, clientY) out of a DOM drop event's args."""
    if isinstance(args, dict):
        x, y = args.get('clientX'), args.get('clientY')
    elif isinstance(args, (list, tuple)) and len(args) >= 2:
        x, y = args[0], args[1]
    else:
        return None
    try:
        return float(x), float(y)
    except (TypeError, ValueError):
        return None


def position_change(node_id: str, center: Any) -> Optional[Dict[str, Any]]:
    """
    Build a 'position' node change from a dragged node's canvas center.

    The canvas draws nodes by their center; the store keeps the top-left corner.
    """
    if isinstance(center, dict):
        center = (center.get('x'), center.get('y'))
    try:
        cx, cy = float(center[0]), float(center[1])
    except (TypeError, ValueError, IndexError, KeyError):
        return None
    return {
        'id': node_id,
        'type': 'position',
        'position': {'x': cx - NODE_WIDTH / 2, 'y': cy - NODE_HEIGHT / 2},
    }


def connection_between(source_id: Optional[str], target_id: Optional[str]) -> Optional[Connection]:
    """Connect gesture: outgoing handle of source to incoming handle of target."""
    if not source_id or not target_id:
        return None
    return Connection(source=source_id, target=target_id)
