"""
ECharts options builder for the flow canvas.

Converts the graph store's nodes and edges into an ECharts option dict with a
single 'graph' series that NiceGUI's ui.echart can render. The series sits on
hidden value axes that span exactly the canvas size in pixels, with roaming
off, so a graph position is the canvas pixel the node is drawn at and a drop
lands under the cursor. The canvas never computes layout.

Node rendering dispatches on the node kind through NODE_RENDERERS. Adding a
node kind means adding a renderer here, not subclassing.
"""

from typing import Dict, List, Any, Callable, Optional, Sequence, Tuple

from flow_builder.models import Node, Edge, NodeKind

# Event keys we request from ECharts click events
REQUESTED_EVENT_KEYS = ['componentType', 'dataType', 'name', 'seriesType', 'value']

MESSAGE_PLACEHOLDER = 'Enter your message...'
NODE_WIDTH = 200
NODE_HEIGHT = 100

# (width, height) used until the page has measured the canvas
DEFAULT_VIEWPORT = (1200.0, 800.0)

SELECTED_BORDER = '#3b82f6'
DEFAULT_BORDER = '#d1d5db'


def render_message_node(node: Node, selected: bool) -> Dict[str, Any]:
    """ECharts data entry for a message node: header plus message body."""
    body = node.message or MESSAGE_PLACEHOLDER
    return {
        'id': node.id,
        'name': node.id,
        'value': [node.position.x + NODE_WIDTH / 2, node.position.y + NODE_HEIGHT / 2],
        'symbol': 'roundRect',
        'symbolSize': [NODE_WIDTH, NODE_HEIGHT],
        'itemStyle': {
            'color': '#ffffff',
            'borderColor': SELECTED_BORDER if selected else DEFAULT_BORDER,
            'borderWidth': 2,
            'shadowBlur': 8,
            'shadowColor': 'rgba(0,0,0,0.15)',
        },
        'label': {
            'show': True,
            'formatter': f'{{header|Message}}\n{{body|{_escape_rich(body)}}}',
            'rich': {
                'header': {'color': '#4b5563', 'fontSize': 12, 'fontWeight': 'bold'},
                'body': {'color': '#1f2937', 'fontSize': 13, 'width': NODE_WIDTH - 24, 'overflow': 'break'},
            },
        },
        'nodeType': node.kind.value,
    }


NODE_RENDERERS: Dict[NodeKind, Callable[[Node, bool], Dict[str, Any]]] = {
    NodeKind.MESSAGE: render_message_node,
}


def _escape_rich(text: str) -> str:
    # ECharts rich text uses braces and pipes as markup
    return text.replace('{', '(').replace('}', ')').replace('|', '/')


def edge_to_link(edge: Edge) -> Dict[str, Any]:
    style = edge.style or {}
    return {
        'id': edge.id,
        'source': edge.source,
        'target': edge.target,
        'symbol': ['none', 'arrow'],
        'lineStyle': {
            'color': style.get('stroke', SELECTED_BORDER),
            'width': style.get('strokeWidth', 2),
            'type': 'dashed' if edge.animated else 'solid',
            'curveness': 0.2 if edge.kind == 'smoothstep' else 0,
        },
    }


def build_canvas_options(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    selected_id: Optional[str] = None,
    viewport: Tuple[float, float] = DEFAULT_VIEWPORT,
) -> Dict[str, Any]:
    """
    Build ECharts options for the flow canvas.

    Args:
        nodes: Graph nodes in insertion order
        edges: Graph edges in insertion order
        selected_id: Id of the selected node, highlighted with a blue border
        viewport: Canvas (width, height) in pixels; non-positive sizes fall back
            to DEFAULT_VIEWPORT

    Returns:
        ECharts options dict ready for ui.echart()
    """
    width, height = viewport
    if width <= 0 or height <= 0:
        width, height = DEFAULT_VIEWPORT

    data: List[Dict[str, Any]] = []
    for node in nodes:
        renderer = NODE_RENDERERS.get(node.kind)
        if renderer is None:
            continue
        data.append(renderer(node, node.id == selected_id))

    known = {d['id'] for d in data}
    links = [edge_to_link(e) for e in edges if e.source in known and e.target in known]

    return {
        'animation': False,
        'grid': {'left': 0, 'top': 0, 'right': 0, 'bottom': 0},
        'xAxis': {'type': 'value', 'min': 0, 'max': width, 'show': False},
        'yAxis': {'type': 'value', 'min': 0, 'max': height, 'inverse': True, 'show': False},
        'series': [{
            'type': 'graph',
            'coordinateSystem': 'cartesian2d',
            'layout': 'none',
            'roam': False,
            'draggable': True,
            'data': data,
            'links': links,
            'edgeSymbol': ['none', 'arrow'],
            'edgeSymbolSize': 10,
            'emphasis': {'focus': 'adjacency'},
        }],
    }
