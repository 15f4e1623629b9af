"""
Main NiceGUI application for the flow builder.

Renders the flow graph with ui.echart, a nodes panel to drag message templates
from, a settings panel to edit the selected node, and a save button. Every
user gesture is turned into an intent and handed to FlowEditor.dispatch; this
file never mutates the graph itself.
"""

import logging
import sys
import time

from dotenv import load_dotenv
from nicegui import ui

load_dotenv()

from flow_builder.canvas import build_canvas_options, DEFAULT_VIEWPORT, REQUESTED_EVENT_KEYS
from flow_builder.config import load_settings
from flow_builder.editor import FlowEditor
from flow_builder.events import (
    normalize_click_payload,
    resolve_node_id_from_payload,
    parse_pointer,
    position_change,
    connection_between,
)
from flow_builder.intents import (
    DropNode,
    ConnectNodes,
    SelectNode,
    ClearSelection,
    CommitEdit,
    SaveFlow,
    ApplyNodeChanges,
)
from flow_builder.node_types import NodeTypeCatalog
from flow_builder.paths import get_node_types_path
from flow_builder.persistence import create_sink
from flow_builder.placement import ViewportRect

settings = load_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)


@ui.page('/')
def main_page():
    catalog = NodeTypeCatalog.from_yaml(settings.node_types_path or get_node_types_path())
    editor = FlowEditor(settings=settings, sink=create_sink(settings), catalog=catalog)

    state = {
        'chart': None,
        'canvas': None,
        'side_panel': None,
        'drag_payload': None,
        'connect_from': None,
        'last_selection_time': 0.0,
        'viewport': DEFAULT_VIEWPORT,
    }

    def refresh_chart_ui():
        selection = editor.inspector.selection
        options = build_canvas_options(
            editor.store.nodes,
            editor.store.edges,
            selected_id=selection.node_id if selection else None,
            viewport=state['viewport'],
        )
        if state['chart']:
            state['chart'].options.clear()
            state['chart'].options.update(options)
            state['chart'].update()

    # --- Side panels ---

    def render_side_panel():
        panel = state['side_panel']
        panel.clear()
        with panel:
            if editor.inspector.selection:
                render_settings_panel()
            else:
                render_nodes_panel()

    def render_nodes_panel():
        ui.label('Nodes Panel').classes('text-lg font-semibold mb-4 text-gray-800')
        for template in catalog.templates:
            def make_dragstart(kind_value):
                def handler():
                    state['drag_payload'] = kind_value
                return handler

            with ui.card().classes(
                'w-full flex-row items-center gap-3 p-3 cursor-grab hover:bg-blue-50'
            ).props('draggable') as card:
                ui.icon(template.icon).classes('text-blue-500 text-xl')
                with ui.column().classes('gap-0'):
                    ui.label(template.label).classes('font-medium text-gray-800')
                    ui.label(template.description).classes('text-xs text-gray-500')
            card.on('dragstart', make_dragstart(template.kind.value))
            card.on('dragend', lambda: state.update(drag_payload=None))

    def render_settings_panel():
        node = editor.inspector.selected
        with ui.row().classes('w-full items-center justify-between mb-4'):
            with ui.row().classes('items-center gap-2'):
                ui.icon('settings')
                ui.label('Settings').classes('text-lg font-semibold text-gray-800')
            ui.button(icon='close', on_click=close_settings).props('flat round dense')

        ui.label('Message Text').classes('text-sm font-medium text-gray-700')
        textarea = ui.textarea(
            value=node.message if node else '',
            placeholder='Enter your message here...',
        ).classes('w-full').props('outlined rows=4')

        def commit(_=None):
            editor.dispatch(CommitEdit(message=textarea.value or ''))
            refresh_chart_ui()

        textarea.on('blur', commit)
        ui.label(
            'This message will be sent to users when they reach this node in the conversation flow.'
        ).classes('text-xs text-gray-500')

        def start_connect():
            state['connect_from'] = node.id if node else None
            ui.notify('Click a node to connect to it', position='bottom', timeout=1500)

        ui.button('Connect to...', icon='arrow_downward', on_click=start_connect).props('outline').classes('mt-2')

    def close_settings():
        state['connect_from'] = None
        editor.dispatch(ClearSelection())
        render_side_panel()
        refresh_chart_ui()

    # --- Canvas events ---

    async def measure_canvas():
        """Read the canvas bounding rect and keep its size as the chart viewport."""
        try:
            rect = await ui.run_javascript(
                f'return getHtmlElement({state["canvas"].id}).getBoundingClientRect().toJSON();'
            )
        except TimeoutError as e:
            logger.warning(f"Could not read canvas bounds: {e}")
            return None
        bounds = ViewportRect.from_dict(rect or {})
        if bounds.width > 0 and bounds.height > 0 and (bounds.width, bounds.height) != state['viewport']:
            state['viewport'] = (bounds.width, bounds.height)
            refresh_chart_ui()
        return bounds

    async def handle_drop(event):
        payload = state.get('drag_payload')
        state['drag_payload'] = None
        pointer = parse_pointer(event.args)
        if not payload or pointer is None:
            return
        bounds = await measure_canvas()
        if bounds is None:
            return
        node = editor.dispatch(DropNode(payload=payload, pointer=pointer, bounds=bounds))
        if node:
            refresh_chart_ui()

    def handle_chart_click(event):
        raw_payload = event.args if hasattr(event, 'args') else event
        payload = normalize_click_payload(raw_payload)
        node_id = resolve_node_id_from_payload(payload, editor.store)

        if node_id:
            state['last_selection_time'] = time.time()
            source_id = state.get('connect_from')
            if source_id:
                state['connect_from'] = None
                connection = connection_between(source_id, node_id)
                if connection and editor.dispatch(ConnectNodes(connection=connection)):
                    refresh_chart_ui()
                return
            editor.dispatch(SelectNode(node_id=node_id))
            render_side_panel()
            refresh_chart_ui()
            return

        # 'click' also fires right after 'componentClick' for the same gesture
        if time.time() - state['last_selection_time'] < 0.05:
            return
        if editor.inspector.selection:
            close_settings()

    async def handle_node_drag_end(event):
        payload = normalize_click_payload(event.args)
        node_id = resolve_node_id_from_payload(payload, editor.store)
        if not node_id:
            return
        try:
            layout = await ui.run_javascript(f'''
                const chart = getElement({state["chart"].id}).chart;
                const data = chart.getModel().getSeriesByIndex(0).getData();
                return data.getItemLayout(data.indexOfName({node_id!r}));
            ''')
        except TimeoutError as e:
            logger.warning(f"Could not read node layout: {e}")
            return
        change = position_change(node_id, layout)
        if change:
            editor.dispatch(ApplyNodeChanges(changes=(change,)))

    def handle_save():
        outcome = editor.dispatch(SaveFlow())
        ui.notify(outcome.message, type='positive' if outcome.ok else 'negative')

    # --- Layout Construction ---

    with ui.row().classes('w-full h-screen no-wrap gap-0 bg-gray-100'):
        with ui.element('div').classes('relative flex-1 h-full') as canvas:
            state['canvas'] = canvas
            ui.button('Save Changes', icon='save', on_click=handle_save).classes(
                'absolute top-4 left-4 z-10'
            )
            state['chart'] = ui.echart(build_canvas_options([], [])).classes('w-full h-full')
            state['chart'].on('componentClick', handle_chart_click, REQUESTED_EVENT_KEYS)
            state['chart'].on('click', handle_chart_click, REQUESTED_EVENT_KEYS)
            state['chart'].on('chart:mouseup', handle_node_drag_end, REQUESTED_EVENT_KEYS)
        canvas.on('dragover.prevent', lambda: None)
        canvas.on('drop.prevent', handle_drop, ['clientX', 'clientY'])

        state['side_panel'] = ui.column().classes('w-64 h-full bg-white border-l border-gray-200 p-4')

    render_side_panel()
    ui.timer(0.1, measure_canvas, once=True)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='Flow Builder',
        port=8081,
        reload=not getattr(sys, 'frozen', False),
    )
