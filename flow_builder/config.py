"""
Configuration management for the flow builder.

Handles persistent configuration including:
- Which persistence sink receives saved flows
- Where JSON snapshots are written
- Node placement offsets and the default message text

Config is stored in config.json next to the executable/project root.
Environment variables (optionally loaded from .env) take priority over the file.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from flow_builder.paths import get_config_path, get_flows_dir

logger = logging.getLogger(__name__)

SINK_LOG = "log"
SINK_JSON = "json"
VALID_SINKS = frozenset([SINK_LOG, SINK_JSON])

DEFAULT_NODE_OFFSET_X = 100.0
DEFAULT_NODE_OFFSET_Y = 50.0
DEFAULT_MESSAGE = "New message"
DEFAULT_HISTORY_LIMIT = 500

ENV_SINK = "FLOW_BUILDER_SINK"
ENV_SAVE_DIR = "FLOW_BUILDER_SAVE_DIR"
ENV_LOG_LEVEL = "FLOW_BUILDER_LOG_LEVEL"
ENV_NODE_TYPES = "FLOW_BUILDER_NODE_TYPES"


@dataclass
class Settings:
    """Resolved runtime settings."""
    sink: str = SINK_LOG
    save_dir: Optional[Path] = None
    log_level: str = "INFO"
    node_types_path: Optional[Path] = None
    node_offset_x: float = DEFAULT_NODE_OFFSET_X
    node_offset_y: float = DEFAULT_NODE_OFFSET_Y
    default_message: str = DEFAULT_MESSAGE
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def node_offset(self) -> tuple:
        return (self.node_offset_x, self.node_offset_y)


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = config_path or get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning(f"Ignoring config at {config_path}: expected a JSON object")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
    return {}


def _as_float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _config_str(config: dict, key: str) -> Optional[str]:
    """Return config[key] if it is a string; warn about any other type."""
    value = config.get(key)
    if value is None or isinstance(value, str):
        return value
    logger.warning(f"Ignoring config '{key}': expected a string, got {type(value).__name__}")
    return None


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Resolve settings.

    Priority:
    1. Environment variables (FLOW_BUILDER_*)
    2. Stored in config.json
    3. Built-in defaults

    Values of the wrong type in config.json are ignored with a warning.
    """
    config = load_config(config_path)

    sink = (os.environ.get(ENV_SINK) or _config_str(config, "sink") or SINK_LOG).strip().lower()
    if sink not in VALID_SINKS:
        logger.warning(f"Unknown sink '{sink}', falling back to '{SINK_LOG}'")
        sink = SINK_LOG

    save_dir = os.environ.get(ENV_SAVE_DIR) or _config_str(config, "save_dir")
    node_types = os.environ.get(ENV_NODE_TYPES) or _config_str(config, "node_types_path")
    log_level = os.environ.get(ENV_LOG_LEVEL) or _config_str(config, "log_level") or "INFO"
    default_message = _config_str(config, "default_message")

    return Settings(
        sink=sink,
        save_dir=Path(save_dir) if save_dir else get_flows_dir(),
        log_level=log_level.upper(),
        node_types_path=Path(node_types) if node_types else None,
        node_offset_x=_as_float(config.get("node_offset_x"), DEFAULT_NODE_OFFSET_X),
        node_offset_y=_as_float(config.get("node_offset_y"), DEFAULT_NODE_OFFSET_Y),
        default_message=DEFAULT_MESSAGE if default_message is None else default_message,
        history_limit=_as_int(config.get("history_limit"), DEFAULT_HISTORY_LIMIT),
    )
