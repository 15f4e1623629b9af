"""
Path utilities for the flow builder.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location

External data (db/flows/, node_types.yaml, config.json) lives NEXT TO the executable, not bundled inside.
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """
    Get the application directory.

    - In development: the project root (parent of flow_builder/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    else:
        return Path(__file__).parent.parent


def get_db_dir() -> Path:
    """Get the database directory (db/)."""
    return get_app_dir() / "db"


def get_flows_dir() -> Path:
    """Get the directory where saved flow snapshots are written."""
    return get_db_dir() / "flows"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_app_dir() / "config.json"


def get_node_types_path() -> Path:
    """Get the default node template catalog (node_types.yaml)."""
    return get_app_dir() / "node_types.yaml"


def ensure_dir(path: Path) -> Path:
    """Create the directory if necessary and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path
