"""
Persistence sinks for saved flows.

A successful save hands the graph snapshot ({'nodes': [...], 'edges': [...]})
to a sink. Sinks are fire-and-forget: nothing is acknowledged or retried.

Sinks:
- LoggingSink: logs the snapshot (default)
- JsonFileSink: writes one JSON file per save under a directory

Saved file format (JSON):
{
  "saved_at": "2026-01-14T12:00:00Z",
  "flow": {"nodes": [...], "edges": [...]}
}
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, Dict, Any, List, Optional, runtime_checkable

from flow_builder.config import Settings, SINK_JSON
from flow_builder.paths import ensure_dir, get_flows_dir

logger = logging.getLogger(__name__)


@runtime_checkable
class FlowSink(Protocol):
    """Anything that can receive a saved flow snapshot."""

    def emit(self, snapshot: Dict[str, Any]) -> None:
        ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class LoggingSink:
    """Writes the snapshot to the log."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def emit(self, snapshot: Dict[str, Any]) -> None:
        self.log.info(f"Saved flow: {json.dumps(snapshot, sort_keys=True)}")


class JsonFileSink:
    """Writes each saved snapshot to its own JSON file."""

    def __init__(self, flows_dir: Optional[Path] = None):
        self.flows_dir = Path(flows_dir) if flows_dir else get_flows_dir()
        self.last_path: Optional[Path] = None

    def emit(self, snapshot: Dict[str, Any], timestamp: Optional[str] = None) -> None:
        ensure_dir(self.flows_dir)
        ts = timestamp or _now_iso()
        uid = uuid.uuid4().hex[:8]
        # replace characters not allowed in filenames (colon etc.)
        fname = f"flow_{ts}_{uid}.json".replace(":", "-")
        path = self.flows_dir / fname
        with path.open("w", encoding="utf-8") as fh:
            json.dump({"saved_at": ts, "flow": snapshot}, fh, indent=2, sort_keys=True, ensure_ascii=False)
        self.last_path = path
        logger.info(f"Saved flow to {path}")


def list_saved_flows(flows_dir: Path) -> List[Path]:
    """Saved flow files, oldest first (filenames start with the timestamp)."""
    if not flows_dir.exists():
        return []
    files = [p for p in flows_dir.iterdir() if p.is_file() and p.suffix == ".json"]
    return sorted(files, key=lambda p: p.name)


def load_flow(path: Path) -> Dict[str, Any]:
    """Read a saved flow file and return its snapshot."""
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return data.get("flow", data)


def create_sink(settings: Settings) -> FlowSink:
    """Instantiate the sink named in settings."""
    if settings.sink == SINK_JSON:
        return JsonFileSink(settings.save_dir)
    return LoggingSink()
