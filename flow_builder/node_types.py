"""
Node template catalog.

The nodes panel lists one entry per template. Built-in templates cover every
NodeKind; an optional YAML file can relabel them or change their default data:

    templates:
      - type: textNode
        label: Message
        description: Send a text message
        icon: chat
        defaults:
          message: New message

Built-in templates carry no defaults, so new nodes get the store's default
message. Entries naming a type that is not a NodeKind are rejected with a
logged error, so the catalog never offers a template the graph store cannot
build.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

from flow_builder.models import NodeKind

logger = logging.getLogger(__name__)

VALID_TEMPLATE_KEYS = frozenset(['type', 'label', 'description', 'icon', 'defaults'])


@dataclass(frozen=True)
class NodeTemplate:
    kind: NodeKind
    label: str
    description: str = ""
    icon: str = "chat"
    defaults: Dict[str, Any] = field(default_factory=dict)


BUILTIN_TEMPLATES = {
    NodeKind.MESSAGE: NodeTemplate(
        kind=NodeKind.MESSAGE,
        label="Message",
        description="Send a text message",
        icon="chat",
    ),
}


def validate_template(entry: Any, index: int) -> List[str]:
    """Validate a single template entry. Returns list of error messages."""
    if not isinstance(entry, dict):
        return [f"Template {index}: must be a mapping"]

    errors = []
    if 'type' not in entry:
        errors.append(f"Template {index}: missing required 'type' property")
    elif NodeKind.from_payload(entry['type']) is None:
        errors.append(f"Template {index}: unknown type '{entry['type']}' "
                      f"(must be: {', '.join(k.value for k in NodeKind)})")

    unknown = set(entry) - VALID_TEMPLATE_KEYS
    if unknown:
        errors.append(f"Template {index}: unknown keys {sorted(unknown)}")

    if 'defaults' in entry and not isinstance(entry['defaults'], dict):
        errors.append(f"Template {index}: 'defaults' must be a mapping")

    for key in ('label', 'description', 'icon'):
        if key in entry and not isinstance(entry[key], str):
            errors.append(f"Template {index}: '{key}' must be a string")
    return errors


class NodeTypeCatalog:
    """Templates offered by the nodes panel, keyed by NodeKind."""

    def __init__(self, templates: Optional[Dict[NodeKind, NodeTemplate]] = None):
        self._templates: Dict[NodeKind, NodeTemplate] = dict(templates or BUILTIN_TEMPLATES)

    @classmethod
    def from_yaml(cls, path: Path) -> "NodeTypeCatalog":
        """
        Load templates from a YAML file on top of the built-ins.

        A missing or unparsable file, or one whose 'templates' is not a list,
        yields the built-in catalog. Invalid entries are skipped.
        """
        catalog = cls()
        path = Path(path)
        if not path.exists():
            return catalog

        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse node templates {path}: {e}")
            return catalog

        entries = (raw.get('templates') if isinstance(raw, dict) else None) or []
        if not isinstance(entries, list):
            logger.error(f"{path}: 'templates' must be a list")
            return catalog
        for i, entry in enumerate(entries):
            errors = validate_template(entry, i)
            if errors:
                for err in errors:
                    logger.error(f"{path}: {err}")
                continue
            kind = NodeKind.from_payload(entry['type'])
            base = catalog._templates.get(kind) or BUILTIN_TEMPLATES[kind]
            catalog._templates[kind] = NodeTemplate(
                kind=kind,
                label=entry.get('label', base.label),
                description=entry.get('description', base.description),
                icon=entry.get('icon', base.icon),
                defaults={**base.defaults, **entry.get('defaults', {})},
            )
        return catalog

    @property
    def templates(self) -> List[NodeTemplate]:
        return list(self._templates.values())

    def get(self, kind: NodeKind) -> Optional[NodeTemplate]:
        return self._templates.get(kind)

    def is_known(self, kind: Any) -> bool:
        kind = NodeKind.from_payload(kind)
        return kind is not None and kind in self._templates

    def default_data(self, kind: NodeKind) -> Dict[str, Any]:
        template = self._templates.get(kind)
        return dict(template.defaults) if template else {}
