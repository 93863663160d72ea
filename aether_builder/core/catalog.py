from __future__ import annotations

"""Node template catalog: element defaults, property schemas and blocks.

Pure data.  Default payloads and block templates are read from the
``element_defaults`` and ``blocks`` configuration sections; the property
schema table lives here because it describes what the serializer and the
editing service understand for each kind.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from aether_builder.config import ConfigManager
from aether_builder.core.models import ElementKind, is_valid_kind

__all__ = [
    "KIND_SCHEMAS",
    "NodeTemplate",
    "BlockTemplate",
    "TemplateCatalog",
]

logger = logging.getLogger(__name__)

_K = ElementKind
_CONTENT = frozenset({"content"})

# Property keys that carry meaning for each kind.  Keys outside the schema
# are kept on the node but ignored by the serializer.
KIND_SCHEMAS: Dict[str, frozenset] = {
    _K.CONTAINER.value: frozenset(),
    _K.SECTION.value: frozenset(),
    _K.GRID_ROW.value: frozenset(),
    _K.GRID_COL.value: frozenset(),
    _K.CARD.value: frozenset(),
    _K.DIVIDER.value: frozenset(),
    _K.TEXT.value: _CONTENT,
    _K.H1.value: _CONTENT,
    _K.H2.value: _CONTENT,
    _K.H3.value: _CONTENT,
    _K.PARAGRAPH.value: _CONTENT,
    _K.BLOCKQUOTE.value: _CONTENT,
    _K.LINK.value: frozenset({"content", "href"}),
    _K.LABEL.value: _CONTENT,
    _K.BUTTON.value: _CONTENT,
    _K.INPUT.value: frozenset({"placeholder"}),
    _K.TEXTAREA.value: frozenset({"placeholder"}),
    _K.SELECT.value: frozenset({"options"}),
    _K.CHECKBOX.value: frozenset({"checked", "label"}),
    _K.RADIO.value: frozenset({"checked", "label"}),
    _K.IMAGE.value: frozenset({"src", "alt"}),
    _K.VIDEO.value: frozenset({"src"}),
    _K.AVATAR.value: frozenset({"src", "alt"}),
    _K.BADGE.value: _CONTENT,
    _K.ALERT.value: _CONTENT,
}


@dataclass(frozen=True)
class NodeTemplate:
    """Partial node used as a stamp; never inserted directly."""

    kind: str
    name: Optional[str] = None
    properties: Mapping[str, Any] = field(default_factory=dict)
    style: Mapping[str, Any] = field(default_factory=dict)
    children: Tuple["NodeTemplate", ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NodeTemplate":
        """Parse one template element; raises ValueError on malformed input."""
        if not isinstance(data, Mapping):
            raise ValueError(f"template element must be a mapping, got {type(data).__name__}")
        kind = data.get("kind")
        if not is_valid_kind(kind):
            raise ValueError(f"unknown element kind {kind!r}")
        properties = data.get("properties") or {}
        style = data.get("style") or {}
        if not isinstance(properties, Mapping) or not isinstance(style, Mapping):
            raise ValueError(f"properties and style of {kind!r} must be mappings")
        children = tuple(cls.from_mapping(c) for c in data.get("children") or [])
        return cls(
            kind=kind.value if isinstance(kind, ElementKind) else kind,
            name=data.get("name"),
            properties=dict(properties),
            style=dict(style),
            children=children,
        )


@dataclass(frozen=True)
class BlockTemplate:
    """A pre-composed subtree offered by the palette."""

    id: str
    category: str
    label: str
    elements: NodeTemplate


class TemplateCatalog:
    """Lookup of element defaults and block templates.

    Parameters
    ----------
    element_defaults
        Mapping ``kind -> {"properties": {...}, "style": {...}}``.
    blocks
        Parsed block templates, in palette order.
    """

    def __init__(
        self,
        element_defaults: Optional[Mapping[str, Mapping[str, Any]]] = None,
        blocks: Iterable[BlockTemplate] = (),
    ) -> None:
        self._defaults: Dict[str, Mapping[str, Any]] = dict(element_defaults or {})
        self._blocks: Dict[str, BlockTemplate] = {}
        for block in blocks:
            if block.id in self._blocks:
                logger.warning("Catalog: duplicate block id=%s ignored", block.id)
                continue
            self._blocks[block.id] = block

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "TemplateCatalog":
        """Build the catalog from the ``element_defaults`` and ``blocks`` sections."""
        config = config or ConfigManager()
        defaults = config.get_element_defaults().get("kinds") or {}
        valid_defaults = {}
        for kind, payload in defaults.items():
            if not is_valid_kind(kind):
                logger.warning("Catalog: defaults for unknown kind=%s ignored", kind)
                continue
            valid_defaults[kind] = payload or {}

        blocks: List[BlockTemplate] = []
        for raw in config.get_blocks().get("blocks") or []:
            try:
                blocks.append(
                    BlockTemplate(
                        id=str(raw["id"]),
                        category=str(raw.get("category") or "Blocks"),
                        label=str(raw.get("label") or raw["id"]),
                        elements=NodeTemplate.from_mapping(raw["elements"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Catalog: skipping malformed block %r: %s", raw, exc)
        logger.debug("Catalog: loaded kinds=%d blocks=%d", len(valid_defaults), len(blocks))
        return cls(valid_defaults, blocks)

    # ------------------------------------------------------------------
    # Element defaults
    # ------------------------------------------------------------------
    def defaults_for(self, kind: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Return fresh ``(properties, style)`` copies for a new *kind* node."""
        payload = self._defaults.get(kind) or {}
        return (
            copy.deepcopy(dict(payload.get("properties") or {})),
            copy.deepcopy(dict(payload.get("style") or {})),
        )

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------
    def get_block(self, block_id: str) -> Optional[BlockTemplate]:
        return self._blocks.get(block_id)

    @property
    def blocks(self) -> List[BlockTemplate]:
        return list(self._blocks.values())

    def blocks_by_category(self) -> Dict[str, List[BlockTemplate]]:
        """Group blocks by category, preserving palette order."""
        grouped: Dict[str, List[BlockTemplate]] = {}
        for block in self._blocks.values():
            grouped.setdefault(block.category, []).append(block)
        return grouped

    # ------------------------------------------------------------------
    # Schemas
    # ------------------------------------------------------------------
    @staticmethod
    def unknown_properties(kind: str, keys: Iterable[str]) -> List[str]:
        """Return the keys in *keys* that the schema of *kind* does not define."""
        schema = KIND_SCHEMAS.get(kind, frozenset())
        return sorted(k for k in keys if k not in schema)
