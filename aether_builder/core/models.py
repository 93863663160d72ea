from __future__ import annotations

"""Shared data structures used across the Aether Builder core.

This module is intentionally free of UI / I/O code so that the contained
objects can be reused in any context (unit-tests, CLI, GUI, etc.).

The document is an owned recursive structure: every :class:`CanvasNode`
holds its children directly and a node lives in exactly one ``children``
list.  Relocation is always detach-then-attach, never aliasing.
"""

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from aether_builder.core.exceptions import TreeIntegrityError

__all__ = [
    "ElementKind",
    "DeviceType",
    "CanvasNode",
    "DocumentContext",
    "ROOT_ID",
    "CANVAS_ID",
    "CONTAINER_KINDS",
    "is_valid_kind",
    "collect_tree_problems",
    "assert_tree_integrity",
]

ROOT_ID = "root"
# Drop reference reported by the canvas background (empty space around nodes).
CANVAS_ID = "main-canvas"


class ElementKind(Enum):
    """Closed set of element kinds a node can take."""

    # Layout
    CONTAINER = "container"
    SECTION = "section"
    GRID_ROW = "grid-row"
    GRID_COL = "grid-col"
    CARD = "card"
    DIVIDER = "divider"
    # Typography
    TEXT = "text"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    PARAGRAPH = "paragraph"
    BLOCKQUOTE = "blockquote"
    LINK = "link"
    LABEL = "label"
    # Forms
    BUTTON = "button"
    INPUT = "input"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    # Media
    IMAGE = "image"
    VIDEO = "video"
    AVATAR = "avatar"
    # UI
    BADGE = "badge"
    ALERT = "alert"


class DeviceType(Enum):
    DESKTOP = "desktop"
    TABLET = "tablet"
    MOBILE = "mobile"


# Kinds allowed to receive arbitrary content when a node is dropped on them.
CONTAINER_KINDS = frozenset({
    ElementKind.CONTAINER.value,
    ElementKind.SECTION.value,
    ElementKind.GRID_COL.value,
})

_KIND_VALUES = frozenset(k.value for k in ElementKind)


def is_valid_kind(kind: Any) -> bool:
    """Return True if *kind* names a member of :class:`ElementKind`."""
    if isinstance(kind, ElementKind):
        return True
    return isinstance(kind, str) and kind in _KIND_VALUES


@dataclass
class CanvasNode:
    """One element of the document tree.

    Attributes
    ----------
    id
        Unique, immutable identifier.
    kind
        Element kind value (see :class:`ElementKind`).
    name
        Editable display label.
    properties
        Kind-dependent payload (content, href, src, options, ...).
    style
        Flat camelCase style map.
    children
        Ordered child nodes.
    """

    id: str
    kind: str
    name: str
    properties: Dict[str, Any] = field(default_factory=dict)
    style: Dict[str, Any] = field(default_factory=dict)
    children: List["CanvasNode"] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.kind, ElementKind):
            self.kind = self.kind.value

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    def depth_first(self) -> Iterator["CanvasNode"]:
        """Traverse the subtree depth-first, yielding self then children."""
        yield self
        for child in self.children:
            yield from child.depth_first()

    def contains(self, node_id: str) -> bool:
        """Return True if *node_id* is this node or one of its descendants."""
        return any(n.id == node_id for n in self.depth_first())

    def add_child(self, child: "CanvasNode") -> "CanvasNode":
        """Append a child node and return it for chaining."""
        self.children.append(child)
        return child

    def to_dict(self) -> Dict[str, Any]:
        """Return a detached, plain-data copy of this subtree."""
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "properties": copy.deepcopy(self.properties),
            "style": copy.deepcopy(self.style),
            "children": [c.to_dict() for c in self.children],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanvasNode":
        """Build a subtree from the output of :meth:`to_dict`."""
        return cls(
            id=data["id"],
            kind=data["kind"],
            name=data.get("name") or data["kind"],
            properties=copy.deepcopy(data.get("properties") or {}),
            style=copy.deepcopy(data.get("style") or {}),
            children=[cls.from_dict(c) for c in data.get("children") or []],
        )


@dataclass
class DocumentContext:
    """In-memory state of one edited document.

    Attributes
    ----------
    root
        The immutable body container; every other node lives under it.
    selected_id
        Id of the selected node, or None.
    device
        Device preview mode value (see :class:`DeviceType`).
    is_preview
        True while the document is shown without editing chrome.
    """

    root: CanvasNode
    selected_id: Optional[str] = None
    device: str = DeviceType.DESKTOP.value
    is_preview: bool = False

    def iter_nodes(self) -> Iterator[CanvasNode]:
        return self.root.depth_first()

    def find_node(self, node_id: Optional[str]) -> Optional[CanvasNode]:
        """Depth-first lookup of *node_id*; None when absent."""
        if node_id is None:
            return None
        for node in self.root.depth_first():
            if node.id == node_id:
                return node
        return None

    def find_with_parent(self, node_id: str) -> Tuple[Optional[CanvasNode], Optional[CanvasNode]]:
        """Return ``(node, parent)`` for *node_id*; the root has no parent."""
        if self.root.id == node_id:
            return self.root, None
        stack = [self.root]
        while stack:
            parent = stack.pop()
            for child in parent.children:
                if child.id == node_id:
                    return child, parent
                stack.append(child)
        return None, None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.root.depth_first()]


def collect_tree_problems(root: CanvasNode) -> List[str]:
    """Return human-readable invariant violations found under *root*.

    Checks id uniqueness, single ownership (no node object reachable twice)
    and kind validity.  An empty list means the tree is sound.
    """
    problems: List[str] = []
    seen_ids: Dict[str, int] = {}
    seen_objects: set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen_objects:
            problems.append(f"node {node.id!r} is reachable through more than one parent")
            # Do not descend again: a shared subtree may also be a cycle.
            continue
        seen_objects.add(id(node))
        seen_ids[node.id] = seen_ids.get(node.id, 0) + 1
        if not is_valid_kind(node.kind):
            problems.append(f"node {node.id!r} has unknown kind {node.kind!r}")
        stack.extend(node.children)
    for node_id, count in seen_ids.items():
        if count > 1:
            problems.append(f"id {node_id!r} appears {count} times")
    return problems


def assert_tree_integrity(root: CanvasNode) -> None:
    """Raise :class:`TreeIntegrityError` if *root* violates an invariant."""
    problems = collect_tree_problems(root)
    if problems:
        raise TreeIntegrityError(problems)
