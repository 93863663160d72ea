from __future__ import annotations

"""Service layer for structural edits on the in-memory document tree.

This module provides a UI-agnostic, testable service that encapsulates the
business logic for manipulating the canvas tree (inserting elements and
blocks, patching properties and style, deleting and reparenting subtrees)
plus the small editor-state setters (selection, device, preview).

Scope and guarantees:
- Operates purely in-memory on DocumentContext, no file I/O nor UI imports.
- Conservative behavior with boundary checks; invalid operations return
  OperationResult(success=False, ...) with a ``reason`` in details, never raise.
- Every operation validates fully before touching the tree, so a failed call
  leaves the document exactly as it was.

Examples
--------
Basic usage:

    service = StructureEditingService()
    result = service.add_node(ctx, "button", "root")
    if not result.success:
        print(result.message)

"""

import copy
from dataclasses import dataclass
import logging
from typing import Any, Dict, List, Mapping, Optional

from aether_builder.core.catalog import TemplateCatalog
from aether_builder.core.instantiator import instantiate_template
from aether_builder.core.models import (
    CanvasNode,
    DeviceType,
    DocumentContext,
    ElementKind,
    ROOT_ID,
    is_valid_kind,
)
from aether_builder.core.services.reparent_resolver import ReparentResolver
from aether_builder.core.utils import default_name_for_kind, generate_node_id


__all__ = ["OperationResult", "StructureEditingService"]

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "kind", "children", "properties", "style"})
_DEVICE_VALUES = frozenset(d.value for d in DeviceType)


@dataclass(frozen=True)
class OperationResult:
    """Result of a structural editing operation.

    Attributes
    ----------
    success
        Whether the operation completed successfully.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
        Failed results carry a ``reason`` key.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None


class StructureEditingService:
    """Encapsulates structural edit operations on a document tree.

    Design principles:
    - No UI dependencies, no disk I/O.
    - No exceptions for expected invalid actions; return OperationResult.
    - Lookups are depth-first searches from the document root.
    - Moves detach the subtree and attach it elsewhere; nodes are never
      shared between two parents.

    Parameters
    ----------
    catalog
        Element defaults and block templates. Loaded from configuration when
        omitted.
    resolver
        Drop-target policy used by :meth:`move_node`.
    """

    def __init__(
        self,
        catalog: Optional[TemplateCatalog] = None,
        resolver: Optional[ReparentResolver] = None,
    ) -> None:
        self._catalog = catalog if catalog is not None else TemplateCatalog.from_config()
        self._resolver = resolver or ReparentResolver()

    @property
    def catalog(self) -> TemplateCatalog:
        return self._catalog

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    def add_node(self, context: DocumentContext, kind: str, parent_id: str = ROOT_ID) -> OperationResult:
        """Append a new *kind* node with catalog defaults under *parent_id*."""
        logger.info("Edit: add_node kind=%s parent=%s", kind, parent_id)
        if not is_valid_kind(kind):
            logger.warning("Edit FAIL: add_node unknown_kind kind=%s", kind)
            return OperationResult(False, f"Unknown element kind '{kind}'.", {"reason": "unknown_kind", "kind": kind})
        if isinstance(kind, ElementKind):
            kind = kind.value

        parent = context.find_node(parent_id)
        if parent is None:
            logger.warning("Edit FAIL: add_node parent_not_found parent=%s", parent_id)
            return OperationResult(False, f"Parent not found for id '{parent_id}'.", {"reason": "parent_not_found", "parent_id": parent_id})

        properties, style = self._catalog.defaults_for(kind)
        node = CanvasNode(
            id=generate_node_id(),
            kind=kind,
            name=default_name_for_kind(kind),
            properties=properties,
            style=style,
        )
        parent.children.append(node)
        logger.info("Edit OK: add_node id=%s kind=%s parent=%s", node.id, kind, parent.id)
        return OperationResult(True, f"Added {kind}.", {"node_id": node.id, "parent_id": parent.id})

    def add_block(self, context: DocumentContext, block_id: str, parent_id: str = ROOT_ID) -> OperationResult:
        """Instantiate block *block_id* and append it under *parent_id*."""
        logger.info("Edit: add_block block=%s parent=%s", block_id, parent_id)
        block = self._catalog.get_block(block_id)
        if block is None:
            logger.warning("Edit FAIL: add_block unknown_block block=%s", block_id)
            return OperationResult(False, f"Unknown block '{block_id}'.", {"reason": "unknown_block", "block_id": block_id})

        parent = context.find_node(parent_id)
        if parent is None:
            logger.warning("Edit FAIL: add_block parent_not_found parent=%s", parent_id)
            return OperationResult(False, f"Parent not found for id '{parent_id}'.", {"reason": "parent_not_found", "parent_id": parent_id})

        subtree = instantiate_template(block.elements)
        parent.children.append(subtree)
        created = [n.id for n in subtree.depth_first()]
        logger.info("Edit OK: add_block block=%s root=%s nodes=%d", block_id, subtree.id, len(created))
        return OperationResult(
            True,
            f"Added block '{block.label}'.",
            {"node_id": subtree.id, "parent_id": parent.id, "created_ids": created},
        )

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update_node(self, context: DocumentContext, node_id: str, updates: Mapping[str, Any]) -> OperationResult:
        """Merge *updates* into the node's fields.

        ``properties`` and ``style`` are shallow-merged; ``name``, ``kind``
        and ``children`` replace the current value.  Keys that are absent are
        left untouched.  A blank name is ignored.
        """
        logger.info("Edit: update_node id=%s keys=%s", node_id, sorted(updates or {}))
        node = context.find_node(node_id)
        if node is None:
            logger.warning("Edit FAIL: update_node node_not_found id=%s", node_id)
            return OperationResult(False, f"Node not found for id '{node_id}'.", {"reason": "node_not_found", "node_id": node_id})

        updates = dict(updates or {})
        invalid = sorted(set(updates) - _UPDATABLE_FIELDS)
        if invalid:
            return self._reject_update(node_id, f"Unsupported update field(s): {', '.join(invalid)}.", fields=invalid)

        new_kind = node.kind
        if "kind" in updates:
            new_kind = updates["kind"]
            if not is_valid_kind(new_kind):
                return self._reject_update(node_id, f"Unknown element kind '{new_kind}'.", fields=["kind"])
            if isinstance(new_kind, ElementKind):
                new_kind = new_kind.value
            if node is context.root and new_kind != node.kind:
                return self._reject_update(node_id, "The document root kind cannot change.", fields=["kind"])

        new_name = node.name
        ignored: List[str] = []
        if "name" in updates:
            cleaned = " ".join(str(updates["name"] or "").split())
            if cleaned:
                new_name = cleaned
            else:
                ignored.append("name")

        patches: Dict[str, Dict[str, Any]] = {}
        for map_field in ("properties", "style"):
            if map_field not in updates:
                continue
            if not isinstance(updates[map_field], Mapping):
                return self._reject_update(node_id, f"'{map_field}' must be a mapping.", fields=[map_field])
            patch = self._copy_patch(updates[map_field])
            if patch is None:
                return self._reject_update(node_id, f"'{map_field}' holds values that cannot be copied.", fields=[map_field])
            patches[map_field] = patch

        new_children = node.children
        if "children" in updates:
            new_children, problem = self._prepare_children(context, node, updates["children"])
            if problem:
                return self._reject_update(node_id, problem, fields=["children"])

        # All checks passed: apply in one go.
        if "properties" in patches:
            node.properties = {**node.properties, **patches["properties"]}
        if "style" in patches:
            node.style = {**node.style, **patches["style"]}
        node.kind = new_kind
        node.name = new_name
        node.children = new_children

        details: Dict[str, Any] = {"node_id": node_id, "updated": sorted(set(updates) - set(ignored))}
        if ignored:
            details["ignored"] = ignored
        if "children" in updates and context.selected_id is not None and context.find_node(context.selected_id) is None:
            context.selected_id = None
            details["selection_cleared"] = True
        unknown = TemplateCatalog.unknown_properties(node.kind, (updates.get("properties") or {}).keys())
        if unknown:
            details["unknown_properties"] = unknown
            logger.warning("Edit: update_node id=%s kind=%s properties outside schema=%s", node_id, node.kind, unknown)
        logger.info("Edit OK: update_node id=%s", node_id)
        return OperationResult(True, "Updated node.", details)

    def update_node_style(self, context: DocumentContext, node_id: str, style_patch: Mapping[str, Any]) -> OperationResult:
        """Shallow-merge *style_patch* into the node's style."""
        logger.info("Edit: update_node_style id=%s keys=%s", node_id, sorted(style_patch or {}))
        node = context.find_node(node_id)
        if node is None:
            logger.warning("Edit FAIL: update_node_style node_not_found id=%s", node_id)
            return OperationResult(False, f"Node not found for id '{node_id}'.", {"reason": "node_not_found", "node_id": node_id})
        if not isinstance(style_patch, Mapping):
            return self._reject_update(node_id, "'style' must be a mapping.", fields=["style"])

        patch = self._copy_patch(style_patch)
        if patch is None:
            return self._reject_update(node_id, "'style' holds values that cannot be copied.", fields=["style"])
        node.style = {**node.style, **patch}
        logger.info("Edit OK: update_node_style id=%s", node_id)
        return OperationResult(True, "Updated style.", {"node_id": node_id, "keys": sorted(style_patch)})

    # -------------------------------------------------------------------------
    # Removal and reparenting
    # -------------------------------------------------------------------------

    def delete_node(self, context: DocumentContext, node_id: str) -> OperationResult:
        """Remove the node and its whole subtree."""
        logger.info("Edit: delete_node id=%s", node_id)
        if node_id == context.root.id:
            logger.warning("Edit FAIL: delete_node root_immutable")
            return OperationResult(False, "The document root cannot be deleted.", {"reason": "root_immutable", "node_id": node_id})

        node, parent = context.find_with_parent(node_id)
        if node is None or parent is None:
            logger.info("Edit noop: delete_node node_not_found id=%s", node_id)
            return OperationResult(False, f"Node not found for id '{node_id}'.", {"reason": "node_not_found", "node_id": node_id})

        removed_ids = [n.id for n in node.depth_first()]
        self._detach(parent, node)

        selection_cleared = context.selected_id in removed_ids
        if selection_cleared:
            context.selected_id = None

        logger.info("Edit OK: delete_node id=%s removed=%d", node_id, len(removed_ids))
        return OperationResult(
            True,
            "Deleted node.",
            {"node_id": node_id, "removed_ids": removed_ids, "selection_cleared": selection_cleared},
        )

    def move_node(self, context: DocumentContext, active_id: str, over_id: Optional[str]) -> OperationResult:
        """Reparent *active_id* according to the drop reference *over_id*.

        The subtree lands as the last child of *over_id* when that is a
        container-capable node and under the root otherwise.
        """
        logger.info("Edit: move_node active=%s over=%s", active_id, over_id)
        rejection = self._resolver.validate(context, active_id, over_id)
        if rejection is not None:
            logger.info("Edit noop: move_node %s active=%s over=%s", rejection.reason, active_id, over_id)
            return OperationResult(
                False,
                rejection.message,
                {"reason": rejection.reason, "active_id": active_id, "over_id": over_id},
            )

        node, old_parent = context.find_with_parent(active_id)
        assert node is not None and old_parent is not None  # guaranteed by validate()
        from_index = self._detach(old_parent, node)
        drop = self._resolver.resolve(context, over_id)
        drop.parent.children.append(node)

        logger.info(
            "Edit OK: move_node active=%s from=%s[%d] to=%s fallback=%s",
            active_id, old_parent.id, from_index, drop.parent.id, drop.used_fallback,
        )
        return OperationResult(
            True,
            "Moved node.",
            {
                "node_id": active_id,
                "from_parent": old_parent.id,
                "from_index": from_index,
                "to_parent": drop.parent.id,
                "to_index": len(drop.parent.children) - 1,
                "fallback": drop.used_fallback,
            },
        )

    # -------------------------------------------------------------------------
    # Editor state
    # -------------------------------------------------------------------------

    def select_node(self, context: DocumentContext, node_id: Optional[str]) -> OperationResult:
        """Select *node_id*, or clear the selection with None."""
        if node_id is None:
            previous = context.selected_id
            context.selected_id = None
            return OperationResult(True, "Selection cleared.", {"selected_id": None, "previous": previous})
        if context.find_node(node_id) is None:
            logger.info("Edit noop: select_node node_not_found id=%s", node_id)
            return OperationResult(False, f"Node not found for id '{node_id}'.", {"reason": "node_not_found", "node_id": node_id})
        context.selected_id = node_id
        return OperationResult(True, "Selected node.", {"selected_id": node_id})

    def set_device(self, context: DocumentContext, device: str) -> OperationResult:
        value = device.value if isinstance(device, DeviceType) else device
        if value not in _DEVICE_VALUES:
            logger.warning("Edit FAIL: set_device unknown_device device=%s", device)
            return OperationResult(False, f"Unknown device '{device}'.", {"reason": "unknown_device", "allowed": sorted(_DEVICE_VALUES)})
        context.device = value
        return OperationResult(True, f"Device set to {value}.", {"device": value})

    def set_preview(self, context: DocumentContext, active: bool) -> OperationResult:
        """Toggle preview mode; entering preview clears the selection."""
        context.is_preview = bool(active)
        if context.is_preview:
            context.selected_id = None
        return OperationResult(True, "Preview on." if context.is_preview else "Preview off.", {"is_preview": context.is_preview})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _detach(parent: CanvasNode, node: CanvasNode) -> int:
        """Splice *node* out of *parent* by identity and return its old index."""
        for index, child in enumerate(parent.children):
            if child is node:
                del parent.children[index]
                return index
        raise ValueError(f"node {node.id!r} is not a child of {parent.id!r}")

    @staticmethod
    def _prepare_children(context: DocumentContext, node: CanvasNode, raw_children: Any):
        """Validate a replacement children list; return ``(children, problem)``."""
        if not isinstance(raw_children, (list, tuple)):
            return None, "'children' must be a list."
        children: List[CanvasNode] = []
        for raw in raw_children:
            if not isinstance(raw, (CanvasNode, Mapping)):
                return None, f"Unsupported child type {type(raw).__name__}."
            # The tree only ever holds its own copies of caller objects.
            try:
                data = raw.to_dict() if isinstance(raw, CanvasNode) else raw
                children.append(CanvasNode.from_dict(data))
            except KeyError as exc:
                return None, f"Child is missing field {exc}."
            except (TypeError, copy.Error):
                return None, "Child holds values that cannot be copied."

        own_ids = {n.id for n in node.depth_first()}
        outside_ids = set(context.node_ids()) - own_ids
        seen: set = set()
        for child in children:
            for sub in child.depth_first():
                if not is_valid_kind(sub.kind):
                    return None, f"Unknown element kind '{sub.kind}'."
                if sub.id == node.id:
                    return None, "A node cannot contain itself."
                if sub.id in seen:
                    return None, f"Duplicate id '{sub.id}' in children."
                if sub.id in outside_ids:
                    return None, f"Id '{sub.id}' already exists elsewhere in the document."
                seen.add(sub.id)
        return children, None

    @staticmethod
    def _copy_patch(patch: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Deep-copy *patch*, or return None when a value cannot be copied."""
        try:
            return copy.deepcopy(dict(patch))
        except (TypeError, copy.Error):
            return None

    @staticmethod
    def _reject_update(node_id: str, message: str, *, fields: List[str]) -> OperationResult:
        logger.warning("Edit FAIL: update_node invalid_update id=%s fields=%s", node_id, fields)
        return OperationResult(False, message, {"reason": "invalid_update", "node_id": node_id, "fields": fields})
