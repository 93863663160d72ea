from __future__ import annotations

"""Drop-target resolution for drag-driven reparenting.

A drag gesture reports the moved node and whatever lay under the pointer on
release: a node, the canvas background, or nothing.  This module turns that
ambiguous reference into a definite new parent.

Policy:
- The root never moves.
- A node cannot be dropped onto itself or into its own subtree.
- A container-capable node (container, section, grid-col) receives the node
  as its last child.
- Anything else (a leaf node, the canvas sentinel, an unknown id, None)
  falls back to the root, so a detached node always finds a home.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from aether_builder.core.models import CanvasNode, DocumentContext

__all__ = ["DropResolution", "MoveRejection", "ReparentResolver"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DropResolution:
    """Where a moved node lands.

    Attributes
    ----------
    parent
        Node that receives the moved subtree as its last child.
    used_fallback
        True when the drop reference did not name a container and the root
        was chosen instead.
    """
    parent: CanvasNode
    used_fallback: bool


@dataclass(frozen=True)
class MoveRejection:
    """Reason a move request must leave the tree unchanged."""
    reason: str
    message: str


class ReparentResolver:
    """Decides legality and destination of ``move_node`` requests."""

    def validate(self, context: DocumentContext, active_id: str, over_id: Optional[str]) -> Optional[MoveRejection]:
        """Return a rejection for an illegal move, or None if it may proceed."""
        if active_id == context.root.id:
            return MoveRejection("root_immutable", "The document root cannot be moved.")

        node, parent = context.find_with_parent(active_id)
        if node is None or parent is None:
            return MoveRejection("node_not_found", f"Node not found for id '{active_id}'.")

        if over_id is not None and node.contains(over_id):
            # Dropping into the moved subtree would detach the target along with it.
            return MoveRejection(
                "target_in_subtree",
                "Cannot move a node into itself or one of its descendants.",
            )
        return None

    def resolve(self, context: DocumentContext, over_id: Optional[str]) -> DropResolution:
        """Pick the new parent for a node dropped over *over_id*.

        Call after the moved subtree has been detached; the lookup then only
        sees nodes that remain in the tree.
        """
        target = context.find_node(over_id)
        if target is not None and target.is_container:
            logger.debug("Drop: target=%s kind=%s accepted", target.id, target.kind)
            return DropResolution(target, used_fallback=False)

        if target is None:
            logger.debug("Drop: over=%s not a node, falling back to root", over_id)
        else:
            logger.debug("Drop: over=%s kind=%s not a container, falling back to root", target.id, target.kind)
        return DropResolution(context.root, used_fallback=True)
