from __future__ import annotations

"""Plain event records exchanged between the store and its collaborators."""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from aether_builder.core.services.structure_editing_service import OperationResult

__all__ = ["DragEndEvent", "StoreEvent"]


@dataclass(frozen=True)
class DragEndEvent:
    """End of a drag gesture on the canvas or from the palette.

    Attributes
    ----------
    active_id
        Id of the dragged node, or of the palette item for new elements.
    over_id
        Drop reference under the pointer: a node id, ``"main-canvas"`` or None.
    is_new_from_palette
        True when the drag started in the palette rather than on a node.
    palette_kind
        Element kind to create for palette drops without a block.
    block_id
        Block template to instantiate for palette drops.
    """
    active_id: str
    over_id: Optional[str]
    is_new_from_palette: bool = False
    palette_kind: Optional[str] = None
    block_id: Optional[str] = None


@dataclass(frozen=True)
class StoreEvent:
    """Notification sent to store listeners after a successful operation."""
    operation: str
    result: "OperationResult"
