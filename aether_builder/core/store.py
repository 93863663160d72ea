from __future__ import annotations

"""Editor store: the single writer of the document tree.

The store owns one :class:`DocumentContext` and exposes every editing
operation as a method.  Business rules live in
:class:`StructureEditingService`; the store adds what a host application
needs around them:

- a re-entrant lock so each operation is applied as one unit,
- observer registration, with listeners called after every successful
  operation in subscription order,
- adapters for drag, click and inspector events,
- markup generation and export of the current tree.

Examples
--------
    store = EditorStore()
    unsubscribe = store.subscribe(lambda event: print(event.operation))
    store.add_node("button")
    html = store.generate_markup()
"""

import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union
from pathlib import Path

from aether_builder.config import ConfigManager
from aether_builder.core.catalog import TemplateCatalog
from aether_builder.core.events import DragEndEvent, StoreEvent
from aether_builder.core.generators.html_builder import generate_markup
from aether_builder.core.models import (
    CANVAS_ID,
    CanvasNode,
    DeviceType,
    DocumentContext,
    ElementKind,
    ROOT_ID,
    assert_tree_integrity,
)
from aether_builder.core.services.export_service import ExportService
from aether_builder.core.services.structure_editing_service import (
    OperationResult,
    StructureEditingService,
)

__all__ = ["EditorStore", "Listener"]

logger = logging.getLogger(__name__)

Listener = Callable[[StoreEvent], None]

_DEFAULT_DEVICE_WIDTHS = {
    DeviceType.DESKTOP.value: "100%",
    DeviceType.TABLET.value: "768px",
    DeviceType.MOBILE.value: "375px",
}


def build_default_context(editor_config: Optional[Dict[str, Any]] = None) -> DocumentContext:
    """Return an empty document whose root follows the ``editor.root`` settings."""
    root_cfg = (editor_config or {}).get("root") or {}
    root = CanvasNode(
        id=ROOT_ID,
        kind=ElementKind.CONTAINER.value,
        name=str(root_cfg.get("name") or "Body"),
        style=copy.deepcopy(dict(root_cfg.get("style") or {})),
    )
    return DocumentContext(root=root)


class EditorStore:
    """Holds the document and serialises access to it.

    Parameters
    ----------
    context
        Document to edit. A fresh document with an empty root is created
        when omitted.
    editing_service
        Service implementing the tree operations.
    export_service
        Service writing the exported page.
    config
        Configuration source; the shared :class:`ConfigManager` by default.
    """

    def __init__(
        self,
        context: Optional[DocumentContext] = None,
        editing_service: Optional[StructureEditingService] = None,
        export_service: Optional[ExportService] = None,
        config: Optional[ConfigManager] = None,
    ) -> None:
        config = config or ConfigManager()
        editor_cfg = config.get_editor_config()

        self._context: DocumentContext = context or build_default_context(editor_cfg)
        self.editing_service: StructureEditingService = editing_service or StructureEditingService(
            catalog=TemplateCatalog.from_config(config)
        )
        self.export_service: ExportService = export_service or ExportService()

        self._device_widths: Dict[str, str] = {
            **_DEFAULT_DEVICE_WIDTHS,
            **{str(k): str(v) for k, v in (editor_cfg.get("devices") or {}).items()},
        }
        self.verify_integrity: bool = bool(editor_cfg.get("verify_integrity", False))

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

    # ---------------------------------------------------------------------------------
    # Observers
    # ---------------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* and return a callable that removes it again."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(listener)
                except ValueError:
                    pass  # already removed

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.error("Store: listener %r failed on %s", listener, event.operation, exc_info=True)

    def _commit(self, operation: str, mutate: Callable[[], OperationResult]) -> OperationResult:
        """Run *mutate* under the lock, then verify and notify on success."""
        with self._lock:
            result = mutate()
            if result.success:
                if self.verify_integrity:
                    assert_tree_integrity(self._context.root)
                logger.debug("Store: %s committed, notifying %d listener(s)", operation, len(self._listeners))
                self._notify(StoreEvent(operation, result))
            return result

    # ---------------------------------------------------------------------------------
    # Read access
    # ---------------------------------------------------------------------------------

    @property
    def context(self) -> DocumentContext:
        return self._context

    @property
    def root(self) -> CanvasNode:
        """The live root node. Treat as read-only; use :meth:`snapshot` to keep a copy."""
        return self._context.root

    @property
    def selected_id(self) -> Optional[str]:
        return self._context.selected_id

    @property
    def selected_node(self) -> Optional[CanvasNode]:
        with self._lock:
            return self._context.find_node(self._context.selected_id)

    @property
    def device(self) -> str:
        return self._context.device

    @property
    def is_preview(self) -> bool:
        return self._context.is_preview

    def find_node(self, node_id: Optional[str]) -> Optional[CanvasNode]:
        with self._lock:
            return self._context.find_node(node_id)

    def snapshot(self) -> CanvasNode:
        """Return a detached deep copy of the whole tree."""
        with self._lock:
            return CanvasNode.from_dict(self._context.root.to_dict())

    def device_width(self, mode: Optional[str] = None) -> Optional[str]:
        """Canvas width for *mode*, or for the current device when omitted."""
        if mode is None:
            mode = self._context.device
        if isinstance(mode, DeviceType):
            mode = mode.value
        return self._device_widths.get(mode)

    # ---------------------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------------------

    def add_node(self, kind: str, parent_id: str = ROOT_ID) -> OperationResult:
        return self._commit("add_node", lambda: self.editing_service.add_node(self._context, kind, parent_id))

    def add_block(self, block_id: str, parent_id: str = ROOT_ID) -> OperationResult:
        return self._commit("add_block", lambda: self.editing_service.add_block(self._context, block_id, parent_id))

    def update_node(self, node_id: str, updates: Dict[str, Any]) -> OperationResult:
        return self._commit("update_node", lambda: self.editing_service.update_node(self._context, node_id, updates))

    def update_node_style(self, node_id: str, style_patch: Dict[str, Any]) -> OperationResult:
        return self._commit(
            "update_node_style",
            lambda: self.editing_service.update_node_style(self._context, node_id, style_patch),
        )

    def delete_node(self, node_id: str) -> OperationResult:
        return self._commit("delete_node", lambda: self.editing_service.delete_node(self._context, node_id))

    def move_node(self, active_id: str, over_id: Optional[str]) -> OperationResult:
        return self._commit("move_node", lambda: self.editing_service.move_node(self._context, active_id, over_id))

    def select_node(self, node_id: Optional[str]) -> OperationResult:
        return self._commit("select_node", lambda: self.editing_service.select_node(self._context, node_id))

    def set_device(self, device: str) -> OperationResult:
        return self._commit("set_device", lambda: self.editing_service.set_device(self._context, device))

    def set_preview(self, active: bool) -> OperationResult:
        return self._commit("set_preview", lambda: self.editing_service.set_preview(self._context, active))

    # ---------------------------------------------------------------------------------
    # Inbound events
    # ---------------------------------------------------------------------------------

    def handle_drag_end(self, event: DragEndEvent) -> OperationResult:
        """Translate the end of a drag gesture into an insert or a move.

        Palette drops create a block or element under the drop target (the
        root for the canvas background).  Node drops move the dragged node.
        Drops with no target, or onto the dragged node itself, change nothing.
        """
        if event.over_id is None:
            logger.debug("Drag: active=%s dropped outside any target, ignored", event.active_id)
            return OperationResult(False, "Dropped outside the canvas.", {"reason": "no_drop_target"})

        with self._lock:
            if event.is_new_from_palette:
                parent_id = self._context.root.id if event.over_id == CANVAS_ID else event.over_id
                if event.block_id:
                    return self.add_block(event.block_id, parent_id)
                return self.add_node(event.palette_kind, parent_id)

            if event.active_id == event.over_id:
                logger.debug("Drag: active=%s dropped on itself, ignored", event.active_id)
                return OperationResult(False, "Dropped onto itself.", {"reason": "target_in_subtree"})
            return self.move_node(event.active_id, event.over_id)

    def handle_style_edit(self, node_id: str, key: str, value: Any) -> OperationResult:
        """Apply one inspector style field change."""
        return self.update_node_style(node_id, {key: value})

    def handle_property_edit(self, node_id: str, key: str, value: Any) -> OperationResult:
        """Apply one inspector property field change."""
        return self.update_node(node_id, {"properties": {key: value}})

    def handle_selection_click(self, node_id: Optional[str]) -> OperationResult:
        """Select the clicked node; None (background click) clears the selection."""
        return self.select_node(node_id)

    # ---------------------------------------------------------------------------------
    # Outbound
    # ---------------------------------------------------------------------------------

    def generate_markup(self) -> str:
        """Serialize the current tree as a full HTML page."""
        with self._lock:
            return generate_markup(self._context.root.children)

    def export(self, directory: Union[str, Path]) -> OperationResult:
        """Write the current tree to ``project.html`` inside *directory*."""
        with self._lock:
            return self.export_service.export(self._context, directory)
