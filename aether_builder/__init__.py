"""Top-level package for the Aether Builder document core.

This package hosts the UI-agnostic implementation of the page builder: the
document tree, its editing store and the HTML exporter.  Front-ends should
only depend on the public API exposed here rather than importing internal
modules directly.
"""

from .core.models import CanvasNode, DocumentContext  # re-export for convenience
from .core.store import EditorStore
from .core.generators.html_builder import generate_markup

__all__: list[str] = [
    "CanvasNode",
    "DocumentContext",
    "EditorStore",
    "generate_markup",
]
