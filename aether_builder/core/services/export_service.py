from __future__ import annotations

"""Export service: write the serialized document to disk.

The only place in the core that touches the file system.  Serialization is
delegated to :mod:`aether_builder.core.generators.html_builder`; this module
decides where the file goes and turns I/O errors into results.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

from aether_builder.core.generators.html_builder import EXPORT_FILENAME, generate_markup
from aether_builder.core.models import CanvasNode, DocumentContext
from aether_builder.core.services.structure_editing_service import OperationResult

__all__ = ["ExportService"]


class ExportService:
    """Serialize a document and write it as a single HTML file."""

    def __init__(self, filename: str = EXPORT_FILENAME) -> None:
        self.filename = filename
        self.logger = logging.getLogger(f"{__name__}.ExportService")

    def render(self, source: Union[DocumentContext, CanvasNode, Iterable[CanvasNode]]) -> str:
        """Return the full page markup for *source*.

        A context or a root node contributes its children; any other iterable
        is taken as the list of top-level nodes.
        """
        if isinstance(source, DocumentContext):
            nodes = source.root.children
        elif isinstance(source, CanvasNode):
            nodes = source.children
        else:
            nodes = list(source)
        return generate_markup(nodes)

    def export(
        self,
        source: Union[DocumentContext, CanvasNode, Iterable[CanvasNode]],
        directory: Union[str, Path],
    ) -> OperationResult:
        """Write ``<directory>/project.html``; the directory is created if needed."""
        target = Path(directory) / self.filename
        self.logger.info("I/O: export start path=%s", target)
        markup = self.render(source)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(markup, encoding="utf-8")
        except OSError as exc:
            self.logger.error("I/O FAIL: export path=%s", target, exc_info=True)
            return OperationResult(False, f"Could not write {target}: {exc}", {"reason": "io_error", "path": str(target)})

        self.logger.info("I/O: export OK path=%s chars=%d", target, len(markup))
        return OperationResult(True, f"Exported to {target}.", {"path": str(target), "chars": len(markup)})
