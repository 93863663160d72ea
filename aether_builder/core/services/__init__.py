from __future__ import annotations

"""Editing and export services operating on a DocumentContext.

Services are instantiated directly; the store wires the default ones.
"""

from .structure_editing_service import OperationResult, StructureEditingService  # noqa: F401
from .reparent_resolver import DropResolution, ReparentResolver  # noqa: F401
from .export_service import ExportService  # noqa: F401

__all__: list[str] = [
    "OperationResult",
    "StructureEditingService",
    "DropResolution",
    "ReparentResolver",
    "ExportService",
]
