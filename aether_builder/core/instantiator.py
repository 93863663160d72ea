from __future__ import annotations

"""Block instantiation: turn a template into a freshly identified subtree.

The returned subtree shares nothing with its template: every node gets a new
id and its maps are deep copies, so editing an instance can never leak back
into the catalog or into another instance.
"""

import copy
from typing import Callable, Optional

from aether_builder.core.catalog import NodeTemplate
from aether_builder.core.models import CanvasNode
from aether_builder.core.utils import default_name_for_kind, generate_node_id

__all__ = ["instantiate_template"]


def instantiate_template(
    template: NodeTemplate,
    id_factory: Optional[Callable[[], str]] = None,
) -> CanvasNode:
    """Return a deep clone of *template* with fresh ids on every node.

    The whole subtree is built before it is returned, so callers insert it
    as one unit.  ``id_factory`` defaults to :func:`generate_node_id`.
    """
    make_id = id_factory or generate_node_id
    return _clone(template, make_id)


def _clone(template: NodeTemplate, make_id: Callable[[], str]) -> CanvasNode:
    node_id = make_id()
    children = [_clone(child, make_id) for child in template.children]
    return CanvasNode(
        id=node_id,
        kind=template.kind,
        name=template.name or default_name_for_kind(template.kind),
        properties=copy.deepcopy(dict(template.properties)),
        style=copy.deepcopy(dict(template.style)),
        children=children,
    )
