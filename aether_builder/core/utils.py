from __future__ import annotations

"""Simple reusable helper functions.

These helpers are side-effect-free and contain no GUI or disk I/O; they can be
used across all layers of the builder.
"""

import re
import uuid
from typing import Any

__all__ = [
    "generate_node_id",
    "default_name_for_kind",
    "camel_to_kebab",
    "format_style_value",
]

_UPPER_RE = re.compile(r"([A-Z])")


def generate_node_id() -> str:
    """Generate a globally unique ID for a canvas node."""
    return f"node-{uuid.uuid4()}"


def default_name_for_kind(kind: str) -> str:
    """Return the display name a new node gets from its *kind*.

    Only the first letter is capitalised and the first dash becomes a space.

    Examples:
        >>> default_name_for_kind("grid-row")
        'Grid row'
        >>> default_name_for_kind("h1")
        'H1'
    """
    if not kind:
        return kind
    return kind[0].upper() + kind[1:].replace("-", " ", 1)


def camel_to_kebab(key: str) -> str:
    """Convert a camelCase style name to its hyphenated CSS form.

    Every capital letter is prefixed with a dash, so vendor prefixes written
    with a leading capital keep their leading dash.

    Examples:
        >>> camel_to_kebab("backgroundColor")
        'background-color'
        >>> camel_to_kebab("WebkitTransform")
        '-webkit-transform'
        >>> camel_to_kebab("margin")
        'margin'
    """
    return _UPPER_RE.sub(r"-\1", key).lower()


def format_style_value(value: Any) -> str:
    """Render a style value as CSS text (numbers keep their plain form)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
