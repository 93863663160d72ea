"""Configuration files (YAML) and the loader that merges user overrides.

The packaged ``*.yml`` files in this folder hold the element defaults, block
templates, editor settings and logging schema.
"""

from .manager import ConfigManager

__all__ = [
    "ConfigManager",
]
