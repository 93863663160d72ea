"""Markup generators for exported documents."""

from .html_builder import build_document, generate_markup, render_node  # noqa: F401

__all__ = ["build_document", "generate_markup", "render_node"]
