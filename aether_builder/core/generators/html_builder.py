from __future__ import annotations

"""Render a document tree to a standalone HTML file.

The builder walks committed :class:`CanvasNode` trees and produces lxml
elements, which are then serialised once inside a fixed page scaffold.  It
never modifies its input, and identical trees always produce identical text.

Output is polyglot markup: void elements are self-closing (``<img .../>``)
and every other element gets an explicit end tag, even when empty.
"""

import logging
import re
from typing import Any, Dict, Iterable, Mapping, Optional

from lxml import etree as ET

from aether_builder.core.models import CanvasNode, ElementKind
from aether_builder.core.utils import camel_to_kebab, format_style_value

__all__ = [
    "DOCUMENT_TITLE",
    "STYLING_ENGINE_URL",
    "RESET_CSS",
    "EXPORT_FILENAME",
    "KIND_TAGS",
    "VOID_TAGS",
    "build_style_attribute",
    "build_element",
    "build_document",
    "render_node",
    "generate_markup",
]

logger = logging.getLogger(__name__)

DOCUMENT_TITLE = "Aether Project"
STYLING_ENGINE_URL = "https://cdn.tailwindcss.com"
RESET_CSS = "body { margin: 0; font-family: system-ui, -apple-system, sans-serif; }"
EXPORT_FILENAME = "project.html"
_DOCTYPE = "<!DOCTYPE html>"

_K = ElementKind

KIND_TAGS: Dict[str, str] = {
    _K.CONTAINER.value: "div",
    _K.SECTION.value: "section",
    _K.GRID_ROW.value: "div",
    _K.GRID_COL.value: "div",
    _K.CARD.value: "div",
    _K.DIVIDER.value: "hr",
    _K.TEXT.value: "span",
    _K.H1.value: "h1",
    _K.H2.value: "h2",
    _K.H3.value: "h3",
    _K.PARAGRAPH.value: "p",
    _K.BLOCKQUOTE.value: "blockquote",
    _K.LINK.value: "a",
    _K.LABEL.value: "label",
    _K.BUTTON.value: "button",
    _K.INPUT.value: "input",
    _K.TEXTAREA.value: "textarea",
    _K.SELECT.value: "select",
    _K.CHECKBOX.value: "input",
    _K.RADIO.value: "input",
    _K.IMAGE.value: "img",
    _K.VIDEO.value: "div",
    _K.AVATAR.value: "img",
    _K.BADGE.value: "span",
    _K.ALERT.value: "div",
}

VOID_TAGS = frozenset({"img", "input", "hr", "br"})

# Kinds whose ``content`` property replaces any children.
_TEXT_KINDS = frozenset({
    _K.TEXT.value, _K.H1.value, _K.H2.value, _K.H3.value, _K.PARAGRAPH.value,
    _K.BLOCKQUOTE.value, _K.LINK.value, _K.LABEL.value, _K.BUTTON.value,
    _K.BADGE.value, _K.ALERT.value,
})

# Characters XML 1.0 cannot carry, even escaped, plus lone surrogates.
_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def _xml_safe(value: Any) -> str:
    return _INVALID_XML_CHARS.sub("", str(value))


def build_style_attribute(style: Mapping[str, Any]) -> str:
    """Return ``key: value; ...`` for *style*, skipping None and empty values."""
    parts = []
    for key, value in style.items():
        if value is None or value == "":
            continue
        parts.append(f"{camel_to_kebab(key)}: {format_style_value(value)}")
    return "; ".join(parts)


def _close(el: ET._Element) -> ET._Element:
    """Force an explicit end tag on a non-void element without content."""
    if el.tag not in VOID_TAGS and el.text is None and len(el) == 0:
        el.text = ""
    return el


def _set_attrs(el: ET._Element, attrs: Iterable[tuple]) -> None:
    for name, value in attrs:
        el.set(name, _xml_safe(value))


def build_element(node: CanvasNode) -> ET._Element:
    """Build the lxml element for *node* and, recursively, its children."""
    kind = node.kind
    props = node.properties
    tag = KIND_TAGS.get(kind, "div")
    style_attr = build_style_attribute(node.style)

    if kind == _K.VIDEO.value:
        wrapper = ET.Element("div")
        if style_attr:
            wrapper.set("style", _xml_safe(style_attr))
        frame = ET.SubElement(wrapper, "iframe")
        _set_attrs(frame, [
            ("src", props.get("src") or ""),
            ("width", "100%"),
            ("height", "100%"),
            ("frameborder", "0"),
            ("allowfullscreen", ""),
        ])
        _close(frame)
        return wrapper

    el = ET.Element(tag)
    extra: list = []
    content: Optional[Any] = None

    if kind in _TEXT_KINDS:
        content = props.get("content")
    if kind == _K.LINK.value:
        extra.append(("href", props.get("href") or "#"))
    elif kind == _K.ALERT.value:
        extra.append(("role", "alert"))
    elif kind == _K.IMAGE.value:
        extra.extend([("src", props.get("src") or ""), ("alt", props.get("alt") or "Image")])
    elif kind == _K.AVATAR.value:
        extra.extend([("src", props.get("src") or ""), ("alt", props.get("alt") or "Avatar")])
    elif kind in (_K.INPUT.value, _K.TEXTAREA.value):
        extra.append(("placeholder", props.get("placeholder") or ""))
    elif kind in (_K.CHECKBOX.value, _K.RADIO.value):
        extra.append(("type", kind))
        if props.get("checked"):
            extra.append(("checked", "checked"))

    _set_attrs(el, extra)
    if style_attr:
        el.set("style", _xml_safe(style_attr))

    if tag in VOID_TAGS:
        return el

    if kind == _K.SELECT.value:
        options = props.get("options") or []
        if isinstance(options, str):
            options = [options]
        elif not isinstance(options, (list, tuple)):
            options = []
        for option in options:
            ET.SubElement(el, "option").text = _xml_safe(option)
        return _close(el)

    if content:
        el.text = _xml_safe(content)
    else:
        for child in node.children:
            el.append(build_element(child))
    return _close(el)


def render_node(node: CanvasNode) -> str:
    """Return the markup fragment for *node* without the page scaffold."""
    return ET.tostring(build_element(node), encoding="unicode")


def build_document(nodes: Iterable[CanvasNode]) -> ET._Element:
    """Wrap the elements for *nodes* in the fixed html/head/body scaffold."""
    html = ET.Element("html", lang="en")
    head = ET.SubElement(html, "head")
    ET.SubElement(head, "meta", charset="UTF-8")
    ET.SubElement(head, "meta", name="viewport", content="width=device-width, initial-scale=1.0")
    ET.SubElement(head, "title").text = DOCUMENT_TITLE
    _close(ET.SubElement(head, "script", src=STYLING_ENGINE_URL))
    ET.SubElement(head, "style").text = RESET_CSS

    body = ET.SubElement(html, "body")
    for node in nodes:
        body.append(build_element(node))
    _close(body)
    return html


def generate_markup(nodes: Iterable[CanvasNode]) -> str:
    """Render *nodes* (normally the root's children) as a complete HTML page."""
    nodes = list(nodes)
    markup = ET.tostring(
        build_document(nodes),
        encoding="unicode",
        doctype=_DOCTYPE,
        pretty_print=True,
    )
    logger.debug("Export: rendered top_level=%d chars=%d", len(nodes), len(markup))
    return markup
