"""Split multi-span text into independent ``<text>`` elements.

Some renderers ignore per-``<tspan>`` styling, so each span becomes its own
``<text>`` carrying the parent's attributes plus the span's overrides.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .xml_utils import (
    format_number,
    insert_before,
    iter_local,
    local_name,
    parse_length,
    parse_svg,
    remove_element,
    serialize_svg,
)

DEFAULT_FONT_SIZE = 16.0

OVERRIDE_ATTRIBUTES = (
    "x",
    "y",
    "fill",
    "font-size",
    "font-weight",
    "font-family",
    "style",
)


def _top_level_spans(text) -> List:
    spans = []
    for element in text.iterdescendants():
        if local_name(element) != "tspan":
            continue
        ancestor = element.getparent()
        while ancestor is not text and local_name(ancestor) != "tspan":
            ancestor = ancestor.getparent()
        if ancestor is text:
            spans.append(element)
    return spans


def _offset(value: Optional[str], font_size: float) -> float:
    if value is None:
        return 0.0
    text = value.strip()
    if text.endswith("em") and not text.endswith("rem"):
        return parse_length(text) * font_size
    return parse_length(text)


def _pieces(text, spans) -> List[Tuple[Dict[str, Optional[str]], str]]:
    """Text pieces with their attribute overrides.

    ``dx``/``dy`` shifts are folded into absolute ``x``/``y`` so stacked lines
    keep their baselines once the spans become siblings. A ``dx`` on a span
    without its own ``x`` depends on glyph advances and is dropped.
    """
    pieces: List[Tuple[Dict[str, Optional[str]], str]] = []
    if text.text and text.text.strip():
        pieces.append(({}, text.text.strip()))

    parent_size = parse_length(text.get("font-size")) or DEFAULT_FONT_SIZE
    start_y = parse_length(text.get("y")) + _offset(text.get("dy"), parent_size)
    current_y = start_y
    for span in spans:
        content = "".join(span.itertext())
        if span.tail and span.tail.strip():
            content += span.tail.rstrip()
        overrides = {
            key: span.get(key) for key in OVERRIDE_ATTRIBUTES if span.get(key) is not None
        }

        font_size = parse_length(span.get("font-size")) or parent_size
        if span.get("y") is not None:
            current_y = parse_length(span.get("y"))
        current_y += _offset(span.get("dy"), font_size)
        if current_y != start_y or span.get("y") is not None:
            overrides["y"] = format_number(current_y)
            overrides["dy"] = None
        if span.get("x") is not None:
            overrides["x"] = format_number(
                parse_length(span.get("x")) + _offset(span.get("dx"), font_size)
            )
            overrides["dx"] = None
        pieces.append((overrides, content))
    return pieces


def flatten_tspan(svg_content: str) -> str:
    """Emit one ``text`` per top-level ``tspan``; span-free text is untouched."""
    tree, has_declaration = parse_svg(svg_content)
    changed = False
    for text in iter_local(tree.getroot(), "text"):
        if text.getparent() is None:
            continue
        spans = _top_level_spans(text)
        if not spans:
            continue

        spacing = text.tail if text.tail and not text.tail.strip() else None
        flattened = None
        for overrides, content in _pieces(text, spans):
            flattened = insert_before(text, "text")
            for key, value in text.attrib.items():
                flattened.set(key, value)
            for key, value in overrides.items():
                if value is None:
                    flattened.attrib.pop(key, None)
                else:
                    flattened.set(key, value)
            flattened.text = content
            flattened.tail = spacing
        remove_element(text, flattened)
        changed = True

    if not changed:
        return svg_content
    return serialize_svg(tree, has_declaration)
