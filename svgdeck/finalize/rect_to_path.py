"""Rounded rectangles to paths.

PowerPoint's "convert to shape" drops the corner radius of ``<rect rx ry>``,
so rounded corners are baked into an equivalent ``<path>`` first.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .xml_utils import (
    format_number,
    insert_before,
    iter_local,
    parse_length,
    parse_svg,
    remove_element,
    serialize_svg,
)

GEOMETRY_ATTRIBUTES = frozenset({"x", "y", "width", "height", "rx", "ry"})


def rounded_rect_path(
    x: float, y: float, width: float, height: float, rx: float, ry: float
) -> str:
    """Closed path of four edges and four clockwise quarter arcs."""
    rx = min(rx, width / 2.0)
    ry = min(ry, height / 2.0)

    x1 = x + rx
    x2 = x + width - rx
    y1 = y + ry
    y2 = y + height - ry
    right = x + width
    bottom = y + height

    f = format_number
    arc = f"A{f(rx)},{f(ry)} 0 0 1"
    return (
        f"M{f(x1)},{f(y)} H{f(x2)} {arc} {f(right)},{f(y1)} "
        f"V{f(y2)} {arc} {f(x2)},{f(bottom)} "
        f"H{f(x1)} {arc} {f(x)},{f(y2)} "
        f"V{f(y1)} {arc} {f(x1)},{f(y)} Z"
    )


def _rounded_geometry(attrs) -> Optional[Tuple[float, float, float, float, float, float]]:
    width = parse_length(attrs.get("width"))
    height = parse_length(attrs.get("height"))
    rx = parse_length(attrs.get("rx"))
    ry = parse_length(attrs.get("ry"))

    # A single radius applies to both axes.
    if rx <= 0 < ry:
        rx = ry
    elif ry <= 0 < rx:
        ry = rx

    if rx <= 0 or ry <= 0 or width <= 0 or height <= 0:
        return None
    return parse_length(attrs.get("x")), parse_length(attrs.get("y")), width, height, rx, ry


def rect_to_path(svg_content: str) -> str:
    """Replace every rounded ``rect`` with an equivalent ``path``."""
    tree, has_declaration = parse_svg(svg_content)
    changed = False
    for rect in iter_local(tree.getroot(), "rect"):
        if rect.getparent() is None:
            continue
        geometry = _rounded_geometry(rect.attrib)
        if geometry is None:
            continue

        path = insert_before(rect, "path")
        path.set("d", rounded_rect_path(*geometry))
        for key, value in rect.attrib.items():
            if key not in GEOMETRY_ATTRIBUTES:
                path.set(key, value)
        path.text = rect.text
        for child in list(rect):
            path.append(child)
        remove_element(rect, path)
        changed = True

    if not changed:
        return svg_content
    return serialize_svg(tree, has_declaration)
