"""Parsing and serialization helpers shared by the SVG rewrite passes."""

from __future__ import annotations

import re
from typing import Optional, Tuple

from lxml import etree

from ..errors import SvgParseError

XLINK_NS = "http://www.w3.org/1999/xlink"
XLINK_HREF = f"{{{XLINK_NS}}}href"

_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")
_UNIT_SUFFIXES = ("rem", "px", "pt", "em", "%")


def _parser() -> etree.XMLParser:
    # One parser per call: lxml parsers are not safe to share across threads.
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
        remove_blank_text=False,
        strip_cdata=False,
    )


def parse_svg(svg_content: str) -> Tuple[etree._ElementTree, bool]:
    """Parse SVG text, returning the tree and whether it had an XML declaration."""
    has_declaration = bool(_DECLARATION_RE.match(svg_content))
    body = _DECLARATION_RE.sub("", svg_content, count=1) if has_declaration else svg_content
    try:
        root = etree.fromstring(body.strip().encode("utf-8"), _parser())
    except etree.XMLSyntaxError as exc:
        raise SvgParseError(f"Failed to parse SVG: {exc}") from exc
    return root.getroottree(), has_declaration


def serialize_svg(tree: etree._ElementTree, has_declaration: bool) -> str:
    text = etree.tostring(tree, encoding="unicode")
    if has_declaration:
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + text
    return text


def local_name(element) -> Optional[str]:
    """Tag without namespace; ``None`` for comments and processing instructions."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def sibling_tag(element, name: str) -> str:
    """Tag for a new element living in the same namespace as ``element``."""
    namespace = etree.QName(element).namespace
    return f"{{{namespace}}}{name}" if namespace else name


def iter_local(root, name: str):
    """Snapshot of all elements with the given local name, in document order."""
    return [el for el in root.iter() if local_name(el) == name]


def href_key(element) -> Optional[str]:
    """Attribute key holding the element's reference (``href`` wins over xlink)."""
    if "href" in element.attrib:
        return "href"
    if XLINK_HREF in element.attrib:
        return XLINK_HREF
    return None


def parse_length(value: Optional[str]) -> float:
    """Parse an SVG length, ignoring units; unparsable values read as 0."""
    if value is None:
        return 0.0
    text = value.strip()
    for suffix in _UNIT_SUFFIXES:
        if text.endswith(suffix):
            text = text[: -len(suffix)].strip()
            break
    try:
        return float(text)
    except ValueError:
        return 0.0


def format_number(value: float, digits: int = 2) -> str:
    """Fixed decimals with trailing zeros dropped: 10.0 -> "10", 2.50 -> "2.5"."""
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def insert_before(anchor, name: str):
    """Create an element named ``name`` just before ``anchor``.

    Built with SubElement so the new node reuses the namespace prefixes already
    in scope instead of declaring its own.
    """
    parent = anchor.getparent()
    element = etree.SubElement(parent, sibling_tag(anchor, name))
    parent.insert(parent.index(anchor), element)
    return element


def remove_element(old, tail_holder) -> None:
    """Remove ``old``, handing its tail text to ``tail_holder``."""
    tail_holder.tail = old.tail
    old.getparent().remove(old)
