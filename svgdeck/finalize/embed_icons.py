"""Icon placeholder expansion.

A placeholder such as::

    <use data-icon="rocket" x="100" y="200" width="48" height="48" fill="#0076A8"/>

is replaced by a ``<g>`` holding the icon's paths, scaled from the 16-unit
icon grid and translated into place. The fill goes on the group so every
path inherits it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from lxml import etree

from ..errors import SvgParseError
from .xml_utils import (
    XLINK_HREF,
    format_number,
    insert_before,
    iter_local,
    parse_length,
    parse_svg,
    remove_element,
    serialize_svg,
    sibling_tag,
)

logger = logging.getLogger(__name__)

ICON_BASE_SIZE = 16.0
ICON_ATTRIBUTE = "data-icon"
DEFAULT_ICONS_DIR = Path(__file__).resolve().parents[1] / "assets" / "icons"

PLACEHOLDER_ATTRIBUTES = frozenset(
    {ICON_ATTRIBUTE, "x", "y", "width", "height", "fill", "transform", "href", XLINK_HREF}
)

PathAttributes = Tuple[Tuple[str, str], ...]


def _strip_fill(attrs: Mapping[str, str]) -> PathAttributes:
    cleaned: List[Tuple[str, str]] = []
    for key, value in attrs.items():
        if key == "fill":
            continue
        if key == "style":
            declarations = [
                item.strip()
                for item in value.split(";")
                if item.strip() and item.split(":", 1)[0].strip().lower() != "fill"
            ]
            if not declarations:
                continue
            value = "; ".join(declarations)
        cleaned.append((key, value))
    return tuple(cleaned)


def extract_icon_paths(icon_svg: str) -> Tuple[PathAttributes, ...]:
    """Attributes of every ``path`` in an icon document, literal fills removed."""
    tree, _ = parse_svg(icon_svg)
    return tuple(_strip_fill(path.attrib) for path in iter_local(tree.getroot(), "path"))


class IconCatalog:
    """Read-only icon name -> path geometry table.

    Built once and handed to every slide job; nothing mutates it afterwards,
    so worker threads share it without locking.
    """

    def __init__(self, icons: Mapping[str, Sequence[PathAttributes]]) -> None:
        self._icons: Mapping[str, Tuple[PathAttributes, ...]] = MappingProxyType(
            {name: tuple(paths) for name, paths in icons.items()}
        )

    @classmethod
    def from_directory(cls, icons_dir: Union[str, Path] = DEFAULT_ICONS_DIR) -> "IconCatalog":
        icons: Dict[str, Tuple[PathAttributes, ...]] = {}
        icons_dir = Path(icons_dir)
        if not icons_dir.is_dir():
            logger.warning("Icon directory not found: %s", icons_dir)
            return cls(icons)
        for icon_path in sorted(icons_dir.iterdir()):
            if icon_path.suffix.lower() != ".svg":
                continue
            try:
                icons[icon_path.stem] = extract_icon_paths(
                    icon_path.read_text(encoding="utf-8")
                )
            except (OSError, UnicodeDecodeError, SvgParseError) as exc:
                logger.warning("Skipping icon %s: %s", icon_path.name, exc)
        logger.debug("Loaded %d icons from %s", len(icons), icons_dir)
        return cls(icons)

    def get(self, name: str) -> Optional[Tuple[PathAttributes, ...]]:
        return self._icons.get(name)

    def names(self) -> List[str]:
        return sorted(self._icons)

    def __contains__(self, name: object) -> bool:
        return name in self._icons

    def __len__(self) -> int:
        return len(self._icons)

    def __iter__(self) -> Iterator[str]:
        return iter(self._icons)


def embed_icons(svg_content: str, icons: IconCatalog) -> str:
    """Expand recognised ``<use data-icon>`` placeholders into inline groups."""
    tree, has_declaration = parse_svg(svg_content)
    changed = False
    for use in iter_local(tree.getroot(), "use"):
        name = use.get(ICON_ATTRIBUTE)
        if not name or len(use) or use.getparent() is None:
            continue
        paths = icons.get(name.strip())
        if paths is None:
            continue

        width = parse_length(use.get("width"))
        height = parse_length(use.get("height"))
        size = width if width > 0 else height if height > 0 else ICON_BASE_SIZE
        x = parse_length(use.get("x"))
        y = parse_length(use.get("y"))

        placement = (
            f"translate({format_number(x)}, {format_number(y)}) "
            f"scale({format_number(size / ICON_BASE_SIZE, digits=4)})"
        )
        own_transform = (use.get("transform") or "").strip()
        if own_transform:
            placement = f"{own_transform} {placement}"
        group = insert_before(use, "g")
        group.set("transform", placement)
        fill = use.get("fill")
        if fill is not None:
            group.set("fill", fill)
        for key, value in use.attrib.items():
            if key not in PLACEHOLDER_ATTRIBUTES:
                group.set(key, value)
        for attrs in paths:
            path = etree.SubElement(group, sibling_tag(use, "path"))
            for key, value in attrs:
                path.set(key, value)
        remove_element(use, group)
        changed = True

    if not changed:
        return svg_content
    return serialize_svg(tree, has_declaration)
