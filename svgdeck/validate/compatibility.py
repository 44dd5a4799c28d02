"""Blacklist scan deciding whether an SVG can be embedded as vector markup.

The scan is textual: a feature that is declared but unused still counts.
That trades some needless rasterization for never letting an unsupported
feature through.
"""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple

from ..models.report import CompatibilityReport

# (feature name, pattern); report order follows this list.
BLACKLIST: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("clipPath", re.compile(r"clipPath|clip-path")),
    ("mask", re.compile(r"mask")),
    ("style", re.compile(r"<(?:\w+:)?style\b")),
    ("class", re.compile(r"\bclass\s*=")),
    ("foreignObject", re.compile(r"foreignObject")),
    ("textPath", re.compile(r"textPath")),
    ("font-face", re.compile(r"font-face")),
    ("animate", re.compile(r"animate")),
    ("set", re.compile(r"<(?:\w+:)?set\b")),
    ("marker", re.compile(r"marker-(?:start|mid|end)|<(?:\w+:)?marker\b")),
)


def check_compatibility(svg_content: str) -> CompatibilityReport:
    """Report every blacklisted feature present in the markup."""
    features: List[str] = [
        name for name, pattern in BLACKLIST if pattern.search(svg_content)
    ]
    return CompatibilityReport(features=features)


def is_compatible(svg_content: str) -> bool:
    return check_compatibility(svg_content).compatible
