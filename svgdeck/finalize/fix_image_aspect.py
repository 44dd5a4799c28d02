"""Image aspect-ratio repair.

Resizes ``<image>`` boxes to the bitmap's intrinsic ratio and centres them in
the original box, so PowerPoint's shape conversion does not stretch them.
Only base64 ``data:`` references can be measured here; external files are
left for a later run, after image embedding.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .xml_utils import (
    format_number,
    href_key,
    iter_local,
    parse_length,
    parse_svg,
    serialize_svg,
)

logger = logging.getLogger(__name__)

RATIO_TOLERANCE = 0.01


def image_size_from_data_uri(data_uri: str) -> Optional[Tuple[int, int]]:
    """Pixel size of a base64 raster data URI, or ``None`` if undecodable."""
    if not data_uri.startswith("data:"):
        return None
    header, sep, payload = data_uri.partition(",")
    if not sep or ";base64" not in header:
        return None
    try:
        raw = base64.b64decode("".join(payload.split()), validate=False)
    except (binascii.Error, ValueError):
        return None
    try:
        with Image.open(io.BytesIO(raw)) as img:
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height


def letterbox(
    x: float, y: float, width: float, height: float, img_ratio: float
) -> Tuple[float, float, float, float]:
    """Largest box of ``img_ratio`` centred inside the given box."""
    if img_ratio > width / height:
        new_height = width / img_ratio
        return x, y + (height - new_height) / 2.0, width, new_height
    new_width = height * img_ratio
    return x + (width - new_width) / 2.0, y, new_width, height


def fix_image_aspect(svg_content: str) -> str:
    """Letterbox every measurable ``image`` whose box ratio is off by >1%."""
    tree, has_declaration = parse_svg(svg_content)
    changed = False
    for image in iter_local(tree.getroot(), "image"):
        key = href_key(image)
        if key is None:
            continue
        width = parse_length(image.get("width"))
        height = parse_length(image.get("height"))
        if width <= 0 or height <= 0:
            continue
        size = image_size_from_data_uri(image.get(key))
        if size is None:
            continue

        img_ratio = size[0] / size[1]
        box_ratio = width / height
        if abs(img_ratio / box_ratio - 1.0) <= RATIO_TOLERANCE:
            continue

        new_x, new_y, new_width, new_height = letterbox(
            parse_length(image.get("x")), parse_length(image.get("y")), width, height, img_ratio
        )
        logger.debug(
            "image ratio %.3f != box ratio %.3f, resizing to %.2fx%.2f",
            img_ratio, box_ratio, new_width, new_height,
        )
        image.set("x", format_number(new_x))
        image.set("y", format_number(new_y))
        image.set("width", format_number(new_width))
        image.set("height", format_number(new_height))
        changed = True

    if not changed:
        return svg_content
    return serialize_svg(tree, has_declaration)
