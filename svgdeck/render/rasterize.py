"""Raster fallback for slides the compatibility scan rejects."""

from __future__ import annotations

import logging
from typing import Optional

import cairosvg

from ..errors import RasterizationError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def rasterize_svg(
    svg_content: str,
    width: int,
    height: int,
    background_color: Optional[str] = None,
) -> bytes:
    """Render SVG markup to a ``width`` x ``height`` PNG.

    Raises:
        RasterizationError: cairosvg failed or produced no PNG data.
    """
    try:
        png_data = cairosvg.svg2png(
            bytestring=svg_content.encode("utf-8"),
            output_width=width,
            output_height=height,
            background_color=background_color,
        )
    except Exception as exc:  # cairosvg has no common exception base
        raise RasterizationError(f"SVG rasterization failed: {exc}") from exc

    if not png_data or not png_data.startswith(PNG_SIGNATURE):
        raise RasterizationError("SVG rasterization produced no PNG data")
    logger.debug("Rasterized SVG to %dx%d PNG (%d bytes)", width, height, len(png_data))
    return png_data
