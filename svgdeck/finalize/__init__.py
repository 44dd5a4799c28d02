"""SVG rewrite passes applied before export."""

from .embed_icons import DEFAULT_ICONS_DIR, IconCatalog, embed_icons
from .embed_images import embed_images
from .fix_image_aspect import fix_image_aspect
from .flatten_tspan import flatten_tspan
from .passes import SVG_FINAL_DIR, SVG_OUTPUT_DIR, finalize_project, is_svg_file, run_passes
from .rect_to_path import rect_to_path

__all__ = [
    "DEFAULT_ICONS_DIR",
    "IconCatalog",
    "SVG_FINAL_DIR",
    "SVG_OUTPUT_DIR",
    "embed_icons",
    "embed_images",
    "finalize_project",
    "fix_image_aspect",
    "flatten_tspan",
    "is_svg_file",
    "rect_to_path",
    "run_passes",
]
