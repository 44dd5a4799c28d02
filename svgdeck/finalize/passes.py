"""Canonical rewrite chain and the project-level finalize step."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import InputMissingError, InputReadError, SvgParseError
from ..models.config import FinalizeOptions
from .embed_icons import IconCatalog, embed_icons
from .embed_images import embed_images
from .fix_image_aspect import fix_image_aspect
from .flatten_tspan import flatten_tspan
from .rect_to_path import rect_to_path

logger = logging.getLogger(__name__)

SVG_OUTPUT_DIR = "svg_output"
SVG_FINAL_DIR = "svg_final"


def run_passes(
    svg_content: str,
    base_dir: Union[str, Path],
    icons: IconCatalog,
    options: Optional[FinalizeOptions] = None,
) -> str:
    """Apply the enabled passes in canonical order.

    Aspect fixing only sees images that are already data URIs, so a file
    embedded here gets its ratio repaired on the next run (export re-runs the
    chain over ``svg_final``).
    """
    options = options or FinalizeOptions()
    if options.fix_rounded:
        svg_content = rect_to_path(svg_content)
    if options.fix_aspect:
        svg_content = fix_image_aspect(svg_content)
    if options.embed_images:
        svg_content = embed_images(svg_content, base_dir)
    if options.embed_icons:
        svg_content = embed_icons(svg_content, icons)
    if options.flatten_text:
        svg_content = flatten_tspan(svg_content)
    return svg_content


def is_svg_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == ".svg"


def finalize_project(
    project_root: Union[str, Path],
    options: Optional[FinalizeOptions] = None,
    icons: Optional[IconCatalog] = None,
) -> List[Path]:
    """Rewrite ``svg_output/*.svg`` into ``svg_final/``; other files are skipped."""
    project_root = Path(project_root)
    svg_output = project_root / SVG_OUTPUT_DIR
    svg_final = project_root / SVG_FINAL_DIR
    if not svg_output.is_dir():
        raise InputMissingError(f"Missing {SVG_OUTPUT_DIR} directory: {svg_output}")

    icons = icons if icons is not None else IconCatalog.from_directory()
    svg_final.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for source in sorted(p for p in svg_output.iterdir() if is_svg_file(p)):
        try:
            svg_content = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SvgParseError(f"{source.name}: not UTF-8 text ({exc})") from exc
        except OSError as exc:
            raise InputReadError(f"Cannot read slide {source.name}: {exc}") from exc
        try:
            content = run_passes(svg_content, project_root, icons, options)
        except SvgParseError as exc:
            raise SvgParseError(f"{source.name}: {exc}") from exc
        target = svg_final / source.name
        target.write_text(content, encoding="utf-8")
        logger.debug("Finalized %s", target)
        written.append(target)
    return written
