"""Slide assembly: discover finalized SVGs, attach notes, pick vector or raster."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Union

from .errors import InputMissingError, InputReadError, NoSlidesError, SvgParseError
from .finalize import SVG_FINAL_DIR, IconCatalog, is_svg_file, run_passes
from .models.config import ExportConfig, FinalizeOptions
from .models.slide import RasterContent, Slide, VectorContent
from .render.rasterize import rasterize_svg
from .validate.compatibility import check_compatibility

logger = logging.getLogger(__name__)

NOTES_DIR = "notes"


def notes_candidates(slide_number: int, slide_title: str) -> List[str]:
    """Notes file names to try, most specific first."""
    return [
        f"{slide_number:02d}_{slide_title}.md",
        f"{slide_number}_{slide_title}.md",
        f"{slide_number:02d}.md",
        f"{slide_number}.md",
        f"{slide_title}.md",
    ]


def read_notes(notes_dir: Path, slide_number: int, slide_title: str) -> Optional[str]:
    """First matching notes file's text, or ``None`` when nothing matches."""
    if not notes_dir.is_dir():
        return None
    for name in notes_candidates(slide_number, slide_title):
        path = notes_dir / name
        if not path.is_file():
            continue
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InputReadError(f"Cannot read notes {path.name}: {exc}") from exc
    return None


def discover_slide_files(svg_dir: Path) -> List[Path]:
    """SVG files sorted by file name; the sort order is the slide order."""
    if not svg_dir.is_dir():
        raise InputMissingError(f"Missing {SVG_FINAL_DIR} directory: {svg_dir}")
    files = sorted((p for p in svg_dir.iterdir() if is_svg_file(p)), key=lambda p: p.name)
    if not files:
        raise NoSlidesError(f"No SVG slides found in {svg_dir}")
    return files


def build_slide(
    svg_path: Path,
    slide_number: int,
    project_root: Path,
    config: ExportConfig,
    icons: IconCatalog,
    options: Optional[FinalizeOptions] = None,
) -> Slide:
    """Transform one SVG and wrap it as vector or raster slide content."""
    title = svg_path.stem
    try:
        svg_content = svg_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise SvgParseError(f"{svg_path.name}: not UTF-8 text ({exc})") from exc
    except OSError as exc:
        raise InputReadError(f"Cannot read slide {svg_path.name}: {exc}") from exc

    try:
        transformed = run_passes(svg_content, project_root, icons, options)
    except SvgParseError as exc:
        raise SvgParseError(f"{svg_path.name}: {exc}") from exc

    report = check_compatibility(transformed)
    if report.compatible:
        content = VectorContent(markup=transformed)
    else:
        logger.debug(
            "Slide %d (%s) rasterized, incompatible features: %s",
            slide_number, title, ", ".join(report.features),
        )
        content = RasterContent(data=rasterize_svg(transformed, config.width, config.height))

    notes = read_notes(project_root / NOTES_DIR, slide_number, title)
    return Slide(number=slide_number, title=title, content=content, notes=notes)


def load_slides(
    project_root: Union[str, Path],
    config: Optional[ExportConfig] = None,
    icons: Optional[IconCatalog] = None,
    options: Optional[FinalizeOptions] = None,
    max_workers: Optional[int] = None,
) -> List[Slide]:
    """Build the ordered slide sequence for a project.

    With ``max_workers`` > 1 slides are prepared on a thread pool; the result
    keeps file-name order regardless of completion order.
    """
    project_root = Path(project_root)
    config = config or ExportConfig()
    icons = icons if icons is not None else IconCatalog.from_directory()
    files = discover_slide_files(project_root / SVG_FINAL_DIR)

    def _build(indexed) -> Slide:
        index, path = indexed
        return build_slide(path, index, project_root, config, icons, options)

    jobs = list(enumerate(files, start=1))
    if max_workers is not None and max_workers > 1 and len(jobs) > 1:
        executor = ThreadPoolExecutor(max_workers=max_workers)
        try:
            slides = list(executor.map(_build, jobs))
        except BaseException:
            # Queued slides are dropped; only the ones already running finish.
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return slides
    return [_build(job) for job in jobs]
