"""Project configuration loader."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .finalize import DEFAULT_ICONS_DIR, SVG_FINAL_DIR, SVG_OUTPUT_DIR
from .models.config import ProjectConfig
from .slides import NOTES_DIR

DEFAULT_OUTPUT_NAME = "output.pptx"
DEFAULT_LOG_NAME = "export_log.jsonl"


def _require_dir(path: Path, label: str) -> None:
    if not path.is_dir():
        raise FileNotFoundError(f"Missing {label}: {path}")


def load_config(
    project_root: Optional[Path] = None, icons_dir: Optional[Path] = None
) -> ProjectConfig:
    """Resolve the project layout with canonical defaults and validate paths.

    ``svg_final`` is not required here; slide loading reports it when missing.
    """
    root = Path(project_root or Path.cwd()).resolve()
    icons = Path(icons_dir).resolve() if icons_dir else DEFAULT_ICONS_DIR

    _require_dir(root, "project_root")
    _require_dir(icons, "icons_dir")

    return ProjectConfig(
        project_root=str(root),
        svg_output_dir=str(root / SVG_OUTPUT_DIR),
        svg_final_dir=str(root / SVG_FINAL_DIR),
        notes_dir=str(root / NOTES_DIR),
        icons_dir=str(icons),
        output_path=str(root / DEFAULT_OUTPUT_NAME),
        log_path=str(root / DEFAULT_LOG_NAME),
    )
