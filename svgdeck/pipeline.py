"""Export orchestration: backend selection, slide loading and the run log."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .config import DEFAULT_LOG_NAME, DEFAULT_OUTPUT_NAME
from .errors import BackendUnavailableError, SvgDeckError, UnknownBackendError
from .export import NativeOoxmlBackend, PackageBackend, SidecarBackend
from .finalize import IconCatalog
from .logging_utils import log_event
from .models.config import ExportConfig, FinalizeOptions
from .models.report import ExportResult
from .models.slide import RasterContent
from .slides import load_slides

logger = logging.getLogger(__name__)

BACKENDS: Dict[str, Callable[..., PackageBackend]] = {
    "native": NativeOoxmlBackend,
    "pptxgen": SidecarBackend,
}


def get_backend(name: str, **kwargs: Any) -> PackageBackend:
    """Instantiate a registered backend; keyword arguments go to its constructor."""
    factory = BACKENDS.get(name)
    if factory is None:
        known = ", ".join(sorted(BACKENDS))
        raise UnknownBackendError(f"Unknown backend: {name} (known: {known})")
    return factory(**kwargs)


def check_backends(
    backend_options: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Dict[str, bool]:
    """Availability of every registered backend, keyed by registry name."""
    backend_options = backend_options or {}
    return {
        name: get_backend(name, **backend_options.get(name, {})).is_available()
        for name in BACKENDS
    }


def _default_log_path(project_root: Path) -> Optional[Path]:
    # Never create a project directory just to hold the log.
    return project_root / DEFAULT_LOG_NAME if project_root.is_dir() else None


def export_project(
    project_root: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    backend: Union[str, PackageBackend] = "native",
    config: Optional[ExportConfig] = None,
    icons: Optional[IconCatalog] = None,
    options: Optional[FinalizeOptions] = None,
    max_workers: Optional[int] = None,
    log_path: Optional[Union[str, Path]] = None,
    backend_options: Optional[Mapping[str, Any]] = None,
) -> ExportResult:
    """Export ``<project>/svg_final`` to a single package.

    Backend availability is checked before any slide is read. Every
    ``SvgDeckError`` is folded into a failed ``ExportResult`` carrying the
    error kind; other exceptions propagate.
    """
    project_root = Path(project_root)
    output_path = Path(output_path) if output_path else project_root / DEFAULT_OUTPUT_NAME
    run_log = Path(log_path) if log_path else _default_log_path(project_root)
    config = config or ExportConfig()
    backend_name = backend if isinstance(backend, str) else backend.name()

    try:
        if isinstance(backend, str):
            selected = get_backend(backend, **(backend_options or {}))
        else:
            selected = backend
        log_event(run_log, "EXPORT_START", {
            "project_root": str(project_root),
            "output_path": str(output_path),
            "backend": backend_name,
            "config": config.to_dict(),
        })
        if not selected.is_available():
            raise BackendUnavailableError(f"Backend '{backend_name}' is not available")

        slides = load_slides(project_root, config, icons, options, max_workers)
        raster_count = sum(1 for s in slides if isinstance(s.content, RasterContent))
        log_event(run_log, "SLIDES_LOADED", {
            "slide_count": len(slides),
            "raster_count": raster_count,
            "notes_count": sum(1 for s in slides if s.notes is not None),
        })

        selected.export(slides, output_path, config)
    except SvgDeckError as exc:
        logger.debug("Export failed (%s): %s", exc.kind, exc)
        log_event(run_log, "EXPORT_FAILED", {
            "backend": backend_name,
            "error_kind": exc.kind,
            "error": str(exc),
        })
        return ExportResult(
            success=False, backend=backend_name, error=str(exc), error_kind=exc.kind
        )

    log_event(run_log, "EXPORT_DONE", {
        "backend": backend_name,
        "output_path": str(output_path),
        "slide_count": len(slides),
    })
    return ExportResult(
        success=True,
        backend=backend_name,
        output_path=str(output_path),
        slide_count=len(slides),
    )
