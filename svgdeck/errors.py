"""Exception hierarchy for the export engine.

Every error carries a ``kind`` so callers can decide whether to retry,
switch backend or abort without string matching.
"""

from __future__ import annotations


class SvgDeckError(Exception):
    kind = "error"


class InputMissingError(SvgDeckError):
    """A required input directory or file does not exist."""

    kind = "input_missing"


class NoSlidesError(InputMissingError):
    """The slide source directory holds no SVG files."""


class InputReadError(SvgDeckError):
    """A slide or notes file exists but cannot be read as UTF-8 text."""

    kind = "input_read"


class SvgParseError(SvgDeckError):
    kind = "parse"


class RasterizationError(SvgDeckError):
    kind = "rasterization"


class ExportError(SvgDeckError):
    """Base class for failures raised by a package backend."""

    kind = "export"


class ArchiveWriteError(ExportError):
    kind = "archive_io"


class PackageIntegrityError(ExportError):
    kind = "package_integrity"


class BackendUnavailableError(ExportError):
    kind = "backend_unavailable"


class UnknownBackendError(ExportError):
    kind = "unknown_backend"


class DelegateProtocolError(ExportError):
    """The external rendering process failed; ``diagnostics`` is verbatim."""

    kind = "delegate_protocol"

    def __init__(self, message: str, diagnostics: str = "") -> None:
        self.diagnostics = diagnostics
        if diagnostics:
            message = f"{message}\n{diagnostics}"
        super().__init__(message)
