"""Pydantic models for svgdeck contracts."""

from .base import DeckBaseModel, FrozenDeckModel
from .config import EMU_PER_PIXEL, ExportConfig, FinalizeOptions, ProjectConfig
from .delegate import (
    DelegateConfig,
    DelegateContent,
    DelegateRequest,
    DelegateResponse,
    DelegateSlide,
)
from .manifest import PackageManifest, Relationship
from .report import CompatibilityReport, ExportResult
from .slide import RasterContent, Slide, SlideContent, VectorContent

__all__ = [
    "DeckBaseModel",
    "FrozenDeckModel",
    "EMU_PER_PIXEL",
    "ExportConfig",
    "FinalizeOptions",
    "ProjectConfig",
    "DelegateConfig",
    "DelegateContent",
    "DelegateRequest",
    "DelegateResponse",
    "DelegateSlide",
    "PackageManifest",
    "Relationship",
    "CompatibilityReport",
    "ExportResult",
    "RasterContent",
    "Slide",
    "SlideContent",
    "VectorContent",
]
