"""Compatibility and export result contracts."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .base import DeckBaseModel


class CompatibilityReport(DeckBaseModel):
    features: List[str] = Field(
        default_factory=list, description="Blacklisted features found, in scan order"
    )

    @property
    def compatible(self) -> bool:
        return not self.features

    @property
    def feature(self) -> Optional[str]:
        """The first feature that triggered rejection."""
        return self.features[0] if self.features else None


class ExportResult(DeckBaseModel):
    success: bool
    backend: str
    output_path: Optional[str] = None
    slide_count: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
