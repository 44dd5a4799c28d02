"""Configuration models."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, PositiveInt, constr

from .base import DeckBaseModel, FrozenDeckModel

NonEmptyStr = constr(min_length=1)

# EMU per CSS pixel at 96 DPI.
EMU_PER_PIXEL = 9525


class ExportConfig(FrozenDeckModel):
    width: PositiveInt = Field(1280, description="Canvas width in pixels")
    height: PositiveInt = Field(720, description="Canvas height in pixels")
    enable_transitions: bool = Field(True, alias="enableTransitions")
    transition_type: Optional[NonEmptyStr] = Field("fade", alias="transitionType")

    @property
    def width_emu(self) -> int:
        return self.width * EMU_PER_PIXEL

    @property
    def height_emu(self) -> int:
        return self.height * EMU_PER_PIXEL


class ProjectConfig(DeckBaseModel):
    project_root: NonEmptyStr = Field(..., description="Project root directory")
    svg_output_dir: NonEmptyStr = Field(..., description="Raw SVG slides")
    svg_final_dir: NonEmptyStr = Field(..., description="Finalized SVG slides")
    notes_dir: NonEmptyStr = Field(..., description="Markdown speaker notes")
    icons_dir: NonEmptyStr = Field(..., description="Icon catalog directory")
    output_path: NonEmptyStr = Field(..., description="Default PPTX output path")
    log_path: NonEmptyStr = Field(..., description="Export run log (JSONL)")


class FinalizeOptions(FrozenDeckModel):
    """Per-pass switches for the SVG rewrite chain."""

    fix_rounded: bool = True
    fix_aspect: bool = True
    embed_images: bool = True
    embed_icons: bool = True
    flatten_text: bool = True
