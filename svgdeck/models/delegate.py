"""Wire contract for the external rendering process."""

from __future__ import annotations

import base64
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field

from .base import DeckBaseModel
from .config import ExportConfig
from .slide import RasterContent, Slide


class DelegateContent(DeckBaseModel):
    type: Literal["svg", "png"]
    data: str = Field(..., description="SVG markup or base64 PNG")


class DelegateSlide(DeckBaseModel):
    number: int
    title: str
    content: DelegateContent
    notes: Optional[str] = None

    @classmethod
    def from_slide(cls, slide: Slide) -> "DelegateSlide":
        if isinstance(slide.content, RasterContent):
            content = DelegateContent(
                type="png", data=base64.b64encode(slide.content.data).decode("ascii")
            )
        else:
            content = DelegateContent(type="svg", data=slide.content.markup)
        return cls(
            number=slide.number, title=slide.title, content=content, notes=slide.notes
        )


class DelegateConfig(DeckBaseModel):
    width: int
    height: int
    enable_transitions: bool = Field(..., alias="enableTransitions")
    transition_type: Optional[str] = Field(None, alias="transitionType")

    @classmethod
    def from_config(cls, config: ExportConfig) -> "DelegateConfig":
        return cls(
            width=config.width,
            height=config.height,
            enable_transitions=config.enable_transitions,
            transition_type=config.transition_type,
        )


class DelegateRequest(DeckBaseModel):
    slides: List[DelegateSlide]
    output: str
    config: DelegateConfig


class DelegateResponse(DeckBaseModel):
    """Response body; extra keys (``success``, ``output``...) are tolerated."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    error: Optional[str] = None
