"""Slide contracts."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import ConfigDict, Field, PositiveInt

from .base import FrozenDeckModel


class VectorContent(FrozenDeckModel):
    type: Literal["svg"] = "svg"
    markup: str


class RasterContent(FrozenDeckModel):
    model_config = ConfigDict(
        extra="forbid", populate_by_name=True, frozen=True, ser_json_bytes="base64"
    )

    type: Literal["png"] = "png"
    data: bytes
    mime: Literal["image/png"] = "image/png"


SlideContent = Annotated[
    Union[VectorContent, RasterContent], Field(discriminator="type")
]


class Slide(FrozenDeckModel):
    number: PositiveInt = Field(..., description="1-based render position")
    title: str = Field(..., description="Source file stem")
    content: SlideContent
    notes: Optional[str] = None

    @property
    def is_raster(self) -> bool:
        return isinstance(self.content, RasterContent)
