"""Texture registry record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from xmlforge.models.geometry import Vec2

DEFAULT = "__default"


class TextureRecord(BaseModel):
    """A decoded texture image and the pixel size used for UV math."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    image: Any
    size: Vec2 | None = None
