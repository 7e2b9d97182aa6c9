"""xmlforge data models - pure Pydantic, no I/O."""

from xmlforge.models.animation import Animation, Frame
from xmlforge.models.geometry import UV, CameraPath, Rect, UVCoords, Vec2, Vec3
from xmlforge.models.texture import DEFAULT, TextureRecord

__all__ = [
    "DEFAULT",
    "UV",
    "Animation",
    "CameraPath",
    "Frame",
    "Rect",
    "TextureRecord",
    "UVCoords",
    "Vec2",
    "Vec3",
]
