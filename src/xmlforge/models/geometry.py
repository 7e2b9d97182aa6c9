"""Vector, rectangle and UV coordinate models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UV = tuple[float, float]


class Vec2(BaseModel):
    """2D point or size."""

    x: float = 0.0
    y: float = 0.0


class Vec3(BaseModel):
    """3D point in world coordinates."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def scaled(self, factor: float) -> Vec3:
        return Vec3(x=self.x * factor, y=self.y * factor, z=self.z * factor)


class Rect(BaseModel):
    """Axis-aligned rectangle in pixel or world units."""

    x: float = 0.0
    y: float = 0.0
    w: float
    h: float


class UVCoords(BaseModel):
    """Normalized texture-space quad sampled from a sprite sheet.

    Pixel offsets and sizes are divided by the texture size. The v axis is
    flipped so that pixel row 0 maps to ``v = 1``.
    """

    model_config = ConfigDict(frozen=True)

    u0: float
    v0: float
    u1: float
    v1: float

    @classmethod
    def from_pixels(cls, offset: Vec2, size: Vec2, texture_size: Vec2) -> UVCoords:
        return cls(
            u0=offset.x / texture_size.x,
            v0=1 - offset.y / texture_size.y,
            u1=(offset.x + size.x) / texture_size.x,
            v1=1 - (offset.y + size.y) / texture_size.y,
        )

    @property
    def triangles(self) -> list[list[UV]]:
        """The quad as two face triangles, in the engine's face-UV order."""
        return [
            [(self.u0, self.v0), (self.u0, self.v1), (self.u1, self.v0)],
            [(self.u0, self.v1), (self.u1, self.v1), (self.u1, self.v0)],
        ]


class CameraPath(BaseModel):
    """A camera window and the constraint box the camera is held inside."""

    window: tuple[Vec3, Vec3]
    constraint: tuple[Vec3, Vec3] = Field(default_factory=lambda: (Vec3(), Vec3()))
