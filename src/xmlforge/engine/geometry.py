"""Mesh geometry, material and model containers."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from xmlforge.models import UV, Vec3


class PlaneGeometry:
    """A segmented rectangle; each segment is two triangle faces."""

    def __init__(
        self,
        width: float,
        height: float,
        w_segments: int = 1,
        h_segments: int = 1,
    ) -> None:
        self.width = width
        self.height = height
        self.w_segments = w_segments
        self.h_segments = h_segments
        face_count = w_segments * h_segments * 2
        self.face_vertex_uvs: list[list[UV]] = [
            [(0.0, 0.0), (0.0, 0.0), (0.0, 0.0)] for _ in range(face_count)
        ]

    @property
    def face_count(self) -> int:
        return len(self.face_vertex_uvs)

    def clone(self) -> PlaneGeometry:
        return copy.deepcopy(self)


@dataclass
class Material:
    """Surface description bound to a texture image."""

    map: Any = None
    transparent: bool = True
    double_sided: bool = True
    depth_write: bool = False


@dataclass
class Model:
    """Geometry plus material, scaled in world space."""

    geometry: PlaneGeometry
    material: Material = field(default_factory=Material)
    scale: Vec3 = field(default_factory=lambda: Vec3(x=1, y=1, z=1))
