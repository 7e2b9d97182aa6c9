"""UV animator: writes the current animation frame onto geometry faces."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from xmlforge.engine.geometry import PlaneGeometry
    from xmlforge.models import Animation


class UVAnimator:
    """Drives the face UVs of one or more geometries from an animation.

    ``indices`` are quad indices; quad ``i`` covers faces ``2i`` and ``2i + 1``.
    """

    def __init__(self, indices: list[int] | None = None, offset: float = 0.0) -> None:
        self.animation: Animation | None = None
        self.indices = list(indices) if indices is not None else [0]
        self.offset = offset
        self.time = 0.0
        self.geometries: list[PlaneGeometry] = []

    def set_animation(self, animation: Animation) -> None:
        if animation is not self.animation:
            self.animation = animation
            self.time = 0.0

    def add_geometry(self, geometry: PlaneGeometry) -> None:
        self.geometries.append(geometry)

    def clone(self) -> UVAnimator:
        """Copy the animation binding; geometries are not shared with the clone."""
        animator = UVAnimator(self.indices, self.offset)
        animator.animation = self.animation
        return animator

    def current_index(self) -> int:
        animation = self.animation
        if animation is None or not animation.length:
            return 0
        if animation.duration <= 0:
            return 0
        position = (self.time + self.offset) % animation.duration
        for index, frame in enumerate(animation.frames):
            if frame.duration is None:
                continue
            if position < frame.duration:
                return index
            position -= frame.duration
        return animation.length - 1

    def update(self, dt: float = 0.0) -> None:
        self.time += dt
        if self.animation is None or not self.animation.length:
            return
        triangles = self.animation.get_value(self.current_index()).triangles
        for geometry in self.geometries:
            for index in self.indices:
                face = index * 2
                if face + 1 >= geometry.face_count:
                    continue
                geometry.face_vertex_uvs[face] = list(triangles[0])
                geometry.face_vertex_uvs[face + 1] = list(triangles[1])
