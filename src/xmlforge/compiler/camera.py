"""Compile ``<camera>`` elements."""

from __future__ import annotations

from typing import TYPE_CHECKING

from xmlforge.compiler.reader import Parser
from xmlforge.compiler.traverse import children, ensure
from xmlforge.engine import Camera
from xmlforge.errors import DefinitionError
from xmlforge.models import CameraPath, Vec3

if TYPE_CHECKING:
    from lxml.etree import _Element


class CameraCompiler(Parser):
    def compile(self, node: _Element) -> Camera:
        ensure(node, "camera")
        camera = Camera()
        camera.smoothing = self.get_float(node, "smoothing", camera.smoothing)

        position_node = next(iter(children(node, "position")), None)
        if position_node is not None:
            camera.position = self.get_position(position_node) or camera.position

        for path_node in children(node, "path"):
            camera.paths.append(self._compile_path(path_node))
        return camera

    def _compile_path(self, node: _Element) -> CameraPath:
        window_node = next(iter(children(node, "window")), None)
        if window_node is None:
            msg = "Camera path needs a window"
            raise DefinitionError(msg, node=node)
        window = (
            Vec3(
                x=self.get_float(window_node, "x1", 0.0), y=self.get_float(window_node, "y1", 0.0)
            ),
            Vec3(
                x=self.get_float(window_node, "x2", 0.0), y=self.get_float(window_node, "y2", 0.0)
            ),
        )
        path = CameraPath(window=window)

        constraint_node = next(iter(children(node, "constraint")), None)
        if constraint_node is not None:
            path.constraint = (
                self.get_vector3(constraint_node, "x1", "y1", "z1", default=Vec3()),
                self.get_vector3(constraint_node, "x2", "y2", "z2", default=Vec3()),
            )
        return path
