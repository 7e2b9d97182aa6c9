"""Compile ``<animation>`` elements into frame timelines."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from xmlforge.compiler.reader import Parser
from xmlforge.errors import DefinitionError
from xmlforge.models import Animation, UVCoords, Vec2

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def loop_count(loop_node: _Element) -> int:
    """Repetitions of a ``<loop>``; absent, non-numeric or zero counts mean 1."""
    match = _LEADING_INT.match(loop_node.get("count", ""))
    if match is None:
        return 1
    return int(match.group(1)) or 1


class AnimationCompiler(Parser):
    """Builds an :class:`Animation` from ``<frame>`` and ``<loop>`` elements.

    Frame size falls back from the frame to its parent (``<loop>`` or
    ``<animation>``) and then to the grandparent. Frames inside a ``<loop>``
    are emitted once as they are read and repeated ``count - 1`` more times
    when the loop closes. Nested loops are not supported.
    """

    def compile(self, node: _Element, texture_size: Vec2 | None) -> Animation:
        animation = Animation(id=node.get("id"), group=node.get("group") or None)
        if texture_size is None or texture_size.x <= 0 or texture_size.y <= 0:
            msg = f'Animation "{animation.id}" needs a texture with a known size'
            raise DefinitionError(msg, node=node)

        frame_nodes = list(node.iter("frame"))
        pending: list[tuple[UVCoords, float | None]] = []

        for index, frame_node in enumerate(frame_nodes):
            offset = self.get_vector2(frame_node, "x", "y", default=Vec2())
            size = self._frame_size(frame_node, animation)
            uv = UVCoords.from_pixels(offset, size, texture_size)
            duration = self.get_float(frame_node, "duration") or None
            animation.add_frame(uv, duration)

            parent = frame_node.getparent()
            if parent is None or parent.tag != "loop":
                continue

            pending.append((uv, duration))
            following = frame_nodes[index + 1].getparent() if index + 1 < len(frame_nodes) else None
            if following is not parent:
                for _ in range(loop_count(parent) - 1):
                    for loop_uv, loop_duration in pending:
                        animation.add_frame(loop_uv, loop_duration)
                pending = []

        logger.debug("Compiled animation %s (%d frames)", animation.id, animation.length)
        return animation

    def _frame_size(self, frame_node: _Element, animation: Animation) -> Vec2:
        candidate: _Element | None = frame_node
        for _ in range(3):
            if candidate is None:
                break
            size = self.get_vector2(candidate, "w", "h")
            if size is not None:
                if size.x <= 0 or size.y <= 0:
                    msg = f'Frame size must be positive in animation "{animation.id}"'
                    raise DefinitionError(msg, node=frame_node)
                return size
            candidate = candidate.getparent()

        msg = f'Frame size not defined in animation "{animation.id}"'
        raise DefinitionError(msg, node=frame_node)
