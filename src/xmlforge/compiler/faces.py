"""Compile ``<face>`` elements into UV animators."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from xmlforge.compiler.reader import Parser
from xmlforge.engine import UVAnimator
from xmlforge.errors import DefinitionError

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.models import Animation

_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*(?:/\s*(\d+))?\s*$")


def parse_indices(node: _Element) -> list[int]:
    """Quad indices from ``index="0,1,5"`` and/or ``range="0-30/2"`` (inclusive)."""
    indices: list[int] = []
    listed = node.get("index")
    if listed:
        try:
            indices.extend(int(part) for part in listed.split(",") if part.strip())
        except ValueError:
            msg = f"Invalid face index list {listed!r}"
            raise DefinitionError(msg, node=node) from None
    spans = node.get("range")
    if spans:
        for span in spans.split(","):
            match = _RANGE.match(span)
            if match is None:
                msg = f"Invalid face range {span!r}"
                raise DefinitionError(msg, node=node)
            start, end, step = match.groups()
            indices.extend(range(int(start), int(end) + 1, int(step or 1)))
    return indices or [0]


class FaceCompiler(Parser):
    def compile(
        self,
        face_nodes: Iterable[_Element],
        animations: Mapping[str, Animation],
    ) -> list[UVAnimator]:
        animators: list[UVAnimator] = []
        for node in face_nodes:
            animation_id = node.get("animation")
            if not animation_id:
                msg = "Face needs an animation attribute"
                raise DefinitionError(msg, node=node)
            if animation_id not in animations:
                msg = f'Animation "{animation_id}" not defined.'
                raise DefinitionError(msg, node=node)
            animator = UVAnimator(parse_indices(node), self.get_float(node, "offset", 0.0))
            animator.set_animation(animations[animation_id])
            animators.append(animator)
        return animators
