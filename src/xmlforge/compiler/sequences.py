"""Compile ``<sequences>`` into scripted step lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from xmlforge.compiler.events import Action, compile_action
from xmlforge.compiler.reader import Parser
from xmlforge.compiler.traverse import children, ensure
from xmlforge.errors import DefinitionError

if TYPE_CHECKING:
    from lxml.etree import _Element


@dataclass(frozen=True)
class SequenceDef:
    id: str
    steps: tuple[tuple[Action, ...], ...]


class SequenceCompiler(Parser):
    def compile(self, node: _Element) -> list[SequenceDef]:
        ensure(node, "sequences")
        sequences: list[SequenceDef] = []
        for sequence_node in children(node, "sequence"):
            sequence_id = sequence_node.get("id")
            if not sequence_id:
                msg = "Sequence needs an id attribute"
                raise DefinitionError(msg, node=sequence_node)
            steps = tuple(
                tuple(compile_action(action) for action in children(step, "action"))
                for step in children(sequence_node, "step")
            )
            sequences.append(SequenceDef(id=sequence_id, steps=steps))
        return sequences
