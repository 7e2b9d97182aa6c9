"""Compile ``<events>`` bindings and the ``<action>`` elements they run."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from xmlforge.compiler.reader import Parser
from xmlforge.compiler.traverse import children, ensure
from xmlforge.errors import DefinitionError

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

Action = Callable[[Any], None]


@dataclass(frozen=True)
class EventBinding:
    """An event name and the callback run against the host when it fires."""

    name: str
    callback: Callable[[Any], None]


def _required(node: _Element, attr: str) -> str:
    value = node.get(attr)
    if not value:
        msg = f'Action "{node.get("type")}" needs a {attr} attribute'
        raise DefinitionError(msg, node=node)
    return value


def _emit_audio(node: _Element) -> Action:
    audio_id = _required(node, "id")
    return lambda host: host.emit_audio(audio_id)


def _emit_event(node: _Element) -> Action:
    event = _required(node, "event")
    return lambda host: host.events.trigger(event)


def _play_sequence(node: _Element) -> Action:
    sequence_id = _required(node, "id")
    return lambda host: host.sequencer.play_sequence(sequence_id)


ACTIONS: dict[str, Callable[[_Element], Action]] = {
    "emit-audio": _emit_audio,
    "emit": _emit_event,
    "sequence": _play_sequence,
}


def compile_action(node: _Element) -> Action:
    kind = node.get("type")
    factory = ACTIONS.get(kind or "")
    if factory is None:
        msg = f'No action type "{kind}"'
        raise DefinitionError(msg, node=node)
    return factory(node)


def _run_all(actions: list[Action]) -> Callable[[Any], None]:
    def callback(host: Any) -> None:
        for action in actions:
            action(host)

    return callback


class EventCompiler(Parser):
    """``<events><event name="..."><action type="..."/></event></events>``."""

    def compile(self, node: _Element) -> list[EventBinding]:
        ensure(node, "events")
        bindings: list[EventBinding] = []
        for event_node in children(node, "event"):
            name = event_node.get("name")
            if not name:
                msg = "Event needs a name attribute"
                raise DefinitionError(msg, node=event_node)
            actions = [compile_action(action) for action in children(event_node, "action")]
            bindings.append(EventBinding(name=name, callback=_run_all(actions)))
            logger.debug("Compiled event %s (%d actions)", name, len(actions))
        return bindings
