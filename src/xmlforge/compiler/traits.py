"""Compile ``<trait>`` elements into zero-argument trait constructors."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from xmlforge.compiler.reader import Parser
from xmlforge.compiler.traverse import children, ensure
from xmlforge.engine import traits
from xmlforge.engine.traits import SpawnCondition, Trait
from xmlforge.errors import DefinitionError
from xmlforge.models import Vec2, Vec3

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger(__name__)

Customizer = Callable[[Trait], None]

BUILTIN_TRAITS: dict[str, Callable[[], Trait]] = {
    "attach": traits.Attach,
    "climbable": traits.Climbable,
    "climber": traits.Climber,
    "contact-damage": traits.ContactDamage,
    "conveyor": traits.Conveyor,
    "death-spawn": traits.DeathSpawn,
    "death-zone": traits.DeathZone,
    "destructible": traits.Destructible,
    "disappearing": traits.Disappearing,
    "door": traits.Door,
    "elevator": traits.Elevator,
    "environment": traits.Environment,
    "fallaway": traits.Fallaway,
    "fixed-force": traits.FixedForce,
    "glow": traits.Glow,
    "headlight": traits.Headlight,
    "health": traits.Health,
    "invincibility": traits.Invincibility,
    "jump": traits.Jump,
    "lifetime": traits.Lifetime,
    "light": traits.Light,
    "light-control": traits.LightControl,
    "move": traits.Move,
    "physics": traits.Physics,
    "pickupable": traits.Pickupable,
    "projectile": traits.Projectile,
    "rotate": traits.Rotate,
    "solid": traits.Solid,
    "spawn": traits.Spawn,
    "stun": traits.Stun,
    "teleport": traits.Teleport,
    "translate": traits.Translate,
    "translating": traits.Translating,
    "weapon": traits.Weapon,
}

_RESERVED = {"name", "source"}
# Back-references set when the trait is attached.
_PROTECTED = {"host"}
_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def parse_value(raw: str) -> float | bool | str:
    if raw == "true":
        return True
    if raw == "false":
        return False
    if _NUMBER.match(raw):
        return float(raw)
    return raw


def _field_name(attr: str) -> str:
    return attr.replace("-", "_")


def _settable(trait: Trait, field: str) -> bool:
    fields = vars(trait)
    if field.startswith("_") or field in _PROTECTED or field not in fields:
        return False
    return isinstance(fields[field], bool | int | float | str)


class TraitFactory:
    """Zero-argument constructor producing a fresh, configured trait per call."""

    def __init__(
        self,
        name: str,
        base: Callable[[], Trait],
        properties: dict[str, Any],
        customizers: list[Customizer],
    ) -> None:
        self.name = name
        self.base = base
        self.properties = dict(properties)
        self._customizers = list(customizers)

    def __call__(self) -> Trait:
        trait = self.base()
        for field, value in self.properties.items():
            setattr(trait, field, value)
        for customize in self._customizers:
            customize(trait)
        return trait

    def __repr__(self) -> str:
        return f"TraitFactory({self.name!r}, properties={self.properties!r})"


class TraitCompiler(Parser):
    """Resolves a trait name and collects the overrides found on its element.

    Flat attributes are written onto same-named fields (``one-way`` becomes
    ``one_way``); attributes without a matching field are ignored. ``door``,
    ``solid`` and ``spawn`` also read structured children.
    """

    def compile(self, node: _Element) -> TraitFactory:
        ensure(node, "trait")
        name = node.get("name") or node.get("source")
        if not name:
            msg = "Trait needs a name attribute"
            raise DefinitionError(msg, node=node)

        base = self._resolve(name, node)
        template = base()
        properties: dict[str, Any] = {}
        for attr, raw in node.attrib.items():
            if attr in _RESERVED:
                continue
            field = _field_name(attr)
            if _settable(template, field):
                properties[field] = parse_value(raw)

        customizers: list[Customizer] = []
        specialize = getattr(self, f"_compile_{_field_name(name)}", None)
        if specialize is not None:
            customizers.extend(specialize(node))

        logger.debug("Compiled trait %s with %s", name, properties)
        return TraitFactory(name, base, properties, customizers)

    def compile_all(self, traits_node: _Element) -> list[TraitFactory]:
        return [self.compile(node) for node in children(traits_node, "trait")]

    def _resolve(self, name: str, node: _Element) -> Callable[[], Trait]:
        if self.loader is not None and self.loader.traits.has(name):
            return self.loader.traits.resolve(name)
        if name in BUILTIN_TRAITS:
            return BUILTIN_TRAITS[name]
        msg = f'Trait "{name}" not defined.'
        raise DefinitionError(msg, node=node)

    def _compile_door(self, node: _Element) -> list[Customizer]:
        direction_node = next(iter(children(node, "direction")), None)
        if direction_node is None:
            return []
        direction = self.get_vector2(direction_node, default=Vec2())

        def apply(trait: Trait) -> None:
            trait.direction = direction.model_copy()  # type: ignore[attr-defined]

        return [apply]

    def _compile_solid(self, node: _Element) -> list[Customizer]:
        attack = node.get("attack")
        if attack is None:
            return []
        surfaces = attack.split()
        unknown = [surface for surface in surfaces if surface not in traits.Solid.SURFACES]
        if unknown:
            msg = f"Unknown solid surface {', '.join(unknown)}"
            raise DefinitionError(msg, node=node)

        def apply(trait: Trait) -> None:
            trait.attack_accept = list(surfaces)  # type: ignore[attr-defined]

        return [apply]

    def _compile_spawn(self, node: _Element) -> list[Customizer]:
        resources = self.require_loader().resources
        conditions: list[tuple[str, Any, Vec3]] = []
        for item in children(node, "item"):
            event = item.get("event")
            object_id = item.get("object")
            if not event or not object_id:
                msg = "Spawn item needs event and object attributes"
                raise DefinitionError(msg, node=item)
            constructor = resources.get("object", object_id, node=item)
            offset_node = next(iter(children(item, "offset")), None)
            offset = Vec3()
            if offset_node is not None:
                offset = self.get_position(offset_node) or offset
            conditions.append((event, constructor, offset))

        def apply(trait: Trait) -> None:
            for event, constructor, offset in conditions:
                trait.add_condition(  # type: ignore[attr-defined]
                    SpawnCondition(event=event, constructor=constructor, offset=offset),
                )

        return [apply]
