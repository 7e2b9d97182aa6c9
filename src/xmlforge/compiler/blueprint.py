"""Blueprints and the constructors synthesized from them."""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import TYPE_CHECKING, Any

from xmlforge.engine import CollisionCircle, CollisionRect, Entity, Material, Model
from xmlforge.errors import MissingDefaultWarning
from xmlforge.models import DEFAULT

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.compiler.events import EventBinding
    from xmlforge.compiler.router import AnimationRouter
    from xmlforge.compiler.sequences import SequenceDef
    from xmlforge.compiler.traits import TraitFactory
    from xmlforge.engine import PlaneGeometry, UVAnimator
    from xmlforge.models import Animation, TextureRecord

logger = logging.getLogger(__name__)


@dataclass
class Blueprint:
    """Fully resolved description of one ``<entity>``/``<object>``."""

    id: str
    base: Callable[[], Entity]
    animations: Mapping[str, Animation]
    textures: Mapping[str, TextureRecord]
    geometries: list[PlaneGeometry] = field(default_factory=list)
    animators: list[UVAnimator] = field(default_factory=list)
    traits: list[TraitFactory] = field(default_factory=list)
    collision: list[CollisionRect | CollisionCircle] = field(default_factory=list)
    audio: dict[str, Any] = field(default_factory=dict)
    events: list[EventBinding] = field(default_factory=list)
    sequences: list[SequenceDef] = field(default_factory=list)
    animation_router: AnimationRouter | None = None


class EntityFactory:
    """Zero-argument constructor built from a :class:`Blueprint`.

    Every call returns an independent instance: geometry, animators and
    traits are created fresh while animations, textures and audio are shared.
    """

    def __init__(self, blueprint: Blueprint) -> None:
        if DEFAULT not in blueprint.textures:
            logger.warning("No default texture on blueprint %s", blueprint.id)
            warnings.warn(
                f"No default texture on blueprint {blueprint.id}",
                MissingDefaultWarning,
                stacklevel=2,
            )
        self._blueprint = blueprint
        self.__name__ = blueprint.id

    @property
    def id(self) -> str:
        return self._blueprint.id

    @property
    def blueprint(self) -> Blueprint:
        return self._blueprint

    def __call__(self) -> Entity:
        blueprint = self._blueprint
        entity = blueprint.base()
        entity.name = blueprint.id

        entity.audio.update(blueprint.audio)
        entity.animations.update(blueprint.animations)
        entity.textures.update(blueprint.textures)

        if blueprint.animation_router is not None:
            entity.route_animation = blueprint.animation_router.bind(entity)

        if blueprint.geometries:
            geometry = blueprint.geometries[0].clone()
            entity.set_model(Model(geometry, Material(transparent=True, double_sided=True)))
            if DEFAULT in entity.textures:
                entity.use_texture(DEFAULT)

            for template in blueprint.animators:
                animator = template.clone()
                animator.add_geometry(geometry)
                entity.animators.append(animator)

        for zone in blueprint.collision:
            if isinstance(zone, CollisionCircle):
                entity.add_collision_zone(zone.r, zone.x, zone.y)
            else:
                entity.add_collision_rect(zone.w, zone.h, zone.x, zone.y)

        for trait_factory in blueprint.traits:
            entity.apply_trait(trait_factory())

        for event in blueprint.events:
            entity.events.bind(event.name, partial(event.callback, entity))

        for sequence in blueprint.sequences:
            entity.sequencer.add_sequence(sequence.id, sequence.steps)

        # Initial update of all UV maps.
        entity.update_animators(0)
        return entity

    def __repr__(self) -> str:
        return f"EntityFactory({self.id!r})"


@dataclass(frozen=True)
class CompiledEntry:
    """A compiled constructor and the element it was compiled from."""

    node: _Element
    constructor: EntityFactory
