"""Content instance contract consumed by compiled constructors."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from xmlforge.engine.events import EventBus, Sequencer
from xmlforge.models import Vec2, Vec3

if TYPE_CHECKING:
    from xmlforge.engine.animator import UVAnimator
    from xmlforge.engine.geometry import Model
    from xmlforge.engine.scene import World
    from xmlforge.engine.traits import Trait
    from xmlforge.models import Animation, TextureRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollisionRect:
    w: float
    h: float
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class CollisionCircle:
    r: float
    x: float = 0.0
    y: float = 0.0


class Entity:
    """A placeable game object composed from traits, animators and collision zones."""

    EVENT_AUDIO = "emit-audio"

    def __init__(self) -> None:
        self.id: str | None = None
        self.name: str | None = None
        self.position = Vec3()
        self.direction = Vec2(x=1, y=0)
        self.model: Model | None = None
        self.world: World | None = None

        self.animations: dict[str, Animation] = {}
        self.textures: dict[str, TextureRecord] = {}
        self.audio: dict[str, Any] = {}
        self.animators: list[UVAnimator] = []
        self.collision: list[CollisionRect | CollisionCircle] = []
        self.traits: list[Trait] = []
        self.events = EventBus()
        self.sequencer = Sequencer()
        self.route_animation: Callable[[], str] | None = None

    def apply_trait(self, trait: Trait) -> None:
        if self.get_trait(trait.NAME) is not None:
            msg = f'Trait "{trait.NAME}" already applied to {self.name or self!r}'
            raise ValueError(msg)
        trait.attach(self)
        self.traits.append(trait)

    def get_trait(self, name: str) -> Trait | None:
        return next((trait for trait in self.traits if trait.NAME == name), None)

    def add_collision_rect(self, w: float, h: float, x: float = 0.0, y: float = 0.0) -> None:
        self.collision.append(CollisionRect(w=w, h=h, x=x, y=y))

    def add_collision_zone(self, r: float, x: float = 0.0, y: float = 0.0) -> None:
        self.collision.append(CollisionCircle(r=r, x=x, y=y))

    def set_model(self, model: Model) -> None:
        self.model = model

    def use_texture(self, id: str) -> None:
        if self.model is None:
            return
        self.model.material.map = self.textures[id].image

    def emit_audio(self, id: str) -> None:
        if id not in self.audio:
            logger.warning("Entity %s has no audio %r", self.name, id)
            return
        self.events.trigger(self.EVENT_AUDIO, self.audio[id])

    def update_animators(self, dt: float) -> None:
        for animator in self.animators:
            animator.update(dt)

    def timeshift(self, dt: float) -> None:
        for trait in self.traits:
            if trait.enabled:
                trait.timeshift(dt)
        self.update_animators(dt)
