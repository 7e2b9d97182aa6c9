"""Scene, world, camera and game containers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from xmlforge.engine.events import EventBus, Sequencer
from xmlforge.models import CameraPath, Vec2, Vec3

if TYPE_CHECKING:
    from xmlforge.engine.entity import Entity

logger = logging.getLogger(__name__)


class Camera:
    def __init__(self) -> None:
        self.position = Vec3(z=150)
        self.smoothing = 0.0
        self.paths: list[CameraPath] = []


class World:
    """Holds placed objects and advances simulated time."""

    def __init__(self) -> None:
        self.objects: list[Entity] = []
        self.gravity = Vec2(x=0, y=-9.81)
        self.time = 0.0

    def add_object(self, obj: Entity) -> None:
        obj.world = self
        self.objects.append(obj)

    def get_object(self, id: str) -> Entity | None:
        return next((obj for obj in self.objects if obj.id == id), None)

    def simulate_time(self, dt: float) -> None:
        for obj in list(self.objects):
            obj.timeshift(dt)
        self.time += dt


class Scene:
    EVENT_START = "start"
    EVENT_END = "end"
    EVENT_AUDIO = "emit-audio"

    def __init__(self) -> None:
        self.name: str | None = None
        self.camera = Camera()
        self.world = World()
        self.audio: dict[str, Any] = {}
        self.events = EventBus()
        self.sequencer = Sequencer()

    def emit_audio(self, id: str) -> None:
        if id not in self.audio:
            logger.warning("Scene %s has no audio %r", self.name, id)
            return
        self.events.trigger(self.EVENT_AUDIO, self.audio[id])


class Game:
    """Tracks the running scene."""

    def __init__(self) -> None:
        self.scene: Scene | None = None

    def set_scene(self, scene: Scene) -> None:
        logger.info("Switching to scene %s", scene.name)
        self.scene = scene
        scene.events.trigger(Scene.EVENT_START)
