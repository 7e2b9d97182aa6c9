"""Compile a ``<scene>`` element into a populated :class:`Scene`."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

from xmlforge.compiler.blueprint import CompiledEntry
from xmlforge.compiler.camera import CameraCompiler
from xmlforge.compiler.entity import EntityCompiler
from xmlforge.compiler.events import EventCompiler
from xmlforge.compiler.lazy import Once
from xmlforge.compiler.reader import Parser
from xmlforge.compiler.sequences import SequenceCompiler
from xmlforge.compiler.traits import TraitCompiler
from xmlforge.compiler.traverse import children, ensure, find
from xmlforge.engine import Entity, Scene
from xmlforge.engine.traits import Climbable, DeathZone, Solid
from xmlforge.errors import DefinitionError
from xmlforge.models import Vec2, Vec3

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.loader import DocumentLoader

logger = logging.getLogger(__name__)


def create_climbable() -> Entity:
    entity = Entity()
    entity.apply_trait(Climbable())
    return entity


def create_death_zone() -> Entity:
    entity = Entity()
    entity.apply_trait(DeathZone())
    return entity


def create_solid() -> Entity:
    entity = Entity()
    solid = Solid()
    solid.fixed = True
    solid.obstructs = True
    entity.apply_trait(solid)
    return entity


BEHAVIORS: dict[str, Callable[[], Entity]] = {
    "climbables": create_climbable,
    "deathzones": create_death_zone,
    "solids": create_solid,
}


@dataclass
class Placement:
    """An instance put into the world by ``<layout>``."""

    node: _Element
    constructor: Callable[[], Entity]
    instance: Entity
    source_node: _Element | None = None


class SceneCompiler(Parser):
    """Builds a :class:`Scene` from its audio, camera, events, object pools and layout.

    The scene is compiled once; :meth:`get_scene` returns the cached result
    (or re-raises the cached error) on later calls.
    """

    def __init__(self, loader: DocumentLoader, node: _Element) -> None:
        ensure(node, "scene")
        super().__init__(loader)
        self.node = node
        self.scene = Scene()
        self.objects: dict[str, CompiledEntry] = {}
        self.behaviors: list[Placement] = []
        self.layout: list[Placement] = []
        self._scene: Once[Scene] = Once(self._compile)
        self._transitions: set[asyncio.Task[None]] = set()

    async def get_scene(self) -> Scene:
        return await self._scene.get()

    async def _compile(self) -> Scene:
        self.parse_camera()
        self.parse_events()
        self.parse_behaviors()
        self.parse_gravity()
        self.parse_sequences()
        await asyncio.gather(self.parse_audio(), self.parse_objects())

        self.parse_layout()
        await self.require_loader().resource_loader.complete()

        scene = self.scene
        scene.name = self.node.get("name")
        # Settle the world so landing events and similar side effects do not
        # fire on the first frame after the scene starts.
        scene.world.simulate_time(0)
        logger.info(
            "Compiled scene %s: %d objects, %d placements, %d behaviors",
            scene.name,
            len(self.objects),
            len(self.layout),
            len(self.behaviors),
        )
        return scene

    async def parse_audio(self) -> None:
        audio_nodes = [
            audio_node
            for group in children(self.node, "audio")
            for audio_node in children(group, "*")
        ]
        for audio_node in audio_nodes:
            if not audio_node.get("id"):
                msg = "Audio element needs an id attribute"
                raise DefinitionError(msg, node=audio_node)
        clips = await asyncio.gather(*(self.get_audio(audio_node) for audio_node in audio_nodes))
        for audio_node, clip in zip(audio_nodes, clips, strict=True):
            self.scene.audio[audio_node.get("id")] = clip

    def parse_camera(self) -> None:
        camera_node = next(iter(children(self.node, "camera")), None)
        if camera_node is not None:
            self.scene.camera = CameraCompiler(self.loader).compile(camera_node)

    def parse_events(self) -> None:
        events_node = next(iter(children(self.node, "events")), None)
        if events_node is None:
            return
        self.parse_global_events(events_node)
        for binding in EventCompiler(self.loader).compile(events_node):
            self.scene.events.bind(binding.name, partial(binding.callback, self.scene))

    def parse_global_events(self, events_node: _Element) -> None:
        for node in find(events_node, "after > action, before > action"):
            when = node.getparent().tag
            kind = node.get("type")
            if when == "after" and kind == "goto-scene":
                scene_name = node.get("id")
                if not scene_name:
                    msg = "goto-scene action needs an id attribute"
                    raise DefinitionError(msg, node=node)
                self.scene.events.bind(Scene.EVENT_END, self._goto_scene(scene_name))
            else:
                msg = f"No matching event for {when} > {kind}"
                raise DefinitionError(msg, node=node)

    def _goto_scene(self, scene_name: str) -> Callable[..., None]:
        loader = self.require_loader()
        compile_loop = asyncio.get_running_loop()

        async def switch() -> None:
            scene = await loader.load_scene_by_name(scene_name)
            loader.game.set_scene(scene)

        def finished(future: asyncio.Future[None] | concurrent.futures.Future[None]) -> None:
            if future.cancelled():
                return
            exc = future.exception()
            if exc is not None:
                logger.error("Switching to scene %s failed: %s", scene_name, exc)

        def callback(*_: Any) -> None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                task = loop.create_task(switch())
                self._transitions.add(task)
                task.add_done_callback(self._transitions.discard)
                task.add_done_callback(finished)
            elif compile_loop.is_running():
                # Ended from another thread while the compiling loop still runs.
                asyncio.run_coroutine_threadsafe(switch(), compile_loop).add_done_callback(finished)
            else:
                # Synchronous game code after the compiling loop has finished.
                asyncio.run(switch())

        return callback

    async def parse_objects(self) -> None:
        loader = self.require_loader()
        pool_nodes = await asyncio.gather(
            *(loader.follow_node(node) for node in children(self.node, "objects")),
        )
        compilers = [EntityCompiler(loader, node) for node in pool_nodes]
        pools = await asyncio.gather(*(compiler.get_objects() for compiler in compilers))
        for pool in pools:
            for object_id, entry in pool.items():
                if object_id in self.objects:
                    logger.debug("Object %s redefined by a later pool", object_id)
                self.objects[object_id] = entry

    def parse_behaviors(self) -> None:
        for node in find(self.node, "layout > behaviors > * > rect"):
            placement = self.get_behavior(node)
            self.behaviors.append(placement)
            self.scene.world.add_object(placement.instance)

    def get_behavior(self, node: _Element) -> Placement:
        kind = node.getparent().tag.lower()
        factory = BEHAVIORS.get(kind)
        if factory is None:
            msg = f'Behavior "{kind}" not in behavior map'
            raise DefinitionError(msg, node=node)
        rect = self.get_rect(node)
        instance = factory()
        instance.add_collision_rect(rect.w, rect.h)
        instance.position = Vec3(x=rect.x, y=rect.y, z=0)
        return Placement(node=node, constructor=factory, instance=instance)

    def parse_gravity(self) -> None:
        gravity_node = next(iter(children(self.node, "gravity")), None)
        if gravity_node is not None:
            world = self.scene.world
            world.gravity = self.get_vector2(gravity_node, default=world.gravity)

    def parse_sequences(self) -> None:
        for sequences_node in children(self.node, "sequences"):
            for sequence in SequenceCompiler(self.loader).compile(sequences_node):
                self.scene.sequencer.add_sequence(sequence.id, sequence.steps)

    def parse_layout(self) -> None:
        trait_compiler = TraitCompiler(self.loader)
        for node in find(self.node, "layout > objects > object"):
            placement = self.parse_layout_object(node, trait_compiler)
            self.scene.world.add_object(placement.instance)
            self.layout.append(placement)

    def get_object(
        self, object_id: str | None, *, node: _Element
    ) -> CompiledEntry | Callable[[], Entity]:
        if object_id in self.objects:
            return self.objects[object_id]
        resources = self.require_loader().resources
        if object_id and resources.has("object", object_id):
            return resources.get("object", object_id)
        msg = f'Object "{object_id}" not defined.'
        raise DefinitionError(msg, node=node)

    def parse_layout_object(self, node: _Element, trait_compiler: TraitCompiler) -> Placement:
        found = self.get_object(node.get("id"), node=node)
        if isinstance(found, CompiledEntry):
            constructor, source_node = found.constructor, found.node
        else:
            constructor, source_node = found, None

        instance = constructor()
        instance.id = node.get("instance-id")
        instance.direction = Vec2(x=self.get_int(node, "dir") or 1, y=0)
        instance.position = self.get_position(node) or Vec3()

        if instance.model is not None:
            scale = self.get_float(node, "scale") or 1.0
            instance.model.scale = instance.model.scale.scaled(scale)

        for trait_node in find(node, "trait"):
            trait = trait_compiler.compile(trait_node)()
            if instance.get_trait(trait.NAME) is not None:
                msg = f'Trait "{trait.NAME}" already applied to object "{node.get("id")}"'
                raise DefinitionError(msg, node=trait_node)
            instance.apply_trait(trait)

        return Placement(
            node=node, constructor=constructor, instance=instance, source_node=source_node
        )
