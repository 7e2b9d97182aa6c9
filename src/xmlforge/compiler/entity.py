"""Compile ``<entities>``/``<objects>`` documents into entity constructors."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from xmlforge.compiler.animation import AnimationCompiler
from xmlforge.compiler.blueprint import Blueprint, CompiledEntry, EntityFactory
from xmlforge.compiler.context import CompileContext, build_texture_map
from xmlforge.compiler.events import EventBinding, EventCompiler
from xmlforge.compiler.faces import FaceCompiler
from xmlforge.compiler.lazy import Once
from xmlforge.compiler.reader import Parser
from xmlforge.compiler.router import AnimationRouter, compile_inline_router, named_router
from xmlforge.compiler.sequences import SequenceCompiler, SequenceDef
from xmlforge.compiler.traits import TraitCompiler, TraitFactory
from xmlforge.compiler.traverse import children, ensure, find, first
from xmlforge.engine import CollisionCircle, CollisionRect, Entity, UVAnimator
from xmlforge.errors import DefinitionError, DuplicateIdError
from xmlforge.models import DEFAULT, TextureRecord, Vec2

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.loader import DocumentLoader

logger = logging.getLogger(__name__)

# Root tag -> tag of the blueprint elements directly under it.
ROOTS = {"entities": "entity", "objects": "object"}


class EntityCompiler(Parser):
    """Turns one ``<entities>`` or ``<objects>`` element into constructors.

    Textures and animations declared under the root are shared by every
    entity in it. The mapping is computed once; later calls to
    :meth:`get_objects` replay the same result or error.
    """

    def __init__(self, loader: DocumentLoader | None, node: _Element) -> None:
        super().__init__(loader)
        ensure(node, tuple(ROOTS))
        self.node = node
        self.item_tag = ROOTS[node.tag]
        self.animation_compiler = AnimationCompiler(loader)
        self.event_compiler = EventCompiler(loader)
        self.face_compiler = FaceCompiler(loader)
        self.sequence_compiler = SequenceCompiler(loader)
        self.trait_compiler = TraitCompiler(loader)
        self._objects: Once[dict[str, CompiledEntry]] = Once(self._compile)

    async def get_objects(self) -> dict[str, CompiledEntry]:
        return await self._objects.get()

    async def _compile(self) -> dict[str, CompiledEntry]:
        nodes = self._collect_nodes()
        context = CompileContext(textures=await self.parse_textures())
        context = self.parse_animations(context)

        blueprints = await asyncio.gather(
            *(self.parse_entity(node, context) for node in nodes.values()),
        )
        objects = {
            blueprint.id: CompiledEntry(
                node=nodes[blueprint.id], constructor=EntityFactory(blueprint)
            )
            for blueprint in blueprints
        }
        logger.info("Compiled %d %s definitions", len(objects), self.item_tag)
        return objects

    def _collect_nodes(self) -> dict[str, _Element]:
        nodes: dict[str, _Element] = {}
        for node in children(self.node, self.item_tag):
            entity_id = node.get("id")
            if not entity_id:
                msg = f"<{self.item_tag}> needs an id attribute"
                raise DefinitionError(msg, node=node)
            if entity_id in nodes:
                raise DuplicateIdError(entity_id, node=node)
            nodes[entity_id] = node
        return nodes

    async def parse_textures(self) -> Mapping[str, TextureRecord]:
        nodes = find(self.node, "textures > texture")
        records = await asyncio.gather(*(self._parse_texture(node) for node in nodes))
        return build_texture_map(records)

    async def _parse_texture(self, node: _Element) -> TextureRecord:
        image = await self.get_image(node)
        size = self.get_vector2(node, "w", "h")
        if size is None and image is not None:
            width, height = image.size
            size = Vec2(x=width, y=height)
        return TextureRecord(id=node.get("id") or DEFAULT, image=image, size=size)

    def parse_animations(self, context: CompileContext) -> CompileContext:
        animations = []
        for node in find(self.node, "animations > animation"):
            texture = context.get_texture(node.getparent().get("texture"), node=node)
            animations.append(self.animation_compiler.compile(node, texture.size))
        return context.with_animations(animations)

    async def parse_entity(self, node: _Element, context: CompileContext) -> Blueprint:
        entity_id = node.get("id")
        blueprint = Blueprint(
            id=entity_id,
            base=self.get_constructor(node),
            animations=context.animations,
            textures=context.textures,
        )

        geometry_nodes = find(node, "geometry")
        text_node = first(node, "text")
        if geometry_nodes:
            for geometry_node in geometry_nodes:
                blueprint.geometries.append(self.get_geometry(geometry_node))
                blueprint.animators.extend(self.parse_animators(geometry_node, context))
        elif text_node is not None:
            self.parse_text(text_node, blueprint)

        blueprint.collision = self.parse_collision(node)
        blueprint.events = self.parse_events(node)
        blueprint.traits = self.parse_traits(node)
        blueprint.sequences = self.parse_sequences(node)
        blueprint.animation_router = self.parse_animation_router(node)
        blueprint.audio = await self.parse_audio(node)

        logger.debug(
            "Blueprint %s: %d geometries, %d animators, %d traits",
            entity_id,
            len(blueprint.geometries),
            len(blueprint.animators),
            len(blueprint.traits),
        )
        return blueprint

    def get_constructor(self, node: _Element) -> Callable[[], Entity]:
        if node.get("type") != "character":
            return Entity
        source = node.get("source")
        loader = self.require_loader()
        if not source or not loader.entities.has(source):
            msg = f'Entity "{source}" not registered.'
            raise DefinitionError(msg, node=node)
        return loader.entities.resolve(source)

    def parse_animators(self, geometry_node: _Element, context: CompileContext) -> list[UVAnimator]:
        animators = self.face_compiler.compile(find(geometry_node, "face"), context.animations)
        if animators:
            return animators
        default = context.default_animation
        if default is None:
            return []
        animator = UVAnimator()
        animator.set_animation(default)
        return [animator]

    def parse_text(self, node: _Element, blueprint: Blueprint) -> None:
        font_name = node.get("font")
        if not font_name:
            msg = "Text needs a font attribute"
            raise DefinitionError(msg, node=node)
        font = self.require_loader().resources.get("font", font_name, node=node)
        text = font(str(node.xpath("string()")))
        texture = text.get_texture()
        size = getattr(texture, "size", None)
        record = TextureRecord(
            id=blueprint.id,
            image=texture,
            size=Vec2(x=size[0], y=size[1]) if size else None,
        )
        blueprint.geometries.append(text.get_geometry())
        blueprint.textures = MappingProxyType({DEFAULT: record})

    def parse_collision(self, node: _Element) -> list[CollisionRect | CollisionCircle]:
        zones: list[CollisionRect | CollisionCircle] = []
        collision_node = first(node, "collision")
        if collision_node is None:
            return zones
        for zone_node in children(collision_node, "*"):
            if zone_node.tag == "rect":
                rect = self.get_rect(zone_node)
                zones.append(CollisionRect(w=rect.w, h=rect.h, x=rect.x, y=rect.y))
            elif zone_node.tag == "circ":
                radius = self.get_float(zone_node, "r")
                if radius is None:
                    msg = "Collision circle needs an r attribute"
                    raise DefinitionError(msg, node=zone_node)
                zones.append(
                    CollisionCircle(
                        r=radius,
                        x=self.get_float(zone_node, "x", 0.0),
                        y=self.get_float(zone_node, "y", 0.0),
                    ),
                )
            else:
                msg = f'No collision type "{zone_node.tag}"'
                raise DefinitionError(msg, node=zone_node)
        return zones

    async def parse_audio(self, node: _Element) -> dict[str, Any]:
        audio_nodes = [
            audio_node
            for group in children(node, "audio")
            for audio_node in children(group, "*")
        ]
        for audio_node in audio_nodes:
            if not audio_node.get("id"):
                msg = "Audio element needs an id attribute"
                raise DefinitionError(msg, node=audio_node)
        clips = await asyncio.gather(*(self.get_audio(audio_node) for audio_node in audio_nodes))
        return {
            audio_node.get("id"): clip
            for audio_node, clip in zip(audio_nodes, clips, strict=True)
        }

    def parse_events(self, node: _Element) -> list[EventBinding]:
        events: list[EventBinding] = []
        for events_node in children(node, "events"):
            events.extend(self.event_compiler.compile(events_node))
        return events

    def parse_traits(self, node: _Element) -> list[TraitFactory]:
        factories: list[TraitFactory] = []
        for traits_node in children(node, "traits"):
            factories.extend(self.trait_compiler.compile_all(traits_node))
        return factories

    def parse_sequences(self, node: _Element) -> list[SequenceDef]:
        sequences: list[SequenceDef] = []
        for sequences_node in children(node, "sequences"):
            sequences.extend(self.sequence_compiler.compile(sequences_node))
        return sequences

    def parse_animation_router(self, node: _Element) -> AnimationRouter | None:
        router_node = next(iter(children(node, "animation-router")), None)
        if router_node is None:
            return None
        name = router_node.get("name")
        if name:
            routers = self.require_loader().routers
            if not routers.has(name):
                msg = f'Animation router "{name}" not registered.'
                raise DefinitionError(msg, node=router_node)
            return named_router(routers.resolve(name))
        source = (router_node.text or "").strip()
        if not source:
            return None
        return compile_inline_router(source, node=router_node)
