"""Per-compilation texture and animation registries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING

from xmlforge.errors import DefinitionError
from xmlforge.models import DEFAULT, Animation, TextureRecord

if TYPE_CHECKING:
    from lxml.etree import _Element


def _frozen(items: dict) -> Mapping:
    return MappingProxyType(items)


def build_texture_map(records: Iterable[TextureRecord]) -> Mapping[str, TextureRecord]:
    """Index records by id; the first record (or one named ``__default``) is the default."""
    textures: dict[str, TextureRecord] = {}
    for record in records:
        textures[record.id] = record
        textures.setdefault(DEFAULT, record)
    return _frozen(textures)


def build_animation_map(animations: Iterable[Animation]) -> Mapping[str, Animation]:
    """Index animations by id; the first animation (or one without id) is the default."""
    result: dict[str, Animation] = {}
    for animation in animations:
        result[animation.id or DEFAULT] = animation
        result.setdefault(DEFAULT, animation)
    return _frozen(result)


@dataclass(frozen=True)
class CompileContext:
    """Read-only registries shared by every blueprint of one compilation pass."""

    textures: Mapping[str, TextureRecord] = field(default_factory=lambda: _frozen({}))
    animations: Mapping[str, Animation] = field(default_factory=lambda: _frozen({}))

    def with_animations(self, animations: Iterable[Animation]) -> CompileContext:
        return replace(self, animations=build_animation_map(animations))

    def get_texture(self, id: str | None = None, *, node: _Element | None = None) -> TextureRecord:
        if id:
            if id not in self.textures:
                msg = f'Texture "{id}" not defined.'
                raise DefinitionError(msg, node=node)
            return self.textures[id]
        if DEFAULT not in self.textures:
            msg = "Default texture not defined"
            raise DefinitionError(msg, node=node)
        return self.textures[DEFAULT]

    @property
    def default_animation(self) -> Animation | None:
        return self.animations.get(DEFAULT)
