"""Typed attribute readers shared by every compiler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, overload

from xmlforge.engine import PlaneGeometry
from xmlforge.errors import DefinitionError
from xmlforge.models import Rect, Vec2, Vec3

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.loader import DocumentLoader

logger = logging.getLogger(__name__)


class Parser:
    """Base class holding the loader and the primitive attribute readers.

    Missing attributes fall back to the supplied default. Attributes that are
    present but malformed raise :class:`DefinitionError`.
    """

    def __init__(self, loader: DocumentLoader | None = None) -> None:
        self.loader = loader

    def require_loader(self) -> DocumentLoader:
        if self.loader is None:
            msg = f"{type(self).__name__} needs a loader to resolve resources"
            raise RuntimeError(msg)
        return self.loader

    @staticmethod
    def get_attr(node: _Element, attr: str, default: str | None = None) -> str | None:
        value = node.get(attr)
        return default if value is None else value

    @overload
    def get_float(self, node: _Element, attr: str) -> float | None: ...
    @overload
    def get_float(self, node: _Element, attr: str, default: float) -> float: ...

    def get_float(self, node: _Element, attr: str, default: float | None = None) -> float | None:
        value = node.get(attr)
        if value is None or not value.strip():
            return default
        try:
            return float(value)
        except ValueError:
            msg = f'Attribute "{attr}" is not a number: {value!r}'
            raise DefinitionError(msg, node=node) from None

    @overload
    def get_int(self, node: _Element, attr: str) -> int | None: ...
    @overload
    def get_int(self, node: _Element, attr: str, default: int) -> int: ...

    def get_int(self, node: _Element, attr: str, default: int | None = None) -> int | None:
        value = node.get(attr)
        if value is None or not value.strip():
            return default
        try:
            return int(value, 10)
        except ValueError:
            msg = f'Attribute "{attr}" is not an integer: {value!r}'
            raise DefinitionError(msg, node=node) from None

    @staticmethod
    def get_bool(node: _Element, attr: str, default: bool = False) -> bool:
        value = node.get(attr)
        if value == "true":
            return True
        if value == "false":
            return False
        return default

    def get_vector2(
        self,
        node: _Element,
        x: str = "x",
        y: str = "y",
        default: Vec2 | None = None,
    ) -> Vec2 | None:
        """Both attributes must be present, otherwise *default* is returned."""
        if node.get(x) is None or node.get(y) is None:
            return default
        return Vec2(x=self.get_float(node, x, 0.0), y=self.get_float(node, y, 0.0))

    def get_vector3(
        self,
        node: _Element,
        x: str = "x",
        y: str = "y",
        z: str = "z",
        default: Vec3 | None = None,
    ) -> Vec3 | None:
        if node.get(x) is None or node.get(y) is None:
            return default
        return Vec3(
            x=self.get_float(node, x, 0.0),
            y=self.get_float(node, y, 0.0),
            z=self.get_float(node, z, 0.0),
        )

    def get_position(self, node: _Element) -> Vec3 | None:
        return self.get_vector3(node, "x", "y", "z")

    def get_rect(self, node: _Element) -> Rect:
        w = self.get_float(node, "w")
        h = self.get_float(node, "h")
        if w is None or h is None:
            msg = "Rectangle needs both w and h"
            raise DefinitionError(msg, node=node)
        return Rect(
            x=self.get_float(node, "x", 0.0),
            y=self.get_float(node, "y", 0.0),
            w=w,
            h=h,
        )

    def get_geometry(self, node: _Element) -> PlaneGeometry:
        kind = node.get("type", "plane")
        if kind != "plane":
            msg = f'No geometry type "{kind}"'
            raise DefinitionError(msg, node=node)
        size = self.get_vector2(node, "w", "h")
        if size is None:
            msg = "Geometry needs both w and h"
            raise DefinitionError(msg, node=node)
        return PlaneGeometry(
            size.x,
            size.y,
            self.get_int(node, "w-segments", 1),
            self.get_int(node, "h-segments", 1),
        )

    async def get_audio(self, node: _Element) -> Any:
        loader = self.require_loader()
        url = loader.resolve_url(node, "src")
        if url is None:
            msg = "Audio element needs a src attribute"
            raise DefinitionError(msg, node=node)
        return await loader.resource_loader.load_audio(url)

    async def get_image(self, node: _Element) -> Any:
        loader = self.require_loader()
        url = loader.resolve_url(node, "url")
        if url is None:
            msg = "Texture element needs a url attribute"
            raise DefinitionError(msg, node=node)
        return await loader.resource_loader.load_image(url)
