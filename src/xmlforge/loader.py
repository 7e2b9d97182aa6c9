"""Document loader: URL resolution, remote documents, resources and registries."""

from __future__ import annotations

import asyncio
import io
import logging
import re
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from urllib.parse import urljoin, urlparse
from urllib.request import url2pathname

import httpx
from lxml import etree
from PIL import Image, UnidentifiedImageError

from xmlforge.compiler.scene import SceneCompiler
from xmlforge.compiler.traverse import first
from xmlforge.config import ForgeSettings
from xmlforge.engine import Game
from xmlforge.errors import DefinitionError, ResourceLoadError

if TYPE_CHECKING:
    from lxml.etree import _Element

    from xmlforge.engine import Scene

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


@dataclass(frozen=True)
class AudioClip:
    """Undecoded audio data and the url it came from."""

    url: str
    data: bytes


class Registry(Generic[T]):
    """Named constructors injected by the host application."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._items: dict[str, T] = {}

    def add(self, items: Mapping[str, T]) -> None:
        self._items.update(items)

    def has(self, name: str) -> bool:
        return name in self._items

    def resolve(self, name: str) -> T:
        if name not in self._items:
            msg = f'{self.kind} "{name}" not registered.'
            raise DefinitionError(msg)
        return self._items[name]

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __len__(self) -> int:
        return len(self._items)


class ResourceManager:
    """Named resources grouped by type (``font``, ``audio``, ``object``, ...)."""

    def __init__(self) -> None:
        self._resources: dict[str, dict[str, Any]] = {}

    def add(self, kind: str, name: str, resource: Any) -> None:
        self._resources.setdefault(kind, {})[name] = resource

    def has(self, kind: str, name: str) -> bool:
        return name in self._resources.get(kind, {})

    def get(self, kind: str, name: str, *, node: _Element | None = None) -> Any:
        if not self.has(kind, name):
            msg = f'No resource "{name}" of type {kind}'
            raise DefinitionError(msg, node=node)
        return self._resources[kind][name]


def _decode_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class ResourceLoader:
    """Fetches raw bytes, images and audio, tracking every load it starts."""

    def __init__(self, settings: ForgeSettings) -> None:
        self.settings = settings
        self._pending: set[asyncio.Future[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def fetch(self, url: str) -> bytes:
        """Read *url* from disk (plain path or ``file:``) or over HTTP(S)."""
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            http = self.settings.http
            try:
                async with httpx.AsyncClient(
                    timeout=http.timeout,
                    follow_redirects=http.follow_redirects,
                ) as client:
                    resp = await client.get(url)
                    resp.raise_for_status()
                    return resp.content
            except httpx.HTTPError as exc:
                raise ResourceLoadError(url, str(exc) or type(exc).__name__) from exc

        path = Path(url2pathname(urlparse(url).path)) if scheme == "file" else Path(url)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ResourceLoadError(url, exc.strerror or str(exc)) from exc

    def _track(self, awaitable: Awaitable[T]) -> asyncio.Future[T]:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        return future

    async def load_image(self, url: str) -> Image.Image:
        return await self._track(self._load_image(url))

    async def _load_image(self, url: str) -> Image.Image:
        data = await self.fetch(url)
        try:
            image = await asyncio.to_thread(_decode_image, data)
        except (UnidentifiedImageError, OSError) as exc:
            raise ResourceLoadError(url, "not a decodable image") from exc
        logger.debug("Loaded image %s (%dx%d)", url, *image.size)
        return image

    async def load_audio(self, url: str) -> AudioClip:
        return await self._track(self._load_audio(url))

    async def _load_audio(self, url: str) -> AudioClip:
        clip = AudioClip(url=url, data=await self.fetch(url))
        logger.debug("Loaded audio %s (%d bytes)", url, len(clip.data))
        return clip

    async def complete(self) -> None:
        """Wait for every load started so far."""
        while self._pending:
            await asyncio.gather(*list(self._pending))


class DocumentLoader:
    """Entry point: resolves documents and holds everything compilers look up.

    Host applications register entity constructors, traits and animation
    routers on :attr:`entities`, :attr:`traits` and :attr:`routers`, and
    shared resources (fonts, prebuilt objects) on :attr:`resources`.
    """

    def __init__(self, settings: ForgeSettings | None = None, *, game: Game | None = None) -> None:
        self.settings = settings or ForgeSettings()
        self.entities: Registry[Any] = Registry("Entity")
        self.traits: Registry[Any] = Registry("Trait")
        self.routers: Registry[Any] = Registry("Animation router")
        self.resources = ResourceManager()
        self.resource_loader = ResourceLoader(self.settings)
        self.scenes: dict[str, str] = dict(self.settings.scenes)
        self.game = game or Game()

    def resolve_url(self, node: _Element, attr: str = "url") -> str | None:
        """Resolve the url in *attr* against the document the node came from."""
        value = node.get(attr)
        if not value:
            return None
        base = node.getroottree().docinfo.URL or self.settings.base_url
        if base is None:
            return value
        if _SCHEME.match(value):
            return value
        return urljoin(base, value)

    async def load_xml(self, url: str) -> _Element:
        data = await self.resource_loader.fetch(url)
        try:
            root = etree.fromstring(data, base_url=url)
        except etree.XMLSyntaxError as exc:
            raise ResourceLoadError(url, str(exc)) from exc
        logger.debug("Loaded document %s <%s>", url, root.tag)
        return root

    async def follow_node(self, node: _Element) -> _Element:
        """Replace a node carrying ``src`` by the root of the referenced document."""
        url = self.resolve_url(node, "src")
        if url is None:
            return node
        return await self.load_xml(url)

    async def load_scene(self, url: str) -> Scene:
        root = await self.load_xml(url)
        node = root if root.tag == "scene" else first(root, "scene")
        if node is None:
            msg = f"No <scene> in {url}"
            raise DefinitionError(msg, node=root)
        return await self.parse_scene(node)

    async def parse_scene(self, node: _Element) -> Scene:
        return await SceneCompiler(self, node).get_scene()

    async def load_scene_by_name(self, name: str) -> Scene:
        if name not in self.scenes:
            msg = f'Scene "{name}" not defined.'
            raise DefinitionError(msg)
        logger.info("Loading scene %s from %s", name, self.scenes[name])
        return await self.load_scene(self.scenes[name])
