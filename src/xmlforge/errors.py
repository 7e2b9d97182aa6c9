"""Compile-time error types."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lxml.etree import _Element


def describe_node(node: _Element) -> str:
    """Render the opening tag of *node* with its attributes, e.g. ``<frame x="1">``."""
    attrs = "".join(f' {key}="{value}"' for key, value in node.attrib.items())
    return f"<{node.tag}{attrs}>"


def _format_with_context(message: str, node: _Element | None) -> str:
    if node is None:
        return message

    details = []
    line = getattr(node, "sourceline", None)
    if line:
        details.append(f"Location: line {line}")
    details.append(f"Element: {describe_node(node)}")
    return f"{message}\n" + "\n".join(details)


class ForgeError(Exception):
    """Base xmlforge error."""


class DefinitionError(ForgeError):
    """Raised when a document is malformed or references something undefined."""

    def __init__(self, message: str, *, node: _Element | None = None) -> None:
        self.node = node
        super().__init__(_format_with_context(message, node))


class DuplicateIdError(DefinitionError):
    """Raised when an id is repeated inside one ``<entities>``/``<objects>`` scope."""

    def __init__(self, id: str, *, node: _Element | None = None) -> None:
        self.id = id
        super().__init__(f'Object id "{id}" already defined', node=node)


class ResourceLoadError(ForgeError):
    """Raised when an image, audio clip or document cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Failed to load {url}: {reason}")


class MissingDefaultWarning(UserWarning):
    """A blueprint was compiled without a default texture."""
