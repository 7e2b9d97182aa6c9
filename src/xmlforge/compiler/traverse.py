"""Element traversal helpers over lxml trees.

Selectors are a small subset of CSS: tag names (or ``*``) joined by the child
combinator ``>``, with ``,`` separating alternatives, e.g.
``"layout > objects > object"`` or ``"after > action, before > action"``.
"""

from __future__ import annotations

from collections.abc import Iterator

from lxml import etree


def is_element(node: object) -> bool:
    # Comments and processing instructions have a non-string tag.
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def _parse_selector(selector: str) -> list[list[str]]:
    return [
        [part.strip() for part in alternative.split(">")]
        for alternative in selector.split(",")
    ]


def _matches_tag(node: etree._Element, tag: str) -> bool:
    return tag == "*" or node.tag == tag


def _matches_chain(node: etree._Element, chain: list[str]) -> bool:
    *ancestors, target = chain
    if not _matches_tag(node, target):
        return False
    current = node
    for tag in reversed(ancestors):
        current = current.getparent()
        if current is None or not _matches_tag(current, tag):
            return False
    return True


def matches(node: etree._Element, selector: str) -> bool:
    return is_element(node) and any(
        _matches_chain(node, chain) for chain in _parse_selector(selector)
    )


def elements(node: etree._Element) -> Iterator[etree._Element]:
    """Element descendants of *node* in document order."""
    return (child for child in node.iterdescendants() if is_element(child))


def children(parent: etree._Element, selector: str) -> list[etree._Element]:
    """Direct children of *parent* matching *selector*."""
    return [child for child in parent if matches(child, selector)]


def find(node: etree._Element, selector: str) -> list[etree._Element]:
    """All descendants of *node* matching *selector*, in document order."""
    chains = _parse_selector(selector)
    return [
        child for child in elements(node)
        if any(_matches_chain(child, chain) for chain in chains)
    ]


def first(node: etree._Element, selector: str) -> etree._Element | None:
    chains = _parse_selector(selector)
    for child in elements(node):
        if any(_matches_chain(child, chain) for chain in chains):
            return child
    return None


def closest(node: etree._Element | None, selector: str) -> etree._Element | None:
    while node is not None:
        if matches(node, selector):
            return node
        node = node.getparent()
    return None


def ensure(node: object, tags: str | tuple[str, ...]) -> None:
    """Guard a compiler entry point against being handed the wrong element."""
    if not is_element(node):
        msg = f"{node} is not an XML node"
        raise TypeError(msg)
    allowed = (tags,) if isinstance(tags, str) else tags
    if node.tag not in allowed:
        rendered = etree.tostring(node, encoding="unicode", with_tail=False)
        msg = f'{rendered} must match selector "{", ".join(allowed)}"'
        raise TypeError(msg)
