"""Build an ElementNode tree from research markup using BeautifulSoup."""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup, Tag

from .base import ElementNode, NodeKind

_HEADING_LEVEL_BY_TAG = {f"h{level}": level for level in range(1, 7)}

_KIND_BY_TAG = {
    "p": NodeKind.PARAGRAPH,
    "ul": NodeKind.UNORDERED_LIST,
    "ol": NodeKind.ORDERED_LIST,
    "li": NodeKind.LIST_ITEM,
    "blockquote": NodeKind.BLOCK_QUOTE,
    "pre": NodeKind.CODE_BLOCK,
    "table": NodeKind.TABLE,
    "figure": NodeKind.FIGURE,
    "div": NodeKind.CONTAINER,
    "section": NodeKind.CONTAINER,
    "article": NodeKind.CONTAINER,
    "main": NodeKind.CONTAINER,
}


def parse_markup(text: str) -> ElementNode:
    """Parse markup into a root container whose children are the top-level elements."""
    soup = BeautifulSoup(text or "", "html.parser")
    children = [_build_node(child) for child in soup.children if isinstance(child, Tag)]
    return ElementNode(
        kind=NodeKind.CONTAINER,
        tag="[document]",
        text=soup.get_text(),
        markup=text or "",
        children=children,
    )


def _build_node(tag: Tag) -> ElementNode:
    name = (tag.name or "").lower()
    level = _HEADING_LEVEL_BY_TAG.get(name, 0)
    kind = NodeKind.HEADING if level else _KIND_BY_TAG.get(name, NodeKind.OTHER)

    markup = tag.decode_contents()
    if kind is NodeKind.LIST_ITEM:
        markup = _markup_without_nested_lists(tag)

    return ElementNode(
        kind=kind,
        tag=name,
        level=level,
        text=tag.get_text(),
        markup=markup,
        classes=tuple(str(c) for c in (tag.get("class") or [])),
        attrs={key: _attr_text(value) for key, value in tag.attrs.items() if key != "class"},
        children=[_build_node(child) for child in tag.children if isinstance(child, Tag)],
    )


def _markup_without_nested_lists(tag: Tag) -> str:
    sandbox = copy.copy(tag)
    for nested in sandbox.find_all(["ul", "ol"]):
        nested.extract()
    return sandbox.decode_contents()


def _attr_text(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)
