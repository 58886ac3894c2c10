"""Core intermediate representation (IR) for research documents."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChartKind(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"

    @classmethod
    def coerce(cls, value: Any) -> ChartKind | None:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(slots=True)
class ChartDescriptor:
    title: str = ""
    description: str = ""
    labels: list[str] = field(default_factory=list)
    data: list[float] = field(default_factory=list)
    kind: ChartKind | None = None
    subtopic: str | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.labels) and bool(self.data)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ChartDescriptor:
        """Build a descriptor from a decoded sentinel payload without validating it."""
        labels = payload.get("labels") or []
        data = payload.get("data") or []
        if not isinstance(labels, list):
            labels = [labels]
        if not isinstance(data, list):
            data = [data]
        return cls(
            title=str(payload.get("title") or ""),
            description=str(payload.get("description") or ""),
            labels=[str(label) for label in labels],
            data=[_coerce_number(value) for value in data],
            kind=ChartKind.coerce(payload.get("type")),
            subtopic=payload.get("subtopic"),
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "labels": list(self.labels),
            "data": list(self.data),
            "type": self.kind.value if self.kind else None,
        }
        if self.subtopic is not None:
            payload["subtopic"] = self.subtopic
        return payload


def _coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return 0.0


class CitationKind(str, Enum):
    BOOK = "book"
    JOURNAL = "journal"
    WEBSITE = "website"
    CONFERENCE = "conference"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class CitationRecord:
    kind: CitationKind = CitationKind.GENERIC
    authors: str | tuple[str, ...] | None = None
    year: str | None = None
    title: str | None = None
    edition: str | None = None
    publisher: str | None = None
    journal: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    url: str | None = None
    website: str | None = None
    retrieved_date: str | None = None
    conference: str | None = None
    location: str | None = None
    source: str | None = None
    keywords: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CitationRecord:
        """Accept the loose source dictionaries produced upstream (``type``, ``retrievedDate``)."""
        try:
            kind = CitationKind(str(data.get("type") or data.get("kind") or "generic").lower())
        except ValueError:
            kind = CitationKind.GENERIC

        authors = data.get("authors")
        if isinstance(authors, list):
            authors = tuple(str(a) for a in authors)

        def text(key: str, *aliases: str) -> str | None:
            for name in (key, *aliases):
                value = data.get(name)
                if value not in (None, ""):
                    return str(value)
            return None

        return cls(
            kind=kind,
            authors=authors or None,
            year=text("year"),
            title=text("title"),
            edition=text("edition"),
            publisher=text("publisher"),
            journal=text("journal"),
            volume=text("volume"),
            issue=text("issue"),
            pages=text("pages"),
            doi=text("doi"),
            url=text("url"),
            website=text("website"),
            retrieved_date=text("retrieved_date", "retrievedDate"),
            conference=text("conference"),
            location=text("location"),
            source=text("source"),
            keywords=tuple(data.get("keywords") or ()),
        )


class NodeKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    FIGURE = "figure"
    CONTAINER = "container"
    OTHER = "other"


@dataclass(slots=True)
class ElementNode:
    """A read-only view of one markup element.

    ``text`` is the element's raw text content. ``markup`` is its inner markup;
    for list items, nested lists are left out of ``markup`` and appear only as
    children.
    """

    kind: NodeKind
    tag: str
    level: int = 0
    text: str = ""
    markup: str = ""
    classes: tuple[str, ...] = ()
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[ElementNode] = field(default_factory=list)

    @property
    def plain_text(self) -> str:
        return self.text.strip()

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def iter_descendants(self) -> Iterator[ElementNode]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find(self, *tags: str) -> ElementNode | None:
        for node in self.iter_descendants():
            if node.tag in tags:
                return node
        return None

    def find_all(self, *tags: str) -> list[ElementNode]:
        return [node for node in self.iter_descendants() if node.tag in tags]

    def find_class(self, name: str) -> ElementNode | None:
        for node in self.iter_descendants():
            if node.has_class(name):
                return node
        return None


@dataclass(slots=True)
class ResearchResult:
    content: str
    citations: list[str] = field(default_factory=list)
    charts: list[ChartDescriptor] = field(default_factory=list)
