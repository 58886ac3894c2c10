"""Render research markup into a portable Markdown document."""

from __future__ import annotations

import dataclasses
import html
import logging
import re
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from researchdown.parser.base import ChartDescriptor, ElementNode, NodeKind
from researchdown.parser.markup import parse_markup
from researchdown.parser.response import format_research_date
from researchdown.renderer.citation_formatter import strip_markup
from researchdown.renderer.table_series import infer_table_series, render_table

logger = logging.getLogger(__name__)

_RESERVED_TITLES = {"Table of Contents", "Abstract", "Keywords", "References"}
_REFERENCE_TITLES = {"references", "citations", "bibliography"}
_EXCLUDED_REGIONS = ("abstract", "keywords", "references")
_REMOVED_BLOCKS = ("table-of-contents", "abstract", "keywords")

_INLINE_RULES = (
    (re.compile(r"<(strong|b)(?:\s[^>]*)?>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL), r"**\2**"),
    (re.compile(r"<(em|i)(?:\s[^>]*)?>(.*?)</\1\s*>", re.IGNORECASE | re.DOTALL), r"*\2*"),
    (re.compile(r"<code(?:\s[^>]*)?>(.*?)</code\s*>", re.IGNORECASE | re.DOTALL), r"`\1`"),
    (re.compile(r"<a\s[^>]*?href=\"([^\"]*)\"[^>]*>(.*?)</a\s*>", re.IGNORECASE | re.DOTALL), r"[\2](\1)"),
    (
        re.compile(r"<sup\s[^>]*?class=\"citation\"[^>]*>\s*\[(.*?)\]\s*</sup\s*>", re.IGNORECASE | re.DOTALL),
        r"[\1]",
    ),
)
_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(slots=True)
class TocEntry:
    depth: int
    title: str
    anchor: str


@dataclass(slots=True)
class ConversionResult:
    """Outcome of a conversion: either Markdown or the error that prevented it."""

    markdown: str | None = None
    charts: list[ChartDescriptor] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.markdown is not None

    def unwrap_or(self, default: str) -> str:
        return self.markdown if self.markdown is not None else default


def slugify(text: str) -> str:
    text = re.sub(r"[^\w\s-]", "", text.lower())
    return re.sub(r"\s+", "-", text)


def suggest_filename(topic: str, on: date | None = None) -> str:
    return f"research-{slugify(topic)}-{(on or date.today()).isoformat()}.md"


def minimal_document(title: str) -> str:
    return f"# {title}\n\n*Error converting content to markdown*\n"


def rewrite_inline(markup: str) -> str:
    """Map inline emphasis, code, links and citation marks to Markdown and drop other tags."""
    for pattern, replacement in _INLINE_RULES:
        markup = pattern.sub(replacement, markup)
    text = html.unescape(_TAG_RE.sub("", markup))
    return re.sub(r"\s+", " ", text).strip()


class MarkdownRenderer:
    """Render research markup and its citation list into the Markdown template."""

    def __init__(self, template_path: Path | None = None) -> None:
        if template_path is None:
            template_path = Path(__file__).resolve().parent.parent / "template" / "research.md.j2"

        loader = FileSystemLoader(str(template_path.parent))
        self._env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._template_name = template_path.name

    def convert(
        self,
        title: str,
        markup: str,
        citations: Sequence[str] = (),
        *,
        today: date | None = None,
    ) -> str:
        """Markdown for the document; a title-only document if conversion fails."""
        return self.render(title, markup, citations, today=today).unwrap_or(minimal_document(title))

    def render(
        self,
        title: str,
        markup: str,
        citations: Sequence[str] = (),
        *,
        today: date | None = None,
    ) -> ConversionResult:
        try:
            markdown, charts = self._render(title, markup, list(citations), today or date.today())
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to convert %r to markdown", title)
            return ConversionResult(error=f"{type(exc).__name__}: {exc}")
        return ConversionResult(markdown=markdown, charts=charts)

    def _render(
        self, title: str, markup: str, citations: list[str], today: date
    ) -> tuple[str, list[ChartDescriptor]]:
        root = parse_markup(markup)

        abstract_node = root.find_class("abstract")
        abstract = None
        if abstract_node is not None:
            paragraph = abstract_node.find("p")
            abstract = paragraph.plain_text if paragraph is not None else ""

        keywords_node = root.find_class("keywords")
        keywords = None
        if keywords_node is not None:
            keywords = [n.plain_text for n in keywords_node.iter_descendants() if n.has_class("keyword")]

        body_nodes = _prune(root.children, drop_references=bool(citations))
        toc = [
            TocEntry(depth=heading.level - 2, title=heading.plain_text, anchor=slugify(heading.plain_text))
            for heading in _toc_headings(dataclasses.replace(root, children=body_nodes))
        ]

        writer = _BodyWriter()
        body = writer.write(body_nodes)

        template = self._env.get_template(self._template_name)
        markdown = template.render(
            title=title,
            generated_on=format_research_date(today),
            abstract=abstract,
            keywords=keywords,
            toc=toc,
            body=body,
            references=[strip_markup(citation) for citation in citations],
        )
        return markdown, writer.charts


def _toc_headings(node: ElementNode) -> Iterator[ElementNode]:
    for child in node.children:
        if any(child.has_class(region) for region in _EXCLUDED_REGIONS):
            continue
        if child.kind is NodeKind.HEADING:
            if child.level in (2, 3) and child.plain_text not in _RESERVED_TITLES:
                yield child
            continue
        yield from _toc_headings(child)


def _prune(nodes: Sequence[ElementNode], *, drop_references: bool) -> list[ElementNode]:
    """Drop the table of contents, abstract and keywords blocks.

    When the citation list is rendered separately, the references section is
    dropped as well: its heading, every following sibling up to the next level
    2-3 heading, and any ``references`` block.
    """
    kept: list[ElementNode] = []
    skipping = False
    for node in nodes:
        if node.kind is NodeKind.HEADING and node.level in (2, 3):
            skipping = drop_references and node.plain_text.lower() in _REFERENCE_TITLES
            if skipping or node.plain_text == "Table of Contents":
                continue
        if skipping:
            continue
        if any(node.has_class(name) for name in _REMOVED_BLOCKS):
            continue
        if drop_references and node.has_class("references"):
            continue
        if node.children:
            node = dataclasses.replace(node, children=_prune(node.children, drop_references=drop_references))
        kept.append(node)
    return kept


class _BodyWriter:
    """Walks the body tree with one handler per node kind, collecting table charts."""

    def __init__(self) -> None:
        self.charts: list[ChartDescriptor] = []
        self._tables = 0
        self._handlers: dict[NodeKind, Callable[[ElementNode, Sequence[ElementNode]], str]] = {
            NodeKind.HEADING: self._heading,
            NodeKind.PARAGRAPH: self._paragraph,
            NodeKind.UNORDERED_LIST: self._list,
            NodeKind.ORDERED_LIST: self._list,
            NodeKind.BLOCK_QUOTE: self._block_quote,
            NodeKind.CODE_BLOCK: self._code_block,
            NodeKind.TABLE: self._table,
            NodeKind.FIGURE: self._figure,
            NodeKind.CONTAINER: self._container,
        }

    def write(self, nodes: Sequence[ElementNode]) -> str:
        parts = [self.write_node(node, nodes[:index]) for index, node in enumerate(nodes)]
        return "\n\n".join(part for part in parts if part)

    def write_node(self, node: ElementNode, preceding: Sequence[ElementNode] = ()) -> str:
        handler = self._handlers.get(node.kind, self._other)
        return handler(node, preceding).strip("\n")

    def _heading(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        return f"{'#' * node.level} {node.plain_text}"

    def _paragraph(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        return rewrite_inline(node.markup)

    def _list(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        ordered = node.kind is NodeKind.ORDERED_LIST
        lines: list[str] = []
        items = [child for child in node.children if child.kind is NodeKind.LIST_ITEM]
        for position, item in enumerate(items, 1):
            marker = f"{position}." if ordered else "*"
            lines.append(f"{marker} {rewrite_inline(item.markup)}")
            for nested in _nested_lists(item):
                lines.extend(f"  {line}" for line in self._list(nested, ()).splitlines())
        return "\n".join(lines)

    def _block_quote(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        inner = self.write(node.children) if node.children else node.plain_text
        return "\n".join(f"> {line}".rstrip() for line in inner.strip().split("\n"))

    def _code_block(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        code = node.find("code")
        language = ""
        if code is not None:
            for name in code.classes:
                if name.startswith("language-"):
                    language = name[len("language-"):]
                    break
        text = (code or node).text.strip("\n")
        return f"```{language}\n{text}\n```"

    def _table(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        self._tables += 1
        chart = infer_table_series(node, preceding)
        if chart is not None and chart.data:
            chart.title = chart.title or f"Data Set {self._tables}"
            chart.description = chart.description or "Extracted from research content"
            self.charts.append(chart)
        return render_table(node)

    def _figure(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        image = node.find("img")
        if image is None:
            return ""
        rendered = f"![{image.attrs.get('alt', '')}]({image.attrs.get('src', '')})"
        caption = node.find("figcaption")
        if caption is not None and caption.plain_text:
            rendered += f"\n*{caption.plain_text}*"
        return rendered

    def _container(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        return self.write(node.children)

    def _other(self, node: ElementNode, preceding: Sequence[ElementNode]) -> str:
        if node.children:
            return self.write(node.children)
        return node.plain_text


def _nested_lists(node: ElementNode) -> Iterator[ElementNode]:
    for child in node.children:
        if child.kind in (NodeKind.UNORDERED_LIST, NodeKind.ORDERED_LIST):
            yield child
        else:
            yield from _nested_lists(child)
