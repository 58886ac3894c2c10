"""Table rendering and numeric series inference for table nodes."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Sequence

from researchdown.parser.base import ChartDescriptor, ChartKind, ElementNode, NodeKind
from researchdown.parser.markup import parse_markup

logger = logging.getLogger(__name__)

_LEADING_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NON_NUMERIC_RE = re.compile(r"[^\d.-]")

_TIME_PATTERNS = (
    re.compile(r"year", re.IGNORECASE),
    re.compile(r"month", re.IGNORECASE),
    re.compile(r"day", re.IGNORECASE),
    re.compile(r"date", re.IGNORECASE),
    re.compile(r"time", re.IGNORECASE),
    re.compile(r"period", re.IGNORECASE),
    re.compile(r"jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec", re.IGNORECASE),
    re.compile(r"^\d{4}$"),
    re.compile(r"^\d{1,2}/\d{1,2}$"),
)
_SEQUENTIAL_PATTERNS = (
    re.compile(r"phase", re.IGNORECASE),
    re.compile(r"stage", re.IGNORECASE),
    re.compile(r"step", re.IGNORECASE),
    re.compile(r"level", re.IGNORECASE),
    re.compile(r"generation", re.IGNORECASE),
)

_PIE_MAX_LABELS = 5


def _is_numeric(text: str) -> bool:
    return _LEADING_NUMBER_RE.match(text) is not None


def _to_number(text: str) -> float:
    """Parse a cell value after dropping units and separators; unparsable cells count as zero."""
    match = _LEADING_NUMBER_RE.match(_NON_NUMERIC_RE.sub("", text))
    if match is None:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def _matches_any(labels: Sequence[str], patterns: Sequence[re.Pattern[str]]) -> bool:
    return any(pattern.search(label) for label in labels for pattern in patterns)


# First matching rule decides the chart kind.
_CHART_KIND_RULES: tuple[tuple[Callable[[Sequence[str]], bool], ChartKind], ...] = (
    (lambda labels: len(labels) <= _PIE_MAX_LABELS, ChartKind.PIE),
    (lambda labels: _matches_any(labels, _TIME_PATTERNS), ChartKind.LINE),
    (lambda labels: _matches_any(labels, _SEQUENTIAL_PATTERNS), ChartKind.LINE),
)


def infer_chart_kind(labels: Sequence[str]) -> ChartKind:
    for applies, kind in _CHART_KIND_RULES:
        if applies(labels):
            return kind
    return ChartKind.BAR


def table_rows(table: ElementNode) -> list[list[str]]:
    """Cell texts for every row of *table*, header row first."""
    return [
        [cell.plain_text for cell in row.children if cell.tag in ("th", "td")]
        for row in table.find_all("tr")
    ]


def render_table(table: ElementNode) -> str:
    """Pipe-table rendering; the first row is the header and empty rows are skipped."""
    rows = table_rows(table)
    if not rows or not rows[0]:
        return ""

    header = rows[0]
    lines = [
        "| " + " | ".join(header) + " |",
        "| " + " | ".join("---" for _ in header) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows[1:] if row)
    return "\n".join(lines)


def _table_title(table: ElementNode, preceding: Sequence[ElementNode]) -> str | None:
    caption = table.find("caption")
    if caption is not None:
        return caption.plain_text
    for sibling in reversed(preceding):
        if sibling.kind is NodeKind.HEADING and sibling.level in (3, 4):
            return sibling.plain_text
    return None


def infer_table_series(
    table: ElementNode,
    preceding: Sequence[ElementNode] = (),
    *,
    kind: ChartKind | None = None,
) -> ChartDescriptor | None:
    """Infer one representative numeric series from *table*.

    *preceding* holds the table's earlier siblings, nearest last; they are
    searched for a level 3-4 heading when the table has no caption. The chart
    kind is inferred from the labels unless *kind* is given.
    """
    rows = table_rows(table)
    if len(rows) < 2:
        return None

    header, data_rows = rows[0], rows[1:]
    label_column = all(row and not _is_numeric(row[0]) for row in data_rows)
    # Numeric column headers (typically years) mean the series runs across the columns.
    if label_column and len(header) > 1 and all(_is_numeric(cell) for cell in header[1:]):
        label_column = False

    if label_column:
        labels = [row[0] for row in data_rows]
        data = [_to_number(row[1]) if len(row) > 1 else 0.0 for row in data_rows]
    else:
        labels = header[1:]
        data = []
        for column in range(1, len(header)):
            values = [_to_number(row[column]) if len(row) > column else 0.0 for row in data_rows]
            data.append(sum(values) / len(values))

    return ChartDescriptor(
        title=_table_title(table, preceding) or "",
        labels=labels,
        data=data,
        kind=kind or infer_chart_kind(labels),
    )


def extract_table_charts(markup: str) -> list[ChartDescriptor]:
    """Chart descriptors for every table in *markup* that yields data."""
    root = parse_markup(markup)
    charts: list[ChartDescriptor] = []
    for index, (table, preceding) in enumerate(_iter_tables(root), 1):
        chart = infer_table_series(table, preceding)
        if chart is None or not chart.data:
            continue
        chart.title = chart.title or f"Data Set {index}"
        chart.description = chart.description or "Extracted from research content"
        charts.append(chart)
    logger.debug("Inferred %d chart(s) from tables", len(charts))
    return charts


def _iter_tables(node: ElementNode) -> Iterator[tuple[ElementNode, list[ElementNode]]]:
    for index, child in enumerate(node.children):
        if child.kind is NodeKind.TABLE:
            yield child, node.children[:index]
        else:
            yield from _iter_tables(child)
