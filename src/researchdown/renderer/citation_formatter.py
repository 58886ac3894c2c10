"""APA-style citation formatting and a best-effort inverse parser."""

from __future__ import annotations

import html
import re
from collections.abc import Callable, Sequence

from researchdown.parser.base import CitationKind, CitationRecord

UNKNOWN_AUTHOR = "Unknown Author"
NO_DATE = "n.d."
UNTITLED = "Untitled"


def format_authors(authors: str | Sequence[str] | None) -> str:
    if not authors:
        return UNKNOWN_AUTHOR
    if isinstance(authors, str):
        return authors
    if len(authors) == 1:
        return authors[0]
    if len(authors) == 2:
        return f"{authors[0]} & {authors[1]}"
    return f"{authors[0]} et al."


def _head(record: CitationRecord) -> tuple[str, str, str]:
    year = f"({record.year})" if record.year else f"({NO_DATE})"
    return format_authors(record.authors), year, record.title or UNTITLED


def _book(record: CitationRecord) -> str:
    authors, year, title = _head(record)
    edition = f" ({record.edition} ed.)" if record.edition else ""
    publisher = f". {record.publisher}" if record.publisher else ""
    return f"{authors}. {year}. <em>{title}</em>{edition}{publisher}."


def _journal(record: CitationRecord) -> str:
    authors, year, title = _head(record)
    journal = f"<em>{record.journal or 'Unknown Journal'}</em>"
    volume = f", {record.volume}" if record.volume else ""
    issue = f"({record.issue})" if record.issue else ""
    pages = f", {record.pages}" if record.pages else ""
    doi = f". https://doi.org/{record.doi}" if record.doi else ""
    return f"{authors}. {year}. {title}. {journal}{volume}{issue}{pages}{doi}."


def _website(record: CitationRecord) -> str:
    authors, year, title = _head(record)
    website = record.website or ""
    url = f". Retrieved from {record.url}" if record.url else ""
    retrieved = f" on {record.retrieved_date}" if record.retrieved_date else ""
    return f"{authors}. {year}. {title}. {website}{url}{retrieved}."


def _conference(record: CitationRecord) -> str:
    authors, year, title = _head(record)
    conference = f"In <em>{record.conference}</em>" if record.conference else ""
    pages = f" (pp. {record.pages})" if record.pages else ""
    location = f". {record.location}" if record.location else ""
    return f"{authors}. {year}. {title}. {conference}{pages}{location}."


def _generic(record: CitationRecord) -> str:
    authors, year, title = _head(record)
    source = f". {record.source}" if record.source else ""
    return f"{authors}. {year}. {title}{source}."


_FORMATTERS: dict[CitationKind, Callable[[CitationRecord], str]] = {
    CitationKind.BOOK: _book,
    CitationKind.JOURNAL: _journal,
    CitationKind.WEBSITE: _website,
    CitationKind.CONFERENCE: _conference,
    CitationKind.GENERIC: _generic,
}


def format_citation(record: CitationRecord) -> str:
    """Render *record* as a single-line citation; never fails."""
    return _FORMATTERS.get(record.kind, _generic)(record)


# Checked in order; the first cue found decides the kind.
_KIND_CUES: tuple[tuple[tuple[str, ...], CitationKind], ...] = (
    (("doi.org",), CitationKind.JOURNAL),
    (("Retrieved from",), CitationKind.WEBSITE),
    (("ed.)", "edition"), CitationKind.BOOK),
    (("conference", "symposium"), CitationKind.CONFERENCE),
)

_AUTHOR_RE = re.compile(r"^([^.|(]+)")
_YEAR_RE = re.compile(r"\(([^)]+)\)")
_THROUGH_YEAR_RE = re.compile(r"^[^)]+\)\.?\s*")
_TITLE_RE = re.compile(r"^([^.]+)")


def guess_citation_kind(citation: str) -> CitationKind:
    for cues, kind in _KIND_CUES:
        if any(cue in citation for cue in cues):
            return kind
    return CitationKind.GENERIC


def parse_citation(citation: str) -> CitationRecord:
    """Guess a structured record from a formatted citation.

    Lossy: formatting a parsed record does not reproduce the input.
    """
    authors = UNKNOWN_AUTHOR
    year = NO_DATE
    title = UNTITLED

    author_match = _AUTHOR_RE.match(citation)
    if author_match:
        authors = author_match.group(1).strip()

    year_match = _YEAR_RE.search(citation)
    if year_match:
        year = year_match.group(1).strip()

    after_year = _THROUGH_YEAR_RE.sub("", citation, count=1)
    title_match = _TITLE_RE.match(after_year)
    if title_match:
        title = title_match.group(1).strip()

    return CitationRecord(kind=guess_citation_kind(citation), authors=authors, year=year, title=title)


def format_citations_for_display(citations: Sequence[str]) -> str:
    """HTML list of citations numbered from 1."""
    if not citations:
        return "<p>No citations available.</p>"

    items = [
        '<div class="citation-item">'
        f'<span class="citation-number">[{index}]</span>'
        f'<span class="citation-text">{citation}</span>'
        "</div>"
        for index, citation in enumerate(citations, 1)
    ]
    return '<div class="citations-list">' + "\n".join(items) + "</div>"


def insert_citation_references(content: str, records: Sequence[CitationRecord]) -> str:
    """Mark the first occurrence of each record keyword with a numbered citation superscript.

    Occurrences inside tags or inside an existing citation superscript are skipped.
    """
    for index, record in enumerate(records, 1):
        marker = f'<sup class="citation" data-citation-id="{index}">[{index}]</sup>'
        for keyword in record.keywords:
            if not keyword:
                continue
            pattern = re.compile(rf"\b{re.escape(keyword)}\b(?![^<]*>|[^<>]*</sup>)", re.IGNORECASE)
            content = pattern.sub(lambda m: m.group(0) + marker, content, count=1)
    return content


def strip_markup(citation: str) -> str:
    """Citation text with tags removed and entities decoded."""
    return html.unescape(re.sub(r"<[^>]*>", "", citation)).strip()
