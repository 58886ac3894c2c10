"""Heuristic extraction of the reference list from research markup."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(
    r"<h([23])(?:\s[^>]*)?>\s*(?:References|Citations|Bibliography)\s*</h\1\s*>(.*?)(?=<h[23][\s>]|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_NUMBERED_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>\s*\[\d+\](.*?)</p\s*>", re.IGNORECASE | re.DOTALL)
_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p\s*>", re.IGNORECASE | re.DOTALL)
_LINE_BREAK_RE = re.compile(r"<br\s*/?>|\n", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")


@dataclass(frozen=True, slots=True)
class CitationTier:
    """One extraction strategy: ``applies`` guards ``extract``."""

    name: str
    applies: Callable[[str], bool]
    extract: Callable[[str], list[str]]


def _numbered_paragraphs(section: str) -> list[str]:
    return [m.group(1).strip() for m in _NUMBERED_PARAGRAPH_RE.finditer(section)]


def _paragraphs(section: str) -> list[str]:
    return [m.group(1).strip() for m in _PARAGRAPH_RE.finditer(section)]


def _lines(section: str) -> list[str]:
    lines = (_TAG_RE.sub("", line).strip() for line in _LINE_BREAK_RE.split(section))
    return [line for line in lines if line]


CITATION_TIERS: tuple[CitationTier, ...] = (
    CitationTier("numbered", lambda s: _NUMBERED_PARAGRAPH_RE.search(s) is not None, _numbered_paragraphs),
    CitationTier("paragraph", lambda s: _PARAGRAPH_RE.search(s) is not None, _paragraphs),
    CitationTier("line", lambda s: bool(s.strip()), _lines),
)


def find_references_section(markup: str) -> str | None:
    """Return the content following the first References/Citations/Bibliography heading."""
    match = _SECTION_RE.search(markup or "")
    if match is None:
        return None
    return match.group(2)


def extract_citations(markup: str) -> list[str]:
    """Extract citation strings in document order; empty when no section is found."""
    section = find_references_section(markup)
    if section is None:
        return []

    for tier in CITATION_TIERS:
        if not tier.applies(section):
            continue
        citations = tier.extract(section)
        if citations:
            logger.debug("Extracted %d citations with the %s strategy", len(citations), tier.name)
            return citations
    return []
