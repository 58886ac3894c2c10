"""Parser package."""

from .base import (
    ChartDescriptor,
    ChartKind,
    CitationKind,
    CitationRecord,
    ElementNode,
    NodeKind,
    ResearchResult,
)
from .chart_blocks import extract_chart_blocks, strip_chart_blocks
from .citations import extract_citations
from .markup import parse_markup
from .response import combine_research_results, process_research_response

__all__ = [
    "ChartDescriptor",
    "ChartKind",
    "CitationKind",
    "CitationRecord",
    "ElementNode",
    "NodeKind",
    "ResearchResult",
    "extract_chart_blocks",
    "strip_chart_blocks",
    "extract_citations",
    "parse_markup",
    "combine_research_results",
    "process_research_response",
]
