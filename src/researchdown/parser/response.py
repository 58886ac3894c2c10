"""Turn raw model responses into research results and combine them into one document."""

from __future__ import annotations

import html
from collections.abc import Iterable
from datetime import date

from .base import ChartDescriptor, ChartKind, ResearchResult
from .chart_blocks import extract_chart_blocks, strip_chart_blocks
from .citations import extract_citations

_GENERIC_KEYWORDS = ("research", "academic", "analysis")


def process_research_response(response: str, subtopic: str | None = None) -> ResearchResult:
    """Split a raw response into cleaned content, citations and chart descriptors."""
    charts = extract_chart_blocks(response)
    citations = extract_citations(response)
    content = strip_chart_blocks(response)

    if subtopic is not None:
        for chart in charts:
            chart.subtopic = subtopic

    return ResearchResult(content=content, citations=citations, charts=charts)


def format_subtopic_content(subtopic: str, content: str) -> str:
    """Prefix *content* with a level-2 subtopic heading unless it already has one."""
    if f"<h2>{subtopic}</h2>" in content or f"<h2>{subtopic.strip()}</h2>" in content:
        return content
    return f"<h2>{subtopic}</h2>\n{content}"


def generate_keywords(topic: str) -> list[str]:
    keywords = [topic]
    words = topic.split()
    if len(words) > 1:
        for word in words:
            if len(word) > 3 and word not in keywords:
                keywords.append(word)
    keywords.extend(_GENERIC_KEYWORDS)
    return keywords


def combine_research_results(
    topic: str, results: Iterable[ResearchResult], *, today: date | None = None
) -> ResearchResult:
    """Merge per-subtopic results into a single document.

    Citations are de-duplicated by exact string equality, keeping the first
    occurrence; chart descriptors are concatenated in order.
    """
    results = list(results)
    content = _title_and_abstract(topic, today or date.today())
    content += "".join(result.content for result in results)

    citations: list[str] = []
    for result in results:
        for citation in result.citations:
            if citation not in citations:
                citations.append(citation)

    content += _references_section(citations)
    charts = [chart for result in results for chart in result.charts]
    return ResearchResult(content=content, citations=citations, charts=charts)


def fallback_result(topic: str, subtopic: str) -> ResearchResult:
    """Placeholder result for a subtopic whose model call failed."""
    safe_topic = html.escape(topic)
    safe_subtopic = html.escape(subtopic)
    content = (
        f"\n<h2>{safe_subtopic}</h2>\n"
        "<p>We apologize, but we encountered an issue while researching this subtopic. "
        f'The research system was unable to generate comprehensive content for "{safe_subtopic}" '
        f'related to "{safe_topic}".</p>\n\n'
        "<p>Here are some general points that might be relevant:</p>\n\n"
        "<ul>\n"
        "    <li>This subtopic is an important component of the overall research topic.</li>\n"
        "    <li>Consider exploring academic databases and journals for more information.</li>\n"
        f"    <li>Key search terms might include: {safe_topic}, {safe_subtopic}, research, academic.</li>\n"
        "</ul>\n\n"
        "<p>You may want to try researching this topic again later or modify the research parameters.</p>\n"
    )
    chart = ChartDescriptor(
        title=f"Sample Data for {subtopic}",
        description="Placeholder visualization data",
        labels=["Category A", "Category B", "Category C", "Category D"],
        data=[25, 40, 30, 50],
        kind=ChartKind.BAR,
        subtopic=subtopic,
    )
    return ResearchResult(
        content=content,
        citations=["Due to technical limitations, citations could not be generated for this section."],
        charts=[chart],
    )


def format_research_date(day: date) -> str:
    """``October 19, 2026`` style date used in document headers."""
    return f"{day:%B} {day.day}, {day.year}"


def _title_and_abstract(topic: str, today: date) -> str:
    safe_topic = html.escape(topic)
    keywords = "".join(f'<span class="keyword">{html.escape(k)}</span>' for k in generate_keywords(topic))
    return (
        f"\n<h1>{safe_topic}</h1>\n"
        f'<p class="research-date">Research conducted on {format_research_date(today)}</p>\n\n'
        '<div class="abstract">\n'
        "    <h3>Abstract</h3>\n"
        f"    <p>This research document provides a comprehensive analysis of {safe_topic}. "
        "It explores various aspects of the topic, including historical context, "
        "theoretical frameworks, current developments, and future implications. "
        "The research is based on academic sources and presents a balanced view of the subject matter.</p>\n"
        "</div>\n\n"
        '<div class="keywords">\n'
        "    <h3>Keywords</h3>\n"
        f"    <div>{keywords}</div>\n"
        "</div>\n\n"
        "<h2>Table of Contents</h2>\n"
        '<div class="table-of-contents">\n'
        '    <ul id="toc-list"></ul>\n'
        "</div>\n\n"
    )


def _references_section(citations: list[str]) -> str:
    if not citations:
        return ""
    lines = ["<h2>References</h2>", '<div class="references">']
    lines.extend(f'<p class="reference">[{index}] {citation}</p>' for index, citation in enumerate(citations, 1))
    lines.append("</div>")
    return "\n".join(lines) + "\n"
