from __future__ import annotations

from datetime import date

from researchdown.parser.base import ChartDescriptor, ChartKind, ResearchResult
from researchdown.parser.citations import extract_citations
from researchdown.parser.response import (
    combine_research_results,
    fallback_result,
    format_research_date,
    format_subtopic_content,
    generate_keywords,
    process_research_response,
)


def test_process_response_end_to_end() -> None:
    raw = (
        "<h2>X</h2><p>Text.</p>VISUALIZATION_DATA_JSON"
        '{"title":"T","description":"D","labels":["A","B"],"data":[1,2],"type":"bar"}'
        "END_VISUALIZATION_DATA_JSON"
    )

    result = process_research_response(raw)

    assert result.content == "<h2>X</h2><p>Text.</p>"
    assert result.citations == []
    assert len(result.charts) == 1
    chart = result.charts[0]
    assert chart.title == "T"
    assert chart.data == [1, 2]
    assert chart.kind is ChartKind.BAR
    assert chart.subtopic is None


def test_process_response_tags_subtopic_and_extracts_citations() -> None:
    raw = (
        "<h2>Energy</h2><p>Solar grows [1].</p>"
        "<h3>References</h3><p>[1] IEA (2023). Renewables.</p>"
        'VISUALIZATION_DATA_JSON{"title": "Capacity"}END_VISUALIZATION_DATA_JSON'
    )

    result = process_research_response(raw, subtopic="Energy")

    assert result.citations == ["IEA (2023). Renewables."]
    assert result.charts[0].subtopic == "Energy"
    assert "VISUALIZATION" not in result.content


def test_format_subtopic_content() -> None:
    assert format_subtopic_content("Energy", "<p>x</p>") == "<h2>Energy</h2>\n<p>x</p>"
    assert format_subtopic_content("Energy ", "<h2>Energy</h2><p>x</p>") == "<h2>Energy</h2><p>x</p>"


def test_generate_keywords() -> None:
    assert generate_keywords("AI in Healthcare") == [
        "AI in Healthcare",
        "Healthcare",
        "research",
        "academic",
        "analysis",
    ]
    assert generate_keywords("Robotics") == ["Robotics", "research", "academic", "analysis"]


def test_combine_results_deduplicates_citations_in_order() -> None:
    first = ResearchResult(
        content="<h2>One</h2>",
        citations=["A.", "B."],
        charts=[ChartDescriptor(title="c1")],
    )
    second = ResearchResult(
        content="<h2>Two</h2>",
        citations=["B.", "C."],
        charts=[ChartDescriptor(title="c2")],
    )

    combined = combine_research_results("Topic", [first, second], today=date(2026, 10, 19))

    assert combined.citations == ["A.", "B.", "C."]
    assert [c.title for c in combined.charts] == ["c1", "c2"]
    assert combined.content.index("<h2>One</h2>") < combined.content.index("<h2>Two</h2>")
    assert "Research conducted on October 19, 2026" in combined.content
    assert '<p class="reference">[3] C.</p>' in combined.content
    assert extract_citations(combined.content) == combined.citations


def test_combine_without_citations_has_no_references() -> None:
    combined = combine_research_results("Topic", [ResearchResult(content="<p>x</p>")])

    assert "References" not in combined.content
    assert combined.citations == []


def test_fallback_result() -> None:
    result = fallback_result("Climate", "Oceans")

    assert "<h2>Oceans</h2>" in result.content
    assert len(result.citations) == 1
    chart = result.charts[0]
    assert chart.labels == ["Category A", "Category B", "Category C", "Category D"]
    assert chart.data == [25, 40, 30, 50]
    assert chart.kind is ChartKind.BAR
    assert chart.subtopic == "Oceans"


def test_format_research_date() -> None:
    assert format_research_date(date(2025, 3, 5)) == "March 5, 2025"
