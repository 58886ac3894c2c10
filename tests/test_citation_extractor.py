from __future__ import annotations

from researchdown.parser.citations import CITATION_TIERS, extract_citations, find_references_section


def test_no_references_section() -> None:
    assert extract_citations("<h2>Intro</h2><p>[1] Looks like a citation.</p>") == []
    assert find_references_section("<p>nothing</p>") is None


def test_numbered_paragraphs_strip_the_index() -> None:
    markup = (
        "<h2>Intro</h2><p>Body [1].</p>"
        "<h2>References</h2>\n"
        "<p>[1] Smith, J. (2020). First work.</p>\n"
        "<p> [2] Doe, A. (2021). <em>Second work</em>.</p>"
    )

    assert extract_citations(markup) == [
        "Smith, J. (2020). First work.",
        "Doe, A. (2021). <em>Second work</em>.",
    ]


def test_numbered_tier_wins_over_plain_paragraphs() -> None:
    markup = "<h3>Citations</h3><p>Sources used below.</p><p>[1] Only this one.</p>"

    assert extract_citations(markup) == ["Only this one."]


def test_bare_paragraphs_fall_back_to_one_citation_each() -> None:
    markup = "<h2>Bibliography</h2><p>Smith (2020). Alpha.</p><p>Doe (2021). Beta.</p>"

    assert extract_citations(markup) == ["Smith (2020). Alpha.", "Doe (2021). Beta."]


def test_line_fallback_strips_tags() -> None:
    markup = "<h3>Bibliography</h3>\nSmith (2020)<br>Doe (2021)<br/>\n<em>Roe</em> (2022)\n"

    assert extract_citations(markup) == ["Smith (2020)", "Doe (2021)", "Roe (2022)"]


def test_section_ends_at_next_heading() -> None:
    markup = "<h2>References</h2><p>[1] Kept.</p><h2>Appendix</h2><p>[2] Not a citation.</p>"

    assert extract_citations(markup) == ["Kept."]


def test_heading_match_is_case_insensitive_and_accepts_attributes() -> None:
    markup = '<h3 id="refs">citations</h3><p class="reference">[1] Lower case heading.</p>'

    assert extract_citations(markup) == ["Lower case heading."]


def test_tiers_are_ordered_from_most_to_least_structured() -> None:
    assert [tier.name for tier in CITATION_TIERS] == ["numbered", "paragraph", "line"]

    numbered, paragraph, line = CITATION_TIERS
    section = "<p>Plain entry.</p>"
    assert not numbered.applies(section)
    assert paragraph.applies(section)
    assert paragraph.extract(section) == ["Plain entry."]
    assert line.extract("a<br>\n<b>b</b>") == ["a", "b"]
