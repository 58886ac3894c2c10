from __future__ import annotations

import pytest

from researchdown.parser.base import CitationKind, CitationRecord
from researchdown.renderer.citation_formatter import (
    format_authors,
    format_citation,
    format_citations_for_display,
    insert_citation_references,
    parse_citation,
)


@pytest.mark.parametrize("kind", list(CitationKind))
def test_every_kind_formats_an_empty_record(kind: CitationKind) -> None:
    citation = format_citation(CitationRecord(kind=kind))

    assert "Unknown Author" in citation
    assert "(n.d.)" in citation
    assert "Untitled" in citation


def test_author_lists() -> None:
    assert format_authors(None) == "Unknown Author"
    assert format_authors(()) == "Unknown Author"
    assert format_authors("Smith, J.") == "Smith, J."
    assert format_authors(("Smith",)) == "Smith"
    assert format_authors(("Smith", "Doe")) == "Smith & Doe"
    assert format_authors(("Smith", "Doe", "Roe")) == "Smith et al."


def test_book_with_edition_and_publisher() -> None:
    record = CitationRecord(
        kind=CitationKind.BOOK,
        authors="Donald Knuth",
        year="1997",
        title="The Art of Computer Programming",
        edition="3rd",
        publisher="Addison-Wesley",
    )

    assert format_citation(record) == (
        "Donald Knuth. (1997). <em>The Art of Computer Programming</em> (3rd ed.). Addison-Wesley."
    )


def test_journal_article() -> None:
    record = CitationRecord(
        kind=CitationKind.JOURNAL,
        authors=("Smith", "Doe"),
        year="2020",
        title="Deep things",
        journal="Nature",
        volume="12",
        issue="3",
        pages="45-67",
        doi="10.1000/xyz",
    )

    assert format_citation(record) == (
        "Smith & Doe. (2020). Deep things. <em>Nature</em>, 12(3), 45-67. https://doi.org/10.1000/xyz."
    )


def test_journal_without_name() -> None:
    assert "<em>Unknown Journal</em>" in format_citation(CitationRecord(kind=CitationKind.JOURNAL))


def test_website_conference_and_generic() -> None:
    website = CitationRecord(
        kind=CitationKind.WEBSITE,
        authors="WHO",
        year="2023",
        title="Fact sheet",
        website="WHO Website",
        url="https://who.int",
        retrieved_date="2024-01-01",
    )
    conference = CitationRecord(
        kind=CitationKind.CONFERENCE,
        authors=("Lee", "Park", "Kim"),
        year="2019",
        title="A paper",
        conference="NeurIPS",
        pages="1-9",
        location="Vancouver",
    )
    generic = CitationRecord(authors="Agency", year="2020", title="Annual report", source="Agency archive")

    assert format_citation(website) == (
        "WHO. (2023). Fact sheet. WHO Website. Retrieved from https://who.int on 2024-01-01."
    )
    assert format_citation(conference) == "Lee et al.. (2019). A paper. In <em>NeurIPS</em> (pp. 1-9). Vancouver."
    assert format_citation(generic) == "Agency. (2020). Annual report. Agency archive."


def test_record_from_loose_dict() -> None:
    record = CitationRecord.from_dict(
        {"type": "website", "authors": ["A", "B"], "retrievedDate": "2024-05-01", "title": "Page"}
    )

    assert record.kind is CitationKind.WEBSITE
    assert record.authors == ("A", "B")
    assert record.retrieved_date == "2024-05-01"
    assert CitationRecord.from_dict({"type": "podcast"}).kind is CitationKind.GENERIC


def test_parse_journal_citation() -> None:
    record = parse_citation("Smith (2020). Deep learning. https://doi.org/10.1/x.")

    assert record.authors == "Smith"
    assert record.year == "2020"
    assert record.title == "Deep learning"
    assert record.kind is CitationKind.JOURNAL


def test_parse_without_structure_keeps_defaults() -> None:
    record = parse_citation("Just a string")

    assert record.authors == "Just a string"
    assert record.year == "n.d."
    assert record.title == "Just a string"
    assert record.kind is CitationKind.GENERIC


@pytest.mark.parametrize(
    ("citation", "kind"),
    [
        ("Org (2021). Page. Retrieved from https://example.org", CitationKind.WEBSITE),
        ("Author (2010). Book (2nd ed.). Publisher.", CitationKind.BOOK),
        ("Lee (2019). Paper. In Proceedings of the symposium.", CitationKind.CONFERENCE),
        # Book cue is checked before the conference cue.
        ("Lee (2019). Notes from the conference, 2nd edition.", CitationKind.BOOK),
        # Journal cue is checked first of all.
        ("Lee (2019). Retrieved from https://doi.org/10.1/x", CitationKind.JOURNAL),
    ],
)
def test_parse_kind_cues_are_ordered(citation: str, kind: CitationKind) -> None:
    assert parse_citation(citation).kind is kind


def test_citations_display() -> None:
    assert format_citations_for_display([]) == "<p>No citations available.</p>"

    rendered = format_citations_for_display(["First.", "Second."])
    assert rendered.startswith('<div class="citations-list">')
    assert '<span class="citation-number">[2]</span><span class="citation-text">Second.</span>' in rendered


def test_insert_citation_references_marks_first_occurrence() -> None:
    content = "<p>Deep learning is popular. Deep learning is everywhere.</p>"
    records = [CitationRecord(keywords=("deep learning",))]

    marked = insert_citation_references(content, records)

    marker = '<sup class="citation" data-citation-id="1">[1]</sup>'
    assert marked == f"<p>Deep learning{marker} is popular. Deep learning is everywhere.</p>"


def test_insert_citation_references_skips_tag_attributes() -> None:
    content = '<p><a title="climate">climate</a> change</p>'
    records = [CitationRecord(), CitationRecord(keywords=("climate",))]

    marked = insert_citation_references(content, records)

    assert marked == '<p><a title="climate">climate<sup class="citation" data-citation-id="2">[2]</sup></a> change</p>'
