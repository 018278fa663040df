"""Tests for the arXiv Atom feed parser."""

import xml.etree.ElementTree as ET
from datetime import date

from paper_aggregator.arxiv.parser import (
    NO_ABSTRACT,
    UNKNOWN_AUTHOR,
    UNTITLED,
    extract_field,
    extract_identifier,
    parse_entry,
    parse_feed,
    split_entries,
    truncate_abstract,
)
from paper_aggregator.paper_sources import merge_results, title_key

FEED_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<feed xmlns="http://www.w3.org/2005/Atom"'
    ' xmlns:arxiv="http://arxiv.org/schemas/atom"'
    ' xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">\n'
    "<title>arXiv Query</title>\n"
    "<opensearch:totalResults>2</opensearch:totalResults>\n"
)
FEED_FOOTER = "</feed>\n"


def make_entry(
    arxiv_id: str = "2401.01234v1",
    title: str = "Sparse Attention at Scale",
    summary: str = "We study sparse attention.",
    authors: tuple[str, ...] = ("Ada Lovelace", "Alan Turing"),
    categories: tuple[str, ...] = ("cs.LG", "cs.AI"),
    published: str = "2024-01-03T18:59:59Z",
) -> str:
    author_xml = "".join(f"<author><name>{a}</name></author>" for a in authors)
    category_xml = "".join(
        f'<category term="{c}" scheme="http://arxiv.org/schemas/atom"/>' for c in categories
    )
    return (
        "<entry>\n"
        f"<id>http://arxiv.org/abs/{arxiv_id}</id>\n"
        f"<updated>{published}</updated>\n"
        f"<published>{published}</published>\n"
        f"<title>{title}</title>\n"
        f"<summary>{summary}</summary>\n"
        f"{author_xml}\n"
        f'<link href="http://arxiv.org/abs/{arxiv_id}" rel="alternate" type="text/html"/>\n'
        f'<link title="pdf" href="http://arxiv.org/pdf/{arxiv_id}" rel="related" type="application/pdf"/>\n'
        f'<arxiv:primary_category term="{categories[0] if categories else "cs.LG"}"/>\n'
        f"{category_xml}\n"
        "</entry>\n"
    )


def make_feed(*entries: str) -> str:
    return FEED_HEADER + "".join(entries) + FEED_FOOTER


def test_parse_feed_returns_one_record_per_entry():
    """A well-formed feed with N entries yields N records in order."""
    feed = make_feed(
        make_entry("2401.00001v1", title="First"),
        make_entry("2401.00002v1", title="Second"),
        make_entry("2401.00003v1", title="Third"),
    )

    papers = parse_feed(feed)

    assert [p.title for p in papers] == ["First", "Second", "Third"]
    assert all(p.source == "arxiv" for p in papers)


def test_parse_feed_without_entries():
    """A feed with no entries, or an empty body, yields no records."""
    assert parse_feed(make_feed()) == []
    assert parse_feed("") == []
    assert parse_feed(b"") == []


def test_parse_entry_fields():
    """Every field is mapped from the Atom entry."""
    feed = make_feed(
        make_entry(
            "2401.01234v2",
            title="Sparse\n   Attention   at Scale",
            summary="  We study\n sparse attention.  ",
            authors=("Ada Lovelace", "Alan Turing", "Grace Hopper"),
            categories=("cs.LG", "stat.ML", "cs.LG"),
        )
    )

    [paper] = parse_feed(feed)

    assert paper.id == "2401.01234v2"
    assert paper.title == "Sparse Attention at Scale"
    assert paper.abstract == "We study sparse attention."
    assert paper.authors == ["Ada Lovelace", "Alan Turing", "Grace Hopper"]
    assert paper.categories == ["cs.LG", "stat.ML", "cs.LG"]
    assert paper.published == date(2024, 1, 3)
    assert paper.updated == date(2024, 1, 3)
    assert paper.url == "https://arxiv.org/abs/2401.01234v2"
    assert paper.pdf_url == "https://arxiv.org/pdf/2401.01234v2"
    assert paper.publication_year == 2024


def test_missing_fields_use_placeholders():
    """An entry missing title, summary and authors still produces a record."""
    entry = "<entry><id>http://arxiv.org/abs/2401.09999v1</id></entry>"

    [paper] = parse_feed(make_feed(entry))

    assert paper.title == UNTITLED
    assert paper.abstract == NO_ABSTRACT
    assert paper.authors == [UNKNOWN_AUTHOR]
    assert paper.categories == []
    assert paper.published is None
    # No PDF link in the entry, so one is built from the identifier
    assert paper.pdf_url == "https://arxiv.org/pdf/2401.09999v1.pdf"


def test_extract_field_tolerates_attributes_and_cdata():
    raw = (
        '<entry><title type="text" xml:lang="en">  <![CDATA[Deep <b>Nets</b>]]>  </title>'
        "<summary>plain</summary></entry>"
    )

    assert extract_field(raw, "title") == "Deep <b>Nets</b>"
    assert extract_field(raw, "summary") == "plain"
    assert extract_field(raw, "published") == ""


def test_extract_field_never_raises_on_garbage():
    assert extract_field("<entry><title>unterminated", "title") == ""
    assert extract_field("", "title") == ""


def test_extract_identifier_fallbacks():
    assert extract_identifier("http://arxiv.org/abs/1234.5678v2") == "1234.5678v2"
    assert extract_identifier("http://arxiv.org/abs/hep-th/9901001v1") == "hep-th/9901001v1"
    assert extract_identifier("https://example.org/papers/abc123") == "abc123"
    assert extract_identifier("abc123") == "abc123"


def test_malformed_feed_keeps_one_record_per_entry():
    """A broken document is split at entry boundaries and every entry is kept."""
    broken_entry = "<entry><id>http://arxiv.org/abs/2401.00002v1</id><title>Broken & bad</title></entry>"
    feed = make_feed(
        make_entry("2401.00001v1", title="Good One"),
        broken_entry,
        make_entry("2401.00003v1", title="Good Three"),
    )

    papers = parse_feed(feed)

    assert len(papers) == 3
    assert papers[0].title == "Good One"
    assert papers[1].title == "Broken & bad"
    assert papers[1].id == "2401.00002v1"
    assert papers[2].title == "Good Three"


def test_stray_ampersand_keeps_entry_fields():
    bad_entry = (
        "<entry><id>http://arxiv.org/abs/2222.0002v1</id><title>Bad Paper</title>"
        "<summary>Q&A systems</summary></entry>"
    )

    papers = parse_feed(make_feed(make_entry("2222.0001v1", title="Good Paper"), bad_entry))

    assert papers[1].id == "2222.0002v1"
    assert papers[1].title == "Bad Paper"
    assert papers[1].abstract == "Q&A systems"
    assert papers[1].url == "https://arxiv.org/abs/2222.0002v1"
    assert papers[1].pdf_url == "https://arxiv.org/pdf/2222.0002v1.pdf"


def test_mismatched_tags_are_read_field_by_field():
    """An entry that cannot be parsed as XML is read from its raw text."""
    bad_entry = (
        "<entry><id>http://arxiv.org/abs/2222.0003v1</id>"
        "<title>Half <b>Bold</title>"
        "<summary><![CDATA[Kept <i>as is</i>]]></summary>"
        "<author><name>Ada &amp; Co</name></author>"
        '<link title="pdf" href="http://arxiv.org/pdf/2222.0003v1" type="application/pdf"/>'
        '<category term="cs.CL"/></entry>'
    )

    [good, paper] = parse_feed(make_feed(make_entry("2222.0001v1"), bad_entry))

    assert good.id == "2222.0001v1"
    assert paper.id == "2222.0003v1"
    assert paper.title == "Half Bold"
    assert paper.abstract == "Kept <i>as is</i>"
    assert paper.authors == ["Ada & Co"]
    assert paper.categories == ["cs.CL"]
    assert paper.pdf_url == "https://arxiv.org/pdf/2222.0003v1"


def test_unclosed_last_entry_is_still_parsed():
    feed = FEED_HEADER + make_entry("2401.00001v1", title="Complete") + (
        "<entry><id>http://arxiv.org/abs/2401.00002v1</id><title>Cut off</title>"
    )

    papers = parse_feed(feed)

    assert len(papers) == 2
    assert papers[1].title == "Cut off"
    assert papers[1].id == "2401.00002v1"


def test_split_entries_accepts_bare_entry():
    entries = split_entries(make_entry("2401.00001v1"))

    assert len(entries) == 1
    assert isinstance(entries[0], ET.Element)


def test_truncate_abstract_is_idempotent():
    long_text = "x" * 450

    once = truncate_abstract(long_text)
    twice = truncate_abstract(once)

    assert once == "x" * 300 + "..."
    assert twice == once
    assert truncate_abstract("short") == "short"


def test_truncate_abstract_cuts_text_already_ending_in_ellipsis():
    text = "a" * 298 + "..."

    assert truncate_abstract(text) == "a" * 298 + ".." + "..."
    assert truncate_abstract("b" * 297 + "...") == "b" * 297 + "..."


def test_parse_entry_truncates_when_requested():
    [entry] = split_entries(make_feed(make_entry(summary="word " * 200)))

    paper = parse_entry(entry, truncate=True)

    assert len(paper.abstract) == 303
    assert paper.abstract.endswith("...")


def test_versions_of_same_paper_merge_to_one_record():
    """Two versions of one paper with the same title collapse to the first seen."""
    arxiv_papers = parse_feed(make_feed(make_entry("1234.5678", title="Same Paper")))
    other_papers = parse_feed(make_feed(make_entry("1234.5678v2", title="Same  paper")))

    merged = merge_results([arxiv_papers, other_papers])

    assert len(merged) == 1
    assert merged[0].id == "1234.5678"
    assert merged[0].url == "https://arxiv.org/abs/1234.5678"


def test_versions_in_one_feed_merge_by_normalized_title():
    feed = make_feed(
        make_entry("1234.5678", title="Foo Bar"),
        make_entry("1234.5678v2", title="foo  bar"),
    )

    parsed = parse_feed(feed)
    merged = merge_results([parsed])

    assert [p.id for p in parsed] == ["1234.5678", "1234.5678v2"]
    assert title_key(parsed[0]) == title_key(parsed[1]) == "foobar"
    assert [p.id for p in merged] == ["1234.5678"]
