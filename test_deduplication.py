"""Tests for merging and deduplicating multi-source results."""

from paper_aggregator.papers import PaperRecord
from paper_aggregator.paper_sources import (
    arxiv_id_key,
    deduplicate_papers,
    merge_results,
    normalize_title,
    title_key,
)


def paper(id: str, title: str, source: str = "arxiv", **kwargs) -> PaperRecord:
    return PaperRecord(id=id, title=title, abstract="", source=source, **kwargs)


def test_normalize_title():
    assert normalize_title("  Attention Is\tAll\nYou Need ") == "attentionisallyouneed"


def test_first_record_wins():
    a = paper("1", "Attention Is All You Need")
    b = paper("ss-1", "attention is all  you need", source="semantic_scholar")

    result = deduplicate_papers([a, b])

    assert result == [a]


def test_order_is_preserved():
    papers = [paper(str(i), title) for i, title in enumerate(["C", "A", "c", "B", "a"])]

    result = deduplicate_papers(papers)

    assert [p.title for p in result] == ["C", "A", "B"]


def test_merged_keys_are_unique():
    sets = [
        [paper("1", "One"), paper("2", "Two")],
        [paper("x", "TWO", source="semantic_scholar"), paper("y", "Three", source="semantic_scholar")],
    ]

    merged = merge_results(sets)

    keys = [title_key(p) for p in merged]
    assert len(keys) == len(set(keys))
    assert [p.id for p in merged] == ["1", "2", "y"]


def test_merge_respects_source_order():
    arxiv = [paper("2401.1", "Shared Title")]
    semantic = [paper("ss", "Shared Title", source="semantic_scholar", citations=50)]

    assert merge_results([arxiv, semantic])[0].source == "arxiv"
    assert merge_results([semantic, arxiv])[0].source == "semantic_scholar"


def test_arxiv_id_strategy_ignores_versions():
    """The alternative strategy keys on the version-less arXiv identifier."""
    v1 = paper("1234.5678v1", "Original title")
    v2 = paper("1234.5678v2", "Revised title")
    ss = paper(
        "abc",
        "Yet another title",
        source="semantic_scholar",
        pdf_url="https://arxiv.org/pdf/1234.5678.pdf",
    )
    unrelated = paper("zzz", "Unrelated", source="semantic_scholar")

    merged = merge_results([[v1, v2], [ss, unrelated]], key=arxiv_id_key)

    assert [p.id for p in merged] == ["1234.5678v1", "zzz"]
    assert arxiv_id_key(unrelated) == title_key(unrelated)


def test_empty_inputs():
    assert deduplicate_papers([]) == []
    assert merge_results([[], []]) == []
