"""Tests for the composite provider that fans requests out to every source."""

import pytest

from paper_aggregator.paper_sources import CompositeSearchProvider, arxiv_id_key
from paper_aggregator.papers import (
    AllSourcesFailedError,
    InvalidRequestError,
    PaperRecord,
    SearchRequest,
    SourceError,
)


class FakeSource:
    """In-memory paper source returning fixed titles or raising."""

    def __init__(self, name: str, titles: list[str] | None = None, error: Exception | None = None):
        self.name = name
        self.titles = titles or []
        self.error = error
        self.requests: list[SearchRequest] = []
        self.entered = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, *args):
        self.entered = False

    async def search_papers(self, request: SearchRequest) -> list[PaperRecord]:
        self.requests.append(request)
        if self.error:
            raise self.error
        return [
            PaperRecord(id=f"{self.name}-{i}", title=title, abstract="", source=self.name)
            for i, title in enumerate(self.titles)
        ]


async def test_failed_source_contributes_nothing():
    """One source failing still returns the other source's records."""
    failing = FakeSource("arxiv", error=SourceError("arxiv", "timed out"))
    working = FakeSource("semantic_scholar", ["One", "Two", "Three"])

    async with CompositeSearchProvider([failing, working]) as composite:
        papers = await composite.search_papers(SearchRequest(query="q"))

    assert [p.title for p in papers] == ["One", "Two", "Three"]


async def test_all_sources_failing_raises():
    sources = [
        FakeSource("arxiv", error=SourceError("arxiv", "down")),
        FakeSource("semantic_scholar", error=SourceError("semantic_scholar", "429")),
    ]

    async with CompositeSearchProvider(sources) as composite:
        with pytest.raises(AllSourcesFailedError) as exc_info:
            await composite.search_papers(SearchRequest(query="q"))

    assert "arxiv: down" in str(exc_info.value)
    assert len(exc_info.value.errors) == 2


async def test_results_are_merged_in_provider_order():
    arxiv = FakeSource("arxiv", ["Shared", "Only arXiv"])
    semantic = FakeSource("semantic_scholar", ["shared", "Only S2"])

    async with CompositeSearchProvider([arxiv, semantic]) as composite:
        papers = await composite.search_papers(SearchRequest(query="q"))

    assert [(p.title, p.source) for p in papers] == [
        ("Shared", "arxiv"),
        ("Only arXiv", "arxiv"),
        ("Only S2", "semantic_scholar"),
    ]


async def test_deduplication_can_be_disabled():
    composite = CompositeSearchProvider(
        [FakeSource("arxiv", ["Same"]), FakeSource("semantic_scholar", ["Same"])],
        deduplicate=False,
    )

    papers = await composite.search_papers(SearchRequest(query="q"))

    assert len(papers) == 2


async def test_custom_dedup_key():
    composite = CompositeSearchProvider(
        [FakeSource("arxiv", ["A"]), FakeSource("semantic_scholar", ["A"])],
        dedup_key=arxiv_id_key,
    )

    papers = await composite.search_papers(SearchRequest(query="q"))

    # Ids differ and neither is an arXiv id in a PDF link, so titles decide
    assert len(papers) == 1


async def test_source_selection():
    arxiv = FakeSource("arxiv", ["From arXiv"])
    semantic = FakeSource("semantic_scholar", ["From S2"])
    composite = CompositeSearchProvider([arxiv, semantic])

    papers = await composite.search_papers(SearchRequest(query="q", sources="semantic"))

    assert [p.title for p in papers] == ["From S2"]
    assert arxiv.requests == []
    assert [s.name for s in composite.select(["all"])] == ["arxiv", "semantic_scholar"]
    assert [s.name for s in composite.select(["arxiv", "semantic"])] == ["arxiv", "semantic_scholar"]


def test_partial_source_names_do_not_match():
    composite = CompositeSearchProvider([FakeSource("arxiv"), FakeSource("semantic_scholar")])

    assert [s.name for s in composite.select(["s2"])] == ["semantic_scholar"]
    for token in ("a", "s", "scholar"):
        with pytest.raises(InvalidRequestError):
            composite.select([token])


def test_unknown_source_is_rejected():
    composite = CompositeSearchProvider([FakeSource("arxiv")])

    with pytest.raises(InvalidRequestError):
        composite.select(["pubmed"])


async def test_context_manager_enters_every_source():
    sources = [FakeSource("arxiv"), FakeSource("semantic_scholar")]

    async with CompositeSearchProvider(sources):
        assert all(s.entered for s in sources)

    assert not any(s.entered for s in sources)
