"""Request orchestration for every aggregator action."""

import asyncio
import logging
from contextlib import AsyncExitStack
from typing import Any

from .enhancement import PaperEnhancer
from .paper_sources.composite import CompositeSearchProvider
from .papers.errors import AllSourcesFailedError
from .papers.models import PaperRecord, SearchRequest, SearchResponse
from .papers.protocols import SignalProvider
from .scoring.heuristics import (
    assess_breakthrough,
    paper_citation_velocity,
    personalized_reason,
    rank_papers,
    relevance_score,
    trending_score,
)
from .settings import CACHE_TTL_SECONDS, DEFAULT_QUERY
from .storage.cache import CacheBackend, NoCache, build_cache_key

logger = logging.getLogger(__name__)

PERSONALIZED_LIMIT = 20
TRENDING_LIMIT = 10
CACHEABLE_ACTIONS = ("search", "personalized", "trending")


class PaperAggregatorService:
    """
    Serves aggregator requests on top of the composite paper source.

    Collaborators are passed in explicitly. The cache and the language model
    are optional and their failures never fail a request.

    Usage:
        async with PaperAggregatorService(composite, enhancer, signals) as service:
            payload = await service.handle(SearchRequest(query="diffusion"))
    """

    def __init__(
        self,
        composite: CompositeSearchProvider,
        enhancer: PaperEnhancer,
        signals: SignalProvider,
        cache: CacheBackend | None = None,
        cache_ttl: int = CACHE_TTL_SECONDS,
    ):
        self.composite = composite
        self.enhancer = enhancer
        self.signals = signals
        self.cache = cache or NoCache()
        self.cache_ttl = cache_ttl
        self._stack: AsyncExitStack | None = None

    async def __aenter__(self) -> "PaperAggregatorService":
        # Whatever was entered before a failure is closed again
        async with AsyncExitStack() as stack:
            await stack.enter_async_context(self.composite)
            if self.enhancer.llm is not None:
                await stack.enter_async_context(self.enhancer.llm)
            self._stack = stack.pop_all()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._stack is not None:
            stack, self._stack = self._stack, None
            await stack.__aexit__(exc_type, exc_val, exc_tb)

    async def handle(self, request: SearchRequest) -> dict[str, Any]:
        """Dispatch a request to its action and return the JSON payload."""
        logger.info(f"Handling {request.action} request: query='{request.query}'")

        cacheable = request.action in CACHEABLE_ACTIONS
        key = build_cache_key(request) if cacheable else None

        if key is not None and not request.refresh:
            cached = await asyncio.to_thread(self.cache.get, key)
            if cached is not None:
                logger.info(f"Cache hit for {key}")
                if "cached" in cached:
                    cached = {**cached, "cached": True}
                return cached

        handler = getattr(self, f"_{request.action}")
        payload = await handler(request)

        if key is not None and payload.get("success"):
            await asyncio.to_thread(self.cache.set, key, payload, self.cache_ttl)

        return payload

    async def _enhance(self, papers: list[PaperRecord]) -> list[PaperRecord]:
        enhanced = []
        for paper in papers:
            try:
                enhanced.append(await self.enhancer.enhance(paper))
            except Exception as e:
                logger.warning(f"Enhancement failed for {paper.id}: {e}")
                enhanced.append(paper)
        return enhanced

    async def _search(self, request: SearchRequest) -> dict[str, Any]:
        merged = await self.composite.search_papers(request)
        papers = merged[: request.max_results]
        if request.enhance:
            papers = await self._enhance(papers)

        response = SearchResponse(
            papers=papers,
            total=len(merged),
            count=len(papers),
            query=request.query,
            category=request.category,
            sources=[p.name for p in self.composite.select(request.sources)],
            features={
                "aiSummaries": request.enhance,
                "impactMetrics": request.enhance,
                "researchLineage": request.enhance,
                "recommendations": request.enhance,
            },
        )
        logger.info(f"Search returned {response.count} of {response.total} papers")
        return response.to_json()

    async def _personalized(self, request: SearchRequest) -> dict[str, Any]:
        interests = request.interests
        if not interests:
            return {"success": True, "papers": [], "interests": []}

        results = await asyncio.gather(
            *(
                self.composite.search_papers(request.model_copy(update={"query": interest}))
                for interest in interests
            ),
            return_exceptions=True,
        )

        result_sets: list[list[PaperRecord]] = []
        errors: list[BaseException] = []
        for interest, result in zip(interests, results):
            if isinstance(result, BaseException):
                logger.warning(f"Search for interest '{interest}' failed: {result}")
                errors.append(result)
                continue
            result_sets.append(result)

        if len(errors) == len(interests):
            raise AllSourcesFailedError(errors)

        merged = self.composite.merge(result_sets)
        scored = [
            paper.with_enhancements(
                relevance_score=relevance_score(paper, interests),
                personalized_reason=personalized_reason(paper, interests),
            )
            for paper in merged
        ]
        ranked = rank_papers(scored, key=lambda p: p.relevance_score)

        return {
            "success": True,
            "papers": [p.to_json() for p in ranked[:PERSONALIZED_LIMIT]],
            "interests": interests,
        }

    async def _trending(self, request: SearchRequest) -> dict[str, Any]:
        query = request.query or DEFAULT_QUERY
        papers = await self.composite.search_papers(request.model_copy(update={"query": query}))

        scored = []
        for paper in papers:
            paper = paper.with_enhancements(citation_velocity=paper_citation_velocity(paper))
            scored.append(
                paper.with_enhancements(
                    trending_score=trending_score(paper, self.signals.popularity(paper)),
                    trending_reason=self.signals.trending_reason(paper),
                )
            )
        ranked = rank_papers(scored, key=lambda p: p.trending_score)

        return {
            "success": True,
            "papers": [p.to_json() for p in ranked[:TRENDING_LIMIT]],
            "timeframe": request.timeframe,
            "category": request.category,
        }

    def _subject(self, request: SearchRequest) -> PaperRecord:
        # Stand-in record for actions that address a paper by id/title only
        return PaperRecord(
            id=request.paper_id or "",
            title=request.title or "Untitled",
            abstract=request.abstract or "",
            source="request",
        )

    async def _metrics(self, request: SearchRequest) -> dict[str, Any]:
        paper = self._subject(request)
        breakthrough = assess_breakthrough(self.signals.breakthrough_indicators(paper))
        return {
            "success": True,
            "paperId": request.paper_id,
            "title": request.title,
            "metrics": self.signals.impact_metrics(paper).model_dump(mode="json", by_alias=True),
            "breakthrough": breakthrough.model_dump(mode="json", by_alias=True),
        }

    async def _lineage(self, request: SearchRequest) -> dict[str, Any]:
        groups = self.signals.lineage_graph(request.paper_id, request.title)
        return {
            "success": True,
            "paperId": request.paper_id,
            "title": request.title,
            "lineage": [group.model_dump(mode="json") for group in groups],
        }

    async def _summary(self, request: SearchRequest) -> dict[str, Any]:
        summary = await self.enhancer.summary_for(self._subject(request))
        return {
            "success": True,
            "title": request.title,
            "summary": summary.model_dump(mode="json", by_alias=True),
        }
