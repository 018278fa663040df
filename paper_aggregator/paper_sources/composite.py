"""Composite search provider aggregating multiple sources."""

import asyncio
import logging

from ..papers.errors import AllSourcesFailedError, InvalidRequestError
from ..papers.models import PaperRecord, SearchRequest
from ..papers.protocols import DedupKey, PaperSource
from .deduplication import merge_results, title_key

logger = logging.getLogger(__name__)

ALL_SOURCES = "all"

# Short names accepted in a request's sources list
SOURCE_ALIASES = {
    "semantic": "semantic_scholar",
    "s2": "semantic_scholar",
}


class CompositeSearchProvider:
    """
    Fans a request out to several paper sources and merges the results.

    Every selected source is queried concurrently. A source that fails
    contributes no papers; the request only fails when every selected
    source failed. Results are merged in provider order, so the first
    provider's record wins when two sources return the same paper.

    Usage:
        providers = [ArXivAdapter(), SemanticScholarAdapter()]

        async with CompositeSearchProvider(providers) as composite:
            results = await composite.search_papers(SearchRequest(query="transformers"))
    """

    def __init__(
        self,
        providers: list[PaperSource],
        dedup_key: DedupKey = title_key,
        deduplicate: bool = True,
    ):
        """
        Initialize composite provider.

        Args:
            providers: Search providers, in merge priority order
            dedup_key: Identity function used when merging
            deduplicate: Whether to drop duplicates across providers
        """
        self._providers = providers
        self._dedup_key = dedup_key
        self._deduplicate = deduplicate

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self._providers]

    async def __aenter__(self) -> "CompositeSearchProvider":
        """Enter async context for all providers."""
        for provider in self._providers:
            if hasattr(provider, "__aenter__"):
                await provider.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context for all providers."""
        for provider in self._providers:
            if hasattr(provider, "__aexit__"):
                await provider.__aexit__(exc_type, exc_val, exc_tb)

    def select(self, sources: list[str]) -> list[PaperSource]:
        """
        Pick the providers named by a request's ``sources`` list.

        "all" selects every provider. Other entries must be a provider name or
        one of SOURCE_ALIASES, so "semantic" selects "semantic_scholar".

        Raises:
            InvalidRequestError: If nothing matches
        """
        wanted = [s.strip().lower() for s in sources if s.strip()]
        wanted = [SOURCE_ALIASES.get(token, token) for token in wanted]
        if not wanted or ALL_SOURCES in wanted:
            return list(self._providers)

        selected = [
            provider
            for provider in self._providers
            if provider.name in wanted
        ]
        if not selected:
            raise InvalidRequestError(
                f"Unknown sources {', '.join(wanted)}. "
                f"Available: {', '.join(self.provider_names)}"
            )
        return selected

    async def search_papers(self, request: SearchRequest) -> list[PaperRecord]:
        """Search the selected providers in parallel and merge results."""
        providers = self.select(request.sources)

        results_lists = await asyncio.gather(
            *(provider.search_papers(request) for provider in providers),
            return_exceptions=True,
        )

        succeeded: list[list[PaperRecord]] = []
        errors: list[BaseException] = []
        for provider, results in zip(providers, results_lists):
            if isinstance(results, BaseException):
                logger.warning(f"Provider {provider.name} failed: {results}")
                errors.append(results)
                succeeded.append([])
                continue
            logger.debug(f"Provider {provider.name} returned {len(results)} papers")
            succeeded.append(results)

        if errors and len(errors) == len(providers):
            raise AllSourcesFailedError(errors)

        return self.merge(succeeded)

    def merge(self, result_sets: list[list[PaperRecord]]) -> list[PaperRecord]:
        """Merge result sets in order, deduplicating when enabled."""
        if self._deduplicate:
            return merge_results(result_sets, key=self._dedup_key)
        return [paper for results in result_sets for paper in results]
