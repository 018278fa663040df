"""Factory functions to build collaborators from configuration.

Every client handle is constructed here and passed down explicitly; nothing
keeps a process-wide connection.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..arxiv import ArXivAdapter
from ..enhancement import PaperEnhancer
from ..paper_sources import CompositeSearchProvider, arxiv_id_key, title_key
from ..scoring import RandomSignalProvider
from ..semantic_scholar import SemanticScholarAdapter
from ..service import PaperAggregatorService
from ..storage import CacheBackend, MemoryCache, NoCache, RedisCache

if TYPE_CHECKING:
    from ..llm.protocols import LLMProvider
    from ..papers.protocols import PaperSource, SignalProvider
    from .loader import CacheConfig, EnhancementConfig, LLMConfig, ProfileConfig, SourcesConfig

logger = logging.getLogger(__name__)

DEDUP_STRATEGIES = {
    "title": title_key,
    "arxiv_id": arxiv_id_key,
}


def create_sources(
    config: SourcesConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[PaperSource]:
    """Create the configured paper sources, in merge priority order.

    Args:
        config: Sources configuration
        transport: Optional httpx transport shared by every source (tests)
    """
    sources: list[PaperSource] = []
    for name in config.providers:
        if name == "arxiv":
            sources.append(
                ArXivAdapter(
                    base_url=config.arxiv_url,
                    rate_limit_seconds=config.arxiv_rate_limit,
                    truncate_abstracts=config.truncate_abstracts,
                    transport=transport,
                )
            )
        elif name == "semantic_scholar":
            sources.append(
                SemanticScholarAdapter(
                    api_key=config.semantic_scholar_api_key,
                    max_retries=config.max_retries,
                    truncate_abstracts=config.truncate_abstracts,
                    transport=transport,
                )
            )
        else:
            raise ValueError(f"Unsupported paper source: {name}")
    return sources


def create_cache(config: CacheConfig) -> CacheBackend:
    """Create the response cache. A redis backend without a URL degrades to NoCache."""
    if config.backend == "memory":
        return MemoryCache(max_entries=config.max_entries)

    elif config.backend == "redis":
        if not config.url:
            logger.warning("Redis cache configured without a url, caching disabled")
            return NoCache()
        return RedisCache(url=config.url)

    elif config.backend == "none":
        return NoCache()

    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")


def create_signal_provider(config: EnhancementConfig) -> SignalProvider:
    if config.signals == "random":
        return RandomSignalProvider(seed=config.seed)
    raise ValueError(f"Unsupported signal provider: {config.signals}")


def create_llm(config: LLMConfig) -> LLMProvider | None:
    """Create the summary LLM, or None when summaries use templates.

    An OpenRouter backend without an API key degrades to None.
    """
    if config.backend == "openrouter":
        from ..llm import OpenRouterAdapter

        if not config.api_key:
            logger.warning("OpenRouter backend configured without api_key, using template summaries")
            return None

        return OpenRouterAdapter(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
        )

    elif config.backend == "mock":
        from ..llm import MockLLMProvider

        return MockLLMProvider()

    elif config.backend == "none":
        return None

    else:
        raise ValueError(f"Unsupported LLM backend: {config.backend}")


def create_service(
    profile: ProfileConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> PaperAggregatorService:
    """Create a fully wired service from a profile.

    The returned service is an async context manager that opens and closes
    every upstream client.
    """
    composite = CompositeSearchProvider(
        create_sources(profile.sources, transport=transport),
        dedup_key=DEDUP_STRATEGIES[profile.sources.dedup_strategy],
        deduplicate=profile.sources.deduplication,
    )
    signals = create_signal_provider(profile.enhancement)
    enhancer = PaperEnhancer(signals, llm=create_llm(profile.llm))

    return PaperAggregatorService(
        composite=composite,
        enhancer=enhancer,
        signals=signals,
        cache=create_cache(profile.cache),
        cache_ttl=profile.cache.ttl_seconds,
    )
