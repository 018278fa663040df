"""Paper sources module for multi-provider paper search.

Usage:
    from paper_aggregator.paper_sources import CompositeSearchProvider

    providers = [ArXivAdapter(), SemanticScholarAdapter()]
    async with CompositeSearchProvider(providers) as composite:
        papers = await composite.search_papers(request)
"""

from .composite import CompositeSearchProvider
from .deduplication import (
    arxiv_id_key,
    deduplicate_papers,
    merge_results,
    normalize_title,
    title_key,
)

__all__ = [
    "CompositeSearchProvider",
    "arxiv_id_key",
    "deduplicate_papers",
    "merge_results",
    "normalize_title",
    "title_key",
]
