"""arXiv API integration for paper search.

Usage:
    from paper_aggregator.arxiv import ArXivAdapter

    async with ArXivAdapter() as adapter:
        results = await adapter.search_papers(SearchRequest(query="diffusion"))
"""

from .adapters import ArXivAdapter, build_search_query
from .client import ArXivClient
from .parser import extract_field, parse_entry, parse_feed, split_entries, truncate_abstract

__all__ = [
    "ArXivAdapter",
    "ArXivClient",
    "build_search_query",
    "extract_field",
    "parse_entry",
    "parse_feed",
    "split_entries",
    "truncate_abstract",
]
