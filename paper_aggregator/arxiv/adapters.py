"""arXiv adapter implementing the paper source protocol."""

import logging

import httpx

from ..papers.errors import SourceError
from ..papers.models import PaperRecord, SearchRequest
from ..papers.protocols import PaperSource
from ..settings import ARXIV_API_URL, ARXIV_RATE_LIMIT_SECONDS, DEFAULT_QUERY
from .client import ArXivClient
from .parser import SOURCE_NAME, parse_feed

logger = logging.getLogger(__name__)


def build_search_query(query: str, category: str) -> str:
    """Build an arXiv search_query from free text and a category filter.

    Examples:
        ("transformers", "cs.LG") -> "all:transformers AND cat:cs.LG"
        ("", "cs.LG") -> "cat:cs.LG"
        ("transformers", "all") -> "all:transformers"
    """
    query = query.strip()
    if category.lower() == "all":
        return f"all:{query or DEFAULT_QUERY}"
    if query:
        return f"all:{query} AND cat:{category}"
    return f"cat:{category}"


class ArXivAdapter(PaperSource):
    """
    Adapter for the arXiv export API.

    Usage:
        async with ArXivAdapter() as adapter:
            results = await adapter.search_papers(SearchRequest(query="diffusion"))
    """

    name = SOURCE_NAME

    def __init__(
        self,
        base_url: str = ARXIV_API_URL,
        rate_limit_seconds: float = ARXIV_RATE_LIMIT_SECONDS,
        truncate_abstracts: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize arXiv adapter.

        Args:
            base_url: Query endpoint of the export API
            rate_limit_seconds: Minimum seconds between requests (default: 3.0)
            truncate_abstracts: Cut abstracts to the preview length
            transport: Optional httpx transport for the underlying client
        """
        self._client = ArXivClient(
            base_url=base_url,
            rate_limit_seconds=rate_limit_seconds,
            transport=transport,
        )
        self._truncate = truncate_abstracts
        self._entered = False

    async def __aenter__(self) -> "ArXivAdapter":
        await self._client.__aenter__()
        self._entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._client.__aexit__(exc_type, exc_val, exc_tb)
        self._entered = False

    def _ensure_entered(self) -> None:
        if not self._entered:
            raise RuntimeError(
                "ArXivAdapter not initialized. Use 'async with' context manager."
            )

    async def search_papers(self, request: SearchRequest) -> list[PaperRecord]:
        """
        Search arXiv, newest updates first.

        Args:
            request: Query, category and pagination parameters

        Returns:
            List of PaperRecord objects in feed order
        """
        self._ensure_entered()
        search_query = build_search_query(request.query, request.category)

        try:
            document = await self._client.query(
                search_query,
                start=request.start,
                max_results=request.max_results,
            )
        except httpx.HTTPError as e:
            raise SourceError(self.name, f"arXiv API request failed: {e}") from e

        papers = parse_feed(document, truncate=self._truncate)
        logger.info(f"arXiv search '{search_query}' returned {len(papers)} papers")
        return papers
