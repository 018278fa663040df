"""Low-level arXiv export API client with rate limiting."""

import logging
from typing import Any

import httpx

from ..ratelimit import RateLimiter
from ..settings import ARXIV_API_URL, ARXIV_RATE_LIMIT_SECONDS, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class ArXivClient:
    """Async client returning raw Atom feed text from the arXiv query API."""

    def __init__(
        self,
        base_url: str = ARXIV_API_URL,
        rate_limit_seconds: float = ARXIV_RATE_LIMIT_SECONDS,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize arXiv client.

        Args:
            base_url: Query endpoint of the export API
            rate_limit_seconds: Minimum seconds between requests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to fake the upstream in tests)
        """
        self.base_url = base_url
        self._rate_limiter = RateLimiter(rate_limit_seconds)
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "ArXivClient":
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager."
            )
        return self._client

    async def query(
        self,
        search_query: str,
        start: int = 0,
        max_results: int = 20,
        sort_by: str = "lastUpdatedDate",
        sort_order: str = "descending",
    ) -> str:
        """
        Run a search query and return the feed document.

        Args:
            search_query: Query in arXiv syntax (e.g. "all:transformers AND cat:cs.LG")
            start: Pagination offset
            max_results: Page size
            sort_by: relevance, lastUpdatedDate or submittedDate
            sort_order: ascending or descending

        Returns:
            Atom XML text

        Raises:
            httpx.HTTPError: On transport failure or non-success status
        """
        params = {
            "search_query": search_query,
            "start": start,
            "max_results": max_results,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }

        await self._rate_limiter.acquire()
        logger.debug(f"Fetching from arXiv: {self.base_url} {params}")

        response = await self.client.get(self.base_url, params=params)
        response.raise_for_status()

        logger.debug(f"arXiv responded {response.status_code} ({len(response.text)} chars)")
        return response.text
