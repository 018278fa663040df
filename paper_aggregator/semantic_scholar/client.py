"""Async HTTP client for the Semantic Scholar Graph API."""

import asyncio
import logging
from typing import Any

import httpx

from ..ratelimit import RateLimiter
from ..settings import (
    MAX_RETRIES,
    RATE_LIMIT_REQUESTS_PER_SECOND,
    RATE_LIMIT_REQUESTS_PER_SECOND_NO_KEY,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_BACKOFF_FACTOR,
    SEMANTIC_SCHOLAR_API_KEY,
    SEMANTIC_SCHOLAR_BASE_URL,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = [
    "paperId",
    "title",
    "abstract",
    "authors",
    "year",
    "citationCount",
    "referenceCount",
    "url",
    "venue",
    "publicationDate",
    "externalIds",
]
SEARCH_PAGE_LIMIT = 100

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.ReadTimeout)


class SemanticScholarClient:
    """
    Async client for the paper search endpoint.

    Rate limited (1 request/s on the shared pool, 10/s with an API key) and
    retried with exponential backoff on 429, 5xx and connection failures.
    Other error statuses are raised immediately.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = SEMANTIC_SCHOLAR_BASE_URL,
        max_retries: int = MAX_RETRIES,
        backoff_factor: float = RETRY_BACKOFF_FACTOR,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            api_key: Optional API key, defaults to SEMANTIC_SCHOLAR_API_KEY
            base_url: Graph API base URL
            max_retries: Total attempts per request
            backoff_factor: Base of the exponential backoff, in seconds
            transport: Optional httpx transport (used to fake the upstream in tests)
        """
        self.api_key = api_key or SEMANTIC_SCHOLAR_API_KEY
        self.base_url = base_url
        self.max_retries = max(max_retries, 1)
        self.backoff_factor = backoff_factor
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if self.api_key:
            self.rate_limiter = RateLimiter.per_second(RATE_LIMIT_REQUESTS_PER_SECOND)
        else:
            logger.debug("No Semantic Scholar API key, using the shared rate limit")
            self.rate_limiter = RateLimiter.per_second(RATE_LIMIT_REQUESTS_PER_SECOND_NO_KEY)

    @property
    def headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key} if self.api_key else {}

    async def __aenter__(self) -> "SemanticScholarClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=REQUEST_TIMEOUT_SECONDS,
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

    def _backoff(self, attempt: int, response: httpx.Response | None = None) -> float:
        delay = self.backoff_factor ** attempt
        if response is not None:
            retry_after = response.headers.get("Retry-After", "")
            if retry_after.isdigit():
                delay = max(delay, float(retry_after))
        return delay

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """
        GET with rate limiting and retries.

        Raises:
            httpx.HTTPStatusError: On a non-retryable status, or a retryable
                one that persisted through every attempt
            httpx.TransportError: When the connection kept failing
        """
        last_response: httpx.Response | None = None

        for attempt in range(1, self.max_retries + 1):
            await self.rate_limiter.acquire()
            logger.debug(f"GET {path} (attempt {attempt}/{self.max_retries})")

            try:
                response = await self.client.get(path, **kwargs)
            except RETRYABLE_ERRORS as e:
                if attempt == self.max_retries:
                    raise
                delay = self._backoff(attempt - 1)
                logger.warning(f"Semantic Scholar connection error: {e}, retrying in {delay}s")
                await asyncio.sleep(delay)
                continue

            if response.status_code not in RETRYABLE_STATUS_CODES:
                response.raise_for_status()
                return response

            last_response = response
            if attempt < self.max_retries:
                delay = self._backoff(attempt - 1, response)
                logger.warning(
                    f"Semantic Scholar returned {response.status_code}, retrying in {delay}s"
                )
                await asyncio.sleep(delay)

        logger.error(f"Semantic Scholar request failed after {self.max_retries} attempts")
        last_response.raise_for_status()
        return last_response

    async def search_papers(
        self,
        query: str,
        fields: list[str] | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> dict[str, Any]:
        """Run a /paper/search query and return the decoded JSON page."""
        params: dict[str, Any] = {
            "query": query,
            "fields": ",".join(fields or SEARCH_FIELDS),
            "limit": min(limit, SEARCH_PAGE_LIMIT),
            "offset": offset,
        }

        logger.info(f"Searching Semantic Scholar: query='{query}', limit={limit}, offset={offset}")

        response = await self.get("/paper/search", params=params)
        data = response.json()

        logger.info(
            f"Semantic Scholar returned {len(data.get('data') or [])} papers "
            f"(total available: {data.get('total', 0)})"
        )
        return data
