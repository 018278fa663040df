"""Semantic Scholar adapter implementing the paper source protocol."""

import logging
from datetime import date

import httpx

from ..arxiv.parser import (
    NO_ABSTRACT,
    UNKNOWN_AUTHOR,
    UNTITLED,
    collapse_whitespace,
    truncate_abstract,
)
from ..papers.errors import SourceError
from ..papers.models import PaperRecord, SearchRequest
from ..papers.protocols import PaperSource
from ..settings import ARXIV_PDF_URL, MAX_RETRIES, SEMANTIC_SCHOLAR_BASE_URL
from .client import SemanticScholarClient
from .models import SearchResponse, SemanticScholarPaper

logger = logging.getLogger(__name__)

SOURCE_NAME = "semantic_scholar"
DEFAULT_VENUE = "Preprint"
PAPER_PAGE_URL = "https://www.semanticscholar.org/paper"


def _parse_publication_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _get_pdf_url(paper: SemanticScholarPaper) -> str | None:
    """arXiv PDF link when the paper has an arXiv identifier."""
    if paper.external_ids and paper.external_ids.get("ArXiv"):
        return f"{ARXIV_PDF_URL}/{paper.external_ids['ArXiv']}.pdf"
    return None


def to_paper_record(paper: SemanticScholarPaper, truncate: bool = False) -> PaperRecord:
    """Convert a Semantic Scholar paper to the common record shape."""
    paper_id = paper.paper_id or ""
    published = _parse_publication_date(paper.publication_date)

    abstract = collapse_whitespace(paper.abstract or "") or NO_ABSTRACT
    if truncate:
        abstract = truncate_abstract(abstract)

    authors = [
        collapse_whitespace(a.name) for a in paper.authors if a.name and a.name.strip()
    ]

    url = paper.url or (f"{PAPER_PAGE_URL}/{paper_id}" if paper_id else "")

    return PaperRecord(
        id=paper_id,
        title=collapse_whitespace(paper.title or "") or UNTITLED,
        abstract=abstract,
        authors=authors or [UNKNOWN_AUTHOR],
        published=published,
        url=url,
        pdf_url=_get_pdf_url(paper),
        source=SOURCE_NAME,
        year=paper.year or (published.year if published else None),
        citations=paper.citation_count or 0,
        venue=paper.venue or DEFAULT_VENUE,
        references=paper.reference_count,
    )


class SemanticScholarAdapter(PaperSource):
    """
    Adapter for Semantic Scholar API.

    Usage:
        async with SemanticScholarAdapter() as adapter:
            results = await adapter.search_papers(SearchRequest(query="machine learning"))
    """

    name = SOURCE_NAME

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = SEMANTIC_SCHOLAR_BASE_URL,
        max_retries: int = MAX_RETRIES,
        truncate_abstracts: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the Semantic Scholar adapter.

        Args:
            api_key: Optional API key. If not provided, uses SEMANTIC_SCHOLAR_API_KEY
                    environment variable.
            base_url: Graph API base URL
            max_retries: Attempts per request on rate limiting or server errors
            truncate_abstracts: Cut abstracts to the preview length
            transport: Optional httpx transport for the underlying client
        """
        self._client = SemanticScholarClient(
            api_key=api_key,
            base_url=base_url,
            max_retries=max_retries,
            transport=transport,
        )
        self._truncate = truncate_abstracts
        self._entered = False

    async def __aenter__(self) -> "SemanticScholarAdapter":
        await self._client.__aenter__()
        self._entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._client.__aexit__(exc_type, exc_val, exc_tb)
        self._entered = False

    def _ensure_entered(self) -> None:
        if not self._entered:
            raise RuntimeError(
                "Adapter not initialized. Use 'async with' context manager."
            )

    async def search_papers(self, request: SearchRequest) -> list[PaperRecord]:
        """
        Search for papers matching the free-text query.

        Uses Semantic Scholar /paper/search endpoint. The category filter has
        no counterpart here and is ignored. An empty query returns no papers.
        """
        self._ensure_entered()

        if not request.query:
            logger.debug("Skipping Semantic Scholar search for empty query")
            return []

        try:
            response_data = await self._client.search_papers(
                query=request.query,
                limit=request.max_results,
                offset=request.start,
            )
        except httpx.HTTPError as e:
            raise SourceError(self.name, f"Semantic Scholar request failed: {e}") from e

        response = SearchResponse.model_validate(response_data)
        return [to_paper_record(p, truncate=self._truncate) for p in response.data]
