"""Semantic Scholar API integration."""

from .adapters import SemanticScholarAdapter, to_paper_record
from .client import SemanticScholarClient
from .models import Author, SearchResponse, SemanticScholarPaper

__all__ = [
    # Models
    "Author",
    "SearchResponse",
    "SemanticScholarPaper",
    # Adapters
    "SemanticScholarAdapter",
    "to_paper_record",
    # Low-level client
    "SemanticScholarClient",
]
