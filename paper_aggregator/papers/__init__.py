"""Canonical paper record, request envelopes and shared protocols."""

from .errors import (
    AggregatorError,
    AllSourcesFailedError,
    InvalidRequestError,
    SourceError,
)
from .models import (
    AISummary,
    BreakthroughAssessment,
    BreakthroughIndicators,
    EnhancedContent,
    ImpactMetrics,
    LineageGroup,
    LineageStep,
    PaperRecord,
    RelatedPaper,
    SearchRequest,
    SearchResponse,
    format_authors,
)
from .protocols import DedupKey, PaperSource, SignalProvider

__all__ = [
    # Models
    "AISummary",
    "BreakthroughAssessment",
    "BreakthroughIndicators",
    "EnhancedContent",
    "ImpactMetrics",
    "LineageGroup",
    "LineageStep",
    "PaperRecord",
    "RelatedPaper",
    "SearchRequest",
    "SearchResponse",
    "format_authors",
    # Protocols
    "DedupKey",
    "PaperSource",
    "SignalProvider",
    # Errors
    "AggregatorError",
    "AllSourcesFailedError",
    "InvalidRequestError",
    "SourceError",
]
