"""Protocol definitions for paper sources and enhancement signals."""

from typing import Callable, Protocol, runtime_checkable

from .models import (
    AISummary,
    BreakthroughIndicators,
    ImpactMetrics,
    LineageGroup,
    LineageStep,
    PaperRecord,
    RelatedPaper,
    SearchRequest,
)

DedupKey = Callable[[PaperRecord], str]
"""Maps a record to the identity used when merging result sets."""


@runtime_checkable
class PaperSource(Protocol):
    """Protocol for upstream paper catalogs.

    Implement this protocol to add support for new paper search APIs.
    """

    name: str

    async def search_papers(self, request: SearchRequest) -> list[PaperRecord]:
        """
        Search the catalog and normalize its results.

        Args:
            request: Parsed request parameters (query, category, pagination)

        Returns:
            List of PaperRecord objects in upstream order

        Raises:
            SourceError: When the upstream cannot be reached or rejects the query
        """
        ...


@runtime_checkable
class SignalProvider(Protocol):
    """Protocol for the signals behind enhancement fields.

    The bundled implementation returns placeholder data; a provider backed by
    real popularity, citation or adoption data can replace it without touching
    the scoring formulas.
    """

    def popularity(self, paper: PaperRecord) -> float:
        """Popularity signal in [0, 50) added to the trending score."""
        ...

    def trending_reason(self, paper: PaperRecord) -> str:
        ...

    def impact_metrics(self, paper: PaperRecord) -> ImpactMetrics:
        ...

    def breakthrough_indicators(self, paper: PaperRecord) -> BreakthroughIndicators:
        ...

    def summary(self, paper: PaperRecord) -> AISummary:
        ...

    def lineage(self, paper: PaperRecord) -> list[LineageStep]:
        ...

    def lineage_graph(self, paper_id: str | None, title: str | None) -> list[LineageGroup]:
        ...

    def key_insights(self, paper: PaperRecord) -> list[str]:
        ...

    def related_papers(self, paper: PaperRecord) -> list[RelatedPaper]:
        ...
