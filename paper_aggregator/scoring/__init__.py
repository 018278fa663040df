"""Scoring heuristics and the signals that feed them."""

from .heuristics import (
    BREAKTHROUGH_THRESHOLD,
    BREAKTHROUGH_WEIGHTS,
    assess_breakthrough,
    breakthrough_score,
    citation_velocity,
    matched_interests,
    paper_citation_velocity,
    personalized_reason,
    rank_papers,
    relevance_score,
    trending_score,
)
from .signals import RandomSignalProvider

__all__ = [
    "BREAKTHROUGH_THRESHOLD",
    "BREAKTHROUGH_WEIGHTS",
    "assess_breakthrough",
    "breakthrough_score",
    "citation_velocity",
    "matched_interests",
    "paper_citation_velocity",
    "personalized_reason",
    "rank_papers",
    "relevance_score",
    "trending_score",
    "RandomSignalProvider",
]
