"""Relevance, trending and breakthrough heuristics over paper records."""

import math
from datetime import date
from typing import Callable, Iterable

from ..papers.models import BreakthroughAssessment, BreakthroughIndicators, PaperRecord

RECENT_YEAR = 2023
TRENDING_YEAR = 2024
HIGH_CITATIONS = 100
HIGH_CITATION_VELOCITY = 10
DAYS_PER_MONTH = 30

INTEREST_MATCH_POINTS = 10
RECENCY_POINTS = 5
CITATION_POINTS = 5
TRENDING_RECENCY_POINTS = 30
TRENDING_VELOCITY_POINTS = 20

BREAKTHROUGH_WEIGHTS = {
    "novelty": 0.30,
    "performance_jump": 0.25,
    "citation_velocity": 0.15,
    "industry_adoption": 0.15,
    "social_buzz": 0.10,
    "expert_opinion": 0.05,
}
BREAKTHROUGH_THRESHOLD = 0.7

FALLBACK_REASON = "Recommended based on your reading history"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _search_text(paper: PaperRecord) -> str:
    return f"{paper.title} {paper.abstract}".lower()


def matched_interests(paper: PaperRecord, interests: Iterable[str]) -> list[str]:
    """Interests that appear (case-insensitively) in the title or abstract."""
    text = _search_text(paper)
    return [i for i in interests if i and i.lower() in text]


def relevance_score(paper: PaperRecord, interests: Iterable[str]) -> int:
    """
    Score a paper against a reader's interests.

    10 points per matching interest, 5 for papers from 2023 onwards and 5 for
    papers with more than 100 citations. Unbounded above.
    """
    score = INTEREST_MATCH_POINTS * len(matched_interests(paper, interests))

    year = paper.publication_year
    if year is not None and year >= RECENT_YEAR:
        score += RECENCY_POINTS
    if (paper.citations or 0) > HIGH_CITATIONS:
        score += CITATION_POINTS

    return score


def personalized_reason(paper: PaperRecord, interests: Iterable[str]) -> str:
    matched = matched_interests(paper, interests)
    if matched:
        return f"Matches your interest in {', '.join(matched)}"
    return FALLBACK_REASON


def citation_velocity(
    citation_count: int | None,
    published: date | None,
    today: date | None = None,
) -> int:
    """Citations per month since publication.

    Elapsed time is floored at one month; missing inputs give 0.
    """
    if not citation_count or published is None:
        return 0

    today = today or date.today()
    months = (today - published).days / DAYS_PER_MONTH
    return round_half_up(citation_count / max(months, 1))


def paper_citation_velocity(paper: PaperRecord, today: date | None = None) -> int:
    if paper.citation_velocity is not None:
        return paper.citation_velocity
    return citation_velocity(paper.citations, paper.published, today)


def trending_score(paper: PaperRecord, popularity: float, today: date | None = None) -> int:
    """
    Trending score: 30 for papers from 2024 onwards, 20 for more than 10
    citations per month, plus a popularity signal in [0, 50).
    """
    score = 0.0

    year = paper.publication_year
    if year is not None and year >= TRENDING_YEAR:
        score += TRENDING_RECENCY_POINTS
    if paper_citation_velocity(paper, today) > HIGH_CITATION_VELOCITY:
        score += TRENDING_VELOCITY_POINTS

    score += popularity
    return round_half_up(score)


def breakthrough_score(indicators: BreakthroughIndicators) -> float:
    """Weighted sum of the six breakthrough indicators."""
    return sum(
        getattr(indicators, name) * weight
        for name, weight in BREAKTHROUGH_WEIGHTS.items()
    )


def assess_breakthrough(indicators: BreakthroughIndicators) -> BreakthroughAssessment:
    score = breakthrough_score(indicators)
    return BreakthroughAssessment(
        indicators=indicators,
        score=round(score, 4),
        is_breakthrough=score > BREAKTHROUGH_THRESHOLD,
    )


def rank_papers(
    papers: Iterable[PaperRecord],
    key: Callable[[PaperRecord], float | int | None],
) -> list[PaperRecord]:
    """Sort descending by score; equal scores keep their original order."""
    return sorted(papers, key=lambda p: key(p) or 0, reverse=True)
