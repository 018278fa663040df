"""Tests for relevance, trending and breakthrough heuristics."""

from datetime import date, timedelta

import pytest

from paper_aggregator.papers import BreakthroughIndicators, PaperRecord
from paper_aggregator.scoring import (
    BREAKTHROUGH_WEIGHTS,
    assess_breakthrough,
    breakthrough_score,
    citation_velocity,
    personalized_reason,
    rank_papers,
    relevance_score,
    trending_score,
)

TODAY = date(2024, 7, 1)


def paper(
    title: str = "A Paper",
    abstract: str = "",
    year: int | None = None,
    citations: int | None = None,
    published: date | None = None,
) -> PaperRecord:
    return PaperRecord(
        id=title,
        title=title,
        abstract=abstract,
        source="semantic_scholar",
        year=year,
        citations=citations,
        published=published,
    )


class TestCitationVelocity:
    def test_citations_per_month(self):
        """60 citations over six months is 10 per month."""
        assert citation_velocity(60, TODAY - timedelta(days=180), TODAY) == 10

    def test_elapsed_time_floored_at_one_month(self):
        assert citation_velocity(25, TODAY - timedelta(days=3), TODAY) == 25

    def test_future_date_does_not_divide_by_zero(self):
        assert citation_velocity(40, TODAY + timedelta(days=90), TODAY) == 40

    def test_missing_inputs_give_zero(self):
        assert citation_velocity(None, TODAY, TODAY) == 0
        assert citation_velocity(0, TODAY, TODAY) == 0
        assert citation_velocity(100, None, TODAY) == 0

    def test_rounds_half_up(self):
        # 15 citations over 2 months
        assert citation_velocity(15, TODAY - timedelta(days=60), TODAY) == 8


class TestRelevance:
    def test_points_per_interest_recency_and_citations(self):
        p = paper("Transformers for Robotics", year=2024, citations=150)

        assert relevance_score(p, ["transformers", "robotics"]) == 30
        assert relevance_score(p, []) == 10

    def test_matching_is_case_insensitive_over_title_and_abstract(self):
        p = paper("Vision", abstract="We apply DIFFUSION models.", year=2019)

        assert relevance_score(p, ["Diffusion"]) == 10

    def test_adding_a_matched_interest_never_lowers_score(self):
        p = paper("Graph learning with attention", year=2022, citations=10)
        interests: list[str] = []
        previous = relevance_score(p, interests)

        for interest in ["graph", "quantum", "attention"]:
            interests.append(interest)
            score = relevance_score(p, interests)
            assert score >= previous
            previous = score

    def test_personalized_reason(self):
        p = paper("Reinforcement learning for robotics")

        assert personalized_reason(p, ["robotics", "vision", "reinforcement"]) == (
            "Matches your interest in robotics, reinforcement"
        )
        assert personalized_reason(p, ["chemistry"]) == "Recommended based on your reading history"


class TestTrending:
    def test_recent_fast_paper(self):
        p = paper(year=2024, citations=120, published=TODAY - timedelta(days=180))

        assert trending_score(p, popularity=12.4, today=TODAY) == 62

    def test_old_slow_paper_only_gets_popularity(self):
        p = paper(year=2019, citations=5, published=date(2019, 1, 1))

        assert trending_score(p, popularity=33.5, today=TODAY) == 34

    def test_popularity_bounds(self):
        p = paper(year=2025)

        assert 30 <= trending_score(p, popularity=0.0) <= 80
        assert trending_score(p, popularity=49.99) == 80


class TestBreakthrough:
    def test_weights_sum_to_one(self):
        assert sum(BREAKTHROUGH_WEIGHTS.values()) == pytest.approx(1.0)

    def test_weighted_sum(self):
        indicators = BreakthroughIndicators(novelty=1.0, performance_jump=1.0)

        assert breakthrough_score(indicators) == pytest.approx(0.55)

    def test_threshold(self):
        strong = BreakthroughIndicators(
            novelty=1.0,
            performance_jump=1.0,
            citation_velocity=1.0,
            industry_adoption=0.5,
            social_buzz=0.0,
            expert_opinion=0.0,
        )
        weak = BreakthroughIndicators(**{name: 0.5 for name in BREAKTHROUGH_WEIGHTS})

        assert assess_breakthrough(strong).is_breakthrough is True
        assert assess_breakthrough(weak).is_breakthrough is False
        assert assess_breakthrough(weak).score == pytest.approx(0.5)


def test_rank_papers_is_stable_and_descending():
    papers = [paper(f"p{i}") for i in range(5)]
    scores = {"p0": 5, "p1": 10, "p2": 5, "p3": 10, "p4": 1}

    ranked = rank_papers(papers, key=lambda p: scores[p.title])

    assert [p.title for p in ranked] == ["p1", "p3", "p0", "p2", "p4"]
