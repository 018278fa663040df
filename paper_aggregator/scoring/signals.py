"""Placeholder signal provider for enhancement fields.

None of these values are computed from real data: metrics are random draws
and summaries, lineages and insights are canned templates. Swap in another
SignalProvider to back them with real collaborators.
"""

import random

from ..papers.models import (
    AISummary,
    AltmetricMetrics,
    BreakthroughIndicators,
    GithubMetrics,
    ImpactMetrics,
    IndustryMetrics,
    LineageGroup,
    LineageStep,
    PaperRecord,
    RelatedPaper,
    SocialMetrics,
)
from ..papers.protocols import SignalProvider
from .heuristics import paper_citation_velocity

SUMMARY_TEMPLATES = [
    AISummary(
        why_matters="This paper introduces a breakthrough approach that could revolutionize model efficiency.",
        key_contribution="Reduces computational requirements by 40% while maintaining state-of-the-art performance.",
        practical_impact="Enables deployment of large models on edge devices for the first time.",
    ),
    AISummary(
        why_matters="Solves a critical bottleneck in scaling transformer models to longer sequences.",
        key_contribution="Novel attention mechanism that scales linearly instead of quadratically.",
        practical_impact="Makes it feasible to process documents with millions of tokens.",
    ),
    AISummary(
        why_matters="Bridges the gap between theoretical understanding and practical implementation.",
        key_contribution="Provides mathematical guarantees for convergence in real-world scenarios.",
        practical_impact="Reduces training time from weeks to days for production models.",
    ),
]

LINEAGE_BY_CATEGORY = {
    "cs.LG": [("BERT", 2018), ("RoBERTa", 2019), ("Current Work", 2024)],
    "cs.CV": [("ResNet", 2015), ("EfficientNet", 2019), ("Current Work", 2024)],
    "cs.CL": [("Transformer", 2017), ("GPT-3", 2020), ("Current Work", 2024)],
}
DEFAULT_LINEAGE_CATEGORY = "cs.LG"

LINEAGE_GRAPH = {
    "builds_on": [
        ("Attention Is All You Need", 2017, "xxx1"),
        ("BERT", 2018, "xxx2"),
        ("GPT-3", 2020, "xxx3"),
    ],
    "influenced_by": [("ResNet", 2015, "yyy1"), ("Transformer", 2017, "yyy2")],
    "led_to": [("GPT-4", 2023, "zzz1"), ("Claude", 2023, "zzz2")],
    "competing_approaches": [("Mamba", 2023, "aaa1"), ("RWKV", 2023, "aaa2")],
}

KEY_INSIGHTS = [
    "Achieves new SOTA on 5 benchmark datasets",
    "10x faster inference than previous methods",
    "Easy to implement with existing frameworks",
    "Extensive ablation studies validate approach",
]

RELATED_PAPERS = [
    ("Scaling Laws for Neural Language Models", 0.95),
    ("Attention Is All You Need", 0.89),
    ("BERT: Pre-training of Deep Bidirectional Transformers", 0.87),
]

TRENDING_REASONS = [
    "Rapid citation growth",
    "Featured in major conferences",
    "Industry adoption",
    "Breakthrough results",
    "Hot research topic",
]

COMPANIES = ["Google", "Meta", "OpenAI", "Microsoft"]


class RandomSignalProvider(SignalProvider):
    """
    Signal provider returning random metrics and template content.

    Usage:
        signals = RandomSignalProvider(seed=42)  # deterministic
        metrics = signals.impact_metrics(paper)
    """

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    def _count(self, upper: int) -> int:
        return self._rng.randrange(upper)

    def popularity(self, paper: PaperRecord) -> float:
        return self._rng.random() * 50

    def trending_reason(self, paper: PaperRecord) -> str:
        return self._rng.choice(TRENDING_REASONS)

    def impact_metrics(self, paper: PaperRecord) -> ImpactMetrics:
        citations = paper.citations if paper.citations is not None else self._count(1000)
        return ImpactMetrics(
            impact_score=self._count(100),
            quality_score=self._count(100),
            citations=citations,
            citation_velocity=paper_citation_velocity(paper),
            github=GithubMetrics(
                stars=self._count(500),
                forks=self._count(100),
                implementations=self._count(20),
            ),
            social=SocialMetrics(
                tweets=self._count(200),
                reddit_posts=self._count(50),
                blog_posts=self._count(30),
            ),
            industry=IndustryMetrics(
                in_production=self._count(10),
                companies=COMPANIES[: self._rng.randint(1, len(COMPANIES))],
                patents=self._count(5),
            ),
            altmetric=AltmetricMetrics(
                score=self._count(100),
                news_outlets=self._count(20),
                policy_documents=self._count(5),
            ),
        )

    def breakthrough_indicators(self, paper: PaperRecord) -> BreakthroughIndicators:
        return BreakthroughIndicators(
            novelty=self._rng.random(),
            performance_jump=self._rng.random(),
            citation_velocity=min(paper_citation_velocity(paper) / 50, 1.0),
            industry_adoption=self._rng.random(),
            social_buzz=self._rng.random(),
            expert_opinion=self._rng.random(),
        )

    def summary(self, paper: PaperRecord) -> AISummary:
        return self._rng.choice(SUMMARY_TEMPLATES)

    def lineage(self, paper: PaperRecord) -> list[LineageStep]:
        category = paper.categories[0] if paper.categories else DEFAULT_LINEAGE_CATEGORY
        steps = LINEAGE_BY_CATEGORY.get(category, LINEAGE_BY_CATEGORY[DEFAULT_LINEAGE_CATEGORY])
        return [LineageStep(paper=name, year=year) for name, year in steps]

    def lineage_graph(self, paper_id: str | None, title: str | None) -> list[LineageGroup]:
        return [
            LineageGroup(
                type=relation,
                papers=[
                    {"title": name, "year": year, "paperId": pid}
                    for name, year, pid in papers
                ],
            )
            for relation, papers in LINEAGE_GRAPH.items()
        ]

    def key_insights(self, paper: PaperRecord) -> list[str]:
        return KEY_INSIGHTS[: self._rng.randint(2, 4)]

    def related_papers(self, paper: PaperRecord) -> list[RelatedPaper]:
        related = [
            RelatedPaper(id=f"related-{paper.id}-{i}", title=title, relevance=relevance)
            for i, (title, relevance) in enumerate(RELATED_PAPERS, 1)
        ]
        return related[: self._rng.randint(1, 2)]
