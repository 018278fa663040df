"""Pydantic models for normalized paper records and request envelopes."""

from datetime import date
from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field, field_validator

from ..settings import DEFAULT_CATEGORY, DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT


class GithubMetrics(BaseModel):
    """Code-host activity for a paper's implementations."""

    stars: int = 0
    forks: int = 0
    implementations: int = 0


class SocialMetrics(BaseModel):
    """Social media mentions."""

    tweets: int = 0
    reddit_posts: int = Field(0, alias="redditPosts")
    blog_posts: int = Field(0, alias="blogPosts")

    model_config = {"populate_by_name": True}


class IndustryMetrics(BaseModel):
    """Industry adoption signals."""

    in_production: int = Field(0, alias="inProduction")
    companies: list[str] = Field(default_factory=list)
    patents: int = 0

    model_config = {"populate_by_name": True}


class AltmetricMetrics(BaseModel):
    """Attention outside academic citations."""

    score: int = 0
    news_outlets: int = Field(0, alias="newsOutlets")
    policy_documents: int = Field(0, alias="policyDocuments")

    model_config = {"populate_by_name": True}


class ImpactMetrics(BaseModel):
    """Impact metrics attached to a record after merge."""

    impact_score: int = Field(0, alias="impactScore")
    quality_score: int = Field(0, alias="qualityScore")
    citations: int = 0
    citation_velocity: int = Field(0, alias="citationVelocity")
    github: GithubMetrics = Field(default_factory=GithubMetrics)
    social: SocialMetrics = Field(default_factory=SocialMetrics)
    industry: IndustryMetrics = Field(default_factory=IndustryMetrics)
    altmetric: AltmetricMetrics = Field(default_factory=AltmetricMetrics)

    model_config = {"populate_by_name": True}


class AISummary(BaseModel):
    """Plain-language summary of a paper."""

    why_matters: str = Field(..., alias="whyMatters")
    key_contribution: str = Field(..., alias="keyContribution")
    practical_impact: str = Field(..., alias="practicalImpact")

    model_config = {"populate_by_name": True}


class LineageStep(BaseModel):
    """One ancestor (or the paper itself) in a research lineage."""

    paper: str
    year: int


class LineageGroup(BaseModel):
    """Related papers grouped by relationship type."""

    type: Literal["builds_on", "influenced_by", "led_to", "competing_approaches"]
    papers: list[dict[str, Any]] = Field(default_factory=list)


class RelatedPaper(BaseModel):
    """Pointer to a related paper."""

    id: str
    title: str
    relevance: float


class EnhancedContent(BaseModel):
    """Generated content attached to a record."""

    ai_summary: AISummary = Field(..., alias="aiSummary")
    lineage: list[LineageStep] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list, alias="keyInsights")
    related_papers: list[RelatedPaper] = Field(default_factory=list, alias="relatedPapers")

    model_config = {"populate_by_name": True}


class BreakthroughIndicators(BaseModel):
    """Normalized (0-1) signals combined into the breakthrough score."""

    novelty: float = 0.0
    performance_jump: float = Field(0.0, alias="performanceJump")
    citation_velocity: float = Field(0.0, alias="citationVelocity")
    industry_adoption: float = Field(0.0, alias="industryAdoption")
    social_buzz: float = Field(0.0, alias="socialBuzz")
    expert_opinion: float = Field(0.0, alias="expertOpinion")

    model_config = {"populate_by_name": True}


class BreakthroughAssessment(BaseModel):
    """Weighted breakthrough score and its verdict."""

    indicators: BreakthroughIndicators
    score: float
    is_breakthrough: bool = Field(..., alias="isBreakthrough")

    model_config = {"populate_by_name": True}


class PaperRecord(BaseModel):
    """Canonical paper record shared by every source."""

    id: str
    title: str
    abstract: str
    authors: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    published: date | None = None
    updated: date | None = None
    url: str = ""
    pdf_url: str | None = Field(None, alias="pdfUrl")
    source: str

    # Carried by the citation-graph source only
    year: int | None = None
    citations: int | None = None
    venue: str | None = None
    references: int | None = None

    # Enhancement fields, attached after merge
    relevance_score: int | None = Field(None, alias="relevanceScore")
    personalized_reason: str | None = Field(None, alias="personalizedReason")
    trending_score: int | None = Field(None, alias="trendingScore")
    trending_reason: str | None = Field(None, alias="trendingReason")
    citation_velocity: int | None = Field(None, alias="citationVelocity")
    metrics: ImpactMetrics | None = None
    enhanced: EnhancedContent | None = None
    breakthrough: BreakthroughAssessment | None = None

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def publication_year(self) -> int | None:
        if self.year is not None:
            return self.year
        if self.published is not None:
            return self.published.year
        return None

    def with_enhancements(self, **fields: Any) -> "PaperRecord":
        """Return a copy with enhancement fields attached.

        Fields that are already set are left untouched.
        """
        update = {
            name: value
            for name, value in fields.items()
            if getattr(self, name) is None and value is not None
        }
        if not update:
            return self
        return self.model_copy(update=update)

    def to_json(self) -> dict[str, Any]:
        """Serialize with wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_authors(authors: list[str], limit: int = 3) -> str:
    """Join the first ``limit`` author names, marking truncation with 'et al.'."""
    shown = ", ".join(authors[:limit])
    if len(authors) > limit:
        shown += " et al."
    return shown


ACTIONS = ("search", "personalized", "trending", "metrics", "lineage", "summary")


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def _split_csv(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


class SearchRequest(BaseModel):
    """Request parameters shared by every action."""

    action: str = "search"
    query: str = ""
    category: str = DEFAULT_CATEGORY
    start: int = Field(0, ge=0)
    max_results: int = Field(DEFAULT_MAX_RESULTS, ge=1)
    sources: list[str] = Field(default_factory=lambda: ["all"])
    interests: list[str] = Field(default_factory=list)
    enhance: bool = True
    refresh: bool = False
    paper_id: str | None = None
    title: str | None = None
    abstract: str | None = None
    timeframe: str = "week"

    @field_validator("action", mode="before")
    @classmethod
    def _known_action(cls, value: Any) -> str:
        # Unrecognized actions fall through to a plain search
        action = str(value or "").strip().lower()
        return action if action in ACTIONS else "search"

    @field_validator("query", "category", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("category")
    @classmethod
    def _default_category(cls, value: str) -> str:
        return value or DEFAULT_CATEGORY

    @field_validator("max_results")
    @classmethod
    def _cap_max_results(cls, value: int) -> int:
        return min(value, MAX_RESULTS_LIMIT)

    @field_validator("sources", "interests", mode="before")
    @classmethod
    def _parse_csv(cls, value: Any) -> list[str]:
        return _split_csv(value)

    @field_validator("sources")
    @classmethod
    def _default_sources(cls, value: list[str]) -> list[str]:
        return [s.lower() for s in value] or ["all"]

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "SearchRequest":
        """Build a request from query-string or body parameters.

        Keys are matched case-insensitively, ignoring underscores and dashes,
        so ``maxResults`` and ``max_results`` are the same parameter.
        Unknown keys are ignored.
        """
        field_names = {_normalize_key(name): name for name in cls.model_fields}
        data: dict[str, Any] = {}
        for key, value in params.items():
            name = field_names.get(_normalize_key(key))
            if name is None or value is None:
                continue
            data[name] = value
        return cls.model_validate(data)

    def cache_params(self) -> dict[str, str]:
        """Parameters that identify a cacheable response."""
        return {
            "action": self.action,
            "query": self.query,
            "category": self.category,
            "start": str(self.start),
            "max_results": str(self.max_results),
            "sources": ",".join(sorted(self.sources)),
            "interests": ",".join(sorted(i.lower() for i in self.interests)),
            "enhance": str(self.enhance),
            "timeframe": self.timeframe,
        }


class SearchResponse(BaseModel):
    """Envelope for the search action."""

    success: bool = True
    papers: list[PaperRecord] = Field(default_factory=list)
    total: int = 0
    count: int = 0
    query: str = ""
    category: str = DEFAULT_CATEGORY
    sources: list[str] = Field(default_factory=list)
    cached: bool = False
    features: dict[str, bool] = Field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude={"papers"})
        data["papers"] = [paper.to_json() for paper in self.papers]
        return data
