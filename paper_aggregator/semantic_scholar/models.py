"""Pydantic models for Semantic Scholar API responses."""

from pydantic import BaseModel, Field, field_validator


class Author(BaseModel):
    """Author information."""

    author_id: str | None = Field(None, alias="authorId")
    name: str | None = None


class SemanticScholarPaper(BaseModel):
    """Paper object returned by the search endpoint."""

    paper_id: str | None = Field(None, alias="paperId")
    title: str | None = None
    abstract: str | None = None
    authors: list[Author] = Field(default_factory=list)
    year: int | None = None
    citation_count: int | None = Field(None, alias="citationCount")
    reference_count: int | None = Field(None, alias="referenceCount")
    url: str | None = None
    venue: str | None = None
    publication_date: str | None = Field(None, alias="publicationDate")
    external_ids: dict[str, str | int | None] | None = Field(None, alias="externalIds")

    model_config = {"populate_by_name": True}

    @field_validator("authors", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []


class SearchResponse(BaseModel):
    """Response from the paper search endpoint."""

    total: int = 0
    offset: int = 0
    next: int | None = None
    data: list[SemanticScholarPaper] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []
