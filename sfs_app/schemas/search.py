"""Pydantic schemas for search endpoints."""

from datetime import date

from pydantic import BaseModel, Field


class SearchHitSchema(BaseModel):
    """One matching provision."""

    document_id: str
    document_title: str
    provision_ref: str
    chapter: str | None = None
    section: str
    title: str | None = None
    snippet: str = Field(
        "", description="Highlighted excerpt (>>>match<<<), or a text prefix for as-of searches"
    )
    relevance: float = Field(0.0, description="bm25 score; lower is better, 0.0 for as-of")
    valid_from: date | None = None
    valid_to: date | None = None

    model_config = {"from_attributes": True}


class SearchResultsSchema(BaseModel):
    query: str
    as_of_date: date | None = None
    total: int
    results: list[SearchHitSchema] = Field(default_factory=list)
