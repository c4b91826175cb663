"""Pydantic schemas for API responses."""

from pydantic import BaseModel, ConfigDict, Field


class ResultSchema(BaseModel):
    """One search result as returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    poster: str = ""
    episodes: list[str] = Field(default_factory=list)
    episodes_titles: list[str] = Field(default_factory=list)
    source: str
    source_name: str
    vod_class: str = Field(default="", alias="class")
    year: str = ""
    desc: str = ""
    type_name: str = ""
    douban_id: int = 0


class SearchResponse(BaseModel):
    """Response from the batch search endpoint."""

    results: list[ResultSchema]


class ErrorResponse(BaseModel):
    """Error body."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    sources: list[str]
