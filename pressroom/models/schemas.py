from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

ALL = "all"


class ContentType(str, Enum):
    ARTICLE = "article"
    REVIEW = "review"
    INTERVIEW = "interview"
    NEWS = "news"
    FEATURE = "feature"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"


ContentTypeFilter = ContentType | Literal["all"]
SentimentFilter = Sentiment | Literal["all"]


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Pipeline data ---


class SearchConfig(CamelModel):
    model_config = ConfigDict(frozen=True)

    query: str = Field(min_length=1, max_length=500)
    date_from: date | None = None
    date_to: date | None = None
    sources: list[str] | None = None
    content_types: list[ContentTypeFilter] = Field(default_factory=lambda: [ALL], min_length=1)
    max_results: int = Field(default=20, ge=1, le=200)

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Query is required")
        return v

    @model_validator(mode="after")
    def dates_ordered(self) -> "SearchConfig":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("Start date must be before or equal to end date")
        return self


class AnalysisResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    sentiment: Sentiment
    relevance_score: int = Field(ge=0, le=100)
    authority: int = Field(ge=0, le=100)
    themes: list[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator("themes")
    @classmethod
    def dedupe_themes(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(t for t in v if t))


class SearchResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    url: str
    source: str
    publish_date: str
    snippet: str = ""
    content_type: ContentType
    analysis: AnalysisResult | None = None
    is_analyzing: bool = False
    is_duplicate: bool = False

    @model_validator(mode="after")
    def analyzing_excludes_analysis(self) -> "SearchResult":
        if self.is_analyzing and self.analysis is not None:
            raise ValueError("A result cannot be analyzing and analyzed at once")
        return self


class UsageLimits(CamelModel):
    searches_this_month: int = 0
    max_searches: int = 0
    exports_this_month: int = 0
    max_exports: int = 0
    last_reset: datetime


class SearchHistoryEntry(CamelModel):
    id: str
    user_id: str
    query: str
    config: SearchConfig
    result_count: int = 0
    results: list[SearchResult] = Field(default_factory=list)
    shared: bool = False
    share_token: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SearchHistoryEntry":
        return cls(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            query=row.get("query") or (row.get("config") or {}).get("query", ""),
            config=row["config"],
            result_count=row.get("result_count") or 0,
            results=row.get("results") or [],
            shared=bool(row.get("shared")),
            share_token=row.get("share_token"),
            created_at=row.get("created_at"),
        )


# --- Requests ---


class AnalyzeRequest(CamelModel):
    result: SearchResult


class ShareRequest(CamelModel):
    search_id: str


class ExportRequest(CamelModel):
    results: list[SearchResult]
    format: ExportFormat = ExportFormat.JSON
    selected_ids: list[str] = Field(default_factory=list)
    sentiment_filter: SentimentFilter = ALL
    content_type_filter: ContentTypeFilter = ALL


# --- Responses ---


class SearchResponse(CamelModel):
    results: list[SearchResult]
    search_id: str | None = None
    provider: str


class AnalyzeResponse(CamelModel):
    analysis: AnalysisResult


class ShareResponse(CamelModel):
    share_token: str
    share_url: str


class SuccessResponse(CamelModel):
    success: bool = True


class UsageResponse(CamelModel):
    limits: UsageLimits


class HistoryResponse(CamelModel):
    history: list[SearchHistoryEntry]
