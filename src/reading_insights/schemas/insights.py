from datetime import datetime

from pydantic import BaseModel, Field

from reading_insights.domain import BookId, RelevanceScore, TransactionId
from reading_insights.schemas.base import CamelModel
from reading_insights.schemas.catalog import CatalogRecord


class HourCount(CamelModel):
    hour: int = Field(ge=0, le=23)
    count: int = Field(ge=0)


class DayCount(CamelModel):
    name: str = Field(examples=["Sunday"])
    count: int = Field(ge=0)


class MonthCount(CamelModel):
    month: str = Field(examples=["Jan"])
    count: int = Field(ge=0)


class CalendarDay(CamelModel):
    day: str = Field(description="ISO date", examples=["2024-05-01"])
    value: int = Field(ge=0)


class RecentActivity(CamelModel):
    id: TransactionId
    book_id: BookId
    title: str
    author: str | None = None
    date: datetime = Field(description="When the transaction was last updated")
    message_count: int = Field(ge=0)
    transaction_id: TransactionId


class ActivityStats(CamelModel):
    total_books: int = 0
    total_authors: int = 0
    total_messages: int = 0
    user_message_count: int = 0
    bot_message_count: int = 0
    average_messages_per_book: float = 0.0
    books_with_messages: int = 0
    reading_hours_data: list[HourCount] = Field(min_length=24, max_length=24)
    reading_days_data: list[DayCount] = Field(min_length=7, max_length=7)
    reading_months_data: list[MonthCount] = Field(min_length=12, max_length=12)
    days_since_first_read: int = 0
    days_since_last_read: int | None = None
    first_read_date: datetime | None = None
    last_read_date: datetime | None = None
    recent_activity: list[RecentActivity] = Field(default_factory=list)
    calendar_data: list[CalendarDay] = Field(default_factory=list)


class Recommendation(BaseModel):
    """A scored candidate. Recomputed on every request and never stored."""

    catalog_record: CatalogRecord
    relevance_score: RelevanceScore


class RecommendationRead(CamelModel):
    id: BookId = Field(description="Catalog identifier of the recommended book")
    title: str
    author: str | None = None
    cover_url: str | None = None
    relevance_score: RelevanceScore = Field(
        description="Additive relevance score, at least 1", examples=[9.0]
    )

    @classmethod
    def from_recommendation(cls, recommendation: Recommendation) -> "RecommendationRead":
        record = recommendation.catalog_record
        return cls(
            id=record.id,
            title=record.title,
            author=record.author,
            cover_url=record.cover_url,
            relevance_score=recommendation.relevance_score,
        )


class InsightsResponse(ActivityStats):
    total_books_in_library: int = 0
    top_subjects: list[str] = Field(default_factory=list, max_length=10)
    recommendations: list[RecommendationRead] = Field(default_factory=list, max_length=6)


class CatalogSearchResponse(CamelModel):
    items: list[CatalogRecord]
    page: int
    limit: int
