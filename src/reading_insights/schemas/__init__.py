from reading_insights.schemas.catalog import CatalogRecord
from reading_insights.schemas.insights import (
    ActivityStats,
    CalendarDay,
    DayCount,
    HourCount,
    InsightsResponse,
    MonthCount,
    RecentActivity,
    Recommendation,
    RecommendationRead,
)
from reading_insights.schemas.message import Message
from reading_insights.schemas.transaction import Transaction

__all__ = [
    "ActivityStats",
    "CalendarDay",
    "CatalogRecord",
    "DayCount",
    "HourCount",
    "InsightsResponse",
    "Message",
    "MonthCount",
    "RecentActivity",
    "Recommendation",
    "RecommendationRead",
    "Transaction",
]
