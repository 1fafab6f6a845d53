import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime

from starlette.concurrency import run_in_threadpool

from reading_insights.config import Settings
from reading_insights.config import settings as default_settings
from reading_insights.domain import UserId
from reading_insights.repositories.transactions_repository import TransactionsRepository
from reading_insights.schemas.insights import InsightsResponse, Recommendation, RecommendationRead
from reading_insights.schemas.transaction import Transaction
from reading_insights.services import recommendation_scorer
from reading_insights.services.activity_aggregator import aggregate
from reading_insights.services.corpus_analyzer import analyze, pad_topics
from reading_insights.services.recommendation_aggregator import RecommendationAggregator

logger = logging.getLogger(__name__)


class InsightService:
    """Builds the reading dashboard payload for one user.

    The recommendation pipeline (corpus analysis, candidate gathering,
    scoring) and the activity statistics share no data, so they run
    concurrently. Catalog trouble only thins out the recommendations.
    """

    def __init__(
        self,
        repo: TransactionsRepository,
        aggregator: RecommendationAggregator,
        settings: Settings = default_settings,
    ) -> None:
        self.repo = repo
        self.aggregator = aggregator
        self.settings = settings

    def _load(self, user_id: UserId) -> tuple[list[Transaction], int]:
        rows = self.repo.list_transactions(user_id)
        library_count = self.repo.count_library(user_id)
        return [Transaction.model_validate(row) for row in rows], library_count

    async def get_insights(
        self,
        user_id: UserId,
        page: int = 1,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> InsightsResponse:
        start_time = time.perf_counter()
        now = now or datetime.now(UTC)
        limit = self.settings.max_recommendations if limit is None else limit

        transactions, library_count = await run_in_threadpool(self._load, user_id)

        stats, (recommendations, top_subjects) = await asyncio.gather(
            asyncio.to_thread(
                aggregate,
                transactions,
                now=now,
                timezone=self.settings.activity_timezone,
                window_days=self.settings.calendar_window_days,
                recent_size=self.settings.recent_activity_size,
            ),
            self._recommend(transactions, page=page, limit=limit),
        )

        logger.info(
            "insights_built",
            extra={
                "total_books": stats.total_books,
                "recommendation_count": len(recommendations),
                "latency_ms": int((time.perf_counter() - start_time) * 1000),
            },
        )

        return InsightsResponse(
            **stats.model_dump(),
            total_books_in_library=library_count,
            top_subjects=top_subjects,
            recommendations=[RecommendationRead.from_recommendation(r) for r in recommendations],
        )

    async def _recommend(
        self, transactions: Sequence[Transaction], page: int, limit: int
    ) -> tuple[list[Recommendation], list[str]]:
        signals = analyze(
            transactions,
            max_topics=self.settings.max_topics,
            max_keywords=self.settings.max_keywords,
        )

        # Too little history to personalise.
        if len(transactions) < self.settings.min_books_for_recommendations:
            return [], signals.topics

        search_topics = pad_topics(
            signals.topics,
            min_signals=self.settings.min_topic_signals,
            size=self.settings.max_topics,
        )
        excluded = {t.book_id for t in transactions}

        candidates = await self.aggregator.gather(
            search_topics, signals.keywords, excluded, page=page
        )
        recommendations = recommendation_scorer.score(
            candidates, signals.topics, signals.keywords, excluded, limit=limit
        )
        subjects = recommendation_scorer.display_subjects(
            recommendations, max_subjects=self.settings.max_display_subjects
        )
        return recommendations, subjects or signals.topics
