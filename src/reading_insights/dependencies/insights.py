from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from reading_insights.config import settings
from reading_insights.dependencies.database import get_db_session
from reading_insights.repositories.transactions_repository import TransactionsRepository
from reading_insights.services.catalog_client import CatalogClient
from reading_insights.services.insight_service import InsightService
from reading_insights.services.recommendation_aggregator import (
    GatherLimits,
    RecommendationAggregator,
)


def get_transactions_repository(
    session: Annotated[Session, Depends(get_db_session)],
) -> TransactionsRepository:
    return TransactionsRepository(session=session)


def get_catalog_client(request: Request) -> CatalogClient:
    """The process-wide catalog client created during application startup."""
    return request.app.state.catalog_client


def get_recommendation_aggregator(
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
) -> RecommendationAggregator:
    return RecommendationAggregator(client=client, limits=GatherLimits.from_settings(settings))


def get_insight_service(
    repo: Annotated[TransactionsRepository, Depends(get_transactions_repository)],
    aggregator: Annotated[RecommendationAggregator, Depends(get_recommendation_aggregator)],
) -> InsightService:
    return InsightService(repo=repo, aggregator=aggregator, settings=settings)
