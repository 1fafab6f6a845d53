import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from reading_insights.dependencies.auth import get_user_id
from reading_insights.dependencies.insights import get_insight_service
from reading_insights.domain import UserId
from reading_insights.schemas.insights import InsightsResponse
from reading_insights.services.insight_service import InsightService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["insights"])


@router.get(
    "/insights",
    response_model=InsightsResponse,
    summary="Get Reading Insights",
    description=(
        "Reading statistics and up to six personalised recommendations for the current user. "
        "Recommendations stay empty until the user has opened more than two books."
    ),
    responses={
        401: {"description": "Not authenticated"},
        500: {"description": "Statistics could not be computed"},
    },
)
async def read_my_insights(
    user_id: Annotated[UserId, Depends(get_user_id)],
    svc: Annotated[InsightService, Depends(get_insight_service)],
    page: int = Query(1, ge=1, description="Catalog page used for recommendation candidates"),
    limit: int = Query(6, ge=1, le=6, description="Max number of recommendations"),
) -> InsightsResponse:
    try:
        return await svc.get_insights(user_id=user_id, page=page, limit=limit)
    except Exception:
        logger.exception("insights_failed", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch reading statistics",
        ) from None
