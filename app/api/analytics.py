"""API endpoints for flare trends and timeline pattern highlighting."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.correlation import get_orchestration_service, resolve_time_range
from app.api.errors import internal_error, validation_error
from app.database import get_db
from app.services.analysis_schemas import TimeRangeOption
from app.services.correlation_orchestration_service import CorrelationOrchestrationService
from app.services.event_repository import EventRepository
from app.services.pattern_detection_service import PatternDetectionService
from app.services.trend_service import MonthlyTrendService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analytics"])


def get_trend_service(db: Session = Depends(get_db)) -> MonthlyTrendService:
    return MonthlyTrendService(EventRepository(db))


def get_pattern_service(db: Session = Depends(get_db)) -> PatternDetectionService:
    return PatternDetectionService(EventRepository(db))


@router.get("/analytics/trends")
def get_flare_trends(
    user_id: Optional[str] = Query(None, alias="userId"),
    time_range: str = Query(TimeRangeOption.LAST_90D.value, alias="timeRange"),
    service: MonthlyTrendService = Depends(get_trend_service),
):
    """
    Monthly flare counts with a trend line.

    Query: userId, timeRange (last30d | last90d | lastYear | allTime)
    """
    if not user_id:
        return validation_error("Missing required query params", "userId is required")

    try:
        option = TimeRangeOption(time_range)
    except ValueError:
        allowed = ", ".join(o.value for o in TimeRangeOption)
        return validation_error("Invalid timeRange", f"timeRange must be one of: {allowed}")

    try:
        analysis = service.get_monthly_trend_data(user_id, option)
    except Exception as e:
        logger.error("Failed to fetch flare trends: %s", type(e).__name__)
        return internal_error("Failed to fetch flare trends")

    return analysis.model_dump(mode="json", by_alias=True)


@router.get("/timeline/patterns")
def get_timeline_patterns(
    user_id: Optional[str] = Query(None, alias="userId"),
    start_ms: Optional[int] = Query(None, alias="startMs"),
    end_ms: Optional[int] = Query(None, alias="endMs"),
    symptom_id: Optional[str] = Query(None, alias="symptomId"),
    service: PatternDetectionService = Depends(get_pattern_service),
    orchestration: CorrelationOrchestrationService = Depends(get_orchestration_service),
):
    """
    Recurring exposure -> symptom patterns and day-of-week symptom clustering.

    With symptomId, food and trigger correlations against that symptom supply
    the pattern coefficients and correlation ids.
    """
    if not user_id:
        return validation_error("Missing required query params", "userId is required")

    time_range = resolve_time_range(start_ms, end_ms)
    if time_range.start > time_range.end:
        return validation_error("Invalid range", "startMs must not be after endMs")

    try:
        correlations = []
        if symptom_id:
            correlations = orchestration.compute_with_combinations(
                user_id, symptom_id, time_range
            ).correlations
        result = service.detect_for_user(user_id, time_range, correlations)
    except Exception as e:
        logger.error("Failed to detect timeline patterns: %s", type(e).__name__)
        return internal_error("Failed to detect timeline patterns")

    logger.info("Timeline patterns served: patterns=%d", len(result.patterns))
    return result.model_dump(mode="json", by_alias=True)
