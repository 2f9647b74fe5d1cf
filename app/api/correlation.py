"""API endpoints for enhanced (food, trigger and combination) correlation analysis."""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from app.api.errors import internal_error, validation_error
from app.config import settings
from app.database import get_db
from app.services.analysis_schemas import TimeRange
from app.services.correlation_orchestration_service import CorrelationOrchestrationService
from app.services.event_repository import EventRepository
from app.services.time_utils import DAY_MS, now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/correlation", tags=["correlation"])


# =============================================================================
# Request Models / Dependencies
# =============================================================================


class EnhancedCorrelationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: Optional[str] = None
    symptom_id: Optional[str] = None
    start_ms: Optional[int] = None
    end_ms: Optional[int] = None
    min_sample_size: Optional[int] = None


def get_orchestration_service(db: Session = Depends(get_db)) -> CorrelationOrchestrationService:
    return CorrelationOrchestrationService(EventRepository(db))


def resolve_time_range(start_ms: Optional[int], end_ms: Optional[int]) -> TimeRange:
    """Missing bounds default to the last ``correlation_default_range_days`` days."""
    end = end_ms if end_ms is not None else now_ms()
    start = (
        start_ms
        if start_ms is not None
        else end - settings.correlation_default_range_days * DAY_MS
    )
    return TimeRange(start=start, end=end)


def _enhanced_correlation(
    service: CorrelationOrchestrationService,
    request: EnhancedCorrelationRequest,
    missing_error: str,
    failure_error: str,
):
    if not request.user_id or not request.symptom_id:
        return validation_error(missing_error, "userId and symptomId are required")

    if request.min_sample_size is not None and request.min_sample_size < 1:
        return validation_error("Invalid minSampleSize", "minSampleSize must be at least 1")

    time_range = resolve_time_range(request.start_ms, request.end_ms)
    if time_range.start > time_range.end:
        return validation_error("Invalid range", "startMs must not be after endMs")

    started = time.perf_counter()
    try:
        result = service.compute_with_combinations(
            request.user_id,
            request.symptom_id,
            time_range,
            min_sample_size=request.min_sample_size,
        )
    except Exception as e:
        logger.error("%s: %s", failure_error, type(e).__name__)
        return internal_error(failure_error)

    logger.info(
        "Enhanced correlation served: pairs=%d duration_ms=%.1f",
        result.metadata.total_pairs,
        (time.perf_counter() - started) * 1000,
    )
    return result.model_dump(mode="json", by_alias=True)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/enhanced")
def compute_enhanced_correlation(
    request: Optional[EnhancedCorrelationRequest] = Body(None),
    service: CorrelationOrchestrationService = Depends(get_orchestration_service),
):
    """
    Compute correlations for every food and trigger against a symptom,
    including synergistic food combinations.

    Body: {userId, symptomId, startMs?, endMs?, minSampleSize?}

    Returns: {"correlations": [...], "combinations": [...], "metadata": {...}}
    """
    return _enhanced_correlation(
        service,
        request or EnhancedCorrelationRequest(),
        missing_error="Missing required fields",
        failure_error="Failed to compute enhanced correlation",
    )


@router.get("/enhanced")
def get_enhanced_correlation(
    user_id: Optional[str] = Query(None, alias="userId"),
    symptom_id: Optional[str] = Query(None, alias="symptomId"),
    start_ms: Optional[int] = Query(None, alias="startMs"),
    end_ms: Optional[int] = Query(None, alias="endMs"),
    min_sample_size: Optional[int] = Query(None, alias="minSampleSize"),
    service: CorrelationOrchestrationService = Depends(get_orchestration_service),
):
    """Same analysis as the POST endpoint, driven by query parameters."""
    request = EnhancedCorrelationRequest(
        user_id=user_id,
        symptom_id=symptom_id,
        start_ms=start_ms,
        end_ms=end_ms,
        min_sample_size=min_sample_size,
    )
    return _enhanced_correlation(
        service,
        request,
        missing_error="Missing required query params",
        failure_error="Failed to fetch enhanced correlation",
    )
