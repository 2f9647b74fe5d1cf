"""
Dose-response analysis: does a larger portion of a food go with worse symptoms?

Portion sizes are ordinal (small=1, medium=2, large=3) and regressed against the
severity of the symptom that followed.
"""

import logging
from typing import Sequence

from app.config import settings
from app.services.analysis_schemas import (
    DoseResponseConfidence,
    DoseResponseResult,
    PortionSeverityPair,
    RegressionResult,
)
from app.services.linear_regression import Point, calculate_linear_regression

logger = logging.getLogger(__name__)

MIN_SAMPLE_SIZE = settings.dose_response_min_sample_size
HIGH_R2 = settings.dose_response_high_r2
MEDIUM_R2 = settings.dose_response_medium_r2

# Slopes smaller than this are reported as "no clear relationship"
FLAT_SLOPE = 0.1

PORTION_SIZES = {"small": 1, "medium": 2, "large": 3}


def normalize_portion_size(portion_size: str) -> int:
    """Map a logged portion label to its ordinal (unknown labels -> medium)."""
    value = PORTION_SIZES.get(portion_size.strip().lower())
    if value is None:
        logger.warning("Unknown portion size %r, defaulting to medium", portion_size)
        return PORTION_SIZES["medium"]
    return value


def classify_dose_response(r2: float, sample_size: int) -> DoseResponseConfidence:
    if sample_size < MIN_SAMPLE_SIZE:
        return DoseResponseConfidence.INSUFFICIENT
    if r2 >= HIGH_R2:
        return DoseResponseConfidence.HIGH
    if r2 >= MEDIUM_R2:
        return DoseResponseConfidence.MEDIUM
    return DoseResponseConfidence.LOW


def _build_message(
    regression: RegressionResult, confidence: DoseResponseConfidence, sample_size: int
) -> str:
    slope = regression.slope
    if abs(slope) < FLAT_SLOPE:
        relationship = "No clear dose-response relationship detected"
    elif slope > 0:
        relationship = "Larger portions correlate with more severe symptoms"
    else:
        relationship = "Larger portions correlate with less severe symptoms"

    return (
        f"{relationship} (severity changes by {slope:+.2f} per portion step). "
        f"{confidence.value.capitalize()} confidence: R² = {regression.r2:.2f}. "
        f"Based on {sample_size} observations."
    )


def compute_dose_response(pairs: Sequence[PortionSeverityPair]) -> DoseResponseResult:
    """
    Regress symptom severity on portion size.

    Args:
        pairs: Portion/severity observations for one food and symptom

    Returns:
        DoseResponseResult. Below MIN_SAMPLE_SIZE observations the result is
        ``insufficient`` with zeroed regression values.
    """
    sample_size = len(pairs)

    if sample_size < MIN_SAMPLE_SIZE:
        return DoseResponseResult(
            slope=0.0,
            intercept=0.0,
            r2=0.0,
            confidence=DoseResponseConfidence.INSUFFICIENT,
            sample_size=sample_size,
            portion_severity_pairs=list(pairs),
            message=(
                f"Insufficient data: minimum {MIN_SAMPLE_SIZE} events required "
                f"(found {sample_size})"
            ),
        )

    regression = calculate_linear_regression(Point(p.portion, p.severity) for p in pairs)
    confidence = classify_dose_response(regression.r2, sample_size)

    return DoseResponseResult(
        slope=regression.slope,
        intercept=regression.intercept,
        r2=regression.r2,
        confidence=confidence,
        sample_size=sample_size,
        portion_severity_pairs=list(pairs),
        message=_build_message(regression, confidence, sample_size),
    )
