"""Confidence classification for exposure -> outcome correlations."""

from typing import Optional

from app.config import settings
from app.services.analysis_schemas import ConfidenceLevel

# Thresholds (loaded from central config)
MIN_SAMPLE_SIZE = settings.correlation_min_sample_size
HIGH_SAMPLE_SIZE = settings.correlation_high_sample_size
P_VALUE_THRESHOLD = settings.correlation_p_value_threshold
STRONG_CONSISTENCY = settings.correlation_strong_consistency


def determine_confidence(
    sample_size: int,
    consistency: Optional[float],
    p_value: Optional[float],
) -> Optional[ConfidenceLevel]:
    """
    Classify a correlation as low, medium or high confidence.

    Decision table:
        sample_size < MIN_SAMPLE_SIZE                       -> None
        significant, sample_size >= HIGH_SAMPLE_SIZE and
            consistency >= STRONG_CONSISTENCY               -> HIGH
        significant (p_value < P_VALUE_THRESHOLD)           -> MEDIUM
        otherwise                                           -> LOW

    Returns:
        ConfidenceLevel, or None when there is not enough data to assign one.
    """
    if sample_size < MIN_SAMPLE_SIZE:
        return None

    significant = p_value is not None and p_value < P_VALUE_THRESHOLD
    if not significant:
        return ConfidenceLevel.LOW

    if (
        sample_size >= HIGH_SAMPLE_SIZE
        and consistency is not None
        and consistency >= STRONG_CONSISTENCY
    ):
        return ConfidenceLevel.HIGH

    return ConfidenceLevel.MEDIUM
