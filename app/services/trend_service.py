"""Monthly flare-frequency trend analysis."""

import logging
from collections import defaultdict
from statistics import mean
from typing import Optional

from app.config import settings
from app.services.analysis_schemas import (
    RegressionResult,
    TimeRangeOption,
    TrendAnalysis,
    TrendDataPoint,
    TrendDirection,
)
from app.services.linear_regression import Point, calculate_linear_regression
from app.services.time_utils import DAY_MS, month_key, month_start_ms, now_ms

logger = logging.getLogger(__name__)

SLOPE_THRESHOLD = settings.trend_slope_threshold
MIN_MONTHS = settings.trend_min_months

# None means no lower bound
RANGE_DAYS = {
    TimeRangeOption.LAST_30D: 30,
    TimeRangeOption.LAST_90D: 90,
    TimeRangeOption.LAST_YEAR: 365,
    TimeRangeOption.ALL_TIME: None,
}


def range_start_ms(option: TimeRangeOption, now: int) -> Optional[int]:
    days = RANGE_DAYS[option]
    return None if days is None else now - days * DAY_MS


def classify_trend_direction(slope: float, month_count: int) -> TrendDirection:
    """
    Rising flare frequency is ``declining`` health, falling is ``improving``.
    A slope of exactly +/-SLOPE_THRESHOLD counts as stable.
    """
    if month_count < MIN_MONTHS:
        return TrendDirection.INSUFFICIENT_DATA
    if slope < -SLOPE_THRESHOLD:
        return TrendDirection.IMPROVING
    if slope > SLOPE_THRESHOLD:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE


class MonthlyTrendService:
    """Buckets a user's flares by UTC month and fits a trend line."""

    def __init__(self, repository):
        self.repository = repository

    def _peak_severities(self, user_id: str, flares: list) -> dict[int, int]:
        """Peak severity per flare id, falling back to the initial severity."""
        peaks = {flare.id: flare.initial_severity for flare in flares}
        seen = set()
        for event in self.repository.find_flare_events(user_id, list(peaks)):
            if event.severity is None or event.flare_id not in peaks:
                continue
            if event.flare_id not in seen:
                peaks[event.flare_id] = event.severity
                seen.add(event.flare_id)
            else:
                peaks[event.flare_id] = max(peaks[event.flare_id], event.severity)
        return peaks

    def get_monthly_trend_data(
        self,
        user_id: str,
        time_range: TimeRangeOption = TimeRangeOption.LAST_90D,
        now: Optional[int] = None,
    ) -> TrendAnalysis:
        """
        Monthly flare counts and severities with a least-squares trend line.

        Args:
            user_id: Owner of the flares
            time_range: Which window of history to include
            now: Reference time (epoch ms), defaults to the current time

        Returns:
            TrendAnalysis with data points in ascending month order. Only months
            containing at least one flare appear; the regression uses the data
            point index as x and the flare count as y.
        """
        time_range = TimeRangeOption(time_range)
        now = now_ms() if now is None else now
        flares = self.repository.find_flares(user_id, range_start_ms(time_range, now), now)
        peaks = self._peak_severities(user_id, flares)

        buckets: dict[str, list] = defaultdict(list)
        for flare in flares:
            buckets[month_key(flare.start_date)].append(flare)

        data_points = []
        for key in sorted(buckets):
            month_flares = buckets[key]
            severities = [peaks[f.id] for f in month_flares if peaks.get(f.id) is not None]
            data_points.append(
                TrendDataPoint(
                    month=key,
                    month_timestamp=month_start_ms(month_flares[0].start_date),
                    flare_count=len(month_flares),
                    average_severity=round(mean(severities), 2) if severities else None,
                    peak_severity=max(severities) if severities else None,
                )
            )

        if data_points:
            trend_line = calculate_linear_regression(
                Point(i, point.flare_count) for i, point in enumerate(data_points)
            )
        else:
            trend_line = RegressionResult()

        direction = classify_trend_direction(trend_line.slope, len(data_points))
        logger.debug(
            "Monthly trend: flares=%d months=%d slope=%.4f direction=%s",
            len(flares),
            len(data_points),
            trend_line.slope,
            direction.value,
        )

        return TrendAnalysis(
            data_points=data_points,
            trend_line=trend_line,
            trend_direction=direction,
            time_range=time_range,
        )
