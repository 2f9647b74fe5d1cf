"""
Recurring event-pair detection for timeline highlighting.

Every exposure event (food, trigger, medication) is paired with each later
symptom inside the lag horizon. Pairs are bucketed by lag window and each
bucket seen often enough becomes a DetectedPattern.
"""

import logging
from bisect import bisect_left
from collections import defaultdict
from statistics import mean
from typing import Optional, Sequence

from app.config import settings
from app.services.analysis_schemas import (
    CONFIDENCE_RANK,
    ConfidenceLevel,
    CorrelationResult,
    DayOfWeekPattern,
    DetectedPattern,
    ExposureType,
    PatternOccurrence,
    PatternType,
    TimelineEvent,
    TimelineEventType,
    TimelinePatternsResult,
    TimeRange,
)
from app.services.correlation_windows import HOUR_MS, WINDOW_SET, window_for_lag
from app.services.time_utils import to_datetime

logger = logging.getLogger(__name__)

MAX_LAG_HOURS = settings.pattern_max_lag_hours
MIN_FREQUENCY = settings.pattern_min_frequency
MEDIUM_FREQUENCY = settings.pattern_medium_frequency
HIGH_FREQUENCY = settings.correlation_high_sample_size
STRONG_COEFFICIENT = settings.correlation_strong_consistency

# Day-of-week analysis needs about a week of symptoms
MIN_DAY_OF_WEEK_EVENTS = 7
SIGNIFICANCE_FACTOR = 1.5
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

PATTERN_SOURCES = {
    PatternType.FOOD_SYMPTOM: TimelineEventType.FOOD,
    PatternType.TRIGGER_SYMPTOM: TimelineEventType.TRIGGER,
    PatternType.MEDICATION_SYMPTOM: TimelineEventType.MEDICATION,
}

EXPOSURE_PATTERNS = {
    ExposureType.FOOD: PatternType.FOOD_SYMPTOM,
    ExposureType.TRIGGER: PatternType.TRIGGER_SYMPTOM,
    ExposureType.MEDICATION: PatternType.MEDICATION_SYMPTOM,
}

_TYPE_ORDER = {event_type: i for i, event_type in enumerate(TimelineEventType)}


def pattern_confidence(frequency: int, coefficient: float) -> ConfidenceLevel:
    if frequency >= HIGH_FREQUENCY and coefficient >= STRONG_COEFFICIENT:
        return ConfidenceLevel.HIGH
    if frequency >= MEDIUM_FREQUENCY or coefficient >= STRONG_COEFFICIENT:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _describe(pattern_type: PatternType, window: str, frequency: int) -> str:
    source = PATTERN_SOURCES[pattern_type].value
    return f"Symptoms often follow {source} within {window} ({frequency} occurrences)"


def _matching_correlation(
    pattern_type: PatternType, window: str, correlations: Sequence[CorrelationResult]
) -> Optional[CorrelationResult]:
    """Strongest correlation of the same exposure type whose best window matches."""
    matches = [
        c
        for c in correlations
        if EXPOSURE_PATTERNS.get(c.exposure_type) == pattern_type
        and c.best_window is not None
        and c.best_window.window == window
    ]
    if not matches:
        return None
    return min(matches, key=lambda c: (-c.best_window.score, c.correlation_id))


def _rank(pattern: DetectedPattern):
    most_recent = max(o.timestamp for o in pattern.occurrences)
    return (
        -pattern.frequency,
        -CONFIDENCE_RANK[pattern.confidence],
        -most_recent,
        pattern.id,
    )


def detect_patterns(
    events: Sequence[TimelineEvent],
    correlations: Sequence[CorrelationResult] = (),
    max_lag_hours: float = MAX_LAG_HOURS,
    min_frequency: int = MIN_FREQUENCY,
) -> list[DetectedPattern]:
    """
    Find exposure -> symptom relationships that recur within a lag window.

    Args:
        events: Timeline events in any order
        correlations: Correlation results used for the pattern coefficient
        max_lag_hours: Symptoms later than this are not paired
        min_frequency: Minimum occurrences for a bucket to be reported

    Returns:
        Patterns ranked by frequency, then confidence, then most recent
        occurrence. Identical input always yields identical output.
    """
    ordered = sorted(events, key=lambda e: (e.timestamp, _TYPE_ORDER[e.type], e.id))
    symptoms = [e for e in ordered if e.type == TimelineEventType.SYMPTOM]
    symptom_times = [e.timestamp for e in symptoms]
    max_lag_ms = max_lag_hours * HOUR_MS

    patterns = []
    for pattern_type, source_type in PATTERN_SOURCES.items():
        sources = [e for e in ordered if e.type == source_type]
        if not sources or not symptoms:
            continue

        occurrences = defaultdict(list)
        lags = defaultdict(list)
        sources_hit = defaultdict(set)

        for source in sources:
            start = bisect_left(symptom_times, source.timestamp)
            for symptom in symptoms[start:]:
                lag = symptom.timestamp - source.timestamp
                if lag >= max_lag_ms:
                    break
                window = window_for_lag(lag)
                if window is None:
                    continue
                occurrences[window.label].append(
                    PatternOccurrence(event1=source, event2=symptom, timestamp=source.timestamp)
                )
                lags[window.label].append(lag)
                sources_hit[window.label].add(source.id)

        for window in WINDOW_SET:
            frequency = len(occurrences[window.label])
            if frequency < min_frequency:
                continue

            correlation = _matching_correlation(pattern_type, window.label, correlations)
            if correlation is not None:
                coefficient = correlation.best_window.score
            else:
                coefficient = round(len(sources_hit[window.label]) / len(sources), 4)

            patterns.append(
                DetectedPattern(
                    id=f"pattern-{pattern_type.value}-{window.label}",
                    type=pattern_type,
                    description=_describe(pattern_type, window.label, frequency),
                    frequency=frequency,
                    confidence=pattern_confidence(frequency, coefficient),
                    occurrences=occurrences[window.label],
                    correlation_id=correlation.correlation_id if correlation else None,
                    coefficient=coefficient,
                    lag_hours=round(mean(lags[window.label]) / HOUR_MS, 1),
                    window=window.label,
                )
            )

    patterns.sort(key=_rank)
    logger.debug("Pattern detection: events=%d patterns=%d", len(ordered), len(patterns))
    return patterns


def detect_day_of_week_patterns(events: Sequence[TimelineEvent]) -> list[DayOfWeekPattern]:
    """
    Symptom counts and average severity per UTC weekday (0 = Sunday).

    A day is significant when its count exceeds the mean count of the days
    with symptoms by half again. Fewer than a week's worth of symptom events
    yields an empty list.
    """
    symptoms = [e for e in events if e.type == TimelineEventType.SYMPTOM]
    if len(symptoms) < MIN_DAY_OF_WEEK_EVENTS:
        return []

    by_day = defaultdict(list)
    for event in symptoms:
        # Python weekdays start on Monday
        by_day[(to_datetime(event.timestamp).weekday() + 1) % 7].append(event)

    patterns = []
    for day in range(7):
        day_events = by_day.get(day)
        if not day_events:
            continue
        severities = [e.severity for e in day_events if e.severity is not None]
        patterns.append(
            DayOfWeekPattern(
                day_of_week=day,
                day_name=DAY_NAMES[day],
                avg_symptom_severity=round(mean(severities), 2) if severities else 0.0,
                occurrence_count=len(day_events),
                is_significant=False,
            )
        )

    average_count = mean(p.occurrence_count for p in patterns)
    for pattern in patterns:
        pattern.is_significant = pattern.occurrence_count > average_count * SIGNIFICANCE_FACTOR

    return patterns


class PatternDetectionService:
    """Loads a user's timeline and runs pattern detection over it."""

    def __init__(self, repository):
        self.repository = repository

    def get_timeline_events(self, user_id: str, time_range: TimeRange) -> list[TimelineEvent]:
        """Food, trigger, medication and symptom events merged chronologically."""
        start, end = time_range.start, time_range.end
        events = []

        for e in self.repository.find_food_events(user_id, start, end):
            events.append(
                TimelineEvent(
                    id=f"food-{e.id}",
                    type=TimelineEventType.FOOD,
                    timestamp=e.timestamp,
                    item_id=",".join(e.food_ids or []) or None,
                )
            )
        for e in self.repository.find_trigger_events(user_id, start, end):
            events.append(
                TimelineEvent(
                    id=f"trigger-{e.id}",
                    type=TimelineEventType.TRIGGER,
                    timestamp=e.timestamp,
                    item_id=e.trigger_id,
                )
            )
        for e in self.repository.find_medication_events(user_id, start, end):
            events.append(
                TimelineEvent(
                    id=f"medication-{e.id}",
                    type=TimelineEventType.MEDICATION,
                    timestamp=e.timestamp,
                    item_id=e.medication_id,
                )
            )
        for e in self.repository.find_symptom_instances(user_id, start, end):
            events.append(
                TimelineEvent(
                    id=f"symptom-{e.id}",
                    type=TimelineEventType.SYMPTOM,
                    timestamp=e.timestamp,
                    item_id=e.symptom_id or e.name,
                    severity=e.severity,
                )
            )

        events.sort(key=lambda e: (e.timestamp, _TYPE_ORDER[e.type], e.id))
        return events

    def detect_for_user(
        self,
        user_id: str,
        time_range: TimeRange,
        correlations: Sequence[CorrelationResult] = (),
    ) -> TimelinePatternsResult:
        events = self.get_timeline_events(user_id, time_range)
        return TimelinePatternsResult(
            patterns=detect_patterns(events, correlations),
            day_of_week=detect_day_of_week_patterns(events),
        )
