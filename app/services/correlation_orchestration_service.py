"""
Correlation orchestration: load a user's events and run the analysis pipeline.

For one symptom the service scores every food and trigger logged in the range,
attaches dose-response results where portions were recorded, and looks for
food pairs whose combined correlation beats either food alone.
"""

import logging
import time
from typing import Optional, Sequence

from app.config import settings
from app.services.analysis_schemas import (
    CorrelationResult,
    CorrelationStatus,
    DoseResponseResult,
    EnhancedCorrelationMetadata,
    EnhancedCorrelationResult,
    ExposureType,
    PortionSeverityPair,
    TimeRange,
)
from app.services.combination_service import detect_combinations, group_meals
from app.services.confidence_service import determine_confidence
from app.services.correlation_service import (
    DEFAULT_MIN_SAMPLE_SIZE,
    compute_window_scores,
    select_best_window,
)
from app.services.correlation_windows import HOUR_MS
from app.services.dose_response_service import compute_dose_response, normalize_portion_size
from app.services.time_utils import now_ms

logger = logging.getLogger(__name__)

DOSE_RESPONSE_WINDOW_MS = settings.dose_response_window_hours * HOUR_MS


def _correlation_sort_key(result: CorrelationResult):
    best = result.best_window
    return (
        best is None,
        -(best.score if best is not None else 0.0),
        result.exposure_type.value,
        result.exposure_id,
    )


class CorrelationOrchestrationService:
    """Runs correlation analysis for a user against an injected event repository."""

    def __init__(self, repository):
        self.repository = repository

    # --- Loading ---

    def _load_symptoms(self, user_id: str, symptom_id: str, time_range: TimeRange) -> list:
        """Symptom instances matching ``symptom_id`` by id or by name."""
        instances = self.repository.find_symptom_instances(
            user_id, time_range.start, time_range.end
        )
        return [
            s for s in instances if s.symptom_id == symptom_id or s.name == symptom_id
        ]

    # --- Building blocks ---

    def _build_result(
        self,
        exposure_type: ExposureType,
        exposure_id: str,
        symptom_id: str,
        exposures: Sequence[int],
        outcomes: Sequence[int],
        time_range: TimeRange,
        min_sample_size: int,
        computed_at: int,
        dose_response: Optional[DoseResponseResult] = None,
    ) -> CorrelationResult:
        scores = compute_window_scores(exposures, outcomes, time_range)
        best = select_best_window(scores, min_sample_size)
        sample_size = scores[0].sample_size if scores else 0

        if best is None:
            status = CorrelationStatus.INSUFFICIENT_DATA
            confidence = None
            consistency = None
        else:
            status = CorrelationStatus.COMPUTED
            consistency = best.score
            confidence = determine_confidence(sample_size, consistency, best.p_value)

        return CorrelationResult(
            exposure_type=exposure_type,
            food_id=exposure_id if exposure_type == ExposureType.FOOD else None,
            trigger_id=exposure_id if exposure_type == ExposureType.TRIGGER else None,
            symptom_id=symptom_id,
            window_scores=scores,
            best_window=best,
            sample_size=sample_size,
            status=status,
            confidence=confidence,
            consistency=consistency,
            dose_response=dose_response,
            computed_at=computed_at,
        )

    def _dose_response_for(
        self, food_id: str, food_events: Sequence, symptoms: Sequence
    ) -> Optional[DoseResponseResult]:
        """
        Pair each recorded portion of ``food_id`` with the worst severity of the
        symptom in the following 24 hours. None when no portion was recorded.
        """
        pairs = []
        for event in food_events:
            portion = (event.portion_map or {}).get(food_id)
            if not portion:
                continue
            severities = [
                s.severity
                for s in symptoms
                if event.timestamp <= s.timestamp <= event.timestamp + DOSE_RESPONSE_WINDOW_MS
            ]
            if severities:
                pairs.append(
                    PortionSeverityPair(
                        portion=normalize_portion_size(portion), severity=max(severities)
                    )
                )

        if not pairs:
            return None
        return compute_dose_response(pairs)

    # --- Public API ---

    def compute_correlation(
        self,
        user_id: str,
        symptom_id: str,
        time_range: TimeRange,
        food_id: Optional[str] = None,
        trigger_id: Optional[str] = None,
        min_sample_size: Optional[int] = None,
    ) -> CorrelationResult:
        """
        Correlate one food or one trigger with a symptom.

        Args:
            user_id: Owner of the events
            symptom_id: Symptom id or name
            time_range: Analysis range (inclusive, epoch ms)
            food_id: Food to analyze (mutually exclusive with trigger_id)
            trigger_id: Trigger to analyze
            min_sample_size: Override for the best-window minimum

        Returns:
            CorrelationResult (status ``insufficient-data`` when no window
            reaches the minimum sample size)

        Raises:
            ValueError: Neither or both of food_id and trigger_id were given
            RepositoryError: Events could not be loaded
        """
        if (food_id is None) == (trigger_id is None):
            raise ValueError("Exactly one of food_id or trigger_id is required")

        min_sample_size = min_sample_size or DEFAULT_MIN_SAMPLE_SIZE
        computed_at = now_ms()
        symptoms = self._load_symptoms(user_id, symptom_id, time_range)
        outcomes = [s.timestamp for s in symptoms]

        if food_id is not None:
            food_events = [
                e
                for e in self.repository.find_food_events(
                    user_id, time_range.start, time_range.end
                )
                if food_id in (e.food_ids or [])
            ]
            return self._build_result(
                ExposureType.FOOD,
                food_id,
                symptom_id,
                [e.timestamp for e in food_events],
                outcomes,
                time_range,
                min_sample_size,
                computed_at,
                dose_response=self._dose_response_for(food_id, food_events, symptoms),
            )

        trigger_events = [
            e
            for e in self.repository.find_trigger_events(
                user_id, time_range.start, time_range.end
            )
            if e.trigger_id == trigger_id
        ]
        return self._build_result(
            ExposureType.TRIGGER,
            trigger_id,
            symptom_id,
            [e.timestamp for e in trigger_events],
            outcomes,
            time_range,
            min_sample_size,
            computed_at,
        )

    def compute_multiple_pairs(
        self,
        user_id: str,
        pairs: Sequence[tuple[str, str]],
        time_range: TimeRange,
        min_sample_size: Optional[int] = None,
    ) -> list[CorrelationResult]:
        """Correlate a batch of ``(food_id, symptom_id)`` pairs."""
        return [
            self.compute_correlation(
                user_id,
                symptom_id,
                time_range,
                food_id=food_id,
                min_sample_size=min_sample_size,
            )
            for food_id, symptom_id in pairs
        ]

    def compute_with_combinations(
        self,
        user_id: str,
        symptom_id: str,
        time_range: TimeRange,
        min_sample_size: Optional[int] = None,
    ) -> EnhancedCorrelationResult:
        """
        Correlate every food and trigger in range with a symptom and detect
        synergistic food pairs.

        Indeterminate correlations are kept in the result so callers can show
        that more data is needed.
        """
        started = time.perf_counter()
        min_sample_size = min_sample_size or DEFAULT_MIN_SAMPLE_SIZE
        computed_at = now_ms()

        food_events = self.repository.find_food_events(
            user_id, time_range.start, time_range.end
        )
        trigger_events = self.repository.find_trigger_events(
            user_id, time_range.start, time_range.end
        )
        symptoms = self._load_symptoms(user_id, symptom_id, time_range)
        outcomes = [s.timestamp for s in symptoms]

        correlations = []
        food_ids = sorted({fid for e in food_events for fid in (e.food_ids or [])})
        for food_id in food_ids:
            events = [e for e in food_events if food_id in (e.food_ids or [])]
            correlations.append(
                self._build_result(
                    ExposureType.FOOD,
                    food_id,
                    symptom_id,
                    [e.timestamp for e in events],
                    outcomes,
                    time_range,
                    min_sample_size,
                    computed_at,
                    dose_response=self._dose_response_for(food_id, events, symptoms),
                )
            )

        trigger_ids = sorted({e.trigger_id for e in trigger_events})
        for trigger_id in trigger_ids:
            correlations.append(
                self._build_result(
                    ExposureType.TRIGGER,
                    trigger_id,
                    symptom_id,
                    [e.timestamp for e in trigger_events if e.trigger_id == trigger_id],
                    outcomes,
                    time_range,
                    min_sample_size,
                    computed_at,
                )
            )

        individual_scores = {
            c.food_id: c.best_window.score
            for c in correlations
            if c.exposure_type == ExposureType.FOOD and c.best_window is not None
        }
        combinations = detect_combinations(
            group_meals(food_events),
            outcomes,
            individual_scores,
            symptom_id,
            time_range,
            computed_at,
            min_sample_size=min_sample_size,
        )

        correlations.sort(key=_correlation_sort_key)
        synergistic_count = sum(1 for c in combinations if c.synergistic)

        logger.info(
            "Enhanced correlation: foods=%d triggers=%d outcomes=%d "
            "combinations=%d synergistic=%d duration_ms=%.1f",
            len(food_ids),
            len(trigger_ids),
            len(outcomes),
            len(combinations),
            synergistic_count,
            (time.perf_counter() - started) * 1000,
        )

        return EnhancedCorrelationResult(
            correlations=correlations,
            combinations=combinations,
            metadata=EnhancedCorrelationMetadata(
                user_id=user_id,
                range=time_range,
                computed_at=computed_at,
                total_pairs=len(correlations),
                combinations_detected=len(combinations),
                synergistic_count=synergistic_count,
            ),
        )
