"""
Synergistic food combination detection.

A combination is two foods logged in the same meal. Its correlation is scored
exactly like a single food (the meal counts as an exposure only when both foods
are present) and compared to the stronger of the two individual correlations.
"""

from collections import defaultdict
from itertools import combinations as iter_combinations
from typing import Mapping, NamedTuple, Sequence

from app.config import settings
from app.services.analysis_schemas import CombinationResult, TimeRange
from app.services.confidence_service import determine_confidence
from app.services.correlation_service import (
    DEFAULT_MIN_SAMPLE_SIZE,
    compute_window_scores,
    select_best_window,
)

# Combination must beat the best individual food by more than this margin
SYNERGY_MARGIN = settings.combination_synergy_margin
# Absorbs float noise in the margin comparison
FLOAT_TOLERANCE = 1e-9


class MealExposure(NamedTuple):
    timestamp: int
    food_ids: Sequence[str]


def generate_food_pairs(food_ids: Sequence[str]) -> list[tuple[str, str]]:
    """Unique, sorted 2-item combinations (no self-pairs, no permutations)."""
    return list(iter_combinations(sorted(set(food_ids)), 2))


def is_synergistic(
    combination_correlation: float,
    individual_max: float,
    sample_size: int,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> bool:
    if sample_size < min_sample_size:
        return False
    return combination_correlation - individual_max > SYNERGY_MARGIN + FLOAT_TOLERANCE


def detect_combinations(
    meals: Sequence[MealExposure],
    outcomes: Sequence[int],
    individual_scores: Mapping[str, float],
    symptom_id: str,
    time_range: TimeRange,
    computed_at: int,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> list[CombinationResult]:
    """
    Score every food pair that co-occurs in at least ``min_sample_size`` meals.

    Pairs with enough meals are always scored, so a pair never followed by the
    symptom comes back with a computed score of zero.

    Args:
        meals: Meals with their food ids and timestamps
        outcomes: Symptom timestamps (epoch ms)
        individual_scores: Best-window score per food id
        symptom_id: Symptom being analyzed
        time_range: Analysis range
        computed_at: Timestamp stamped on every result
        min_sample_size: Pairs seen fewer times are dropped

    Returns:
        Combinations sorted by how far they exceed the individual maximum.
    """
    if not meals:
        return []

    pair_timestamps: dict[tuple[str, str], list[int]] = defaultdict(list)
    for meal in meals:
        for pair in generate_food_pairs(meal.food_ids):
            pair_timestamps[pair].append(meal.timestamp)

    results = []
    for pair, timestamps in pair_timestamps.items():
        if len(timestamps) < min_sample_size:
            continue

        scores = compute_window_scores(timestamps, outcomes, time_range)
        best = select_best_window(scores, min_sample_size)
        if best is None:
            continue

        individual_max = max((individual_scores.get(food_id, 0.0) for food_id in pair), default=0.0)
        sample_size = best.sample_size

        results.append(
            CombinationResult(
                food_ids=list(pair),
                symptom_id=symptom_id,
                window=best.window,
                combination_correlation=best.score,
                individual_max=individual_max,
                synergistic=is_synergistic(
                    best.score, individual_max, sample_size, min_sample_size
                ),
                p_value=best.p_value,
                confidence=determine_confidence(sample_size, best.score, best.p_value),
                sample_size=sample_size,
                computed_at=computed_at,
            )
        )

    results.sort(
        key=lambda c: (-(c.combination_correlation - c.individual_max), c.food_ids)
    )
    return results


def group_meals(events: Sequence) -> list[MealExposure]:
    """
    Collapse food events into meals.

    Events sharing a ``meal_id`` are merged (earliest timestamp wins); events
    without one are meals on their own.
    """
    grouped: dict[str, list] = {}
    meals = []
    for event in events:
        if event.meal_id:
            grouped.setdefault(event.meal_id, []).append(event)
        else:
            meals.append(MealExposure(event.timestamp, list(event.food_ids or [])))

    for key in sorted(grouped):
        members = grouped[key]
        food_ids = [food_id for e in members for food_id in (e.food_ids or [])]
        meals.append(MealExposure(min(e.timestamp for e in members), food_ids))

    meals.sort(key=lambda m: m.timestamp)
    return meals
