"""
Windowed exposure -> outcome correlation scoring.

Pure functions over epoch-ms timestamp lists. For every window in the catalog
the consistency score is the fraction of exposures followed by at least one
outcome whose lag falls in that window. Each exposure counts once, and one
outcome may satisfy several exposures (per-exposure recall).

Significance is a one-sided exact binomial test of the observed hit count
against the baseline hit rate: the chance that a random instant in the
analysis range is followed by an outcome within the same window.
"""

import logging
from bisect import bisect_left
from typing import Optional, Sequence

from scipy import stats

from app.config import settings
from app.services.analysis_schemas import TimeRange, WindowScore
from app.services.correlation_windows import WINDOW_SET, WindowDefinition

logger = logging.getLogger(__name__)

DEFAULT_MIN_SAMPLE_SIZE = settings.correlation_min_sample_size
SCORE_DECIMALS = 4


def count_hits(
    exposures: Sequence[int], outcomes: Sequence[int], window: WindowDefinition
) -> int:
    """Number of exposures with at least one outcome inside ``window``."""
    sorted_outcomes = sorted(outcomes)
    hits = 0
    for exposure_ts in exposures:
        idx = bisect_left(sorted_outcomes, exposure_ts + window.start_ms)
        if idx < len(sorted_outcomes) and sorted_outcomes[idx] < exposure_ts + window.end_ms:
            hits += 1
    return hits


def compute_consistency(
    exposures: Sequence[int], outcomes: Sequence[int], window: WindowDefinition
) -> Optional[float]:
    """
    Fraction of exposures followed by an outcome within ``window``.

    Example:
        Dairy logged 10 times, headache within 2-6h after 7 of them -> 0.7

    Returns:
        Consistency in [0, 1], or None when there are no exposures.
    """
    if not exposures:
        return None
    return count_hits(exposures, outcomes, window) / len(exposures)


def baseline_hit_rate(
    outcomes: Sequence[int], window: WindowDefinition, time_range: TimeRange
) -> float:
    """
    Probability that a random instant in ``time_range`` is followed by an
    outcome within ``window``.

    Each outcome at ``s`` "covers" exposure times ``t`` with
    ``s - end_ms < t <= s - start_ms``; the rate is the covered share of the
    range after merging overlapping intervals.
    """
    span = time_range.duration_ms
    if span <= 0:
        return 1.0 if any(window.contains(s - time_range.start) for s in outcomes) else 0.0

    intervals = sorted(
        (
            max(s - window.end_ms, time_range.start),
            min(s - window.start_ms, time_range.end),
        )
        for s in outcomes
    )

    covered = 0
    current_start = current_end = None
    for lo, hi in intervals:
        if hi <= lo:
            continue
        if current_end is None or lo > current_end:
            if current_end is not None:
                covered += current_end - current_start
            current_start, current_end = lo, hi
        else:
            current_end = max(current_end, hi)
    if current_end is not None:
        covered += current_end - current_start

    return min(1.0, covered / span)


def binomial_p_value(hits: int, sample_size: int, baseline: float) -> Optional[float]:
    """
    One-sided exact binomial p-value for ``hits`` successes out of
    ``sample_size`` given a baseline success probability.

    More hits relative to the baseline, or the same rate over more samples,
    yields a smaller p-value.
    """
    if sample_size <= 0:
        return None
    baseline = min(max(baseline, 0.0), 1.0)
    result = stats.binomtest(hits, sample_size, baseline, alternative="greater")
    return float(result.pvalue)


def _infer_range(exposures: Sequence[int], outcomes: Sequence[int]) -> TimeRange:
    timestamps = list(exposures) + list(outcomes)
    if not timestamps:
        return TimeRange(start=0, end=0)
    return TimeRange(start=min(timestamps), end=max(timestamps))


def compute_window_scores(
    exposures: Sequence[int],
    outcomes: Sequence[int],
    time_range: Optional[TimeRange] = None,
    windows: Sequence[WindowDefinition] = WINDOW_SET,
) -> list[WindowScore]:
    """
    Score every window for one exposure/outcome pair.

    Args:
        exposures: Exposure timestamps (epoch ms)
        outcomes: Outcome timestamps (epoch ms)
        time_range: Analysis range; events outside it are ignored. Inferred
            from the data when omitted.
        windows: Window catalog, ordered by start

    Returns:
        One WindowScore per window, in catalog order. With zero exposures the
        score and p-value are None and sample_size is 0.
    """
    if time_range is None:
        time_range = _infer_range(exposures, outcomes)

    in_range = [t for t in exposures if time_range.start <= t <= time_range.end]
    outcomes_in_range = [t for t in outcomes if time_range.start <= t <= time_range.end]
    sample_size = len(in_range)

    scores = []
    for window in windows:
        if sample_size == 0:
            scores.append(WindowScore(window=window.label, sample_size=0))
            continue

        consistency = compute_consistency(in_range, outcomes_in_range, window)
        hits = round(consistency * sample_size)
        baseline = baseline_hit_rate(outcomes_in_range, window, time_range)
        scores.append(
            WindowScore(
                window=window.label,
                score=round(consistency, SCORE_DECIMALS),
                sample_size=sample_size,
                p_value=binomial_p_value(hits, sample_size, baseline),
                hits=hits,
                baseline_rate=round(baseline, SCORE_DECIMALS),
            )
        )

    logger.debug(
        "Scored %d windows: exposures=%d outcomes=%d",
        len(scores),
        sample_size,
        len(outcomes_in_range),
    )
    return scores


def select_best_window(
    scores: Sequence[WindowScore],
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    windows: Sequence[WindowDefinition] = WINDOW_SET,
) -> Optional[WindowScore]:
    """
    Pick the highest-scoring window with enough samples.

    Ties go to the shorter window, then the earlier one. Returns None when no
    window reaches ``min_sample_size`` (not enough data, as opposed to a
    computed score of zero).
    """
    eligible = [
        s for s in scores if s.score is not None and s.sample_size >= min_sample_size
    ]
    if not eligible:
        return None

    catalog = {w.label: w for w in windows}

    def rank(score: WindowScore):
        window = catalog.get(score.window)
        if window is None:
            return (-score.score, float("inf"), float("inf"))
        return (-score.score, window.duration_ms, window.start_ms)

    return min(eligible, key=rank)
