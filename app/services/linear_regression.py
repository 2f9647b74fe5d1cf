"""
Least-squares linear regression used by the trend and dose-response analyses.

Degenerate input (no points, one point, zero variance in x) produces a neutral
result instead of raising, since sparse personal logs hit these cases often.
"""

from typing import Iterable, NamedTuple

import numpy as np

from app.services.analysis_schemas import RegressionResult

DECIMALS = 4


class Point(NamedTuple):
    x: float
    y: float


def _round(value: float) -> float:
    # Adding 0.0 folds -0.0 into 0.0
    return round(float(value), DECIMALS) + 0.0


def calculate_linear_regression(points: Iterable[tuple[float, float]]) -> RegressionResult:
    """
    Fit ``y = slope * x + intercept`` to the points.

    Args:
        points: ``(x, y)`` pairs in any order (``Point`` or plain tuples)

    Returns:
        RegressionResult with slope, intercept and r2 rounded to 4 decimals.
        - no points: all zeros
        - one point: slope 0, intercept = y, r2 0
        - identical x values: slope 0, intercept = mean(y), r2 0
        - identical y values: exact horizontal fit, r2 1
    """
    pairs = [(float(x), float(y)) for x, y in points]

    if not pairs:
        return RegressionResult(slope=0.0, intercept=0.0, r2=0.0)

    xs = np.array([p[0] for p in pairs])
    ys = np.array([p[1] for p in pairs])

    if len(pairs) == 1:
        return RegressionResult(slope=0.0, intercept=_round(ys[0]), r2=0.0)

    y_mean = ys.mean()

    if np.ptp(xs) == 0:
        return RegressionResult(slope=0.0, intercept=_round(y_mean), r2=0.0)

    x_mean = xs.mean()
    x_dev = xs - x_mean
    y_dev = ys - y_mean

    slope = float(np.sum(x_dev * y_dev) / np.sum(x_dev ** 2))
    intercept = float(y_mean - slope * x_mean)

    if np.ptp(ys) == 0:
        r2 = 1.0
    else:
        residuals = ys - (slope * xs + intercept)
        ss_res = float(np.sum(residuals ** 2))
        ss_tot = float(np.sum(y_dev ** 2))
        r2 = 1.0 - ss_res / ss_tot

    return RegressionResult(
        slope=_round(slope),
        intercept=_round(intercept),
        r2=_round(r2),
    )
