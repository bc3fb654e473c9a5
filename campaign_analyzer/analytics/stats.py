"""Trend classification for chart series (scipy linear regression)."""

from typing import Literal

import numpy as np
from scipy import stats

Trend = Literal["increasing", "decreasing", "stable"]

MIN_POINTS = 3


def detect_trend(
    values: list[float] | np.ndarray,
    p_threshold: float = 0.05,
    r_threshold: float = 0.3,
) -> Trend:
    """Classify the direction of an ordered series, e.g. daily impressions.

    A slope only counts when the fit is significant (p below p_threshold) and
    the correlation is meaningful (|r| above r_threshold). Short or flat
    series are "stable".
    """
    series = np.asarray(values, dtype=float)
    if series.size < MIN_POINTS or np.ptp(series) == 0:
        return "stable"

    fit = stats.linregress(np.arange(series.size), series)
    if fit.pvalue < p_threshold and abs(fit.rvalue) > r_threshold:
        return "increasing" if fit.slope > 0 else "decreasing"
    return "stable"
