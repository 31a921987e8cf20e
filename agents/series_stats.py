"""
Series Statistics
------------------
Pure functions over a chronological interest series. Each raw statistic is
mapped onto a bounded sub-score on the 0-100 scale:

  slope        = clamp((b + 10) * 5)          b  = OLS slope of value vs index
  acceleration = clamp((b2 - b1 + 20) * 2.5)  b1, b2 = raw slopes of each half
  consistency  = clamp(100 - 100 * std / 50)  std = population std-dev
  breadth      = min(100, 100 * regions / 20)

Short series degrade to defaults instead of failing:
  slope < 2 points -> 0, acceleration < 4 points -> 0,
  consistency < 3 points -> caller-supplied neutral default.
"""

from typing import Iterable, List, Optional, Sequence, Union

import numpy as np

from config.settings import settings
from models.schemas import InterestSample
from utils.normalization import clamp

SeriesLike = Union[Sequence[InterestSample], Sequence[float]]


def _values(series: SeriesLike) -> np.ndarray:
    vals: List[float] = [
        s.value if isinstance(s, InterestSample) else s for s in series
    ]
    return np.asarray(vals, dtype=float)


def regression_slope(series: SeriesLike) -> float:
    """Ordinary least-squares slope of value against sample index."""
    y = _values(series)
    n = y.size
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=float)
    denom = n * np.dot(x, x) - x.sum() ** 2
    return float((n * np.dot(x, y) - x.sum() * y.sum()) / denom)


def raw_acceleration(series: SeriesLike) -> float:
    """Slope of the second half minus slope of the first half (split at n // 2)."""
    y = _values(series)
    if y.size < 4:
        return 0.0
    mid = y.size // 2
    return regression_slope(y[mid:].tolist()) - regression_slope(y[:mid].tolist())


def slope_score(series: SeriesLike, scale_max: float = 100.0) -> float:
    if len(series) < 2:
        return 0.0
    b = regression_slope(series)
    score = (b + settings.SLOPE_OFFSET) * settings.SLOPE_SCALE
    return clamp(score, 0.0, 100.0) * scale_max / 100.0


def acceleration_score(series: SeriesLike, scale_max: float = 100.0) -> float:
    if len(series) < 4:
        return 0.0
    acc = raw_acceleration(series)
    score = (acc + settings.ACCELERATION_OFFSET) * settings.ACCELERATION_SCALE
    return clamp(score, 0.0, 100.0) * scale_max / 100.0


def consistency_score(
    series: SeriesLike,
    scale_max: float = 100.0,
    default: Optional[float] = None,
) -> float:
    """
    Low dispersion -> high consistency. `default` is returned untouched for
    series shorter than 3 samples (already on the caller's scale).
    """
    if len(series) < 3:
        if default is None:
            default = settings.CONSISTENCY_DEFAULT_AVERAGED * scale_max / 100.0
        return default
    std = float(np.std(_values(series)))
    score = 100.0 - (std / settings.MAX_STD_DEV) * 100.0
    return clamp(score, 0.0, 100.0) * scale_max / 100.0


def region_count(samples: Iterable[InterestSample]) -> int:
    """Distinct non-empty regions with a positive value anywhere in the dataset."""
    return len({s.region for s in samples if s.region and s.value > 0})


def breadth_score(samples: Iterable[InterestSample], scale_max: float = 100.0) -> float:
    regions = region_count(samples)
    score = min(100.0, regions / settings.MAX_REGIONS * 100.0)
    return score * scale_max / 100.0
