"""
Log-Scale Normalizer and small numeric helpers.

  score = round(100 * clamp01((ln(1+v) - ln(1+min)) / (ln(1+max) - ln(1+min))))

Non-finite or non-positive values score 0. A degenerate population
(max <= min) scores 100 for any valid value.
"""

import math
from typing import Iterable, Optional, Tuple

import numpy as np

from config.settings import settings


def round_half_up(x: float) -> int:
    """Nearest integer, .5 rounds toward +inf (not banker's rounding)."""
    return int(math.floor(x + 0.5))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def clamp01(x: float) -> float:
    return clamp(x, 0.0, 1.0)


def clamp100(x: float) -> float:
    return clamp(x, 0.0, 100.0)


def is_valid_metric(value: Optional[float]) -> bool:
    """True for finite, strictly positive numbers."""
    if value is None:
        return False
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(v) and v > 0


def population_bounds(values: Iterable[Optional[float]]) -> Tuple[float, float]:
    """
    (min, max) over the valid entries of a batch.
    Returns (0.0, 0.0) when nothing is valid.
    """
    valid = np.array([float(v) for v in values if is_valid_metric(v)], dtype=float)
    if valid.size == 0:
        return 0.0, 0.0
    return float(valid.min()), float(valid.max())


def log_scaled_score(value: Optional[float], v_min: float, v_max: float) -> int:
    """Map a positive metric into 0-100 against log-compressed population bounds."""
    if not is_valid_metric(value):
        return 0
    a = math.log1p(max(0.0, v_min))
    b = math.log1p(max(0.0, v_max))
    if b <= a:
        return 100
    v = math.log1p(float(value))
    return round_half_up(clamp01((v - a) / (b - a)) * 100)


def micros_to_currency(micros: Optional[float]) -> Optional[float]:
    """Ad-platform micro-units -> currency units. None for missing or non-finite."""
    if micros is None:
        return None
    try:
        n = float(micros)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(n):
        return None
    return n / settings.MICROS_PER_UNIT
