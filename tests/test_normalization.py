"""
Log-scale normalizer and numeric helpers.
"""

import math

import pytest

from utils.normalization import (
    log_scaled_score,
    micros_to_currency,
    population_bounds,
    round_half_up,
)


class TestLogScaledScore:
    @pytest.mark.parametrize("value", [0, -1, -0.001, None, math.nan, math.inf, -math.inf])
    def test_invalid_values_score_zero(self, value):
        assert log_scaled_score(value, 1, 100) == 0

    @pytest.mark.parametrize("v_min,v_max", [(5, 5), (10, 2), (0, 0)])
    def test_degenerate_population_scores_full(self, v_min, v_max):
        assert log_scaled_score(3.0, v_min, v_max) == 100

    def test_bounds_map_to_extremes(self):
        assert log_scaled_score(1, 1, 100) == 0
        assert log_scaled_score(100, 1, 100) == 100

    def test_out_of_population_values_are_clamped(self):
        assert log_scaled_score(0.5, 1, 100) == 0
        assert log_scaled_score(5000, 1, 100) == 100

    def test_log_midpoint(self):
        # ln(10) / ln(100) = 0.5
        assert log_scaled_score(9, 0, 99) == 50

    def test_log_compression_favours_small_values(self):
        assert log_scaled_score(1000, 10, 100000) > 100 * (1000 - 10) / (100000 - 10)


class TestHelpers:
    @pytest.mark.parametrize("x,expected", [
        (0.5, 1), (1.5, 2), (2.5, 3), (64.5, 65), (64.49, 64), (-0.5, 0), (12.5, 13),
    ])
    def test_round_half_up(self, x, expected):
        assert round_half_up(x) == expected

    def test_population_bounds_skips_invalid(self):
        assert population_bounds([None, 0, -3, math.nan, math.inf, 10, 2, 7]) == (2.0, 10.0)

    def test_population_bounds_empty(self):
        assert population_bounds([]) == (0.0, 0.0)
        assert population_bounds([None, 0]) == (0.0, 0.0)

    def test_micros_to_currency(self):
        assert micros_to_currency(2_500_000) == pytest.approx(2.5)
        assert micros_to_currency(None) is None
        assert micros_to_currency(math.nan) is None
