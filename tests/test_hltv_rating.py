"""
Tests for the HLTV comparison rating.

Tests verify the kill/survival/multi-kill formula, the pistol-round variant
and the rating tiers.
"""

import pytest

from ecorating.analysis.hltv_rating import (
    HLTVRatingResult,
    calculate_hltv_rating,
    calculate_hltv_rating_detailed,
    calculate_pistol_rating,
    calculate_rmk_points,
    get_rating_tier,
)


class TestRMKPoints:
    """Tests for round multi-kill points."""

    def test_squares_per_round(self):
        """A k-kill round is worth k squared."""
        assert calculate_rmk_points({1: 10, 2: 5}) == 30
        assert calculate_rmk_points({5: 1}) == 25

    def test_ignores_out_of_range_counts(self):
        assert calculate_rmk_points({0: 4, 6: 1}) == 0


class TestCalculateHLTVRating:
    """Tests for the HLTV rating formula."""

    def test_rating_zero_rounds(self):
        """Zero rounds gives a zero rating."""
        assert calculate_hltv_rating(kills=5, deaths=2, survivals=1, rounds=0) == 0.0

    def test_known_values(self):
        """20 kills, 15 deaths, 5 survivals over 20 rounds."""
        result = calculate_hltv_rating_detailed(20, 15, 5, 20, {1: 10, 2: 5})

        assert result.kill_rating == pytest.approx(1.0 / 0.679)
        assert result.survival_rating == pytest.approx(-0.5 / 0.317)
        assert result.rmk_points == 30
        assert result.rmk_rating == pytest.approx(1.5 / 1.277)
        assert result.rating == pytest.approx(0.5716, abs=1e-4)

    def test_more_kills_rate_higher(self):
        low = calculate_hltv_rating(10, 15, 5, 20, {1: 10})
        high = calculate_hltv_rating(20, 15, 5, 20, {1: 10})
        assert high > low

    def test_missing_multi_kills(self):
        """Without a histogram the multi-kill component is zero."""
        result = calculate_hltv_rating_detailed(10, 10, 10, 20)
        assert result.rmk_rating == 0.0
        assert result.survival_rating == 0.0

    def test_to_dict(self):
        result = calculate_hltv_rating_detailed(20, 15, 5, 20, {1: 10, 2: 5})
        data = result.to_dict()
        assert set(data) == {"rating", "kill_rating", "survival_rating", "rmk_rating", "rmk_points"}
        assert isinstance(result, HLTVRatingResult)


class TestPistolRating:
    """Tests for the pistol-round variant."""

    def test_multi_kill_rounds_count_as_doubles(self):
        assert calculate_pistol_rating(3, 1, 1, 2, 1) == pytest.approx(calculate_hltv_rating(3, 1, 1, 2, {2: 1}))

    def test_no_pistol_rounds(self):
        assert calculate_pistol_rating(0, 0, 0, 0, 0) == 0.0


class TestRatingTier:
    """Tests for rating tier descriptions."""

    @pytest.mark.parametrize(
        "rating,tier",
        [
            (1.45, "Exceptional"),
            (1.30, "Exceptional"),
            (1.20, "Elite"),
            (1.10, "Very Good"),
            (1.00, "Good"),
            (0.90, "Average"),
            (0.80, "Below Average"),
            (0.50, "Poor"),
        ],
    )
    def test_tiers(self, rating, tier):
        assert get_rating_tier(rating) == tier
