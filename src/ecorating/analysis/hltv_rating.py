"""
HLTV Rating Calculator

Implements the HLTV kill/survival/multi-kill rating used as a comparison
figure next to the eco-rating. Standalone functions over raw counts, so the
same formula serves whole matches, single sides and pistol rounds.

The formula:
Rating = (KillRating + 0.7 * SurvivalRating + RMKRating) / 2.7

Where:
- KillRating: kills per round / 0.679
- SurvivalRating: (survivals - deaths) per round / 0.317
- RMKRating: round multi-kill points per round / 1.277,
  with 1/4/9/16/25 points for a 1K/2K/3K/4K/5K round

Reference: https://www.hltv.org/news/20695/introducing-rating-20
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Average professional values the components are normalized against
HLTV_BASELINES = {
    "kpr": 0.679,
    "spr": 0.317,
    "rmk": 1.277,
}

HLTV_SURVIVAL_WEIGHT = 0.7
HLTV_RATING_DIVISOR = 2.7

# Points for a round with k kills
RMK_POINTS = {1: 1, 2: 4, 3: 9, 4: 16, 5: 25}


@dataclass
class HLTVRatingResult:
    """Result of HLTV Rating calculation with component breakdown."""

    rating: float
    kill_rating: float
    survival_rating: float
    rmk_rating: float
    rmk_points: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rating": self.rating,
            "kill_rating": self.kill_rating,
            "survival_rating": self.survival_rating,
            "rmk_rating": self.rmk_rating,
            "rmk_points": self.rmk_points,
        }


def calculate_rmk_points(multi_kills: Mapping[int, int]) -> int:
    """
    Round multi-kill points from a histogram of rounds by kill count.

    Args:
        multi_kills: rounds with exactly k kills, keyed by k (1-5)

    Returns:
        Sum of k squared over every round with kills
    """
    return sum(RMK_POINTS[k] * count for k, count in multi_kills.items() if k in RMK_POINTS)


def calculate_hltv_rating_detailed(
    kills: int,
    deaths: int,
    survivals: int,
    rounds: int,
    multi_kills: Mapping[int, int] | None = None,
) -> HLTVRatingResult:
    """
    Calculate the HLTV rating with its component breakdown.

    Args:
        kills: Total kills
        deaths: Total deaths
        survivals: Rounds survived
        rounds: Total rounds played
        multi_kills: Rounds with exactly k kills, keyed by k (1-5)

    Returns:
        HLTVRatingResult with rating and all component values
    """
    if rounds <= 0:
        return HLTVRatingResult(rating=0.0, kill_rating=0.0, survival_rating=0.0, rmk_rating=0.0, rmk_points=0)

    kill_rating = (kills / rounds) / HLTV_BASELINES["kpr"]
    survival_rating = ((survivals - deaths) / rounds) / HLTV_BASELINES["spr"]
    rmk_points = calculate_rmk_points(multi_kills or {})
    rmk_rating = (rmk_points / rounds) / HLTV_BASELINES["rmk"]

    rating = (kill_rating + HLTV_SURVIVAL_WEIGHT * survival_rating + rmk_rating) / HLTV_RATING_DIVISOR

    return HLTVRatingResult(
        rating=rating,
        kill_rating=kill_rating,
        survival_rating=survival_rating,
        rmk_rating=rmk_rating,
        rmk_points=rmk_points,
    )


def calculate_hltv_rating(
    kills: int,
    deaths: int,
    survivals: int,
    rounds: int,
    multi_kills: Mapping[int, int] | None = None,
) -> float:
    """
    Calculate the HLTV rating.

    Returns:
        HLTV rating (around 1.0 for an average player, 0.0 for zero rounds)
    """
    return calculate_hltv_rating_detailed(kills, deaths, survivals, rounds, multi_kills).rating


def calculate_pistol_rating(kills: int, deaths: int, survivals: int, rounds: int, multi_kill_rounds: int) -> float:
    """
    HLTV-style rating over pistol rounds only.

    Pistol rounds rarely produce more than a double, so every multi-kill
    round counts as a 2K.
    """
    return calculate_hltv_rating(kills, deaths, survivals, rounds, {2: multi_kill_rounds})


def get_rating_tier(rating: float) -> str:
    """
    Get a descriptive tier for a rating.

    Tiers based on professional player statistics:
    - Exceptional: 1.30+
    - Elite: 1.15 - 1.29
    - Very Good: 1.05 - 1.14
    - Good: 0.95 - 1.04
    - Average: 0.85 - 0.94
    - Below Average: 0.75 - 0.84
    - Poor: < 0.75

    Args:
        rating: Rating value

    Returns:
        String description of the rating tier
    """
    if rating >= 1.30:
        return "Exceptional"
    if rating >= 1.15:
        return "Elite"
    if rating >= 1.05:
        return "Very Good"
    if rating >= 0.95:
        return "Good"
    if rating >= 0.85:
        return "Average"
    if rating >= 0.75:
        return "Below Average"
    return "Poor"
