"""
EcoRating Analysis - scored match data.

- models: per-player, per-round and per-match result structures
- hltv_rating: HLTV 2.0-style comparison rating
"""

from ecorating.analysis.hltv_rating import calculate_hltv_rating, calculate_pistol_rating, get_rating_tier
from ecorating.analysis.models import (
    MatchResult,
    PlayerMatchStats,
    RatingBreakdown,
    RatingComponent,
    RoundStats,
    RoundSwingBreakdown,
    SideStats,
    SwingContribution,
)

__all__ = [
    "MatchResult",
    "PlayerMatchStats",
    "RatingBreakdown",
    "RatingComponent",
    "RoundStats",
    "RoundSwingBreakdown",
    "SideStats",
    "SwingContribution",
    "calculate_hltv_rating",
    "calculate_pistol_rating",
    "get_rating_tier",
]
