"""
EcoRating Core - shared foundations.

- constants: sides, timers, trade/engagement windows, round helpers
- config: configuration loading and logging setup
"""

from ecorating.core.config import (
    EcoRatingConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
    setup_logging,
)
from ecorating.core.constants import PLAYING_TEAMS, Team, is_pistol_round, normalize_map_name

__all__ = [
    "PLAYING_TEAMS",
    "EcoRatingConfig",
    "Team",
    "get_config",
    "is_pistol_round",
    "load_config",
    "normalize_map_name",
    "reset_config",
    "set_config",
    "setup_logging",
]
