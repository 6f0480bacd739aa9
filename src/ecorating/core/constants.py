"""
EcoRating - Constants

Defines sides, timing windows, round structure and map helpers shared by
the probability engine, the swing attribution and the rating composer.
"""

from enum import Enum


class Team(int, Enum):
    """CS2 team numbers."""

    UNASSIGNED = 0
    SPECTATOR = 1
    TERRORIST = 2
    CT = 3

    @property
    def opponent(self) -> "Team":
        """The opposing playing side (UNASSIGNED for non-playing teams)."""
        if self is Team.TERRORIST:
            return Team.CT
        if self is Team.CT:
            return Team.TERRORIST
        return Team.UNASSIGNED

    @property
    def short_name(self) -> str:
        if self is Team.TERRORIST:
            return "T"
        if self is Team.CT:
            return "CT"
        return ""

    @classmethod
    def from_value(cls, value: "Team | int | str") -> "Team":
        """Parse a side from its number or a label such as "T", "CT", "terrorist"."""
        if isinstance(value, Team):
            return value
        if isinstance(value, int):
            return cls(value)
        label = str(value).strip().upper()
        if label in ("T", "TERRORIST", "TERRORISTS", "2"):
            return cls.TERRORIST
        if label in ("CT", "COUNTER-TERRORIST", "COUNTER_TERRORIST", "COUNTERTERRORIST", "3"):
            return cls.CT
        return cls.UNASSIGNED


PLAYING_TEAMS = (Team.TERRORIST, Team.CT)

# CS2 runs 64 tick with subtick everywhere
CS2_TICK_RATE = 64

# Players per side in a standard 5v5 match
MAX_TEAM_SIZE = 5

# Trade window in seconds (320 ticks at 64 tick)
TRADE_WINDOW_SECONDS = 5.0

# Gap between two damage instances after which a new engagement starts
ENGAGEMENT_TIMEOUT_SECONDS = 5.0

# Flash assist minimum duration (seconds)
FLASH_ASSIST_MIN_DURATION = 0.5

# Round clock and bomb timer (seconds)
ROUND_TIME_SECONDS = 115.0
BOMB_TIMER_SECONDS = 40.0

# Round structure, MR12 with MR3 overtime
FIRST_HALF_PISTOL_ROUND = 1
SECOND_HALF_PISTOL_ROUND = 13
REGULATION_ROUNDS = 24
OVERTIME_LENGTH = 6


def is_pistol_round(round_number: int) -> bool:
    """Rounds 1 and 13, plus the first round of every overtime (25, 31, 37, ...)."""
    if round_number in (FIRST_HALF_PISTOL_ROUND, SECOND_HALF_PISTOL_ROUND):
        return True
    return round_number > REGULATION_ROUNDS and (round_number - REGULATION_ROUNDS - 1) % OVERTIME_LENGTH == 0


def ticks_to_seconds(ticks: int, tick_rate: int = CS2_TICK_RATE) -> float:
    """Convert a tick count to seconds."""
    return ticks / tick_rate if tick_rate > 0 else 0.0


def normalize_map_name(map_name: str | None) -> str:
    """Lower-case a map name and add the de_ prefix when it is missing."""
    if not map_name:
        return ""
    name = map_name.strip().lower()
    if "/" in name:
        name = name.rsplit("/", 1)[-1]
    if name and not name.startswith(("de_", "cs_", "ar_")):
        name = f"de_{name}"
    return name
