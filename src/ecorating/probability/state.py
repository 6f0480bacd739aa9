"""
Round State - the mutable snapshot the probability engine reads.

One instance per round: created at round start from the roster sizes,
mutated in place by each processed event, discarded at round end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from ecorating.core.constants import (
    BOMB_TIMER_SECONDS,
    MAX_TEAM_SIZE,
    ROUND_TIME_SECONDS,
    Team,
    normalize_map_name,
)
from ecorating.economy import EconomyCategory
from ecorating.probability.tables import BOMB_DEFUSED, BOMB_NONE, BOMB_PLANTED, state_key

logger = logging.getLogger(__name__)


@dataclass
class RoundState:
    """Alive counts, bomb status, clock and economy of a round in progress."""

    t_alive: int = MAX_TEAM_SIZE
    ct_alive: int = MAX_TEAM_SIZE
    bomb_planted: bool = False
    bomb_defused: bool = False
    bomb_exploded: bool = False
    time_remaining: float = ROUND_TIME_SECONDS
    t_economy: EconomyCategory = EconomyCategory.RIFLE
    ct_economy: EconomyCategory = EconomyCategory.RIFLE
    map_name: str = ""

    def __post_init__(self) -> None:
        if self.t_alive < 0 or self.ct_alive < 0:
            raise ValueError(f"Alive counts must be non-negative, got {self.t_alive}v{self.ct_alive}")
        self.map_name = normalize_map_name(self.map_name)

    @classmethod
    def new_round(
        cls,
        t_alive: int,
        ct_alive: int,
        map_name: str = "",
        t_economy: EconomyCategory = EconomyCategory.RIFLE,
        ct_economy: EconomyCategory = EconomyCategory.RIFLE,
    ) -> RoundState:
        """Fresh state for a round, alive counts capped at the roster size."""
        return cls(
            t_alive=min(t_alive, MAX_TEAM_SIZE),
            ct_alive=min(ct_alive, MAX_TEAM_SIZE),
            t_economy=t_economy,
            ct_economy=ct_economy,
            map_name=map_name,
        )

    def clone(self) -> RoundState:
        return replace(self)

    def alive(self, side: Team) -> int:
        if side == Team.TERRORIST:
            return self.t_alive
        if side == Team.CT:
            return self.ct_alive
        return 0

    def record_death(self, side: Team) -> None:
        """Remove one player of a side; a side at zero stays at zero."""
        if side == Team.TERRORIST and self.t_alive > 0:
            self.t_alive -= 1
        elif side == Team.CT and self.ct_alive > 0:
            self.ct_alive -= 1

    def set_bomb_planted(self) -> None:
        """Plant the bomb and start the bomb timer. Planting is one-way."""
        if self.bomb_planted:
            return
        self.bomb_planted = True
        self.time_remaining = BOMB_TIMER_SECONDS

    def set_bomb_defused(self) -> None:
        self.bomb_defused = True

    def set_bomb_exploded(self) -> None:
        self.bomb_exploded = True
        self.time_remaining = 0.0

    def advance_clock(self, seconds_left: float) -> None:
        """Update time remaining; the clock never runs backwards."""
        self.time_remaining = max(0.0, min(self.time_remaining, seconds_left))

    @property
    def is_round_over(self) -> bool:
        return (
            self.t_alive == 0
            or self.ct_alive == 0
            or self.bomb_defused
            or self.bomb_exploded
        )

    @property
    def bomb_status(self) -> str:
        if self.bomb_defused:
            return BOMB_DEFUSED
        if self.bomb_planted:
            return BOMB_PLANTED
        return BOMB_NONE

    @property
    def state_key(self) -> str:
        return state_key(self.t_alive, self.ct_alive, self.bomb_status)
