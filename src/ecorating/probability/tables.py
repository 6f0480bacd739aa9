"""
Win-Probability Lookup Tables

Three immutable lookups consulted by the probability engine:
- base T-side win probability keyed by alive counts and bomb state
- duel win rate keyed by attacker/defender economy tier
- per-map T-side round win rate

Absent keys never fail: the state and duel lookups fall back to analytic
estimates and the map lookup falls back to a balanced 0.50.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping

from ecorating.core.constants import MAX_TEAM_SIZE, normalize_map_name
from ecorating.economy import EconomyCategory
from ecorating.probability.tables_data import (
    DEFAULT_DUEL_WIN_RATES,
    DEFAULT_MAP_T_WIN_RATES,
    DEFAULT_STATE_WIN_RATES,
)

logger = logging.getLogger(__name__)

BOMB_NONE = "none"
BOMB_PLANTED = "planted"
BOMB_DEFUSED = "defused"

# Fallback model constants
CT_SIDE_BIAS = 0.04
PLANT_PULL = 0.25
DUEL_TIER_STEP = 0.07
DUEL_RATE_MIN = 0.20
DUEL_RATE_MAX = 0.80
MIRROR_DUEL_RATE = 0.50
BALANCED_MAP_RATE = 0.50

PROBABILITY_MIN = 0.01
PROBABILITY_MAX = 0.99


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def state_key(t_alive: int, ct_alive: int, bomb_status: str = BOMB_NONE) -> str:
    """Table key for a state, e.g. "5v4_none"."""
    return f"{t_alive}v{ct_alive}_{bomb_status}"


def duel_key(attacker: EconomyCategory, defender: EconomyCategory) -> str:
    """Table key for a duel, e.g. "rifle_vs_awp"."""
    return f"{attacker.label}_vs_{defender.label}"


def fallback_state_probability(t_alive: int, ct_alive: int, bomb_planted: bool) -> float:
    """
    Analytic T-side win probability for a state missing from the table.

    Alive-count share, minus a steady CT bias scaled by CT numbers, pulled a
    quarter of the remaining distance toward a T win when the bomb is down.
    """
    if t_alive <= 0:
        return 0.0
    if ct_alive <= 0:
        return 1.0

    probability = t_alive / (t_alive + ct_alive)
    probability -= CT_SIDE_BIAS * (ct_alive / MAX_TEAM_SIZE)

    if bomb_planted:
        probability += PLANT_PULL * (1.0 - probability)

    return clamp(probability, PROBABILITY_MIN, PROBABILITY_MAX)


def fallback_duel_rate(attacker: EconomyCategory, defender: EconomyCategory) -> float:
    """0.50 shifted 7 points per tier of advantage, clamped to [0.20, 0.80]."""
    diff = int(attacker) - int(defender)
    return clamp(MIRROR_DUEL_RATE + DUEL_TIER_STEP * diff, DUEL_RATE_MIN, DUEL_RATE_MAX)


@dataclass(frozen=True)
class ProbabilityTables:
    """
    Immutable probability lookups.

    Built once (defaults or rebuilt from observations) and shared by
    reference between engines. The mappings are exposed read-only.
    """

    state_win_rates: Mapping[str, float] = field(default_factory=dict)
    duel_win_rates: Mapping[str, float] = field(default_factory=dict)
    map_t_win_rates: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "state_win_rates", MappingProxyType(dict(self.state_win_rates)))
        object.__setattr__(self, "duel_win_rates", MappingProxyType(dict(self.duel_win_rates)))
        object.__setattr__(self, "map_t_win_rates", MappingProxyType(dict(self.map_t_win_rates)))

    def __reduce__(self):
        # mappingproxy does not pickle; rebuild from plain dicts in worker processes
        return (self.__class__.from_dict, (self.to_dict(),))

    @classmethod
    def default(cls) -> ProbabilityTables:
        """Tables built from the bundled empirical data."""
        return default_tables()

    @classmethod
    def empty(cls) -> ProbabilityTables:
        """Tables with no entries; every lookup uses the fallback."""
        return cls()

    def base_win_probability(self, t_alive: int, ct_alive: int, bomb_planted: bool) -> float:
        """T-side base win probability, from the table or the analytic fallback."""
        key = state_key(t_alive, ct_alive, BOMB_PLANTED if bomb_planted else BOMB_NONE)
        probability = self.state_win_rates.get(key)
        if probability is not None:
            return probability
        return fallback_state_probability(t_alive, ct_alive, bomb_planted)

    def duel_win_rate(self, attacker: EconomyCategory, defender: EconomyCategory) -> float:
        """Attacker win rate in a duel between two economy tiers."""
        if attacker == defender:
            return MIRROR_DUEL_RATE
        rate = self.duel_win_rates.get(duel_key(attacker, defender))
        if rate is not None:
            return rate
        return fallback_duel_rate(attacker, defender)

    def map_t_win_rate(self, map_name: str | None) -> float:
        """Observed T-side round win rate on a map, 0.50 when unknown."""
        return self.map_t_win_rates.get(normalize_map_name(map_name), BALANCED_MAP_RATE)

    def merged_with(self, override: ProbabilityTables) -> ProbabilityTables:
        """New tables where entries of override replace this table's entries."""
        return ProbabilityTables(
            state_win_rates={**self.state_win_rates, **override.state_win_rates},
            duel_win_rates={**self.duel_win_rates, **override.duel_win_rates},
            map_t_win_rates={**self.map_t_win_rates, **override.map_t_win_rates},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "state_win_rates": dict(self.state_win_rates),
            "duel_win_rates": dict(self.duel_win_rates),
            "map_t_win_rates": dict(self.map_t_win_rates),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProbabilityTables:
        return cls(
            state_win_rates=data.get("state_win_rates", {}),
            duel_win_rates=data.get("duel_win_rates", {}),
            map_t_win_rates=data.get("map_t_win_rates", {}),
        )


@lru_cache(maxsize=1)
def default_tables() -> ProbabilityTables:
    """Shared default tables instance."""
    tables = ProbabilityTables(
        state_win_rates=DEFAULT_STATE_WIN_RATES,
        duel_win_rates=DEFAULT_DUEL_WIN_RATES,
        map_t_win_rates=DEFAULT_MAP_T_WIN_RATES,
    )
    logger.debug(
        f"Loaded default tables: {len(tables.state_win_rates)} states, "
        f"{len(tables.duel_win_rates)} duels, {len(tables.map_t_win_rates)} maps"
    )
    return tables
