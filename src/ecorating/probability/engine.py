"""
Win Probability Engine

Computes a side's instantaneous round win probability from a RoundState:

    base (T-side, from tables) -> economy -> map -> bomb timer -> clamp

The ordering matters: clamping before the multiplicative adjustments would
distort them. The complement is returned for the CT side.

Also provides duel win rates and before/after swing helpers for kills,
plants and defuses.
"""

from __future__ import annotations

import logging

from ecorating.core.constants import Team
from ecorating.economy import EconomyCategory, classify_equipment
from ecorating.probability.state import RoundState
from ecorating.probability.tables import (
    BALANCED_MAP_RATE,
    PROBABILITY_MAX,
    PROBABILITY_MIN,
    ProbabilityTables,
    clamp,
    default_tables,
)

logger = logging.getLogger(__name__)

# T-side multiplier by economy tier difference (T tier - CT tier)
ECONOMY_ADJUSTMENTS = {
    4: 1.20,  # AWP vs starter pistols
    3: 1.15,
    2: 1.10,
    1: 1.05,
    0: 1.00,
    -1: 0.95,
    -2: 0.90,
    -3: 0.85,
    -4: 0.80,  # starter pistols vs AWP
}

# (seconds left on the bomb at most, T-side multiplier)
BOMB_TIME_ADJUSTMENTS = (
    (5.0, 1.15),
    (10.0, 1.08),
    (20.0, 1.03),
)

# Kill value multiplier cap for extreme underdog duels
MAX_KILL_VALUE_MULTIPLIER = 2.0
MIN_DUEL_RATE = 0.01


class ProbabilityEngine:
    """
    Round win-probability model.

    Usage:
        engine = ProbabilityEngine()
        state = RoundState.new_round(5, 5, "de_mirage")
        p_t = engine.win_probability(state, Team.TERRORIST)
    """

    def __init__(self, tables: ProbabilityTables | None = None):
        self.tables = tables if tables is not None else default_tables()

    # ------------------------------------------------------------------
    # Win probability
    # ------------------------------------------------------------------

    def win_probability(self, state: RoundState, side: Team) -> float:
        """Win probability of side in state, within [0.01, 0.99]."""
        t_probability = self._base_probability(state)
        t_probability = self._apply_economy_adjustment(t_probability, state)
        t_probability = self._apply_map_adjustment(t_probability, state.map_name)
        t_probability = self._apply_time_adjustment(t_probability, state)
        t_probability = clamp(t_probability, PROBABILITY_MIN, PROBABILITY_MAX)

        if side == Team.TERRORIST:
            return t_probability
        return 1.0 - t_probability

    def _base_probability(self, state: RoundState) -> float:
        # A defuse or an explosion decides the round regardless of alive counts
        if state.bomb_defused:
            return 0.0
        if state.bomb_exploded:
            return 1.0
        return self.tables.base_win_probability(state.t_alive, state.ct_alive, state.bomb_planted)

    def _apply_economy_adjustment(self, probability: float, state: RoundState) -> float:
        diff = int(clamp(int(state.t_economy) - int(state.ct_economy), -4, 4))
        return probability * ECONOMY_ADJUSTMENTS.get(diff, 1.0)

    def _apply_map_adjustment(self, probability: float, map_name: str) -> float:
        return probability * (self.tables.map_t_win_rate(map_name) / BALANCED_MAP_RATE)

    def _apply_time_adjustment(self, probability: float, state: RoundState) -> float:
        if not state.bomb_planted or state.bomb_defused or state.bomb_exploded:
            return probability
        for seconds_left, multiplier in BOMB_TIME_ADJUSTMENTS:
            if state.time_remaining <= seconds_left:
                return probability * multiplier
        return probability

    def economy_multiplier(self, state: RoundState) -> float:
        """T-side economy multiplier applied for a state (1.0 for mirror economies)."""
        return self._apply_economy_adjustment(1.0, state)

    # ------------------------------------------------------------------
    # Duels
    # ------------------------------------------------------------------

    def duel_win_rate(self, attacker_equip: float, victim_equip: float) -> float:
        """Attacker's duel win rate from the two equipment values."""
        return self.tables.duel_win_rate(classify_equipment(attacker_equip), classify_equipment(victim_equip))

    def duel_win_rate_by_category(self, attacker: EconomyCategory, victim: EconomyCategory) -> float:
        return self.tables.duel_win_rate(attacker, victim)

    def economy_adjusted_kill_value(self, killer_equip: float, victim_equip: float) -> float:
        """
        How much a kill is worth relative to an even duel.

        0.50 / duel rate: winning an unfavourable duel is worth more than 1.0,
        capped at 2.0 for extreme underdogs.
        """
        return kill_value_multiplier(self.duel_win_rate(killer_equip, victim_equip))

    # ------------------------------------------------------------------
    # Swing helpers
    # ------------------------------------------------------------------

    def kill_swing(self, state: RoundState, victim_side: Team) -> float:
        """
        Probability gained by the killer's side when victim_side loses a player.

        Never negative: an apparent drop comes from table noise and is suppressed.
        """
        killer_side = victim_side.opponent
        after = state.clone()
        after.record_death(victim_side)
        delta = self.win_probability(after, killer_side) - self.win_probability(state, killer_side)
        return max(0.0, delta)

    def bomb_plant_swing(self, state: RoundState) -> float:
        """Signed T-side probability change caused by planting."""
        after = state.clone()
        after.set_bomb_planted()
        return self.win_probability(after, Team.TERRORIST) - self.win_probability(state, Team.TERRORIST)

    def bomb_defuse_swing(self, state: RoundState) -> float:
        """Signed CT-side probability change caused by defusing."""
        after = state.clone()
        after.set_bomb_defused()
        return self.win_probability(after, Team.CT) - self.win_probability(state, Team.CT)


def kill_value_multiplier(duel_rate: float) -> float:
    """0.50 / duel rate, or the 2.0 cap when the rate is at or below 0.01."""
    if duel_rate <= MIN_DUEL_RATE:
        return MAX_KILL_VALUE_MULTIPLIER
    return 0.50 / duel_rate


def victim_penalty_multiplier(duel_rate: float) -> float:
    """Penalty scale for the victim: dying in a duel you should win hurts more."""
    victim_rate = max(1.0 - duel_rate, MIN_DUEL_RATE)
    return min(victim_rate / 0.50, MAX_KILL_VALUE_MULTIPLIER)
