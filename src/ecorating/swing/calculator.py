"""
Swing Calculator

Turns single events into per-player swing using the probability engine and
the credit attributor:
- kills: raw delta floored at zero, scaled by the duel economy multiplier,
  split by the attributor; the victim takes an economy-scaled penalty
- plants/defuses: signed delta, majority share to the actor
- round replay: a whole ordered event list applied to a fresh state copy
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ecorating.core.constants import BOMB_TIMER_SECONDS, Team
from ecorating.probability.engine import ProbabilityEngine, kill_value_multiplier, victim_penalty_multiplier
from ecorating.probability.state import RoundState
from ecorating.swing.attribution import CreditAttributor, KillCredit
from ecorating.swing.events import (
    BombDefuseEvent,
    BombExplodeEvent,
    BombPlantEvent,
    KillEvent,
    RoundEvent,
    RoundResult,
)

logger = logging.getLogger(__name__)


@dataclass
class KillSwingResult:
    """Swing produced by one kill."""

    raw_swing: float = 0.0  # probability gained by the killer's side
    eco_multiplier: float = 1.0
    total_swing: float = 0.0  # raw_swing * eco_multiplier, the amount split
    killer_swing: float = 0.0
    victim_swing: float = 0.0  # penalty magnitude, subtracted from the victim
    contributor_swings: dict[int, float] = field(default_factory=dict)
    duel_win_rate: float = 0.5
    time_to_kill: float | None = None


@dataclass
class RoundSwingResult:
    """Per-player swing of a whole round."""

    player_swings: dict[int, float] = field(default_factory=dict)
    save_penalties: dict[int, float] = field(default_factory=dict)
    total_t_swing: float = 0.0
    total_ct_swing: float = 0.0


class SwingCalculator:
    """Per-event swing math shared by the live orchestrator and round replay."""

    def __init__(
        self,
        engine: ProbabilityEngine | None = None,
        attributor: CreditAttributor | None = None,
    ):
        self.engine = engine if engine is not None else ProbabilityEngine()
        self.attributor = attributor if attributor is not None else CreditAttributor()

    def kill_swing(self, state: RoundState, kill: KillEvent) -> KillSwingResult:
        """
        Swing of a kill in state. The state is not modified.

        Duels won against the odds carry more swing (up to 2x); dying in a
        duel you were favoured to win costs the victim more.
        """
        raw = self.engine.kill_swing(state, kill.victim_side)
        duel_rate = self.engine.duel_win_rate(kill.killer_equip, kill.victim_equip)
        eco_multiplier = kill_value_multiplier(duel_rate)
        total = raw * eco_multiplier

        credit: KillCredit = self.attributor.attribute_kill(kill, total)

        return KillSwingResult(
            raw_swing=raw,
            eco_multiplier=eco_multiplier,
            total_swing=total,
            killer_swing=credit.killer_credit,
            victim_swing=raw * victim_penalty_multiplier(duel_rate),
            contributor_swings=dict(credit.contributor_credits),
            duel_win_rate=duel_rate,
            time_to_kill=kill.time_to_kill,
        )

    def bomb_plant_swing(self, state: RoundState) -> tuple[float, float]:
        """(T-side delta, planter credit) of a plant in state."""
        delta = self.engine.bomb_plant_swing(state)
        return delta, self.attributor.plant_credit(delta)

    def bomb_defuse_swing(self, state: RoundState) -> tuple[float, float]:
        """(CT-side delta, defuser credit) of a defuse in state."""
        delta = self.engine.bomb_defuse_swing(state)
        return delta, self.attributor.defuse_credit(delta)

    def save_penalties(self, result: RoundResult | None) -> dict[int, float]:
        """Penalty for every survivor on the losing side (a hollow save)."""
        if result is None:
            return {}
        return {pid: self.attributor.save_penalty for pid in result.losing_survivors()}

    def calculate_round_swing(
        self,
        events: Iterable[RoundEvent],
        initial_state: RoundState,
        result: RoundResult | None = None,
        player_sides: dict[int, Team] | None = None,
    ) -> RoundSwingResult:
        """
        Replay a round's events on a copy of initial_state.

        Produces the same per-player swing as processing the events live.
        Save penalties are reported separately from swing credit.
        """
        state = initial_state.clone()
        out = RoundSwingResult()
        sides = dict(player_sides or {})

        def add(player_id: int, amount: float, side: Team | None) -> None:
            out.player_swings[player_id] = out.player_swings.get(player_id, 0.0) + amount
            if side == Team.TERRORIST:
                out.total_t_swing += amount
            elif side == Team.CT:
                out.total_ct_swing += amount

        plant_time: float | None = None
        for event in events:
            if plant_time is not None:
                state.advance_clock(bomb_time_left(plant_time, event.time))

            if isinstance(event, KillEvent):
                sides.setdefault(event.killer_id, event.killer_side)
                sides.setdefault(event.victim_id, event.victim_side)
                swing = self.kill_swing(state, event)
                state.record_death(event.victim_side)
                add(event.killer_id, swing.killer_swing, event.killer_side)
                add(event.victim_id, -swing.victim_swing, event.victim_side)
                for contributor_id, amount in swing.contributor_swings.items():
                    add(contributor_id, amount, sides.get(contributor_id, event.killer_side))
            elif isinstance(event, BombPlantEvent):
                _, credit = self.bomb_plant_swing(state)
                state.set_bomb_planted()
                plant_time = event.time
                add(event.planter_id, credit, Team.TERRORIST)
            elif isinstance(event, BombDefuseEvent):
                _, credit = self.bomb_defuse_swing(state)
                state.set_bomb_defused()
                add(event.defuser_id, credit, Team.CT)
            elif isinstance(event, BombExplodeEvent):
                state.set_bomb_exploded()
            else:
                raise TypeError(f"Unknown round event: {type(event).__name__}")

        out.save_penalties = self.save_penalties(result)
        return out


def bomb_time_left(plant_time: float, now: float) -> float:
    """Seconds left on the bomb at time now."""
    return max(0.0, BOMB_TIMER_SECONDS - max(0.0, now - plant_time))
