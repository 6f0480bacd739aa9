"""
Swing Orchestrator

Live, event-at-a-time swing tracking for a match. Owns the round's
RoundState, the contribution tracker and the per-player swing accumulators.

Per round:
    start_round -> record_damage/record_flash/record_kill/record_bomb_* -> end_round

A kill is priced on the state before it and then applied, so every later
event sees the updated alive counts. The victim's tracked damage and
flashes are dropped after the kill.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ecorating.core.constants import BOMB_TIMER_SECONDS, ROUND_TIME_SECONDS, Team
from ecorating.economy import EconomyCategory, classify_equipment
from ecorating.probability.engine import ProbabilityEngine
from ecorating.probability.state import RoundState
from ecorating.swing.attribution import CreditAttributor, clutch_bonus
from ecorating.swing.calculator import KillSwingResult, SwingCalculator
from ecorating.swing.events import (
    BombDefuseEvent,
    BombExplodeEvent,
    BombPlantEvent,
    KillEvent,
    RoundEvent,
    RoundResult,
)
from ecorating.swing.tracker import ContributionTracker

logger = logging.getLogger(__name__)


@dataclass
class ClutchOutcome:
    """A 1vN attempt detected at round end."""

    player_id: int
    clutch_size: int
    won: bool


@dataclass
class RoundSwingSummary:
    """What end_round reports for a finished round."""

    round_number: int
    winner: Team
    player_swings: dict[int, float] = field(default_factory=dict)
    save_penalties: dict[int, float] = field(default_factory=dict)
    clutch_bonuses: dict[int, float] = field(default_factory=dict)
    events: list[RoundEvent] = field(default_factory=list)


class SwingOrchestrator:
    """
    Drives the swing calculation for one match.

    Usage:
        orch = SwingOrchestrator()
        orch.start_round(5, 5, "de_mirage", t_equipment=4000, ct_equipment=4500)
        orch.record_damage(1, 6, 100, time=12.0)
        orch.record_kill(1, 6, Team.TERRORIST, Team.CT, 4700, 5000, time=12.0)
        orch.end_round(RoundResult(winner=Team.TERRORIST))
    """

    def __init__(
        self,
        engine: ProbabilityEngine | None = None,
        attributor: CreditAttributor | None = None,
        tracker: ContributionTracker | None = None,
    ):
        self.engine = engine if engine is not None else ProbabilityEngine()
        self.attributor = attributor if attributor is not None else CreditAttributor()
        self.calculator = SwingCalculator(self.engine, self.attributor)
        self.tracker = tracker if tracker is not None else ContributionTracker()

        self._state: RoundState | None = None
        self._initial_state: RoundState | None = None
        self._round_number = 0
        self._round_events: list[RoundEvent] = []
        self._round_swings: dict[int, float] = {}
        self._plant_time: float | None = None
        self._last_time = 0.0

        # Match accumulators
        self.player_swing: dict[int, float] = {}
        self.player_save_penalty: dict[int, float] = {}
        self.player_clutch_bonus: dict[int, float] = {}
        self.round_summaries: list[RoundSwingSummary] = []

    # ------------------------------------------------------------------
    # Round lifecycle
    # ------------------------------------------------------------------

    def start_round(
        self,
        t_alive: int,
        ct_alive: int,
        map_name: str = "",
        t_equipment: float | None = None,
        ct_equipment: float | None = None,
    ) -> RoundState:
        """
        Begin a round. Equipment values are per-player averages; when not
        given the side is assumed to have a full buy.
        """
        t_economy = classify_equipment(t_equipment) if t_equipment is not None else EconomyCategory.RIFLE
        ct_economy = classify_equipment(ct_equipment) if ct_equipment is not None else EconomyCategory.RIFLE

        self._round_number += 1
        self._state = RoundState.new_round(t_alive, ct_alive, map_name, t_economy, ct_economy)
        self._initial_state = self._state.clone()
        self._round_events = []
        self._round_swings = {}
        self._plant_time = None
        self._last_time = 0.0
        self.tracker.reset()

        logger.debug(
            f"Round {self._round_number} start: {t_alive}v{ct_alive} "
            f"T={t_economy.label} CT={ct_economy.label} map={self._state.map_name or '?'}"
        )
        return self._state.clone()

    def end_round(
        self,
        result: RoundResult,
        clutches: list[ClutchOutcome] | None = None,
    ) -> RoundSwingSummary:
        """
        Close the round: save penalties for losing survivors and bonuses for
        won clutches. Both are kept apart from probability swing.
        """
        summary = RoundSwingSummary(
            round_number=self._round_number,
            winner=result.winner,
            player_swings=dict(self._round_swings),
            events=list(self._round_events),
        )

        for player_id, penalty in self.calculator.save_penalties(result).items():
            summary.save_penalties[player_id] = penalty
            self.player_save_penalty[player_id] = self.player_save_penalty.get(player_id, 0.0) + penalty

        for clutch in clutches or []:
            if not clutch.won:
                continue
            bonus = clutch_bonus(clutch.clutch_size)
            summary.clutch_bonuses[clutch.player_id] = bonus
            self.player_clutch_bonus[clutch.player_id] = self.player_clutch_bonus.get(clutch.player_id, 0.0) + bonus

        self.round_summaries.append(summary)
        self._state = None
        self.tracker.reset()
        return summary

    @property
    def in_round(self) -> bool:
        return self._state is not None

    @property
    def round_number(self) -> int:
        return self._round_number

    @property
    def state(self) -> RoundState:
        """Copy of the current round state."""
        return self._require_state().clone()

    @property
    def initial_state(self) -> RoundState | None:
        return self._initial_state.clone() if self._initial_state is not None else None

    @property
    def round_events(self) -> list[RoundEvent]:
        return list(self._round_events)

    def win_probability(self, side: Team) -> float:
        return self.engine.win_probability(self._require_state(), side)

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------

    def record_damage(self, attacker_id: int, victim_id: int, damage: int, time: float) -> None:
        self._require_state()
        self.tracker.record_damage(attacker_id, victim_id, damage, self._tick_clock(time))

    def record_flash(self, attacker_id: int, victim_id: int, duration: float) -> None:
        self._require_state()
        self.tracker.record_flash(attacker_id, victim_id, duration)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def record_kill(
        self,
        killer_id: int,
        victim_id: int,
        killer_side: Team,
        victim_side: Team,
        killer_equip: float,
        victim_equip: float,
        time: float,
        is_trade: bool = False,
        traded_player_id: int | None = None,
        is_headshot: bool = False,
    ) -> KillSwingResult:
        """Price a kill on the current state, credit it, then apply the death."""
        state = self._require_state()
        time = self._tick_clock(time)

        kill = KillEvent(
            time=time,
            killer_id=killer_id,
            victim_id=victim_id,
            killer_side=killer_side,
            victim_side=victim_side,
            killer_equip=killer_equip,
            victim_equip=victim_equip,
            is_trade=is_trade,
            traded_player_id=traded_player_id,
            is_headshot=is_headshot,
            total_damage_to_victim=self.tracker.total_damage(victim_id),
            killer_damage=self.tracker.damage_by(killer_id, victim_id),
            damage_contributors=self.tracker.damage_contributors(victim_id),
            flash_contributors=self.tracker.flash_contributors(victim_id),
            time_to_kill=self.tracker.time_to_kill(killer_id, victim_id, time),
        )

        swing = self.calculator.kill_swing(state, kill)
        state.record_death(victim_side)
        self._round_events.append(kill)

        self._credit(killer_id, swing.killer_swing)
        self._credit(victim_id, -swing.victim_swing)
        for contributor_id, amount in swing.contributor_swings.items():
            self._credit(contributor_id, amount)

        self.tracker.clear_victim(victim_id)

        logger.debug(
            f"Kill {killer_id}->{victim_id} at {time:.1f}s: raw={swing.raw_swing:.4f} "
            f"x{swing.eco_multiplier:.2f} killer={swing.killer_swing:.4f} victim=-{swing.victim_swing:.4f} "
            f"now {state.t_alive}v{state.ct_alive}"
        )
        return swing

    def record_bomb_plant(self, planter_id: int, time: float) -> float:
        """Credit the planter; returns the planter's swing."""
        state = self._require_state()
        time = self._tick_clock(time)
        if state.bomb_planted:
            logger.warning(f"Duplicate bomb plant at {time:.1f}s in round {self._round_number}, ignored")
            return 0.0

        _, credit = self.calculator.bomb_plant_swing(state)
        state.set_bomb_planted()
        self._plant_time = time
        self._round_events.append(BombPlantEvent(time=time, planter_id=planter_id))
        self._credit(planter_id, credit)
        return credit

    def record_bomb_defuse(self, defuser_id: int, time: float) -> float:
        """Credit the defuser; returns the defuser's swing."""
        state = self._require_state()
        time = self._tick_clock(time)
        if not state.bomb_planted:
            logger.warning(f"Bomb defuse without a plant in round {self._round_number}")

        _, credit = self.calculator.bomb_defuse_swing(state)
        state.set_bomb_defused()
        self._round_events.append(BombDefuseEvent(time=time, defuser_id=defuser_id))
        self._credit(defuser_id, credit)
        return credit

    def record_bomb_explode(self, time: float) -> None:
        state = self._require_state()
        time = self._tick_clock(time)
        state.set_bomb_exploded()
        self._round_events.append(BombExplodeEvent(time=time))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def total_swing(self, player_id: int) -> float:
        """Probability swing plus clutch bonus minus save penalty over the match."""
        return (
            self.player_swing.get(player_id, 0.0)
            + self.player_clutch_bonus.get(player_id, 0.0)
            - self.player_save_penalty.get(player_id, 0.0)
        )

    def _credit(self, player_id: int, amount: float) -> None:
        self.player_swing[player_id] = self.player_swing.get(player_id, 0.0) + amount
        self._round_swings[player_id] = self._round_swings.get(player_id, 0.0) + amount

    def _require_state(self) -> RoundState:
        if self._state is None:
            raise RuntimeError("No round in progress; call start_round first")
        return self._state

    def _tick_clock(self, time: float) -> float:
        """Keep event times non-decreasing and move the round clock along."""
        if time < self._last_time:
            logger.debug(f"Out-of-order event time {time:.2f}s < {self._last_time:.2f}s, clamped")
            time = self._last_time
        self._last_time = time

        state = self._state
        if state is not None:
            if self._plant_time is not None:
                state.advance_clock(BOMB_TIMER_SECONDS - max(0.0, time - self._plant_time))
            else:
                state.advance_clock(ROUND_TIME_SECONDS - time)
        return time
