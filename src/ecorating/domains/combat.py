"""
Combat Detection Module

Streaming detectors used while a match is replayed event by event:
- Trade kill detection (5-second window)
- Clutch detection (1vX) and outcome
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ecorating.core.constants import TRADE_WINDOW_SECONDS, Team

logger = logging.getLogger(__name__)


class ClutchResult(Enum):
    """Result of a clutch situation."""

    WON = "won"
    LOST = "lost"
    IN_PROGRESS = "in_progress"


@dataclass
class TradeKill:
    """A trade kill event."""

    round_num: int
    original_kill_time: float
    trade_kill_time: float

    # Original kill: original_attacker killed original_victim
    original_attacker_id: int
    original_victim_id: int

    # Trade kill: trader killed original_attacker
    trader_id: int
    trader_team: Team

    @property
    def trade_speed(self) -> float:
        """Seconds between the teammate's death and the trade."""
        return self.trade_kill_time - self.original_kill_time

    @property
    def traded_player_id(self) -> int:
        """The teammate whose death was avenged."""
        return self.original_victim_id


@dataclass
class ClutchSituation:
    """A clutch scenario."""

    round_num: int
    start_time: float

    clutcher_id: int
    clutcher_team: Team

    scenario: str  # "1v1", "1v2", etc.
    enemies_alive: int

    result: ClutchResult = ClutchResult.IN_PROGRESS

    @property
    def won(self) -> bool:
        return self.result == ClutchResult.WON


@dataclass
class _RecentKill:
    victim_id: int
    victim_team: Team
    time: float


class TradeDetector:
    """
    Flags trade kills as they happen.

    A kill is a trade when its victim killed one of the attacker's teammates
    within the trade window. Only each player's most recent kill is kept.
    """

    def __init__(self, window_seconds: float = TRADE_WINDOW_SECONDS):
        self.window_seconds = window_seconds
        self.round_num = 0
        self._recent: dict[int, _RecentKill] = {}
        self.trades: list[TradeKill] = []

    def reset(self, round_num: int = 0) -> None:
        """Start a new round; trades never span rounds."""
        self.round_num = round_num
        self._recent = {}

    def record_kill(
        self,
        attacker_id: int,
        attacker_team: Team,
        victim_id: int,
        victim_team: Team,
        time: float,
    ) -> TradeKill | None:
        """Register a kill and return the trade it completes, if any."""
        trade = None
        recent = self._recent.pop(victim_id, None)
        if (
            recent is not None
            and recent.victim_team == attacker_team
            and 0.0 <= time - recent.time <= self.window_seconds
        ):
            trade = TradeKill(
                round_num=self.round_num,
                original_kill_time=recent.time,
                trade_kill_time=time,
                original_attacker_id=victim_id,
                original_victim_id=recent.victim_id,
                trader_id=attacker_id,
                trader_team=attacker_team,
            )
            self.trades.append(trade)
            logger.debug(
                f"Trade in round {self.round_num}: {attacker_id} traded {recent.victim_id} "
                f"by killing {victim_id} after {trade.trade_speed:.2f}s"
            )

        self._recent[attacker_id] = _RecentKill(victim_id=victim_id, victim_team=victim_team, time=time)
        return trade


class ClutchTracker:
    """
    Detects 1vX situations from alive rosters during a round.

    A clutch starts the moment a player becomes the last one alive on their
    side with at least one enemy standing; the enemy count at that moment is
    the clutch size. The outcome is settled at round end by the winner.
    """

    def __init__(self):
        self.round_num = 0
        self._alive: dict[Team, set[int]] = {Team.TERRORIST: set(), Team.CT: set()}
        self._active: dict[int, ClutchSituation] = {}
        self.clutches: list[ClutchSituation] = []

    def reset(self, round_num: int, t_players: set[int], ct_players: set[int]) -> None:
        self.round_num = round_num
        self._alive = {Team.TERRORIST: set(t_players), Team.CT: set(ct_players)}
        self._active = {}

    def alive(self, team: Team) -> set[int]:
        return set(self._alive.get(team, set()))

    def record_kill(self, attacker_id: int, victim_id: int, victim_team: Team, time: float) -> None:
        for players in self._alive.values():
            players.discard(victim_id)

        for team in (Team.TERRORIST, Team.CT):
            team_alive = self._alive[team]
            enemies = len(self._alive[team.opponent])
            if len(team_alive) != 1 or enemies < 1:
                continue
            clutcher_id = next(iter(team_alive))
            if clutcher_id in self._active:
                continue
            self._active[clutcher_id] = ClutchSituation(
                round_num=self.round_num,
                start_time=time,
                clutcher_id=clutcher_id,
                clutcher_team=team,
                scenario=f"1v{enemies}",
                enemies_alive=enemies,
            )
            logger.debug(f"Clutch detected: {clutcher_id} 1v{enemies} in round {self.round_num}")

    def finish_round(self, winner: Team) -> list[ClutchSituation]:
        """Settle every clutch of the round; returns them."""
        finished = []
        for clutch in self._active.values():
            clutch.result = ClutchResult.WON if clutch.clutcher_team == winner else ClutchResult.LOST
            finished.append(clutch)
        self.clutches.extend(finished)
        self._active = {}
        return finished
