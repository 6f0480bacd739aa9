"""
Probability Data Collection

Accumulates observed outcomes while matches are processed so the
probability tables can be rebuilt from real data:
- state outcomes: every alive-count/bomb state seen during a round is
  credited to the side that eventually won that round
- duel outcomes: every kill is an attacker win for the forward tier
  matchup and a defender win for the reverse matchup (mirror matchups are
  recorded once)
- map outcomes: T/CT round wins per map

A collector may be shared between batch workers; every update takes the
collector's lock. States seen during a round are held per source (one
source per match being fed) until that round ends, so interleaved matches
do not credit each other's states.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from collections.abc import Hashable
from typing import Any

import pandas as pd

from ecorating.core.config import ProbabilityConfig
from ecorating.core.constants import MAX_TEAM_SIZE, Team, normalize_map_name
from ecorating.economy import classify_equipment
from ecorating.probability.tables import (
    BOMB_NONE,
    BOMB_PLANTED,
    MIRROR_DUEL_RATE,
    ProbabilityTables,
    default_tables,
    duel_key,
    state_key,
)

logger = logging.getLogger(__name__)

MIN_STATE_SAMPLES = 10
MIN_DUEL_SAMPLES = 10
MIN_MAP_SAMPLES = 20


@dataclass
class SideOutcomes:
    """Round wins per side for one state key or map."""

    t_wins: int = 0
    ct_wins: int = 0

    @property
    def total(self) -> int:
        return self.t_wins + self.ct_wins

    @property
    def t_win_rate(self) -> float:
        return self.t_wins / self.total if self.total else 0.0


@dataclass
class DuelOutcomes:
    """Attacker/defender wins for one tier matchup."""

    attacker_wins: int = 0
    defender_wins: int = 0

    @property
    def total(self) -> int:
        return self.attacker_wins + self.defender_wins


@dataclass
class CollectedData:
    """Serializable observation counts."""

    state_outcomes: dict[str, SideOutcomes] = field(default_factory=dict)
    duel_outcomes: dict[str, DuelOutcomes] = field(default_factory=dict)
    map_outcomes: dict[str, SideOutcomes] = field(default_factory=dict)
    total_rounds: int = 0
    total_kills: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "state_outcomes": {
                k: {"t_wins": v.t_wins, "ct_wins": v.ct_wins} for k, v in sorted(self.state_outcomes.items())
            },
            "duel_outcomes": {
                k: {"attacker_wins": v.attacker_wins, "defender_wins": v.defender_wins}
                for k, v in sorted(self.duel_outcomes.items())
            },
            "map_data": {
                k: {"t_wins": v.t_wins, "ct_wins": v.ct_wins} for k, v in sorted(self.map_outcomes.items())
            },
            "total_rounds": self.total_rounds,
            "total_kills": self.total_kills,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollectedData:
        return cls(
            state_outcomes={
                k: SideOutcomes(int(v.get("t_wins", 0)), int(v.get("ct_wins", 0)))
                for k, v in data.get("state_outcomes", {}).items()
            },
            duel_outcomes={
                k: DuelOutcomes(int(v.get("attacker_wins", 0)), int(v.get("defender_wins", 0)))
                for k, v in data.get("duel_outcomes", {}).items()
            },
            map_outcomes={
                k: SideOutcomes(int(v.get("t_wins", 0)), int(v.get("ct_wins", 0)))
                for k, v in data.get("map_data", {}).items()
            },
            total_rounds=int(data.get("total_rounds", 0)),
            total_kills=int(data.get("total_kills", 0)),
        )


class ProbabilityDataCollector:
    """
    Thread-safe accumulator of round, duel and map outcomes.

    Usage:
        collector = ProbabilityDataCollector()
        collector.record_round_start()
        collector.record_state_snapshot(5, 5, False)
        collector.record_kill(4700, 3900)
        collector.record_round_end(5, 0, False, Team.TERRORIST, "de_mirage")
        tables = collector.build_tables()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data = CollectedData()
        self._pending_states: dict[Hashable, list[str]] = {}

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_round_start(self, source: Hashable = None) -> None:
        """Drop source's states from an unfinished previous round."""
        with self._lock:
            self._pending_states[source] = []

    def record_state_snapshot(self, t_alive: int, ct_alive: int, bomb_planted: bool, source: Hashable = None) -> None:
        """Remember a state source saw this round; credited to the winner at round end."""
        key = state_key(
            min(t_alive, MAX_TEAM_SIZE),
            min(ct_alive, MAX_TEAM_SIZE),
            BOMB_PLANTED if bomb_planted else BOMB_NONE,
        )
        with self._lock:
            self._pending_states.setdefault(source, []).append(key)

    def record_kill(self, attacker_equip: float, victim_equip: float) -> None:
        """Record a duel won by the attacker."""
        attacker = classify_equipment(attacker_equip)
        victim = classify_equipment(victim_equip)

        with self._lock:
            self._data.total_kills += 1
            forward = self._data.duel_outcomes.setdefault(duel_key(attacker, victim), DuelOutcomes())
            forward.attacker_wins += 1

            if attacker != victim:
                reverse = self._data.duel_outcomes.setdefault(duel_key(victim, attacker), DuelOutcomes())
                reverse.defender_wins += 1

    def record_round_end(
        self,
        t_alive: int,
        ct_alive: int,
        bomb_planted: bool,
        winner: Team,
        map_name: str,
        source: Hashable = None,
    ) -> None:
        """Credit source's pending states and the map to the winner."""
        t_won = winner == Team.TERRORIST
        map_key = normalize_map_name(map_name)

        with self._lock:
            self._data.total_rounds += 1

            for key in self._pending_states.pop(source, []):
                outcome = self._data.state_outcomes.setdefault(key, SideOutcomes())
                if t_won:
                    outcome.t_wins += 1
                else:
                    outcome.ct_wins += 1

            map_outcome = self._data.map_outcomes.setdefault(map_key, SideOutcomes())
            if t_won:
                map_outcome.t_wins += 1
            else:
                map_outcome.ct_wins += 1

        logger.debug(f"Round recorded: {t_alive}v{ct_alive} bomb={bomb_planted} winner={winner.name} map={map_key}")

    # ------------------------------------------------------------------
    # Combining and persistence
    # ------------------------------------------------------------------

    def merge(self, other: ProbabilityDataCollector) -> None:
        """Add another collector's counts into this one."""
        if other is self:
            return
        self.merge_data(other.snapshot())

    def merge_data(self, snapshot: CollectedData) -> None:
        """Add a snapshot of counts (e.g. returned by a worker process)."""
        with self._lock:
            self._data.total_rounds += snapshot.total_rounds
            self._data.total_kills += snapshot.total_kills

            for key, outcome in snapshot.state_outcomes.items():
                target = self._data.state_outcomes.setdefault(key, SideOutcomes())
                target.t_wins += outcome.t_wins
                target.ct_wins += outcome.ct_wins

            for key, duel in snapshot.duel_outcomes.items():
                target_duel = self._data.duel_outcomes.setdefault(key, DuelOutcomes())
                target_duel.attacker_wins += duel.attacker_wins
                target_duel.defender_wins += duel.defender_wins

            for key, outcome in snapshot.map_outcomes.items():
                target = self._data.map_outcomes.setdefault(key, SideOutcomes())
                target.t_wins += outcome.t_wins
                target.ct_wins += outcome.ct_wins

    def snapshot(self) -> CollectedData:
        """Deep copy of the counts collected so far."""
        with self._lock:
            return CollectedData.from_dict(self._data.to_dict())

    def save(self, path: Path) -> None:
        """Write the counts to a JSON file."""
        with self._lock:
            payload = self._data.to_dict()
        with open(path, "w") as f:
            json.dump(payload, f, indent=2)
        logger.info(f"Saved probability data ({payload['total_rounds']} rounds) to: {path}")

    def load(self, path: Path) -> bool:
        """
        Replace the counts with those of a JSON file.

        Returns False (and keeps the current counts) when the file does not exist.
        """
        if not Path(path).exists():
            return False
        with open(path) as f:
            data = CollectedData.from_dict(json.load(f))
        with self._lock:
            self._data = data
        logger.info(f"Loaded probability data ({data.total_rounds} rounds) from: {path}")
        return True

    @classmethod
    def from_file(cls, path: Path) -> ProbabilityDataCollector:
        collector = cls()
        collector.load(path)
        return collector

    @property
    def stats(self) -> tuple[int, int]:
        """(total rounds, total kills) recorded."""
        with self._lock:
            return self._data.total_rounds, self._data.total_kills

    # ------------------------------------------------------------------
    # Table building
    # ------------------------------------------------------------------

    def build_tables(
        self,
        base: ProbabilityTables | None = None,
        min_state_samples: int = MIN_STATE_SAMPLES,
        min_duel_samples: int = MIN_DUEL_SAMPLES,
        min_map_samples: int = MIN_MAP_SAMPLES,
    ) -> ProbabilityTables:
        """
        Build tables from the observations.

        Entries with fewer observations than the floor are skipped, so the
        base tables (defaults unless given) or the analytic fallback keep
        answering for them.
        """
        data = self.snapshot()
        base = base if base is not None else default_tables()

        states: dict[str, float] = {}
        for key, outcome in data.state_outcomes.items():
            if outcome.total >= min_state_samples:
                states[key] = outcome.t_wins / outcome.total

        duels: dict[str, float] = {}
        for key, duel in data.duel_outcomes.items():
            if duel.total < min_duel_samples:
                continue
            attacker, _, defender = key.partition("_vs_")
            if attacker == defender:
                duels[key] = MIRROR_DUEL_RATE
            else:
                duels[key] = duel.attacker_wins / duel.total

        maps: dict[str, float] = {}
        for key, outcome in data.map_outcomes.items():
            if outcome.total >= min_map_samples:
                maps[key] = outcome.t_wins / outcome.total

        tables = base.merged_with(ProbabilityTables(states, duels, maps))
        logger.info(
            f"Built tables from {data.total_rounds} rounds: "
            f"{len(states)} states, {len(duels)} duels, {len(maps)} maps above sample floor"
        )
        return tables

    def to_dataframe(self) -> pd.DataFrame:
        """State outcomes as a DataFrame (key, t_wins, ct_wins, samples, t_win_rate)."""
        data = self.snapshot()
        rows = [
            {
                "state": key,
                "t_wins": outcome.t_wins,
                "ct_wins": outcome.ct_wins,
                "samples": outcome.total,
                "t_win_rate": round(outcome.t_win_rate, 3),
            }
            for key, outcome in sorted(data.state_outcomes.items())
        ]
        return pd.DataFrame(rows, columns=["state", "t_wins", "ct_wins", "samples", "t_win_rate"])


def load_tables(config: ProbabilityConfig) -> ProbabilityTables | None:
    """
    Tables for a probability config: rebuilt from config.tables_file when
    it names an existing observations file, otherwise None (defaults).
    """
    if not config.tables_file:
        return None
    path = Path(config.tables_file)
    if not path.exists():
        logger.warning(f"Probability data file not found, using default tables: {path}")
        return None
    return ProbabilityDataCollector.from_file(path).build_tables(
        min_state_samples=config.min_state_samples,
        min_duel_samples=config.min_duel_samples,
        min_map_samples=config.min_map_samples,
    )
