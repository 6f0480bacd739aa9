"""
Data Models for Match Scoring

Pure-data structures shared by the match driver, the rating composer and
the exporters:
- RoundStats / SwingContribution: one player's view of one round
- RoundSwingBreakdown: the human-readable round review with impact tags
- SideStats / PlayerMatchStats: per-player match accumulators
- RatingComponent / RatingBreakdown: the composed rating, component by component
- MatchResult: everything scored for one match
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ecorating.core.constants import Team

# =============================================================================
# Round-level Models
# =============================================================================


@dataclass
class SwingContribution:
    """One swing entry inside a round (a kill, a death, a plant, ...)."""

    type: str  # "kill", "death", "assist", "plant", "defuse", "save", "clutch"
    amount: float
    time_in_round: float = 0.0
    opponent_id: int | None = None
    weapon: str = ""
    is_trade: bool = False
    is_headshot: bool = False
    eco_multiplier: float = 1.0
    time_to_kill: float | None = None
    notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "amount": round(self.amount, 5),
            "time_in_round": round(self.time_in_round, 2),
        }
        if self.opponent_id is not None:
            data["opponent_id"] = self.opponent_id
        if self.weapon:
            data["weapon"] = self.weapon
        if self.is_trade:
            data["is_trade"] = True
        if self.is_headshot:
            data["is_headshot"] = True
        if self.eco_multiplier != 1.0:
            data["eco_multiplier"] = round(self.eco_multiplier, 3)
        if self.time_to_kill is not None:
            data["time_to_kill"] = round(self.time_to_kill, 3)
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass
class RoundStats:
    """A single player's record for a single round."""

    round_number: int
    side: Team
    is_pistol_round: bool = False
    team_won: bool = False

    kills: int = 0
    assists: int = 0
    damage: int = 0
    flash_assists: int = 0
    survived: bool = True
    traded: bool = False  # this player's death was traded

    opening_kill: bool = False
    opening_death: bool = False
    entry_fragger: bool = False
    trade_kill: bool = False
    trade_death: bool = False
    trade_speed: float = 0.0

    clutch_attempt: bool = False
    clutch_won: bool = False
    clutch_size: int = 0

    planted_bomb: bool = False
    defused_bomb: bool = False
    eco_kill: bool = False
    anti_eco_kill: bool = False

    equipment_value: float = 0.0
    probability_swing: float = 0.0
    contributions: list[SwingContribution] = field(default_factory=list)

    @property
    def kast(self) -> bool:
        """Kill, assist, survived or traded this round."""
        return self.kills > 0 or self.assists > 0 or self.survived or self.traded

    def add_contribution(self, contribution: SwingContribution) -> None:
        self.contributions.append(contribution)
        self.probability_swing += contribution.amount

    def impact_factors(self) -> list[str]:
        """Short labels describing what mattered in this round."""
        factors = []
        if self.kills > 0:
            factors.append(f"{self.kills} kill(s)")
        if self.assists > 0:
            factors.append(f"{self.assists} assist(s)")
        if self.opening_kill:
            factors.append("Opening kill")
        if self.opening_death:
            factors.append("Opening death")
        if self.trade_kill:
            factors.append("Trade kill")
        if self.trade_death:
            factors.append("Trade death")
        if self.planted_bomb:
            factors.append("Bomb plant")
        if self.defused_bomb:
            factors.append("Bomb defuse")
        if self.eco_kill:
            factors.append("Eco kill")
        if self.anti_eco_kill:
            factors.append("Anti-eco kill")
        if self.clutch_attempt:
            factors.append("Clutch win" if self.clutch_won else "Clutch attempt")
        if self.entry_fragger:
            factors.append("Entry frag")
        if self.survived:
            factors.append("Round survival")
        return factors


@dataclass
class RoundSwingBreakdown:
    """Per-round review entry for one player."""

    round_number: int
    probability_swing: float
    player_side: str
    is_pistol_round: bool
    team_won: bool
    kills: int = 0
    assists: int = 0
    damage: int = 0
    impact_factors: list[str] = field(default_factory=list)
    contributions: list[SwingContribution] = field(default_factory=list)

    @classmethod
    def from_round_stats(cls, stats: RoundStats) -> RoundSwingBreakdown:
        return cls(
            round_number=stats.round_number,
            probability_swing=stats.probability_swing,
            player_side=stats.side.short_name,
            is_pistol_round=stats.is_pistol_round,
            team_won=stats.team_won,
            kills=stats.kills,
            assists=stats.assists,
            damage=stats.damage,
            impact_factors=stats.impact_factors(),
            contributions=list(stats.contributions),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "probability_swing": round(self.probability_swing, 5),
            "player_side": self.player_side,
            "is_pistol_round": self.is_pistol_round,
            "team_won": self.team_won,
            "kills": self.kills,
            "assists": self.assists,
            "damage": self.damage,
            "impact_factors": list(self.impact_factors),
            "contributions": [c.to_dict() for c in self.contributions],
        }


# =============================================================================
# Player Accumulators
# =============================================================================


def _empty_multi_kills() -> dict[int, int]:
    return {k: 0 for k in range(1, 6)}


@dataclass
class SideStats:
    """Stats for one side (T or CT) of a match."""

    rounds_played: int = 0
    rounds_won: int = 0
    kills: int = 0
    deaths: int = 0
    damage: int = 0
    survivals: int = 0
    kast_rounds: int = 0
    clutch_attempts: int = 0
    clutch_wins: int = 0
    eco_kill_value: float = 0.0
    eco_death_penalty: float = 0.0
    probability_swing: float = 0.0
    save_penalty: float = 0.0
    clutch_bonus: float = 0.0
    multi_kills: dict[int, int] = field(default_factory=_empty_multi_kills)
    rating: float = 0.0

    @property
    def adr(self) -> float:
        return self.damage / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def kast(self) -> float:
        return self.kast_rounds / self.rounds_played if self.rounds_played > 0 else 0.0

    def merge(self, other: SideStats) -> None:
        self.rounds_played += other.rounds_played
        self.rounds_won += other.rounds_won
        self.kills += other.kills
        self.deaths += other.deaths
        self.damage += other.damage
        self.survivals += other.survivals
        self.kast_rounds += other.kast_rounds
        self.clutch_attempts += other.clutch_attempts
        self.clutch_wins += other.clutch_wins
        self.eco_kill_value += other.eco_kill_value
        self.eco_death_penalty += other.eco_death_penalty
        self.probability_swing += other.probability_swing
        self.save_penalty += other.save_penalty
        self.clutch_bonus += other.clutch_bonus
        for k, count in other.multi_kills.items():
            self.multi_kills[k] = self.multi_kills.get(k, 0) + count

    def to_dict(self) -> dict[str, Any]:
        return {
            "rounds_played": self.rounds_played,
            "rounds_won": self.rounds_won,
            "kills": self.kills,
            "deaths": self.deaths,
            "adr": round(self.adr, 1),
            "kast": round(self.kast, 3),
            "survivals": self.survivals,
            "clutch_attempts": self.clutch_attempts,
            "clutch_wins": self.clutch_wins,
            "probability_swing": round(self.probability_swing, 4),
            "rating": round(self.rating, 3),
        }


@dataclass
class PlayerMatchStats:
    """Complete match statistics for a player."""

    # Identity
    player_id: int
    name: str = ""
    team: Team = Team.UNASSIGNED  # starting side

    # Basic stats
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshots: int = 0
    damage: int = 0
    rounds_played: int = 0
    rounds_won: int = 0

    # KAST tracking
    kast_rounds: int = 0  # Rounds with Kill/Assist/Survived/Traded
    survivals: int = 0

    # Openings and trades
    opening_kills: int = 0
    opening_deaths: int = 0
    trade_kills: int = 0
    traded_deaths: int = 0
    flash_assists: int = 0

    # Clutches
    clutch_attempts: int = 0
    clutch_wins: int = 0

    # Rounds with exactly k kills, k = 1..5
    multi_kills: dict[int, int] = field(default_factory=_empty_multi_kills)

    # Economy-weighted kills and deaths
    eco_kill_value: float = 0.0
    eco_death_penalty: float = 0.0
    eco_kills: int = 0
    anti_eco_kills: int = 0

    # Seconds from first damage to the kill, one value per kill with an engagement
    ttk_values: list[float] = field(default_factory=list)

    # Swing, kept as independent fields
    probability_swing: float = 0.0
    save_penalty: float = 0.0
    clutch_bonus: float = 0.0

    # Pistol rounds
    pistol_rounds_played: int = 0
    pistol_kills: int = 0
    pistol_deaths: int = 0
    pistol_survivals: int = 0
    pistol_multi_kills: int = 0

    # Side-based stats
    t_stats: SideStats = field(default_factory=SideStats)
    ct_stats: SideStats = field(default_factory=SideStats)

    # Outputs
    final_rating: float = 0.0
    swing_rating: float = 0.0
    hltv_rating: float = 0.0
    pistol_rating: float = 0.0
    rating_breakdown: RatingBreakdown | None = None
    round_breakdowns: list[RoundSwingBreakdown] = field(default_factory=list)

    # Derived properties
    @property
    def adr(self) -> float:
        return self.damage / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def kpr(self) -> float:
        return self.kills / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def dpr(self) -> float:
        return self.deaths / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def kast(self) -> float:
        """KAST as a fraction of rounds played (0-1)."""
        return self.kast_rounds / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def kd_ratio(self) -> float:
        return round(self.kills / self.deaths, 2) if self.deaths > 0 else float(self.kills)

    @property
    def total_swing(self) -> float:
        """Probability swing plus clutch bonus minus hollow-save penalty."""
        return self.probability_swing + self.clutch_bonus - self.save_penalty

    @property
    def swing_per_round(self) -> float:
        return self.total_swing / self.rounds_played if self.rounds_played > 0 else 0.0

    @property
    def ttk_median(self) -> float | None:
        """Median time to kill in seconds."""
        if self.ttk_values:
            return float(np.median(self.ttk_values))
        return None

    @property
    def rounds_with_multi_kill(self) -> int:
        return sum(count for k, count in self.multi_kills.items() if k >= 2)

    def side_stats(self, side: Team) -> SideStats:
        return self.t_stats if side == Team.TERRORIST else self.ct_stats

    def merge(self, other: PlayerMatchStats) -> None:
        """Add another match's counters for the same player."""
        for name in (
            "kills",
            "deaths",
            "assists",
            "headshots",
            "damage",
            "rounds_played",
            "rounds_won",
            "kast_rounds",
            "survivals",
            "opening_kills",
            "opening_deaths",
            "trade_kills",
            "traded_deaths",
            "flash_assists",
            "clutch_attempts",
            "clutch_wins",
            "eco_kill_value",
            "eco_death_penalty",
            "eco_kills",
            "anti_eco_kills",
            "probability_swing",
            "save_penalty",
            "clutch_bonus",
            "pistol_rounds_played",
            "pistol_kills",
            "pistol_deaths",
            "pistol_survivals",
            "pistol_multi_kills",
        ):
            setattr(self, name, getattr(self, name) + getattr(other, name))
        for k, count in other.multi_kills.items():
            self.multi_kills[k] = self.multi_kills.get(k, 0) + count
        self.ttk_values.extend(other.ttk_values)
        self.t_stats.merge(other.t_stats)
        self.ct_stats.merge(other.ct_stats)
        if not self.name:
            self.name = other.name

    def to_dict(self, include_rounds: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "player_id": self.player_id,
            "name": self.name,
            "team": self.team.short_name,
            "final_rating": round(self.final_rating, 3),
            "swing_rating": round(self.swing_rating, 3),
            "hltv_rating": round(self.hltv_rating, 3),
            "pistol_rating": round(self.pistol_rating, 3),
            "rounds_played": self.rounds_played,
            "rounds_won": self.rounds_won,
            "kills": self.kills,
            "deaths": self.deaths,
            "assists": self.assists,
            "headshots": self.headshots,
            "damage": self.damage,
            "adr": round(self.adr, 1),
            "kpr": round(self.kpr, 3),
            "dpr": round(self.dpr, 3),
            "kast": round(self.kast, 3),
            "survivals": self.survivals,
            "opening_kills": self.opening_kills,
            "opening_deaths": self.opening_deaths,
            "trade_kills": self.trade_kills,
            "traded_deaths": self.traded_deaths,
            "flash_assists": self.flash_assists,
            "clutch_attempts": self.clutch_attempts,
            "clutch_wins": self.clutch_wins,
            "multi_kills": {f"{k}k": v for k, v in sorted(self.multi_kills.items())},
            "eco_kill_value": round(self.eco_kill_value, 3),
            "eco_death_penalty": round(self.eco_death_penalty, 3),
            "probability_swing": round(self.probability_swing, 5),
            "save_penalty": round(self.save_penalty, 5),
            "clutch_bonus": round(self.clutch_bonus, 5),
            "swing_per_round": round(self.swing_per_round, 5),
            "time_to_kill_median": round(self.ttk_median, 3) if self.ttk_median is not None else None,
            "t_side": self.t_stats.to_dict(),
            "ct_side": self.ct_stats.to_dict(),
        }
        if self.rating_breakdown is not None:
            data["rating_breakdown"] = self.rating_breakdown.to_dict()
        if include_rounds:
            data["rounds"] = [r.to_dict() for r in self.round_breakdowns]
        return data


# =============================================================================
# Rating Breakdown
# =============================================================================


@dataclass
class RatingComponent:
    """One weighted component of the composite rating."""

    metric: str
    value: float  # raw per-round (or fraction) value
    baseline: float
    score: float  # normalized component score, 1.0 = baseline performance
    weight: float
    notes: str = ""

    @property
    def contribution(self) -> float:
        return self.score * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric,
            "value": round(self.value, 4),
            "baseline": self.baseline,
            "score": round(self.score, 4),
            "weight": self.weight,
            "contribution": round(self.contribution, 4),
            "notes": self.notes,
        }


@dataclass
class RatingBreakdown:
    """How a final rating was composed."""

    components: list[RatingComponent] = field(default_factory=list)
    clutch_penalty: float = 0.0
    unclamped_rating: float = 1.0
    final_rating: float = 1.0
    formula: str = ""

    def component(self, metric: str) -> RatingComponent | None:
        for component in self.components:
            if component.metric == metric:
                return component
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "components": [c.to_dict() for c in self.components],
            "clutch_penalty": round(self.clutch_penalty, 4),
            "unclamped_rating": round(self.unclamped_rating, 4),
            "final_rating": round(self.final_rating, 4),
            "formula": self.formula,
        }


# =============================================================================
# Match Result
# =============================================================================


@dataclass
class MatchResult:
    """Everything scored for one match."""

    match_id: str = ""
    map_name: str = ""
    rounds_played: int = 0
    skipped_rounds: int = 0  # knife/warm-up rounds excluded from scoring
    t_rounds_won: int = 0
    ct_rounds_won: int = 0
    players: dict[int, PlayerMatchStats] = field(default_factory=dict)

    @property
    def ratings(self) -> dict[int, float]:
        return {pid: p.final_rating for pid, p in self.players.items()}

    def leaderboard(self) -> list[PlayerMatchStats]:
        """Players by final rating, best first; ties by player id."""
        return sorted(self.players.values(), key=lambda p: (-p.final_rating, p.player_id))

    def to_dict(self, include_rounds: bool = True) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "map_name": self.map_name,
            "rounds_played": self.rounds_played,
            "skipped_rounds": self.skipped_rounds,
            "score": {"T": self.t_rounds_won, "CT": self.ct_rounds_won},
            "players": [p.to_dict(include_rounds=include_rounds) for p in self.leaderboard()],
        }
