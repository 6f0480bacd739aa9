"""
Rating Composer

Combines six independently normalized components into one bounded rating:

    rating = sum(weight_i * score_i) - clutch penalty, clamped to [0.20, 3.00]

Every component scores 1.0 for baseline performance and is piecewise
linear in its ratio to the baseline:

- kill:       eco-adjusted kills per round / 0.7, three regimes
- survival:   eco-adjusted deaths per round / 0.7, inverse, clamped [0.3, 1.9]
- damage:     ADR / 75, four regimes
- swing:      total swing per round, three regimes, clamped [0.6, 1.4]
- multi_kill: 2^(k-2) points per k-kill round / 0.18, deflated by the
              kill and damage scores so one big round cannot carry a match
- kast:       KAST fraction, three regimes around 0.70

A player who attempted clutches and won none loses 0.02 per attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from ecorating.analysis.hltv_rating import calculate_hltv_rating, calculate_pistol_rating
from ecorating.analysis.models import PlayerMatchStats, RatingBreakdown, RatingComponent, SideStats
from ecorating.core.config import RatingConfig
from ecorating.rating.weights import (
    BASELINE_ADR,
    BASELINE_DPR,
    BASELINE_KAST,
    BASELINE_KPR,
    BASELINE_MULTI_KILL,
    CLUTCH_LOSS_PENALTY,
    MAX_RATING,
    MIN_RATING,
    RATING_BASELINE,
    SWING_RATING_MAX,
    SWING_RATING_MIN,
    SWING_RATING_SCALE,
    RatingWeights,
)

logger = logging.getLogger(__name__)

DEATH_SCORE_MIN = 0.3
DEATH_SCORE_MAX = 1.9
SWING_SCORE_MIN = 0.6
SWING_SCORE_MAX = 1.4
MULTI_KILL_RAW_MAX = 2.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# Component transforms
# =============================================================================


def kill_score(kills_per_round: float) -> float:
    """Eco-adjusted KPR: gentle below baseline, steeper just above, tapering high."""
    r = kills_per_round / BASELINE_KPR
    if r < 1.0:
        return 1.0 - 0.55 * (1.0 - r)
    if r <= 1.5:
        return 1.0 + 0.75 * (r - 1.0)
    return 1.375 + 0.40 * (r - 1.5)


def survival_score(deaths_per_round: float) -> float:
    """Eco-adjusted DPR: dying less than baseline is rewarded more than dying more is punished."""
    r = deaths_per_round / BASELINE_DPR
    if r <= 1.0:
        score = 1.0 + 0.9 * (1.0 - r)
    else:
        score = 1.0 - 0.55 * (r - 1.0)
    return _clamp(score, DEATH_SCORE_MIN, DEATH_SCORE_MAX)


def damage_score(adr: float) -> float:
    r = adr / BASELINE_ADR
    if r < 0.5:
        return 0.40 + 0.80 * r
    if r < 1.0:
        return 0.80 + 0.40 * (r - 0.5)
    if r < 1.5:
        return 1.0 + 0.60 * (r - 1.0)
    return 1.30 + 0.30 * (r - 1.5)


def swing_score(swing_per_round: float) -> float:
    """Losses are scored steeply, gains gently, both hard-clamped."""
    s = swing_per_round
    if s < 0.0:
        score = 1.0 + 10.0 * s
    elif s <= 0.03:
        score = 1.0 + 7.5 * s
    else:
        score = 1.225 + 4.0 * (s - 0.03)
    return _clamp(score, SWING_SCORE_MIN, SWING_SCORE_MAX)


def multi_kill_points(multi_kills: Mapping[int, int]) -> float:
    """1/2/4/8 points for a 2K/3K/4K/ace round."""
    return float(sum(count * 2 ** (k - 2) for k, count in multi_kills.items() if 2 <= k <= 5))


def multi_kill_score(points_per_round: float, kill_component: float, damage_component: float) -> float:
    """
    Multi-kill rounds relative to baseline. Anything above 1.0 is scaled by
    the player's kill and damage form, capped at full credit.
    """
    r = points_per_round / BASELINE_MULTI_KILL
    raw = min(0.5 + 0.5 * r, MULTI_KILL_RAW_MAX)
    if raw <= 1.0:
        return raw
    form = min(1.0, (kill_component + damage_component) / 2.0)
    return 1.0 + (raw - 1.0) * form


def kast_score(kast: float) -> float:
    if kast >= BASELINE_KAST:
        return 1.0 + (kast - BASELINE_KAST)
    if kast >= 0.55:
        return 1.0 - 2.0 * (BASELINE_KAST - kast)
    return 0.70 - 0.6 * (0.55 - kast)


def swing_to_rating(swing_per_round: float) -> float:
    """Swing alone expressed on the rating scale."""
    return _clamp(RATING_BASELINE + SWING_RATING_SCALE * swing_per_round, SWING_RATING_MIN, SWING_RATING_MAX)


# =============================================================================
# Composer
# =============================================================================


@dataclass
class RatingInputs:
    """Per-match aggregates the composer reads."""

    rounds_played: int
    eco_kill_value: float = 0.0
    eco_death_penalty: float = 0.0
    damage: int = 0
    swing: float = 0.0  # probability swing + clutch bonus - save penalty
    kast_rounds: int = 0
    clutch_attempts: int = 0
    clutch_wins: int = 0
    multi_kills: dict[int, int] = field(default_factory=dict)

    @classmethod
    def from_player(cls, stats: PlayerMatchStats) -> RatingInputs:
        return cls(
            rounds_played=stats.rounds_played,
            eco_kill_value=stats.eco_kill_value,
            eco_death_penalty=stats.eco_death_penalty,
            damage=stats.damage,
            swing=stats.total_swing,
            kast_rounds=stats.kast_rounds,
            clutch_attempts=stats.clutch_attempts,
            clutch_wins=stats.clutch_wins,
            multi_kills=dict(stats.multi_kills),
        )

    @classmethod
    def from_side(cls, side: SideStats) -> RatingInputs:
        return cls(
            rounds_played=side.rounds_played,
            eco_kill_value=side.eco_kill_value,
            eco_death_penalty=side.eco_death_penalty,
            damage=side.damage,
            swing=side.probability_swing + side.clutch_bonus - side.save_penalty,
            kast_rounds=side.kast_rounds,
            clutch_attempts=side.clutch_attempts,
            clutch_wins=side.clutch_wins,
            multi_kills=dict(side.multi_kills),
        )


class RatingComposer:
    """
    Composite rating from match aggregates.

    Usage:
        composer = RatingComposer()
        breakdown = composer.compose(RatingInputs.from_player(stats))
        composer.rate_player(stats)  # fills final_rating and friends
    """

    def __init__(
        self,
        weights: RatingWeights | None = None,
        min_rating: float = MIN_RATING,
        max_rating: float = MAX_RATING,
        clutch_loss_penalty: float = CLUTCH_LOSS_PENALTY,
    ):
        if min_rating > max_rating:
            raise ValueError(f"min_rating {min_rating} exceeds max_rating {max_rating}")
        self.weights = weights if weights is not None else RatingWeights()
        self.min_rating = min_rating
        self.max_rating = max_rating
        self.clutch_loss_penalty = clutch_loss_penalty

    @classmethod
    def from_config(cls, config: RatingConfig) -> RatingComposer:
        return cls(
            weights=RatingWeights.from_config(config),
            min_rating=config.min_rating,
            max_rating=config.max_rating,
            clutch_loss_penalty=config.clutch_loss_penalty,
        )

    def clutch_penalty(self, attempts: int, wins: int) -> float:
        if attempts >= 1 and wins == 0:
            return self.clutch_loss_penalty * attempts
        return 0.0

    def compose(self, inputs: RatingInputs) -> RatingBreakdown:
        """Rating breakdown for one set of aggregates."""
        rounds = inputs.rounds_played
        if rounds <= 0:
            rating = _clamp(RATING_BASELINE, self.min_rating, self.max_rating)
            return RatingBreakdown(
                unclamped_rating=RATING_BASELINE,
                final_rating=rating,
                formula="no rounds played",
            )

        kpr = inputs.eco_kill_value / rounds
        dpr = inputs.eco_death_penalty / rounds
        adr = inputs.damage / rounds
        swing_pr = inputs.swing / rounds
        kast = inputs.kast_rounds / rounds
        mk_pr = multi_kill_points(inputs.multi_kills) / rounds

        k_score = kill_score(kpr)
        d_score = damage_score(adr)
        w = self.weights

        components = [
            RatingComponent("kill", kpr, BASELINE_KPR, k_score, w.kill, "eco-adjusted kills per round"),
            RatingComponent("survival", dpr, BASELINE_DPR, survival_score(dpr), w.survival, "eco-adjusted deaths per round"),
            RatingComponent("damage", adr, BASELINE_ADR, d_score, w.damage, "average damage per round"),
            RatingComponent("swing", swing_pr, 0.0, swing_score(swing_pr), w.swing, f"total swing {inputs.swing:.4f}"),
            RatingComponent(
                "multi_kill",
                mk_pr,
                BASELINE_MULTI_KILL,
                multi_kill_score(mk_pr, k_score, d_score),
                w.multi_kill,
                "multi-kill points per round",
            ),
            RatingComponent("kast", kast, BASELINE_KAST, kast_score(kast), w.kast, "kill/assist/survive/trade rate"),
        ]

        penalty = self.clutch_penalty(inputs.clutch_attempts, inputs.clutch_wins)
        unclamped = sum(c.contribution for c in components) - penalty
        final = _clamp(unclamped, self.min_rating, self.max_rating)

        formula = " + ".join(f"{c.weight:.2f}*{c.score:.3f}" for c in components)
        if penalty:
            formula += f" - {penalty:.2f}"

        return RatingBreakdown(
            components=components,
            clutch_penalty=penalty,
            unclamped_rating=unclamped,
            final_rating=final,
            formula=f"rating = {formula}",
        )

    def rating(self, inputs: RatingInputs) -> float:
        return self.compose(inputs).final_rating

    def rate_player(self, stats: PlayerMatchStats) -> float:
        """Fill every rating field of stats; returns the final rating."""
        breakdown = self.compose(RatingInputs.from_player(stats))
        stats.rating_breakdown = breakdown
        stats.final_rating = breakdown.final_rating
        stats.swing_rating = swing_to_rating(stats.swing_per_round)
        stats.hltv_rating = calculate_hltv_rating(
            stats.kills, stats.deaths, stats.survivals, stats.rounds_played, stats.multi_kills
        )
        stats.pistol_rating = calculate_pistol_rating(
            stats.pistol_kills,
            stats.pistol_deaths,
            stats.pistol_survivals,
            stats.pistol_rounds_played,
            stats.pistol_multi_kills,
        )
        for side in (stats.t_stats, stats.ct_stats):
            side.rating = self.rating(RatingInputs.from_side(side)) if side.rounds_played > 0 else 0.0

        logger.debug(
            f"Rated player {stats.player_id}: {stats.final_rating:.3f} "
            f"(swing {stats.swing_rating:.3f}, hltv {stats.hltv_rating:.3f})"
        )
        return stats.final_rating
