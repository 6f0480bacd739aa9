"""
Rating weights and baselines.

Component weights are fixed per composer and must sum to 1.0. Baselines are
the per-round values of an average player; every component scores 1.0 at
its baseline.
"""

from __future__ import annotations

from dataclasses import dataclass

from ecorating.core.config import RatingConfig

# Per-round baselines
BASELINE_KPR = 0.7  # eco-adjusted kills per round
BASELINE_DPR = 0.7  # eco-adjusted deaths per round
BASELINE_ADR = 75.0
BASELINE_KAST = 0.70
# Multi-kill points per round, 2^(k-2) points for a k-kill round
BASELINE_MULTI_KILL = 0.18

# Global rating bounds
MIN_RATING = 0.20
MAX_RATING = 3.00
RATING_BASELINE = 1.0

CLUTCH_LOSS_PENALTY = 0.02

# Swing rating: 1.0 + 10 x swing per round, bounded
SWING_RATING_SCALE = 10.0
SWING_RATING_MIN = 0.40
SWING_RATING_MAX = 1.80

WEIGHT_SUM_TOLERANCE = 0.01


@dataclass(frozen=True)
class RatingWeights:
    """Weights of the six rating components."""

    kill: float = 0.20
    damage: float = 0.15
    survival: float = 0.10
    kast: float = 0.15
    multi_kill: float = 0.15
    swing: float = 0.25

    def __post_init__(self) -> None:
        values = self.as_dict()
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ValueError(f"Rating weights must be non-negative: {', '.join(negative)}")
        total = sum(values.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValueError(f"Rating weights must sum to 1.0, got {total:.4f}")

    @classmethod
    def from_config(cls, config: RatingConfig) -> RatingWeights:
        return cls(
            kill=config.kill_weight,
            damage=config.damage_weight,
            survival=config.survival_weight,
            kast=config.kast_weight,
            multi_kill=config.multi_kill_weight,
            swing=config.swing_weight,
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "kill": self.kill,
            "damage": self.damage,
            "survival": self.survival,
            "kast": self.kast,
            "multi_kill": self.multi_kill,
            "swing": self.swing,
        }
