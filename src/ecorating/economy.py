"""
Economy Classification for Swing and Rating Calculation

Implements:
- Equipment value to economy tier classification (five ordered tiers)
- Team average equipment tiers for the round state
- Eco kill value / eco death penalty multipliers keyed by equipment ratio
- Eco kill / anti-eco kill flags for the round breakdown
"""

import logging
from collections.abc import Iterable
from enum import Enum

logger = logging.getLogger(__name__)


class EconomyCategory(int, Enum):
    """Ordered equipment tier. Tier differences drive duel and economy lookups."""

    STARTER_PISTOL = 0  # $0-1000 (Glock, USP, no armor)
    UPGRADED_PISTOL = 1  # $1000-2000 (Deagle, P250 + armor)
    SMG = 2  # $2000-3500 (SMGs, shotguns)
    RIFLE = 3  # $3500-4750 (AK, M4, etc.)
    AWP = 4  # $4750+ (AWP loadout)

    @property
    def label(self) -> str:
        """Key used in the duel table, e.g. "starter_pistol"."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "EconomyCategory":
        return cls[label.strip().upper()]


# Per-player equipment thresholds (lower bound of each tier)
AWP_THRESHOLD = 4750
RIFLE_THRESHOLD = 3500
SMG_THRESHOLD = 2000
UPGRADED_PISTOL_THRESHOLD = 1000

# Floor for the denominator of every equipment ratio
MIN_EQUIPMENT_VALUE = 100.0

# Floor used when flagging eco / anti-eco kills
ECO_FLAG_MIN_EQUIPMENT = 500.0
ECO_KILL_RATIO = 2.0
ANTI_ECO_KILL_RATIO = 0.5

# (ratio lower bound, multiplier), checked top to bottom with strict ">"
ECO_KILL_VALUE_BANDS = (
    (4.0, 1.80),  # pistol killing rifle
    (2.0, 1.50),  # eco killing force/full buy
    (1.3, 1.25),  # force killing full buy
    (1.1, 1.10),  # slight disadvantage
    (0.9, 1.00),  # equal
    (0.75, 0.95),  # slight advantage
    (0.5, 0.85),  # clear advantage
)
ECO_KILL_VALUE_FLOOR = 0.70  # rifle killing pistol

ECO_DEATH_PENALTY_BANDS = (
    (4.0, 1.60),  # rifle dying to pistol
    (2.0, 1.40),  # full buy dying to eco
    (1.3, 1.20),  # full buy dying to force
    (1.1, 1.10),
    (0.9, 1.00),
    (0.75, 0.95),
    (0.5, 0.85),
)
ECO_DEATH_PENALTY_FLOOR = 0.70  # pistol dying to rifle


def classify_equipment(equipment_value: float | None) -> EconomyCategory:
    """
    Classify a player's (or a team's average) equipment value into a tier.

    Missing or negative values are treated as zero.
    """
    value = max(float(equipment_value or 0.0), 0.0)
    if value >= AWP_THRESHOLD:
        return EconomyCategory.AWP
    if value >= RIFLE_THRESHOLD:
        return EconomyCategory.RIFLE
    if value >= SMG_THRESHOLD:
        return EconomyCategory.SMG
    if value >= UPGRADED_PISTOL_THRESHOLD:
        return EconomyCategory.UPGRADED_PISTOL
    return EconomyCategory.STARTER_PISTOL


def team_economy(equipment_values: Iterable[float]) -> EconomyCategory:
    """Tier of a side from the average equipment value of its players."""
    values = [max(float(v or 0.0), 0.0) for v in equipment_values]
    if not values:
        return EconomyCategory.STARTER_PISTOL
    return classify_equipment(sum(values) / len(values))


def equipment_ratio(numerator: float, denominator: float, floor: float = MIN_EQUIPMENT_VALUE) -> float:
    """numerator / denominator with the denominator floored to avoid blow-ups."""
    return max(float(numerator or 0.0), 0.0) / max(float(denominator or 0.0), floor)


def _band_lookup(ratio: float, bands: tuple[tuple[float, float], ...], floor_value: float) -> float:
    for lower, multiplier in bands:
        if ratio > lower:
            return multiplier
    return floor_value


def eco_kill_value(attacker_equip: float, victim_equip: float) -> float:
    """
    Value multiplier of a kill from the victim/attacker equipment ratio.

    Killing a better-equipped opponent is worth more than 1.0, killing a
    worse-equipped one less.
    """
    ratio = equipment_ratio(victim_equip, attacker_equip)
    return _band_lookup(ratio, ECO_KILL_VALUE_BANDS, ECO_KILL_VALUE_FLOOR)


def eco_death_penalty(victim_equip: float, killer_equip: float) -> float:
    """
    Penalty multiplier of a death from the victim/killer equipment ratio.

    Dying to a worse-equipped opponent hurts more than 1.0.
    """
    ratio = equipment_ratio(victim_equip, killer_equip)
    return _band_lookup(ratio, ECO_DEATH_PENALTY_BANDS, ECO_DEATH_PENALTY_FLOOR)


def is_eco_kill(attacker_equip: float, victim_equip: float) -> bool:
    """Kill made while heavily out-equipped."""
    return equipment_ratio(victim_equip, attacker_equip, ECO_FLAG_MIN_EQUIPMENT) > ECO_KILL_RATIO


def is_anti_eco_kill(attacker_equip: float, victim_equip: float) -> bool:
    """Kill made against a heavily under-equipped opponent."""
    return equipment_ratio(victim_equip, attacker_equip, ECO_FLAG_MIN_EQUIPMENT) < ANTI_ECO_KILL_RATIO
