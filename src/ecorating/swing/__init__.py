"""
EcoRating Swing - per-player probability swing.

- events: immutable round events
- tracker: damage/flash bookkeeping per victim
- attribution: conserving credit split
- calculator: per-event swing and round replay
- orchestrator: live, event-at-a-time match tracking
"""

from ecorating.swing.attribution import CreditAttributor, KillCredit, clutch_bonus
from ecorating.swing.calculator import KillSwingResult, RoundSwingResult, SwingCalculator
from ecorating.swing.events import (
    BombDefuseEvent,
    BombExplodeEvent,
    BombPlantEvent,
    DamageContribution,
    FlashContribution,
    KillEvent,
    RoundEvent,
    RoundResult,
)
from ecorating.swing.orchestrator import ClutchOutcome, RoundSwingSummary, SwingOrchestrator
from ecorating.swing.tracker import ContributionTracker

__all__ = [
    "BombDefuseEvent",
    "BombExplodeEvent",
    "BombPlantEvent",
    "ClutchOutcome",
    "ContributionTracker",
    "CreditAttributor",
    "DamageContribution",
    "FlashContribution",
    "KillCredit",
    "KillEvent",
    "KillSwingResult",
    "RoundEvent",
    "RoundResult",
    "RoundSwingResult",
    "RoundSwingSummary",
    "SwingCalculator",
    "SwingOrchestrator",
    "clutch_bonus",
]
