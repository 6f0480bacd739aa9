"""EcoRating Domains - trade and clutch detection."""

from ecorating.domains.combat import (
    ClutchResult,
    ClutchSituation,
    ClutchTracker,
    TradeDetector,
    TradeKill,
)

__all__ = [
    "ClutchResult",
    "ClutchSituation",
    "ClutchTracker",
    "TradeDetector",
    "TradeKill",
]
