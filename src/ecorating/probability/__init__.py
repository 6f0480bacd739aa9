"""
EcoRating Probability - round win-probability model.

- tables: immutable state/duel/map lookups with analytic fallbacks
- state: the per-round RoundState snapshot
- engine: win probability, duel rates and swing helpers
- collector: rebuilding tables from observed outcomes
"""

from ecorating.probability.collector import ProbabilityDataCollector, load_tables
from ecorating.probability.engine import ProbabilityEngine
from ecorating.probability.state import RoundState
from ecorating.probability.tables import ProbabilityTables, default_tables

__all__ = [
    "ProbabilityDataCollector",
    "ProbabilityEngine",
    "ProbabilityTables",
    "RoundState",
    "default_tables",
    "load_tables",
]
