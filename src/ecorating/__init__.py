"""
EcoRating - Economy-aware probabilistic impact rating for CS2

Estimates how each kill, plant and defuse moved a round's win probability,
splits that swing between the players who caused it, and combines it with
economy-adjusted kill/death value, damage, KAST and multi-kill rounds into
one bounded rating per player.

Usage:
    from ecorating import score_match_file

    result = score_match_file("match.json")

    for player in result.leaderboard():
        print(f"{player.name}: {player.final_rating:.2f}")
"""

__version__ = "0.1.0"
__author__ = "EcoRating Contributors"


def __getattr__(name):
    """Lazy import for heavy dependencies."""
    # Match scoring
    if name == "MatchProcessor":
        from ecorating.pipeline.orchestrator import MatchProcessor
        return MatchProcessor
    elif name == "score_match":
        from ecorating.pipeline.orchestrator import score_match
        return score_match
    elif name == "score_match_file":
        from ecorating.pipeline.orchestrator import score_match_file
        return score_match_file
    elif name == "load_match":
        from ecorating.pipeline.contract import load_match
        return load_match
    # Probability model
    elif name == "ProbabilityEngine":
        from ecorating.probability.engine import ProbabilityEngine
        return ProbabilityEngine
    elif name == "ProbabilityTables":
        from ecorating.probability.tables import ProbabilityTables
        return ProbabilityTables
    elif name == "ProbabilityDataCollector":
        from ecorating.probability.collector import ProbabilityDataCollector
        return ProbabilityDataCollector
    elif name == "RoundState":
        from ecorating.probability.state import RoundState
        return RoundState
    # Swing
    elif name == "SwingOrchestrator":
        from ecorating.swing.orchestrator import SwingOrchestrator
        return SwingOrchestrator
    elif name == "SwingCalculator":
        from ecorating.swing.calculator import SwingCalculator
        return SwingCalculator
    elif name == "CreditAttributor":
        from ecorating.swing.attribution import CreditAttributor
        return CreditAttributor
    # Rating
    elif name == "RatingComposer":
        from ecorating.rating.composer import RatingComposer
        return RatingComposer
    elif name == "EconomyCategory":
        from ecorating.economy import EconomyCategory
        return EconomyCategory
    # Batch
    elif name == "ParallelMatchScorer":
        from ecorating.infra.parallel import ParallelMatchScorer
        return ParallelMatchScorer
    elif name == "MatchAggregator":
        from ecorating.infra.parallel import MatchAggregator
        return MatchAggregator
    raise AttributeError(f"module 'ecorating' has no attribute '{name}'")


__all__ = [
    # Version
    "__version__",
    # Match scoring
    "MatchProcessor",
    "score_match",
    "score_match_file",
    "load_match",
    # Probability model
    "ProbabilityEngine",
    "ProbabilityTables",
    "ProbabilityDataCollector",
    "RoundState",
    # Swing
    "SwingOrchestrator",
    "SwingCalculator",
    "CreditAttributor",
    # Rating
    "RatingComposer",
    "EconomyCategory",
    # Batch
    "ParallelMatchScorer",
    "MatchAggregator",
]
