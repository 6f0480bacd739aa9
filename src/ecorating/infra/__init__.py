"""EcoRating Infra - batch scoring and multi-match aggregation."""

from ecorating.infra.parallel import (
    BatchScoringResult,
    MatchAggregator,
    MatchScoringResult,
    ParallelMatchScorer,
    score_matches_parallel,
)

__all__ = [
    "BatchScoringResult",
    "MatchAggregator",
    "MatchScoringResult",
    "ParallelMatchScorer",
    "score_matches_parallel",
]
