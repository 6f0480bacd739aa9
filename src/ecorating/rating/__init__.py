"""EcoRating Rating - composite rating from match aggregates."""

from ecorating.rating.composer import RatingComposer, RatingInputs, swing_to_rating
from ecorating.rating.weights import RatingWeights

__all__ = [
    "RatingComposer",
    "RatingInputs",
    "RatingWeights",
    "swing_to_rating",
]
