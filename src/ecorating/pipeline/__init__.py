"""
EcoRating Pipeline - from a decoded event stream to a scored match.

- contract: validated event record models
- orchestrator: MatchProcessor and score_match helpers
"""

from ecorating.pipeline.contract import MatchLog, load_match, parse_events, parse_match
from ecorating.pipeline.orchestrator import MatchProcessor, score_match, score_match_file

__all__ = [
    "MatchLog",
    "MatchProcessor",
    "load_match",
    "parse_events",
    "parse_match",
    "score_match",
    "score_match_file",
]
