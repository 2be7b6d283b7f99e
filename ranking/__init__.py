#Expose the high-level pipeline pieces:
#Ranking (score + sort candidates for a user)
#Explanation (per-feature breakdown of one prediction)

from .service import CandidateFailure, RankingResult, RankingService, ScoredRide
from .explanation import Explanation, ExplanationService, FeatureContribution

__all__ = [
    "RankingService",
    "RankingResult",
    "ScoredRide",
    "CandidateFailure",
    "ExplanationService",
    "Explanation",
    "FeatureContribution",
]
