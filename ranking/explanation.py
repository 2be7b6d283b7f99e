"""
Purpose: Why did this ride get this probability?
What it does:
Rebuilds one prediction and breaks the logit down per feature:
value, coefficient and their product (the contribution), plus intercept,
logit and final probability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from rides.models import UserRecord
from scoring.features import FEATURE_ALIASES
from scoring.model import contributions, sigmoid

from .service import RankingService

# external feature name -> (label, unit suffix, value format)
_LABELS = {
    "distance": ("Ride distance", " miles", "{:.2f}"),
    "distanceFromUser": ("Distance from user", " miles", "{:.2f}"),
    "timeOfDayScore": ("Time of day score", "", "{:.2f}"),
    "dayOfWeekScore": ("Day of week score", "", "{:.2f}"),
    "userAcceptanceRate": ("User acceptance rate", "", "{:.2f}"),
    "preferredDistance": ("Preferred distance match", "", "{:.2f}"),
    "preferredTime": ("Preferred time match", "", "{:.2f}"),
}


@dataclass(frozen=True)
class FeatureContribution:
    feature: str
    value: float
    coefficient: float
    contribution: float


@dataclass(frozen=True)
class Explanation:
    """
    Attribution report for one (user, ride) prediction.
    """
    user_id: str
    ride_id: str
    intercept: float
    logit: float
    probability: float
    contributions: List[FeatureContribution] = field(default_factory=list)
    distance_source: str = "haversine"

    def contribution(self, feature: str) -> FeatureContribution:
        for item in self.contributions:
            if item.feature == feature:
                return item
        raise KeyError(feature)

    def summary_lines(self) -> List[str]:
        lines = []
        for item in self.contributions:
            label, unit, fmt = _LABELS[item.feature]
            lines.append(f"{label}: {fmt.format(item.value)}{unit} (score impact: {item.contribution:.3f})")
        lines.append(f"Baseline (intercept): {self.intercept:.3f}")
        lines.append(f"Final acceptance probability: {self.probability * 100:.1f}%")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "rideId": self.ride_id,
            "probability": self.probability,
            "intercept": self.intercept,
            "logit": self.logit,
            "contributions": [
                {
                    "feature": item.feature,
                    "value": item.value,
                    "coefficient": item.coefficient,
                    "contribution": item.contribution,
                }
                for item in self.contributions
            ],
            "explanation": self.summary_lines(),
        }


class ExplanationService:
    """
    Explains predictions against the ranking service's current datasets and coefficients.
    """
    def __init__(self, ranking_service: RankingService):
        self.ranking_service = ranking_service

    def explain(self, user_id: str, ride_id: str) -> Explanation:
        """
        Raises NotFoundError when either id is not in the loaded datasets.
        """
        service = self.ranking_service
        datasets = service.datasets
        user_row = datasets.get_user(user_id)
        ride_row = datasets.get_ride(ride_id)

        coefficients = service.coefficients.snapshot()
        scored = service.score_ride(UserRecord.from_row(user_row), ride_row, coefficients)

        parts = contributions(scored.features, coefficients, ride_id)
        z = coefficients.intercept + sum(parts.values())

        return Explanation(
            user_id=user_id,
            ride_id=ride_id,
            intercept=coefficients.intercept,
            logit=z,
            probability=sigmoid(z),
            contributions=[
                FeatureContribution(
                    feature=FEATURE_ALIASES[name],
                    value=getattr(scored.features, name),
                    coefficient=getattr(coefficients, name),
                    contribution=parts[name],
                )
                for name in parts
            ],
            distance_source=scored.distance_source,
        )
