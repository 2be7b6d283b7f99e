"""
Purpose: Turn a (user, ride) pair into the model's feature vector.
What it does:

distance            ride distance in miles, as stored
distanceFromUser    user location -> ride origin, via the distance resolver
timeOfDayScore      peak / moderate / off-peak band of the scheduled time
dayOfWeekScore      weekday lookup table
userAcceptanceRate  the user's historical acceptance rate, as stored
preferredDistance   closeness of the ride distance to the historical average distance
preferredTime       time-of-day score reused as the personal time preference

Known approximation: preferredDistance averages the WHOLE historical dataset, not
the user's own rides (historical rows carry no user column).

Rule: this is the only place defaults are chosen for missing time/day/history.
Scoring never fills in a missing feature.
"""

from __future__ import annotations

import math
from dataclasses import astuple, dataclass, fields
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from rides.errors import DataValidationError
from rides.models import (
    ORIGIN_LATITUDE,
    ORIGIN_LONGITUDE,
    RIDE_DISTANCE,
    RIDE_ID,
    USER_ACCEPTANCE_RATE,
    USER_LATITUDE,
    USER_LONGITUDE,
    RideRecord,
    UserRecord,
    parse_float,
)
from routing.distance_resolver import DistanceResolver, DistanceResult

from .policy import ScoringPolicy, default_scoring_policy

# attribute name -> external name, in model order
FEATURE_ALIASES: Dict[str, str] = {
    "distance": "distance",
    "distance_from_user": "distanceFromUser",
    "time_of_day_score": "timeOfDayScore",
    "day_of_week_score": "dayOfWeekScore",
    "user_acceptance_rate": "userAcceptanceRate",
    "preferred_distance": "preferredDistance",
    "preferred_time": "preferredTime",
}
FEATURE_NAMES: Tuple[str, ...] = tuple(FEATURE_ALIASES)
_BY_EXTERNAL_NAME = {external: name for name, external in FEATURE_ALIASES.items()}


def canonical_feature_name(name: str) -> Optional[str]:
    """Accept either naming style; None for an unknown name."""
    if name in FEATURE_ALIASES:
        return name
    return _BY_EXTERNAL_NAME.get(name)


@dataclass(frozen=True)
class FeatureVector:
    """
    The 7 model inputs for one (user, ride) pair, in fixed order.
    """
    distance: float
    distance_from_user: float
    time_of_day_score: float
    day_of_week_score: float
    user_acceptance_rate: float
    preferred_distance: float
    preferred_time: float

    @classmethod
    def from_mapping(cls, values: Mapping[str, float], record_id: Optional[str] = None) -> FeatureVector:
        """
        Build from a mapping keyed by either naming style.
        Every feature must be present; nothing is defaulted.
        """
        collected = {}
        for key, value in values.items():
            name = canonical_feature_name(key)
            if name is not None:
                collected[name] = value

        for name in FEATURE_NAMES:
            if name not in collected:
                raise DataValidationError(record_id, FEATURE_ALIASES[name], "feature is missing")
        return cls(**collected)

    def items(self) -> Iterator[Tuple[str, float]]:
        for f in fields(self):
            yield f.name, getattr(self, f.name)

    def as_tuple(self) -> Tuple[float, ...]:
        return astuple(self)

    def to_dict(self) -> Dict[str, float]:
        """External (camelCase) form."""
        return {FEATURE_ALIASES[name]: value for name, value in self.items()}


# -------------------------
# Individual feature scores
# -------------------------

def parse_minutes(time_str: Optional[str]) -> Optional[int]:
    """
    'HH:MM' (24-hour) -> minutes since midnight. None when missing or unparseable.
    """
    if not time_str:
        return None
    parts = str(time_str).strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        return None
    return hours * 60 + minutes


def _in_window(minutes: int, window) -> bool:
    start, end, inclusive_end = window
    if inclusive_end:
        return start <= minutes <= end
    return start <= minutes < end


def time_of_day_score(time_str: Optional[str], policy: Optional[ScoringPolicy] = None) -> float:
    policy = policy or default_scoring_policy()
    minutes = parse_minutes(time_str)
    if minutes is None:
        return policy.neutral_score

    if any(_in_window(minutes, w) for w in policy.peak_windows):
        return policy.peak_score
    if any(_in_window(minutes, w) for w in policy.moderate_windows):
        return policy.moderate_score
    return policy.off_peak_score


def day_of_week_score(day: Optional[str], policy: Optional[ScoringPolicy] = None) -> float:
    policy = policy or default_scoring_policy()
    if not day:
        return policy.neutral_score
    # table keys may be written in any case
    scores = {name.strip().lower(): value for name, value in policy.day_of_week_scores.items()}
    return scores.get(day.strip().lower(), policy.neutral_score)


def average_distance(historical_rows: Sequence[Mapping[str, str]]) -> Optional[float]:
    """
    Mean ride distance over the historical dataset, None when there is no history.
    A historical row with an unusable distance is a data error, not a skipped row.
    """
    if not historical_rows:
        return None
    total = 0.0
    for row in historical_rows:
        total += parse_float(row, RIDE_DISTANCE, row.get(RIDE_ID))
    return total / len(historical_rows)


def preferred_distance_score(ride_distance: float, avg_distance: Optional[float],
                             policy: Optional[ScoringPolicy] = None) -> float:
    policy = policy or default_scoring_policy()
    if avg_distance is None:
        return policy.neutral_score
    diff = abs(ride_distance - avg_distance)
    return max(policy.preferred_distance_floor, 1.0 - diff / policy.preferred_distance_scale_miles)


# -------------------------
# Extractor
# -------------------------

class FeatureExtractor:
    """
    Builds FeatureVectors against one historical dataset.

    The historical average is computed once at construction; a dataset reload
    builds a new extractor.
    """

    def __init__(
        self,
        resolver: DistanceResolver,
        historical_rows: Sequence[Mapping[str, str]] = (),
        policy: Optional[ScoringPolicy] = None,
    ):
        self.resolver = resolver
        self.policy = policy or default_scoring_policy()
        self.average_distance = average_distance(historical_rows)

    def extract(self, user: UserRecord, ride: RideRecord) -> FeatureVector:
        return self.extract_with_distance(user, ride)[0]

    def extract_with_distance(self, user: UserRecord, ride: RideRecord) -> Tuple[FeatureVector, DistanceResult]:
        """
        Same as extract(), also returning the distance lookup so callers can see
        whether the Haversine fallback was used.
        """
        _require_finite(user.location[0], user.id, USER_LATITUDE)
        _require_finite(user.location[1], user.id, USER_LONGITUDE)
        _require_finite(user.acceptance_rate, user.id, USER_ACCEPTANCE_RATE)
        _require_finite(ride.origin[0], ride.id, ORIGIN_LATITUDE)
        _require_finite(ride.origin[1], ride.id, ORIGIN_LONGITUDE)
        _require_finite(ride.distance_miles, ride.id, RIDE_DISTANCE)

        pickup = self.resolver.resolve(user.location, ride.origin)
        time_score = time_of_day_score(ride.scheduled_time, self.policy)

        features = FeatureVector(
            distance=ride.distance_miles,
            distance_from_user=pickup.miles,
            time_of_day_score=time_score,
            day_of_week_score=day_of_week_score(ride.day_of_week, self.policy),
            user_acceptance_rate=user.acceptance_rate,
            preferred_distance=preferred_distance_score(ride.distance_miles, self.average_distance, self.policy),
            preferred_time=time_score,
        )
        return features, pickup

    def extract_many(self, user: UserRecord, rides: Sequence[RideRecord]) -> List[FeatureVector]:
        return [self.extract(user, ride) for ride in rides]


def _require_finite(value, record_id: str, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise DataValidationError(record_id, field, f"is not a finite number ({value!r})")
