"""
Purpose: Ranking orchestrator (the single entry point for "which rides first?").
What it does:

For one user and a set of candidate rides:

- resolves the user (NotFoundError if unknown)

- takes ONE coefficient snapshot for the whole call

- extracts features + scores every candidate independently, fanned out over a
  bounded thread pool (the distance provider is the only blocking step)

- sorts by probability, highest first; equal probabilities keep input order

- a malformed candidate is reported as a CandidateFailure and the rest are still
  ranked, unless strict=True asks for all-or-nothing

Typical public calls:

- rank(user_id) -> List[ScoredRide]
- top_recommendations(user_id, n) -> first n of rank()
- score_candidates(user_id, strict=...) -> RankingResult (ranked + failures)

Rule: Datasets are read-only here; load() swaps them wholesale.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from rides.datasets import RideDatasets
from rides.errors import DataValidationError
from rides.models import RIDE_ID, RideRecord, UserRecord
from routing.distance_resolver import DistanceResolver
from scoring.coefficients import CoefficientSet, CoefficientStore
from scoring.features import FeatureExtractor, FeatureVector
from scoring.model import probability
from scoring.policy import ScoringPolicy, default_scoring_policy

logger = logging.getLogger(__name__)

Candidate = Union[RideRecord, Mapping[str, str]]


@dataclass(frozen=True)
class ScoredRide:
    """
    One ranked ride. Transient: created per scoring call.
    """
    ride_id: str
    probability: float
    features: FeatureVector
    ride: RideRecord
    distance_source: str = "haversine"
    used_distance_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rideId": self.ride_id,
            "probability": self.probability,
            "features": self.features.to_dict(),
            "rideDetails": dict(self.ride.details),
        }


@dataclass(frozen=True)
class CandidateFailure:
    """
    A candidate that could not be scored. index is its position in the input.
    """
    index: int
    ride_id: Optional[str]
    error: DataValidationError


@dataclass(frozen=True)
class RankingResult:
    """
    Output of a scoring pass.
    """
    ranked: List[ScoredRide] = field(default_factory=list)
    failures: List[CandidateFailure] = field(default_factory=list)


@dataclass(frozen=True)
class _Loaded:
    datasets: RideDatasets
    extractor: FeatureExtractor


def _candidate_id(candidate: Candidate) -> Optional[str]:
    if isinstance(candidate, RideRecord):
        return candidate.id
    return candidate.get(RIDE_ID)


class RankingService:
    """
    Scores and orders candidate rides for a user.
    """
    def __init__(
        self,
        datasets: RideDatasets,
        resolver: DistanceResolver,
        coefficients: Optional[CoefficientStore] = None,
        policy: Optional[ScoringPolicy] = None,
    ):
        self.resolver = resolver
        self.coefficients = coefficients or CoefficientStore()
        self.policy = policy or default_scoring_policy()
        self.policy.validate()
        self._loaded: Optional[_Loaded] = None
        self.load(datasets)

    # --- datasets ---

    def load(self, datasets: RideDatasets) -> None:
        """
        Replace all datasets at once. Calls already in flight keep the old ones.
        """
        extractor = FeatureExtractor(self.resolver, datasets.historical, self.policy)
        self._loaded = _Loaded(datasets=datasets, extractor=extractor)

    @property
    def datasets(self) -> RideDatasets:
        return self._loaded.datasets

    @property
    def extractor(self) -> FeatureExtractor:
        return self._loaded.extractor

    def get_user(self, user_id: str) -> UserRecord:
        return UserRecord.from_row(self._loaded.datasets.get_user(user_id))

    # --- scoring ---

    def score_ride(self, user: UserRecord, candidate: Candidate,
                   coefficients: Optional[CoefficientSet] = None,
                   extractor: Optional[FeatureExtractor] = None) -> ScoredRide:
        """
        Extract + score a single candidate. Raises DataValidationError for bad data.
        """
        coefficients = coefficients or self.coefficients.snapshot()
        extractor = extractor or self._loaded.extractor

        ride = candidate if isinstance(candidate, RideRecord) else RideRecord.from_row(candidate)
        features, pickup = extractor.extract_with_distance(user, ride)
        return ScoredRide(
            ride_id=ride.id,
            probability=probability(features, coefficients, ride.id),
            features=features,
            ride=ride,
            distance_source=pickup.source,
            used_distance_fallback=pickup.used_fallback,
        )

    def score_candidates(
        self,
        user_id: str,
        candidate_rides: Optional[Sequence[Candidate]] = None,
        *,
        strict: bool = False,
    ) -> RankingResult:
        """
        Score every candidate (default: all loaded available rides) and sort.

        strict=False: bad candidates are collected in RankingResult.failures.
        strict=True: the first bad candidate (in input order) raises and pending
        work is cancelled.
        """
        loaded = self._loaded
        user = UserRecord.from_row(loaded.datasets.get_user(user_id))
        candidates = list(loaded.datasets.available if candidate_rides is None else candidate_rides)
        if not candidates:
            return RankingResult()

        coefficients = self.coefficients.snapshot()

        scored: List[ScoredRide] = []
        failures: List[CandidateFailure] = []

        workers = min(self.policy.max_concurrency, len(candidates))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ride-scoring") as pool:
            futures: List[Future] = [
                pool.submit(self.score_ride, user, candidate, coefficients, loaded.extractor)
                for candidate in candidates
            ]
            try:
                # collect in input order so the stable sort below keeps ties in input order
                for index, future in enumerate(futures):
                    try:
                        scored.append(future.result())
                    except DataValidationError as e:
                        if strict:
                            raise
                        logger.warning(f"Skipping ride {_candidate_id(candidates[index])} for user {user_id}: {e}")
                        failures.append(CandidateFailure(index, _candidate_id(candidates[index]), e))
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        scored.sort(key=lambda s: s.probability, reverse=True)
        return RankingResult(ranked=scored, failures=failures)

    def rank(self, user_id: str, candidate_rides: Optional[Sequence[Candidate]] = None) -> List[ScoredRide]:
        """
        Ranked rides, best first. Malformed candidates are logged and left out, so the
        list can be shorter than the input; use score_candidates() to get the failures
        or strict=True to raise on them.
        """
        return self.score_candidates(user_id, candidate_rides).ranked

    def top_recommendations(self, user_id: str, n: Optional[int] = None,
                            candidate_rides: Optional[Sequence[Candidate]] = None) -> List[ScoredRide]:
        """
        First n entries of rank(); n larger than the candidate count returns all of them.
        """
        n = self.policy.default_top_n if n is None else n
        if n < 0:
            raise ValueError("n must be >= 0")
        return self.rank(user_id, candidate_rides)[:n]
