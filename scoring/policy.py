"""
Purpose: Central configuration for feature extraction and ranking.
What it does:

Stores all tunable thresholds/tables:

PEAK_WINDOWS = 06:00-09:00, 16:00-19:00 (score 1.0)

MODERATE_WINDOWS = 09:00-16:00, 19:00-22:00 (score 0.7)

OFF_PEAK_SCORE = 0.3, NEUTRAL_SCORE = 0.5 (missing/unparseable input)

DAY_OF_WEEK_SCORES = Monday 0.8 ... Sunday 0.5

PREFERRED_DISTANCE_SCALE = 20 miles, floor 0.1

MAX_CONCURRENCY = 8 distance lookups in flight per ranking call

Rule: No logic here - just parameters so you can tune without rewriting code.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

# (start_minute, end_minute, inclusive_end)
TimeWindow = Tuple[int, int, bool]


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Central configuration for the acceptance scoring pipeline.
    """

    # --- Time of day bands (minutes since midnight) ---
    # Peak bands include both ends: 06:00 and 09:00 are both peak.
    peak_windows: List[TimeWindow] = field(default_factory=lambda: [(360, 540, True), (960, 1140, True)])
    peak_score: float = 1.0

    # Moderate bands exclude their end: 22:00 is already off-peak.
    moderate_windows: List[TimeWindow] = field(default_factory=lambda: [(540, 960, False), (1140, 1320, False)])
    moderate_score: float = 0.7

    off_peak_score: float = 0.3

    # Used whenever a time, day or history is missing.
    neutral_score: float = 0.5

    # --- Day of week ---
    day_of_week_scores: Dict[str, float] = field(default_factory=lambda: {
        "monday": 0.8,
        "tuesday": 0.9,
        "wednesday": 0.9,
        "thursday": 0.9,
        "friday": 1.0,
        "saturday": 0.6,
        "sunday": 0.5,
    })

    # --- Preferred distance ---
    # score = max(floor, 1 - |ride - average| / scale)
    preferred_distance_scale_miles: float = 20.0
    preferred_distance_floor: float = 0.1

    # --- Ranking fan-out ---
    # Upper bound on concurrent feature extractions (each may call the distance provider).
    max_concurrency: int = 8

    default_top_n: int = 5

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")

        if self.default_top_n < 0:
            raise ValueError("default_top_n must be >= 0")

        if self.preferred_distance_scale_miles <= 0:
            raise ValueError("preferred_distance_scale_miles must be > 0")

        for start, end, _ in list(self.peak_windows) + list(self.moderate_windows):
            if not 0 <= start <= end <= 24 * 60:
                raise ValueError(f"invalid time window ({start}, {end})")

        scores = [self.peak_score, self.moderate_score, self.off_peak_score,
                  self.neutral_score, self.preferred_distance_floor]
        scores.extend(self.day_of_week_scores.values())
        if any(not 0.0 <= s <= 1.0 for s in scores):
            raise ValueError("all scores must be within [0, 1]")


def default_scoring_policy() -> ScoringPolicy:
    """
    Convenience factory for the default policy.
    """
    p = ScoringPolicy()
    p.validate()
    return p
