"""
Purpose: Model weights and the shared holder the ranking layer reads them from.
What it does:
- CoefficientSet: intercept + one weight per feature. Immutable.
- CoefficientStore: the process-wide active set.
    snapshot() -> the current set (one consistent object, no locking on read)
    update(new_set) -> installs a replacement with a single reference swap
    apply_gradient_step(examples, learning_rate) -> trains one step and installs it

Rule: a set is never modified in place. Scoring calls grab one snapshot and keep it.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, fields, replace
from typing import Dict, Iterator, Mapping, Sequence, Tuple

from .features import FEATURE_ALIASES, FEATURE_NAMES, canonical_feature_name

logger = logging.getLogger(__name__)

INTERCEPT = "intercept"


@dataclass(frozen=True)
class CoefficientSet:
    """
    Logistic regression weights. Field names match FeatureVector attributes.
    """
    intercept: float
    distance: float
    distance_from_user: float
    time_of_day_score: float
    day_of_week_score: float
    user_acceptance_rate: float
    preferred_distance: float
    preferred_time: float

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"coefficient '{f.name}' must be a finite number, got {value!r}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> CoefficientSet:
        """
        Accepts 'intercept' plus the 7 feature weights, keyed in either naming style
        (distance_from_user or distanceFromUser). All 8 are required.
        """
        collected: Dict[str, float] = {}
        for key, value in values.items():
            name = INTERCEPT if key == INTERCEPT else canonical_feature_name(key)
            if name is None:
                raise ValueError(f"unknown coefficient '{key}'")
            collected[name] = float(value)

        missing = [n for n in (INTERCEPT,) + FEATURE_NAMES if n not in collected]
        if missing:
            raise ValueError(f"missing coefficients: {', '.join(missing)}")
        return cls(**collected)

    def weight(self, feature: str) -> float:
        name = canonical_feature_name(feature)
        if name is None:
            raise KeyError(feature)
        return getattr(self, name)

    def weights(self) -> Iterator[Tuple[str, float]]:
        """Feature weights in model order (intercept excluded)."""
        for name in FEATURE_NAMES:
            yield name, getattr(self, name)

    def to_dict(self) -> Dict[str, float]:
        """External form: intercept + camelCase feature names."""
        result = {INTERCEPT: self.intercept}
        for name, value in self.weights():
            result[FEATURE_ALIASES[name]] = value
        return result


def baseline_coefficients() -> CoefficientSet:
    """
    Hand-tuned starting weights. Roughly 38% acceptance when every feature is 0;
    acceptance rate is the strongest signal, distances gently penalize.
    """
    return CoefficientSet(
        intercept=-0.5,
        distance=-0.08,
        distance_from_user=-0.12,
        time_of_day_score=1.0,
        day_of_week_score=0.4,
        user_acceptance_rate=2.0,
        preferred_distance=0.5,
        preferred_time=0.7,
    )


def zero_coefficients() -> CoefficientSet:
    return CoefficientSet(**{f.name: 0.0 for f in fields(CoefficientSet)})


class CoefficientStore:
    """
    Holder for the active CoefficientSet shared by concurrent scoring calls.

    Readers call snapshot() and use the returned object for the whole call; since
    sets are immutable and installation is a single attribute assignment, a reader
    sees either the old set or the new one in full. Writers are serialized by a lock
    so two gradient steps cannot interleave their read-compute-install.
    """
    def __init__(self, coefficients: CoefficientSet = None):
        self._current = coefficients or baseline_coefficients()
        self._write_lock = threading.Lock()
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> CoefficientSet:
        return self._current

    def update(self, coefficients: CoefficientSet) -> CoefficientSet:
        """Install a replacement set. Returns the previous one."""
        if not isinstance(coefficients, CoefficientSet):
            coefficients = CoefficientSet.from_mapping(coefficients)
        with self._write_lock:
            previous = self._current
            self._current = coefficients
            self._version += 1
        logger.info(f"Model coefficients updated (version {self._version})")
        return previous

    def adjust(self, **changes: float) -> CoefficientSet:
        """Copy-on-write change of individual weights, e.g. adjust(intercept=0.1)."""
        with self._write_lock:
            updated = replace(self._current, **changes)
            self._current = updated
            self._version += 1
        logger.info(f"Model coefficients adjusted: {', '.join(changes)} (version {self._version})")
        return updated

    def apply_gradient_step(self, examples: Sequence, learning_rate: float = 0.01) -> CoefficientSet:
        """
        One batch gradient-descent step on log loss against labeled examples,
        installed atomically. Returns the new set.
        """
        from .training import gradient_step

        with self._write_lock:
            updated = gradient_step(self._current, examples, learning_rate)
            self._current = updated
            self._version += 1
        logger.info(f"Model coefficients trained on {len(examples)} examples (version {self._version})")
        return updated
