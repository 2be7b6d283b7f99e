"""
Purpose: The scoring function (logistic regression over the 7 features).

    z = intercept + sum(coefficient[f] * feature[f])
    p = 1 / (1 + e^-z)

p is kept strictly inside (0, 1): a huge |z| would otherwise round to exactly 0.0 or 1.0.
"""

from __future__ import annotations

import math
from typing import Dict, Mapping, Optional, Union

from rides.errors import DataValidationError

from .coefficients import CoefficientSet
from .features import FEATURE_ALIASES, FeatureVector

PROBABILITY_EPSILON = 1e-15

Features = Union[FeatureVector, Mapping[str, float]]


def _as_vector(features: Features, record_id: Optional[str]) -> FeatureVector:
    if isinstance(features, FeatureVector):
        return features
    return FeatureVector.from_mapping(features, record_id)


def contributions(features: Features, coefficients: CoefficientSet,
                  record_id: Optional[str] = None) -> Dict[str, float]:
    """
    coefficient * value per feature, keyed by attribute name, in model order.
    Raises DataValidationError for a missing or non-finite feature.
    """
    vector = _as_vector(features, record_id)
    result: Dict[str, float] = {}
    for name, value in vector.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise DataValidationError(record_id, FEATURE_ALIASES[name], f"feature is not finite ({value!r})")
        result[name] = getattr(coefficients, name) * value
    return result


def logit(features: Features, coefficients: CoefficientSet, record_id: Optional[str] = None) -> float:
    z = coefficients.intercept + sum(contributions(features, coefficients, record_id).values())
    if math.isnan(z):
        # inf - inf from overflowing products
        raise DataValidationError(record_id, "logit", "is not a number")
    return z


def sigmoid(z: float) -> float:
    # branch on sign so exp() never overflows
    if z >= 0:
        p = 1.0 / (1.0 + math.exp(-z))
    else:
        e = math.exp(z)
        p = e / (1.0 + e)
    return min(max(p, PROBABILITY_EPSILON), 1.0 - PROBABILITY_EPSILON)


def probability(features: Features, coefficients: CoefficientSet, record_id: Optional[str] = None) -> float:
    """
    Acceptance probability in (0, 1) for one feature vector.
    """
    return sigmoid(logit(features, coefficients, record_id))
