"""
Purpose: Coefficient updates from labeled outcomes.
What it does:
- LabeledExample: a feature vector plus whether the ride was accepted.
- gradient_step: one batch gradient-descent step on mean log loss.

How examples are collected (which offers were accepted) is up to the trainer
that calls this; the store installs the result atomically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .coefficients import CoefficientSet
from .features import FEATURE_NAMES, FeatureVector


@dataclass(frozen=True)
class LabeledExample:
    features: FeatureVector
    accepted: bool


def to_arrays(examples: Sequence[LabeledExample]) -> Tuple[np.ndarray, np.ndarray]:
    """(n, 7) feature matrix and (n,) 0/1 labels."""
    x = np.array([ex.features.as_tuple() for ex in examples], dtype=float).reshape(len(examples), len(FEATURE_NAMES))
    y = np.array([1.0 if ex.accepted else 0.0 for ex in examples], dtype=float)
    return x, y


def predict_proba(coefficients: CoefficientSet, x: np.ndarray) -> np.ndarray:
    weights = np.array([w for _, w in coefficients.weights()], dtype=float)
    z = coefficients.intercept + x @ weights
    return 1.0 / (1.0 + np.exp(-z))


def gradient_step(coefficients: CoefficientSet, examples: Sequence[LabeledExample],
                  learning_rate: float = 0.01) -> CoefficientSet:
    """
    w <- w - lr * mean((p - y) * x), intercept uses x = 1.
    Returns a new CoefficientSet; the input is untouched.
    """
    if learning_rate <= 0:
        raise ValueError("learning_rate must be > 0")
    if not examples:
        raise ValueError("at least one labeled example is required")

    x, y = to_arrays(examples)
    if not np.all(np.isfinite(x)):
        raise ValueError("training features must be finite")

    error = predict_proba(coefficients, x) - y
    grad_weights = x.T @ error / len(y)
    grad_intercept = float(error.mean())

    updated = {"intercept": coefficients.intercept - learning_rate * grad_intercept}
    for (name, weight), grad in zip(coefficients.weights(), grad_weights):
        updated[name] = weight - learning_rate * float(grad)
    return CoefficientSet(**updated)
