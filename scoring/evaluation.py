"""
Purpose: Model quality metrics against labeled outcomes.
What it does:
- evaluate(examples, coefficients) -> ModelMetrics(count, accuracy, precision, recall, auc)

AUC is the rank-sum (Mann-Whitney) statistic: the chance that a random accepted
example scores above a random declined one, ties counting half. It is None when
only one class is present. Precision/recall are 0.0 when undefined.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .coefficients import CoefficientSet
from .training import LabeledExample, predict_proba, to_arrays


@dataclass(frozen=True)
class ModelMetrics:
    count: int
    accuracy: float
    precision: float
    recall: float
    auc: Optional[float]


def _auc(scores: np.ndarray, labels: np.ndarray) -> Optional[float]:
    positives = scores[labels == 1]
    negatives = scores[labels == 0]
    if len(positives) == 0 or len(negatives) == 0:
        return None
    # pairwise comparison; evaluation sets are small
    greater = (positives[:, None] > negatives[None, :]).sum()
    ties = (positives[:, None] == negatives[None, :]).sum()
    return float((greater + 0.5 * ties) / (len(positives) * len(negatives)))


def evaluate(examples: Sequence[LabeledExample], coefficients: CoefficientSet,
             threshold: float = 0.5) -> ModelMetrics:
    if not examples:
        raise ValueError("at least one labeled example is required")
    if not 0.0 < threshold < 1.0:
        raise ValueError("threshold must be within (0, 1)")

    x, y = to_arrays(examples)
    scores = predict_proba(coefficients, x)
    predicted = (scores >= threshold).astype(float)

    tp = float(((predicted == 1) & (y == 1)).sum())
    fp = float(((predicted == 1) & (y == 0)).sum())
    fn = float(((predicted == 0) & (y == 1)).sum())

    return ModelMetrics(
        count=len(y),
        accuracy=float((predicted == y).mean()),
        precision=tp / (tp + fp) if tp + fp else 0.0,
        recall=tp / (tp + fn) if tp + fn else 0.0,
        auc=_auc(scores, y),
    )
