"""
Scoring subpackage: features, weights and the logistic model.

Public API:
- FeatureExtractor, FeatureVector
- CoefficientSet, CoefficientStore, baseline_coefficients
- probability, logit
- ScoringPolicy, default_scoring_policy
- LabeledExample, gradient_step, evaluate
"""

from .policy import ScoringPolicy, default_scoring_policy
from .features import FEATURE_NAMES, FeatureExtractor, FeatureVector
from .coefficients import CoefficientSet, CoefficientStore, baseline_coefficients, zero_coefficients
from .model import logit, probability
from .training import LabeledExample, gradient_step
from .evaluation import ModelMetrics, evaluate

__all__ = [
    "ScoringPolicy",
    "default_scoring_policy",
    "FEATURE_NAMES",
    "FeatureExtractor",
    "FeatureVector",
    "CoefficientSet",
    "CoefficientStore",
    "baseline_coefficients",
    "zero_coefficients",
    "logit",
    "probability",
    "LabeledExample",
    "gradient_step",
    "ModelMetrics",
    "evaluate",
]
