import math
import random
import threading

import pytest

from rides.errors import DataValidationError
from scoring.coefficients import CoefficientSet, CoefficientStore, baseline_coefficients, zero_coefficients
from scoring.evaluation import evaluate
from scoring.features import FeatureVector
from scoring.model import contributions, logit, probability, sigmoid
from scoring.policy import ScoringPolicy, default_scoring_policy
from scoring.training import LabeledExample, gradient_step

BASELINE_MAPPING = {
    "intercept": -0.5,
    "distance": -0.08,
    "distanceFromUser": -0.12,
    "timeOfDayScore": 1.0,
    "dayOfWeekScore": 0.4,
    "userAcceptanceRate": 2.0,
    "preferredDistance": 0.5,
    "preferredTime": 0.7,
}


def _vector(distance=6.15, from_user=37.0, time_score=0.7, day=0.5, rate=0.81, pref_d=0.95, pref_t=0.7):
    return FeatureVector(distance, from_user, time_score, day, rate, pref_d, pref_t)


def test_baseline_matches_named_mapping():
    assert CoefficientSet.from_mapping(BASELINE_MAPPING) == baseline_coefficients()
    assert baseline_coefficients().to_dict() == BASELINE_MAPPING


def test_coefficient_mapping_accepts_both_naming_styles():
    mixed = dict(BASELINE_MAPPING)
    mixed["distance_from_user"] = mixed.pop("distanceFromUser")
    assert CoefficientSet.from_mapping(mixed).weight("distanceFromUser") == -0.12


@pytest.mark.parametrize("change", [
    {"bogus": 1.0},
    {"intercept": float("nan")},
])
def test_coefficient_mapping_rejects_bad_input(change):
    values = dict(BASELINE_MAPPING)
    values.update(change)
    with pytest.raises(ValueError):
        CoefficientSet.from_mapping(values)


def test_coefficient_mapping_requires_all_eight():
    values = dict(BASELINE_MAPPING)
    del values["preferredTime"]
    with pytest.raises(ValueError, match="preferred_time"):
        CoefficientSet.from_mapping(values)


def test_logit_is_linear_combination():
    vector = _vector()
    coefficients = baseline_coefficients()
    expected = -0.5 + sum(getattr(coefficients, name) * value for name, value in vector.items())
    assert logit(vector, coefficients) == pytest.approx(expected)
    assert probability(vector, coefficients) == pytest.approx(1 / (1 + math.exp(-expected)))


def test_probability_strictly_between_zero_and_one():
    rng = random.Random(7)
    coefficients = baseline_coefficients()
    for _ in range(200):
        vector = _vector(
            distance=rng.uniform(0, 500),
            from_user=rng.uniform(0, 3000),
            time_score=rng.choice([0.3, 0.5, 0.7, 1.0]),
            day=rng.uniform(0, 1),
            rate=rng.uniform(0, 1),
            pref_d=rng.uniform(0.1, 1),
            pref_t=rng.uniform(0, 1),
        )
        p = probability(vector, coefficients)
        assert 0.0 < p < 1.0


def test_extreme_logits_never_reach_the_bounds():
    assert 0.0 < sigmoid(-5000) < 1e-10
    assert 1.0 - 1e-10 < sigmoid(5000) < 1.0


def test_zero_coefficients_give_one_half():
    assert probability(_vector(), zero_coefficients()) == 0.5
    assert probability(_vector(distance=900, from_user=0), zero_coefficients()) == 0.5


def test_probability_is_deterministic():
    vector = _vector()
    assert probability(vector, baseline_coefficients()) == probability(vector, baseline_coefficients())


def test_non_finite_feature_is_rejected():
    with pytest.raises(DataValidationError) as excinfo:
        probability(_vector(from_user=float("nan")), baseline_coefficients(), "A1")
    assert excinfo.value.field == "distanceFromUser"
    assert excinfo.value.record_id == "A1"


def test_missing_feature_is_not_defaulted():
    values = _vector().to_dict()
    del values["dayOfWeekScore"]
    with pytest.raises(DataValidationError):
        probability(values, baseline_coefficients())


def test_contributions_keep_model_order():
    parts = contributions(_vector(), baseline_coefficients())
    assert list(parts)[0] == "distance"
    assert parts["user_acceptance_rate"] == pytest.approx(2.0 * 0.81)


# -------------------------
# Coefficient store
# -------------------------

def test_store_update_swaps_and_returns_previous():
    store = CoefficientStore()
    before = store.snapshot()

    previous = store.update(zero_coefficients())

    assert previous is before
    assert store.snapshot() == zero_coefficients()
    # the old snapshot is untouched
    assert before == baseline_coefficients()
    assert store.version == 1


def test_store_accepts_mapping_and_adjust():
    store = CoefficientStore(zero_coefficients())
    store.update(BASELINE_MAPPING)
    assert store.snapshot() == baseline_coefficients()

    adjusted = store.adjust(intercept=0.25)
    assert adjusted.intercept == 0.25
    assert adjusted.distance == -0.08


def test_readers_never_see_a_partial_update():
    # every installed set has all eight weights equal, so a mix would show up as unequal weights
    def uniform(value):
        return CoefficientSet(*([value] * 8))

    store = CoefficientStore(uniform(0.0))
    stop = threading.Event()
    mixed = []

    def reader():
        while not stop.is_set():
            snapshot = store.snapshot()
            values = {snapshot.intercept} | {w for _, w in snapshot.weights()}
            if len(values) != 1:
                mixed.append(snapshot)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for i in range(1, 500):
        store.update(uniform(float(i)))
    stop.set()
    for t in threads:
        t.join()

    assert mixed == []
    assert store.snapshot() == uniform(499.0)


# -------------------------
# Training + evaluation
# -------------------------

def _examples():
    near_peak = _vector(from_user=1.0, time_score=1.0, rate=0.9)
    far_late = _vector(from_user=30.0, time_score=0.3, rate=0.2)
    return [
        LabeledExample(near_peak, True),
        LabeledExample(near_peak, True),
        LabeledExample(far_late, False),
        LabeledExample(far_late, False),
    ]


def test_gradient_step_moves_toward_labels():
    examples = _examples()
    start = baseline_coefficients()
    updated = gradient_step(start, examples, learning_rate=0.01)

    assert updated != start
    # larger pickup distance goes with declines, so its weight should drop further
    assert updated.distance_from_user < start.distance_from_user

    def loss(coefficients):
        total = 0.0
        for ex in examples:
            p = probability(ex.features, coefficients)
            total -= math.log(p) if ex.accepted else math.log(1 - p)
        return total

    assert loss(updated) < loss(start)


def test_gradient_step_validates_arguments():
    with pytest.raises(ValueError):
        gradient_step(baseline_coefficients(), [], 0.1)
    with pytest.raises(ValueError):
        gradient_step(baseline_coefficients(), _examples(), 0)


def test_store_applies_gradient_step():
    store = CoefficientStore()
    updated = store.apply_gradient_step(_examples(), learning_rate=0.05)
    assert store.snapshot() is updated
    assert store.version == 1


def test_evaluate_on_separable_examples():
    metrics = evaluate(_examples(), baseline_coefficients())

    assert metrics.count == 4
    assert metrics.accuracy == 1.0
    assert metrics.precision == 1.0
    assert metrics.recall == 1.0
    assert metrics.auc == 1.0


def test_evaluate_with_single_class_has_no_auc():
    examples = [ex for ex in _examples() if ex.accepted]
    metrics = evaluate(examples, baseline_coefficients())
    assert metrics.auc is None
    assert metrics.recall == 1.0


# -------------------------
# Policy
# -------------------------

def test_default_policy_is_valid():
    policy = default_scoring_policy()
    assert policy.max_concurrency >= 1


@pytest.mark.parametrize("kwargs", [
    {"max_concurrency": 0},
    {"default_top_n": -1},
    {"peak_score": 1.5},
    {"peak_windows": [(600, 500, True)]},
])
def test_invalid_policy_raises(kwargs):
    with pytest.raises(ValueError):
        ScoringPolicy(**kwargs).validate()
