"""Test the sliding-window local probability curve."""

import numpy as np
import pytest

from lagmap.contracts import PreconditionViolation
from lagmap.stats.local_probability import local_probability, LocalProbabilityEstimator

pytestmark = pytest.mark.unit


def _reference(sc, br, w):
    """Direct double loop over the window rule."""
    order = np.argsort(sc, kind="stable")
    b = np.asarray(br)[order]
    n = len(b)
    z = np.zeros(n)
    for i in range(w, n - w):
        if b[i] == 1:
            for j in range(i - w, i + w):
                z[j] += 1
    z /= 2 * w
    return np.asarray(sc, dtype=float)[order][w:n - w], z[w:n - w]


def test_fixed_example():
    """sc=[1,5,2,4,3], br=[0,1,0,1,0], w=1: sorted outcomes [0,0,0,1,1].

    Only sorted position 3 is an event inside [1, 4); it covers j in [2, 4),
    so z = [0, 0, 1, 1, 0] / 2 and the trimmed slice is [0, 0.5, 0.5].
    """
    scores, probs = local_probability([1, 5, 2, 4, 3], [0, 1, 0, 1, 0], 1)

    np.testing.assert_array_equal(scores, [2.0, 3.0, 4.0])
    np.testing.assert_array_equal(probs, [0.0, 0.5, 0.5])


def test_matches_reference_loop():
    rng = np.random.default_rng(5)
    sc = rng.normal(size=200)
    br = (rng.random(200) < 0.3).astype(float)

    for w in (1, 3, 10, 49):
        scores, probs = local_probability(sc, br, w)
        ref_scores, ref_probs = _reference(sc, br, w)
        np.testing.assert_array_equal(scores, ref_scores)
        np.testing.assert_array_equal(probs, ref_probs)


def test_all_zero_outcomes_give_zero():
    scores, probs = local_probability(np.arange(30.0), np.zeros(30), 4)

    assert len(probs) == 22
    assert np.all(probs == 0.0)


def test_all_one_outcomes_give_one_where_window_is_covered():
    """Trimmed positions [w - 1, N - 3w) see a full window of events."""
    n, w = 40, 3
    scores, probs = local_probability(np.arange(float(n)), np.ones(n), w)

    np.testing.assert_array_equal(probs[w - 1:n - 3 * w], 1.0)
    assert np.all(probs <= 1.0)
    assert np.all(probs > 0.0)


def test_all_one_outcomes_with_unit_window():
    n = 10
    _, probs = local_probability(np.arange(float(n)), np.ones(n), 1)

    np.testing.assert_array_equal(probs[:-1], 1.0)
    assert probs[-1] == 0.5


def test_ties_keep_original_order():
    sc = np.array([2.0, 1.0, 2.0, 1.0, 2.0, 1.0])
    br = np.array([1, 0, 0, 0, 0, 1])

    _, probs = local_probability(sc, br, 1)
    # sorted outcomes: scores 1 -> [0, 0, 1], scores 2 -> [1, 0, 0]
    _, ref = _reference(sc, br, 1)
    np.testing.assert_array_equal(probs, ref)
    np.testing.assert_array_equal(probs, [0.5, 1.0, 0.5, 0.0])


def test_window_too_large_raises():
    with pytest.raises(PreconditionViolation, match="2w < N"):
        local_probability(np.arange(10.0), np.zeros(10), 5)


def test_window_must_be_positive():
    with pytest.raises(PreconditionViolation, match=">= 1"):
        local_probability(np.arange(10.0), np.zeros(10), 0)


def test_window_must_be_integer():
    with pytest.raises(PreconditionViolation, match="integer"):
        local_probability(np.arange(10.0), np.ones(10), 2.0)


def test_misaligned_inputs_raise():
    with pytest.raises(PreconditionViolation):
        local_probability(np.arange(10.0), np.zeros(9), 2)


def test_estimator_uses_configured_window(make_config):
    config = make_config(half_window=2)
    estimator = LocalProbabilityEstimator(config)

    scores, probs = estimator.estimate(np.arange(10.0), np.ones(10))

    assert len(scores) == 6
    assert estimator.half_window == 2
