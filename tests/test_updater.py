"""
Tests for eager and lazy updaters.

Keep this SIMPLE and READABLE.
"""

import numpy as np
import pytest

from gd.optimization.updater import (
    SimpleUpdater, L1Updater, SquaredL2Updater, LazyUpdater, LazyL1Updater, LazySquaredL2Updater
)
from gd.optimization.gradient import effective_weights


def test_simple_updater_step_decay():
    """Step size decays as step_size / sqrt(iteration)."""
    weights, penalty = SimpleUpdater().compute(
        np.array([1.0, 1.0]), np.array([1.0, -1.0]), 1.0, 4, 0.0)

    np.testing.assert_allclose(weights, [0.5, 1.5])
    assert penalty == 0.0


def test_l1_updater():
    """Soft-threshold after the step; penalty is reg * ||w||_1."""
    weights, penalty = L1Updater().compute(
        np.array([1.0, -1.0, 0.1]), np.zeros(3), 1.0, 1, 0.5)

    np.testing.assert_allclose(weights, [0.5, -0.5, 0.0])
    assert penalty == pytest.approx(0.5)


def test_squared_l2_updater():
    """w' = w (1 - step reg) - step g; penalty is 0.5 reg ||w'||^2."""
    weights, penalty = SquaredL2Updater().compute(
        np.array([2.0]), np.array([1.0]), 1.0, 1, 0.1)

    np.testing.assert_allclose(weights, [0.8])
    assert penalty == pytest.approx(0.032)


def test_zero_step_reports_penalty_of_input():
    """A zero-length step leaves the weights alone and reports their penalty."""
    w = np.array([3.0, -4.0])
    for updater, expected in ((SquaredL2Updater(), 0.5 * 0.1 * 25.0),
                              (L1Updater(), 0.1 * 7.0),
                              (LazySquaredL2Updater(), 0.5 * 0.1 * 25.0),
                              (LazyL1Updater(), 0.1 * 7.0)):
        new_weights, penalty = updater.compute(w, np.zeros(2), 0.0, 1, 0.1)
        np.testing.assert_allclose(new_weights, w)
        assert penalty == pytest.approx(expected)


@pytest.mark.parametrize("lazy,eager", [
    (LazySquaredL2Updater, SquaredL2Updater),
    (LazyL1Updater, L1Updater),
])
def test_lazy_single_step_matches_eager(lazy, eager):
    """From fresh state, one lazy step plus catch-up equals one eager step."""
    rng = np.random.default_rng(3)
    w = rng.standard_normal(5)
    g = rng.standard_normal(5)

    expected_weights, expected_penalty = eager().compute(w, g, 0.3, 2, 0.2)

    updater = lazy()
    stored, penalty = updater.compute(w, g, 0.3, 2, 0.2)
    result = updater.apply_lazy_regularization(stored)

    np.testing.assert_allclose(result, expected_weights)
    assert penalty == pytest.approx(expected_penalty)


def test_lazy_l2_follows_eager_path():
    """Over many steps, shrinkage * stored tracks SquaredL2Updater exactly."""
    rng = np.random.default_rng(4)
    gradients = rng.standard_normal((20, 3))

    eager_weights = np.array([1.0, -1.0, 0.5])
    stored = eager_weights.copy()
    lazy = LazySquaredL2Updater()

    for i, g in enumerate(gradients, start=1):
        eager_weights, _ = SquaredL2Updater().compute(eager_weights, g, 0.5, i, 0.3)
        stored, _ = lazy.compute(stored, g, 0.5, i, 0.3)

    np.testing.assert_allclose(lazy.apply_lazy_regularization(stored), eager_weights)


def test_lazy_l2_folds_tiny_shrinkage():
    """A collapsed shrinkage factor is folded into the stored weights."""
    updater = LazySquaredL2Updater()
    g = np.array([1.0, -2.0])

    stored, _ = updater.compute(np.array([5.0, 5.0]), g, 1.0, 1, 1.0)

    assert updater.weight_shrinkage == 1.0
    np.testing.assert_allclose(updater.apply_lazy_regularization(stored), -g)


def test_lazy_l1_accumulates_truncation():
    """Truncation grows by step * reg per example and is applied once."""
    updater = LazyL1Updater()
    w = np.array([1.0, -0.25])

    for i in (1, 4):
        w, _ = updater.compute(w, np.zeros(2), 1.0, i, 0.2)

    assert updater.weight_truncation == pytest.approx(0.2 + 0.1)
    np.testing.assert_array_equal(w, [1.0, -0.25])
    np.testing.assert_allclose(updater.apply_lazy_regularization(w), [0.7, 0.0])


def test_apply_resets_state():
    """apply_lazy_regularization consumes the deferred state."""
    updater = LazySquaredL2Updater()
    updater.compute(np.ones(2), np.ones(2), 1.0, 1, 0.1)
    assert updater.weight_shrinkage != 1.0

    updater.apply_lazy_regularization(np.ones(2))

    assert updater.weight_shrinkage == 1.0
    assert updater.weight_truncation == 0.0


def test_clone_is_independent():
    """A clone starts fresh and does not share state with its source."""
    updater = LazyL1Updater()
    updater.compute(np.ones(2), np.zeros(2), 1.0, 1, 0.5)

    clone = updater.clone()
    assert isinstance(clone, LazyL1Updater)
    assert clone is not updater
    assert clone.weight_truncation == 0.0

    clone.compute(np.ones(2), np.zeros(2), 1.0, 1, 0.25)
    assert updater.weight_truncation == pytest.approx(0.5)
    assert clone.weight_truncation == pytest.approx(0.25)


def test_regularization_penalty():
    """Penalties of explicit weight vectors."""
    w = np.array([3.0, -4.0])
    assert LazySquaredL2Updater().compute_regularization_penalty(w, 0.2) == pytest.approx(2.5)
    assert LazyL1Updater().compute_regularization_penalty(w, 0.2) == pytest.approx(1.4)


def test_lazy_updater_is_abstract():
    """LazyUpdater needs compute and compute_regularization_penalty."""
    with pytest.raises(TypeError):
        LazyUpdater()


def test_effective_matches_gradient_helper():
    """effective() folds the same shrinkage and truncation the gradients evaluate at."""
    updater = LazyL1Updater()
    updater.weight_shrinkage = 0.5
    updater.weight_truncation = 0.25
    w = np.array([2.0, -0.4, 0.1])

    np.testing.assert_allclose(updater.effective(w), effective_weights(w, 0.5, 0.25))
    np.testing.assert_allclose(updater.effective(w), [0.75, 0.0, 0.0])
    assert updater.weight_shrinkage == 0.5
