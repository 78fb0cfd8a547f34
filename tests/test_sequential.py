"""
Tests for the partition-sequential descent runner.

Keep this SIMPLE and READABLE.
"""

from unittest import mock

import numpy as np
import pytest

import gd
from gd.dataset import LocalDataset
from gd.errors import InvalidArgumentError
from gd.optimization import (
    run_gradient_descent, LeastSquaresGradient, LogisticGradient,
    SimpleUpdater, SquaredL2Updater, LazyL1Updater, LazySquaredL2Updater
)
from gd.optimization.sequential import DescentPartition, MergeWeights
from gd.types import LabeledPoint


class RecordingUpdater(LazySquaredL2Updater):
    """Records every iteration number it is asked to step with (shared by clones)."""
    iterations = []

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        RecordingUpdater.iterations.append(iteration)
        return super().compute(weights, gradient, step_size, iteration, reg_param)


class CountingUpdater(LazySquaredL2Updater):
    """Counts penalty evaluations on this instance only."""

    def __init__(self):
        super().__init__()
        self.penalty_calls = 0

    def compute_regularization_penalty(self, weights, reg_param):
        self.penalty_calls += 1
        return super().compute_regularization_penalty(weights, reg_param)


def test_requires_lazy_updater():
    """A non-lazy updater fails before the data is touched."""
    data = mock.MagicMock()

    for updater in (SimpleUpdater(), SquaredL2Updater()):
        with pytest.raises(InvalidArgumentError):
            run_gradient_descent(data, LeastSquaresGradient(), updater, 1.0, 3, 0.0, np.zeros(1))

    assert data.method_calls == []


def test_invalid_argument_is_value_error():
    assert issubclass(InvalidArgumentError, ValueError)


def test_single_example_history():
    """Hand-computed two iterations over one example."""
    data = LocalDataset([[LabeledPoint.of(1.0, [1.0])]])

    weights, history = run_gradient_descent(
        data, LeastSquaresGradient(), LazySquaredL2Updater(), 0.5, 2, 0.0, np.zeros(1))

    # Iteration 1: gradient -2, step 0.5 -> w = 1, loss 1. Iteration 2: exact fit.
    np.testing.assert_allclose(weights, [1.0])
    assert history == [pytest.approx(1.0), pytest.approx(0.0)]


def test_penalty_counted_once():
    """The penalty is added once per iteration, not once per partition."""
    point = LabeledPoint.of(1.0, [1.0])
    single = LocalDataset([[point]])
    double = LocalDataset([[point], [point]])

    for data in (single, double):
        weights, history = run_gradient_descent(
            data, LeastSquaresGradient(), LazySquaredL2Updater(), 0.5, 1, 0.1, np.zeros(1))

        # w = 0.95 * 0 + 0.5 * 2 = 1, loss 1, penalty 0.5 * 0.1 * 1
        np.testing.assert_allclose(weights, [1.0])
        assert history == [pytest.approx(1.05)]


def test_penalty_evaluated_once_per_iteration(regression_points):
    """compute_regularization_penalty runs once per outer iteration on the driver."""
    data = gd.parallelize(regression_points, num_partitions=3)
    updater = CountingUpdater()

    run_gradient_descent(data, LeastSquaresGradient(), updater, 0.1, 4, 0.01, np.zeros(3))

    assert updater.penalty_calls == 4


def test_counters_persist_across_iterations():
    """Each partition's example counter keeps growing from one iteration to the next."""
    partitions = [[LabeledPoint.of(0.0, [1.0])] * 2, [LabeledPoint.of(0.0, [1.0])] * 3]
    RecordingUpdater.iterations = []

    run_gradient_descent(LocalDataset(partitions), LeastSquaresGradient(),
                         RecordingUpdater(), 0.1, 3, 0.0, np.zeros(1))

    # 3 iterations: counters reach 3 * 2 and 3 * 3, never restarting at 1
    expected = list(range(1, 7)) + list(range(1, 10))
    assert sorted(RecordingUpdater.iterations) == sorted(expected)


def test_descent_partition_output():
    """One tuple: weights, average loss and the new counter for this partition."""
    points = [LabeledPoint.of(1.0, [1.0]), LabeledPoint.of(1.0, [1.0])]
    descent = DescentPartition(LeastSquaresGradient(), LazyL1Updater(),
                               np.zeros(1), [0, 5], 0.5, 0.0)

    results = list(descent(1, iter(points)))

    assert len(results) == 1
    weights, avg_loss, counters = results[0]
    assert counters == [(1, 7)]
    assert weights.shape == (1,)
    assert np.isfinite(avg_loss)


def test_descent_partition_leaves_driver_updater_alone():
    updater = LazyL1Updater()
    descent = DescentPartition(LeastSquaresGradient(), updater, np.zeros(1), [0], 0.5, 0.3)

    list(descent(0, iter([LabeledPoint.of(1.0, [1.0])])))

    assert updater.weight_truncation == 0.0


def test_merge_weights():
    merge = MergeWeights()
    merged = merge((np.array([1.0, 2.0]), 0.5, [(0, 3)]), (np.array([3.0, 4.0]), 1.5, [(1, 4)]))

    np.testing.assert_array_equal(merged[0], [4.0, 6.0])
    assert merged[1] == 2.0
    assert merged[2] == [(0, 3), (1, 4)]


def test_identical_partitions_match_single_partition(regression_points):
    """Averaging identical partition results gives the single-partition result."""
    records = regression_points[:20]
    args = (LeastSquaresGradient(), LazySquaredL2Updater(), 0.05, 5, 0.01, np.zeros(3))

    w1, h1 = run_gradient_descent(LocalDataset([records]), *args)
    w3, h3 = run_gradient_descent(LocalDataset([records, records, records]), *args)

    np.testing.assert_allclose(w3, w1)
    np.testing.assert_allclose(h3, h1)


def test_empty_partition_gives_nan():
    """An empty partition reports 0/0 as its average loss."""
    data = LocalDataset([[], [LabeledPoint.of(1.0, [1.0])]])

    weights, history = run_gradient_descent(
        data, LeastSquaresGradient(), LazySquaredL2Updater(), 0.5, 1, 0.0, np.zeros(1))

    assert len(history) == 1
    assert np.isnan(history[0])
    # Empty partition keeps the broadcast weights; the other one moves to 1
    np.testing.assert_allclose(weights, [0.5])


def test_classification(classification_points):
    """Logistic regression separates linearly separable data."""
    data = gd.parallelize(classification_points, num_partitions=4)

    weights, history = run_gradient_descent(
        data, LogisticGradient(), LazyL1Updater(), 1.0, 10, 0.0, np.zeros(2))

    predictions = [float(np.dot(p.features, weights) > 0) for p in classification_points]
    accuracy = np.mean([pred == p.label for pred, p in zip(predictions, classification_points)])
    assert accuracy > 0.9
    assert len(history) == 10


def test_zero_iterations():
    data = LocalDataset([[LabeledPoint.of(1.0, [1.0])]])
    weights, history = run_gradient_descent(
        data, LeastSquaresGradient(), LazyL1Updater(), 1.0, 0, 0.0, np.array([0.3]))

    np.testing.assert_array_equal(weights, [0.3])
    assert history == []
