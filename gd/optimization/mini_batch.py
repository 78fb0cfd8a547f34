"""
Mini-batch SGD runner.

In each iteration a fraction of the data is sampled, per-example gradients
and losses are summed over the sample with one `aggregate` job, and a single
global update is applied with the averaged gradient.

Keep this SIMPLE and READABLE.
"""

from typing import List, Tuple

import numpy as np

from gd.debug import debug_print_optimizer, verbose_print, format_losses
from gd.engine import create_engine
from gd.optimization.updater import LazyUpdater


# Sample seed for iteration i is SEED_BASE + i (identical across runs)
SEED_BASE = 42


class GradientSeqOp:
    """
    Folds one example into a (gradient_sum, loss_sum) accumulator.

    A module-level class rather than a closure so the job can be pickled to
    remote workers. The weights are the read-only snapshot of this iteration.
    """

    def __init__(self, gradient, weights: np.ndarray):
        self.gradient = gradient
        self.weights = weights

    def __call__(self, acc, point):
        grad_sum, loss_sum = acc
        label, features = point
        loss = self.gradient.accumulate(features, label, self.weights, grad_sum)
        return grad_sum, loss_sum + loss


class GradientCombOp:
    """Merges two accumulators: vector add and scalar add."""

    def __init__(self, backend: str = 'numpy'):
        self.backend = backend

    def __call__(self, acc1, acc2):
        engine = create_engine(self.backend)
        return engine.add_inplace(acc1[0], acc2[0]), acc1[1] + acc2[1]


def run_mini_batch_sgd(
        data,
        gradient,
        updater,
        step_size: float,
        num_iterations: int,
        reg_param: float,
        mini_batch_fraction: float,
        initial_weights,
        backend: str = None) -> Tuple[np.ndarray, List[float]]:
    """
    Run stochastic gradient descent in parallel using mini batches.

    Args:
        data: Dataset of (label, features) examples
        gradient: Gradient for one example
        updater: Updater applying the step and the regularization
        step_size: Initial step size (decayed by the updater as step_size/sqrt(i))
        num_iterations: Number of iterations
        reg_param: Regularization parameter
        mini_batch_fraction: Fraction of the data sampled per iteration
        initial_weights: Starting weight vector
        backend: Vector engine backend (default: GD_BACKEND or 'numpy')

    Returns:
        (weights, loss_history). loss_history[i-1] is the sampled loss of the
        weights *before* update i plus the regularization value of those
        same weights.
    """
    engine = create_engine(backend)
    stochastic_loss_history = []

    num_examples = data.count()
    # Expected sample size, not the actual size of each sample
    mini_batch_size = np.float64(num_examples) * mini_batch_fraction

    weights = engine.copy(initial_weights)
    num_features = weights.shape[0]

    # Regularization value of the initial weights (a zero-length step)
    reg_val = updater.compute(weights, engine.zeros(num_features), 0.0, 1, reg_param)[1]

    comb_op = GradientCombOp(engine.name)

    for i in range(1, num_iterations + 1):
        seq_op = GradientSeqOp(gradient, engine.readonly(weights))
        gradient_sum, loss_sum = data.sample(False, mini_batch_fraction, SEED_BASE + i).aggregate(
            (engine.zeros(num_features), 0.0), seq_op, comb_op)

        # lossSum uses the weights from the previous iteration and reg_val was
        # computed for those same weights.
        with np.errstate(divide='ignore', invalid='ignore'):
            stochastic_loss_history.append(float(np.float64(loss_sum) / mini_batch_size + reg_val))
            averaged = engine.scale(gradient_sum, 1.0 / mini_batch_size)

        weights, reg_val = updater.compute(weights, averaged, step_size, i, reg_param)
        if isinstance(updater, LazyUpdater):
            weights = updater.apply_lazy_regularization(weights)

        debug_print_optimizer(f"run_mini_batch_sgd iteration {i} loss {stochastic_loss_history[-1]} regVal {reg_val}")

    verbose_print(f"GD: run_mini_batch_sgd finished. Last 10 stochastic losses {format_losses(stochastic_loss_history)}")

    return weights, stochastic_loss_history
