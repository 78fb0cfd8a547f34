"""
Partition-sequential gradient descent runner.

Each outer iteration runs a full sequential descent inside every partition,
starting from the same broadcast weights, then averages the partition results.
There is one map_partitions_with_index + reduce job per outer iteration.

The updater must be a LazyUpdater: regularization is deferred inside each
partition pass and applied once at its end, and the penalty reported in the
loss history is computed once on the merged weights. Summing per-partition
penalties would count the regularizer num_partitions times.

Per-partition example counters persist across outer iterations so the local
step size keeps decaying (step_size / sqrt(counter)) instead of restarting.
"""

from typing import List, Sequence, Tuple

import numpy as np

from gd.debug import debug_print_optimizer, verbose_print, format_losses
from gd.engine import create_engine
from gd.errors import InvalidArgumentError, lazy_updater_required_error
from gd.optimization.updater import LazyUpdater


class DescentPartition:
    """
    Sequential descent over one partition.

    Yields exactly one (weights, avg_loss, [(partition_index, new_counter)])
    tuple. Holds only per-iteration snapshots, so it pickles cleanly to
    remote workers.
    """

    def __init__(self, gradient, updater: LazyUpdater, weights: np.ndarray,
                 counters: Sequence[int], step_size: float, reg_param: float):
        self.gradient = gradient
        self.updater = updater
        self.weights = weights
        self.counters = tuple(counters)
        self.step_size = step_size
        self.reg_param = reg_param

    def __call__(self, index: int, iterator):
        local_updater = self.updater.clone()
        local_weights = np.array(self.weights, dtype=np.float64)
        start_iter = self.counters[index]
        local_iter = start_iter
        loss = 0.0

        for label, features in iterator:
            local_iter += 1
            grad, example_loss = self.gradient.compute_lazy(
                features, label, local_weights,
                local_updater.weight_shrinkage, local_updater.weight_truncation)
            loss += example_loss
            local_weights = local_updater.compute(
                local_weights, grad, self.step_size, local_iter, self.reg_param)[0]

        debug_print_optimizer(
            f"run_gradient_descent partition {index} weight shrinkage {local_updater.weight_shrinkage}, "
            f"truncation {local_updater.weight_truncation} before catch up")
        final_weights = local_updater.apply_lazy_regularization(local_weights)

        with np.errstate(divide='ignore', invalid='ignore'):
            avg_loss = float(np.float64(loss) / (local_iter - start_iter))

        yield final_weights, avg_loss, [(index, local_iter)]


class MergeWeights:
    """Sums weights, sums losses, concatenates counter lists."""

    def __init__(self, backend: str = 'numpy'):
        self.backend = backend

    def __call__(self, m1, m2):
        engine = create_engine(self.backend)
        return engine.add(m1[0], m2[0]), m1[1] + m2[1], list(m1[2]) + list(m2[2])


def run_gradient_descent(
        data,
        gradient,
        updater,
        step_size: float,
        num_iterations: int,
        reg_param: float,
        initial_weights,
        backend: str = None) -> Tuple[np.ndarray, List[float]]:
    """
    Run gradient descent in parallel, scanning each partition sequentially.

    Args:
        data: Dataset of (label, features) examples
        gradient: Gradient for one example
        updater: LazyUpdater (anything else raises InvalidArgumentError)
        step_size: Initial step size
        num_iterations: Number of outer iterations
        reg_param: Regularization parameter
        initial_weights: Starting weight vector
        backend: Vector engine backend (default: GD_BACKEND or 'numpy')

    Returns:
        (weights, loss_history)
    """
    if not isinstance(updater, LazyUpdater):
        raise InvalidArgumentError(lazy_updater_required_error(updater))

    engine = create_engine(backend)
    stochastic_loss_history = []

    num_partitions = data.num_partitions

    weights = engine.copy(initial_weights)

    # Example counter per partition, written only after each merge
    iters = [0] * num_partitions
    merge = MergeWeights(engine.name)

    for i in range(1, num_iterations + 1):
        debug_print_optimizer(f"run_gradient_descent iteration {i}")

        descent = DescentPartition(gradient, updater, engine.readonly(weights), iters, step_size, reg_param)
        new_weights, loss_sum, iter_indexed_seq = data.map_partitions_with_index(
            descent, preserves_partitioning=True).reduce(merge)

        weights = engine.scale(new_weights, 1.0 / len(iter_indexed_seq))
        avg_loss = loss_sum / len(iter_indexed_seq)
        reg_val = updater.compute_regularization_penalty(weights, reg_param)
        stochastic_loss_history.append(avg_loss + reg_val)

        for index, counter in iter_indexed_seq:
            iters[index] = counter

        debug_print_optimizer(f"run_gradient_descent iteration {i} finish with loss {avg_loss}, regVal {reg_val}")

    verbose_print(f"GD: run_gradient_descent finished. Last 10 stochastic losses {format_losses(stochastic_loss_history)}")

    return weights, stochastic_loss_history
