"""
Updater capability: turn a gradient into new weights plus a penalty value.

An Updater applies one gradient step and the regularization it implements,
returning the new weights and the regularization penalty evaluated at those
weights. The step size decays as `step_size / sqrt(iteration)`.

Lazy updaters
-------------
A `LazyUpdater` defers its regularization. During a partition pass it keeps
two scalars instead of touching every coordinate after every example:

- `weight_shrinkage`: product of the multiplicative L2 factors seen so far;
  the true weights are `weight_shrinkage * stored`.
- `weight_truncation`: sum of the L1 soft-threshold amounts seen so far.

`compute` returns the stored weights. `apply_lazy_regularization(stored)`
folds the deferred state in once and returns the true weights.
`compute_regularization_penalty` evaluates the penalty on a weight vector
explicitly; the partition-sequential runner calls it once on the merged
weights of each outer iteration.

A lazy updater instance is stateful, so every partition works on its own
`clone()`.
"""

import copy
from abc import ABC, abstractmethod
from math import sqrt
from typing import Tuple

import numpy as np

from gd.optimization.gradient import soft_threshold, effective_weights


class Updater(ABC):
    """Abstract base class for weight updaters."""

    @abstractmethod
    def compute(self, weights: np.ndarray, gradient: np.ndarray, step_size: float,
                iteration: int, reg_param: float) -> Tuple[np.ndarray, float]:
        """Return (new_weights, regularization_penalty)."""
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class SimpleUpdater(Updater):
    """Plain gradient step, no regularization."""

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        this_step = step_size / sqrt(iteration)
        return weights - this_step * gradient, 0.0


class L1Updater(Updater):
    """
    Gradient step followed by soft-thresholding (L1 proximal step).

    penalty = reg_param * ||w||_1
    """

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        this_step = step_size / sqrt(iteration)
        new_weights = soft_threshold(weights - this_step * gradient, reg_param * this_step)
        return new_weights, reg_param * float(np.abs(new_weights).sum())


class SquaredL2Updater(Updater):
    """
    Gradient step with L2 weight decay.

    w' = w (1 - step * reg_param) - step * g
    penalty = 0.5 * reg_param * ||w'||^2
    """

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        this_step = step_size / sqrt(iteration)
        new_weights = weights * (1.0 - this_step * reg_param) - this_step * gradient
        norm = float(np.dot(new_weights, new_weights))
        return new_weights, 0.5 * reg_param * norm


class LazyUpdater(Updater):
    """Updater whose regularization is deferred until the end of a pass."""

    def __init__(self):
        self.weight_shrinkage = 1.0
        self.weight_truncation = 0.0

    def clone(self) -> 'LazyUpdater':
        """Independent copy with fresh deferred state."""
        other = copy.deepcopy(self)
        other.reset()
        return other

    def reset(self):
        """Forget any deferred regularization."""
        self.weight_shrinkage = 1.0
        self.weight_truncation = 0.0

    def effective(self, weights: np.ndarray) -> np.ndarray:
        """True weights for `weights` without consuming the deferred state."""
        return effective_weights(weights, self.weight_shrinkage, self.weight_truncation)

    def apply_lazy_regularization(self, weights: np.ndarray) -> np.ndarray:
        """Fold deferred regularization into `weights` and reset the state."""
        regularized = self.effective(weights)
        self.reset()
        return np.array(regularized, dtype=np.float64)

    @abstractmethod
    def compute_regularization_penalty(self, weights: np.ndarray, reg_param: float) -> float:
        """Penalty of `weights` (true weights, not stored ones)."""
        pass

    def __repr__(self):
        return (f"{self.__class__.__name__}(shrinkage={self.weight_shrinkage}, "
                f"truncation={self.weight_truncation})")


class LazySquaredL2Updater(LazyUpdater):
    """
    L2 weight decay applied as one accumulated scale factor.

    Each step multiplies the shrinkage by (1 - step * reg_param) and moves the
    stored weights by -step * g / shrinkage, so `shrinkage * stored` follows
    the same path as SquaredL2Updater.
    """

    # Below this the factor is folded into the stored weights
    MIN_SHRINKAGE = 1e-9

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        this_step = step_size / sqrt(iteration)
        self.weight_shrinkage *= (1.0 - this_step * reg_param)

        if abs(self.weight_shrinkage) < self.MIN_SHRINKAGE:
            weights = weights * self.weight_shrinkage - this_step * gradient
            self.weight_shrinkage = 1.0
            return weights, self.compute_regularization_penalty(weights, reg_param)

        new_weights = weights - (this_step / self.weight_shrinkage) * gradient
        return new_weights, self.compute_regularization_penalty(self.effective(new_weights), reg_param)

    def compute_regularization_penalty(self, weights, reg_param):
        return 0.5 * reg_param * float(np.dot(weights, weights))


class LazyL1Updater(LazyUpdater):
    """
    L1 soft-thresholding accumulated over a pass (truncated gradient).

    Each step adds step * reg_param to the truncation; the threshold is applied
    to the stored weights once, by apply_lazy_regularization.
    """

    def compute(self, weights, gradient, step_size, iteration, reg_param):
        this_step = step_size / sqrt(iteration)
        self.weight_truncation += this_step * reg_param
        new_weights = weights - this_step * gradient
        return new_weights, self.compute_regularization_penalty(self.effective(new_weights), reg_param)

    def compute_regularization_penalty(self, weights, reg_param):
        return reg_param * float(np.abs(weights).sum())
