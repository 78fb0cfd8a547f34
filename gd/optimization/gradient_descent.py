"""
GradientDescent: optimizer facade over the two runners.

    from gd import GradientDescent, LeastSquaresGradient, SimpleUpdater

    gd_opt = (GradientDescent(LeastSquaresGradient(), SimpleUpdater())
              .set_step_size(0.5)
              .set_num_iterations(50))
    weights = gd_opt.optimize(data, initial_weights)

mini_batch_fraction > 0 runs mini-batch SGD; mini_batch_fraction <= 0 runs
per-partition sequential descent (requires a LazyUpdater).
"""

from typing import List, Tuple

import numpy as np

from gd.optimization.gradient import Gradient
from gd.optimization.updater import Updater
from gd.optimization.mini_batch import run_mini_batch_sgd
from gd.optimization.sequential import run_gradient_descent


class GradientDescent:
    """
    Solves an optimization problem with gradient descent.

    Args:
        gradient: Gradient of the loss of one example
        updater: Updater applying each step and the regularization
    """

    def __init__(self, gradient: Gradient, updater: Updater):
        self.gradient = gradient
        self.updater = updater
        self.step_size = 1.0
        self.num_iterations = 100
        self.reg_param = 0.0
        self.mini_batch_fraction = 1.0
        self.backend = None

    @classmethod
    def from_config(cls, config) -> 'GradientDescent':
        """Build from an OptimizerConfig (see gd.config)."""
        from gd.optimization import create_gradient, create_updater

        return (cls(create_gradient(config.gradient), create_updater(config.updater))
                .set_step_size(config.step_size)
                .set_num_iterations(config.num_iterations)
                .set_reg_param(config.reg_param)
                .set_mini_batch_fraction(config.mini_batch_fraction)
                .set_backend(config.backend))

    def set_step_size(self, step: float) -> 'GradientDescent':
        """Initial step size. Later steps use step / sqrt(t). Default 1.0."""
        self.step_size = step
        return self

    def set_mini_batch_fraction(self, fraction: float) -> 'GradientDescent':
        """
        Fraction of data used per iteration. Default 1.0 (classical gradient
        descent). A value <= 0 selects per-partition sequential descent.
        """
        self.mini_batch_fraction = fraction
        return self

    def set_num_iterations(self, iters: int) -> 'GradientDescent':
        """Number of (outer) iterations. Default 100."""
        self.num_iterations = iters
        return self

    def set_reg_param(self, reg_param: float) -> 'GradientDescent':
        """Regularization parameter. Default 0.0."""
        self.reg_param = reg_param
        return self

    def set_gradient(self, gradient: Gradient) -> 'GradientDescent':
        """Gradient of the loss of one example."""
        self.gradient = gradient
        return self

    def set_updater(self, updater: Updater) -> 'GradientDescent':
        """
        Updater performing each step. It also applies the regularization, so it
        determines what kind of regularization is used, if any.
        """
        self.updater = updater
        return self

    def set_backend(self, backend: str) -> 'GradientDescent':
        """Vector engine backend ('numpy', 'pytorch'). None uses GD_BACKEND."""
        self.backend = backend
        return self

    def optimize(self, data, initial_weights) -> np.ndarray:
        """Run gradient descent on `data` and return the final weights."""
        weights, _ = self.optimize_with_history(data, initial_weights)
        return weights

    def optimize_with_history(self, data, initial_weights) -> Tuple[np.ndarray, List[float]]:
        """Same as optimize() but also returns the per-iteration loss history."""
        if self.mini_batch_fraction > 0.0:
            return run_mini_batch_sgd(
                data,
                self.gradient,
                self.updater,
                self.step_size,
                self.num_iterations,
                self.reg_param,
                self.mini_batch_fraction,
                initial_weights,
                backend=self.backend)

        return run_gradient_descent(
            data,
            self.gradient,
            self.updater,
            self.step_size,
            self.num_iterations,
            self.reg_param,
            initial_weights,
            backend=self.backend)

    def __repr__(self):
        return (f"GradientDescent(gradient={self.gradient!r}, updater={self.updater!r}, "
                f"step_size={self.step_size}, num_iterations={self.num_iterations}, "
                f"reg_param={self.reg_param}, mini_batch_fraction={self.mini_batch_fraction})")
