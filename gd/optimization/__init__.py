"""
Optimization: gradients, updaters, the two runners and the facade.
"""

from .gradient import Gradient, LeastSquaresGradient, LogisticGradient, HingeGradient, soft_threshold
from .updater import (
    Updater, SimpleUpdater, L1Updater, SquaredL2Updater,
    LazyUpdater, LazyL1Updater, LazySquaredL2Updater,
)
from .mini_batch import run_mini_batch_sgd
from .sequential import run_gradient_descent
from .gradient_descent import GradientDescent

from gd.errors import unknown_name_error


GRADIENTS = {
    'least_squares': LeastSquaresGradient,
    'logistic': LogisticGradient,
    'hinge': HingeGradient,
}

UPDATERS = {
    'simple': SimpleUpdater,
    'l1': L1Updater,
    'squared_l2': SquaredL2Updater,
    'lazy_l1': LazyL1Updater,
    'lazy_squared_l2': LazySquaredL2Updater,
}


def create_gradient(name: str) -> Gradient:
    """Factory function to create a gradient by name."""
    if name not in GRADIENTS:
        raise ValueError(unknown_name_error("gradient", name, GRADIENTS))
    return GRADIENTS[name]()


def create_updater(name: str) -> Updater:
    """Factory function to create an updater by name."""
    if name not in UPDATERS:
        raise ValueError(unknown_name_error("updater", name, UPDATERS))
    return UPDATERS[name]()


__all__ = [
    'Gradient', 'LeastSquaresGradient', 'LogisticGradient', 'HingeGradient', 'soft_threshold',
    'Updater', 'SimpleUpdater', 'L1Updater', 'SquaredL2Updater',
    'LazyUpdater', 'LazyL1Updater', 'LazySquaredL2Updater',
    'run_mini_batch_sgd', 'run_gradient_descent', 'GradientDescent',
    'GRADIENTS', 'UPDATERS', 'create_gradient', 'create_updater',
]
