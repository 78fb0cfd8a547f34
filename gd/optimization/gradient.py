"""
Gradient capability: per-example loss and gradient.

A Gradient computes, for one example `(label, features)` and the current
weights, the gradient of the loss with respect to the weights and the loss
value itself. Implementations must not mutate the weights they are given.

Three calling conventions are used by the optimizers:

- `compute(features, label, weights)` returns `(gradient, loss)`.
- `accumulate(features, label, weights, cum_gradient)` adds the gradient
  into a caller-owned buffer and returns only the loss. The mini-batch
  runner uses this inside `aggregate` to avoid one temporary per example.
- `compute_lazy(features, label, weights, shrinkage, truncation)` evaluates
  the gradient at the weights a lazy updater represents while its
  regularization is deferred (see `gd.optimization.updater.LazyUpdater`).
"""

from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np


def soft_threshold(weights: np.ndarray, threshold: float) -> np.ndarray:
    """sign(w) * max(|w| - threshold, 0), element-wise."""
    if threshold == 0.0:
        return weights
    return np.sign(weights) * np.maximum(np.abs(weights) - threshold, 0.0)


def effective_weights(weights: np.ndarray, shrinkage: float, truncation: float) -> np.ndarray:
    """Weights represented by `weights` with deferred shrinkage and truncation folded in."""
    if shrinkage != 1.0:
        weights = weights * shrinkage
    return soft_threshold(weights, truncation)


class Gradient(ABC):
    """Abstract base class for per-example gradients."""

    @abstractmethod
    def compute(self, features: np.ndarray, label: float,
                weights: np.ndarray) -> Tuple[np.ndarray, float]:
        """Return (gradient, loss) for one example."""
        pass

    def accumulate(self, features: np.ndarray, label: float,
                   weights: np.ndarray, cum_gradient: np.ndarray) -> float:
        """Add this example's gradient into `cum_gradient` and return its loss."""
        gradient, loss = self.compute(features, label, weights)
        cum_gradient += gradient
        return loss

    def compute_lazy(self, features: np.ndarray, label: float, weights: np.ndarray,
                     shrinkage: float, truncation: float) -> Tuple[np.ndarray, float]:
        """Return (gradient, loss) at the effective weights of a lazy updater."""
        return self.compute(features, label, effective_weights(weights, shrinkage, truncation))

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class LeastSquaresGradient(Gradient):
    """
    Squared error for linear regression.

    loss = (x.w - y)^2, gradient = 2 (x.w - y) x
    """

    def compute(self, features, label, weights):
        diff = float(np.dot(features, weights)) - label
        return features * (2.0 * diff), diff * diff

    def accumulate(self, features, label, weights, cum_gradient):
        diff = float(np.dot(features, weights)) - label
        cum_gradient += features * (2.0 * diff)
        return diff * diff


class LogisticGradient(Gradient):
    """
    Logistic loss for binary classification with labels in {0, 1}.
    """

    def compute(self, features, label, weights):
        margin = -1.0 * float(np.dot(features, weights))
        multiplier = self._prediction(margin) - label
        return features * multiplier, self._loss(margin, label)

    def accumulate(self, features, label, weights, cum_gradient):
        margin = -1.0 * float(np.dot(features, weights))
        cum_gradient += features * (self._prediction(margin) - label)
        return self._loss(margin, label)

    @staticmethod
    def _prediction(margin: float) -> float:
        # 1 / (1 + exp(margin)) without overflow for large margins
        return float(np.exp(-np.logaddexp(0.0, margin)))

    @staticmethod
    def _loss(margin: float, label: float) -> float:
        # log(1 + exp(margin)) computed without overflow for large margins
        log1p_exp = float(np.logaddexp(0.0, margin))
        if label > 0:
            return log1p_exp
        return log1p_exp - margin


class HingeGradient(Gradient):
    """
    Hinge loss for linear SVMs. Labels in {0, 1} are mapped to {-1, +1}.
    """

    def compute(self, features, label, weights):
        scaled_label = 2.0 * label - 1.0
        slack = 1.0 - scaled_label * float(np.dot(features, weights))
        if slack > 0.0:
            return features * -scaled_label, slack
        return np.zeros_like(weights, dtype=np.float64), 0.0

    def accumulate(self, features, label, weights, cum_gradient):
        scaled_label = 2.0 * label - 1.0
        slack = 1.0 - scaled_label * float(np.dot(features, weights))
        if slack > 0.0:
            cum_gradient -= features * scaled_label
            return slack
        return 0.0
