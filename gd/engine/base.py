"""
Base Engine interface for GD vector arithmetic.

All computation backends (NumPy, PyTorch) implement this interface.
"""

import numpy as np
from abc import ABC, abstractmethod


class Engine(ABC):
    """Abstract base class for vector arithmetic engines."""

    name = 'base'

    @abstractmethod
    def zeros(self, size: int) -> np.ndarray:
        """Create a zero vector of length `size`."""
        pass

    @abstractmethod
    def copy(self, vector) -> np.ndarray:
        """Create a float64 copy of a vector (list, tuple or array)."""
        pass

    @abstractmethod
    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Element-wise addition into a new vector."""
        pass

    @abstractmethod
    def add_inplace(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """Element-wise addition into `a`. Returns `a`."""
        pass

    @abstractmethod
    def scale(self, a: np.ndarray, factor: float) -> np.ndarray:
        """Multiply every element by `factor` into a new vector."""
        pass

    def readonly(self, vector: np.ndarray) -> np.ndarray:
        """Return a read-only copy (used for per-iteration weight broadcasts)."""
        snapshot = self.copy(vector)
        snapshot.flags.writeable = False
        return snapshot

    def __repr__(self):
        return f"{self.__class__.__name__}()"
