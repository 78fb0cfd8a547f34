"""
NumPy-based engine (CPU only, eager execution).
"""

import numpy as np
from .base import Engine


class NumpyEngine(Engine):
    """NumPy-based engine."""

    name = 'numpy'

    def zeros(self, size: int) -> np.ndarray:
        return np.zeros(size, dtype=np.float64)

    def copy(self, vector) -> np.ndarray:
        return np.array(vector, dtype=np.float64, copy=True).reshape(-1)

    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return a + b

    def add_inplace(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        a += b
        return a

    def scale(self, a: np.ndarray, factor: float) -> np.ndarray:
        return a * factor
