"""
PyTorch-based engine.

Arithmetic runs through torch; inputs and outputs stay NumPy arrays
(torch.from_numpy shares memory, so in-place adds land in the caller's array).
"""

import numpy as np
from .base import Engine


class PyTorchEngine(Engine):
    """PyTorch-based engine (CPU)."""

    name = 'pytorch'

    def __init__(self):
        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError("PyTorch not available. Install with: pip install torch")

    def _t(self, a: np.ndarray):
        return self.torch.from_numpy(np.ascontiguousarray(a, dtype=np.float64))

    def zeros(self, size: int) -> np.ndarray:
        return self.torch.zeros(size, dtype=self.torch.float64).numpy()

    def copy(self, vector) -> np.ndarray:
        data = np.asarray(vector, dtype=np.float64).reshape(-1)
        return self._t(data).clone().numpy()

    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return (self._t(a) + self._t(b)).numpy()

    def add_inplace(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        if a.dtype != np.float64 or not a.flags.c_contiguous:
            raise ValueError("add_inplace requires a contiguous float64 destination")
        self.torch.from_numpy(a).add_(self._t(b))
        return a

    def scale(self, a: np.ndarray, factor: float) -> np.ndarray:
        return (self._t(a) * factor).numpy()
