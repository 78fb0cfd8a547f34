"""
Vector arithmetic engines (NumPy, PyTorch).

Engines implement the dense vector operations the optimizers need: zero-init,
copy, add, in-place add and scale. Vectors crossing the engine boundary
are always 1-D float64 NumPy arrays, so Gradient and Updater implementations
never see backend types.
"""

import os

from .base import Engine
from .numpy import NumpyEngine
from .pytorch import PyTorchEngine

from gd.errors import unknown_name_error


BACKENDS = ('numpy', 'pytorch')


def create_engine(backend: str = None) -> Engine:
    """
    Factory function to create an engine.

    Args:
        backend: 'numpy' or 'pytorch' (default: GD_BACKEND env var, else 'numpy')

    Returns:
        Engine instance
    """
    if backend is None:
        backend = os.environ.get('GD_BACKEND', 'numpy')

    if backend == 'numpy':
        return NumpyEngine()
    elif backend == 'pytorch':
        return PyTorchEngine()
    else:
        raise ValueError(unknown_name_error("backend", backend, BACKENDS))


__all__ = ['Engine', 'NumpyEngine', 'PyTorchEngine', 'create_engine', 'BACKENDS']
