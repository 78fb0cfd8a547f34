"""
Record types shared by the dataset engine and the optimizers.
"""

from typing import NamedTuple

import numpy as np


class LabeledPoint(NamedTuple):
    """One training example: a label and a dense feature vector."""
    label: float
    features: np.ndarray

    @classmethod
    def of(cls, label, features) -> 'LabeledPoint':
        """Build a point, converting features to a float64 vector."""
        return cls(float(label), np.asarray(features, dtype=np.float64).reshape(-1))
