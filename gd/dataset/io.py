"""
Loading labeled examples from delimited text files.
"""

import numpy as np

from gd.types import LabeledPoint


def load_labeled_points(path: str, delimiter: str = ",", skip_header: int = 0):
    """
    Read a delimited file: first column is the label, the rest are features.

    Returns:
        List of LabeledPoint
    """
    data = np.loadtxt(path, delimiter=delimiter, skiprows=skip_header, dtype=np.float64, ndmin=2)
    return [LabeledPoint(float(row[0]), np.ascontiguousarray(row[1:])) for row in data]
