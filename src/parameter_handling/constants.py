"""Global constants for parameter-handling.

This module centralizes the numeric defaults used throughout the package
so that every parameter type applies the same margin semantics.
"""

import numpy as np

# Default element type of flattened vectors
DEFAULT_DTYPE = np.float64

# Margin keeping bounded values strictly inside their open interval
BOUNDED_EPSILON: float = 1e-12

# Diagonal jitter added to positive-definite matrices
POSITIVE_DEFINITE_EPSILON: float = 1e-12


def default_positive_epsilon(dtype) -> float:
    """Square root of the machine epsilon of ``dtype``.

    Integer dtypes fall back to float64, since positive values are
    always stored as floats.
    """
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        dtype = np.dtype(DEFAULT_DTYPE)
    return float(np.sqrt(np.finfo(dtype).eps))
