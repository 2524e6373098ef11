"""Composition of flatten and resolve."""

from typing import Any, Tuple

import numpy as np

from .base import Unflatten
from .constants import DEFAULT_DTYPE
from .flatten import flatten
from .resolve import resolve


def value_flatten(x: Any, dtype=DEFAULT_DTYPE) -> Tuple[np.ndarray, Unflatten]:
    """Flatten ``x`` and return an unflatten that yields resolved values.

    The returned closure is ``resolve ∘ unflatten``, so callers only ever
    see constraint-satisfying plain values, never unconstrained internals.

    Example:
        >>> v, unflatten = value_flatten({"scale": positive(2.0)})
        >>> unflatten(v)["scale"]  # a plain float close to 2.0
    """
    vec, unflatten = flatten(x, dtype)

    def unflatten_to_value(v):
        return resolve(unflatten(v))
    return vec, unflatten_to_value
