"""Array-valued constrained parameters.

A single parameter covers a whole array: the unconstrained state is one
same-shaped float array and the transform is applied with vectorized numpy
operations. This keeps unflatten/resolve cost independent of how many
Python objects the array would otherwise need, which matters when an
array-tracing differentiation tool records every operation.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from ..base import Parameter
from ..constants import BOUNDED_EPSILON, default_positive_epsilon
from ..flatten import flatten_node
from .transforms import IntervalLogit, LogTransform, Transform


def _as_float_array(val) -> np.ndarray:
    arr = np.asarray(val)
    if arr.dtype == object or np.issubdtype(arr.dtype, np.complexfloating):
        raise TypeError(f"Expected a real numeric array, got dtype {arr.dtype}")
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr


def _reachable_interval(lower, upper, epsilon) -> Tuple[float, float]:
    """Validate bounds and return the interval ``[lower + ε, upper - ε]``.

    Each end is kept at least one representable float inside its bound,
    since ``bound ± ε`` rounds back onto the bound once ``|bound|`` is large.
    """
    if not epsilon > 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")
    if not (np.isfinite(lower) and np.isfinite(upper)):
        raise ValueError(f"Bounds must be finite, got ({lower}, {upper})")
    if not lower < upper:
        raise ValueError(f"lower bound ({lower}) must be less than upper bound ({upper})")
    lo, hi = float(lower + epsilon), float(upper - epsilon)
    if not lo > lower:
        lo = float(np.nextafter(lower, np.inf))
    if not hi < upper:
        hi = float(np.nextafter(upper, -np.inf))
    if not lo < hi:
        raise ValueError(
            f"Interval ({lower}, {upper}) is too narrow for epsilon ({epsilon})"
        )
    return lo, hi


@dataclass(frozen=True, eq=False)
class PositiveArray(Parameter):
    """Array whose elements are all strictly greater than ``epsilon``.

    Attributes:
        unconstrained_value: Float array in unconstrained space (this is flattened)
        transform: Elementwise bijection between (0, ∞) and the reals
        epsilon: Margin keeping every resolved element away from zero
    """
    unconstrained_value: np.ndarray
    transform: Transform = field(default_factory=LogTransform)
    epsilon: float = default_positive_epsilon(np.float64)

    def __post_init__(self):
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    @classmethod
    def from_value(cls, val, transform: Optional[Transform] = None,
                   epsilon: Optional[float] = None) -> "PositiveArray":
        """Build from an array of natural values.

        Raises:
            ValueError: If any element is not a finite value greater than ``epsilon``
        """
        val = _as_float_array(val)
        transform = transform if transform is not None else LogTransform()
        if epsilon is None:
            epsilon = default_positive_epsilon(val.dtype)
        if not epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if not np.all(val > 0):
            raise ValueError("Not all elements of val are positive")
        if not np.all(np.isfinite(val)):
            raise ValueError("Not all elements of val are finite")
        if not np.all(val > epsilon):
            raise ValueError(f"Not all elements of val are greater than epsilon ({epsilon})")
        unconstrained = np.asarray(transform.forward(val - epsilon), dtype=val.dtype)
        return cls(unconstrained, transform, epsilon)

    def resolve(self) -> np.ndarray:
        return self.transform.backward(self.unconstrained_value) + self.epsilon

    def flatten(self, dtype):
        vec, unflatten_array = flatten_node(self.unconstrained_value, dtype)

        def unflatten_positive_array(v):
            return replace(self, unconstrained_value=unflatten_array(v))
        return vec, unflatten_positive_array

    def __eq__(self, other):
        if not isinstance(other, PositiveArray):
            return NotImplemented
        return (
            np.array_equal(self.unconstrained_value, other.unconstrained_value)
            and self.transform == other.transform
            and self.epsilon == other.epsilon
        )


@dataclass(frozen=True, eq=False)
class BoundedArray(Parameter):
    """Array whose elements all lie in the open interval (lower, upper).

    Attributes:
        unconstrained_value: Float array in unconstrained space (this is flattened)
        lower: Lower bound shared by all elements (exclusive)
        upper: Upper bound shared by all elements (exclusive)
        epsilon: Margin between the bounds and the reachable interval
    """
    unconstrained_value: np.ndarray
    lower: float
    upper: float
    epsilon: float = BOUNDED_EPSILON
    transform: IntervalLogit = field(init=False, repr=False)

    def __post_init__(self):
        """Validate bounds and build the interval transform."""
        lo, hi = _reachable_interval(self.lower, self.upper, self.epsilon)
        object.__setattr__(self, "transform", IntervalLogit(lo, hi))

    @classmethod
    def from_value(cls, val, lower: float, upper: float,
                   epsilon: float = BOUNDED_EPSILON) -> "BoundedArray":
        """Build from an array of natural values.

        Raises:
            ValueError: If any element lies outside ``[lower + epsilon, upper - epsilon]``
                or is not a number
        """
        val = _as_float_array(val)
        lower, upper = float(lower), float(upper)
        lo, hi = _reachable_interval(lower, upper, epsilon)
        # Written so that NaN elements fail the check
        if not np.all((val >= lo) & (val <= hi)):
            raise ValueError(
                f"At least one element of val is outside of specified bounds ({lower}, {upper})"
            )
        transform = IntervalLogit(lo, hi)
        unconstrained = np.asarray(transform.forward(val), dtype=val.dtype)
        return cls(unconstrained, lower, upper, epsilon)

    def resolve(self) -> np.ndarray:
        return self.transform.backward(self.unconstrained_value)

    def flatten(self, dtype):
        vec, unflatten_array = flatten_node(self.unconstrained_value, dtype)

        def unflatten_bounded_array(v):
            return replace(self, unconstrained_value=unflatten_array(v))
        return vec, unflatten_bounded_array

    def __eq__(self, other):
        if not isinstance(other, BoundedArray):
            return NotImplemented
        return (
            np.array_equal(self.unconstrained_value, other.unconstrained_value)
            and (self.lower, self.upper, self.epsilon) == (other.lower, other.upper, other.epsilon)
        )
