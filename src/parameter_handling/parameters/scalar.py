"""Scalar constrained parameters: Positive and Bounded.

Both types store only an unconstrained real. The constrained value is
recomputed from it on every ``resolve()``, so any real produced by an
optimizer maps back into the constraint set.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np

from ..base import Parameter
from ..constants import BOUNDED_EPSILON, default_positive_epsilon
from ..flatten import flatten_node
from .array import BoundedArray, PositiveArray, _reachable_interval
from .transforms import IntervalLogit, LogTransform, Transform


def _as_real(val):
    """Convert ints to float; keep float and numpy floating types as they are."""
    if isinstance(val, (bool, np.bool_)):
        raise TypeError(f"Expected a real number, got bool ({val})")
    if isinstance(val, (float, np.floating)):
        return val
    if isinstance(val, (int, np.integer)):
        return float(val)
    raise TypeError(f"Expected a real number, got {type(val).__name__}")


@dataclass(frozen=True)
class Positive(Parameter):
    """A real constrained to be strictly greater than ``epsilon``.

    ``resolve() = transform.backward(unconstrained_value) + epsilon``.
    Build instances with :func:`positive`, which validates the natural value
    and computes the unconstrained pre-image.

    Attributes:
        unconstrained_value: Real in unconstrained space (this is flattened)
        transform: Bijection between (0, ∞) and the reals
        epsilon: Margin keeping the resolved value away from zero
    """
    unconstrained_value: float
    transform: Transform = field(default_factory=LogTransform)
    epsilon: float = default_positive_epsilon(np.float64)

    def __post_init__(self):
        """Validate margin."""
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    @classmethod
    def from_value(cls, val, transform: Optional[Transform] = None,
                   epsilon: Optional[float] = None) -> "Positive":
        """Build from a natural value.

        Raises:
            ValueError: If ``val`` is not a finite value greater than
                ``epsilon`` or ``epsilon`` is not positive
        """
        val = _as_real(val)
        transform = transform if transform is not None else LogTransform()
        if epsilon is None:
            epsilon = default_positive_epsilon(np.result_type(val))
        if not val > 0:
            raise ValueError(f"Value ({val}) is not positive")
        if not np.isfinite(val):
            raise ValueError(f"Value ({val}) is not finite")
        if not epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        if not val > epsilon:
            raise ValueError(f"Value ({val}) is too small, relative to epsilon ({epsilon})")
        unconstrained = type(val)(transform.forward(val - epsilon))
        return cls(unconstrained, transform, epsilon)

    def resolve(self):
        return self.transform.backward(self.unconstrained_value) + self.epsilon

    def flatten(self, dtype):
        vec, unflatten_value = flatten_node(self.unconstrained_value, dtype)

        def unflatten_positive(v):
            return replace(self, unconstrained_value=unflatten_value(v))
        return vec, unflatten_positive


@dataclass(frozen=True)
class Bounded(Parameter):
    """A real constrained to the open interval (lower, upper).

    The transform is an :class:`IntervalLogit` over
    ``[lower + epsilon, upper - epsilon]``, so the resolved value stays
    strictly inside ``(lower, upper)`` for every unconstrained real.

    Attributes:
        unconstrained_value: Real in unconstrained space (this is flattened)
        lower: Lower bound (exclusive)
        upper: Upper bound (exclusive)
        epsilon: Margin between the bounds and the reachable interval
    """
    unconstrained_value: float
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
                   epsilon: float = BOUNDED_EPSILON) -> "Bounded":
        """Build from a natural value.

        Raises:
            ValueError: If ``val`` lies outside ``[lower + epsilon, upper - epsilon]``
                or is not a number
        """
        val = _as_real(val)
        lower, upper = float(lower), float(upper)
        lo, hi = _reachable_interval(lower, upper, epsilon)
        if not lo <= val <= hi:
            raise ValueError(f"Value, {val}, outside of specified bounds ({lower}, {upper})")
        unconstrained = IntervalLogit(lo, hi).forward(val)
        return cls(type(val)(unconstrained), lower, upper, epsilon)

    def resolve(self):
        return self.transform.backward(self.unconstrained_value)

    def flatten(self, dtype):
        vec, unflatten_value = flatten_node(self.unconstrained_value, dtype)

        def unflatten_bounded(v):
            return replace(self, unconstrained_value=unflatten_value(v))
        return vec, unflatten_bounded


def positive(val, transform: Optional[Transform] = None, epsilon: Optional[float] = None):
    """Return a parameter whose resolved value is strictly positive.

    Scalars produce a :class:`Positive`; numpy arrays produce a single
    :class:`PositiveArray` over the whole array.

    Args:
        val: Natural value(s), each greater than ``epsilon``
        transform: Bijection from the reals to (0, ∞), ``LogTransform()`` by default
        epsilon: Margin above zero, √(machine epsilon of val's dtype) by default

    Raises:
        ValueError: If any value is not greater than ``epsilon``

    Example:
        >>> p = positive(2.0)
        >>> float(p.resolve())  # ≈ 2.0
    """
    if isinstance(val, np.ndarray):
        return PositiveArray.from_value(val, transform, epsilon)
    return Positive.from_value(val, transform, epsilon)


def bounded(val, lower: float, upper: float, epsilon: float = BOUNDED_EPSILON):
    """Return a parameter whose resolved value lies in (lower, upper).

    Scalars produce a :class:`Bounded`; numpy arrays produce a single
    :class:`BoundedArray` sharing the same bounds.

    Raises:
        ValueError: If any value lies outside ``[lower + epsilon, upper - epsilon]``
    """
    if isinstance(val, np.ndarray):
        return BoundedArray.from_value(val, lower, upper, epsilon)
    return Bounded.from_value(val, lower, upper, epsilon)
