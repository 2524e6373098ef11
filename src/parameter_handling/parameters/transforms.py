"""Bijections between constrained values and unconstrained reals.

Transforms provide the invertible maps used by constrained parameters.
``forward`` sends a natural (constrained) value to unconstrained space,
``backward`` sends an unconstrained value back into the constraint set.
Both accept Python floats, numpy scalars and numpy arrays, and are written
with vectorized numpy/scipy primitives so array parameters never need a
Python-level loop over elements.
"""

from typing import Protocol
from dataclasses import dataclass

import numpy as np
from scipy.special import expit, logit


class Transform(Protocol):
    """Protocol for parameter transforms.

    Transforms provide forward (natural → unconstrained) and
    backward (unconstrained → natural) mappings.
    """

    def forward(self, x):
        """Transform from natural space to unconstrained space.

        Args:
            x: Value (or array of values) in natural space

        Returns:
            Value in unconstrained space

        Raises:
            ValueError: If x is outside valid domain
        """
        ...

    def backward(self, y):
        """Transform from unconstrained space to natural space.

        Args:
            y: Value (or array of values) in unconstrained space

        Returns:
            Value in natural space
        """
        ...


@dataclass(frozen=True)
class Identity:
    """Identity transform (no-op)."""

    def forward(self, x):
        return x

    def backward(self, y):
        return y


@dataclass(frozen=True)
class LogTransform:
    """Logarithmic transform for positive values.

    Maps (0, ∞) → (-∞, ∞); ``backward`` is ``exp``.
    """

    def forward(self, x):
        """Natural → log space."""
        if np.any(np.asarray(x) <= 0):
            raise ValueError(f"LogTransform requires x > 0, got {x}")
        return np.log(x)

    def backward(self, y):
        """Log space → natural."""
        return np.exp(y)


@dataclass(frozen=True)
class SoftplusTransform:
    """Softplus transform for positive values.

    ``backward(y) = log(1 + exp(y))`` grows linearly rather than
    exponentially, which keeps large values better conditioned.
    """

    def forward(self, x):
        """Natural → inverse-softplus space."""
        if np.any(np.asarray(x) <= 0):
            raise ValueError(f"SoftplusTransform requires x > 0, got {x}")
        return np.log(np.expm1(x))

    def backward(self, y):
        """Inverse-softplus space → natural."""
        # logaddexp(0, y) == log1p(exp(y)) without overflow for large y
        return np.logaddexp(0.0, y)


@dataclass(frozen=True)
class IntervalLogit:
    """Scaled logit transform for values in [lower, upper].

    forward:  x → logit((x - lower) / (upper - lower))
    backward: y → lower + (upper - lower) * logistic(y)

    The end points map to ±∞. Bounded parameters use this with an
    interval already shrunk by their ε margin, so resolved values stay
    strictly inside the user's bounds.
    """
    lower: float
    upper: float

    def __post_init__(self):
        """Validate interval."""
        if not (self.lower < self.upper):
            raise ValueError(
                f"IntervalLogit requires lower < upper, got [{self.lower}, {self.upper}]"
            )

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def forward(self, x):
        """Natural [lower, upper] → unbounded."""
        arr = np.asarray(x)
        if np.any(arr < self.lower) or np.any(arr > self.upper):
            raise ValueError(
                f"IntervalLogit requires {self.lower} ≤ x ≤ {self.upper}, got {x}"
            )
        return logit((x - self.lower) / self.width)

    def backward(self, y):
        """Unbounded → natural [lower, upper]."""
        # lower + width can round past upper
        return np.clip(self.lower + self.width * expit(y), self.lower, self.upper)
