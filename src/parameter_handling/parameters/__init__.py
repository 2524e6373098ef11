"""Constrained parameter types.

Each parameter stores an unconstrained representation, which is what the
flatten engine exposes, and resolves to a value that satisfies its
constraint for any unconstrained input.
"""

from .transforms import (
    Transform,
    Identity,
    LogTransform,
    SoftplusTransform,
    IntervalLogit,
)
from .array import PositiveArray, BoundedArray
from .scalar import Positive, Bounded, positive, bounded
from .matrix import (
    Orthogonal,
    PositiveSemiDefinite,
    PositiveDefinite,
    orthogonal,
    positive_semidefinite,
    positive_definite,
    nearest_orthogonal_matrix,
    tril_to_vec,
    vec_to_tril,
)
from .meta import Fixed, Deferred, fixed, deferred

__all__ = [
    # Transforms
    "Transform",
    "Identity",
    "LogTransform",
    "SoftplusTransform",
    "IntervalLogit",
    # Scalar and array
    "Positive",
    "Bounded",
    "PositiveArray",
    "BoundedArray",
    "positive",
    "bounded",
    # Matrix
    "Orthogonal",
    "PositiveSemiDefinite",
    "PositiveDefinite",
    "orthogonal",
    "positive_semidefinite",
    "positive_definite",
    "nearest_orthogonal_matrix",
    "tril_to_vec",
    "vec_to_tril",
    # Meta
    "Fixed",
    "Deferred",
    "fixed",
    "deferred",
]
