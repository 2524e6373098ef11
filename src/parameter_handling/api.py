"""Public API for parameter-handling.

This module provides the complete public API: the flatten engine, the
value resolver, and the constrained parameter types.
"""

# Core engine
from .base import Parameter
from .flatten import NodeKind, classify, flatten
from .resolve import resolve
from .composition import value_flatten
from .records import Record, register_record, unregister_record

# Parameters
from .parameters import (
    # Transforms
    Transform,
    Identity,
    LogTransform,
    SoftplusTransform,
    IntervalLogit,
    # Types
    Positive,
    Bounded,
    PositiveArray,
    BoundedArray,
    Orthogonal,
    PositiveSemiDefinite,
    PositiveDefinite,
    Fixed,
    Deferred,
    # Constructors
    positive,
    bounded,
    fixed,
    deferred,
    orthogonal,
    positive_semidefinite,
    positive_definite,
    # Matrix helpers
    nearest_orthogonal_matrix,
    tril_to_vec,
    vec_to_tril,
)

# Constants
from .constants import DEFAULT_DTYPE, BOUNDED_EPSILON, POSITIVE_DEFINITE_EPSILON

# Version
try:
    from importlib.metadata import version
    __version__ = version("parameter-handling")
except Exception:
    __version__ = "0.1.0"

# Public API Export List
__all__ = [
    # Core engine
    "Parameter",
    "NodeKind",
    "classify",
    "flatten",
    "resolve",
    "value_flatten",
    "Record",
    "register_record",
    "unregister_record",
    # Transforms
    "Transform",
    "Identity",
    "LogTransform",
    "SoftplusTransform",
    "IntervalLogit",
    # Types
    "Positive",
    "Bounded",
    "PositiveArray",
    "BoundedArray",
    "Orthogonal",
    "PositiveSemiDefinite",
    "PositiveDefinite",
    "Fixed",
    "Deferred",
    # Constructors
    "positive",
    "bounded",
    "fixed",
    "deferred",
    "orthogonal",
    "positive_semidefinite",
    "positive_definite",
    # Matrix helpers
    "nearest_orthogonal_matrix",
    "tril_to_vec",
    "vec_to_tril",
    # Constants
    "DEFAULT_DTYPE",
    "BOUNDED_EPSILON",
    "POSITIVE_DEFINITE_EPSILON",
    # Version
    "__version__",
]
