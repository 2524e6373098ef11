"""Flatten engine: reversible conversion between nested trees and flat vectors.

``flatten(x)`` walks a tree of scalars, arrays, sequences, records, maps and
parameters, and returns a 1-D numpy vector holding every tunable real in the
tree together with an ``unflatten`` closure. The closure owns all of the
shape, key and constant metadata captured at flatten time and rebuilds a
tree of the same shape from any vector of the same length.

Every node belongs to exactly one :class:`NodeKind`. User types join the
tree through the record interface in :mod:`parameter_handling.records`.
"""

import copy
import logging
from enum import Enum
from itertools import accumulate
from typing import Any, Callable, Dict, List, Sequence, Tuple

import numpy as np
from scipy import sparse

from .base import Parameter, Unflatten
from .constants import DEFAULT_DTYPE
from .records import decompose, is_record, rebuild

logger = logging.getLogger(__name__)

# Sparse formats whose ``data`` array holds exactly the stored values
_DATA_FORMATS = frozenset({"csr", "csc", "coo", "bsr"})

# Array dtype kinds that are carried through unchanged: bool, integers,
# strings, bytes, datetimes and timedeltas
_FROZEN_KINDS = frozenset("biuUSMm")


class NodeKind(str, Enum):
    """Closed set of node kinds understood by the flatten engine."""
    PARAMETER = "parameter"
    CONSTANT = "constant"
    SCALAR = "scalar"
    ARRAY = "array"
    SPARSE = "sparse"
    SEQUENCE = "sequence"
    RECORD = "record"
    MAP = "map"


def classify(x: Any) -> NodeKind:
    """Determine the kind of a tree node.

    Raises:
        TypeError: If ``x`` is not a supported node
    """
    if isinstance(x, Parameter):
        return NodeKind.PARAMETER
    if x is None or isinstance(x, (bool, np.bool_, int, np.integer, str, bytes)):
        return NodeKind.CONSTANT
    if isinstance(x, (float, np.floating)):
        return NodeKind.SCALAR
    if sparse.issparse(x):
        return NodeKind.SPARSE
    if isinstance(x, np.ndarray):
        return NodeKind.ARRAY
    if is_record(x):
        return NodeKind.RECORD
    if isinstance(x, (tuple, list)):
        return NodeKind.SEQUENCE
    if isinstance(x, dict):
        return NodeKind.MAP
    raise TypeError(
        f"Cannot flatten object of type {type(x).__name__}. "
        f"Wrap it in fixed(...) or register it with register_record()"
    )


def as_float_dtype(dtype) -> np.dtype:
    """Normalize ``dtype`` and check that it is a floating type."""
    dtype = np.dtype(dtype)
    if not np.issubdtype(dtype, np.floating):
        raise ValueError(f"Flatten dtype must be a floating type, got {dtype}")
    return dtype


def _empty(dtype) -> np.ndarray:
    return np.zeros(0, dtype=dtype)


def _concat(vecs: Sequence[np.ndarray], dtype) -> np.ndarray:
    if not vecs:
        return _empty(dtype)
    return np.concatenate(vecs).astype(dtype, copy=False)


def _flatten_constant(x: Any, dtype) -> Tuple[np.ndarray, Unflatten]:
    def unflatten_constant(v):
        return x
    return _empty(dtype), unflatten_constant


def _flatten_scalar(x: Any, dtype) -> Tuple[np.ndarray, Unflatten]:
    kind = type(x)

    def unflatten_scalar(v):
        return kind(v[0])
    return np.array([x], dtype=dtype), unflatten_scalar


def _flatten_array(x: np.ndarray, dtype) -> Tuple[np.ndarray, Unflatten]:
    if x.dtype == object:
        return _flatten_object_array(x, dtype)

    if x.dtype.kind in _FROZEN_KINDS:
        frozen = x.copy()

        def unflatten_frozen_array(v):
            return frozen.copy()
        return _empty(dtype), unflatten_frozen_array

    if not np.issubdtype(x.dtype, np.floating):
        raise TypeError(f"Cannot flatten array with dtype {x.dtype}")

    shape, original_dtype = x.shape, x.dtype

    def unflatten_array(v):
        return np.reshape(v, shape).astype(original_dtype)
    return x.ravel().astype(dtype), unflatten_array


def _flatten_object_array(x: np.ndarray, dtype) -> Tuple[np.ndarray, Unflatten]:
    vec, unflatten_items = _flatten_parts(list(x.flat), dtype)
    shape = x.shape

    def unflatten_object_array(v):
        out = np.empty(shape, dtype=object)
        for i, item in enumerate(unflatten_items(v)):
            out.flat[i] = item
        return out
    return vec, unflatten_object_array


def _flatten_sparse(x: Any, dtype) -> Tuple[np.ndarray, Unflatten]:
    if np.issubdtype(x.dtype, np.complexfloating):
        raise TypeError(f"Cannot flatten sparse matrix with dtype {x.dtype}")
    if not np.issubdtype(x.dtype, np.floating):
        frozen = x.copy()

        def unflatten_integer_sparse(v):
            return frozen.copy()
        return _empty(dtype), unflatten_integer_sparse

    fmt = x.format
    pattern = x.copy() if fmt in _DATA_FORMATS else x.tocsr()
    data_shape, data_dtype = pattern.data.shape, pattern.data.dtype

    def unflatten_sparse(v):
        out = pattern.copy()
        out.data = np.reshape(v, data_shape).astype(data_dtype)
        return out if out.format == fmt else out.asformat(fmt)
    return pattern.data.ravel().astype(dtype), unflatten_sparse


def _flatten_parts(items: Sequence[Any], dtype) -> Tuple[np.ndarray, Callable[[np.ndarray], List[Any]]]:
    """Flatten an ordered collection, returning a list-producing unflatten."""
    flattened = [flatten_node(item, dtype) for item in items]
    vecs = [vec for vec, _ in flattened]
    backs = [back for _, back in flattened]
    offsets = list(accumulate((len(vec) for vec in vecs), initial=0))

    def unflatten_parts(v):
        return [back(v[offsets[i]:offsets[i + 1]]) for i, back in enumerate(backs)]
    return _concat(vecs, dtype), unflatten_parts


def _flatten_sequence(x: Sequence[Any], dtype) -> Tuple[np.ndarray, Unflatten]:
    vec, unflatten_parts = _flatten_parts(x, dtype)
    container = type(x)

    def unflatten_sequence(v):
        return container(unflatten_parts(v))
    return vec, unflatten_sequence


def _flatten_record(x: Any, dtype) -> Tuple[np.ndarray, Unflatten]:
    vec, unflatten_parts = _flatten_parts(decompose(x), dtype)

    def unflatten_record(v):
        return rebuild(x, unflatten_parts(v))
    return vec, unflatten_record


def _flatten_map(x: Dict[Any, Any], dtype) -> Tuple[np.ndarray, Unflatten]:
    # Key order is fixed here and reused by every unflatten call
    keys = list(x.keys())
    vec, unflatten_parts = _flatten_parts([x[k] for k in keys], dtype)

    def unflatten_map(v):
        out = copy.copy(x)
        for key, value in zip(keys, unflatten_parts(v)):
            out[key] = value
        return out
    return vec, unflatten_map


def _flatten_parameter(x: Parameter, dtype) -> Tuple[np.ndarray, Unflatten]:
    return x.flatten(dtype)


_FLATTENERS: Dict[NodeKind, Callable[[Any, np.dtype], Tuple[np.ndarray, Unflatten]]] = {
    NodeKind.PARAMETER: _flatten_parameter,
    NodeKind.CONSTANT: _flatten_constant,
    NodeKind.SCALAR: _flatten_scalar,
    NodeKind.ARRAY: _flatten_array,
    NodeKind.SPARSE: _flatten_sparse,
    NodeKind.SEQUENCE: _flatten_sequence,
    NodeKind.RECORD: _flatten_record,
    NodeKind.MAP: _flatten_map,
}


def flatten_node(x: Any, dtype) -> Tuple[np.ndarray, Unflatten]:
    """Flatten one node without the top-level length check.

    Used by parameter types to flatten their unconstrained state. ``dtype``
    must already be a floating numpy dtype.
    """
    return _FLATTENERS[classify(x)](x, dtype)


def flatten(x: Any, dtype=DEFAULT_DTYPE) -> Tuple[np.ndarray, Unflatten]:
    """Flatten a tree into a vector of reals.

    Args:
        x: Tree of scalars, arrays, sequences, records, maps and parameters
        dtype: Floating numpy dtype of the returned vector

    Returns:
        Tuple of (vector, unflatten). ``unflatten`` rebuilds a tree with the
        same shape as ``x`` from any vector of the same length.

    Raises:
        TypeError: If the tree contains an unsupported node
        ValueError: If ``dtype`` is not a floating dtype

    Example:
        >>> v, unflatten = flatten({"a": 5.0, "b": (2.0, 3.0)})
        >>> v
        array([5., 2., 3.])
        >>> unflatten(v)
        {'a': 5.0, 'b': (2.0, 3.0)}
    """
    dtype = as_float_dtype(dtype)
    vec, unflatten_tree = flatten_node(x, dtype)
    length = len(vec)
    logger.debug(f"Flattened {classify(x).value} node of type {type(x).__name__} to {length} {dtype} values")

    def unflatten(v):
        if isinstance(v, (list, tuple)):
            v = np.asarray(v, dtype=dtype)
        if len(v) != length:
            raise ValueError(f"Expected vector of length {length}, got {len(v)}")
        return unflatten_tree(v)
    return vec, unflatten
