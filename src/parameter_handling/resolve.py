"""Value resolver: replace every parameter in a tree with its constrained value."""

import copy
from typing import Any

import numpy as np

from .base import Parameter
from .records import decompose, is_record, rebuild


def resolve(x: Any) -> Any:
    """Recursively resolve all parameters in ``x``.

    Sequences, maps, records and object arrays are rebuilt around their
    resolved contents. Scalars, numeric arrays, sparse matrices and any
    node without constituents are returned unchanged, so resolving a tree
    that holds no parameters gives back an equal tree.

    Raises:
        TypeError: If a record type cannot be rebuilt from its resolved parts
    """
    if isinstance(x, Parameter):
        return x.resolve()
    if isinstance(x, np.ndarray):
        if x.dtype != object:
            return x
        out = np.empty(x.shape, dtype=object)
        for i, item in enumerate(x.flat):
            out.flat[i] = resolve(item)
        return out
    if is_record(x):
        parts = decompose(x)
        if not parts:
            return x
        return rebuild(x, [resolve(part) for part in parts])
    if isinstance(x, (tuple, list)):
        return type(x)(resolve(item) for item in x)
    if isinstance(x, dict):
        out = copy.copy(x)
        for key, value in x.items():
            out[key] = resolve(value)
        return out
    return x
