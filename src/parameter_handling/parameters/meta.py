"""Parameters built from other trees: Fixed and Deferred."""

from dataclasses import dataclass
from typing import Any, Callable, Tuple

import numpy as np
from scipy import sparse

from ..base import Parameter
from ..flatten import flatten_node
from ..records import decompose, is_record
from ..resolve import resolve


def _tree_equal(a: Any, b: Any) -> bool:
    """Exact structural equality that compares arrays element-wise."""
    if type(a) is not type(b):
        return False
    if isinstance(a, Parameter):
        return bool(a == b)
    if isinstance(a, np.ndarray):
        if a.dtype == object:
            return a.shape == b.shape and all(_tree_equal(x, y) for x, y in zip(a.flat, b.flat))
        return bool(np.array_equal(a, b))
    if sparse.issparse(a):
        return a.shape == b.shape and (a != b).nnz == 0
    if is_record(a):
        return _tree_equal(decompose(a), decompose(b))
    if isinstance(a, (tuple, list)):
        return len(a) == len(b) and all(_tree_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, dict):
        return list(a.keys()) == list(b.keys()) and all(_tree_equal(a[k], b[k]) for k in a)
    return bool(a == b)


@dataclass(frozen=True, eq=False)
class Fixed(Parameter):
    """A sub-tree held constant.

    Flattens to an empty vector, and unflatten always returns this very
    instance, so nothing below it is ever exposed to an optimizer. It still
    takes part in ``resolve``: parameters inside it are resolved.
    """
    value: Any

    def resolve(self) -> Any:
        return resolve(self.value)

    def flatten(self, dtype):
        def unflatten_fixed(v):
            return self
        return np.zeros(0, dtype=dtype), unflatten_fixed

    def __eq__(self, other):
        if not isinstance(other, Fixed):
            return NotImplemented
        return _tree_equal(self.value, other.value)


@dataclass(frozen=True, eq=False)
class Deferred(Parameter):
    """Value computed by applying ``f`` to resolved arguments.

    ``resolve() = f(*resolve(args))``. Only ``args`` are flattened; ``f``
    is carried along unchanged and must be a pure, stateless callable.
    """
    f: Callable[..., Any]
    args: Tuple[Any, ...]

    def __post_init__(self):
        """Validate callable and freeze args."""
        if not callable(self.f):
            raise TypeError(f"Deferred requires a callable, got {type(self.f).__name__}")
        object.__setattr__(self, "args", tuple(self.args))

    def resolve(self) -> Any:
        return self.f(*resolve(self.args))

    def flatten(self, dtype):
        vec, unflatten_args = flatten_node(self.args, dtype)

        def unflatten_deferred(v):
            return Deferred(self.f, unflatten_args(v))
        return vec, unflatten_deferred

    def __eq__(self, other):
        if not isinstance(other, Deferred):
            return NotImplemented
        return self.f == other.f and _tree_equal(self.args, other.args)


def fixed(val) -> Fixed:
    """Return a parameter that keeps ``val`` out of the flattened vector."""
    return Fixed(val)


def deferred(f: Callable[..., Any], *args) -> Deferred:
    """Return a parameter whose value is ``f(*resolve(args))``.

    Lets constraints be enforced on the arguments of any function, even
    one that knows nothing about parameters. Nest ``deferred`` calls to
    build up complex objects.

    Example:
        >>> d = deferred(np.diag, positive(np.ones(3)))
        >>> resolve(d)  # 3x3 diagonal matrix with positive entries
    """
    return Deferred(f, args)
