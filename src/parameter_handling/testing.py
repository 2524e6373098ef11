"""Reusable checks for code that builds on parameter-handling.

Packages defining their own parameter types or record registrations can
call these helpers from their test suites to confirm that the types take
part in flatten, value_flatten and resolve correctly.
"""

from typing import Any

import numpy as np
from scipy import sparse

from .base import Parameter
from .composition import value_flatten
from .flatten import flatten
from .records import decompose, is_record
from .resolve import resolve

# Tolerance used when round-tripping through each flatten dtype
DTYPE_TOLERANCES = (
    (np.float64, 1e-8),
    (np.float32, 1e-5),
    (np.float16, 1e-2),
)


def approx_equal(a: Any, b: Any, atol: float = 1e-8, rtol: float = 1e-5) -> bool:
    """Structural equality of two trees, approximate for floating values.

    Trees must have the same types, shapes, keys and field order. Floats and
    float arrays are compared with ``numpy.isclose`` semantics; everything
    else must compare equal.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, Parameter) or is_record(a):
        return approx_equal(decompose(a), decompose(b), atol, rtol)
    if isinstance(a, (float, np.floating)):
        return bool(np.isclose(a, b, atol=atol, rtol=rtol))
    if sparse.issparse(a):
        return (
            a.shape == b.shape
            and a.format == b.format
            and a.nnz == b.nnz
            and np.allclose(a.toarray(), b.toarray(), atol=atol, rtol=rtol)
        )
    if isinstance(a, np.ndarray):
        if a.shape != b.shape or a.dtype != b.dtype:
            return False
        if a.dtype == object:
            return all(approx_equal(x, y, atol, rtol) for x, y in zip(a.flat, b.flat))
        if np.issubdtype(a.dtype, np.inexact):
            return bool(np.allclose(a, b, atol=atol, rtol=rtol))
        return bool(np.array_equal(a, b))
    if isinstance(a, (tuple, list)):
        return len(a) == len(b) and all(approx_equal(x, y, atol, rtol) for x, y in zip(a, b))
    if isinstance(a, dict):
        return list(a.keys()) == list(b.keys()) and all(
            approx_equal(a[k], b[k], atol, rtol) for k in a
        )
    return a == b


def check_flatten_interface(x: Any) -> None:
    """Assert that ``x`` round-trips through flatten at every supported dtype.

    Raises:
        AssertionError: On the first failed property
    """
    v, unflatten = flatten(x)
    assert isinstance(v, np.ndarray) and v.ndim == 1, f"flatten returned {type(v).__name__}"
    assert v.dtype == np.float64, f"default flatten dtype is {v.dtype}"
    restored = unflatten(v)
    assert type(restored) is type(x), f"unflatten returned {type(restored).__name__}"
    assert approx_equal(x, restored), f"round trip changed {x!r} into {restored!r}"

    for dtype, atol in DTYPE_TOLERANCES:
        _v, _unflatten = flatten(x, dtype)
        assert _v.dtype == dtype, f"flatten({dtype.__name__}) returned {_v.dtype}"
        assert len(_v) == len(v), f"flatten({dtype.__name__}) changed vector length"
        if dtype is np.float64:
            assert np.array_equal(_v, v)
        _restored = _unflatten(_v)
        assert type(_restored) is type(x)
        assert approx_equal(x, _restored, atol=atol), (
            f"{dtype.__name__} round trip changed {x!r} into {_restored!r}"
        )


def check_value_flatten_interface(x: Any) -> None:
    """Assert that value_flatten yields the resolved value of ``x`` at every dtype."""
    expected = resolve(x)
    for dtype, atol in DTYPE_TOLERANCES:
        v, unflatten = value_flatten(x, dtype)
        assert v.dtype == dtype
        restored = unflatten(v)
        assert type(restored) is type(expected)
        assert approx_equal(expected, restored, atol=atol), (
            f"{dtype.__name__} value round trip gave {restored!r}, expected {expected!r}"
        )


def check_parameter_interface(x: Parameter) -> None:
    """Assert that a parameter flattens, round-trips and resolves."""
    assert isinstance(x, Parameter), f"{type(x).__name__} is not a Parameter"
    check_flatten_interface(x)
    assert approx_equal(resolve(x), x.resolve())
