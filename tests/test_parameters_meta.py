"""Tests for Fixed and Deferred parameters."""

import numpy as np
import pytest

from parameter_handling import (
    Deferred,
    Fixed,
    bounded,
    deferred,
    fixed,
    flatten,
    positive,
    resolve,
    value_flatten,
)
from parameter_handling.testing import check_parameter_interface, check_value_flatten_interface


class TestFixed:
    """Tests for fixed()."""

    def test_flattens_to_empty_vector(self):
        """Test nothing inside a fixed value is exposed."""
        f = fixed({"a": 1.0, "b": np.ones(3), "c": positive(2.0)})
        v, unflatten = flatten(f)
        assert len(v) == 0
        assert v.dtype == np.float64

    def test_unflatten_returns_same_object(self):
        """Test unflatten hands back the original instance."""
        f = fixed(np.array([1.0, 2.0]))
        v, unflatten = flatten(f)
        assert unflatten(v) is f

    def test_resolves_contents(self):
        """Test parameters inside a fixed value are still resolved."""
        f = fixed((positive(3.0), 4.0))
        resolved = resolve(f)
        assert isinstance(resolved, tuple)
        assert resolved[0] == pytest.approx(3.0)
        assert resolved[1] == 4.0

    def test_hides_parameters_in_tree(self):
        """Test only non-fixed leaves of a mixed tree are flattened."""
        tree = {"free": 1.0, "frozen": fixed(2.0)}
        v, unflatten = flatten(tree)
        np.testing.assert_array_equal(v, [1.0])
        restored = unflatten(np.array([5.0]))
        assert restored["free"] == 5.0
        assert restored["frozen"] is tree["frozen"]
        assert resolve(restored) == {"free": 5.0, "frozen": 2.0}

    def test_interface(self):
        """Test the parameter interface holds for fixed values."""
        check_parameter_interface(fixed(1.5))
        check_value_flatten_interface(fixed((1.0, 2.0)))

    def test_equality_with_arrays(self):
        """Test fixed values holding arrays compare element-wise."""
        assert fixed(np.ones(2)) == fixed(np.ones(2))
        assert fixed(np.ones(2)) != fixed(np.zeros(2))
        assert fixed({"w": np.ones(2), "b": 1.0}) == fixed({"w": np.ones(2), "b": 1.0})
        assert fixed((np.ones(2), positive(1.0))) == fixed((np.ones(2), positive(1.0)))
        assert fixed(np.ones(2)) != fixed(np.ones(3))
        assert fixed(1.0) != 1.0

    def test_empty_vector_dtype(self):
        """Test the empty vector uses the requested dtype."""
        v, _ = flatten(fixed(1.0), np.float32)
        assert v.dtype == np.float32


class TestDeferred:
    """Tests for deferred()."""

    def test_applies_function_to_resolved_args(self):
        """Test resolve calls f on the resolved arguments."""
        d = deferred(np.sin, positive(0.5))
        assert isinstance(d, Deferred)
        assert resolve(d) == pytest.approx(np.sin(0.5))

    def test_only_args_are_flattened(self):
        """Test the flattened vector holds the arguments' values."""
        d = deferred(np.diag, positive(np.ones(3)))
        v, unflatten = flatten(d)
        assert len(v) == 3
        restored = unflatten(v)
        assert isinstance(restored, Deferred)
        assert restored.f is np.diag
        np.testing.assert_allclose(resolve(restored), np.eye(3))

    def test_multiple_args(self):
        """Test several arguments, constrained and plain, are passed in order."""
        d = deferred(lambda a, b, c: a * b + c, positive(2.0), bounded(0.5, 0.0, 1.0), 3.0)
        assert resolve(d) == pytest.approx(4.0)
        assert len(flatten(d)[0]) == 3

    def test_nested(self):
        """Test deferred values can be nested."""
        inner = deferred(np.exp, 0.0)
        outer = deferred(lambda x, y: x + y, inner, positive(1.0))
        assert resolve(outer) == pytest.approx(2.0)

    def test_args_are_tuple(self):
        """Test args are stored as a tuple."""
        d = Deferred(np.sum, [np.ones(2)])
        assert isinstance(d.args, tuple)
        assert resolve(d) == pytest.approx(2.0)

    def test_equality_with_arrays(self):
        """Test deferred values compare f and array arguments element-wise."""
        assert deferred(np.diag, np.ones(2)) == deferred(np.diag, np.ones(2))
        assert deferred(np.diag, np.ones(2)) != deferred(np.diag, np.zeros(2))
        assert deferred(np.diag, np.ones(2)) != deferred(np.sum, np.ones(2))
        assert deferred(np.diag, positive(np.ones(2))) == deferred(np.diag, positive(np.ones(2)))

    def test_round_trip_equality(self):
        """Test unflattening the flattened vector gives an equal parameter."""
        d = deferred(np.diag, positive(np.array([1.0, 2.0])))
        v, unflatten = flatten(d)
        assert unflatten(v) == d

    def test_non_callable_raises(self):
        """Test the function must be callable."""
        with pytest.raises(TypeError, match="callable"):
            deferred(1.0, 2.0)

    def test_value_flatten(self):
        """Test value_flatten yields f applied to the resolved arguments."""
        d = deferred(np.diag, positive(np.array([1.0, 2.0])))
        v, unflatten = value_flatten(d)
        np.testing.assert_allclose(unflatten(v), np.diag([1.0, 2.0]))
        np.testing.assert_allclose(unflatten(np.log(np.array([3.0, 4.0]))), np.diag([3.0, 4.0]), rtol=1e-6)

    def test_interface(self):
        """Test the parameter interface holds for deferred values."""
        check_parameter_interface(deferred(np.sin, positive(0.5)))
