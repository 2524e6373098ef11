"""Tests for parameter transforms.

Tests the transform system including:
- Forward/backward invertibility
- Domain validation
- Vectorized application to arrays
- IntervalLogit boundary handling
"""

import math
import numpy as np
import pytest
from hypothesis import given, strategies as st, assume

from parameter_handling.parameters.transforms import (
    Identity,
    LogTransform,
    SoftplusTransform,
    IntervalLogit,
)


class TestIdentityTransform:
    """Tests for Identity transform."""

    def test_forward_backward_unchanged(self):
        """Test Identity transform leaves values unchanged."""
        transform = Identity()

        for x in [-100, -1, 0, 0.5, 1, 100]:
            assert transform.forward(x) == x
            assert transform.backward(x) == x

    def test_arrays_unchanged(self):
        """Test Identity transform leaves arrays unchanged."""
        x = np.array([[1.0, -2.0], [3.0, 0.0]])
        np.testing.assert_array_equal(Identity().backward(x), x)


class TestLogTransform:
    """Tests for LogTransform."""

    def test_forward_valid_domain(self):
        """Test LogTransform forward on valid positive values."""
        transform = LogTransform()

        assert transform.forward(1.0) == 0.0
        assert transform.forward(math.e) == pytest.approx(1.0)
        assert transform.forward(0.1) == pytest.approx(math.log(0.1))

    def test_forward_invalid_domain_raises(self):
        """Test LogTransform forward raises on non-positive values."""
        transform = LogTransform()

        with pytest.raises(ValueError, match="requires x > 0"):
            transform.forward(0.0)

        with pytest.raises(ValueError, match="requires x > 0"):
            transform.forward(-1.0)

        with pytest.raises(ValueError, match="requires x > 0"):
            transform.forward(np.array([1.0, -1.0]))

    def test_backward(self):
        """Test LogTransform backward (exp)."""
        transform = LogTransform()

        assert transform.backward(0.0) == 1.0
        assert transform.backward(1.0) == pytest.approx(math.e)
        assert transform.backward(-1.0) == pytest.approx(1 / math.e)

    def test_invertibility(self):
        """Test LogTransform round-trip property."""
        transform = LogTransform()

        for x in [0.001, 0.1, 1.0, 10.0, 1000.0]:
            y = transform.forward(x)
            x_recovered = transform.backward(y)
            assert x_recovered == pytest.approx(x, rel=1e-10)

    def test_vectorized(self):
        """Test LogTransform applies elementwise to arrays."""
        x = np.array([[0.5, 1.0], [2.0, 4.0]])
        y = LogTransform().forward(x)
        assert y.shape == x.shape
        np.testing.assert_allclose(LogTransform().backward(y), x)


class TestSoftplusTransform:
    """Tests for SoftplusTransform."""

    def test_backward_is_positive(self):
        """Test softplus maps every real to a positive value."""
        transform = SoftplusTransform()
        y = np.array([-50.0, -1.0, 0.0, 1.0, 50.0, 800.0])
        x = transform.backward(y)
        assert np.all(x > 0)
        assert np.all(np.isfinite(x))

    def test_backward_known_values(self):
        """Test softplus at known points."""
        transform = SoftplusTransform()
        assert transform.backward(0.0) == pytest.approx(math.log(2.0))
        assert transform.backward(800.0) == pytest.approx(800.0)

    def test_forward_invalid_domain_raises(self):
        """Test SoftplusTransform forward raises on non-positive values."""
        with pytest.raises(ValueError, match="requires x > 0"):
            SoftplusTransform().forward(0.0)

    def test_invertibility(self):
        """Test SoftplusTransform round-trip property."""
        transform = SoftplusTransform()
        for x in [0.01, 0.5, 1.0, 10.0, 100.0]:
            assert transform.backward(transform.forward(x)) == pytest.approx(x, rel=1e-10)


class TestIntervalLogit:
    """Tests for IntervalLogit."""

    def test_init_validates_interval(self):
        """Test IntervalLogit rejects empty or inverted intervals."""
        IntervalLogit(0.0, 1.0)

        with pytest.raises(ValueError, match="requires lower < upper"):
            IntervalLogit(1.0, 1.0)

        with pytest.raises(ValueError, match="requires lower < upper"):
            IntervalLogit(2.0, 1.0)

    def test_midpoint_maps_to_zero(self):
        """Test the interval midpoint maps to zero."""
        transform = IntervalLogit(-1.0, 3.0)
        assert transform.forward(1.0) == pytest.approx(0.0, abs=1e-12)
        assert transform.backward(0.0) == pytest.approx(1.0)

    def test_forward_invalid_domain_raises(self):
        """Test IntervalLogit forward raises outside the interval."""
        transform = IntervalLogit(0.0, 1.0)

        with pytest.raises(ValueError, match="requires"):
            transform.forward(-0.1)

        with pytest.raises(ValueError, match="requires"):
            transform.forward(1.1)

    def test_endpoints_map_to_infinity(self):
        """Test the closed end points map to ±∞ and back."""
        transform = IntervalLogit(0.0, 2.0)
        assert transform.forward(0.0) == -np.inf
        assert transform.forward(2.0) == np.inf
        assert transform.backward(-np.inf) == 0.0
        assert transform.backward(np.inf) == 2.0

    def test_backward_stays_in_interval(self):
        """Test extreme unconstrained values stay inside the interval."""
        transform = IntervalLogit(-0.1, 2.0)
        y = np.array([-1000.0, -30.0, 0.0, 30.0, 1000.0])
        x = transform.backward(y)
        assert np.all(x >= -0.1)
        assert np.all(x <= 2.0)

    @given(
        lower=st.floats(min_value=-1e9, max_value=1e9),
        width=st.floats(min_value=1e-6, max_value=1e9),
    )
    def test_backward_never_rounds_past_upper(self, lower, width):
        """Property: lower ≤ backward(y) ≤ upper despite rounding in lower + width."""
        upper = lower + width
        assume(lower < upper)
        transform = IntervalLogit(lower, upper)
        x = transform.backward(np.array([-1e3, 1e3]))
        assert lower <= x[0] <= upper
        assert lower <= x[1] <= upper


class TestPropertyTests:
    """Property-based tests for transforms."""

    @given(x=st.floats(min_value=0.001, max_value=1000))
    def test_log_transform_invertibility(self, x):
        """Property: LogTransform is invertible for positive values."""
        transform = LogTransform()
        y = transform.forward(x)
        assert transform.backward(y) == pytest.approx(x, rel=1e-10)

    @given(x=st.floats(min_value=0.001, max_value=100))
    def test_softplus_transform_invertibility(self, x):
        """Property: SoftplusTransform is invertible for positive values."""
        transform = SoftplusTransform()
        assert transform.backward(transform.forward(x)) == pytest.approx(x, rel=1e-8)

    @given(
        lower=st.floats(min_value=-100, max_value=100),
        width=st.floats(min_value=0.01, max_value=100),
        fraction=st.floats(min_value=0.001, max_value=0.999),
    )
    def test_interval_logit_invertibility(self, lower, width, fraction):
        """Property: IntervalLogit is invertible inside its interval."""
        upper = lower + width
        assume(lower < upper)
        transform = IntervalLogit(lower, upper)
        x = lower + fraction * (upper - lower)
        assume(lower < x < upper)
        y = transform.forward(x)
        assert transform.backward(y) == pytest.approx(x, rel=1e-8, abs=1e-8)
