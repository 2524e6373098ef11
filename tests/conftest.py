"""Shared fixtures for parameter-handling tests."""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Seeded random generator so every test is reproducible."""
    return np.random.default_rng(20231018)


@pytest.fixture
def spd_matrix(rng):
    """Random 3x3 symmetric positive-definite matrix."""
    A = rng.random((3, 3))
    return A @ A.T + 0.1 * np.eye(3)
