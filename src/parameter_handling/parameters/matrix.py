"""Matrix-valued constrained parameters.

- Orthogonal: projects an unconstrained matrix onto the nearest matrix
  with orthonormal columns.
- PositiveSemiDefinite / PositiveDefinite: store a packed lower-triangular
  factor L and resolve to L Lᵀ (plus ε I for the strict variant).
"""

from dataclasses import dataclass, replace

import numpy as np
from scipy import linalg

from ..base import Parameter
from ..constants import POSITIVE_DEFINITE_EPSILON
from ..flatten import flatten_node


def nearest_orthogonal_matrix(X) -> np.ndarray:
    """Project ``X`` onto the closest orthogonal matrix in Frobenius norm.

    With the thin SVD ``X = U Σ Vᴴ`` the projection is ``U Vᴴ``. Complex
    input gives the nearest matrix with orthonormal columns.
    """
    U, _, Vh = np.linalg.svd(X, full_matrices=False)
    return U @ Vh


def tril_to_vec(X) -> np.ndarray:
    """Pack the lower triangle (including the diagonal) of a square matrix, row by row.

    Raises:
        ValueError: If ``X`` is not square
    """
    X = np.asarray(X)
    if X.ndim != 2 or X.shape[0] != X.shape[1]:
        raise ValueError(f"Matrix needs to be square, got shape {X.shape}")
    return X[np.tril_indices(X.shape[0])]


def vec_to_tril(v) -> np.ndarray:
    """Inverse of :func:`tril_to_vec`.

    Raises:
        ValueError: If ``len(v)`` is not a triangular number
    """
    v = np.asarray(v)
    n = int(round((np.sqrt(1 + 8 * len(v)) - 1) / 2))
    if n * (n + 1) // 2 != len(v):
        raise ValueError(f"Length {len(v)} is not a triangular number")
    L = np.zeros((n, n), dtype=v.dtype)
    L[np.tril_indices(n)] = v
    return L


def _real_matrix(X) -> np.ndarray:
    X = np.asarray(X)
    if X.ndim != 2:
        raise ValueError(f"Expected a matrix, got array with shape {X.shape}")
    if X.dtype == object or np.issubdtype(X.dtype, np.complexfloating):
        raise ValueError(f"Expected a real matrix, got dtype {X.dtype}")
    if not np.issubdtype(X.dtype, np.floating):
        X = X.astype(np.float64)
    return X


def _cholesky_factor(X: np.ndarray) -> np.ndarray:
    """Lower Cholesky factor of a symmetric positive-definite matrix."""
    if X.shape[0] != X.shape[1]:
        raise ValueError(f"X must be square, got shape {X.shape}")
    if not np.allclose(X, X.T):
        raise ValueError("X is not symmetric")
    try:
        return linalg.cholesky(X, lower=True)
    except linalg.LinAlgError as e:
        raise ValueError("X is not positive-definite") from e


@dataclass(frozen=True, eq=False)
class Orthogonal(Parameter):
    """Matrix constrained to have orthonormal columns.

    The raw matrix is flattened as-is; this over-parameterizes the
    constraint set, and projection of an orthogonal matrix is a no-op.
    """
    X: np.ndarray

    def resolve(self) -> np.ndarray:
        return nearest_orthogonal_matrix(self.X)

    def flatten(self, dtype):
        vec, unflatten_matrix = flatten_node(self.X, dtype)

        def unflatten_orthogonal(v):
            return replace(self, X=unflatten_matrix(v))
        return vec, unflatten_orthogonal

    def __eq__(self, other):
        if not isinstance(other, Orthogonal):
            return NotImplemented
        return np.array_equal(self.X, other.X)


@dataclass(frozen=True, eq=False)
class PositiveSemiDefinite(Parameter):
    """Symmetric positive-semidefinite matrix ``L Lᵀ``.

    Attributes:
        L: Packed lower-triangular factor of length n(n+1)/2 (this is flattened)
    """
    L: np.ndarray

    def resolve(self) -> np.ndarray:
        factor = vec_to_tril(self.L)
        return factor @ factor.T

    def flatten(self, dtype):
        vec, unflatten_packed = flatten_node(self.L, dtype)

        def unflatten_psd(v):
            return replace(self, L=unflatten_packed(v))
        return vec, unflatten_psd

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return np.array_equal(self.L, other.L)


@dataclass(frozen=True, eq=False)
class PositiveDefinite(PositiveSemiDefinite):
    """Symmetric positive-definite matrix ``L Lᵀ + epsilon I``.

    Any packed factor, including all zeros, resolves to a matrix whose
    eigenvalues are at least ``epsilon``.
    """
    epsilon: float = POSITIVE_DEFINITE_EPSILON

    def __post_init__(self):
        """Validate jitter."""
        if not self.epsilon > 0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")

    def resolve(self) -> np.ndarray:
        factor = vec_to_tril(self.L)
        return factor @ factor.T + self.epsilon * np.eye(factor.shape[0])

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return np.array_equal(self.L, other.L) and self.epsilon == other.epsilon


def orthogonal(X) -> Orthogonal:
    """Return a parameter whose resolved value has orthonormal columns.

    ``X`` need not be orthogonal; it is projected on every ``resolve()``.

    Raises:
        ValueError: If ``X`` is not a real matrix
    """
    return Orthogonal(_real_matrix(X))


def positive_semidefinite(X) -> PositiveSemiDefinite:
    """Return a parameter whose resolved value is positive-semidefinite.

    The packed factor is seeded from the Cholesky factor of ``X``, so the
    initial resolved value equals ``X``.

    Raises:
        ValueError: If ``X`` is not a symmetric positive-definite matrix
    """
    X = _real_matrix(X)
    return PositiveSemiDefinite(tril_to_vec(_cholesky_factor(X)))


def positive_definite(X, epsilon: float = POSITIVE_DEFINITE_EPSILON) -> PositiveDefinite:
    """Return a parameter whose resolved value is strictly positive-definite.

    Raises:
        ValueError: If ``epsilon`` is not positive, or ``X - epsilon I`` is
            not a symmetric positive-definite matrix
    """
    if not epsilon > 0:
        raise ValueError(f"epsilon must be positive, got {epsilon}")
    X = _real_matrix(X)
    shifted = X - epsilon * np.eye(X.shape[0]) if X.shape[0] == X.shape[1] else X
    return PositiveDefinite(tril_to_vec(_cholesky_factor(shifted)), epsilon)
