#!/usr/bin/env python3
"""Example usage of the parameter-handling API with a generic optimizer.

Fits a small Gaussian-process style model (a kernel with a positive
variance, a bounded lengthscale and a positive-definite noise matrix) by
handing scipy.optimize a flat vector and rebuilding the constrained
parameters inside the objective.
"""

from __future__ import annotations

import numpy as np
from scipy.optimize import minimize

from parameter_handling import (
    bounded,
    fixed,
    positive,
    positive_definite,
    value_flatten,
)


def rbf_kernel(x: np.ndarray, variance: float, lengthscale: float) -> np.ndarray:
    """Squared-exponential covariance matrix for 1-D inputs."""
    d = x[:, None] - x[None, :]
    return variance * np.exp(-0.5 * (d / lengthscale) ** 2)


def negative_log_likelihood(params: dict, x: np.ndarray, y: np.ndarray) -> float:
    """Gaussian negative log marginal likelihood (up to a constant)."""
    K = rbf_kernel(x, params["variance"], params["lengthscale"]) + params["noise"]
    L = np.linalg.cholesky(K)
    alpha = np.linalg.solve(L.T, np.linalg.solve(L, y))
    return float(0.5 * y @ alpha + np.sum(np.log(np.diag(L))))


def main() -> None:
    print("Parameter-handling API demo")

    rng = np.random.default_rng(0)
    x = np.linspace(0.0, 5.0, 8)
    y = np.sin(x) + 0.1 * rng.standard_normal(len(x))

    # 1) Describe the model as a plain nested dict of constrained values
    init = {
        "variance": positive(1.0),
        "lengthscale": bounded(1.0, 0.1, 10.0),
        "noise": positive_definite(0.1 * np.eye(len(x))),
        "n_inputs": len(x),
        "inputs": fixed(x),
    }

    # 2) Flatten to a vector of unconstrained reals
    v0, unflatten = value_flatten(init)
    print(f"\nFlattened {len(v0)} tunable values")

    # 3) Optimize in unconstrained space; every vector maps to valid parameters
    result = minimize(lambda v: negative_log_likelihood(unflatten(v), x, y), v0, method="L-BFGS-B")
    fitted = unflatten(result.x)

    print(f"\nConverged: {result.success} after {result.nit} iterations")
    print(f"  variance    = {fitted['variance']:.4g}")
    print(f"  lengthscale = {fitted['lengthscale']:.4g}")
    print(f"  noise trace = {np.trace(fitted['noise']):.4g}")

    print("\nAPI demo complete")


if __name__ == "__main__":
    main()
