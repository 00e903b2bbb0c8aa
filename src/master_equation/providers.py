"""Numerical back ends used by the solvers.

The master operator code only needs two capabilities from a numerics
library: a dense eigen-decomposition / matrix-vector product and the Poisson
probability mass function. Both are expressed as small protocols so that an
alternative library, or a mock in tests, can be passed in.
"""

from __future__ import annotations

from typing import Protocol, Tuple

import numpy as np
from scipy import linalg as sla
from scipy.stats import poisson


class LinearAlgebraProvider(Protocol):
    def eig(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(eigenvalues, right eigenvectors as columns)`` in any order."""
        ...

    def matvec(self, matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
        ...


class DistributionProvider(Protocol):
    def poisson_pmf(self, k: np.ndarray, mu: float) -> np.ndarray:
        """Poisson probability of each count in ``k`` for mean ``mu``."""
        ...


class NumpyLinearAlgebra:
    """Dense LAPACK routines through NumPy."""

    def eig(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return np.linalg.eig(matrix)

    def matvec(self, matrix: np.ndarray, vector: np.ndarray) -> np.ndarray:
        return matrix @ vector


class ScipyLinearAlgebra(NumpyLinearAlgebra):
    """Eigen-decomposition through :func:`scipy.linalg.eig` (no input checks)."""

    def eig(self, matrix: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        return sla.eig(matrix, right=True, check_finite=False)


class ScipyDistributions:
    def poisson_pmf(self, k: np.ndarray, mu: float) -> np.ndarray:
        return poisson.pmf(k, mu)


DEFAULT_LINALG: LinearAlgebraProvider = NumpyLinearAlgebra()
DEFAULT_DISTRIBUTIONS: DistributionProvider = ScipyDistributions()
