from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

from .diagnostics import NumericalStabilityWarning
from .providers import DEFAULT_LINALG, LinearAlgebraProvider
from .state_space import StateSpace, mean_copy_numbers

logger = logging.getLogger(__name__)


def _l1_moduli(vector: np.ndarray) -> np.ndarray:
    w = np.abs(vector)
    return w / w.sum()


@dataclass
class SteadyStateSolver:
    """Stationary distribution of a generator from its dense eigen-decomposition.

    Parameters
    ----------
    linalg:
        Provider of the eigen-decomposition.
    eigenvalue_tol:
        A dominant eigenvalue with real part above this value (or imaginary
        part above it in magnitude) triggers a `NumericalStabilityWarning`;
        for an exact generator it is zero.
    degeneracy_tol:
        Eigenvalues lying within ``degeneracy_tol * max(1, |λ|max)`` of the
        dominant one in the complex plane are treated as the same eigenvalue,
        so a complex-conjugate pair is not counted as degenerate.

    Notes
    -----
    The eigenvalues are taken in whatever order the provider returns them;
    the dominant one is found by searching for the largest real part. The
    eigenvector's sign/phase is arbitrary, so the distribution is the
    L1-normalized modulus of its entries. When the dominant eigenvalue is
    degenerate (several closed classes, e.g. conserved quantities), the
    normalized moduli of all eigenvectors of the degenerate eigenspace are
    averaged and a warning is issued. That average depends on the basis the
    eigen solver returns for the eigenspace, and the true stationary state
    depends on the initial condition.
    """

    linalg: LinearAlgebraProvider = field(default=DEFAULT_LINALG, repr=False)
    eigenvalue_tol: float = 1e-8
    degeneracy_tol: float = 1e-10

    def analyze(self, master: np.ndarray) -> Dict[str, Any]:
        """Return the stationary distribution together with its eigen diagnostics."""
        master = np.asarray(master, dtype=float)
        if master.ndim != 2 or master.shape[0] != master.shape[1]:
            raise ValueError(f"master must be a square matrix; got shape {master.shape}")

        values, vectors = self.linalg.eig(master)
        real = np.real(values)
        top = int(np.argmax(real))
        dominant = complex(values[top])

        if dominant.real > self.eigenvalue_tol or abs(dominant.imag) > self.eigenvalue_tol:
            warnings.warn(
                f"dominant eigenvalue {dominant:.3e} of the generator is not zero; "
                "the stationary distribution may be inaccurate",
                NumericalStabilityWarning,
                stacklevel=2,
            )

        scale = max(1.0, float(np.max(np.abs(values)))) if values.size else 1.0
        degenerate = np.flatnonzero(np.abs(values - values[top]) <= self.degeneracy_tol * scale)
        if degenerate.size > 1:
            warnings.warn(
                f"dominant eigenvalue has multiplicity {degenerate.size}; averaging over "
                "the degenerate eigenspace, the stationary state is not unique",
                NumericalStabilityWarning,
                stacklevel=2,
            )
            distribution = np.mean([_l1_moduli(vectors[:, k]) for k in degenerate], axis=0)
        else:
            distribution = _l1_moduli(vectors[:, top])

        logger.debug("dominant eigenvalue %s (multiplicity %d)", dominant, degenerate.size)
        return {
            "distribution": distribution,
            "eigenvalue": dominant,
            "multiplicity": int(degenerate.size),
            "spectral_gap": _spectral_gap(real, degenerate),
        }

    def stationary_distribution(self, master: np.ndarray) -> np.ndarray:
        return self.analyze(master)["distribution"]

    def solve(self, master: np.ndarray, state_space: StateSpace) -> np.ndarray:
        """Stationary mean copy number of each species."""
        if np.shape(master)[0] != state_space.size:
            raise ValueError(
                f"master has {np.shape(master)[0]} rows but the state space has {state_space.size} states"
            )
        return mean_copy_numbers(self.stationary_distribution(master), state_space)


def _spectral_gap(real: np.ndarray, degenerate: np.ndarray) -> float:
    """Distance from the dominant real part to the next distinct one (nan if none)."""
    rest = np.delete(real, degenerate)
    if rest.size == 0:
        return float("nan")
    return float(real[degenerate[0]] - np.max(rest))


def steady_state(
    master: np.ndarray,
    state_space: StateSpace,
    *,
    linalg: LinearAlgebraProvider = DEFAULT_LINALG,
) -> np.ndarray:
    """Stationary mean copy number of each species."""
    return SteadyStateSolver(linalg=linalg).solve(master, state_space)


def stationary_distribution(
    master: np.ndarray,
    *,
    linalg: LinearAlgebraProvider = DEFAULT_LINALG,
) -> np.ndarray:
    """Stationary probability vector, indexed like the state space."""
    return SteadyStateSolver(linalg=linalg).stationary_distribution(master)
