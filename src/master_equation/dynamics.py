from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from .diagnostics import NumericalStabilityWarning, TruncationWarning
from .providers import DEFAULT_DISTRIBUTIONS, DEFAULT_LINALG, DistributionProvider, LinearAlgebraProvider
from .state_space import StateSpace, mean_copy_numbers

logger = logging.getLogger(__name__)

# Negative probabilities below this size are rounding noise.
NEGATIVE_TOL = 1e-12


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Mean copy numbers on a time grid.

    Parameters
    ----------
    time_grid:
        Time points, shape (T,).
    means:
        Mean copy number of each species, shape (n_species, T).
    final_distribution:
        Probability vector after the last Euler step.
    species_names:
        Optional species labels for reporting.
    """

    time_grid: np.ndarray
    means: np.ndarray
    final_distribution: Optional[np.ndarray] = None
    species_names: Optional[List[str]] = None

    def __post_init__(self) -> None:
        # Freeze private copies; the caller keeps ownership of its arrays.
        for name in ("time_grid", "means", "final_distribution"):
            arr = getattr(self, name)
            if arr is not None:
                arr = np.array(arr, dtype=float)
                arr.setflags(write=False)
                object.__setattr__(self, name, arr)

    @property
    def n_species(self) -> int:
        return int(self.means.shape[0])

    def species(self, key: Union[int, str]) -> np.ndarray:
        """Mean trajectory of one species, by index or name."""
        if isinstance(key, str):
            if self.species_names is None or key not in self.species_names:
                raise ValueError(f"Unknown species '{key}'")
            key = self.species_names.index(key)
        return self.means[key]


def initial_distribution(
    state_space: StateSpace,
    x0: Sequence[float],
    *,
    distributions: DistributionProvider = DEFAULT_DISTRIBUTIONS,
) -> np.ndarray:
    """Product-Poisson probability vector with species means ``x0``.

    Not renormalized: mass beyond ``max_num`` is simply missing, so the
    vector sums to less than one when ``x0`` is large compared with the
    truncation bound.
    """
    x0 = np.asarray(x0, dtype=float)
    if x0.shape != (state_space.n_species,):
        raise ValueError(f"x0 must have length {state_space.n_species}; got shape {x0.shape}")
    if np.any(x0 < 0) or not np.all(np.isfinite(x0)):
        raise ValueError("x0 must contain finite nonnegative means")

    counts = np.arange(state_space.base)
    p0 = np.ones(state_space.size)
    for j, mu in enumerate(x0):
        pmf = np.asarray(distributions.poisson_pmf(counts, float(mu)), dtype=float)
        p0 *= pmf[state_space.states[:, j]]
    return p0


def _time_step(tspan: np.ndarray) -> float:
    if tspan.ndim != 1 or tspan.size < 2:
        raise ValueError("tspan must be a 1-D grid with at least two time points")
    steps = np.diff(tspan)
    if np.any(steps <= 0):
        raise ValueError("tspan must be strictly increasing")
    dt = float(steps[0])
    if not np.allclose(steps, dt, rtol=1e-6, atol=0.0):
        warnings.warn(
            "tspan is not uniformly spaced; every step uses dt = tspan[1] - tspan[0]",
            NumericalStabilityWarning,
            stacklevel=3,
        )
    return dt


def _warn_no_mass(state_space: StateSpace, t: float) -> None:
    warnings.warn(
        f"probability vector has no mass left inside [0, {state_space.max_num}]^{state_space.n_species} "
        f"at t={t:g}; later means are nan",
        TruncationWarning,
        stacklevel=3,
    )


def dynamics(
    master: np.ndarray,
    state_space: StateSpace,
    tspan: Sequence[float],
    x0: Sequence[float],
    *,
    linalg: LinearAlgebraProvider = DEFAULT_LINALG,
    distributions: DistributionProvider = DEFAULT_DISTRIBUTIONS,
    check_stability: bool = True,
    truncation_tol: Optional[float] = None,
    species_names: Optional[List[str]] = None,
) -> Trajectory:
    """Integrate dP/dt = M P with explicit Euler steps and record the means.

    Parameters
    ----------
    master:
        Generator from `master_operator`.
    state_space:
        The state space the generator was built on.
    tspan:
        Uniform time grid; ``dt = tspan[1] - tspan[0]``.
    x0:
        Initial mean copy numbers. The initial distribution is product
        Poisson, and ``means[:, 0]`` is ``x0`` itself.
    check_stability:
        Warn when ``dt * max|M_ii| > 1``, where Euler iterates can turn
        negative or diverge.
    truncation_tol:
        If given, warn when the initial distribution misses more than this
        much probability mass because of the truncation. Independently of
        this, a vector with no mass left inside the box issues a
        `TruncationWarning` and the remaining means are nan.

    Returns
    -------
    Trajectory
    """
    master = np.asarray(master, dtype=float)
    if master.shape != (state_space.size, state_space.size):
        raise ValueError(
            f"master must have shape ({state_space.size}, {state_space.size}); got {master.shape}"
        )
    tspan = np.array(tspan, dtype=float)
    dt = _time_step(tspan)
    x0 = np.asarray(x0, dtype=float)

    p = initial_distribution(state_space, x0, distributions=distributions)

    if truncation_tol is not None:
        lost = 1.0 - float(p.sum())
        if lost > truncation_tol:
            warnings.warn(
                f"initial distribution loses {lost:.3e} of its mass to truncation at "
                f"max_num={state_space.max_num}",
                TruncationWarning,
                stacklevel=2,
            )

    if check_stability:
        rate = float(np.max(np.abs(np.diag(master)))) if master.size else 0.0
        if dt * rate > 1.0:
            warnings.warn(
                f"dt={dt:.3e} exceeds 1/max|diag(M)|={1.0 / rate:.3e}; "
                "explicit Euler steps may produce negative probabilities",
                NumericalStabilityWarning,
                stacklevel=2,
            )

    logger.debug("Euler integration: %d states, %d steps, dt=%g", state_space.size, tspan.size - 1, dt)

    means = np.full((state_space.n_species, tspan.size), np.nan)
    means[:, 0] = x0
    if not np.any(p):
        _warn_no_mass(state_space, tspan[0])
    else:
        for i in range(1, tspan.size):
            p = p + dt * linalg.matvec(master, p)
            if not np.any(p):
                _warn_no_mass(state_space, tspan[i])
                break
            means[:, i] = mean_copy_numbers(p, state_space)

    if check_stability and p.min() < -NEGATIVE_TOL:
        warnings.warn(
            f"final distribution has negative entries (min {p.min():.3e})",
            NumericalStabilityWarning,
            stacklevel=2,
        )

    return Trajectory(time_grid=tspan, means=means, final_distribution=p, species_names=species_names)
