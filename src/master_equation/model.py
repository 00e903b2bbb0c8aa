from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import sympy as sp

from .dynamics import Trajectory, dynamics, initial_distribution
from .network import ReactionNetwork
from .operator import MasterOperatorBuilder, check_generator
from .parameters import ReactionParameters
from .providers import DEFAULT_DISTRIBUTIONS, DEFAULT_LINALG, DistributionProvider, LinearAlgebraProvider
from .state_space import StateSpace, mean_copy_numbers
from .steady_state import SteadyStateSolver


@dataclass
class MasterEquationOptions:
    """Tunable knobs for operator assembly and the numerical diagnostics."""

    alpha: float = 1.0
    eigenvalue_tol: float = 1e-8
    degeneracy_tol: float = 1e-10
    check_stability: bool = True
    truncation_tol: float = 1e-3


@dataclass
class MasterEquation:
    """Truncated chemical master equation of a reaction network.

    Parameters
    ----------
    parameters:
        Numeric `ReactionParameters`.
    max_num:
        Truncation bound for every species.
    options:
        `MasterEquationOptions`.
    species_names:
        Optional labels carried into trajectories and reports.

    Notes
    -----
    The generator is assembled on first use and cached; every method shares
    the same `StateSpace` indexing.
    """

    parameters: ReactionParameters
    max_num: int
    options: MasterEquationOptions = field(default_factory=MasterEquationOptions)
    species_names: Optional[List[str]] = None
    linalg: LinearAlgebraProvider = field(default=DEFAULT_LINALG, repr=False)
    distributions: DistributionProvider = field(default=DEFAULT_DISTRIBUTIONS, repr=False)

    def __post_init__(self) -> None:
        if self.species_names is not None and len(self.species_names) != self.parameters.n_species:
            raise ValueError("species_names must have one entry per species")
        self._builder = MasterOperatorBuilder(self.parameters, self.max_num, self.options.alpha)
        self._master: Optional[np.ndarray] = None

    @classmethod
    def from_network(
        cls,
        network: ReactionNetwork,
        max_num: int,
        values: Optional[Mapping[Union[sp.Symbol, str], float]] = None,
        **kwargs: Any,
    ) -> "MasterEquation":
        """Build from a `ReactionNetwork`, substituting ``values`` for its rate symbols."""
        kwargs.setdefault("species_names", network.names)
        return cls(network.to_parameters(values), max_num, **kwargs)

    @property
    def state_space(self) -> StateSpace:
        return self._builder.state_space

    def operator(self) -> Tuple[np.ndarray, StateSpace]:
        """Generator and state space (cached)."""
        if self._master is None:
            self._master, _ = self._builder.build()
        return self._master, self.state_space

    def _solver(self) -> SteadyStateSolver:
        return SteadyStateSolver(
            linalg=self.linalg,
            eigenvalue_tol=self.options.eigenvalue_tol,
            degeneracy_tol=self.options.degeneracy_tol,
        )

    def stationary_distribution(self) -> np.ndarray:
        master, _ = self.operator()
        return self._solver().stationary_distribution(master)

    def steady_state(self) -> np.ndarray:
        """Stationary mean copy number of each species."""
        master, space = self.operator()
        return self._solver().solve(master, space)

    def dynamics(self, tspan: Sequence[float], x0: Sequence[float]) -> Trajectory:
        master, space = self.operator()
        return dynamics(
            master,
            space,
            tspan,
            x0,
            linalg=self.linalg,
            distributions=self.distributions,
            check_stability=self.options.check_stability,
            truncation_tol=self.options.truncation_tol,
            species_names=self.species_names,
        )

    def mean(self, p: np.ndarray) -> np.ndarray:
        return mean_copy_numbers(p, self.state_space)

    def leakage_report(self, x0: Optional[Sequence[float]] = None) -> Dict[str, Any]:
        """Quantify what the truncation throws away.

        Returns
        -------
        dict with keys:
          - 'max_leak_rate': largest total rate of dropped jumps out of a state
          - 'stationary_leak_rate': dropped rate averaged over the stationary distribution
          - 'generator': output of `check_generator`
          - 'initial_mass': mass of the initial distribution for ``x0`` (if given)
        """
        master, space = self.operator()
        leak = self._builder.leakage()
        out: Dict[str, Any] = {
            "max_leak_rate": float(leak.max()) if leak.size else 0.0,
            "stationary_leak_rate": float(leak @ self.stationary_distribution()),
            "generator": check_generator(master),
        }
        if x0 is not None:
            out["initial_mass"] = float(
                initial_distribution(space, x0, distributions=self.distributions).sum()
            )
        return out
