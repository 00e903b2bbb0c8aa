"""Top-level package API for master_equation.

This package assembles the generator ("master operator") of the chemical
master equation of a stochastic mass-action reaction network truncated to a
finite box of copy numbers, and uses it to

- find the stationary distribution and stationary mean copy numbers, and
- integrate the probability distribution forward in time with explicit
  Euler steps, reporting the mean copy number of each species.

Public API:
- Reaction, ReactionNetwork, ReactionParser, ReactionParameters
- StateSpace, master_operator, steady_state, dynamics
- MasterEquation (cached facade) and MasterEquationOptions
- Built-in example networks
"""

from .diagnostics import NumericalStabilityWarning, TruncationWarning
from .reaction import Reaction, falling_factorial
from .network import ReactionNetwork
from .parser import ReactionParser
from .parameters import ReactionParameters
from .state_space import StateSpace, marginal_distribution, mean_copy_numbers
from .providers import (
    DistributionProvider,
    LinearAlgebraProvider,
    NumpyLinearAlgebra,
    ScipyDistributions,
    ScipyLinearAlgebra,
)
from .operator import (
    MasterOperatorBuilder,
    check_generator,
    master_operator,
    symbolic_master_operator,
    transitions,
)
from .steady_state import SteadyStateSolver, stationary_distribution, steady_state
from .dynamics import Trajectory, dynamics, initial_distribution
from .model import MasterEquation, MasterEquationOptions
from .report import (
    ReportOptions,
    format_generator_check,
    format_steady_state,
    format_trajectory,
)
from .examples import (
    birth_death_network,
    dimerization_network,
    gene_expression_network,
)

__all__ = [
    "NumericalStabilityWarning",
    "TruncationWarning",
    "Reaction",
    "falling_factorial",
    "ReactionNetwork",
    "ReactionParser",
    "ReactionParameters",
    "StateSpace",
    "marginal_distribution",
    "mean_copy_numbers",
    "DistributionProvider",
    "LinearAlgebraProvider",
    "NumpyLinearAlgebra",
    "ScipyDistributions",
    "ScipyLinearAlgebra",
    "MasterOperatorBuilder",
    "check_generator",
    "master_operator",
    "symbolic_master_operator",
    "transitions",
    "SteadyStateSolver",
    "stationary_distribution",
    "steady_state",
    "Trajectory",
    "dynamics",
    "initial_distribution",
    "MasterEquation",
    "MasterEquationOptions",
    "ReportOptions",
    "format_generator_check",
    "format_steady_state",
    "format_trajectory",
    "birth_death_network",
    "dimerization_network",
    "gene_expression_network",
]
