from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

import numpy as np
import sympy as sp

from .parameters import ReactionParameters
from .reaction import falling_factorial
from .state_space import StateSpace

logger = logging.getLogger(__name__)


def _channel_blocks(
    parameters: ReactionParameters,
    space: StateSpace,
    alpha: Any,
) -> Iterator[Tuple[str, int, np.ndarray, np.ndarray]]:
    """Yield ``(kind, channel, state_change, rates)`` for every reaction channel.

    ``rates`` holds the propensity of the channel in every state of ``space``
    (in index order), whether or not the target state lies in the box.
    """
    n = parameters.n_species
    counts = space.states.astype(object) if parameters.is_symbolic else space.states

    for j in range(n):
        delta = np.zeros(n, dtype=np.int64)
        delta[j] = -1
        yield "death", j, delta, counts[:, j] * parameters.death_rates[j]

        delta = np.zeros(n, dtype=np.int64)
        delta[j] = 1
        yield "birth", j, delta, np.ones_like(counts[:, j]) * parameters.birth_rates[j]

    for beta in range(parameters.n_channels):
        combos = np.ones_like(counts[:, 0])
        for m in range(n):
            combos = combos * falling_factorial(counts[:, m], parameters.reactants[beta, m])
        delta = parameters.products[beta] - parameters.reactants[beta]
        yield "interaction", beta, delta, combos * (alpha * parameters.interaction_rates[beta])


def transitions(
    parameters: ReactionParameters,
    space: StateSpace,
    alpha: Any = 1.0,
) -> Iterator[Tuple[np.ndarray, np.ndarray, np.ndarray]]:
    """Yield ``(targets, sources, rates)`` index/rate arrays, one block per channel.

    Only transitions with a nonzero rate whose target lies inside the
    truncation box are reported. Channels that leave the state unchanged
    are skipped since they do not enter the generator.
    """
    sources = np.arange(space.size)
    for _kind, _channel, delta, rates in _channel_blocks(parameters, space, alpha):
        if not np.any(delta):
            continue
        target_states = space.states + delta
        keep = space.rows_inside(target_states) & np.asarray(rates != 0, dtype=bool)
        yield space.indices_of(target_states[keep]), sources[keep], rates[keep]


@dataclass
class MasterOperatorBuilder:
    """Assemble the generator of the truncated chemical master equation.

    Parameters
    ----------
    parameters:
        Rates and stoichiometry of the network.
    max_num:
        Truncation bound for every species.
    alpha:
        Plefka expansion parameter multiplying the interaction channels.

    Notes
    -----
    Entry ``[t, s]`` of the generator is the rate of the jump s -> t, so the
    probability vector evolves as dP/dt = M P. Jumps leaving the box are
    dropped without renormalization; the diagonal is set once at the end to
    minus the off-diagonal column sum, so every column sums to zero.
    """

    parameters: ReactionParameters
    max_num: int
    alpha: float = 1.0

    def __post_init__(self) -> None:
        self.state_space = StateSpace(self.parameters.n_species, self.max_num)

    def build(self) -> Tuple[np.ndarray, StateSpace]:
        if self.parameters.is_symbolic:
            raise ValueError(
                "parameters contain symbolic rates; substitute values with "
                "ReactionParameters.subs() or use symbolic_master_operator()"
            )
        space = self.state_space
        logger.debug(
            "assembling master operator: %d species, max_num=%d, %d states, %d interaction channels",
            space.n_species,
            space.max_num,
            space.size,
            self.parameters.n_channels,
        )

        master = np.zeros((space.size, space.size))
        for targets, sources, rates in transitions(self.parameters, space, self.alpha):
            np.add.at(master, (targets, sources), rates)

        np.fill_diagonal(master, 0.0)
        np.fill_diagonal(master, -master.sum(axis=0))
        return master, space

    def build_symbolic(self) -> sp.Matrix:
        """Same construction with SymPy entries (small state spaces only)."""
        space = self.state_space
        master = sp.zeros(space.size, space.size)
        for targets, sources, rates in transitions(self.parameters, space, self.alpha):
            for t, s, r in zip(targets, sources, rates):
                master[int(t), int(s)] += r
        for i in range(space.size):
            master[i, i] = -sum((master[k, i] for k in range(space.size) if k != i), sp.Integer(0))
        return master

    def leakage(self) -> np.ndarray:
        """Total rate, per state, of the jumps dropped because they leave the box."""
        space = self.state_space
        out = np.zeros(space.size)
        for _kind, _channel, delta, rates in _channel_blocks(self.parameters, space, self.alpha):
            outside = ~space.rows_inside(space.states + delta)
            out[outside] += np.asarray(rates[outside], dtype=float)
        return out


def master_operator(
    parameters: ReactionParameters,
    max_num: int,
    alpha: float = 1.0,
) -> Tuple[np.ndarray, StateSpace]:
    """Return ``(generator, state_space)`` of the network truncated at ``max_num``."""
    return MasterOperatorBuilder(parameters, max_num, alpha).build()


def symbolic_master_operator(
    parameters: ReactionParameters,
    max_num: int,
    alpha: Any = 1,
) -> Tuple[sp.Matrix, StateSpace]:
    """Return the generator as a SymPy matrix in the rate symbols.

    ``alpha`` may itself be a symbol to expose the Plefka expansion order.
    """
    builder = MasterOperatorBuilder(parameters, max_num, alpha)
    return builder.build_symbolic(), builder.state_space


def check_generator(master: np.ndarray, atol: float = 1e-10) -> Dict[str, Any]:
    """Check the generator property: zero column sums and nonnegative off-diagonals."""
    master = np.asarray(master, dtype=float)
    if master.ndim != 2 or master.shape[0] != master.shape[1]:
        raise ValueError(f"master must be a square matrix; got shape {master.shape}")
    off = master - np.diag(np.diag(master))
    column_sum_error = float(np.max(np.abs(master.sum(axis=0)))) if master.size else 0.0
    min_offdiagonal = float(np.min(off)) if master.size else 0.0
    return {
        "column_sum_error": column_sum_error,
        "min_offdiagonal": min_offdiagonal,
        "is_valid": column_sum_error <= atol and min_offdiagonal >= -atol,
    }
