from __future__ import annotations

import itertools
from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Sequence, Tuple

import numpy as np


State = Tuple[int, ...]


@dataclass(frozen=True)
class StateSpace:
    """Truncated copy-number state space ``[0, max_num]^n_species``.

    Parameters
    ----------
    n_species:
        Number of species (>= 1).
    max_num:
        Truncation bound; every copy number lies in ``0..max_num``.

    Notes
    -----
    States are ordered as produced by ``itertools.product`` over the species
    ranges, i.e. lexicographically with the last species varying fastest.
    The position of a state is therefore the mixed-radix number

        index(s) = Σ_j s_j * (max_num+1)^(n_species-1-j)

    and :meth:`index_of` evaluates it directly. This ordering is shared by the
    rows/columns of every master operator and by every probability vector.
    """

    n_species: int
    max_num: int

    def __post_init__(self) -> None:
        if int(self.n_species) != self.n_species or self.n_species < 1:
            raise ValueError(f"n_species must be a positive integer; got {self.n_species!r}")
        if int(self.max_num) != self.max_num or self.max_num < 0:
            raise ValueError(f"max_num must be a nonnegative integer; got {self.max_num!r}")

    @property
    def base(self) -> int:
        """Number of copy-number values per species."""
        return self.max_num + 1

    @property
    def size(self) -> int:
        return self.base ** self.n_species

    @cached_property
    def strides(self) -> np.ndarray:
        """Index increment caused by adding one molecule of each species."""
        return np.array(
            [self.base ** (self.n_species - 1 - j) for j in range(self.n_species)],
            dtype=np.int64,
        )

    @cached_property
    def states(self) -> np.ndarray:
        """All states as a ``size × n_species`` integer array, in index order."""
        ranges = [range(self.base)] * self.n_species
        arr = np.array(list(itertools.product(*ranges)), dtype=np.int64)
        arr.setflags(write=False)
        return arr

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[State]:
        return itertools.product(*([range(self.base)] * self.n_species))

    def __contains__(self, state: object) -> bool:
        try:
            return self.contains(state)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False

    def contains(self, state: Sequence[int]) -> bool:
        if len(state) != self.n_species:
            return False
        return all(int(c) == c and 0 <= c <= self.max_num for c in state)

    def index_of(self, state: Sequence[int]) -> int:
        """Return the position of ``state``."""
        if len(state) != self.n_species:
            raise ValueError(f"state must have length {self.n_species}; got {len(state)}")
        idx = 0
        for c in state:
            if int(c) != c:
                raise ValueError(f"state coordinates must be integers; got {tuple(state)}")
            c = int(c)
            if not (0 <= c <= self.max_num):
                raise ValueError(f"state {tuple(state)} lies outside [0, {self.max_num}]^{self.n_species}")
            idx = idx * self.base + c
        return idx

    def state_at(self, index: int) -> State:
        """Inverse of :meth:`index_of`."""
        index = int(index)
        if not (0 <= index < self.size):
            raise ValueError(f"index must lie in [0, {self.size - 1}]; got {index}")
        out = []
        for _ in range(self.n_species):
            index, c = divmod(index, self.base)
            out.append(c)
        return tuple(reversed(out))

    # Vectorized counterparts used by the operator builder.

    def rows_inside(self, rows: np.ndarray) -> np.ndarray:
        """Boolean mask of the rows of ``rows`` (k × n_species) lying in the box."""
        rows = np.asarray(rows)
        return np.all((rows >= 0) & (rows <= self.max_num), axis=1)

    def indices_of(self, rows: np.ndarray) -> np.ndarray:
        """Positions of the rows of ``rows``; rows must lie inside the box."""
        return np.asarray(rows, dtype=np.int64) @ self.strides


def mean_copy_numbers(p: np.ndarray, state_space: StateSpace) -> np.ndarray:
    """Mean copy number of each species under the weights ``|p| / Σ|p|``.

    The absolute value makes the result well defined for eigenvectors of
    arbitrary sign and for Euler iterates that picked up small negative
    entries.
    """
    w = np.abs(np.asarray(p))
    if w.shape != (state_space.size,):
        raise ValueError(f"p must have length {state_space.size}; got shape {w.shape}")
    total = w.sum()
    if total == 0:
        raise ValueError("p has zero total mass")
    return state_space.states.T @ (w / total)


def marginal_distribution(p: np.ndarray, state_space: StateSpace, species: int) -> np.ndarray:
    """Marginal probabilities of ``species`` over ``0..max_num`` (not renormalized)."""
    if not (0 <= species < state_space.n_species):
        raise ValueError(f"species index out of range: {species}")
    p = np.asarray(p, dtype=float)
    return np.bincount(state_space.states[:, species], weights=p, minlength=state_space.base)
