from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import sympy as sp


def falling_factorial(n, k: int):
    """Return n (n-1) ... (n-k+1), the number of ordered picks of k out of n.

    Works elementwise on NumPy arrays. For integer n < k one factor is zero,
    so the count vanishes as it should.
    """
    out = 1
    for p in range(int(k)):
        out = out * (n - p)
    return out


def _unit_index(coeffs: Sequence[int]) -> Optional[int]:
    """Index j if ``coeffs`` is the unit vector e_j, else None."""
    nz = [i for i, c in enumerate(coeffs) if int(c) != 0]
    if len(nz) == 1 and int(coeffs[nz[0]]) == 1:
        return nz[0]
    return None


@dataclass(frozen=True)
class Reaction:
    """A single stochastic mass-action reaction channel.

    Parameters
    ----------
    reactants:
        Stoichiometric coefficients of the reactant complex (length n).
    products:
        Stoichiometric coefficients of the product complex (length n).
    rate:
        Rate constant, a SymPy symbol/expression or a number.

    Notes
    -----
    In state x (copy numbers) the channel fires with propensity

        rate * prod_i x_i (x_i - 1) ... (x_i - m_i + 1)

    and moves the system to x + (r - m), where m are the reactant and r the
    product coefficients.
    """

    reactants: Tuple[int, ...]
    products: Tuple[int, ...]
    rate: sp.Expr

    def __post_init__(self) -> None:
        if len(self.reactants) != len(self.products):
            raise ValueError("reactants and products must have the same length")
        if any(int(c) < 0 for c in self.reactants) or any(int(c) < 0 for c in self.products):
            raise ValueError("stoichiometric coefficients must be nonnegative integers")

    @property
    def n_species(self) -> int:
        return len(self.reactants)

    def state_change(self) -> Tuple[int, ...]:
        """Net change r - m of the copy numbers when the channel fires."""
        return tuple(int(p) - int(r) for r, p in zip(self.reactants, self.products))

    def combinations(self, state: Sequence[int]) -> int:
        """Number of distinct reactant combinations available in ``state``."""
        if len(state) != self.n_species:
            raise ValueError("state must have length n_species")
        out = 1
        for x, m in zip(state, self.reactants):
            out *= falling_factorial(int(x), int(m))
        return out

    def propensity(self, state: Sequence[int]) -> sp.Expr:
        return self.rate * self.combinations(state)

    def birth_species(self) -> Optional[int]:
        """Species j if this is a constant-rate birth 0 -> X_j."""
        if any(int(c) for c in self.reactants):
            return None
        return _unit_index(self.products)

    def death_species(self) -> Optional[int]:
        """Species j if this is a first-order death X_j -> 0."""
        if any(int(c) for c in self.products):
            return None
        return _unit_index(self.reactants)

    @staticmethod
    def from_coeff_vectors(
        reactants: Iterable[int],
        products: Iterable[int],
        rate: sp.Expr,
    ) -> "Reaction":
        return Reaction(tuple(int(c) for c in reactants), tuple(int(c) for c in products), rate)
