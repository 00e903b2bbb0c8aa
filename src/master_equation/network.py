from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Union

import numpy as np
import sympy as sp

from .reaction import Reaction
from .parser import ReactionParser


@dataclass
class ReactionNetwork:
    """A stochastic mass-action reaction network.

    Parameters
    ----------
    n_species:
        Number of species.
    reactions:
        List of `Reaction` objects.
    species_names:
        Optional list of length n with species names.

    Notes
    -----
    The network is a symbolic description. Turn it into the numeric input of
    the master operator with :meth:`to_parameters`, which splits the channels
    into births ``0 -> X_j``, deaths ``X_j -> 0`` and general interactions.
    """

    n_species: int
    reactions: List[Reaction]
    species_names: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if self.n_species <= 0:
            raise ValueError("n_species must be positive")
        if any(r.n_species != self.n_species for r in self.reactions):
            raise ValueError("all reactions must use the same n_species")
        if self.species_names is not None:
            if len(self.species_names) != self.n_species:
                raise ValueError("species_names must have length n_species")
            if len(set(self.species_names)) != self.n_species:
                raise ValueError("species_names must be unique")

    @property
    def names(self) -> List[str]:
        """Species names, falling back to X1, X2, ..."""
        if self.species_names is not None:
            return list(self.species_names)
        return [f"X{i+1}" for i in range(self.n_species)]

    @property
    def rate_constants(self) -> List[sp.Symbol]:
        """Unique rate symbols appearing in the reaction list (in order of appearance)."""
        seen = set()
        out: List[sp.Symbol] = []
        for r in self.reactions:
            for sym in sorted(sp.sympify(r.rate).free_symbols, key=str):
                if sym not in seen:
                    seen.add(sym)
                    out.append(sym)
        return out

    def reactant_matrix(self) -> np.ndarray:
        """Reactant stoichiometry, one row per reaction (c × n)."""
        return np.array([r.reactants for r in self.reactions], dtype=np.int64).reshape(-1, self.n_species)

    def product_matrix(self) -> np.ndarray:
        """Product stoichiometry, one row per reaction (c × n)."""
        return np.array([r.products for r in self.reactions], dtype=np.int64).reshape(-1, self.n_species)

    def stoichiometric_matrix(self) -> np.ndarray:
        """Net state change of each reaction (c × n)."""
        return self.product_matrix() - self.reactant_matrix()

    def to_parameters(self, values: Optional[Mapping[Union[sp.Symbol, str], float]] = None):
        """Return the `ReactionParameters` of this network (see there)."""
        from .parameters import ReactionParameters  # local import to avoid circular import

        return ReactionParameters.from_network(self, values)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = []
        lines.append(f"ReactionNetwork(n_species={self.n_species}, n_reactions={len(self.reactions)})")
        lines.append("Species: " + ", ".join(self.names))
        lines.append("Rate constants: " + ", ".join(str(k) for k in self.rate_constants))
        for r in self.reactions:
            lines.append(f"  {self._complex_to_str(r.reactants)} -> {self._complex_to_str(r.products)}  [{r.rate}]")
        return "\n".join(lines)

    def reactions_to_latex(self) -> str:
        """Export the reaction channels to a LaTeX ``align`` environment."""
        lines = []
        for r in self.reactions:
            lhs = self._complex_to_str(r.reactants, empty="\\varnothing")
            rhs = self._complex_to_str(r.products, empty="\\varnothing")
            lines.append(f"{lhs} &\\xrightarrow{{{sp.latex(r.rate)}}} {rhs}")
        body = " \\\\\n".join(lines)
        return "\\begin{align}\n" + body + "\n\\end{align}"

    def _complex_to_str(self, coeffs: Sequence[int], empty: str = "0") -> str:
        terms = []
        for name, c in zip(self.names, coeffs):
            c = int(c)
            if c == 1:
                terms.append(name)
            elif c > 1:
                terms.append(f"{c}{name}")
        return " + ".join(terms) if terms else empty

    # -----------------------------
    # Constructors
    # -----------------------------

    @classmethod
    def from_string(
        cls,
        text: str,
        species_names: Optional[Sequence[str]] = None,
        rate_prefix: str = "k",
    ) -> "ReactionNetwork":
        """Parse a reaction network from a multi-line string.

        Parameters
        ----------
        text:
            Reaction lines separated by newlines or semicolons, e.g.::

                0 ->[b] A
                A ->[d] 0
                2A ->[k] B

        species_names:
            Optional explicit ordering of species (sorted names otherwise).
        rate_prefix:
            Prefix used when auto-generating rate constants.
        """
        parser = ReactionParser(rate_prefix=rate_prefix)
        return parser.parse_network(text=text, species_names=species_names)


def rate_values_by_symbol(
    network: ReactionNetwork,
    values: Mapping[Union[sp.Symbol, str], float],
) -> Dict[sp.Symbol, float]:
    """Normalize a mapping keyed by symbols or symbol names to the network's symbols.

    Keys are matched by name, so ``Symbol("k")`` finds the parser's
    ``Symbol("k", positive=True)``.
    """
    by_name = {str(s): s for s in network.rate_constants}
    out: Dict[sp.Symbol, float] = {}
    for key, val in values.items():
        if str(key) not in by_name:
            raise ValueError(f"Unknown rate constant '{key}'. Known: {list(by_name)}")
        out[by_name[str(key)]] = val
    return out
