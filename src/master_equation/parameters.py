from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Union

import numpy as np
import sympy as sp

if TYPE_CHECKING:
    from .network import ReactionNetwork


def _as_rate_vector(values: Any, name: str) -> np.ndarray:
    """Float array if every rate is numeric, object array of SymPy expressions otherwise."""
    if np.ndim(values) != 1:
        raise ValueError(f"{name} must be a 1-D vector; got {values!r}")
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError):
        arr = np.empty(len(values), dtype=object)
        arr[:] = [sp.sympify(v) for v in values]
    if arr.ndim != 1:
        raise ValueError(f"{name} must be a 1-D vector; got shape {arr.shape}")
    return arr


def _as_stoichiometry(values: Any, name: str, n_channels: int, n_species: int) -> np.ndarray:
    arr = np.asarray(values)
    if arr.size == 0:
        arr = arr.reshape(0, n_species)
    if arr.shape != (n_channels, n_species):
        raise ValueError(f"{name} must have shape ({n_channels}, {n_species}); got {arr.shape}")
    if arr.size and not np.all(np.equal(np.mod(arr, 1), 0)):
        raise ValueError(f"{name} entries must be integers")
    arr = arr.astype(np.int64)
    if np.any(arr < 0):
        raise ValueError(f"{name} entries must be nonnegative")
    return arr


def _numeric_if_possible(exprs: Sequence[sp.Expr]) -> Union[List[float], List[sp.Expr]]:
    exprs = [sp.sympify(e) for e in exprs]
    if all(not e.free_symbols for e in exprs):
        return [float(e) for e in exprs]
    return exprs


@dataclass
class ReactionParameters:
    """Rate constants and stoichiometry of a truncated stochastic network.

    Parameters
    ----------
    birth_rates:
        Constant production rate of each species (channels ``0 -> X_j``).
    death_rates:
        Per-molecule degradation rate of each species (channels ``X_j -> 0``).
    interaction_rates:
        Rate constant of each remaining reaction channel.
    reactants:
        Reactant stoichiometry R, shape (channels, species).
    products:
        Product stoichiometry S, shape (channels, species).

    Notes
    -----
    Rates may be numbers or SymPy expressions; symbolic rates are kept in
    object arrays and only the symbolic operator builder accepts them.
    Negative rates are accepted and simply give a nonphysical generator.
    """

    birth_rates: Any
    death_rates: Any
    interaction_rates: Any = ()
    reactants: Any = ()
    products: Any = ()

    def __post_init__(self) -> None:
        self.birth_rates = _as_rate_vector(self.birth_rates, "birth_rates")
        self.death_rates = _as_rate_vector(self.death_rates, "death_rates")
        self.interaction_rates = _as_rate_vector(self.interaction_rates, "interaction_rates")

        n = self.birth_rates.shape[0]
        if n == 0:
            raise ValueError("birth_rates must not be empty (one entry per species)")
        if self.death_rates.shape[0] != n:
            raise ValueError(
                f"death_rates has {self.death_rates.shape[0]} entries but birth_rates has {n}"
            )
        c = self.interaction_rates.shape[0]
        self.reactants = _as_stoichiometry(self.reactants, "reactants", c, n)
        self.products = _as_stoichiometry(self.products, "products", c, n)

    @property
    def n_species(self) -> int:
        return int(self.birth_rates.shape[0])

    @property
    def n_channels(self) -> int:
        return int(self.interaction_rates.shape[0])

    @property
    def is_symbolic(self) -> bool:
        return any(
            v.dtype == object for v in (self.birth_rates, self.death_rates, self.interaction_rates)
        )

    def subs(self, values: Mapping[Union[sp.Symbol, str], float]) -> "ReactionParameters":
        """Substitute numbers for rate symbols (matched by name)."""
        by_name = {}
        for v in (self.birth_rates, self.death_rates, self.interaction_rates):
            if v.dtype == object:
                for e in v:
                    by_name.update({str(s): s for s in e.free_symbols})
        subs = {}
        for key, val in values.items():
            if str(key) not in by_name:
                raise ValueError(f"Unknown rate constant '{key}'. Known: {sorted(by_name)}")
            subs[by_name[str(key)]] = val

        def _sub(v: np.ndarray) -> Any:
            if v.dtype != object:
                return v
            return _numeric_if_possible([e.subs(subs) for e in v])

        return ReactionParameters(
            birth_rates=_sub(self.birth_rates),
            death_rates=_sub(self.death_rates),
            interaction_rates=_sub(self.interaction_rates),
            reactants=self.reactants,
            products=self.products,
        )

    # -----------------------------
    # Constructors
    # -----------------------------

    @classmethod
    def from_network(
        cls,
        network: "ReactionNetwork",
        values: Optional[Mapping[Union[sp.Symbol, str], float]] = None,
    ) -> "ReactionParameters":
        """Split a `ReactionNetwork` into birth, death and interaction channels.

        ``0 -> X_j`` reactions are added to ``birth_rates[j]`` and ``X_j -> 0``
        reactions to ``death_rates[j]``; every other reaction becomes an
        interaction channel. With ``values`` the rate symbols are replaced by
        numbers, and every symbol must then receive a value.
        """
        from .network import rate_values_by_symbol  # local import to avoid circular import

        subs = rate_values_by_symbol(network, values) if values is not None else {}

        n = network.n_species
        birth: List[sp.Expr] = [sp.Integer(0)] * n
        death: List[sp.Expr] = [sp.Integer(0)] * n
        interaction: List[sp.Expr] = []
        reactants: List[Sequence[int]] = []
        products: List[Sequence[int]] = []

        for r in network.reactions:
            rate = sp.sympify(r.rate).subs(subs)
            j_birth = r.birth_species()
            j_death = r.death_species()
            if j_birth is not None:
                birth[j_birth] = birth[j_birth] + rate
            elif j_death is not None:
                death[j_death] = death[j_death] + rate
            else:
                interaction.append(rate)
                reactants.append(r.reactants)
                products.append(r.products)

        if values is not None:
            missing = set()
            for e in birth + death + interaction:
                missing |= {str(s) for s in sp.sympify(e).free_symbols}
            if missing:
                raise ValueError(f"No value given for rate constant(s): {sorted(missing)}")

        return cls(
            birth_rates=_numeric_if_possible(birth),
            death_rates=_numeric_if_possible(death),
            interaction_rates=_numeric_if_possible(interaction) if interaction else [],
            reactants=np.array(reactants, dtype=np.int64).reshape(-1, n),
            products=np.array(products, dtype=np.int64).reshape(-1, n),
        )

    @classmethod
    def birth_death(cls, birth_rate: float, death_rate: float) -> "ReactionParameters":
        """Single species with ``0 -> X`` at ``birth_rate`` and ``X -> 0`` at ``death_rate``."""
        return cls(birth_rates=[birth_rate], death_rates=[death_rate])
