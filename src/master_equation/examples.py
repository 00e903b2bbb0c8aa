from __future__ import annotations

import sympy as sp

from .reaction import Reaction
from .network import ReactionNetwork


def birth_death_network() -> ReactionNetwork:
    """Linear birth-death process.

    Network:
        0 -> X   (rate b)
        X -> 0   (rate d, per molecule)

    The stationary distribution is Poisson with mean b/d.
    """
    b, d = sp.symbols("b d", positive=True)
    return ReactionNetwork(
        n_species=1,
        reactions=[Reaction((0,), (1,), b), Reaction((1,), (0,), d)],
        species_names=["X"],
    )


def dimerization_network() -> ReactionNetwork:
    """Monomer production and decay with reversible dimerization.

    Network:
        0 -> A        (b)
        A -> 0        (d)
        2A -> B       (k1)
        B -> 2A       (km1)
        B -> 0        (dB)

    Species order: [A, B]
    """
    b, d, k1, km1, dB = sp.symbols("b d k1 km1 dB", positive=True)
    return ReactionNetwork(
        n_species=2,
        reactions=[
            Reaction((0, 0), (1, 0), b),
            Reaction((1, 0), (0, 0), d),
            Reaction((2, 0), (0, 1), k1),
            Reaction((0, 1), (2, 0), km1),
            Reaction((0, 1), (0, 0), dB),
        ],
        species_names=["A", "B"],
    )


def gene_expression_network() -> ReactionNetwork:
    """Two-stage gene expression (mRNA M, protein P).

    Network:
        0 -> M        (kM)
        M -> 0        (gM)
        M -> M + P    (kP)
        P -> 0        (gP)

    Stationary means: <M> = kM/gM, <P> = kP kM / (gM gP).
    """
    kM, gM, kP, gP = sp.symbols("kM gM kP gP", positive=True)
    return ReactionNetwork(
        n_species=2,
        reactions=[
            Reaction((0, 0), (1, 0), kM),
            Reaction((1, 0), (0, 0), gM),
            Reaction((1, 0), (1, 1), kP),
            Reaction((0, 1), (0, 0), gP),
        ],
        species_names=["M", "P"],
    )
