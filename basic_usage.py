#!/usr/bin/env python3
"""
Basic Usage Examples for the master_equation package

This script demonstrates the core features of the package with simple,
self-contained examples.
"""

import numpy as np

from master_equation import (
    MasterEquation,
    ReactionNetwork,
    ReactionParameters,
    StateSpace,
    check_generator,
    dynamics,
    format_steady_state,
    format_trajectory,
    gene_expression_network,
    master_operator,
    steady_state,
    ReportOptions,
)


def example_1_string_parser():
    """Build a network from reaction strings."""
    print("\n" + "=" * 50)
    print("Example 1: Creating Networks from Strings")
    print("=" * 50)

    network = ReactionNetwork.from_string("""
        0 ->[b] A
        A ->[d] 0
        2A <->[k1][km1] B
    """)
    print(network.summary())

    params = network.to_parameters({"b": 2.0, "d": 0.5, "k1": 0.1, "km1": 1.0})
    print(f"\nBirth rates:       {params.birth_rates}")
    print(f"Death rates:       {params.death_rates}")
    print(f"Interaction rates: {params.interaction_rates}")


def example_2_state_space():
    """Indexing of the truncated state space."""
    print("\n" + "=" * 50)
    print("Example 2: Truncated State Space")
    print("=" * 50)

    space = StateSpace(n_species=2, max_num=2)
    for i, state in enumerate(space):
        print(f"  index {i}: {state}  (index_of -> {space.index_of(state)})")


def example_3_birth_death():
    """Steady state of a birth-death process."""
    print("\n" + "=" * 50)
    print("Example 3: Birth-Death Steady State")
    print("=" * 50)

    params = ReactionParameters.birth_death(birth_rate=3.0, death_rate=0.5)
    master, space = master_operator(params, max_num=40)
    print(f"Generator check: {check_generator(master)}")
    print(f"Stationary mean: {steady_state(master, space)[0]:.6f} (exact 6.0)")

    tspan = np.linspace(0.0, 10.0, 1001)
    traj = dynamics(master, space, tspan, x0=[0.0])
    print(format_trajectory(traj, options=ReportOptions(every=100)))


def example_4_gene_expression():
    """Two-species model through the MasterEquation facade."""
    print("\n" + "=" * 50)
    print("Example 4: Gene Expression")
    print("=" * 50)

    net = gene_expression_network()
    model = MasterEquation.from_network(
        net, max_num=30, values={"kM": 2.0, "gM": 1.0, "kP": 2.0, "gP": 0.5}
    )
    print(format_steady_state(model.steady_state(), net.names))
    print("Expected: M = 2, P = 8")


if __name__ == "__main__":
    example_1_string_parser()
    example_2_state_space()
    example_3_birth_death()
    example_4_gene_expression()
