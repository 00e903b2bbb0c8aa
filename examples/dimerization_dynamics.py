"""Monomer/dimer network: relaxation of the means towards the steady state.

Network (species A, B):
    0 -> A, A -> 0, 2A <-> B, B -> 0

Run:
    python examples/dimerization_dynamics.py
"""

from __future__ import annotations

import numpy as np

from master_equation import (
    MasterEquation,
    ReportOptions,
    dimerization_network,
    format_steady_state,
    format_trajectory,
)


def main() -> None:
    net = dimerization_network()
    values = {"b": 4.0, "d": 0.5, "k1": 0.1, "km1": 0.5, "dB": 0.2}
    model = MasterEquation.from_network(net, max_num=20, values=values)

    master, space = model.operator()
    print(net.summary())
    print(f"\nState space: {space.size} states, generator {master.shape}")

    # dt well below 1 / max|diag(M)|
    dt = 0.5 / float(np.max(np.abs(np.diag(master))))
    tspan = np.arange(0, 2001) * dt
    traj = model.dynamics(tspan, x0=[0.0, 0.0])

    print("\nMean copy numbers:")
    print(format_trajectory(traj, options=ReportOptions(every=200)))

    print()
    print(format_steady_state(model.steady_state(), net.names))


if __name__ == "__main__":
    main()
