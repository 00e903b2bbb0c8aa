"""Symbolic master operator with an explicit Plefka parameter alpha.

For a tiny state space the generator can be built with SymPy entries, which
makes the order in alpha of every interaction term visible.

Run:
    python examples/plefka_expansion.py
"""

from __future__ import annotations

import numpy as np
import sympy as sp

from master_equation import dimerization_network, master_operator, steady_state, symbolic_master_operator


def main() -> None:
    net = dimerization_network()
    alpha = sp.Symbol("alpha")

    M, space = symbolic_master_operator(net.to_parameters(), max_num=1, alpha=alpha)
    print("States:", list(space))
    sp.pprint(M)

    values = {"b": 2.0, "d": 1.0, "k1": 0.5, "km1": 0.3, "dB": 0.4}
    params = net.to_parameters(values)
    print("\nalpha   <A>       <B>")
    for a in np.linspace(0.0, 1.0, 6):
        master, space = master_operator(params, max_num=12, alpha=a)
        mean = steady_state(master, space)
        print(f"{a:5.2f}   {mean[0]:.5f}   {mean[1]:.5f}")


if __name__ == "__main__":
    main()
