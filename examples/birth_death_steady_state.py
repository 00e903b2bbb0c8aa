"""Linear birth-death process: stationary mean versus truncation bound.

The exact stationary distribution is Poisson(b/d). This script shows how the
truncated master equation approaches b/d as max_num grows.

Run:
    python examples/birth_death_steady_state.py
"""

from __future__ import annotations

from master_equation import MasterEquation, birth_death_network, format_generator_check


def main() -> None:
    net = birth_death_network()
    values = {"b": 5.0, "d": 1.0}
    exact = values["b"] / values["d"]

    print(net.summary())
    print(f"\nExact stationary mean: {exact}")
    print("\nmax_num   mean        error       stationary leak rate")
    for max_num in (4, 6, 8, 12, 16, 25):
        model = MasterEquation.from_network(net, max_num=max_num, values=values)
        mean = model.steady_state()[0]
        leak = model.leakage_report()
        print(f"{max_num:7d}   {mean:.8f}  {abs(mean - exact):.3e}   {leak['stationary_leak_rate']:.3e}")

    master, _ = model.operator()
    print("\n" + format_generator_check(model.leakage_report()["generator"]))
    print(f"Generator shape: {master.shape}")


if __name__ == "__main__":
    main()
