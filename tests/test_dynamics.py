import numpy as np
import pytest
from scipy.stats import poisson

from master_equation import (
    MasterEquation,
    MasterEquationOptions,
    NumericalStabilityWarning,
    ReactionParameters,
    ScipyDistributions,
    StateSpace,
    Trajectory,
    TruncationWarning,
    birth_death_network,
    dynamics,
    initial_distribution,
    master_operator,
)


class CountingDistributions(ScipyDistributions):
    def __init__(self):
        self.calls = []

    def poisson_pmf(self, k, mu):
        self.calls.append(mu)
        return super().poisson_pmf(k, mu)


def test_initial_distribution_is_product_poisson():
    space = StateSpace(n_species=2, max_num=6)
    dist = CountingDistributions()
    p0 = initial_distribution(space, [1.5, 0.5], distributions=dist)
    assert dist.calls == [1.5, 0.5]
    for state in [(0, 0), (2, 1), (6, 3)]:
        expected = poisson.pmf(state[0], 1.5) * poisson.pmf(state[1], 0.5)
        assert p0[space.index_of(state)] == pytest.approx(expected)


def test_initial_distribution_is_not_renormalized():
    space = StateSpace(n_species=1, max_num=5)
    p0 = initial_distribution(space, [5.0])
    assert p0.sum() == pytest.approx(poisson.cdf(5, 5.0))
    assert p0.sum() < 0.7


def test_zero_mean_gives_point_mass():
    space = StateSpace(n_species=2, max_num=3)
    p0 = initial_distribution(space, [0.0, 0.0])
    assert p0[0] == pytest.approx(1.0)
    assert p0[1:].sum() == pytest.approx(0.0)


@pytest.mark.parametrize("x0", [[1.0], [1.0, 2.0, 3.0], [-1.0, 1.0], [np.nan, 1.0]])
def test_initial_distribution_rejects_bad_means(x0):
    with pytest.raises(ValueError):
        initial_distribution(StateSpace(n_species=2, max_num=3), x0)


def test_first_mean_is_exactly_x0():
    M, space = master_operator(ReactionParameters.birth_death(2.0, 0.5), max_num=8)
    x0 = [3.7]
    traj = dynamics(M, space, np.linspace(0.0, 1.0, 11), x0)
    # the truncated product-Poisson mean differs from x0, the reported value does not
    assert traj.means[0, 0] == 3.7
    assert traj.means.shape == (1, 11)
    assert traj.time_grid.shape == (11,)


def test_stationary_start_stays_put():
    b, d = 2.0, 0.5
    M, space = master_operator(ReactionParameters.birth_death(b, d), max_num=30)
    tspan = np.linspace(0.0, 5.0, 501)
    traj = dynamics(M, space, tspan, [b / d])
    assert np.max(np.abs(traj.means[0] - b / d)) < 1e-4
    assert traj.final_distribution.sum() == pytest.approx(poisson.cdf(30, b / d))


def test_relaxation_follows_euler_recursion_for_the_mean():
    b, d = 2.0, 0.5
    M, space = master_operator(ReactionParameters.birth_death(b, d), max_num=30)
    dt = 0.01
    tspan = np.arange(0, 401) * dt
    traj = dynamics(M, space, tspan, [0.0])
    k = np.arange(tspan.size)
    euler = (b / d) * (1.0 - (1.0 - dt * d) ** k)
    np.testing.assert_allclose(traj.means[0], euler, atol=1e-6)
    exact = (b / d) * (1.0 - np.exp(-d * tspan))
    assert np.max(np.abs(traj.means[0] - exact)) < 0.01


def test_probability_mass_is_conserved():
    params = ReactionParameters(
        birth_rates=[1.0, 0.0],
        death_rates=[0.2, 0.5],
        interaction_rates=[0.3],
        reactants=[[2, 0]],
        products=[[0, 1]],
    )
    M, space = master_operator(params, max_num=6)
    traj = dynamics(M, space, np.linspace(0.0, 2.0, 201), [1.0, 0.5])
    p0 = initial_distribution(space, [1.0, 0.5])
    assert traj.final_distribution.sum() == pytest.approx(p0.sum())


def test_invalid_time_grids():
    M, space = master_operator(ReactionParameters.birth_death(1.0, 1.0), max_num=3)
    with pytest.raises(ValueError):
        dynamics(M, space, [0.0], [1.0])
    with pytest.raises(ValueError):
        dynamics(M, space, [0.0, 0.1, 0.1], [1.0])
    with pytest.raises(ValueError):
        dynamics(M, space, [1.0, 0.5], [1.0])
    with pytest.raises(ValueError):
        dynamics(M[:2, :2], space, [0.0, 0.1], [1.0])


def test_nonuniform_grid_warns():
    M, space = master_operator(ReactionParameters.birth_death(1.0, 1.0), max_num=3)
    with pytest.warns(NumericalStabilityWarning, match="uniformly"):
        dynamics(M, space, [0.0, 0.01, 0.03], [1.0])


def test_large_step_warns():
    M, space = master_operator(ReactionParameters.birth_death(1.0, 1.0), max_num=10)
    with pytest.warns(NumericalStabilityWarning, match="dt="):
        dynamics(M, space, np.linspace(0.0, 5.0, 6), [1.0])


def test_trajectory_is_read_only():
    M, space = master_operator(ReactionParameters.birth_death(1.0, 1.0), max_num=3)
    traj = dynamics(M, space, [0.0, 0.1, 0.2], [1.0])
    with pytest.raises(ValueError):
        traj.means[0, 0] = 5.0
    with pytest.raises(AttributeError):
        traj.means = None


def test_facade_dynamics_and_truncation_warning():
    model = MasterEquation.from_network(
        birth_death_network(),
        max_num=6,
        values={"b": 6.0, "d": 1.0},
        options=MasterEquationOptions(truncation_tol=1e-3),
    )
    with pytest.warns(TruncationWarning):
        traj = model.dynamics(np.linspace(0.0, 0.5, 51), [6.0])
    assert traj.species_names == ["X"]
    np.testing.assert_array_equal(traj.species("X"), traj.means[0])

    report = model.leakage_report(x0=[6.0])
    assert report["max_leak_rate"] == pytest.approx(6.0)
    assert report["generator"]["is_valid"]
    assert report["initial_mass"] < 1.0


def test_initial_mass_underflow_gives_nan_means_with_warning():
    M, space = master_operator(ReactionParameters.birth_death(1.0, 1.0), max_num=5)
    with pytest.warns(TruncationWarning, match="no mass"):
        traj = dynamics(M, space, np.linspace(0.0, 0.1, 3), [800.0])
    assert traj.means[0, 0] == 800.0
    assert np.all(np.isnan(traj.means[:, 1:]))
    assert not np.any(traj.final_distribution)

    model = MasterEquation.from_network(
        birth_death_network(), max_num=5, values={"b": 1.0, "d": 1.0}
    )
    with pytest.warns(TruncationWarning, match="no mass"):
        traj = model.dynamics(np.linspace(0.0, 0.1, 3), [800.0])
    assert np.all(np.isnan(traj.means[:, 1:]))


def test_trajectory_leaves_caller_arrays_writable():
    t = np.linspace(0.0, 1.0, 3)
    means = np.zeros((1, 3))
    traj = Trajectory(time_grid=t, means=means)
    t[0] = 5.0
    means[0, 0] = 1.0
    assert traj.time_grid[0] == 0.0
    assert traj.means[0, 0] == 0.0
    with pytest.raises(ValueError):
        traj.time_grid[0] = 5.0
