import itertools

import numpy as np
import pytest

from master_equation import StateSpace, marginal_distribution, mean_copy_numbers


def test_size_and_bijection():
    space = StateSpace(n_species=3, max_num=4)
    assert len(space) == 5 ** 3
    assert space.states.shape == (125, 3)
    for i in range(space.size):
        assert space.index_of(space.state_at(i)) == i
    for s in itertools.product(range(5), repeat=3):
        assert space.state_at(space.index_of(s)) == s


def test_order_is_lexicographic_with_last_species_fastest():
    space = StateSpace(n_species=2, max_num=2)
    assert list(space) == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (1, 2), (2, 0), (2, 1), (2, 2)]
    assert [tuple(row) for row in space.states] == list(space)
    assert space.index_of((1, 0)) == 3
    assert list(space.strides) == [3, 1]


def test_vectorized_indices_match_scalar_indexing():
    space = StateSpace(n_species=2, max_num=3)
    assert list(space.indices_of(space.states)) == list(range(space.size))
    rows = np.array([[0, 0], [3, 3], [4, 0], [-1, 2]])
    assert list(space.rows_inside(rows)) == [True, True, False, False]


def test_single_state_space():
    space = StateSpace(n_species=2, max_num=0)
    assert space.size == 1
    assert space.state_at(0) == (0, 0)


def test_out_of_box_states_are_rejected():
    space = StateSpace(n_species=2, max_num=3)
    with pytest.raises(ValueError):
        space.index_of((4, 0))
    with pytest.raises(ValueError):
        space.index_of((0, -1))
    with pytest.raises(ValueError):
        space.index_of((1, 1, 1))
    with pytest.raises(ValueError):
        space.state_at(16)
    assert (1, 2) in space
    assert (1, 4) not in space
    assert "ab" not in space


@pytest.mark.parametrize("n_species, max_num", [(0, 3), (-1, 3), (2, -1)])
def test_invalid_preconditions_fail_fast(n_species, max_num):
    with pytest.raises(ValueError):
        StateSpace(n_species=n_species, max_num=max_num)


def test_mean_uses_absolute_normalized_weights():
    space = StateSpace(n_species=2, max_num=1)
    # states: (0,0) (0,1) (1,0) (1,1)
    p = np.array([0.0, 1.0, -1.0, 2.0])
    np.testing.assert_allclose(mean_copy_numbers(p, space), [0.75, 0.75])


def test_mean_rejects_zero_mass_and_wrong_length():
    space = StateSpace(n_species=1, max_num=2)
    with pytest.raises(ValueError):
        mean_copy_numbers(np.zeros(3), space)
    with pytest.raises(ValueError):
        mean_copy_numbers(np.ones(4), space)


def test_marginal_distribution():
    space = StateSpace(n_species=2, max_num=1)
    p = np.array([0.1, 0.2, 0.3, 0.4])
    np.testing.assert_allclose(marginal_distribution(p, space, 0), [0.3, 0.7])
    np.testing.assert_allclose(marginal_distribution(p, space, 1), [0.4, 0.6])


def test_non_integer_coordinates_are_rejected():
    space = StateSpace(n_species=2, max_num=3)
    with pytest.raises(ValueError):
        space.index_of((1.5, 0))
    assert (1.5, 0) not in space
    assert space.index_of((np.int64(1), 2.0)) == 6
