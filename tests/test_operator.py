import numpy as np
import pytest
import sympy as sp

from master_equation import (
    MasterOperatorBuilder,
    ReactionParameters,
    check_generator,
    dimerization_network,
    birth_death_network,
    gene_expression_network,
    master_operator,
    symbolic_master_operator,
    transitions,
)


def _dimerization(values=None):
    values = values or {"b": 3.0, "d": 0.4, "k1": 0.2, "km1": 1.1, "dB": 0.3}
    return dimerization_network().to_parameters(values)


def test_birth_death_operator_matches_hand_computation():
    params = ReactionParameters.birth_death(2.0, 0.5)
    M, space = master_operator(params, max_num=2)
    expected = np.array(
        [
            [-2.0, 0.5, 0.0],
            [2.0, -2.5, 1.0],
            [0.0, 2.0, -1.0],
        ]
    )
    np.testing.assert_allclose(M, expected)
    assert space.size == 3


@pytest.mark.parametrize("max_num", [0, 1, 3, 5])
def test_generator_property_for_interacting_network(max_num):
    M, space = master_operator(_dimerization(), max_num=max_num)
    assert M.shape == (space.size, space.size)
    check = check_generator(M)
    assert check["is_valid"]
    assert check["min_offdiagonal"] >= 0.0
    np.testing.assert_allclose(M.sum(axis=0), 0.0, atol=1e-12)


def test_degradation_scales_with_copy_number():
    params = ReactionParameters(birth_rates=[0.0, 0.0], death_rates=[0.7, 0.0])
    M, space = master_operator(params, max_num=4)
    for s in space:
        i = space.index_of(s)
        if s[0] == 0:
            assert M[i, i] == 0.0
            continue
        t = space.index_of((s[0] - 1, s[1]))
        assert M[t, i] == pytest.approx(0.7 * s[0])
        assert M[i, i] == pytest.approx(-0.7 * s[0])


def test_production_is_constant_and_dropped_at_the_boundary():
    params = ReactionParameters.birth_death(1.5, 0.0)
    M, space = master_operator(params, max_num=3)
    for n in range(3):
        assert M[n + 1, n] == pytest.approx(1.5)
    # no jump out of max_num, so the last column is empty
    assert np.all(M[:, 3] == 0.0)

    leak = MasterOperatorBuilder(params, 3).leakage()
    np.testing.assert_allclose(leak, [0.0, 0.0, 0.0, 1.5])


def test_interaction_uses_falling_factorial_propensity():
    # 2A -> B with k = 3
    params = ReactionParameters(
        birth_rates=[0.0, 0.0],
        death_rates=[0.0, 0.0],
        interaction_rates=[3.0],
        reactants=[[2, 0]],
        products=[[0, 1]],
    )
    M, space = master_operator(params, max_num=3)
    src = space.index_of((3, 0))
    tgt = space.index_of((1, 1))
    assert M[tgt, src] == pytest.approx(3.0 * 3 * 2)

    # one molecule of A cannot dimerize
    src = space.index_of((1, 0))
    assert M[src, src] == 0.0

    src = space.index_of((2, 2))
    assert M[space.index_of((0, 3)), src] == pytest.approx(3.0 * 2 * 1)


def test_alpha_scales_only_interaction_channels():
    params = _dimerization()
    M1, space = master_operator(params, max_num=3, alpha=1.0)
    Mh, _ = master_operator(params, max_num=3, alpha=0.5)

    src = space.index_of((2, 0))
    tgt = space.index_of((0, 1))
    assert Mh[tgt, src] == pytest.approx(0.5 * M1[tgt, src])

    # birth of A is untouched
    assert Mh[space.index_of((3, 0)), src] == pytest.approx(M1[space.index_of((3, 0)), src])


def test_jumps_leaving_the_box_are_dropped():
    params = _dimerization()
    M, space = master_operator(params, max_num=2)
    # B -> 2A from (1, 1) would reach (3, 0), outside the box
    src = space.index_of((1, 1))
    for targets, sources, _rates in transitions(params, space):
        assert np.all(targets < space.size)
        assert not np.any(targets == sources)
    # remaining outflow from (1, 1): death of A, birth of A, degradation of B
    assert M[src, src] == pytest.approx(-(0.4 * 1 + 3.0 + 0.3 * 1))


def test_net_zero_channels_do_not_enter_the_generator():
    # A -> A only relabels; the generator must stay zero
    params = ReactionParameters(
        birth_rates=[0.0],
        death_rates=[0.0],
        interaction_rates=[5.0],
        reactants=[[1]],
        products=[[1]],
    )
    M, _ = master_operator(params, max_num=3)
    assert np.all(M == 0.0)


def test_negative_rates_give_a_nonphysical_generator():
    params = ReactionParameters.birth_death(-1.0, 0.5)
    M, _ = master_operator(params, max_num=3)
    check = check_generator(M)
    assert not check["is_valid"]
    assert check["min_offdiagonal"] == pytest.approx(-1.0)


def test_symbolic_parameters_are_rejected_by_numeric_builder():
    params = birth_death_network().to_parameters()
    with pytest.raises(ValueError):
        master_operator(params, max_num=2)


def test_symbolic_operator_agrees_with_numeric_operator():
    net = gene_expression_network()
    values = {"kM": 2.0, "gM": 1.0, "kP": 1.5, "gP": 0.5}
    Ms, space = symbolic_master_operator(net.to_parameters(), max_num=2)
    kM, gM, kP, gP = net.rate_constants
    assert sp.simplify(sum(Ms[:, 0])) == 0

    subs = {sym: values[str(sym)] for sym in net.rate_constants}
    M_from_symbolic = np.array(Ms.subs(subs).tolist(), dtype=float)
    M, _ = master_operator(net.to_parameters(values), max_num=2)
    np.testing.assert_allclose(M_from_symbolic, M)

    # transcription out of (0, 0) at rate kM
    assert Ms[space.index_of((1, 0)), space.index_of((0, 0))] == kM


def test_symbolic_alpha_tracks_interaction_order():
    alpha = sp.Symbol("alpha")
    params = dimerization_network().to_parameters()
    Ms, space = symbolic_master_operator(params, max_num=2, alpha=alpha)
    k1 = sp.Symbol("k1", positive=True)
    entry = Ms[space.index_of((0, 1)), space.index_of((2, 0))]
    assert sp.simplify(entry - 2 * alpha * k1) == 0
