"""Tests for `sklearn_reducts.reducts`."""
import threading

import numpy as np
import pytest

from sklearn_reducts.common import ConfigurationError, DecisionTable, \
    IndiscernibilityRelation, ReductInvariantError
from sklearn_reducts.discernibility import DiscernibilityMatrixProvider
from sklearn_reducts.logic import HeuristicPrimeImplicantsProvider, \
    is_hitting_set, is_prime_implicant
from sklearn_reducts.reducts import AllGlobalReductsProvider, \
    AllLocalReductsProvider, JohnsonReductsProvider, PartialReductsProvider, \
    compute_local_reducts, compute_reducts, make_reducts_provider, \
    union_reducts
from sklearn_reducts.util import ComputationInterrupted, Progress, \
    indices_to_bits

from .datasets import four_objects, inconsistent, random_categorical, \
    redundant_copies, star, xor_3d


@pytest.fixture
def star_table():
    return star().table()


def test_four_objects():
    table = four_objects().table()
    assert AllGlobalReductsProvider(
        table, discernibility_method='All').get_reducts() == [0b11]
    assert AllGlobalReductsProvider(table).get_reducts() == [0b10]


@pytest.mark.parametrize('algorithm', ['exhaustive', 'heuristic'])
def test_known_reducts(algorithm):
    for dataset in [redundant_copies(), xor_3d()]:
        provider = AllGlobalReductsProvider(dataset.table(),
                                            prime_implicants=algorithm)
        assert provider.get_reducts() == \
            [indices_to_bits(r) for r in dataset.reducts]


def test_prime_implicants_provider_instance():
    heuristic = HeuristicPrimeImplicantsProvider(False, False)
    provider = AllGlobalReductsProvider(xor_3d().table(),
                                        prime_implicants=heuristic)
    assert provider.prime_implicants is heuristic
    assert provider.get_reducts() == [0b011]


def test_local_reducts(dataset, indiscernibility):
    table = dataset.table()
    config = dict(indiscernibility=indiscernibility,
                  discernibility_method='All')
    local = AllLocalReductsProvider(table, **config)
    global_reducts = AllGlobalReductsProvider(table, **config).get_reducts()
    matrix = DiscernibilityMatrixProvider(table, indiscernibility, 'All')
    for obj in range(table.n_objects):
        cnf = matrix.get_local_discernibility(obj)
        reducts = local.get_single_object_reducts(obj)
        if not cnf:
            assert reducts == []
            continue
        for reduct in reducts:
            assert is_prime_implicant(reduct, cnf)
        # every global reduct discerns the object from all others, hence
        # contains one of its local reducts
        for reduct in global_reducts:
            assert any(r & reduct == r for r in reducts)


def test_local_empty_row():
    table = inconsistent().table()
    provider = AllLocalReductsProvider(table, 'DontDiscernFromValue')
    assert provider.get_single_object_reducts(0) == []
    assert provider.get_single_object_reducts(3) == [0b01]
    assert provider.get_indiscernibility_for_missing() is \
        IndiscernibilityRelation.DontDiscernFromValue


def test_johnson():
    table = redundant_copies().table()
    one = JohnsonReductsProvider(table, 'OneJohnson').get_reducts()
    all_ = JohnsonReductsProvider(table, 'AllJohnson').get_reducts()
    assert one == [0b001]
    assert all_ == [0b001, 0b010]


def test_johnson_is_cover(dataset, discernibility_method):
    table = dataset.table()
    cnf = DiscernibilityMatrixProvider(
        table, discernibility_method=discernibility_method) \
        .get_discernibility_matrix()
    one = JohnsonReductsProvider(table, 'OneJohnson',
                                 discernibility_method=discernibility_method) \
        .get_reducts()
    all_ = JohnsonReductsProvider(table, 'AllJohnson',
                                  discernibility_method=discernibility_method) \
        .get_reducts()
    assert len(one) == 1
    assert one[0] in all_
    assert len(set(all_)) == len(all_)
    for reduct in all_:
        assert is_hitting_set(reduct, cnf)


def test_johnson_ties():
    # every attribute discerns two of the three pairs
    table = DecisionTable([[0, 0, 0],
                           [1, 1, 0],
                           [1, 0, 1],
                           [0, 1, 1]],
                          [0, 1, 1, 1],
                          conditional_features='all')
    cnf = DiscernibilityMatrixProvider(table).get_discernibility_matrix()
    assert cnf == {0b011, 0b101, 0b110}
    assert JohnsonReductsProvider(table, 'OneJohnson').get_reducts() == \
        [0b011]
    assert JohnsonReductsProvider(table, 'AllJohnson').get_reducts() == \
        [0b011, 0b101, 0b110]


def test_johnson_invalid_method():
    with pytest.raises(ConfigurationError):
        JohnsonReductsProvider(four_objects().table(), 'AllGlobal')


def test_empty_matrix():
    table = DecisionTable([[0, 1], [1, 0]], [1, 1])
    assert AllGlobalReductsProvider(table).get_reducts() == [0]
    assert JohnsonReductsProvider(table, 'AllJohnson').get_reducts() == [0]
    assert PartialReductsProvider(table).get_reducts() == [0]
    assert AllLocalReductsProvider(table).get_single_object_reducts(0) == []


@pytest.mark.parametrize('alpha, expected', [(0.0, 0b11),
                                             (0.2, 0b11),
                                             (0.25, 0b01),
                                             (0.5, 0b01),
                                             (0.9, 0b01)])
def test_partial_alpha(star_table, alpha, expected):
    # 4 pairs, attribute 0 discerns 3 of them
    provider = PartialReductsProvider(star_table, alpha)
    assert provider.get_reducts() == [expected]
    assert provider.get_single_object_reducts(0) == [expected]


def test_partial_local(star_table):
    provider = PartialReductsProvider(star_table, 0.0, local=True)
    assert provider.get_single_object_reducts(1) == [0b01]
    assert provider.get_single_object_reducts(4) == [0b10]
    assert compute_reducts(provider, star_table) == [0b01, 0b10, 0b11]
    with pytest.raises(ReductInvariantError):
        provider.get_single_object_reducts(5)
    with pytest.raises(ReductInvariantError):
        provider.get_single_object_reducts(-1)


def test_partial_exact_is_reduct(dataset, indiscernibility):
    table = dataset.table()
    [partial] = PartialReductsProvider(table, 0.0,
                                       indiscernibility).get_reducts()
    assert partial in AllGlobalReductsProvider(table,
                                               indiscernibility).get_reducts()


@pytest.mark.parametrize('X', [[[np.nan], [1]], [[1], [np.nan]]],
                         ids=['missing_first', 'missing_last'])
def test_partial_one_way_pair(X):
    relation = 'DiscernFromValueOneWay'
    table = DecisionTable(X, [0, 1])
    provider = PartialReductsProvider(table, 0.0, relation)
    assert provider.get_reducts() == [0b1]
    assert AllGlobalReductsProvider(table, relation).get_reducts() == [0b1]
    # only the object without missing value discerns the other one
    local = AllLocalReductsProvider(table, relation)
    assert compute_local_reducts(provider, table) == \
        compute_local_reducts(local, table)
    assert sorted(compute_local_reducts(provider, table)) == [[], [0b1]]


@pytest.mark.parametrize('seed', range(4))
def test_partial_row_order(indiscernibility, seed):
    dataset = random_categorical(n_samples=25, n_features=5,
                                 missing_rate=0.2, random=seed)
    order = np.random.RandomState(seed).permutation(len(dataset.y))
    table = dataset.table()
    permuted = DecisionTable(dataset.X[order], dataset.y[order])
    for alpha in [0.0, 0.3]:
        assert PartialReductsProvider(
            table, alpha, indiscernibility).get_reducts() == \
            PartialReductsProvider(
                permuted, alpha, indiscernibility).get_reducts()
    matrix = DiscernibilityMatrixProvider(table, indiscernibility)
    [reduct] = PartialReductsProvider(permuted, 0.0,
                                      indiscernibility).get_reducts()
    assert is_hitting_set(reduct, matrix.get_discernibility_matrix())


def test_partial_local_matches_all_local(dataset, indiscernibility):
    table = dataset.table()
    partial = PartialReductsProvider(table, 0.0, indiscernibility, local=True)
    exact = AllLocalReductsProvider(table, indiscernibility)
    for obj in range(table.n_objects):
        reducts = partial.get_single_object_reducts(obj)
        expected = exact.get_single_object_reducts(obj)
        if not expected:
            assert reducts == []
        else:
            [reduct] = reducts
            assert reduct in expected


def test_partial_local_without_pairs():
    # objects 0 and 1 are inconsistent, object 0 has nothing to discern
    table = DecisionTable([[0], [0], [1]], [0, 1, 0])
    partial = PartialReductsProvider(table, 0.0, local=True)
    local = compute_local_reducts(partial, table)
    assert local == [[], [0b1], [0b1]]
    assert local == compute_local_reducts(AllLocalReductsProvider(table),
                                          table)
    assert union_reducts(local) == [0b1]


@pytest.mark.parametrize('alpha', [-0.1, 1.0, 1.5])
def test_partial_invalid_alpha(star_table, alpha):
    with pytest.raises(ConfigurationError):
        PartialReductsProvider(star_table, alpha)


def test_partial_best_attribute_empty(star_table, monkeypatch):
    provider = PartialReductsProvider(star_table)
    monkeypatch.setattr(provider, '_count_undiscerned',
                        lambda obj, cover: (3, np.zeros(2, dtype=int)))
    with pytest.raises(ReductInvariantError, match="discerns no pair"):
        provider.get_reducts()


def test_partial_interrupted(star_table):
    stop = threading.Event()
    stop.set()
    provider = PartialReductsProvider(star_table, progress=Progress(stop))
    with pytest.raises(ComputationInterrupted):
        provider.get_reducts()


def test_make_reducts_provider():
    table = four_objects().table()
    assert isinstance(make_reducts_provider('AllGlobal', table),
                      AllGlobalReductsProvider)
    local = make_reducts_provider('AllLocal', table)
    assert isinstance(local, AllLocalReductsProvider) and local.local
    johnson = make_reducts_provider('AllJohnson', table)
    assert isinstance(johnson, JohnsonReductsProvider)
    assert str(johnson.method) == 'AllJohnson'
    partial = make_reducts_provider('PartialLocal', table, alpha=0.3)
    assert isinstance(partial, PartialReductsProvider)
    assert partial.local and partial.alpha == 0.3
    assert not make_reducts_provider('PartialGlobal', table).local
    with pytest.raises(ConfigurationError):
        make_reducts_provider('AllReducts', table)
    with pytest.raises(ConfigurationError):
        make_reducts_provider('AllGlobal', table, indiscernibility='Missing')
    with pytest.raises(ConfigurationError):
        make_reducts_provider('PartialGlobal', table, alpha=1)


def test_compute_reducts():
    table = four_objects().table()
    assert compute_reducts(make_reducts_provider('AllGlobal', table),
                           table) == [0b10]
    # local reducts of all objects, deduplicated
    assert compute_reducts(
        make_reducts_provider('AllLocal', table, discernibility_method='All'),
        table) == [0b11]


def test_union_reducts():
    assert union_reducts([]) == []
    assert union_reducts([[], [0b110, 0b001], [0b001]]) == [0b001, 0b110]
    assert union_reducts([[0b11], [0b100, 0b10]]) == [0b10, 0b100, 0b11]
