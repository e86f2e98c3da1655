"""Tests for `sklearn_reducts.logic`."""
import pytest

from sklearn_reducts.common import ConfigurationError
from sklearn_reducts.logic import ExhaustivePrimeImplicantsProvider, \
    HeuristicPrimeImplicantsProvider, PrimeImplicantsAlgorithm, absorption, \
    is_hitting_set, is_prime_implicant, make_prime_implicants_provider, \
    remove_non_prime_implicants
from sklearn_reducts.util import sort_key

from .conftest import brute_force_prime_implicants, random_cnf


@pytest.fixture(params=[ExhaustivePrimeImplicantsProvider(),
                        HeuristicPrimeImplicantsProvider(),
                        HeuristicPrimeImplicantsProvider(False, False),
                        HeuristicPrimeImplicantsProvider(True, False),
                        HeuristicPrimeImplicantsProvider(False, True),
                        ],
                ids=['exhaustive', 'heuristic', 'heuristic-plain',
                     'heuristic-absorption', 'heuristic-one-literal'])
def provider(request):
    return request.param


def test_helpers():
    cnf = [0b011, 0b110]
    assert is_hitting_set(0b010, cnf)
    assert not is_hitting_set(0b001, cnf)
    assert is_prime_implicant(0b010, cnf)
    assert is_prime_implicant(0b101, cnf)
    assert not is_prime_implicant(0b011, cnf)
    assert absorption([0b111, 0b011, 0b110, 0b011, 0b100]) == [0b100, 0b011]
    assert remove_non_prime_implicants([0b111, 0b101, 0b010, 0b110, 0b010]) \
        == [0b010, 0b101]


def test_four_objects(provider):
    # pairs of the four objects table, discerning all pairs
    cnf = {0b10, 0b01, 0b11}
    assert provider.generate_prime_implicants(cnf, 2) == [0b11]


def test_trivial(provider):
    assert provider.generate_prime_implicants(set(), 4) == [0]
    assert provider.generate_prime_implicants({0b1000}, 4) == [0b1000]
    assert provider.generate_prime_implicants({0b1011}, 4) == \
        [0b0001, 0b0010, 0b1000]
    with pytest.raises(ValueError):
        provider.generate_prime_implicants({0b1, 0}, 4)
    with pytest.raises(ValueError):
        provider.generate_prime_implicants({0b10000}, 4)


def test_known_cnf(provider):
    # (a | b) & (b | c) & (c | d)
    cnf = [0b0011, 0b0110, 0b1100]
    assert provider.generate_prime_implicants(cnf, 4) == \
        [0b0101, 0b0110, 0b1010]
    # duplicates and absorbed clauses don't matter
    assert provider.generate_prime_implicants(cnf + [0b0011, 0b0111], 4) == \
        [0b0101, 0b0110, 0b1010]


def test_against_brute_force(provider, small_random_cnf):
    cnf, width = small_random_cnf
    primes = provider.generate_prime_implicants(cnf, width)
    assert primes == brute_force_prime_implicants(cnf, width)
    assert primes == sorted(primes, key=sort_key)
    for prime in primes:
        assert is_prime_implicant(prime, cnf)
        assert not any(other != prime and other & prime == other
                       for other in primes)


def test_heuristic_equals_exhaustive():
    for seed in range(5):
        cnf = random_cnf(seed, 14, 30, density=0.25)
        assert HeuristicPrimeImplicantsProvider() \
            .generate_prime_implicants(cnf, 14) \
            == ExhaustivePrimeImplicantsProvider() \
            .generate_prime_implicants(cnf, 14)


def test_wide_clauses(provider):
    # variables beyond 64 bits
    cnf = {1 << 70 | 1, 1 << 70 | 1 << 3, 1 << 99}
    assert provider.generate_prime_implicants(cnf, 100) == \
        [1 << 99 | 1 << 70, 1 << 99 | 1 << 3 | 1]


def test_make_provider():
    assert isinstance(make_prime_implicants_provider(),
                      ExhaustivePrimeImplicantsProvider)
    heuristic = make_prime_implicants_provider(
        PrimeImplicantsAlgorithm.heuristic, clauses_absorption=False)
    assert isinstance(heuristic, HeuristicPrimeImplicantsProvider)
    assert not heuristic.clauses_absorption
    assert heuristic.one_literal_clauses_optimization
    assert make_prime_implicants_provider(heuristic) is heuristic
    with pytest.raises(ConfigurationError):
        make_prime_implicants_provider('greedy')
