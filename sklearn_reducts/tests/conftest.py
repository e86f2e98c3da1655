"""pytest fixtures for the test cases in this directory."""
import itertools
from typing import Iterable, List

import numpy as np
import pytest
from sklearn.utils import check_random_state

from sklearn_reducts.common import DiscernibilityMethod, \
    IndiscernibilityRelation
from sklearn_reducts.logic import is_hitting_set
from sklearn_reducts.util import sort_key

from .datasets import Dataset, four_objects, inconsistent, \
    random_categorical, redundant_copies, with_missing_values, xor_3d


def brute_force_prime_implicants(cnf: Iterable[int], width: int) -> List[int]:
    """All minimal hitting sets of `cnf`, by enumerating all subsets of
    `range(width)` by size.
    """
    cnf = list(cnf)
    found = []
    for size in range(width + 1):
        for subset in itertools.combinations(range(width), size):
            bits = sum(1 << i for i in subset)
            if any(f & bits == f for f in found):
                continue
            if is_hitting_set(bits, cnf):
                found.append(bits)
    return sorted(found, key=sort_key)


def random_cnf(random, width: int, n_clauses: int, density=0.4) -> set:
    """Random positive CNF without empty clauses."""
    random = check_random_state(random)
    cnf = set()
    for _ in range(n_clauses):
        mask = random.random_sample(width) < density
        mask[random.randint(width)] = True
        cnf.add(sum(1 << int(i) for i in np.flatnonzero(mask)))
    return cnf


@pytest.fixture(params=list(IndiscernibilityRelation))
def indiscernibility(request) -> IndiscernibilityRelation:
    """Fixture running for each of the indiscernibility relations."""
    return request.param


@pytest.fixture(params=list(DiscernibilityMethod))
def discernibility_method(request) -> DiscernibilityMethod:
    """Fixture running for each of the discernibility methods."""
    return request.param


@pytest.fixture(params=[True, False], ids=['closure', 'direct'])
def transitive_closure(request) -> bool:
    return request.param


@pytest.fixture(params=range(12))
def small_random_cnf(request):
    """:return: tuple(cnf, width), a random CNF small enough for brute force.
    """
    random = check_random_state(request.param)
    width = random.randint(3, 9)
    return random_cnf(random, width, random.randint(1, 15)), width


@pytest.fixture(params=[four_objects,
                        redundant_copies,
                        xor_3d,
                        inconsistent,
                        with_missing_values,
                        random_categorical,
                        ])
def dataset(request) -> Dataset:
    return request.param()
