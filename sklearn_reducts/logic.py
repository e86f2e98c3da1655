"""
Rough set reducts:
Prime implicants of monotone (positive) CNF formulas.

A positive CNF is a collection of clauses, each an `int` bit vector of
variables joined by OR, the clauses joined by AND. Its prime implicants are
its minimal hitting sets: the inclusion-minimal variable sets intersecting
every clause. Computing them takes exponential time in the worst case.
"""

import logging
from abc import ABC, abstractmethod
from functools import reduce
from operator import and_, or_
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from sklearn_reducts.common import ConfigurationEnum
from sklearn_reducts.util import iter_bits, popcount, sort_key

logger = logging.getLogger(__name__)


def is_hitting_set(implicant: int, cnf: Iterable[int]) -> bool:
    """:return: True iff `implicant` intersects every clause of `cnf`."""
    return all(implicant & clause for clause in cnf)


def is_prime_implicant(implicant: int, cnf: Iterable[int]) -> bool:
    """:return: True iff `implicant` is a hitting set of `cnf` and no variable
        can be removed from it without leaving some clause uncovered.
    """
    cnf = list(cnf)
    return is_hitting_set(implicant, cnf) and not any(
        is_hitting_set(implicant & ~(1 << variable), cnf)
        for variable in iter_bits(implicant))


def absorption(cnf: Iterable[int]) -> List[int]:
    """Remove absorbed clauses, i.e. clauses containing another clause.

    :return: the remaining clauses, ordered by `util.sort_key`.
    """
    kept: List[int] = []
    for clause in sorted(set(cnf), key=sort_key):
        if not any(shorter & clause == shorter for shorter in kept):
            kept.append(clause)
    return kept


def remove_non_prime_implicants(candidates: Iterable[int]) -> List[int]:
    """Remove all candidates containing another (smaller) candidate.

    Given a collection of implicants which contains all prime implicants, the
    result are exactly the prime implicants. Each candidate is only compared
    to candidates of smaller cardinality, i.e. at most n^2/2 checks.

    :return: the remaining candidates, ordered by `util.sort_key`.
    """
    by_size: Dict[int, List[int]] = {}
    for candidate in set(candidates):
        by_size.setdefault(popcount(candidate), []).append(candidate)
    sizes = sorted(by_size)
    primes = []
    for i, size in enumerate(sizes):
        smaller = [c for s in sizes[:i] for c in by_size[s]]
        primes.extend(candidate for candidate in by_size[size]
                      if not any(inner & candidate == inner
                                 for inner in smaller))
    primes.sort(key=sort_key)
    return primes


class PrimeImplicantsProvider(ABC):
    """Computes all prime implicants of a positive CNF formula."""

    def generate_prime_implicants(self, cnf: Iterable[int], width: int
                                  ) -> List[int]:
        """
        :param cnf: The clauses, `int` bit vectors over `width` variables.
            Duplicates are ignored.
        :param width: The number of variables, i.e. every clause is
            `< 2 ** width`.
        :return: All prime implicants of `cnf`, ordered by cardinality and
            then by their variables. If `cnf` is empty, that is the empty
            implicant `0`.
        :raises ValueError: if `cnf` contains an empty clause, which cannot be
            satisfied, or a variable outside `width`.
        """
        cnf = set(cnf)
        if 0 in cnf:
            raise ValueError("CNF contains an empty clause")
        if any(clause >> width for clause in cnf):
            raise ValueError("CNF contains variables beyond width %d" % width)
        if not cnf:
            return [0]
        candidates = list(self._generate_possible_prime_implicants(cnf, width))
        primes = remove_non_prime_implicants(candidates)
        logger.debug("%s: %d clauses, %d candidates, %d prime implicants",
                     type(self).__name__, len(cnf), len(candidates),
                     len(primes))
        return primes

    @abstractmethod
    def _generate_possible_prime_implicants(self, cnf: set, width: int
                                            ) -> Iterable[int]:
        """:return: Implicants of non-empty `cnf`, a superset of its prime
            implicants.
        """
        raise NotImplementedError


class _AttrStat:
    """Occurrences of a variable in the clauses of a `_SortedCnf`."""
    __slots__ = ('one_in_clause', 'two_in_clause', 'n_clauses')

    def __init__(self):
        self.one_in_clause = 0
        self.two_in_clause = 0
        self.n_clauses = 0

    def count(self, level: int, delta: int) -> None:
        """Add `delta` occurrences in clauses of cardinality `level`."""
        if level == 1:
            self.one_in_clause += delta
        elif level == 2:
            self.two_in_clause += delta
        self.n_clauses += delta

    def key(self) -> Tuple[int, int, int]:
        """Variables with greater key are better branching candidates."""
        return self.one_in_clause, self.two_in_clause, self.n_clauses


class _SortedCnf:
    """Clauses grouped by cardinality, with statistics per variable.

    Every branch of `ExhaustivePrimeImplicantsProvider` owns its instance,
    `divide` hands out a newly allocated one.

    Attributes
    -----
    levels : List[List[int]]
        `levels[k]` holds the clauses of cardinality `k`.

    stats : Dict[int, _AttrStat]
        Statistics of every variable not yet decided on.

    size : int
        Total number of clauses.
    """

    def __init__(self, width: int):
        self.width = width
        self.levels: List[List[int]] = [[] for _ in range(width + 1)]
        self.stats: Dict[int, _AttrStat] = {}
        self.size = 0

    @classmethod
    def from_clauses(cls, clauses: Iterable[int], width: int) -> '_SortedCnf':
        sorted_cnf = cls(width)
        for clause in clauses:
            sorted_cnf.add(clause)
        return sorted_cnf

    def add(self, clause: int) -> None:
        level = popcount(clause)
        self.levels[level].append(clause)
        self.size += 1
        for variable in iter_bits(clause):
            stat = self.stats.get(variable)
            if stat is None:
                stat = self.stats[variable] = _AttrStat()
            stat.count(level, +1)

    def _discount(self, clause: int, level: int) -> None:
        """Update statistics for removal of `clause` from `levels[level]`."""
        for variable in iter_bits(clause):
            self.stats[variable].count(level, -1)

    def absorption(self) -> None:
        """Remove duplicate clauses and clauses containing a shorter one."""
        for level in range(1, self.width + 1):
            unique = []
            seen = set()
            for clause in self.levels[level]:
                if clause in seen:
                    self._discount(clause, level)
                    self.size -= 1
                else:
                    seen.add(clause)
                    unique.append(clause)
            self.levels[level] = unique

        for level in range(1, self.width):
            for shorter in self.levels[level]:
                for longer_level in range(level + 1, self.width + 1):
                    longer = self.levels[longer_level]
                    kept = []
                    for clause in longer:
                        if shorter & clause == shorter:
                            self._discount(clause, longer_level)
                            self.size -= 1
                        else:
                            kept.append(clause)
                    self.levels[longer_level] = kept

    def best_variable(self) -> Tuple[int, _AttrStat]:
        """:return: The variable with the greatest `_AttrStat.key`, the lowest
            one among equals.
        """
        best, best_key = None, (0, 0, 0)
        for variable in sorted(self.stats):
            key = self.stats[variable].key()
            if key > best_key:
                best, best_key = variable, key
        assert best is not None, "no variable left in non-empty CNF"
        return best, self.stats[best]

    def shorten(self, variable: int) -> None:
        """Decide `variable` to be in the implicant: remove all clauses
        containing it.
        """
        del self.stats[variable]
        bit = 1 << variable
        for level in range(1, self.width + 1):
            kept = []
            for clause in self.levels[level]:
                if clause & bit:
                    self._discount(clause ^ bit, level)
                    self.size -= 1
                else:
                    kept.append(clause)
            self.levels[level] = kept

    def divide(self, variable: int) -> '_SortedCnf':
        """Split into the CNF assuming `variable` rejected (`self`, where it is
        removed from all clauses) and the CNF assuming it chosen (returned,
        holding only the clauses without it).

        Requires `variable` not to form a clause on its own.
        """
        del self.stats[variable]
        bit = 1 << variable
        chosen = _SortedCnf(self.width)
        levels: List[List[int]] = [[] for _ in range(self.width + 1)]
        for level in range(1, self.width + 1):
            for clause in self.levels[level]:
                if clause & bit:
                    shortened = clause ^ bit
                    assert shortened, "divide on a one-variable clause"
                    for other in iter_bits(shortened):
                        stat = self.stats[other]
                        stat.count(level, -1)
                        stat.count(level - 1, +1)
                    levels[level - 1].append(shortened)
                else:
                    levels[level].append(clause)
                    chosen.add(clause)
        self.levels = levels
        return chosen


class ExhaustivePrimeImplicantsProvider(PrimeImplicantsProvider):
    """Exact branch-and-bound search for prime implicants.

    Clauses are grouped by cardinality. In every step the CNF is reduced by
    absorption, then the variable occurring most often in one-variable
    clauses (then in two-variable clauses, then in any clause; the lowest
    variable on ties) is decided on:

    - If it forms a clause on its own, it is in every implicant of the CNF:
      remove the clauses containing it and continue with it in the prefix.
    - Otherwise branch: with the variable (drop the clauses containing it) and
      without it (drop the variable from all clauses).

    An empty CNF turns the prefix into a candidate. Branches are kept on an
    explicit stack, each one owning its `_SortedCnf`.
    """

    def _generate_possible_prime_implicants(self, cnf: set, width: int
                                            ) -> List[int]:
        candidates = []
        stack: List[Tuple[_SortedCnf, int]] = \
            [(_SortedCnf.from_clauses(sorted(cnf), width), 0)]
        while stack:
            sorted_cnf, prefix = stack.pop()
            if not sorted_cnf.size:
                candidates.append(prefix)
                continue
            sorted_cnf.absorption()
            variable, stat = sorted_cnf.best_variable()
            with_variable = prefix | (1 << variable)
            if stat.one_in_clause > 0:
                sorted_cnf.shorten(variable)
                stack.append((sorted_cnf, with_variable))
            else:
                chosen = sorted_cnf.divide(variable)
                stack.append((sorted_cnf, prefix))
                stack.append((chosen, with_variable))
        return candidates


class _ImplicantContext(NamedTuple):
    """State of a partial implicant in `HeuristicPrimeImplicantsProvider`."""
    forbidden: int  # variables not to be added anymore
    rest: List[int]  # clauses not yet hit


class HeuristicPrimeImplicantsProvider(PrimeImplicantsProvider):
    """Prime implicants by breadth-first extension of partial implicants.

    Starting from every single variable (or from the set of variables forming
    one-variable clauses, which are part of every implicant), partial
    implicants are extended by one variable at a time until they hit all
    clauses. Variables contained in every clause newly hit by an extension are
    forbidden for further extension of that partial implicant, since adding
    them later would make the extension redundant.

    Parameters
    -----
    clauses_absorption : bool, default True
        Remove absorbed clauses before the search.

    one_literal_clauses_optimization : bool, default True
        Start from the union of all one-variable clauses, if there are any.
    """

    def __init__(self, clauses_absorption: bool = True,
                 one_literal_clauses_optimization: bool = True):
        self.clauses_absorption = clauses_absorption
        self.one_literal_clauses_optimization = \
            one_literal_clauses_optimization

    def _initial_contexts(self, cnf: List[int], width: int,
                          final: Dict[int, None]) -> Dict[int, _ImplicantContext]:
        primes: Dict[int, _ImplicantContext] = {}
        obligatory = 0
        if self.one_literal_clauses_optimization:
            obligatory = reduce(or_, (clause for clause in cnf
                                      if popcount(clause) == 1), 0)
        if obligatory:
            rest = [clause for clause in cnf if not clause & obligatory]
            if rest:
                primes[obligatory] = _ImplicantContext(obligatory, rest)
            else:
                final[obligatory] = None
            return primes

        for variable in range(width):
            bit = 1 << variable
            supported = [clause for clause in cnf if clause & bit]
            if not supported:
                continue
            rest = [clause for clause in cnf if not clause & bit]
            if rest:
                forbidden = reduce(and_, supported) | bit
                primes[bit] = _ImplicantContext(forbidden, rest)
            else:
                final[bit] = None
        return primes

    def _generate_possible_prime_implicants(self, cnf: set, width: int
                                            ) -> List[int]:
        if self.clauses_absorption:
            clauses = absorption(cnf)
        else:
            clauses = sorted(cnf, key=sort_key)
        final: Dict[int, None] = {}  # insertion ordered set
        primes = self._initial_contexts(clauses, width, final)
        n_rounds = 1
        while primes:
            n_rounds += 1
            new_primes: Dict[int, _ImplicantContext] = {}
            for prime, context in primes.items():
                extensions = reduce(or_, context.rest) & ~context.forbidden
                for variable in iter_bits(extensions):
                    bit = 1 << variable
                    new_supported = [c for c in context.rest if c & bit]
                    new_rest = [c for c in context.rest if not c & bit]
                    new_prime = prime | bit
                    if not new_rest:
                        final[new_prime] = None
                        continue
                    forbidden = (reduce(and_, new_supported)
                                 | context.forbidden | bit)
                    known: Optional[_ImplicantContext] = \
                        new_primes.get(new_prime)
                    if known is not None:
                        # same clauses left, keep the weaker restriction
                        forbidden &= known.forbidden
                    new_primes[new_prime] = _ImplicantContext(forbidden,
                                                              new_rest)
            primes = new_primes
        logger.debug("heuristic prime implicants: %d rounds, %d candidates",
                     n_rounds, len(final))
        return list(final)


class PrimeImplicantsAlgorithm(ConfigurationEnum):
    """Selects a `PrimeImplicantsProvider`.

    - `exhaustive`: `ExhaustivePrimeImplicantsProvider`
    - `heuristic`: `HeuristicPrimeImplicantsProvider`
    """
    exhaustive = 'exhaustive'
    heuristic = 'heuristic'

    def make_provider(self, **kwargs) -> PrimeImplicantsProvider:
        if self is PrimeImplicantsAlgorithm.heuristic:
            return HeuristicPrimeImplicantsProvider(**kwargs)
        return ExhaustivePrimeImplicantsProvider(**kwargs)


def make_prime_implicants_provider(algorithm='exhaustive', **kwargs
                                   ) -> PrimeImplicantsProvider:
    """:return: a `PrimeImplicantsProvider` for `algorithm` (name or
        `PrimeImplicantsAlgorithm`), constructed with `kwargs`.
    :raises ConfigurationError: for unknown algorithm names.
    """
    if isinstance(algorithm, PrimeImplicantsProvider):
        return algorithm
    return PrimeImplicantsAlgorithm.parse(algorithm).make_provider(**kwargs)
