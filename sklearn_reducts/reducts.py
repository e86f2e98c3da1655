"""
Rough set reducts:
Reducts providers, composing discernibility and prime implicants.

A global reduct is a minimal attribute subset discerning all pairs of objects
which have to be discerned. A local reduct does so only for the pairs
containing one fixed object. Reducts are returned as `int` bit vectors over
the attributes of the table, see `sklearn_reducts.util`.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import numpy as np

from sklearn_reducts.common import ConfigurationError, DecisionTable, \
    IndiscernibilityRelation, ReductInvariantError, ReductsMethod
from sklearn_reducts.discernibility import DiscernibilityMatrixProvider
from sklearn_reducts.logic import make_prime_implicants_provider
from sklearn_reducts.util import Progress, bits_to_masks, indices_to_bits, \
    sort_key

logger = logging.getLogger(__name__)


class ReductsProvider(ABC):
    """Base of all reducts providers of one `DecisionTable`."""

    table: DecisionTable
    local = False  # True iff `get_single_object_reducts` is the main result

    @abstractmethod
    def get_indiscernibility_for_missing(self) -> IndiscernibilityRelation:
        """:return: The relation used to compare values, for consumers of the
            reducts (e.g. rule generators) which have to match objects the same
            way.
        """
        raise NotImplementedError


class GlobalReductsProvider(ReductsProvider):
    @abstractmethod
    def get_reducts(self) -> List[int]:
        """:return: The global reducts, ordered by `util.sort_key`."""
        raise NotImplementedError


class LocalReductsProvider(ReductsProvider):
    @abstractmethod
    def get_single_object_reducts(self, obj: int) -> List[int]:
        """:return: The local reducts of object `obj` (its row index),
            ordered by `util.sort_key`.
        """
        raise NotImplementedError


class _MatrixReductsProvider(ReductsProvider):
    """Reducts providers based on the discernibility matrix.

    Parameters
    -----
    table : DecisionTable

    indiscernibility, discernibility_method, transitive_closure :
        Passed to `DiscernibilityMatrixProvider`.

    prime_implicants : str or PrimeImplicantsAlgorithm or PrimeImplicantsProvider
        Algorithm computing the prime implicants of the discernibility CNF.

    progress : Progress or None
        Receives the advancement of matrix construction.
    """

    def __init__(self, table: DecisionTable,
                 indiscernibility='DiscernFromValue',
                 discernibility_method='OrdinaryDecisionAndInconsistenciesOmitted',
                 transitive_closure: bool = True,
                 prime_implicants='exhaustive',
                 progress: Optional[Progress] = None):
        self.table = table
        self.progress = progress or Progress()
        self.discernibility = DiscernibilityMatrixProvider(
            table, indiscernibility, discernibility_method, transitive_closure,
            self.progress)
        self.prime_implicants = make_prime_implicants_provider(
            prime_implicants)

    def get_indiscernibility_for_missing(self) -> IndiscernibilityRelation:
        return self.discernibility.get_indiscernibility_for_missing()


class AllGlobalReductsProvider(_MatrixReductsProvider, GlobalReductsProvider):
    """All global reducts: the prime implicants of the discernibility
    matrix.
    """

    def get_reducts(self) -> List[int]:
        cnf = self.discernibility.get_discernibility_matrix(self.progress)
        reducts = self.prime_implicants.generate_prime_implicants(
            cnf, self.table.width)
        logger.debug("%d global reducts", len(reducts))
        return reducts


class AllLocalReductsProvider(_MatrixReductsProvider, LocalReductsProvider):
    """All local reducts: the prime implicants of the discernibility row of an
    object. An object not to be discerned from any other has no local reducts,
    i.e. the result is empty.
    """

    local = True

    def get_single_object_reducts(self, obj: int) -> List[int]:
        cnf = self.discernibility.get_local_discernibility(obj)
        if not cnf:
            return []
        return self.prime_implicants.generate_prime_implicants(
            cnf, self.table.width)


class JohnsonReductsProvider(_MatrixReductsProvider, GlobalReductsProvider):
    """Greedy reducts by Johnson's heuristic for set cover.

    Repeatedly add the attribute contained in most of the remaining clauses of
    the discernibility matrix (the lowest one among equals) and remove the
    clauses containing it, until no clause is left. The result is a hitting set
    of the matrix, but not necessarily a minimal one.

    Parameters
    -----
    method : ReductsMethod or str
        `OneJohnson` computes a single reduct. `AllJohnson` follows each of the
        equally good attributes at every step and returns all distinct
        results.

    For the other parameters see `_MatrixReductsProvider`.
    """

    def __init__(self, table: DecisionTable, method='OneJohnson', **kwargs):
        self.method = ReductsMethod.parse(method)
        if self.method not in (ReductsMethod.OneJohnson,
                               ReductsMethod.AllJohnson):
            raise ConfigurationError(
                "JohnsonReductsProvider needs OneJohnson or AllJohnson, got %s"
                % self.method)
        super().__init__(table, **kwargs)

    def get_reducts(self) -> List[int]:
        cnf = self.discernibility.get_discernibility_matrix(self.progress)
        if not cnf:
            return [0]
        clauses = bits_to_masks(sorted(cnf), self.table.width)
        follow_ties = self.method is ReductsMethod.AllJohnson

        results: Dict[int, None] = {}
        visited = set()
        stack: List[Tuple[int, np.ndarray]] = \
            [(0, np.ones(len(clauses), dtype=bool))]
        while stack:
            cover, remaining = stack.pop()
            if not remaining.any():
                results[cover] = None
                continue
            counts = clauses[remaining].sum(axis=0)
            best = np.flatnonzero(counts == counts.max())
            if not follow_ties:
                best = best[:1]
            # reversed, to pop the lowest attribute first
            for attribute in reversed(best.tolist()):
                extended = cover | (1 << attribute)
                if extended in visited:
                    continue
                visited.add(extended)
                stack.append((extended, remaining & ~clauses[:, attribute]))
        reducts = sorted(results, key=sort_key)
        logger.debug("%s: %d reducts from %d clauses, %d partial covers",
                     self.method, len(reducts), len(clauses), len(visited))
        return reducts


class PartialReductsProvider(GlobalReductsProvider, LocalReductsProvider):
    """Approximate reducts (alpha-covers) by a greedy algorithm on object pairs.

    A pair of objects is to be discerned if the decisions differ and some
    conditional attribute discerns them. Of the `n_pairs` such pairs, the
    result discerns all but at most `floor(alpha * n_pairs)`. Attributes are
    added greedily (the one discerning most of the remaining pairs, the lowest
    one among equals) until enough pairs are discerned, then removed again in
    index order while the remaining attributes still suffice.

    The pairs are rescanned in each step instead of materializing the
    discernibility matrix. Like the matrix, the one way relation counts both
    orders of two objects as separate pairs, each with its first object as
    reference object. Local covers only count the pairs with `obj` as
    reference.

    Parameters
    -----
    table : DecisionTable

    alpha : float, default 0.0
        Fraction of pairs which may stay undiscerned, `0 <= alpha < 1`.
        With 0, the result is an exact reduct.

    indiscernibility : IndiscernibilityRelation or str

    progress : Progress or None
        Receives the advancement of each scan over all objects.

    local : bool, default False
        Whether local reducts are the main result, see `compute_reducts`.

    Raises `ConfigurationError` if `alpha` is out of range.
    """

    def __init__(self, table: DecisionTable, alpha: float = 0.0,
                 indiscernibility='DiscernFromValue',
                 progress: Optional[Progress] = None, local: bool = False):
        if not 0 <= alpha < 1:
            raise ConfigurationError("alpha must be in [0, 1), got %r"
                                     % (alpha,))
        self.table = table
        self.alpha = alpha
        self.indiscernibility = IndiscernibilityRelation.parse(indiscernibility)
        self.progress = progress or Progress()
        self.local = local

    def get_indiscernibility_for_missing(self) -> IndiscernibilityRelation:
        return self.indiscernibility

    def _pair_discerning(self, obj: int, others: np.ndarray) -> np.ndarray:
        """:return: bool array of shape `(len(others), width)`, the discerning
            attributes of the pairs `(obj, other)` with `obj` as reference, omitting pairs with equal
            decisions and pairs not discerned by any attribute.
        """
        table = self.table
        others = others[table.different_decisions(obj)[others]]
        discerning = table.discerning(obj, self.indiscernibility, others)
        return discerning[discerning.any(axis=1)]

    def _pair_rows(self, obj: Optional[int]):
        """Yield the discerning attributes of all pairs, one array per object
        (see `_pair_discerning`). Global if `obj` is None, otherwise the pairs
        of `obj` in a single array.
        """
        n_objects = self.table.n_objects
        if obj is not None:
            others = np.delete(np.arange(n_objects), obj)
            yield self._pair_discerning(obj, others)
            return
        one_way = self.indiscernibility is \
            IndiscernibilityRelation.DiscernFromValueOneWay
        self.progress.set("partial reduct pair scan", n_objects)
        for i in range(n_objects):
            if one_way:
                others = np.delete(np.arange(n_objects), i)
            else:
                others = np.arange(i + 1, n_objects)
            yield self._pair_discerning(i, others)
            self.progress.step()

    def _count_undiscerned(self, obj: Optional[int], cover: np.ndarray
                           ) -> Tuple[int, np.ndarray]:
        """:return: tuple of (the number of pairs not discerned by the
            attributes in mask `cover`, for each attribute the number of these
            pairs it discerns).
        """
        undiscerned = 0
        counts = np.zeros(self.table.width, dtype=int)
        for rows in self._pair_rows(obj):
            rows = rows[~rows[:, cover].any(axis=1)]
            undiscerned += len(rows)
            counts += rows.sum(axis=0)
        return undiscerned, counts

    def _greedy_cover(self, obj: Optional[int]) -> Optional[int]:
        """:return: The alpha-cover, None if there is no pair to discern."""
        cover = np.zeros(self.table.width, dtype=bool)
        n_pairs, counts = self._count_undiscerned(obj, cover)
        if not n_pairs:
            return None
        allowed = math.floor(self.alpha * n_pairs)
        target = n_pairs - allowed
        covered = 0
        while covered < target:
            counts[cover] = 0
            best = int(np.argmax(counts))
            if counts[best] == 0:
                raise ReductInvariantError(
                    "greedy algorithm: best attribute %d discerns no pair, "
                    "%d of %d pairs discerned" % (best, covered, target))
            cover[best] = True
            covered += int(counts[best])
            logger.debug("partial reduct: added attribute %d, "
                         "%d of %d pairs discerned", best, covered, target)
            if covered < target:
                _, counts = self._count_undiscerned(obj, cover)

        for attribute in np.flatnonzero(cover):
            cover[attribute] = False
            undiscerned, _ = self._count_undiscerned(obj, cover)
            if undiscerned > allowed:
                cover[attribute] = True
            else:
                logger.debug("partial reduct: dropped attribute %d",
                             attribute)
        return indices_to_bits(np.flatnonzero(cover))

    def get_reducts(self) -> List[int]:
        """:return: A single global alpha-cover, as list. Without pairs to
            discern, that is the empty reduct.
        """
        cover = self._greedy_cover(None)
        return [0 if cover is None else cover]

    def get_single_object_reducts(self, obj: int) -> List[int]:
        """
        :return: A single local alpha-cover for `obj`, as list. Empty if
            `obj` need not be discerned from any other object.
        :raises ReductInvariantError: if `obj` is no object of the table.
        """
        if not 0 <= obj < self.table.n_objects:
            raise ReductInvariantError(
                "Object %r not found in table of %d objects while generating "
                "local partial reduct" % (obj, self.table.n_objects))
        cover = self._greedy_cover(obj)
        return [] if cover is None else [cover]


def make_reducts_provider(reducts_method, table: DecisionTable,
                          indiscernibility='DiscernFromValue',
                          discernibility_method=
                          'OrdinaryDecisionAndInconsistenciesOmitted',
                          transitive_closure: bool = True,
                          alpha: float = 0.0,
                          prime_implicants='exhaustive',
                          progress: Optional[Progress] = None
                          ) -> ReductsProvider:
    """Construct the reducts provider for `reducts_method`:

    - `AllGlobal`: `AllGlobalReductsProvider`
    - `AllLocal`: `AllLocalReductsProvider`
    - `OneJohnson`, `AllJohnson`: `JohnsonReductsProvider`
    - `PartialGlobal`, `PartialLocal`: `PartialReductsProvider`

    Parameters not used by the respective provider are ignored.

    :raises ConfigurationError: for unknown names or values out of range.
    """
    method = ReductsMethod.parse(reducts_method)
    if method in (ReductsMethod.PartialGlobal, ReductsMethod.PartialLocal):
        return PartialReductsProvider(table, alpha, indiscernibility,
                                      progress, method.is_local)
    matrix_config = dict(indiscernibility=indiscernibility,
                         discernibility_method=discernibility_method,
                         transitive_closure=transitive_closure,
                         prime_implicants=prime_implicants,
                         progress=progress)
    if method is ReductsMethod.AllGlobal:
        return AllGlobalReductsProvider(table, **matrix_config)
    if method is ReductsMethod.AllLocal:
        return AllLocalReductsProvider(table, **matrix_config)
    return JohnsonReductsProvider(table, method, **matrix_config)


def compute_local_reducts(provider: LocalReductsProvider,
                          table: DecisionTable) -> List[List[int]]:
    """:return: The local reducts of each object of `table`."""
    return [provider.get_single_object_reducts(obj)
            for obj in range(table.n_objects)]


def union_reducts(local_reducts: List[List[int]]) -> List[int]:
    """:return: The distinct reducts of all lists in `local_reducts`, ordered
        by `util.sort_key`.
    """
    return sorted({reduct for reducts in local_reducts for reduct in reducts},
                  key=sort_key)


def compute_reducts(provider: ReductsProvider, table: DecisionTable
                    ) -> List[int]:
    """:return: The global reducts of `provider`, or if it is `local` the
        distinct local reducts of all objects of `table`.
    """
    if not provider.local:
        return provider.get_reducts()
    return union_reducts(compute_local_reducts(provider, table))
