"""
Rough set reducts:
Generalized decisions and the discernibility matrix of a decision table.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, List, Optional, Set

import numpy as np

from sklearn_reducts.common import \
    DecisionTable, DiscernibilityMethod, IndiscernibilityRelation
from sklearn_reducts.util import Progress, masks_to_bits

logger = logging.getLogger(__name__)


class GeneralizedDecisionProvider(ABC):
    """Maps each object to the id of its generalized decision, i.e. of the set
    of decisions found among the objects indiscernible from it.

    Attributes
    -----
    class_ids_ : np.ndarray of shape `(n_objects,)` and dtype int
        Generalized decision id of each object.

    decision_sets_ : List[FrozenSet]
        Indexed by generalized decision id: the decisions it contains.
    """

    class_ids_: np.ndarray
    decision_sets_: List[FrozenSet]

    def __init__(self, table: DecisionTable,
                 indiscernibility: IndiscernibilityRelation =
                 IndiscernibilityRelation.DontDiscernFromValue,
                 progress: Optional[Progress] = None):
        self.table = table
        self.indiscernibility = IndiscernibilityRelation.parse(indiscernibility)
        self._generate_mapping(progress or Progress())
        logger.debug("%s: %d generalized decisions for %d objects",
                     type(self).__name__, len(self.decision_sets_),
                     table.n_objects)

    @abstractmethod
    def _generate_mapping(self, progress: Progress) -> None:
        """Compute `class_ids_` and `decision_sets_`."""
        raise NotImplementedError

    def _similar_to(self, obj: int) -> np.ndarray:
        """:return: mask of all objects indiscernible from `obj`, which is the
            reference object of the (possibly nonsymmetric) relation.
        """
        return ~self.table.discerning(obj, self.indiscernibility).any(axis=1)

    def have_the_same_decision(self, obj1: int, obj2: int) -> bool:
        """:return: True iff both objects have the same generalized decision.
        """
        return bool(self.class_ids_[obj1] == self.class_ids_[obj2])

    def decision_set_for(self, obj: int) -> FrozenSet:
        """:return: the generalized decision of `obj`, as set of decisions."""
        return self.decision_sets_[self.class_ids_[obj]]

    def _number_decision_sets(self, decision_sets) -> Dict[FrozenSet, int]:
        """Assign sequential ids to the distinct `decision_sets` (sets of
        decision codes), in order of first occurrence, and fill
        `decision_sets_` with the corresponding sets of decision labels.
        """
        sequence: Dict[FrozenSet, int] = {}
        self.decision_sets_ = []
        values = self.table.decision_values.tolist()
        for decision_set in decision_sets:
            if decision_set not in sequence:
                sequence[decision_set] = len(sequence)
                self.decision_sets_.append(
                    frozenset(values[code] for code in decision_set))
        return sequence


class ClassicGeneralizedDecisionProvider(GeneralizedDecisionProvider):
    """Direct generalized decision: the decisions of all objects directly
    indiscernible from an object. The induced relation need not be transitive.
    """

    def _generate_mapping(self, progress: Progress) -> None:
        codes = self.table.decision_codes
        n_objects = self.table.n_objects
        progress.set("generalized decision", n_objects)
        object_sets = []
        for obj in range(n_objects):
            decisions = set(codes[self._similar_to(obj)].tolist())
            decisions.add(int(codes[obj]))
            object_sets.append(frozenset(decisions))
            progress.step()
        sequence = self._number_decision_sets(object_sets)
        self.class_ids_ = np.array([sequence[s] for s in object_sets],
                                   dtype=int)


class DisjointSets:
    """Union-find over `0..size`, with path compression and union by rank.

    Stored as arrays indexed by element, not as object graph.
    """

    def __init__(self, size: int):
        self.parent = np.arange(size)
        self.rank = np.zeros(size, dtype=int)

    def find(self, element: int) -> int:
        """:return: the representative of the set containing `element`."""
        root = element
        while self.parent[root] != root:
            root = self.parent[root]
        # path compression
        while self.parent[element] != root:
            self.parent[element], element = root, self.parent[element]
        return root

    def join(self, element1: int, element2: int) -> None:
        """Merge the sets containing the given elements."""
        root1 = self.find(element1)
        root2 = self.find(element2)
        if root1 == root2:
            return
        if self.rank[root1] > self.rank[root2]:
            self.parent[root2] = root1
        else:
            self.parent[root1] = root2
            if self.rank[root1] == self.rank[root2]:
                self.rank[root2] += 1

    def finalize(self) -> np.ndarray:
        """Compress all paths.

        :return: `parent`, now mapping each element to its representative.
        """
        for element in range(len(self.parent)):
            self.find(element)
        return self.parent


class TransitiveClosureGeneralizedDecisionProvider(GeneralizedDecisionProvider):
    """Generalized decision over the transitive closure of indiscernibility:
    objects connected by a chain of indiscernible objects share one
    generalized decision, so the induced relation is an equivalence.
    """

    def _generate_mapping(self, progress: Progress) -> None:
        n_objects = self.table.n_objects
        progress.set("generalized decision transitive closure", n_objects)
        sets = DisjointSets(n_objects)
        for obj1 in range(n_objects):
            for obj2 in np.flatnonzero(self._similar_to(obj1)):
                if obj1 != obj2:
                    sets.join(obj1, obj2)
            progress.step()
        roots = sets.finalize()

        # union the decisions of each component
        component_decisions: Dict[int, Set[int]] = {}
        for obj, root in enumerate(roots.tolist()):
            component_decisions.setdefault(root, set()).add(
                int(self.table.decision_codes[obj]))
        by_root = {root: frozenset(decisions)
                   for root, decisions in sorted(component_decisions.items())}
        sequence = self._number_decision_sets(by_root.values())
        self.class_ids_ = np.array([sequence[by_root[root]]
                                    for root in roots.tolist()], dtype=int)


def make_generalized_decision_provider(
        table: DecisionTable,
        indiscernibility: IndiscernibilityRelation,
        transitive_closure: bool,
        progress: Optional[Progress] = None) -> GeneralizedDecisionProvider:
    """:return: the transitive closure or the direct (classic) provider."""
    if transitive_closure:
        return TransitiveClosureGeneralizedDecisionProvider(
            table, indiscernibility, progress)
    return ClassicGeneralizedDecisionProvider(table, indiscernibility,
                                              progress)


class DiscernibilityMatrixProvider:
    """Builds the discernibility matrix of a decision table, as set of clauses.

    A clause is an `int` bit vector of the conditional attributes discerning a
    pair of objects which, according to `discernibility_method`, has to be
    discerned. Pairs not discerned by any attribute yield no clause, identical
    clauses collapse.

    Parameters
    -----
    table : DecisionTable

    indiscernibility : IndiscernibilityRelation or str
        Comparison of missing values, see `IndiscernibilityRelation`.

    discernibility_method : DiscernibilityMethod or str
        Which pairs have to be discerned, see `DiscernibilityMethod`.

    transitive_closure : bool
        Only used for the methods based on generalized decisions: iff True, use
        `TransitiveClosureGeneralizedDecisionProvider`, otherwise
        `ClassicGeneralizedDecisionProvider`.

    progress : Progress or None
        Notified once per object while building the generalized decision.

    Raises `ConfigurationError` for unknown relation or method names.
    """

    def __init__(self, table: DecisionTable,
                 indiscernibility='DiscernFromValue',
                 discernibility_method='OrdinaryDecisionAndInconsistenciesOmitted',
                 transitive_closure: bool = True,
                 progress: Optional[Progress] = None):
        self.table = table
        self.indiscernibility = IndiscernibilityRelation.parse(indiscernibility)
        self.discernibility_method = \
            DiscernibilityMethod.parse(discernibility_method)
        self.generalized_decision: Optional[GeneralizedDecisionProvider] = None
        if self.discernibility_method.uses_generalized_decision:
            self.generalized_decision = make_generalized_decision_provider(
                table, self.indiscernibility, transitive_closure, progress)

    def get_indiscernibility_for_missing(self) -> IndiscernibilityRelation:
        return self.indiscernibility

    def pairs_to_discern(self, obj: int) -> np.ndarray:
        """:return: mask over all objects, True for those which have to be
            discerned from `obj`.
        """
        method = self.discernibility_method
        if method is DiscernibilityMethod.All:
            return np.ones(self.table.n_objects, dtype=bool)
        if method is DiscernibilityMethod.OrdinaryDecisionAndInconsistenciesOmitted:
            return self.table.different_decisions(obj)
        class_ids = self.generalized_decision.class_ids_
        different_generalized = class_ids != class_ids[obj]
        if method is DiscernibilityMethod.GeneralizedDecision:
            return different_generalized
        assert method is DiscernibilityMethod.GeneralizedDecisionAndOrdinaryChecked
        return different_generalized & self.table.different_decisions(obj)

    def _add_discernibility(self, clauses: Set[int], obj: int) -> None:
        others = np.flatnonzero(self.pairs_to_discern(obj))
        if not len(others):
            return
        discerning = self.table.discerning(obj, self.indiscernibility, others)
        clauses.update(clause for clause in masks_to_bits(discerning)
                       if clause)

    def get_discernibility_matrix(self, progress: Optional[Progress] = None
                                  ) -> Set[int]:
        """:return: the clauses of all pairs of objects (global CNF)."""
        progress = progress or Progress()
        progress.set("discernibility matrix", self.table.n_objects)
        clauses: Set[int] = set()
        for obj in range(self.table.n_objects):
            self._add_discernibility(clauses, obj)
            progress.step()
        logger.debug("discernibility matrix: %d distinct clauses",
                     len(clauses))
        return clauses

    def get_local_discernibility(self, obj: int) -> Set[int]:
        """:return: the clauses of all pairs containing `obj` (local CNF)."""
        clauses: Set[int] = set()
        self._add_discernibility(clauses, obj)
        return clauses
