"""
Rough set reducts:
The decision table, indiscernibility relations and configuration enumerations
shared by all providers.
"""

import math
from enum import Enum
from typing import Union

import numpy as np

from sklearn_reducts.util import build_attribute_mask


class ConfigurationError(ValueError):
    """An unknown or invalid configuration value, e.g. an unknown relation or
    reducts method name. Raised when a provider is constructed.
    """


class ReductInvariantError(RuntimeError):
    """An internal invariant of a reduct computation is violated, e.g. the
    greedy best attribute does not cover anything. Indicates a logic or data
    consistency bug, never handled by this library.
    """


class ConfigurationEnum(Enum):
    """Base of the configuration enumerations. Members have their own name as
    value, so `parse` accepts members as well as their string names.
    """

    @classmethod
    def parse(cls, value) -> 'ConfigurationEnum':
        """:return: the member named `value` (or `value` itself if it already
            is a member).
        :raises ConfigurationError: if there is no such member.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                "Unknown {}: {!r}. Use one of: {}".format(
                    cls.__name__, value,
                    ', '.join(member.value for member in cls))) from None

    def __str__(self):
        return self.value


class IndiscernibilityRelation(ConfigurationEnum):
    """How missing values (`NaN`) are compared when deciding whether two
    objects are discerned by an attribute.

    - `DiscernFromValue`: classic indiscernibility, a missing value is a value
      of its own. Two missing values are similar, a missing and a present
      value are not.
    - `DontDiscernFromValue`: symmetric similarity, a missing value is similar
      to anything.
    - `DiscernFromValueOneWay`: nonsymmetric similarity, a missing value of the
      first (reference) object is similar to anything, but a present value is
      not similar to a missing one. `similar(a, b)` may differ from
      `similar(b, a)`.
    """
    DiscernFromValue = 'DiscernFromValue'
    DiscernFromValueOneWay = 'DiscernFromValueOneWay'
    DontDiscernFromValue = 'DontDiscernFromValue'

    def similar(self, value1: float, value2: float, attribute: int = None
                ) -> bool:
        """:return: True iff `value1` (of the reference object) and `value2`
            are indiscernible at `attribute`.
        """
        if value1 == value2:
            return True
        missing1 = math.isnan(value1)
        if self is IndiscernibilityRelation.DiscernFromValueOneWay:
            return missing1
        missing2 = math.isnan(value2)
        if self is IndiscernibilityRelation.DiscernFromValue:
            return missing1 and missing2
        return missing1 or missing2

    def similar_values(self, values1: np.ndarray, values2: np.ndarray
                       ) -> np.ndarray:
        """Vectorized `similar`, broadcasting `values1` against `values2`.

        :param values1: values of the reference object(s).
        :return: An array of dtype bool of the broadcast shape.
        """
        missing1 = np.isnan(values1)
        equal = np.equal(values1, values2)
        if self is IndiscernibilityRelation.DiscernFromValueOneWay:
            return equal | missing1
        missing2 = np.isnan(values2)
        if self is IndiscernibilityRelation.DiscernFromValue:
            return equal | (missing1 & missing2)
        return equal | missing1 | missing2

    def discerning(self, x: np.ndarray, X: np.ndarray,
                   conditional_mask: np.ndarray) -> np.ndarray:
        """:return: An array of shape `X.shape` and dtype bool, True where a
            conditional attribute discerns reference object `x` from the
            respective row of `X`. Non-conditional columns are always False.
        """
        return ~self.similar_values(x, X) & conditional_mask

    def similar_objects(self, x1: np.ndarray, x2: np.ndarray,
                        conditional_mask: np.ndarray) -> bool:
        """:return: True iff `x1` and `x2` are similar at all conditional
            attributes.
        """
        return not self.discerning(x1, x2, conditional_mask).any()


class DiscernibilityMethod(ConfigurationEnum):
    """Which pairs of objects have to be discerned by a reduct.

    - `All`: every pair.
    - `GeneralizedDecision`: pairs with different generalized decisions.
    - `GeneralizedDecisionAndOrdinaryChecked`: pairs with different decisions
      and different generalized decisions.
    - `OrdinaryDecisionAndInconsistenciesOmitted`: pairs with different
      decisions.
    """
    All = 'All'
    GeneralizedDecision = 'GeneralizedDecision'
    GeneralizedDecisionAndOrdinaryChecked = \
        'GeneralizedDecisionAndOrdinaryChecked'
    OrdinaryDecisionAndInconsistenciesOmitted = \
        'OrdinaryDecisionAndInconsistenciesOmitted'

    @property
    def uses_generalized_decision(self) -> bool:
        return self in (DiscernibilityMethod.GeneralizedDecision,
                        DiscernibilityMethod.GeneralizedDecisionAndOrdinaryChecked)


class ReductsMethod(ConfigurationEnum):
    """The kind of reducts to compute, see `reducts.make_reducts_provider`."""
    AllLocal = 'AllLocal'
    AllGlobal = 'AllGlobal'
    OneJohnson = 'OneJohnson'
    AllJohnson = 'AllJohnson'
    PartialLocal = 'PartialLocal'
    PartialGlobal = 'PartialGlobal'

    @property
    def is_local(self) -> bool:
        return self in (ReductsMethod.AllLocal, ReductsMethod.PartialLocal)


class DecisionTable:
    """A decision table: objects described by attribute values and a decision.

    Objects are addressed by their row index. This class only adapts arrays
    and never modifies them.

    Attributes
    -----
    X : np.ndarray of shape `(n_objects, width)` and dtype float
        Attribute values, `np.nan` denotes a missing value.

    y : np.ndarray of shape `(n_objects,)`
        Decision of each object, any labels comparable by `==`.

    conditional_mask : np.ndarray of shape `(width,)` and dtype bool
        True for conditional attributes, the only ones that may discern
        objects.

    decision_codes : np.ndarray of shape `(n_objects,)` and dtype int
        `y` encoded as integers, equal codes iff equal decisions.

    decision_values : np.ndarray
        The distinct decisions, `decision_values[decision_codes] == y`.
    """

    def __init__(self, X, y, conditional_features=None):
        self.X = np.asarray(X, dtype=float)
        self.y = np.asarray(y)
        if self.X.ndim != 2:
            raise ValueError("X must be 2-dimensional, got shape %s"
                             % (self.X.shape,))
        if self.y.shape != (len(self.X),):
            raise ValueError("y must have shape (%d,), got %s"
                             % (len(self.X), self.y.shape))
        self.conditional_mask = build_attribute_mask(conditional_features,
                                                     self.width)
        if self.conditional_mask is None:
            raise ConfigurationError(
                "conditional_features must be one of: None, 'all', "
                "np.ndarray of dtype bool or integer, but got {}."
                .format(conditional_features))
        self.decision_values, self.decision_codes = \
            np.unique(self.y, return_inverse=True)
        self.decision_codes = self.decision_codes.ravel()

    @property
    def width(self) -> int:
        """The number of attributes, i.e. the bit vector width of clauses."""
        return self.X.shape[1]

    @property
    def n_objects(self) -> int:
        return self.X.shape[0]

    def __len__(self):
        return self.n_objects

    def is_conditional(self, attribute: int) -> bool:
        return bool(self.conditional_mask[attribute])

    def get(self, obj: int, attribute: int) -> float:
        """:return: value of `attribute` for object `obj`."""
        return self.X[obj, attribute]

    def decision(self, obj: int):
        return self.y[obj]

    def different_decisions(self, obj: int) -> np.ndarray:
        """:return: mask over all objects, True iff decision differs from the
            one of `obj`.
        """
        return self.decision_codes != self.decision_codes[obj]

    def discerning(self, obj: int, relation: IndiscernibilityRelation,
                   others: Union[slice, np.ndarray] = slice(None)
                   ) -> np.ndarray:
        """:return: bool array of shape `(n_others, width)`, True where a
            conditional attribute discerns `obj` (as reference object) from the
            respective object in `others`.
        """
        return relation.discerning(self.X[obj], self.X[others],
                                   self.conditional_mask)

    def __repr__(self):
        return '{}(n_objects={}, width={}, n_conditional={})'.format(
            type(self).__name__, self.n_objects, self.width,
            np.count_nonzero(self.conditional_mask))
