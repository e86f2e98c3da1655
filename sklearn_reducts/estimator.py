"""
Rough set reducts as scikit-learn feature selector.
"""

import logging
import warnings
from typing import List, Mapping, Tuple

import numpy as np

from sklearn.base import BaseEstimator
from sklearn.feature_selection import SelectorMixin
from sklearn.utils.multiclass import check_classification_targets
from sklearn.utils.validation import check_is_fitted, validate_data

from sklearn_reducts.common import ConfigurationError, DecisionTable
from sklearn_reducts.reducts import compute_local_reducts, compute_reducts, \
    make_reducts_provider, union_reducts
from sklearn_reducts.util import bits_to_indices, indices_to_bits

logger = logging.getLogger(__name__)

_PROPERTY_NAMES = {
    'Reducts': 'reducts_method',
    'IndiscernibilityForMissing': 'indiscernibility',
    'DiscernibilityMethod': 'discernibility_method',
    'GeneralizedDecisionTransitiveClosure': 'transitive_closure',
    'AlphaForPartialReducts': 'alpha',
}


def _parse_bool(name: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if str(value).upper() == 'TRUE':
        return True
    if str(value).upper() == 'FALSE':
        return False
    raise ConfigurationError("Property %s must be TRUE or FALSE, got %r"
                             % (name, value))


# noinspection PyAttributeOutsideInit
class RoughSetReducts(SelectorMixin, BaseEstimator):
    """Feature selection by rough set reducts.

    A reduct is a minimal subset of the conditional features preserving the
    ability to discern the samples which have to be discerned, usually those
    with different classes. Features should be categorical (or discretized,
    e.g. by `sklearn.preprocessing.KBinsDiscretizer`), since values are only
    compared for equality. `np.nan` marks a missing value.

    Parameters
    -----
    reducts_method : str, default 'AllGlobal'
        One of `AllGlobal`, `AllLocal`, `OneJohnson`, `AllJohnson`,
        `PartialGlobal`, `PartialLocal`, see
        `sklearn_reducts.reducts.make_reducts_provider`.

    indiscernibility : str, default 'DiscernFromValue'
        Comparison of missing values, see
        `sklearn_reducts.common.IndiscernibilityRelation`.

    discernibility_method : str, default 'OrdinaryDecisionAndInconsistenciesOmitted'
        Which pairs of samples have to be discerned, see
        `sklearn_reducts.common.DiscernibilityMethod`.

    transitive_closure : bool, default True
        Compute generalized decisions over the transitive closure of
        indiscernibility. Only used by the generalized decision methods.

    alpha : float, default 0.0
        For the partial methods: fraction of pairs which may stay undiscerned,
        in `[0, 1)`.

    prime_implicants : str, default 'exhaustive'
        Algorithm for the exact methods, `exhaustive` or `heuristic`.

    conditional_features : None or "all" or array of indices or mask.
        The features a reduct is selected from; the others never discern
        samples. None means all features.

    Attributes
    -----
    reducts_ : List[Tuple[int, ...]]
        The reducts as sorted tuples of feature indices, shortest first. For
        local methods, the distinct local reducts of all samples.

    local_reducts_ : List[List[Tuple[int, ...]]] or None
        For local methods, the local reducts of each training sample.

    core_ : Tuple[int, ...]
        The features contained in every reduct.

    support_ : np.ndarray of shape (n_features_in_,) and dtype bool
        The selected features: the first (shortest) reduct for global
        methods, the union of all local reducts for local methods.

    n_features_in_ : int
        The number of features seen in `fit`.
    """

    def __init__(self,
                 reducts_method: str = 'AllGlobal',
                 indiscernibility: str = 'DiscernFromValue',
                 discernibility_method: str =
                 'OrdinaryDecisionAndInconsistenciesOmitted',
                 transitive_closure: bool = True,
                 alpha: float = 0.0,
                 prime_implicants: str = 'exhaustive',
                 conditional_features=None):
        self.reducts_method = reducts_method
        self.indiscernibility = indiscernibility
        self.discernibility_method = discernibility_method
        self.transitive_closure = transitive_closure
        self.alpha = alpha
        self.prime_implicants = prime_implicants
        self.conditional_features = conditional_features

    @classmethod
    def from_properties(cls, properties: Mapping[str, str], **kwargs
                        ) -> 'RoughSetReducts':
        """Build an estimator from property style configuration, e.g.
        `{'Reducts': 'AllLocal', 'GeneralizedDecisionTransitiveClosure':
        'FALSE'}`. Further parameters may be given as `kwargs`.

        :raises ConfigurationError: for unknown property names or malformed
            values.
        """
        params = dict(kwargs)
        for name, value in properties.items():
            if name not in _PROPERTY_NAMES:
                raise ConfigurationError(
                    "Unknown property %r. Use one of: %s"
                    % (name, ', '.join(_PROPERTY_NAMES)))
            if name == 'GeneralizedDecisionTransitiveClosure':
                value = _parse_bool(name, value)
            elif name == 'AlphaForPartialReducts':
                try:
                    value = float(value)
                except ValueError:
                    raise ConfigurationError(
                        "Property %s must be a number, got %r"
                        % (name, value)) from None
            params[_PROPERTY_NAMES[name]] = value
        return cls(**params)

    def fit(self, X, y):
        """Compute the reducts of the decision table `(X, y)`.

        :raises ConfigurationError: for invalid parameters.
        """
        X, y = validate_data(self, X, y, dtype=np.float64,
                             ensure_all_finite='allow-nan')
        check_classification_targets(y)
        table = DecisionTable(X, y, self.conditional_features)
        provider = make_reducts_provider(
            self.reducts_method, table,
            indiscernibility=self.indiscernibility,
            discernibility_method=self.discernibility_method,
            transitive_closure=self.transitive_closure,
            alpha=self.alpha,
            prime_implicants=self.prime_implicants)
        logger.debug("fit %s on %r", self.reducts_method, table)

        if provider.local:
            local = compute_local_reducts(provider, table)
            self.local_reducts_ = [[bits_to_indices(r) for r in reducts]
                                   for reducts in local]
            reducts = union_reducts(local)
        else:
            self.local_reducts_ = None
            reducts = compute_reducts(provider, table)
        self.reducts_: List[Tuple[int, ...]] = \
            [bits_to_indices(r) for r in reducts]

        if not reducts or reducts == [0]:
            warnings.warn("No pair of samples has to be discerned, no feature "
                          "is selected.")
        core = ~0
        for reduct in reducts:
            core &= reduct
        self.core_ = bits_to_indices(core) if reducts else ()

        self.support_ = np.zeros(self.n_features_in_, dtype=bool)
        if provider.local:
            selected = indices_to_bits(i for r in self.reducts_ for i in r)
        else:
            selected = reducts[0] if reducts else 0
        self.support_[list(bits_to_indices(selected))] = True
        return self

    def _get_support_mask(self):
        check_is_fitted(self, 'support_')
        return self.support_

    def __sklearn_tags__(self):
        tags = super().__sklearn_tags__()
        tags.input_tags.allow_nan = True
        return tags

    def export_text(self, feature_names: List[str] = None) -> str:
        """Build a text report listing the reducts, one per line.

        Parameters
        -----
        feature_names : list, optional
            A list of length n_features containing the feature names.
            If None, generic names will be generated.
        """
        check_is_fitted(self, 'reducts_')
        if feature_names:
            if len(feature_names) != self.n_features_in_:
                raise ValueError(
                    "feature_names must contain %d elements, got %d"
                    % (self.n_features_in_, len(feature_names)))
        else:
            feature_names = ["feature_{}".format(i + 1)
                             for i in range(self.n_features_in_)]
        return '\n'.join(
            '{' + ', '.join(feature_names[i] for i in reduct) + '}'
            for reduct in self.reducts_)
