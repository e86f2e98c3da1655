"""Rough set reducts: minimal feature subsets preserving discernibility.

Limitations / Assumptions
=====

- values are only compared for equality, numerical features have to be
  discretized beforehand
- missing values are `np.nan`, see `common.IndiscernibilityRelation`
- no sparse input
- exponential running time (and memory) for the exact methods in the worst
  case, computing all prime implicants is NP-hard
- single threaded, a computation can only be stopped at object boundaries via
  `util.Progress`
- classification only, no regression
"""

from sklearn_reducts.common import ConfigurationError, DecisionTable, \
    ReductInvariantError
from sklearn_reducts.estimator import RoughSetReducts
from sklearn_reducts.reducts import compute_local_reducts, compute_reducts, \
    make_reducts_provider, union_reducts
from sklearn_reducts.util import ComputationInterrupted

__all__ = ['common', 'discernibility', 'estimator', 'logic', 'reducts',
           'tests', 'util',
           'ComputationInterrupted', 'ConfigurationError', 'DecisionTable',
           'ReductInvariantError', 'RoughSetReducts', 'compute_local_reducts',
           'compute_reducts', 'make_reducts_provider', 'union_reducts']
