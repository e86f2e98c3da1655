"""
Miscellaneous things not depending on anything else from sklearn_reducts.

Attribute subsets (clauses, implicants, reducts) are represented as python
`int` bit vectors: bit `a` is set iff attribute `a` is in the subset. They are
hashable, compare structurally and support `&`, `|`, `^` as set operations.
"""

import logging
import threading
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class ComputationInterrupted(Exception):
    """Raised by `Progress.step` when the computation is requested to stop."""


def popcount(bits: int) -> int:
    """:return: The number of attributes in `bits`."""
    return bits.bit_count()


def iter_bits(bits: int) -> Iterator[int]:
    """:return: The indices of the set bits of `bits`, ascending."""
    while bits:
        lowest = bits & -bits
        yield lowest.bit_length() - 1
        bits ^= lowest


def bits_to_indices(bits: int) -> Tuple[int, ...]:
    """:return: Sorted tuple of the attribute indices in `bits`."""
    return tuple(iter_bits(bits))


def indices_to_bits(indices: Iterable[int]) -> int:
    """Inverse of `bits_to_indices`."""
    bits = 0
    for index in indices:
        bits |= 1 << int(index)
    return bits


def bits_to_mask(bits: int, width: int) -> np.ndarray:
    """:return: A boolean array of length `width`, True where `bits` is set."""
    mask = np.zeros(width, dtype=bool)
    mask[list(iter_bits(bits))] = True
    return mask


def masks_to_bits(masks: np.ndarray) -> list:
    """Pack each row of a boolean matrix into an `int` bit vector.

    :param masks: array of shape `(n_rows, width)` and dtype bool.
    :return: list of length `n_rows`, where bit `a` of item `i` is set iff
        `masks[i, a]`.
    """
    masks = np.asarray(masks, dtype=bool)
    if masks.ndim != 2:
        raise ValueError("expected 2d mask array, got shape %s"
                         % (masks.shape,))
    packed = np.packbits(masks, axis=1, bitorder='little')
    return [int.from_bytes(row.tobytes(), 'little') for row in packed]


def bits_to_masks(clauses: Iterable[int], width: int) -> np.ndarray:
    """Inverse of `masks_to_bits`: one boolean row per clause."""
    clauses = list(clauses)
    masks = np.zeros((len(clauses), width), dtype=bool)
    for row, clause in enumerate(clauses):
        masks[row, list(iter_bits(clause))] = True
    return masks


def sort_key(bits: int):
    """Order attribute subsets by size, then by their attribute indices."""
    return popcount(bits), bits_to_indices(bits)


def build_attribute_mask(which_features, n_features: int,
                         default: bool = True) -> Optional[np.ndarray]:
    """:return: A mask array of length `n_features` based on `which_features`.
        Returns None if `which_features` cannot be recognized.

    - None or empty: all entries are `default`.
    - 'all': all features are True.
    - mask: array of dtype bool and length `n_features`.
    - array of indices: these features are True, the others False.
    """
    # which_features modeled like sklearn.preprocessing.OneHotEncoder
    if which_features is None or not len(which_features):
        return np.full(n_features, default, dtype=bool)
    if isinstance(which_features, str):
        if which_features == 'all':
            return np.ones(n_features, dtype=bool)
        return None
    which_features = np.asarray(which_features)
    if which_features.dtype == bool:
        if which_features.shape != (n_features,):
            return None
        return which_features.copy()
    if np.issubdtype(which_features.dtype, np.integer):
        if which_features.min() < 0 or which_features.max() >= n_features:
            return None
        mask = np.zeros(n_features, dtype=bool)
        mask[which_features] = True
        return mask
    return None


class Progress:
    """Receives the advancement of a long running computation.

    Call `set` once with the number of steps, then `step` after each of them.
    If `stop_event` is set, `step` raises `ComputationInterrupted`, which is
    how a caller (e.g. another thread) cancels a computation. Advancement is
    logged at debug level every 10 percent.
    """

    def __init__(self, stop_event: Optional[threading.Event] = None,
                 logger_: logging.Logger = logger):
        self.stop_event = stop_event
        self.logger = logger_
        self.name = None
        self.n_steps = 0
        self.done = 0
        self._reported = 0

    def set(self, name: str, n_steps: int) -> None:
        self.name = name
        self.n_steps = n_steps
        self.done = 0
        self._reported = 0
        self.logger.debug("%s: %d steps", name, n_steps)

    def step(self) -> None:
        """Make a single step.

        :raises ComputationInterrupted: if the computation shall stop.
        """
        if self.stop_event is not None and self.stop_event.is_set():
            raise ComputationInterrupted(
                "%s interrupted after %d of %d steps"
                % (self.name, self.done, self.n_steps))
        self.done += 1
        if self.n_steps:
            percent = 100 * self.done // self.n_steps
            if percent >= self._reported + 10:
                self._reported = percent - percent % 10
                self.logger.debug("%s: %d%%", self.name, self._reported)
