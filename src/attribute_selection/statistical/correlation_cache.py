"""
Lazily filled symmetric correlation cache with per-attribute spreads.

The cache owns an N x N matrix of correlations together with a boolean
bitmap recording which pairs have been computed, so no correlation value
doubles as an "uncomputed" marker. A pair is computed at most once; both
slots (i, j) and (j, i) are written before the value is handed out.

Alongside the matrix it keeps one spread (standard deviation) per
attribute. Spreads start at 1.0 and are replaced at most once, by the first
estimator call that derives a non-zero spread for that attribute.
"""

import logging
from typing import Callable, Dict, Optional

import numpy as np

from .correlation_estimators import PairCorrelation

logger = logging.getLogger(__name__)


class CorrelationCache:
    """Get-or-compute store for pairwise attribute correlations."""

    def __init__(self, num_attributes: int):
        self.num_attributes = num_attributes
        self._values = np.eye(num_attributes)
        self._computed = np.eye(num_attributes, dtype=bool)
        self._std_devs = np.ones(num_attributes)
        self._std_derived = np.zeros(num_attributes, dtype=bool)
        self.computations_ = 0

    def get_or_compute(
        self,
        att_a: int,
        att_b: int,
        compute: Callable[[int, int], PairCorrelation]
    ) -> float:
        """Return the cached correlation of a pair, computing and storing it on a miss."""
        if self._computed[att_a, att_b]:
            return float(self._values[att_a, att_b])

        pair = compute(att_a, att_b)
        self._record_spreads(pair.spreads)
        self._values[att_a, att_b] = pair.value
        self._values[att_b, att_a] = pair.value
        self._computed[att_a, att_b] = True
        self._computed[att_b, att_a] = True
        self.computations_ += 1
        logger.debug(f"Correlation ({att_a}, {att_b}) computed: {pair.value:.6f}")
        return pair.value

    def peek(self, att_a: int, att_b: int) -> Optional[float]:
        """Cached correlation of a pair, or None when it has not been computed."""
        if not self._computed[att_a, att_b]:
            return None
        return float(self._values[att_a, att_b])

    def is_computed(self, att_a: int, att_b: int) -> bool:
        return bool(self._computed[att_a, att_b])

    def std_dev(self, index: int) -> float:
        return float(self._std_devs[index])

    def is_std_dev_derived(self, index: int) -> bool:
        return bool(self._std_derived[index])

    @property
    def std_devs(self) -> np.ndarray:
        return self._std_devs.copy()

    def computed_pairs(self) -> int:
        """Number of distinct off-diagonal pairs stored so far."""
        off_diagonal = self._computed & ~np.eye(self.num_attributes, dtype=bool)
        return int(off_diagonal.sum() // 2)

    def _record_spreads(self, spreads: Dict[int, float]) -> None:
        for index, spread in spreads.items():
            if not self._std_derived[index]:
                self._std_devs[index] = spread
                self._std_derived[index] = True
