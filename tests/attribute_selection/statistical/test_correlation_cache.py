"""
Tests for the symmetric correlation cache.
"""

import numpy as np
import pytest

from src.attribute_selection.statistical.correlation_cache import CorrelationCache
from src.attribute_selection.statistical.correlation_estimators import PairCorrelation


class CountingEstimator:
    """Returns fixed correlations and records every call."""

    def __init__(self, value=0.5, spreads=None):
        self.value = value
        self.spreads = spreads or {}
        self.calls = []

    def __call__(self, att_a, att_b):
        self.calls.append((att_a, att_b))
        return PairCorrelation(self.value, dict(self.spreads))


class TestCorrelationCache:
    """Test get-or-compute behaviour and spread bookkeeping."""

    def test_computes_once_per_pair(self):
        cache = CorrelationCache(4)
        estimator = CountingEstimator(0.3)

        assert cache.get_or_compute(1, 2, estimator) == 0.3
        assert cache.get_or_compute(2, 1, estimator) == 0.3
        assert cache.get_or_compute(1, 2, estimator) == 0.3

        assert estimator.calls == [(1, 2)]
        assert cache.computations_ == 1
        assert cache.computed_pairs() == 1

    def test_zero_and_negative_values_are_cached(self):
        cache = CorrelationCache(3)
        estimator = CountingEstimator(0.0)

        cache.get_or_compute(0, 1, estimator)
        cache.get_or_compute(0, 1, estimator)
        assert len(estimator.calls) == 1
        assert cache.peek(1, 0) == 0.0

    def test_peek_uncomputed(self):
        cache = CorrelationCache(3)

        assert cache.peek(0, 2) is None
        assert not cache.is_computed(0, 2)
        assert cache.is_computed(1, 1)
        assert cache.peek(1, 1) == 1.0

    def test_spreads_default_to_one(self):
        cache = CorrelationCache(3)

        np.testing.assert_array_equal(cache.std_devs, np.ones(3))
        assert not cache.is_std_dev_derived(0)

    def test_spread_written_once(self):
        cache = CorrelationCache(3)

        cache.get_or_compute(0, 1, CountingEstimator(0.2, {0: 2.0, 1: 4.0}))
        cache.get_or_compute(0, 2, CountingEstimator(0.2, {0: 9.0, 2: 3.0}))

        assert cache.std_dev(0) == pytest.approx(2.0)
        assert cache.std_dev(1) == pytest.approx(4.0)
        assert cache.std_dev(2) == pytest.approx(3.0)
        assert all(cache.is_std_dev_derived(i) for i in range(3))

    def test_std_devs_is_a_copy(self):
        cache = CorrelationCache(2)
        cache.std_devs[0] = 5.0
        assert cache.std_dev(0) == 1.0
