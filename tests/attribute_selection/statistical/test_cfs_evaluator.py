"""
Tests for the CFS subset evaluator.
"""

from itertools import combinations

import numpy as np
import pandas as pd
import pytest

from src.attribute_selection.exceptions import PreconditionViolation, UnsupportedAttributeType
from src.attribute_selection.statistical import CfsConfig, CfsSubsetEvaluator
from src.data.core.instances import AttributeDataset


@pytest.fixture
def numeric_evaluator(numeric_class_dataset):
    evaluator = CfsSubsetEvaluator()
    evaluator.build(numeric_class_dataset)
    return evaluator


@pytest.fixture
def nominal_evaluator(nominal_class_dataset):
    evaluator = CfsSubsetEvaluator()
    evaluator.build(nominal_class_dataset)
    return evaluator


class TestBuild:
    """Test evaluator preparation."""

    def test_numeric_class_is_not_discretized(self, numeric_evaluator):
        assert numeric_evaluator.is_built_
        assert numeric_evaluator.is_numeric_class_
        assert numeric_evaluator.discretizer_ is None
        assert numeric_evaluator.class_index_ == 4

    def test_nominal_class_discretizes(self, nominal_evaluator):
        assert not nominal_evaluator.is_numeric_class_
        assert nominal_evaluator.discretizer_ is not None
        assert all(not a.is_numeric for a in nominal_evaluator.dataset_.attributes)

    def test_string_attribute_rejected(self):
        frame = pd.DataFrame({
            'text': pd.array(['a', 'b', 'c'], dtype='string'),
            'y': [1.0, 2.0, 3.0]
        })
        dataset = AttributeDataset.from_dataframe(frame, class_column='y')

        with pytest.raises(UnsupportedAttributeType):
            CfsSubsetEvaluator().build(dataset)

    def test_class_required(self, numeric_class_frame):
        dataset = AttributeDataset.from_dataframe(numeric_class_frame)

        with pytest.raises(PreconditionViolation, match="class"):
            CfsSubsetEvaluator().build(dataset)

    def test_evaluate_before_build(self):
        with pytest.raises(PreconditionViolation, match="not been built"):
            CfsSubsetEvaluator().evaluate_subset([0])

    def test_missing_class_rows_dropped(self, numeric_class_frame):
        frame = numeric_class_frame.copy()
        frame.loc[:9, 'target'] = np.nan
        dataset = AttributeDataset.from_dataframe(frame, class_column='target')

        evaluator = CfsSubsetEvaluator()
        evaluator.build(dataset)
        assert evaluator.dataset_.num_instances == len(frame) - 10

    def test_rebuild_resets_cache(self, numeric_evaluator, numeric_class_dataset):
        numeric_evaluator.evaluate_subset([0, 1])
        assert numeric_evaluator.num_correlations_computed > 0

        numeric_evaluator.build(numeric_class_dataset)
        assert numeric_evaluator.num_correlations_computed == 0


class TestMerit:
    """Test subset merits."""

    def test_informative_copy_beats_noise(self, numeric_evaluator):
        signal = numeric_evaluator.evaluate_subset([0])
        noise = numeric_evaluator.evaluate_subset([1, 2, 3])

        assert signal == pytest.approx(1.0)
        assert signal > noise

    def test_empty_subset(self, numeric_evaluator):
        assert numeric_evaluator.evaluate_subset([]) == 0.0

    def test_class_index_ignored(self, numeric_evaluator):
        assert numeric_evaluator.evaluate_subset([0, 4]) == numeric_evaluator.evaluate_subset([0])
        assert numeric_evaluator.evaluate_subset([4]) == 0.0

    def test_merits_non_negative(self, nominal_evaluator):
        for size in range(1, 5):
            for subset in combinations(range(4), size):
                assert nominal_evaluator.evaluate_subset(subset) >= 0.0

    def test_idempotent(self, nominal_evaluator):
        first = nominal_evaluator.evaluate_subset([0, 2, 3])
        second = nominal_evaluator.evaluate_subset([3, 2, 0])
        assert first == second

    def test_duplicate_attribute_adds_no_merit(self, nominal_evaluator):
        single = nominal_evaluator.evaluate_subset([0])
        pair = nominal_evaluator.evaluate_subset([0, 1])

        assert single > 0.5
        assert pair <= single + 1e-9

    def test_missing_values_handled(self, nominal_class_frame):
        frame = nominal_class_frame.copy()
        frame.loc[::2, 'dup_2'] = np.nan
        dataset = AttributeDataset.from_dataframe(frame, class_column='label')

        for missing_separate in (False, True):
            evaluator = CfsSubsetEvaluator(CfsConfig(missing_separate=missing_separate))
            evaluator.build(dataset)
            merit = evaluator.evaluate_subset([1])
            assert 0.0 < merit <= 1.0


class TestCorrelationCaching:
    """Test that correlations are computed lazily and at most once."""

    def test_symmetric_correlation(self, numeric_evaluator):
        assert numeric_evaluator.correlation(0, 2) == numeric_evaluator.correlation(2, 0)

    def test_each_pair_computed_once(self, numeric_evaluator):
        for size in range(1, 5):
            for subset in combinations(range(4), size):
                numeric_evaluator.evaluate_subset(subset)

        num_attributes = 5
        assert numeric_evaluator.num_correlations_computed == num_attributes * (num_attributes - 1) // 2

        numeric_evaluator.evaluate_subset([0, 1, 2, 3])
        assert numeric_evaluator.num_correlations_computed == num_attributes * (num_attributes - 1) // 2

    def test_lazy_fill(self, numeric_evaluator):
        numeric_evaluator.evaluate_subset([0])

        assert numeric_evaluator.num_correlations_computed == 1
        assert numeric_evaluator.cache_.peek(1, 2) is None

    def test_spreads_derived_for_numeric_class(self, numeric_evaluator):
        numeric_evaluator.evaluate_subset([0])

        cache = numeric_evaluator.cache_
        assert cache.is_std_dev_derived(0)
        assert cache.std_dev(0) == pytest.approx(2.5 * cache.std_dev(4))


class TestLocallyPredictive:
    """Test the locally predictive postprocessing pass."""

    @staticmethod
    def _patched(evaluator, monkeypatch, matrix):
        monkeypatch.setattr(evaluator, 'correlation', lambda a, b: matrix[a][b])
        return evaluator

    @pytest.fixture
    def correlations(self):
        # attributes 0-3, class 4
        return np.array([
            [1.0, 0.95, 0.1, 0.1, 0.9],
            [0.95, 1.0, 0.2, 0.2, 0.9],
            [0.1, 0.2, 1.0, 0.75, 0.8],
            [0.1, 0.2, 0.75, 1.0, 0.7],
            [0.9, 0.9, 0.8, 0.7, 1.0]
        ])

    def test_disabled_is_identity(self, numeric_evaluator):
        assert numeric_evaluator.post_process([0]) == [0]

    def test_redundant_candidates_rejected(self, numeric_class_dataset, monkeypatch, correlations):
        evaluator = CfsSubsetEvaluator(CfsConfig(locally_predictive=True))
        evaluator.build(numeric_class_dataset)
        self._patched(evaluator, monkeypatch, correlations)

        assert evaluator.post_process([0]) == [0, 2]

    def test_negative_threshold_accepts_all(self, numeric_class_dataset, monkeypatch, correlations):
        config = CfsConfig(locally_predictive=True, locally_predictive_threshold=-0.5)
        evaluator = CfsSubsetEvaluator(config)
        evaluator.build(numeric_class_dataset)
        self._patched(evaluator, monkeypatch, correlations)

        assert evaluator.post_process([0]) == [0, 1, 2, 3]

    def test_each_candidate_considered_once(self, numeric_class_dataset, monkeypatch, correlations):
        evaluator = CfsSubsetEvaluator(CfsConfig(locally_predictive=True))
        evaluator.build(numeric_class_dataset)
        calls = []

        def recording(a, b):
            calls.append((a, b))
            return correlations[a][b]

        monkeypatch.setattr(evaluator, 'correlation', recording)
        evaluator.post_process([0])

        redundancy_checks = [pair for pair in calls if 4 not in pair]
        assert redundancy_checks == [(0, 1), (0, 2), (0, 3), (2, 3)]

    def test_duplicate_not_added(self, nominal_class_dataset):
        evaluator = CfsSubsetEvaluator(CfsConfig(locally_predictive=True))
        evaluator.build(nominal_class_dataset)

        assert 1 not in evaluator.post_process([0])


class TestDescribe:
    """Test the textual description."""

    def test_unbuilt(self):
        assert str(CfsSubsetEvaluator()) == "CFS subset evaluator has not been built yet\n"

    def test_options_listed(self, numeric_class_dataset):
        evaluator = CfsSubsetEvaluator(CfsConfig(missing_separate=True, locally_predictive=True))
        evaluator.build(numeric_class_dataset)

        description = str(evaluator)
        assert description.startswith("\tCFS Subset Evaluator")
        assert "missing values as a separate value" in description
        assert "locally predictive" in description
