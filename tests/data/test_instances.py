"""
Tests for the attribute dataset view.
"""

import numpy as np
import pandas as pd
import pytest

from src.data.core.instances import Attribute, AttributeDataset, AttributeKind


@pytest.fixture
def mixed_frame():
    return pd.DataFrame({
        'price': [1.0, 2.0, np.nan, 4.0],
        'sector': pd.Categorical(['tech', 'fin', 'tech', None]),
        'flag': [True, False, True, True],
        'ticker': pd.array(['A', 'B', 'C', 'D'], dtype='string'),
        'label': ['up', 'down', 'up', 'up']
    })


class TestFromDataFrame:
    """Test conversion of DataFrames into datasets."""

    def test_attribute_kinds(self, mixed_frame):
        dataset = AttributeDataset.from_dataframe(mixed_frame, class_column='label')

        kinds = [a.kind for a in dataset.attributes]
        assert kinds == [
            AttributeKind.NUMERIC,
            AttributeKind.NOMINAL,
            AttributeKind.NOMINAL,
            AttributeKind.STRING,
            AttributeKind.NOMINAL
        ]
        assert dataset.class_index == 4
        assert dataset.class_attribute.name == 'label'
        assert dataset.check_for_string_attributes()

    def test_missing_values_become_nan(self, mixed_frame):
        dataset = AttributeDataset.from_dataframe(mixed_frame)

        assert np.isnan(dataset.column(0)[2])
        assert dataset.is_missing(1).tolist() == [False, False, False, True]
        assert dataset.attribute(1).values == ('fin', 'tech')

    def test_unknown_class_column(self, mixed_frame):
        with pytest.raises(ValueError, match="not found"):
            AttributeDataset.from_dataframe(mixed_frame, class_column='missing')

    def test_default_weights(self, mixed_frame):
        dataset = AttributeDataset.from_dataframe(mixed_frame)
        assert np.array_equal(dataset.weights, np.ones(4))


class TestValidation:
    """Test constructor validation."""

    def test_column_count_mismatch(self):
        attributes = [Attribute('a', 0, AttributeKind.NUMERIC)]
        with pytest.raises(ValueError, match="columns"):
            AttributeDataset(attributes, np.zeros((3, 2)))

    def test_attribute_index_mismatch(self):
        attributes = [Attribute('a', 1, AttributeKind.NUMERIC)]
        with pytest.raises(ValueError, match="expected 0"):
            AttributeDataset(attributes, np.zeros((3, 1)))

    def test_class_index_out_of_range(self):
        attributes = [Attribute('a', 0, AttributeKind.NUMERIC)]
        with pytest.raises(ValueError, match="out of range"):
            AttributeDataset(attributes, np.zeros((3, 1)), class_index=1)

    def test_columns_hold_given_data(self):
        attributes = [
            Attribute('a', 0, AttributeKind.NUMERIC),
            Attribute('b', 1, AttributeKind.NOMINAL, ('x', 'y'))
        ]
        data = np.array([[1.5, 0.0], [np.nan, 1.0]])
        dataset = AttributeDataset(attributes, data)

        np.testing.assert_array_equal(
            np.column_stack([dataset.column(i) for i in range(dataset.num_attributes)]), data
        )
        assert dataset.is_missing(0).tolist() == [False, True]

    def test_weight_shape(self):
        attributes = [Attribute('a', 0, AttributeKind.NUMERIC)]
        with pytest.raises(ValueError, match="Weights"):
            AttributeDataset(attributes, np.zeros((3, 1)), weights=np.ones(2))


class TestStatistics:
    """Test mean/mode and row filtering."""

    def test_weighted_mean_skips_missing(self):
        attributes = [Attribute('a', 0, AttributeKind.NUMERIC)]
        data = np.array([[1.0], [3.0], [np.nan]])
        dataset = AttributeDataset(attributes, data, weights=np.array([1.0, 3.0, 5.0]))

        assert dataset.mean_or_mode(0) == pytest.approx(2.5)

    def test_weighted_mode(self):
        attributes = [Attribute('a', 0, AttributeKind.NOMINAL, ('x', 'y'))]
        data = np.array([[0.0], [0.0], [1.0]])
        dataset = AttributeDataset(attributes, data, weights=np.array([1.0, 1.0, 5.0]))

        assert dataset.mean_or_mode(0) == 1.0

    def test_delete_with_missing_class(self):
        attributes = [
            Attribute('a', 0, AttributeKind.NUMERIC),
            Attribute('c', 1, AttributeKind.NOMINAL, ('x', 'y'))
        ]
        data = np.array([[1.0, 0.0], [2.0, np.nan], [3.0, 1.0]])
        dataset = AttributeDataset(attributes, data, class_index=1)

        cleaned = dataset.delete_with_missing_class()
        assert cleaned.num_instances == 2
        assert cleaned.column(0).tolist() == [1.0, 3.0]
        assert dataset.num_instances == 3


class TestProjection:
    """Test attribute selection and round trips."""

    def test_select_attributes_remaps_class(self, mixed_frame):
        dataset = AttributeDataset.from_dataframe(mixed_frame, class_column='label')

        reduced = dataset.select_attributes([0, 4])
        assert reduced.attribute_names() == ['price', 'label']
        assert reduced.class_index == 1
        assert reduced.attribute(1).index == 1

    def test_select_attributes_without_class(self, mixed_frame):
        dataset = AttributeDataset.from_dataframe(mixed_frame, class_column='label')
        assert dataset.select_attributes([0, 1]).class_index is None

    def test_to_dataframe(self, mixed_frame):
        frame = mixed_frame.drop(columns=['ticker'])
        dataset = AttributeDataset.from_dataframe(frame)

        restored = dataset.to_dataframe()
        assert list(restored.columns) == list(frame.columns)
        assert restored['sector'].isna().tolist() == [False, False, False, True]
        assert restored['label'].astype(str).tolist() == ['up', 'down', 'up', 'up']
