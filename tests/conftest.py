"""
Pytest configuration and fixtures for the attribute selection tests.
"""

import logging

import numpy as np
import pandas as pd
import pytest

from src.data.core.instances import AttributeDataset

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def numeric_class_frame():
    """Numeric class, one scaled copy of the class and three noise columns."""
    np.random.seed(42)
    n_samples = 300
    target = np.random.normal(size=n_samples)
    return pd.DataFrame({
        'signal': 2.5 * target,
        'noise_a': np.random.normal(size=n_samples),
        'noise_b': np.random.normal(size=n_samples),
        'noise_c': np.random.normal(size=n_samples),
        'target': target
    })


@pytest.fixture
def numeric_class_dataset(numeric_class_frame):
    return AttributeDataset.from_dataframe(numeric_class_frame, class_column='target')


@pytest.fixture
def nominal_class_frame():
    """Nominal class with a duplicated informative nominal attribute and noise."""
    np.random.seed(42)
    n_samples = 400
    labels = np.random.choice(['a', 'b', 'c'], size=n_samples)
    flipped = np.random.rand(n_samples) < 0.1
    informative = np.where(flipped, np.random.choice(['x', 'y', 'z'], size=n_samples),
                           pd.Series(labels).map({'a': 'x', 'b': 'y', 'c': 'z'}).to_numpy())
    return pd.DataFrame({
        'dup_1': pd.Categorical(informative),
        'dup_2': pd.Categorical(informative),
        'noise': pd.Categorical(np.random.choice(['p', 'q'], size=n_samples)),
        'measure': np.where(labels == 'a', 0.0, 1.0) + np.random.normal(scale=0.2, size=n_samples),
        'label': pd.Categorical(labels)
    })


@pytest.fixture
def nominal_class_dataset(nominal_class_frame):
    return AttributeDataset.from_dataframe(nominal_class_frame, class_column='label')
