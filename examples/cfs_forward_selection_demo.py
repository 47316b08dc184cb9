"""
CFS Forward Selection Demo

Demonstrates correlation-based attribute subset selection:
1. Numeric class: one informative attribute among noise
2. Nominal class: discretized attributes, duplicates and missing values
3. Ranking mode with a retention threshold
4. Locally predictive postprocessing
5. scikit-learn pipeline integration
"""

import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.attribute_selection import (
    AttributeSelection,
    AttributeSelectionConfig,
    CfsConfig,
    CfsFeatureSelector,
    ForwardSelectionConfig,
)

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def generate_regression_data(n_samples: int = 500) -> tuple:
    """Numeric target with a single informative feature."""
    np.random.seed(42)
    y = pd.Series(np.random.normal(size=n_samples), name='target')
    X = pd.DataFrame({
        'signal': 3.0 * y.to_numpy(),
        'noise_1': np.random.normal(size=n_samples),
        'noise_2': np.random.normal(size=n_samples),
        'noise_3': np.random.normal(size=n_samples)
    })
    return X, y


def generate_classification_data(n_samples: int = 600) -> tuple:
    """Nominal target with informative, redundant, partially missing and noise features."""
    np.random.seed(7)
    labels = np.random.choice(['down', 'flat', 'up'], size=n_samples)
    codes = pd.Categorical(labels).codes

    momentum = codes + np.random.normal(scale=0.4, size=n_samples)
    volume = np.where(codes == 2, 1.0, 0.0) + np.random.normal(scale=0.3, size=n_samples)
    sparse = momentum.copy()
    sparse[np.random.rand(n_samples) < 0.5] = np.nan

    X = pd.DataFrame({
        'momentum': momentum,
        'momentum_copy': momentum,
        'volume_spike': volume,
        'sparse_momentum': sparse,
        'sector': pd.Categorical(np.random.choice(['tech', 'fin', 'energy'], size=n_samples)),
        'noise': np.random.normal(size=n_samples)
    })
    y = pd.Series(pd.Categorical(labels), name='direction')
    return X, y


def demonstrate_regression() -> None:
    logger.info("=== Numeric class ===")
    X, y = generate_regression_data()

    selection = AttributeSelection()
    selected = selection.fit_select(X, y)
    logger.info(f"Selected: {selected}")
    print(selection.to_results_string())


def demonstrate_classification() -> None:
    logger.info("=== Nominal class ===")
    X, y = generate_classification_data()

    selection = AttributeSelection()
    selection.fit_select(X, y)
    print(selection.to_results_string())

    logger.info("=== Ranking with threshold ===")
    ranking_config = AttributeSelectionConfig(
        search_config=ForwardSelectionConfig(generate_ranking=True, threshold=0.05)
    )
    ranking = AttributeSelection(ranking_config)
    ranking.fit_select(X, y)
    print(ranking.to_results_string())

    logger.info("=== Locally predictive ===")
    local_config = AttributeSelectionConfig(
        evaluator_config=CfsConfig(locally_predictive=True)
    )
    local = AttributeSelection(local_config)
    local.fit_select(X, y)
    print(local.to_results_string())
    logger.info(f"Summary: {local.get_summary_stats()['processing_stats']}")


def demonstrate_sklearn_pipeline() -> None:
    logger.info("=== scikit-learn pipeline ===")
    X, y = generate_classification_data()
    numeric = X.drop(columns=['sector', 'sparse_momentum'])

    pipeline = Pipeline([
        ('cfs', CfsFeatureSelector()),
        ('model', LogisticRegression(max_iter=500))
    ])
    pipeline.fit(numeric, y)
    kept = pipeline.named_steps['cfs'].get_feature_names_out()
    logger.info(f"Pipeline kept {list(kept)}, training accuracy {pipeline.score(numeric, y):.3f}")


if __name__ == "__main__":
    demonstrate_regression()
    demonstrate_classification()
    demonstrate_sklearn_pipeline()
