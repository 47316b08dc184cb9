"""
Correlation-Based Subset Evaluation

Statistical side of attribute subset selection: pairwise correlation
estimators, the lazily filled correlation cache and the CFS evaluator that
turns them into subset merits.

Key Components:
- Symmetric uncertainty for discretized attributes (nominal class)
- Pearson and indicator-variable correlations (numeric class)
- Symmetric get-or-compute correlation cache with per-attribute spreads
- CFS merit with optional locally predictive postprocessing
"""

from .cfs_evaluator import CfsConfig, CfsSubsetEvaluator
from .correlation_cache import CorrelationCache
from .correlation_estimators import (
    CorrelationResult,
    EstimatorKind,
    PairCorrelation,
    correlate,
    redistribute_missing,
    select_estimator,
    symmetric_uncertainty,
)

__all__ = [
    'CfsConfig',
    'CfsSubsetEvaluator',
    'CorrelationCache',
    'CorrelationResult',
    'EstimatorKind',
    'PairCorrelation',
    'correlate',
    'redistribute_missing',
    'select_estimator',
    'symmetric_uncertainty'
]
