"""
Attribute Subset Selection

Correlation-based feature subset selection (CFS) with greedy forward
search. Picks a small, non-redundant set of predictive attributes from a
tabular dataset before model training.

Key Components:
- CFS subset evaluator with a memoized symmetric correlation cache
- Forward selection with improve-only and ranking policies
- Locally predictive postprocessing
- Pipeline driver producing selections, rankings and reports
- scikit-learn compatible selector
"""

from .base import (
    AttributeEvaluator,
    AttributeSearch,
    AttributeSelectionEvaluator,
    RankedOutputSearch,
    SubsetEvaluator,
    UnsupervisedSubsetEvaluator,
)
from .exceptions import (
    AttributeSelectionError,
    CapabilityMismatch,
    ConfigurationConflict,
    PreconditionViolation,
    UnsupportedAttributeType,
)
from .search import ForwardSelection, ForwardSelectionConfig
from .selection_pipeline import AttributeSelection, AttributeSelectionConfig
from .sklearn_selector import CfsFeatureSelector
from .statistical import CfsConfig, CfsSubsetEvaluator

__all__ = [
    'AttributeEvaluator',
    'AttributeSearch',
    'AttributeSelection',
    'AttributeSelectionConfig',
    'AttributeSelectionError',
    'AttributeSelectionEvaluator',
    'CapabilityMismatch',
    'CfsConfig',
    'CfsFeatureSelector',
    'CfsSubsetEvaluator',
    'ConfigurationConflict',
    'ForwardSelection',
    'ForwardSelectionConfig',
    'PreconditionViolation',
    'RankedOutputSearch',
    'SubsetEvaluator',
    'UnsupervisedSubsetEvaluator',
    'UnsupportedAttributeType'
]

# Version info
__version__ = '1.0.0'
