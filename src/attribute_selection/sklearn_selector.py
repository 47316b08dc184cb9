"""
scikit-learn compatible CFS feature selector.

Wraps the attribute selection pipeline in the ``SelectorMixin`` protocol so
CFS + forward selection can sit inside an sklearn ``Pipeline``.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator
from sklearn.feature_selection import SelectorMixin
from sklearn.utils.validation import check_is_fitted

from .search.forward_selection import ForwardSelectionConfig
from .selection_pipeline import AttributeSelection, AttributeSelectionConfig
from .statistical.cfs_evaluator import CfsConfig

logger = logging.getLogger(__name__)

TARGET_COLUMN = '__target__'


class CfsFeatureSelector(SelectorMixin, BaseEstimator):
    """
    Feature selector using CFS merit and greedy forward selection.

    Args:
        missing_separate: Treat missing values as their own category
        locally_predictive: Add locally predictive attributes after the search
        generate_ranking: Rank all features and keep the top ones
        threshold: Keep ranked features whose merit exceeds this value
        num_to_select: Keep this many ranked features
        discrete_target: Treat the target as nominal; inferred from its dtype when None
    """

    def __init__(
        self,
        missing_separate: bool = False,
        locally_predictive: bool = False,
        generate_ranking: bool = False,
        threshold: Optional[float] = None,
        num_to_select: Optional[int] = None,
        discrete_target: Optional[bool] = None
    ):
        self.missing_separate = missing_separate
        self.locally_predictive = locally_predictive
        self.generate_ranking = generate_ranking
        self.threshold = threshold
        self.num_to_select = num_to_select
        self.discrete_target = discrete_target

    def fit(self, X, y, sample_weight: Optional[np.ndarray] = None) -> 'CfsFeatureSelector':
        if isinstance(X, pd.DataFrame):
            frame = X
            self.feature_names_in_ = np.asarray(X.columns, dtype=object)
        else:
            values = np.asarray(X)
            frame = pd.DataFrame(values, columns=[f"x{i}" for i in range(values.shape[1])])

        target = pd.Series(np.asarray(y), name=TARGET_COLUMN)
        if self.discrete_target or (self.discrete_target is None and not pd.api.types.is_float_dtype(target)):
            target = target.astype('category')

        config = AttributeSelectionConfig(
            evaluator_config=CfsConfig(
                missing_separate=self.missing_separate,
                locally_predictive=self.locally_predictive
            ),
            search_config=ForwardSelectionConfig(
                generate_ranking=self.generate_ranking,
                threshold=self.threshold,
                num_to_select=self.num_to_select
            )
        )
        self.selection_ = AttributeSelection(config)
        selected = set(self.selection_.fit_select(frame, target, sample_weight=sample_weight))

        self.n_features_in_ = frame.shape[1]
        self.support_ = np.array([str(c) in selected for c in frame.columns], dtype=bool)
        self.ranking_ = self.selection_.ranking_
        logger.info(f"CFS selector kept {int(self.support_.sum())} of {self.n_features_in_} features")
        return self

    def _get_support_mask(self) -> np.ndarray:
        check_is_fitted(self, 'support_')
        return self.support_

    def transform(self, X):
        mask = self._get_support_mask()
        if isinstance(X, pd.DataFrame):
            return X.loc[:, mask]
        return np.asarray(X)[:, mask]
