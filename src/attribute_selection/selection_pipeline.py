"""
Attribute Selection Pipeline

Drives a complete attribute selection run: builds the subset evaluator,
runs the search, applies either the ranking cut-off or the evaluator's
postprocessing, and reports the selected attributes.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json

import numpy as np
import pandas as pd
import psutil

from ..data.core.instances import AttributeDataset
from .base import AttributeSearch, RankedOutputSearch, SubsetEvaluator
from .exceptions import AttributeSelectionError, PreconditionViolation
from .search.forward_selection import ForwardSelection, ForwardSelectionConfig
from .statistical.cfs_evaluator import CfsConfig, CfsSubsetEvaluator

logger = logging.getLogger(__name__)


@dataclass
class AttributeSelectionConfig:
    """Configuration for an attribute selection run."""

    # Component configurations
    evaluator_config: CfsConfig = field(default_factory=CfsConfig)
    search_config: ForwardSelectionConfig = field(default_factory=ForwardSelectionConfig)

    # Output
    output_dir: Optional[str] = None  # Directory for saving results

    # Resource monitoring
    memory_limit_gb: float = 8.0


class AttributeSelection:
    """
    CFS + forward selection attribute selection.

    After ``select_attributes`` the selected indices (class index last),
    the selected feature names, the ranking (in ranking mode) and the merit
    of the best subset found are available as fitted attributes.
    """

    def __init__(
        self,
        config: Optional[AttributeSelectionConfig] = None,
        evaluator: Optional[SubsetEvaluator] = None,
        search: Optional[AttributeSearch] = None
    ):
        """Initialize attribute selection.

        Args:
            config: Configuration for the run
            evaluator: Evaluator to use instead of a CFS evaluator built from config
            search: Search to use instead of a forward selection built from config
        """
        self.config = config or AttributeSelectionConfig()
        self.evaluator = evaluator or CfsSubsetEvaluator(self.config.evaluator_config)
        self.search = search or ForwardSelection(self.config.search_config)

        # Results storage
        self.selected_attributes_: List[int] = []
        self.selected_features_: List[str] = []
        self.ranking_: Optional[List[Tuple[int, float]]] = None
        self.dataset_: Optional[AttributeDataset] = None
        self.processing_stats_: Dict[str, Any] = {}
        self.memory_stats_: Dict[str, Dict[str, Any]] = {}
        self.is_fitted_ = False

        if self.config.output_dir:
            Path(self.config.output_dir).mkdir(parents=True, exist_ok=True)

    def _monitor_memory(self, stage: str) -> Dict[str, Any]:
        """Monitor memory usage during selection."""
        process = psutil.Process()
        memory_gb = process.memory_info().rss / 1024 / 1024 / 1024

        self.memory_stats_[stage] = {
            'memory_gb': memory_gb,
            'timestamp': datetime.now(),
            'warning': memory_gb > self.config.memory_limit_gb
        }

        if memory_gb > self.config.memory_limit_gb:
            logger.warning(f"Memory usage ({memory_gb:.2f}GB) exceeds limit at {stage}")

        return self.memory_stats_[stage]

    def select_attributes(self, dataset: AttributeDataset) -> List[int]:
        """
        Select attributes from ``dataset``.

        Args:
            dataset: Data with a class attribute

        Returns:
            Selected attribute indices, class index last
        """
        start_time = datetime.now()
        self._monitor_memory("selection_start")
        logger.info(f"Starting attribute selection on {dataset!r}")

        try:
            self.evaluator.build(dataset)
            self._monitor_memory("evaluator_built")

            found = self.search.search(self.evaluator, dataset)

            if isinstance(self.search, RankedOutputSearch) and self.search.generate_ranking:
                self.ranking_ = self.search.ranked_attributes()
                retain = self.search.calculated_num_to_select
                chosen = [index for index, _ in self.ranking_[:retain]]
            else:
                self.ranking_ = None
                chosen = self.evaluator.post_process(found)
        except AttributeSelectionError as e:
            logger.error(f"Attribute selection failed: {e}")
            raise

        self._monitor_memory("selection_end")

        class_index = dataset.class_index
        self.selected_attributes_ = [i for i in chosen if i != class_index]
        self.selected_features_ = [dataset.attribute(i).name for i in self.selected_attributes_]
        if class_index is not None:
            self.selected_attributes_.append(class_index)

        self.dataset_ = dataset
        self.is_fitted_ = True

        elapsed = (datetime.now() - start_time).total_seconds()
        self.processing_stats_ = {
            'num_attributes': dataset.num_attributes,
            'num_instances': dataset.num_instances,
            'num_selected': len(self.selected_features_),
            'best_merit': getattr(self.search, 'best_merit_', None),
            'correlations_computed': getattr(self.evaluator, 'num_correlations_computed', None),
            'processing_time_seconds': elapsed
        }

        logger.info(
            f"Selected {len(self.selected_features_)} of {dataset.num_attributes} attributes "
            f"in {elapsed:.2f}s: {self.selected_features_}"
        )

        if self.config.output_dir:
            self._save_results()

        return list(self.selected_attributes_)

    def fit_select(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        sample_weight: Optional[np.ndarray] = None
    ) -> List[str]:
        """
        Select features from a feature matrix and target.

        Args:
            X: Feature matrix
            y: Target variable (numeric for regression, categorical otherwise)
            sample_weight: Optional instance weights

        Returns:
            Names of the selected features
        """
        if len(X) != len(y):
            raise ValueError(f"X and y must have same length: {len(X)} != {len(y)}")

        class_column = y.name if y.name is not None else 'class'
        if class_column in X.columns:
            raise ValueError(f"Target name '{class_column}' clashes with a feature column")

        frame = X.copy()
        frame[class_column] = y.to_numpy()
        dataset = AttributeDataset.from_dataframe(
            frame, class_column=class_column, weights=sample_weight
        )
        self.select_attributes(dataset)
        return list(self.selected_features_)

    def reduce_dimensionality(self, dataset: AttributeDataset) -> AttributeDataset:
        """Restrict a dataset to the selected attributes (class last)."""
        self._check_fitted()
        return dataset.select_attributes(self.selected_attributes_)

    def transform(self, X: pd.DataFrame) -> pd.DataFrame:
        """Transform feature matrix to selected features."""
        self._check_fitted()

        missing_features = set(self.selected_features_) - set(X.columns)
        if missing_features:
            raise ValueError(f"Missing features in input data: {missing_features}")

        return X[self.selected_features_].copy()

    def get_selected_features(self) -> List[str]:
        return self.selected_features_.copy()

    def to_results_string(self) -> str:
        """Human readable report of the last run."""
        self._check_fitted()
        dataset = self.dataset_

        lines = ["=== Attribute Selection on all input data ===", "", "Search Method:"]
        lines.append(str(self.search).rstrip("\n"))

        class_attribute = dataset.class_attribute
        if class_attribute is not None:
            kind = "numeric" if class_attribute.is_numeric else "nominal"
            lines.append(
                f"Attribute Subset Evaluator (supervised, Class ({kind}): "
                f"{class_attribute.index + 1} {class_attribute.name}):"
            )
        else:
            lines.append("Attribute Subset Evaluator (unsupervised):")
        lines.append(str(self.evaluator).rstrip("\n"))
        lines.append("")

        if self.ranking_ is not None:
            lines.append("Ranked attributes:")
            for index, merit in self.ranking_:
                lines.append(f"{merit:9.4f} {index + 1:4d} {dataset.attribute(index).name}")
            lines.append("")

        features = [i for i in self.selected_attributes_ if i != dataset.class_index]
        lines.append(
            f"Selected attributes: {','.join(str(i + 1) for i in features)} : {len(features)}"
        )
        for index in features:
            lines.append(f"                     {dataset.attribute(index).name}")
        return "\n".join(lines) + "\n"

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics of the selection run."""
        if not self.is_fitted_:
            return {"status": "Selection not performed"}

        return {
            "selected_features": len(self.selected_features_),
            "feature_list": list(self.selected_features_),
            "selected_attributes": list(self.selected_attributes_),
            "ranking": list(self.ranking_) if self.ranking_ is not None else None,
            "processing_stats": dict(self.processing_stats_),
            "config": {
                "missing_separate": self.config.evaluator_config.missing_separate,
                "locally_predictive": self.config.evaluator_config.locally_predictive,
                "generate_ranking": self.config.search_config.generate_ranking,
                "threshold": self.config.search_config.threshold,
                "num_to_select": self.config.search_config.num_to_select
            }
        }

    def _save_results(self) -> None:
        """Save selection results to the output directory."""
        output_dir = Path(self.config.output_dir)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        results_file = output_dir / f"attribute_selection_{timestamp}.json"
        with open(results_file, 'w') as f:
            json.dump({
                'selected_features': self.selected_features_,
                'selected_attributes': self.selected_attributes_,
                'ranking': [[int(i), float(m)] for i, m in self.ranking_] if self.ranking_ else None,
                'processing_stats': self.processing_stats_,
                'timestamp': timestamp
            }, f, indent=2, default=str)

        logger.info(f"Results saved to {results_file}")

    def _check_fitted(self) -> None:
        if not self.is_fitted_:
            raise PreconditionViolation("No attributes selected. Call select_attributes() first.")
