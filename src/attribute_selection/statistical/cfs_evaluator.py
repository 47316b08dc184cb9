"""
Correlation-Based Feature Selection (CFS) Subset Evaluator

Scores a subset of attributes by weighing the individual predictive
ability of each attribute against the redundancy among them. Subsets whose
members correlate strongly with the class but weakly with each other score
highest:

    merit = |sum_i s_i * r_ic| / sqrt(|sum_i s_i^2 + sum_{i != j} s_i * s_j * r_ij|)

where r is the pairwise correlation and s the per-attribute spread.

Key Features:
- Lazily filled symmetric correlation cache (each pair computed once)
- Symmetric uncertainty on discretized data for nominal classes
- Mixed-type Pearson/indicator correlations for numeric classes
- Missing values either kept as their own category or redistributed
- Optional locally-predictive postprocessing of a found subset
"""

from dataclasses import dataclass
import logging
from typing import Iterable, List, Optional, Set

import numpy as np

from ...data.core.discretization import SupervisedDiscretizer
from ...data.core.instances import AttributeDataset
from ..base import SubsetEvaluator
from ..exceptions import PreconditionViolation, UnsupportedAttributeType
from .correlation_cache import CorrelationCache
from .correlation_estimators import PairCorrelation, correlate

logger = logging.getLogger(__name__)


@dataclass
class CfsConfig:
    """Configuration for the CFS subset evaluator."""

    # Treat missing values as a category of their own instead of
    # distributing their counts over the observed categories
    missing_separate: bool = False

    # Extend found subsets with locally predictive attributes
    locally_predictive: bool = False
    locally_predictive_threshold: float = 0.0


class CfsSubsetEvaluator(SubsetEvaluator):
    """
    CFS subset evaluator.

    Evaluates the worth of a subset of attributes by considering the
    individual predictive ability of each feature along with the degree of
    redundancy between them.
    """

    def __init__(self, config: Optional[CfsConfig] = None):
        """Initialize the evaluator.

        Args:
            config: Evaluator options
        """
        self.config = config or CfsConfig()

        self.dataset_: Optional[AttributeDataset] = None
        self.discretizer_: Optional[SupervisedDiscretizer] = None
        self.cache_: Optional[CorrelationCache] = None
        self.class_index_: Optional[int] = None
        self.is_numeric_class_: bool = False

    @property
    def is_built_(self) -> bool:
        return self.cache_ is not None

    def build(self, dataset: AttributeDataset) -> None:
        """
        Prepare the evaluator for ``dataset``.

        Drops instances with a missing class, discretizes the attributes when
        the class is nominal and resets the correlation cache.

        Raises:
            UnsupportedAttributeType: the dataset contains string attributes
            PreconditionViolation: the dataset has no class attribute
        """
        if dataset.check_for_string_attributes():
            raise UnsupportedAttributeType("CFS cannot handle string attributes")
        if dataset.class_index is None:
            raise PreconditionViolation("CFS requires a class attribute")

        data = dataset.delete_with_missing_class()
        if data.num_instances == 0:
            logger.warning("No instances with a class value left; every merit will be 0")

        self.class_index_ = data.class_index
        self.is_numeric_class_ = data.class_attribute.is_numeric

        if self.is_numeric_class_:
            self.discretizer_ = None
        else:
            self.discretizer_ = SupervisedDiscretizer()
            data = self.discretizer_.fit_transform(data)

        self.dataset_ = data
        self.cache_ = CorrelationCache(data.num_attributes)

        logger.info(
            f"CFS evaluator built: {data.num_instances} instances, {data.num_attributes} attributes, "
            f"{'numeric' if self.is_numeric_class_ else 'nominal'} class "
            f"'{data.class_attribute.name}'"
        )

    def correlation(self, att_a: int, att_b: int) -> float:
        """Correlation of two attributes, computed on first request and cached."""
        self._check_built()
        return self.cache_.get_or_compute(att_a, att_b, self._correlate)

    def evaluate_subset(self, subset: Iterable[int]) -> float:
        """
        CFS merit of a subset of attribute indices.

        The class index is ignored if present. The empty subset and
        subsets with a zero denominator score 0.0.
        """
        self._check_built()
        members = sorted({int(i) for i in subset if i != self.class_index_})

        numerator = 0.0
        for i in members:
            corr = self.correlation(i, self.class_index_)
            numerator += self.cache_.std_dev(i) * corr

        denominator = 0.0
        for position, i in enumerate(members):
            denominator += self.cache_.std_dev(i) ** 2
            for j in members[position + 1:]:
                corr = self.correlation(i, j)
                denominator += 2.0 * self.cache_.std_dev(i) * self.cache_.std_dev(j) * corr

        denominator = abs(denominator)
        if denominator == 0.0:
            return 0.0
        return abs(numerator / np.sqrt(denominator))

    def post_process(self, attribute_set: List[int]) -> List[int]:
        """Optionally extend a found subset with locally predictive attributes."""
        if not self.config.locally_predictive:
            return attribute_set
        self._check_built()
        extended = self._add_locally_predictive(set(attribute_set))
        return sorted(extended)

    def _add_locally_predictive(self, best_group: Set[int]) -> Set[int]:
        """
        Greedily add attributes with high class correlation.

        Candidates are visited in order of decreasing class correlation. A
        candidate is accepted unless some accepted attribute correlates with
        it more strongly than (its class correlation - threshold). Each
        candidate is considered once; rejected ones are not revisited.
        """
        accepted = set(best_group)
        considered = set(best_group)
        threshold = self.config.locally_predictive_threshold
        added = []

        while True:
            best_corr = -1.0
            candidate = None
            for i in range(self.dataset_.num_attributes):
                if i in considered or i == self.class_index_:
                    continue
                corr = self.correlation(i, self.class_index_)
                if corr > best_corr:
                    best_corr = corr
                    candidate = i

            if candidate is None:
                break

            considered.add(candidate)
            redundant = any(
                self.correlation(member, candidate) > best_corr - threshold
                for member in sorted(accepted)
            )
            if not redundant:
                accepted.add(candidate)
                added.append(candidate)

        logger.info(f"Locally predictive pass added {len(added)} attributes: {added}")
        return accepted

    def _correlate(self, att_a: int, att_b: int) -> PairCorrelation:
        return correlate(
            self.dataset_,
            att_a,
            att_b,
            discretized=not self.is_numeric_class_,
            missing_separate=self.config.missing_separate
        )

    def _check_built(self) -> None:
        if not self.is_built_:
            raise PreconditionViolation("CFS evaluator has not been built. Call build() first.")

    @property
    def num_correlations_computed(self) -> int:
        return self.cache_.computations_ if self.cache_ is not None else 0

    def describe(self) -> str:
        if not self.is_built_:
            return "CFS subset evaluator has not been built yet\n"
        lines = ["\tCFS Subset Evaluator"]
        if self.config.missing_separate:
            lines.append("\tTreating missing values as a separate value")
        if self.config.locally_predictive:
            lines.append("\tIncluding locally predictive attributes")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.describe()
