"""
Supervised Discretization with the Fayyad & Irani MDL Criterion

Numeric attributes are split into intervals by recursively choosing the
cut point that minimises class entropy, accepting a cut only when the
minimum-description-length criterion says the information gain pays for it.
Attributes without an accepted cut collapse into a single interval.

The filter runs once, in batch, over a dataset whose class is nominal.
Missing values stay missing.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
from scipy.stats import entropy

from .instances import Attribute, AttributeDataset, AttributeKind

logger = logging.getLogger(__name__)


def _row_entropies(counts: np.ndarray) -> np.ndarray:
    """Entropy in bits of every row of a (rows, classes) count matrix."""
    totals = counts.sum(axis=1)
    result = np.zeros(counts.shape[0])
    nonzero = totals > 0
    if nonzero.any():
        result[nonzero] = entropy(counts[nonzero], base=2, axis=1)
    return result


def _entropy(counts: np.ndarray) -> float:
    if counts.sum() <= 0:
        return 0.0
    return float(entropy(counts, base=2))


def _interval_labels(cut_points: np.ndarray) -> List[str]:
    if len(cut_points) == 0:
        return ["All"]
    bounds = ["-inf"] + [repr(float(c)) for c in cut_points] + ["inf"]
    labels = [f"({bounds[i]}-{bounds[i + 1]}]" for i in range(len(bounds) - 2)]
    labels.append(f"({bounds[-2]}-inf)")
    return labels


class SupervisedDiscretizer:
    """
    MDL-based supervised discretization of numeric attributes.

    After ``fit`` the accepted cut points of every discretized attribute are
    available in ``cut_points_`` (attribute index -> sorted array).
    """

    def __init__(self, attribute_indices: Optional[List[int]] = None):
        """
        Initialize discretizer.

        Args:
            attribute_indices: Restrict discretization to these attributes
                (default: every numeric attribute except the class)
        """
        self.attribute_indices = attribute_indices
        self.cut_points_: Dict[int, np.ndarray] = {}
        self.is_fitted_ = False

    def fit(self, dataset: AttributeDataset) -> 'SupervisedDiscretizer':
        class_attribute = dataset.class_attribute
        if class_attribute is None or not class_attribute.is_nominal:
            raise ValueError("Supervised discretization requires a nominal class attribute")

        labels = dataset.column(dataset.class_index)
        num_classes = class_attribute.num_values
        self.cut_points_ = {}

        for index in self._target_indices(dataset):
            column = dataset.column(index)
            present = ~np.isnan(column) & ~np.isnan(labels)
            order = np.argsort(column[present], kind="mergesort")
            values = column[present][order]
            classes = labels[present][order].astype(int)
            weights = dataset.weights[present][order]

            cuts = self._cut_points_for_subset(values, classes, weights, num_classes)
            self.cut_points_[index] = np.asarray(cuts, dtype=float)
            logger.debug(f"Attribute {dataset.attribute(index).name}: {len(cuts)} cut points")

        self.is_fitted_ = True
        logger.info(
            f"Discretizer fitted on {len(self.cut_points_)} numeric attributes, "
            f"{sum(len(c) for c in self.cut_points_.values())} cut points in total"
        )
        return self

    def transform(self, dataset: AttributeDataset) -> AttributeDataset:
        if not self.is_fitted_:
            raise ValueError("Discretizer has not been fitted. Call fit() first.")

        replacements = {}
        for index, cuts in self.cut_points_.items():
            column = dataset.column(index)
            codes = np.full(column.shape, np.nan)
            present = ~np.isnan(column)
            codes[present] = np.searchsorted(cuts, column[present], side="left")
            attribute = Attribute(
                dataset.attribute(index).name,
                index,
                AttributeKind.NOMINAL,
                tuple(_interval_labels(cuts))
            )
            replacements[index] = (attribute, codes)

        return dataset.replace_attributes(replacements)

    def fit_transform(self, dataset: AttributeDataset) -> AttributeDataset:
        return self.fit(dataset).transform(dataset)

    def _target_indices(self, dataset: AttributeDataset) -> List[int]:
        candidates = self.attribute_indices
        if candidates is None:
            candidates = range(dataset.num_attributes)
        return [
            i for i in candidates
            if i != dataset.class_index and dataset.attribute(i).is_numeric
        ]

    def _cut_points_for_subset(
        self,
        values: np.ndarray,
        classes: np.ndarray,
        weights: np.ndarray,
        num_classes: int
    ) -> List[float]:
        """Recursively select cut points for sorted values."""
        if len(values) < 2:
            return []

        counts = np.zeros((len(values), num_classes))
        counts[np.arange(len(values)), classes] = weights
        cumulative = np.cumsum(counts, axis=0)
        prior = cumulative[-1]
        total_weight = prior.sum()
        if total_weight <= 0:
            return []

        # a cut may only fall between two distinct values
        boundaries = np.nonzero(values[:-1] < values[1:])[0]
        if len(boundaries) == 0:
            return []

        left = cumulative[boundaries]
        right = prior - left
        split_entropies = (
            left.sum(axis=1) * _row_entropies(left)
            + right.sum(axis=1) * _row_entropies(right)
        ) / total_weight

        best = int(np.argmin(split_entropies))
        if not self._accept_split(
            prior, left[best], right[best], split_entropies[best], total_weight, len(boundaries)
        ):
            return []

        split = boundaries[best]
        cut = (values[split] + values[split + 1]) / 2.0
        lower = self._cut_points_for_subset(
            values[:split + 1], classes[:split + 1], weights[:split + 1], num_classes
        )
        upper = self._cut_points_for_subset(
            values[split + 1:], classes[split + 1:], weights[split + 1:], num_classes
        )
        return lower + [cut] + upper

    @staticmethod
    def _accept_split(
        prior: np.ndarray,
        left: np.ndarray,
        right: np.ndarray,
        split_entropy: float,
        total_weight: float,
        num_cut_points: int
    ) -> bool:
        """Fayyad & Irani MDL stopping criterion."""
        prior_entropy = _entropy(prior)
        gain = prior_entropy - split_entropy

        k = np.count_nonzero(prior)
        k_left = np.count_nonzero(left)
        k_right = np.count_nonzero(right)
        delta = np.log2(3.0 ** k - 2) - (
            k * prior_entropy - k_left * _entropy(left) - k_right * _entropy(right)
        )
        return gain > (np.log2(num_cut_points) + delta) / total_weight
