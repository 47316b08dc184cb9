"""
Base classes for attribute evaluators and search strategies.

Evaluators are split by capability: subset evaluators score an arbitrary
set of attributes, attribute evaluators score attributes one at a time.
Searches explore the subset space with a subset evaluator; ranked-output
searches can additionally order every attribute by inclusion.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from ..data.core.instances import AttributeDataset


class AttributeSelectionEvaluator(ABC):
    """Common interface of every attribute evaluator."""

    @abstractmethod
    def build(self, dataset: AttributeDataset) -> None:
        """Prepare the evaluator for the given training data."""
        pass

    def post_process(self, attribute_set: List[int]) -> List[int]:
        """Hook applied to the subset a search found; identity by default."""
        return attribute_set


class SubsetEvaluator(AttributeSelectionEvaluator):
    """Evaluator able to score arbitrary attribute subsets."""

    @abstractmethod
    def evaluate_subset(self, subset: Iterable[int]) -> float:
        """
        Score a subset of attribute indices.

        Args:
            subset: Attribute indices; the class index is ignored

        Returns:
            Merit of the subset (higher is better)
        """
        pass


class UnsupervisedSubsetEvaluator(SubsetEvaluator):
    """Subset evaluator that does not use a class attribute."""


class AttributeEvaluator(AttributeSelectionEvaluator):
    """Evaluator that scores single attributes only."""

    @abstractmethod
    def evaluate_attribute(self, index: int) -> float:
        pass


class AttributeSearch(ABC):
    """Strategy exploring attribute subsets with an evaluator."""

    @abstractmethod
    def search(self, evaluator: AttributeSelectionEvaluator, dataset: AttributeDataset) -> List[int]:
        """Return the indices of the best subset found."""
        pass


class RankedOutputSearch(AttributeSearch):
    """Search that can also produce a ranking of all attributes."""

    @property
    @abstractmethod
    def generate_ranking(self) -> bool:
        """Whether callers asked for a ranking instead of a single subset."""
        pass

    @abstractmethod
    def ranked_attributes(self) -> List[Tuple[int, float]]:
        """Ordered (attribute index, merit) pairs."""
        pass

    @property
    @abstractmethod
    def calculated_num_to_select(self) -> int:
        """How many ranked attributes to retain."""
        pass
