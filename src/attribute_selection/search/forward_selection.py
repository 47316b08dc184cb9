"""
Greedy Forward Selection over Attribute Subsets

Hill-climbs through the space of attribute subsets with a subset
evaluator. The search may start from no attributes or from an arbitrary
start set. In the default improve-only policy it stops as soon as no single
addition raises the merit. In ranking mode it always advances, recording
the order in which every attribute enters the subset.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from ...data.core.instances import AttributeDataset
from ..base import (
    AttributeSelectionEvaluator,
    RankedOutputSearch,
    SubsetEvaluator,
    UnsupervisedSubsetEvaluator,
)
from ..exceptions import CapabilityMismatch, ConfigurationConflict, PreconditionViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchPolicy:
    """Acceptance policy of the search loop."""
    always_advance: bool = False  # commit the round's best candidate even if merit drops
    threshold: Optional[float] = None  # ranked merits must exceed this to be retained


IMPROVE_ONLY = SearchPolicy()


@dataclass
class SearchState:
    """Progress of one search invocation."""
    best_group: Set[int]
    best_merit: float
    ranking: List[Tuple[int, float]] = field(default_factory=list)
    iterations: int = 0


@dataclass
class ForwardSelectionConfig:
    """Configuration for Forward Selection."""

    # Start point: 0-based indices, or a 1-based range string such as "1,3,5-7"
    start_set: Optional[Union[str, Sequence[int]]] = None

    # Ranking options
    generate_ranking: bool = False
    threshold: Optional[float] = None  # discard ranked attributes with merit <= threshold
    num_to_select: Optional[int] = None  # retain this many ranked attributes; overrides threshold

    def __post_init__(self):
        if self.num_to_select is not None and self.num_to_select < 1:
            raise ConfigurationConflict(f"num_to_select must be positive, got {self.num_to_select}")


def parse_start_set(start_set: Union[str, Sequence[int]], num_attributes: int) -> List[int]:
    """
    Resolve a start set to sorted 0-based attribute indices.

    Strings use 1-based indices separated by commas; ranges are written
    ``a-b`` and ``first``/``last`` name the end points.
    """
    if isinstance(start_set, str):
        indices = set()
        for token in (t.strip().lower() for t in start_set.split(",")):
            if not token:
                continue
            bounds = token.split("-")
            if len(bounds) > 2:
                raise ConfigurationConflict(f"Invalid range '{token}' in start set")
            try:
                resolved = [
                    1 if b == "first" else num_attributes if b == "last" else int(b)
                    for b in bounds
                ]
            except ValueError:
                raise ConfigurationConflict(f"Invalid range '{token}' in start set") from None
            low, high = resolved[0], resolved[-1]
            if low > high:
                raise ConfigurationConflict(f"Descending range '{token}' in start set")
            indices.update(range(low - 1, high))
    else:
        indices = {int(i) for i in start_set}

    out_of_range = sorted(i for i in indices if not 0 <= i < num_attributes)
    if out_of_range:
        raise ConfigurationConflict(
            f"Start set indices {out_of_range} out of range for {num_attributes} attributes"
        )
    return sorted(indices)


class ForwardSelection(RankedOutputSearch):
    """
    Greedy forward search through the space of attribute subsets.

    Each iteration tries every attribute not yet included, keeps the best
    scoring addition (ties go to the lowest index) and commits it according
    to the active search policy.
    """

    def __init__(self, config: Optional[ForwardSelectionConfig] = None):
        """Initialize the search.

        Args:
            config: Search options
        """
        self.config = config or ForwardSelectionConfig()

        self.evaluator_: Optional[SubsetEvaluator] = None
        self.dataset_: Optional[AttributeDataset] = None
        self.class_index_: Optional[int] = None
        self.start_set_: List[int] = []

        self.selected_attributes_: List[int] = []
        self.best_merit_: Optional[float] = None
        self.selection_history_: List[Dict[str, Any]] = []
        self.ranking_: Optional[List[Tuple[int, float]]] = None
        self.done_ranking_ = False
        self._calculated_num_to_select: Optional[int] = None

    @property
    def generate_ranking(self) -> bool:
        return self.config.generate_ranking

    def search(self, evaluator: AttributeSelectionEvaluator, dataset: AttributeDataset) -> List[int]:
        """
        Run an improve-only forward search.

        Args:
            evaluator: Built subset evaluator
            dataset: Data the evaluator was built on

        Returns:
            Sorted indices of the best subset found

        Raises:
            CapabilityMismatch: the evaluator cannot score subsets
        """
        if not isinstance(evaluator, SubsetEvaluator):
            raise CapabilityMismatch(f"{type(evaluator).__name__} is not a subset evaluator")

        self.evaluator_ = evaluator
        self.dataset_ = dataset
        self.class_index_ = None if isinstance(evaluator, UnsupervisedSubsetEvaluator) else dataset.class_index

        self.start_set_ = []
        if self.config.start_set is not None:
            self.start_set_ = [
                i for i in parse_start_set(self.config.start_set, dataset.num_attributes)
                if i != self.class_index_
            ]

        self.ranking_ = None
        self.done_ranking_ = False
        self._calculated_num_to_select = None

        logger.info(
            f"Starting forward selection over {dataset.num_attributes} attributes "
            f"from start set {self.start_set_ or 'none'}"
        )
        state = self._run(IMPROVE_ONLY)

        self.selected_attributes_ = sorted(state.best_group)
        self.best_merit_ = state.best_merit
        logger.info(
            f"Forward selection finished after {state.iterations} steps: "
            f"{len(self.selected_attributes_)} attributes, merit {state.best_merit:.6f}"
        )
        return list(self.selected_attributes_)

    def ranked_attributes(self) -> List[Tuple[int, float]]:
        """
        Rank every eligible attribute by order of inclusion.

        Replays the search from the start set with the always-advance policy.

        Returns:
            (attribute index, merit at inclusion) pairs in inclusion order

        Raises:
            PreconditionViolation: no search has been run, or num_to_select
                exceeds the number of ranked attributes
        """
        if self.evaluator_ is None:
            raise PreconditionViolation("Search must be performed before attributes can be ranked")

        policy = SearchPolicy(always_advance=True, threshold=self.config.threshold)
        state = self._run(policy)
        ranking = list(state.ranking)

        if self.config.num_to_select is not None and self.config.num_to_select > len(ranking):
            raise PreconditionViolation(
                f"More attributes requested ({self.config.num_to_select}) than ranked ({len(ranking)})"
            )

        if self.config.num_to_select is not None:
            self._calculated_num_to_select = self.config.num_to_select
        elif policy.threshold is not None:
            self._calculated_num_to_select = sum(1 for _, merit in ranking if merit > policy.threshold)
        else:
            self._calculated_num_to_select = len(ranking)

        self.ranking_ = ranking
        self.done_ranking_ = True
        logger.info(
            f"Ranked {len(ranking)} attributes, retaining {self._calculated_num_to_select}"
        )
        return ranking

    @property
    def calculated_num_to_select(self) -> int:
        if self.config.num_to_select is not None:
            return self.config.num_to_select
        if self._calculated_num_to_select is None:
            raise PreconditionViolation("Attributes have not been ranked. Call ranked_attributes() first.")
        return self._calculated_num_to_select

    def _run(self, policy: SearchPolicy) -> SearchState:
        """Search loop shared by both policies."""
        evaluator = self.evaluator_
        eligible = [i for i in range(self.dataset_.num_attributes) if i != self.class_index_]

        state = SearchState(
            best_group=set(self.start_set_),
            best_merit=evaluator.evaluate_subset(self.start_set_)
        )
        max_iterations = len([i for i in eligible if i not in state.best_group])
        self.selection_history_ = []

        while state.iterations < max_iterations:
            best_candidate = None
            best_candidate_merit = -np.inf if policy.always_advance else state.best_merit

            for i in eligible:
                if i in state.best_group:
                    continue
                merit = evaluator.evaluate_subset(state.best_group | {i})
                if merit > best_candidate_merit:
                    best_candidate = i
                    best_candidate_merit = merit

            if best_candidate is None:
                break

            state.best_group.add(best_candidate)
            state.best_merit = best_candidate_merit
            state.ranking.append((best_candidate, best_candidate_merit))
            state.iterations += 1

            self.selection_history_.append({
                'step': state.iterations,
                'feature': best_candidate,
                'merit': best_candidate_merit,
                'selected_features': sorted(state.best_group)
            })
            logger.debug(
                f"Step {state.iterations}: added attribute {best_candidate}, merit {best_candidate_merit:.6f}"
            )

        return state

    def _start_set_string(self) -> str:
        return ",".join(str(i + 1) for i in self.start_set_)

    def describe(self) -> str:
        lines = ["\tForward Selection."]
        lines.append(f"\tStart set: {self._start_set_string() or 'no attributes'}")
        if not self.done_ranking_ and self.best_merit_ is not None:
            lines.append(f"\tMerit of best subset found: {abs(self.best_merit_):8.3f}")
        if self.done_ranking_ and self.config.threshold is not None:
            lines.append(f"\tThreshold for discarding attributes: {self.config.threshold:8.4f}")
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.describe()

    def get_summary_stats(self) -> Dict[str, Any]:
        """Get summary statistics of the search."""
        if self.best_merit_ is None:
            return {"status": "Search not performed"}

        return {
            "selected_attributes": list(self.selected_attributes_),
            "best_merit": self.best_merit_,
            "start_set": list(self.start_set_),
            "selection_steps": len(self.selection_history_),
            "ranking": list(self.ranking_) if self.ranking_ is not None else None,
            "config": {
                "generate_ranking": self.config.generate_ranking,
                "threshold": self.config.threshold,
                "num_to_select": self.config.num_to_select
            }
        }
