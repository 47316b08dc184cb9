"""
Pairwise Correlation Estimators for Correlation-Based Feature Selection

Four estimators cover every attribute-type combination the CFS evaluator
meets:

- symmetric uncertainty over a contingency table (nominal class, all
  attributes discretized)
- Pearson correlation (numeric vs numeric)
- prior-weighted indicator correlation (numeric vs nominal)
- joint-frequency-weighted indicator correlation (nominal vs nominal)

Every estimator returns an absolute correlation in [0, 1] plus, for the
numeric-class estimators, the spread (standard deviation) it derived for
each side. Zero-variance pairs resolve to 1.0 (maximally redundant) unless
the class takes part, in which case they resolve to 0.0.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Dict, Optional, Tuple

import numpy as np
from scipy.stats import entropy

from ...data.core.instances import AttributeDataset, AttributeKind
from ..exceptions import UnsupportedAttributeType

logger = logging.getLogger(__name__)

# tolerance used when deciding that an uncertainty is zero
ZERO_TOLERANCE = 1e-6


class EstimatorKind(Enum):
    """Correlation estimators, one per attribute-type pairing."""
    SYMMETRIC_UNCERTAINTY = "symmetric_uncertainty"
    NUMERIC_NUMERIC = "numeric_numeric"
    NUMERIC_NOMINAL = "numeric_nominal"
    NOMINAL_NOMINAL = "nominal_nominal"


_NUMERIC_MODE_ESTIMATORS = {
    (AttributeKind.NUMERIC, AttributeKind.NUMERIC): EstimatorKind.NUMERIC_NUMERIC,
    (AttributeKind.NUMERIC, AttributeKind.NOMINAL): EstimatorKind.NUMERIC_NOMINAL,
    (AttributeKind.NOMINAL, AttributeKind.NUMERIC): EstimatorKind.NUMERIC_NOMINAL,
    (AttributeKind.NOMINAL, AttributeKind.NOMINAL): EstimatorKind.NOMINAL_NOMINAL,
}


@dataclass(frozen=True)
class CorrelationResult:
    """Outcome of one estimator call."""
    value: float
    spread_a: Optional[float] = None  # None: no spread derived for the first side
    spread_b: Optional[float] = None


@dataclass(frozen=True)
class PairCorrelation:
    """Correlation of an attribute pair plus the spreads derived on the way."""
    value: float
    spreads: Dict[int, float] = field(default_factory=dict)


def _degenerate(involves_class: bool) -> float:
    return 0.0 if involves_class else 1.0


def _entropy(counts: np.ndarray) -> float:
    if counts.sum() <= 0:
        return 0.0
    return float(entropy(counts, base=2))


def _category_index(
    codes: np.ndarray,
    num_values: int,
    mode: int,
    missing_separate: bool
) -> Tuple[np.ndarray, int]:
    """Map nominal codes to category slots; missing goes to the mode or an extra slot."""
    num_slots = num_values + 1 if missing_separate else num_values
    fill = num_slots - 1 if missing_separate else mode
    index = np.where(np.isnan(codes), fill, codes).astype(int)
    return index, num_slots


def _one_hot(index: np.ndarray, num_slots: int) -> np.ndarray:
    return (index[:, None] == np.arange(num_slots)[None, :]).astype(float)


def contingency_table(
    codes_a: np.ndarray,
    num_values_a: int,
    codes_b: np.ndarray,
    num_values_b: int
) -> np.ndarray:
    """Count table with one extra trailing row/column holding missing values."""
    rows = np.where(np.isnan(codes_a), num_values_a, codes_a).astype(int)
    cols = np.where(np.isnan(codes_b), num_values_b, codes_b).astype(int)
    shape = (num_values_a + 1, num_values_b + 1)
    flat = np.bincount(rows * shape[1] + cols, minlength=shape[0] * shape[1])
    return flat.reshape(shape).astype(float)


def redistribute_missing(counts: np.ndarray) -> np.ndarray:
    """
    Spread the missing row/column of a contingency table over the observed cells.

    Missing counts of one attribute are distributed across that attribute's
    categories in proportion to their observed frequency. The doubly-missing
    cell is distributed across the observed cross-product in proportion to
    the original joint counts. Total mass is preserved. Tables in which either
    attribute is entirely missing are returned unchanged.
    """
    counts = np.array(counts, dtype=float)
    row_sums = counts.sum(axis=1)
    col_sums = counts.sum(axis=0)
    total = counts.sum()

    if row_sums[-1] >= total or col_sums[-1] >= total:
        return counts

    original = counts.copy()
    total_missing = row_sums[-1] + col_sums[-1] - original[-1, -1]

    if row_sums[-1] > 0:
        row_share = row_sums[:-1] / (total - row_sums[-1])
        counts[:-1, :-1] += np.outer(row_share, counts[-1, :-1])
        counts[-1, :-1] = 0.0

    if col_sums[-1] > 0:
        col_share = col_sums[:-1] / (total - col_sums[-1])
        counts[:-1, :-1] += np.outer(counts[:-1, -1], col_share)
        counts[:-1, -1] = 0.0

    if original[-1, -1] > 0 and total_missing != total:
        counts[:-1, :-1] += original[:-1, :-1] / (total - total_missing) * original[-1, -1]
        counts[-1, -1] = 0.0

    return counts


def symmetric_uncertainty(table: np.ndarray) -> float:
    """Symmetric uncertainty 2*I(A;B)/(H(A)+H(B)) of a contingency table."""
    if table.sum() <= 0:
        return 0.0
    row_entropy = _entropy(table.sum(axis=1))
    col_entropy = _entropy(table.sum(axis=0))
    if row_entropy < ZERO_TOLERANCE or col_entropy < ZERO_TOLERANCE:
        return 0.0
    joint_entropy = _entropy(table.ravel())
    return 2.0 * (row_entropy + col_entropy - joint_entropy) / (row_entropy + col_entropy)


def discretized_correlation(
    codes_a: np.ndarray,
    num_values_a: int,
    codes_b: np.ndarray,
    num_values_b: int,
    involves_class: bool,
    missing_separate: bool
) -> CorrelationResult:
    """Symmetric-uncertainty correlation of two discrete attributes."""
    table = contingency_table(codes_a, num_values_a, codes_b, num_values_b)
    if not missing_separate:
        table = redistribute_missing(table)

    value = symmetric_uncertainty(table)
    if abs(value) < ZERO_TOLERANCE:
        return CorrelationResult(_degenerate(involves_class))
    return CorrelationResult(value)


def numeric_numeric(
    x: np.ndarray,
    mean_x: float,
    y: np.ndarray,
    mean_y: float,
    involves_class: bool
) -> CorrelationResult:
    """Absolute Pearson correlation; missing values count as zero deviation."""
    n = len(x)
    dx = np.where(np.isnan(x), 0.0, x - mean_x)
    dy = np.where(np.isnan(y), 0.0, y - mean_y)

    covariance = float(dx @ dy)
    ss_x = float(dx @ dx)
    ss_y = float(dy @ dy)

    spread_x = np.sqrt(ss_x / n) if ss_x != 0.0 else None
    spread_y = np.sqrt(ss_y / n) if ss_y != 0.0 else None

    if ss_x * ss_y > 0.0:
        value = abs(covariance / np.sqrt(ss_x * ss_y))
    else:
        value = _degenerate(involves_class)
    return CorrelationResult(value, spread_x, spread_y)


def numeric_nominal(
    codes: np.ndarray,
    num_values: int,
    mode: int,
    y: np.ndarray,
    mean_y: float,
    involves_class: bool,
    missing_separate: bool
) -> CorrelationResult:
    """
    Correlation between a nominal attribute (first) and a numeric one (second).

    Each category is turned into an indicator variable and correlated with
    the numeric attribute; the absolute correlations are averaged with the
    category priors as weights.
    """
    n = len(codes)
    if n == 0:
        return CorrelationResult(_degenerate(involves_class))

    index, num_slots = _category_index(codes, num_values, mode, missing_separate)
    prior = np.bincount(index, minlength=num_slots).astype(float) / n

    dy = np.where(np.isnan(y), 0.0, y - mean_y)
    ss_numeric = float(dy @ dy)

    deviations = _one_hot(index, num_slots) - prior
    ss_nominal = (deviations ** 2).sum(axis=0)
    covariances = deviations.T @ dy

    products = ss_nominal * ss_numeric
    informative = products > 0.0
    value = float(np.sum(prior[informative] * np.abs(covariances[informative] / np.sqrt(products[informative]))))
    if not involves_class:
        value += float(np.sum(prior[~informative]))

    pooled = float(np.sum(prior * ss_nominal / n))
    spread_nominal = np.sqrt(pooled) if pooled != 0.0 else None
    spread_numeric = np.sqrt(ss_numeric / n) if ss_numeric != 0.0 else None

    if value == 0.0 and not involves_class:
        value = 1.0
    return CorrelationResult(value, spread_nominal, spread_numeric)


def nominal_nominal(
    codes_a: np.ndarray,
    num_values_a: int,
    mode_a: int,
    codes_b: np.ndarray,
    num_values_b: int,
    mode_b: int,
    involves_class: bool,
    missing_separate: bool
) -> CorrelationResult:
    """
    Correlation between two nominal attributes.

    Every (category of A, category of B) pair of indicator variables is
    correlated; the absolute correlations are averaged with the joint
    frequencies as weights.
    """
    n = len(codes_a)
    if n == 0:
        return CorrelationResult(_degenerate(involves_class))

    index_a, slots_a = _category_index(codes_a, num_values_a, mode_a, missing_separate)
    index_b, slots_b = _category_index(codes_b, num_values_b, mode_b, missing_separate)

    joint = np.bincount(index_a * slots_b + index_b, minlength=slots_a * slots_b)
    joint = joint.reshape(slots_a, slots_b).astype(float) / n
    prior_a = joint.sum(axis=1)
    prior_b = joint.sum(axis=0)

    deviations_a = _one_hot(index_a, slots_a) - prior_a
    deviations_b = _one_hot(index_b, slots_b) - prior_b
    ss_a = (deviations_a ** 2).sum(axis=0)
    ss_b = (deviations_b ** 2).sum(axis=0)
    covariances = deviations_a.T @ deviations_b

    products = np.outer(ss_a, ss_b)
    informative = products > 0.0
    value = float(np.sum(joint[informative] * np.abs(covariances[informative] / np.sqrt(products[informative]))))
    if not involves_class:
        value += float(np.sum(joint[~informative]))

    pooled_a = float(np.sum(prior_a * ss_a / n))
    pooled_b = float(np.sum(prior_b * ss_b / n))
    spread_a = np.sqrt(pooled_a) if pooled_a != 0.0 else None
    spread_b = np.sqrt(pooled_b) if pooled_b != 0.0 else None

    if value == 0.0 and not involves_class:
        value = 1.0
    return CorrelationResult(value, spread_a, spread_b)


def select_estimator(
    discretized: bool,
    kind_a: AttributeKind,
    kind_b: AttributeKind
) -> EstimatorKind:
    """Pick the estimator for an attribute-type pair."""
    if discretized:
        if kind_a is AttributeKind.NOMINAL and kind_b is AttributeKind.NOMINAL:
            return EstimatorKind.SYMMETRIC_UNCERTAINTY
        raise UnsupportedAttributeType(
            f"Symmetric uncertainty needs discrete attributes, got {kind_a.value}/{kind_b.value}"
        )
    try:
        return _NUMERIC_MODE_ESTIMATORS[(kind_a, kind_b)]
    except KeyError:
        raise UnsupportedAttributeType(
            f"No correlation estimator for {kind_a.value}/{kind_b.value} attributes"
        ) from None


def correlate(
    dataset: AttributeDataset,
    att_a: int,
    att_b: int,
    discretized: bool,
    missing_separate: bool
) -> PairCorrelation:
    """Correlate two attributes of ``dataset`` with the estimator their types call for."""
    first = dataset.attribute(att_a)
    second = dataset.attribute(att_b)
    involves_class = dataset.class_index in (att_a, att_b)
    estimator = select_estimator(discretized, first.kind, second.kind)

    if estimator is EstimatorKind.SYMMETRIC_UNCERTAINTY:
        result = discretized_correlation(
            dataset.column(att_a), first.num_values,
            dataset.column(att_b), second.num_values,
            involves_class, missing_separate
        )
        return PairCorrelation(result.value)

    if estimator is EstimatorKind.NUMERIC_NUMERIC:
        result = numeric_numeric(
            dataset.column(att_a), dataset.mean_or_mode(att_a),
            dataset.column(att_b), dataset.mean_or_mode(att_b),
            involves_class
        )
        side_a, side_b = att_a, att_b
    elif estimator is EstimatorKind.NUMERIC_NOMINAL:
        side_a, side_b = (att_a, att_b) if first.is_nominal else (att_b, att_a)
        result = numeric_nominal(
            dataset.column(side_a),
            dataset.attribute(side_a).num_values,
            int(dataset.mean_or_mode(side_a)),
            dataset.column(side_b),
            dataset.mean_or_mode(side_b),
            involves_class, missing_separate
        )
    else:
        result = nominal_nominal(
            dataset.column(att_a), first.num_values, int(dataset.mean_or_mode(att_a)),
            dataset.column(att_b), second.num_values, int(dataset.mean_or_mode(att_b)),
            involves_class, missing_separate
        )
        side_a, side_b = att_a, att_b

    spreads = {}
    if result.spread_a is not None:
        spreads[side_a] = float(result.spread_a)
    if result.spread_b is not None:
        spreads[side_b] = float(result.spread_b)
    return PairCorrelation(float(result.value), spreads)
