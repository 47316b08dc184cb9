"""
Tabular dataset view consumed by the attribute selection subsystem.

Attributes are ordered and typed (numeric, nominal or string). Instance
values live in a single float matrix: numeric attributes hold their raw
values, nominal and string attributes hold category codes. Missing values
are encoded as NaN. Every instance carries a weight and the dataset may
designate one attribute as the class.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class AttributeKind(Enum):
    """Attribute value types."""
    NUMERIC = "numeric"
    NOMINAL = "nominal"
    STRING = "string"


@dataclass(frozen=True)
class Attribute:
    """Metadata for a single column of the dataset."""
    name: str
    index: int
    kind: AttributeKind
    values: Tuple[str, ...] = ()  # category labels for nominal/string attributes

    @property
    def is_numeric(self) -> bool:
        return self.kind is AttributeKind.NUMERIC

    @property
    def is_nominal(self) -> bool:
        return self.kind is AttributeKind.NOMINAL

    @property
    def is_string(self) -> bool:
        return self.kind is AttributeKind.STRING

    @property
    def num_values(self) -> int:
        return len(self.values)


class AttributeDataset:
    """
    Ordered typed attributes plus ordered weighted instances.

    The dataset is treated as immutable by its consumers: operations that
    drop rows or columns return a new dataset.
    """

    def __init__(
        self,
        attributes: Sequence[Attribute],
        data: np.ndarray,
        weights: Optional[np.ndarray] = None,
        class_index: Optional[int] = None,
        relation_name: str = "dataset"
    ):
        """
        Initialize dataset.

        Args:
            attributes: Attribute metadata, one per column, ordered by index
            data: (n_instances, n_attributes) float matrix, NaN marks missing
            weights: Optional per-instance weights (default 1.0)
            class_index: Optional index of the class attribute
            relation_name: Name used in reports
        """
        data = np.asarray(data, dtype=float)
        if data.ndim != 2:
            raise ValueError(f"Data must be two-dimensional, got {data.ndim} dimensions")
        if data.shape[1] != len(attributes):
            raise ValueError(
                f"Data has {data.shape[1]} columns but {len(attributes)} attributes were given"
            )
        for position, attribute in enumerate(attributes):
            if attribute.index != position:
                raise ValueError(f"Attribute {attribute.name} has index {attribute.index}, expected {position}")

        if weights is None:
            weights = np.ones(data.shape[0])
        weights = np.asarray(weights, dtype=float)
        if weights.shape != (data.shape[0],):
            raise ValueError(f"Weights must have shape ({data.shape[0]},), got {weights.shape}")

        if class_index is not None and not 0 <= class_index < len(attributes):
            raise ValueError(f"Class index {class_index} out of range for {len(attributes)} attributes")

        self._attributes: List[Attribute] = list(attributes)
        self._data = data
        self._weights = weights
        self._class_index = class_index
        self.relation_name = relation_name

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        class_column: Optional[str] = None,
        weights: Optional[np.ndarray] = None,
        relation_name: Optional[str] = None
    ) -> 'AttributeDataset':
        """
        Build a dataset from a DataFrame.

        Numeric dtypes (bool excluded) become numeric attributes and the
        pandas ``string`` dtype becomes a string attribute. Any other dtype
        (object, category, bool) becomes nominal.
        """
        attributes = []
        columns = []

        for index, name in enumerate(df.columns):
            series = df[name]
            if pd.api.types.is_bool_dtype(series) or isinstance(series.dtype, pd.CategoricalDtype):
                kind = AttributeKind.NOMINAL
            elif pd.api.types.is_numeric_dtype(series):
                kind = AttributeKind.NUMERIC
            elif isinstance(series.dtype, pd.StringDtype):
                kind = AttributeKind.STRING
            else:
                kind = AttributeKind.NOMINAL

            if kind is AttributeKind.NUMERIC:
                attributes.append(Attribute(str(name), index, kind))
                columns.append(series.to_numpy(dtype=float, na_value=np.nan))
            else:
                categorical = pd.Categorical(series)
                codes = categorical.codes.astype(float)
                codes[codes < 0] = np.nan
                labels = tuple(str(c) for c in categorical.categories)
                attributes.append(Attribute(str(name), index, kind, labels))
                columns.append(codes)

        data = np.column_stack(columns) if columns else np.empty((len(df), 0))

        class_index = None
        if class_column is not None:
            if class_column not in df.columns:
                raise ValueError(f"Class column '{class_column}' not found in DataFrame")
            class_index = list(df.columns).index(class_column)

        dataset = cls(
            attributes,
            data,
            weights=weights,
            class_index=class_index,
            relation_name=relation_name or "dataframe"
        )
        logger.debug(
            f"Dataset built from DataFrame: {dataset.num_instances} instances, "
            f"{dataset.num_attributes} attributes, class={class_column}"
        )
        return dataset

    @property
    def attributes(self) -> List[Attribute]:
        return list(self._attributes)

    @property
    def num_attributes(self) -> int:
        return len(self._attributes)

    @property
    def num_instances(self) -> int:
        return self._data.shape[0]

    @property
    def class_index(self) -> Optional[int]:
        return self._class_index

    @property
    def class_attribute(self) -> Optional[Attribute]:
        if self._class_index is None:
            return None
        return self._attributes[self._class_index]

    @property
    def weights(self) -> np.ndarray:
        return self._weights

    def attribute(self, index: int) -> Attribute:
        return self._attributes[index]

    def column(self, index: int) -> np.ndarray:
        """Values of one attribute (codes for nominal attributes, NaN = missing)."""
        return self._data[:, index]

    def is_missing(self, index: int) -> np.ndarray:
        return np.isnan(self._data[:, index])

    def attribute_names(self) -> List[str]:
        return [a.name for a in self._attributes]

    def check_for_string_attributes(self) -> bool:
        return any(a.is_string for a in self._attributes)

    def mean_or_mode(self, index: int) -> float:
        """Weighted mean of a numeric attribute or weighted modal code of a nominal one."""
        attribute = self._attributes[index]
        column = self._data[:, index]
        present = ~np.isnan(column)

        if attribute.is_numeric:
            total_weight = self._weights[present].sum()
            if total_weight <= 0:
                return 0.0
            return float(np.dot(column[present], self._weights[present]) / total_weight)

        if attribute.num_values == 0:
            return 0.0
        counts = np.bincount(
            column[present].astype(int),
            weights=self._weights[present],
            minlength=attribute.num_values
        )
        return float(np.argmax(counts))

    def delete_with_missing_class(self) -> 'AttributeDataset':
        """Return a copy without the instances whose class value is missing."""
        if self._class_index is None:
            return self
        keep = ~np.isnan(self._data[:, self._class_index])
        dropped = int((~keep).sum())
        if dropped:
            logger.info(f"Dropped {dropped} instances with missing class value")
        return AttributeDataset(
            self._attributes,
            self._data[keep],
            weights=self._weights[keep],
            class_index=self._class_index,
            relation_name=self.relation_name
        )

    def replace_attributes(
        self,
        replacements: Dict[int, Tuple[Attribute, np.ndarray]]
    ) -> 'AttributeDataset':
        """Return a copy with the given columns swapped for new metadata and values."""
        attributes = list(self._attributes)
        data = self._data.copy()
        for index, (attribute, column) in replacements.items():
            if attribute.index != index:
                raise ValueError(f"Replacement for column {index} carries index {attribute.index}")
            attributes[index] = attribute
            data[:, index] = column
        return AttributeDataset(
            attributes,
            data,
            weights=self._weights,
            class_index=self._class_index,
            relation_name=self.relation_name
        )

    def select_attributes(self, indices: Sequence[int]) -> 'AttributeDataset':
        """Project onto the given attributes, in the given order."""
        indices = list(indices)
        attributes = [
            Attribute(self._attributes[old].name, new, self._attributes[old].kind, self._attributes[old].values)
            for new, old in enumerate(indices)
        ]
        class_index = None
        if self._class_index is not None and self._class_index in indices:
            class_index = indices.index(self._class_index)
        return AttributeDataset(
            attributes,
            self._data[:, indices],
            weights=self._weights,
            class_index=class_index,
            relation_name=self.relation_name
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Convert back to a DataFrame; nominal columns become categoricals."""
        frame = {}
        for attribute in self._attributes:
            column = self._data[:, attribute.index]
            if attribute.is_numeric:
                frame[attribute.name] = column
            else:
                codes = np.where(np.isnan(column), -1, column).astype(int)
                frame[attribute.name] = pd.Categorical.from_codes(codes, categories=list(attribute.values))
        return pd.DataFrame(frame)

    def __repr__(self) -> str:
        class_name = self.class_attribute.name if self.class_attribute else None
        return (
            f"AttributeDataset(relation={self.relation_name!r}, instances={self.num_instances}, "
            f"attributes={self.num_attributes}, class={class_name!r})"
        )
