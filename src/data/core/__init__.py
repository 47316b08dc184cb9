"""Core dataset view and supervised discretization."""

from .discretization import SupervisedDiscretizer
from .instances import (
    Attribute,
    AttributeDataset,
    AttributeKind
)

__all__ = [
    'Attribute',
    'AttributeDataset',
    'AttributeKind',
    'SupervisedDiscretizer'
]
