"""
Subset Search Strategies

Greedy forward selection driven by a subset evaluator, with an
always-advance policy for producing full attribute rankings.
"""

from .forward_selection import (
    ForwardSelection,
    ForwardSelectionConfig,
    SearchPolicy,
    SearchState,
    parse_start_set,
)

__all__ = [
    'ForwardSelection',
    'ForwardSelectionConfig',
    'SearchPolicy',
    'SearchState',
    'parse_start_set'
]
