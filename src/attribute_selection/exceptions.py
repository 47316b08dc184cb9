"""
Error taxonomy for attribute subset selection.

All of these signal caller or configuration mistakes and are raised
immediately. Numeric degeneracies met during evaluation (zero variance,
empty subsets, zero denominators) are never reported through exceptions.
"""


class AttributeSelectionError(Exception):
    """Base class for attribute selection failures."""


class UnsupportedAttributeType(AttributeSelectionError):
    """An attribute type the evaluator cannot handle (string attributes)."""


class CapabilityMismatch(AttributeSelectionError):
    """A search was handed an evaluator that cannot score subsets."""


class PreconditionViolation(AttributeSelectionError):
    """An operation was requested before its prerequisites were met."""


class ConfigurationConflict(AttributeSelectionError, ValueError):
    """Contradictory or out-of-range configuration values."""
