"""
Closed severity scales with an explicit total order.

Two scales exist: record-level Severity (LOW..CRITICAL) used by the rule
engine and orchestrator, and field-level IssueSeverity (info..critical)
used by the field validator. Members are declared lowest first and compare
by declaration position, never by their string values.
"""

from collections.abc import Iterable
from enum import Enum


class _OrderedSeverity(str, Enum):
    """Enum base whose members compare by declaration order."""

    @property
    def rank(self) -> int:
        return type(self)._member_names_.index(self.name)

    def __lt__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.rank >= other.rank

    def at_least(self, threshold) -> bool:
        """Check whether this severity meets or exceeds a threshold."""
        return self >= threshold

    @classmethod
    def highest(cls, severities: Iterable) -> "_OrderedSeverity | None":
        """Return the highest severity in an iterable, or None when empty."""
        return max(severities, default=None)


class Severity(_OrderedSeverity):
    """Record-level severity."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IssueSeverity(_OrderedSeverity):
    """Field-level issue severity."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def compare_severity(left: _OrderedSeverity, right: _OrderedSeverity) -> int:
    """
    Three-way comparison of two severities from the same scale.

    Returns:
        -1, 0 or 1

    Raises:
        TypeError: If the severities belong to different scales
    """
    if type(left) is not type(right):
        raise TypeError(f"Cannot compare {type(left).__name__} with {type(right).__name__}")
    return (left.rank > right.rank) - (left.rank < right.rank)
