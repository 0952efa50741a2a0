"""
Base validator interface for per-column value checks.

All column validators inherit from BaseFieldValidator and implement
check(). Missing values never reach check(); the field validator
handles them before dispatching.
"""

from abc import ABC, abstractmethod
from typing import NamedTuple

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.core.rules.rule_config import PipelineSettings


class FieldFinding(NamedTuple):
    """A single problem found with a value."""

    check: str
    message: str
    severity: IssueSeverity
    category: IssueCategory


class BaseFieldValidator(ABC):
    """
    Abstract base class for column validators.

    One instance is created per column and sees the column's values in row
    order, so validators may keep state (seen identifiers, numeric values,
    distinct categories).
    """

    def __init__(self, column: str, settings: PipelineSettings | None = None):
        """
        Initialize validator.

        Args:
            column: Name of the column to validate
            settings: Pipeline thresholds
        """
        self.column = column
        self.settings = settings or PipelineSettings()

    @abstractmethod
    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        """
        Check one present value.

        Args:
            value: Non-missing cell value
            row_index: Index of the row the value came from

        Returns:
            Findings for the value (empty when the value is fine)
        """
        pass

    def check_missing(self, row_index: int) -> list[FieldFinding]:
        """Findings for a missing value. Most types accept missing values."""
        return []

    @property
    @abstractmethod
    def semantic_type(self) -> SemanticType:
        """Return the semantic type this validator handles."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(column={self.column})"
