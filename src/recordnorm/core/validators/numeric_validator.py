"""
NumericAmountValidator - amounts must parse as numbers and should not be negative.
"""

import math

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.utils.values import parse_number

from .base_validator import BaseFieldValidator, FieldFinding


class NumericAmountValidator(BaseFieldValidator):
    """
    Validates numeric amounts and collects parsed values for outlier detection.

    Outliers are computed with Tukey fences once the whole column has been
    seen, see outlier_bounds().
    """

    def __init__(self, column, settings=None):
        super().__init__(column, settings)
        self.values: list[float] = []

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        number = parse_number(value)
        if number is None:
            return [
                FieldFinding(
                    check="numeric_conversion",
                    message="Invalid numeric value",
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.TYPE,
                )
            ]

        self.values.append(number)
        if number < 0:
            return [
                FieldFinding(
                    check="non_negative",
                    message="Negative value detected",
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.RANGE,
                )
            ]
        return []

    def outlier_bounds(self) -> tuple[float, float] | None:
        """
        Compute IQR fences over the collected values.

        Returns:
            (lower, upper) fences, or None with too few values to judge
        """
        if len(self.values) < self.settings.outlier_min_values:
            return None

        ordered = sorted(self.values)
        n = len(ordered)
        q1 = ordered[math.floor(n * 0.25)]
        q3 = ordered[math.floor(n * 0.75)]
        spread = (q3 - q1) * self.settings.iqr_multiplier
        return q1 - spread, q3 + spread

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.NUMERIC_AMOUNT
