"""
DateValidator - dates must parse and should not lie in the future.
"""

from datetime import datetime

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.utils.values import DATE_FALLBACK_PATTERN, parse_date

from .base_validator import BaseFieldValidator, FieldFinding


def to_naive_local(moment: datetime) -> datetime:
    """Convert aware datetimes to naive local time so they compare with naive ones."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


class DateValidator(BaseFieldValidator):
    """
    Validates date values against a reference time.

    Parameters:
    - reference_time: "Now" for the future-date check (defaults to the
      moment the validator is created)
    """

    def __init__(self, column, settings=None, reference_time: datetime | None = None):
        super().__init__(column, settings)
        self.reference_time = to_naive_local(reference_time or datetime.now())

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        parsed = parse_date(value)
        if parsed is None:
            # Shapes like 31-02-2024 are accepted on form alone
            if DATE_FALLBACK_PATTERN.match(str(value).strip()):
                return []
            return [
                FieldFinding(
                    check="date_parsing",
                    message="Invalid date format",
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.FORMAT,
                )
            ]

        if to_naive_local(parsed) > self.reference_time:
            return [
                FieldFinding(
                    check="not_future",
                    message="Future date detected",
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.RANGE,
                )
            ]
        return []

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.DATE
