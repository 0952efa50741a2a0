"""
IdentifierValidator - identifiers must be present and unique within a column.
"""

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType

from .base_validator import BaseFieldValidator, FieldFinding


class IdentifierValidator(BaseFieldValidator):
    """
    Flags missing and repeated identifiers as critical.

    Values are compared as trimmed text, so 1 and "1" are the same identifier.
    """

    def __init__(self, column, settings=None):
        super().__init__(column, settings)
        self.seen: set[str] = set()

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        key = str(value).strip()
        if key in self.seen:
            return [
                FieldFinding(
                    check="uniqueness",
                    message="Duplicate identifier",
                    severity=IssueSeverity.CRITICAL,
                    category=IssueCategory.DUPLICATE,
                )
            ]
        self.seen.add(key)
        return []

    def check_missing(self, row_index: int) -> list[FieldFinding]:
        return [
            FieldFinding(
                check="non_null",
                message="Identifier cannot be null",
                severity=IssueSeverity.CRITICAL,
                category=IssueCategory.REQUIRED,
            )
        ]

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.IDENTIFIER
