"""
BooleanFlagValidator - flags must use a recognised boolean token.
"""

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.utils.values import is_booleanish

from .base_validator import BaseFieldValidator, FieldFinding


class BooleanFlagValidator(BaseFieldValidator):
    """Accepts true/false/0/1/yes/no/y/n in any case, and real booleans."""

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        if is_booleanish(value):
            return []
        return [
            FieldFinding(
                check="boolean_conversion",
                message="Invalid boolean value",
                severity=IssueSeverity.ERROR,
                category=IssueCategory.TYPE,
            )
        ]

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.BOOLEAN_FLAG
