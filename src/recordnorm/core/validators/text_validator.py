"""
Validators for textual columns: free text, names and categories.
"""

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.utils.values import has_control_characters, to_text

from .base_validator import BaseFieldValidator, FieldFinding


class FreeTextValidator(BaseFieldValidator):
    """
    Flags overly long text and hidden control characters.

    Parameters:
    - free_text_max_length (settings): Longest accepted value
    """

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        text = to_text(value)
        findings = []

        if len(text) > self.settings.free_text_max_length:
            findings.append(
                FieldFinding(
                    check="length_check",
                    message="Excessive text length",
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.CONSISTENCY,
                )
            )

        # str.strip() drops \x0b, \x0c and \x1c-\x1f, so scan the raw string
        if has_control_characters(value if isinstance(value, str) else text):
            findings.append(
                FieldFinding(
                    check="encoding",
                    message="Hidden control characters detected",
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.ENCODING,
                )
            )

        return findings

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.FREE_TEXT


class NameValidator(BaseFieldValidator):
    """Names have no value-level checks."""

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        return []

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.NAME


class CategoricalValidator(BaseFieldValidator):
    """Collects the distinct categories of a column without flagging values."""

    def __init__(self, column, settings=None):
        super().__init__(column, settings)
        self.categories: set[str] = set()

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        self.categories.add(to_text(value))
        return []

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.CATEGORICAL
