"""
ContactInfoValidator - emails must be well formed, phones should have a plausible length.
"""

from recordnorm.core.models import IssueCategory, IssueSeverity, Scalar, SemanticType
from recordnorm.utils.values import digit_count, is_email, is_phone, to_text

from .base_validator import BaseFieldValidator, FieldFinding


class ContactInfoValidator(BaseFieldValidator):
    """
    Values containing "@" are treated as emails; other values containing a
    digit are treated as phone numbers. Anything else is accepted.
    """

    def check(self, value: Scalar, row_index: int) -> list[FieldFinding]:
        text = to_text(value)

        if "@" in text:
            if is_email(text):
                return []
            return [
                FieldFinding(
                    check="email_regex",
                    message="Invalid email format",
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.FORMAT,
                )
            ]

        if digit_count(value) and not is_phone(
            value, self.settings.phone_min_digits, self.settings.phone_max_digits
        ):
            return [
                FieldFinding(
                    check="phone_length",
                    message="Suspicious phone number length",
                    severity=IssueSeverity.WARNING,
                    category=IssueCategory.FORMAT,
                )
            ]
        return []

    @property
    def semantic_type(self) -> SemanticType:
        return SemanticType.CONTACT_INFO
