"""
Unit tests for column validators.

Includes property-based testing with hypothesis for validators.
"""

from datetime import datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from recordnorm.core.models import IssueCategory, IssueSeverity, SemanticType
from recordnorm.core.rules import PipelineSettingsBuilder
from recordnorm.core.validators import (
    BooleanFlagValidator,
    CategoricalValidator,
    ContactInfoValidator,
    DateValidator,
    FreeTextValidator,
    IdentifierValidator,
    NameValidator,
    NumericAmountValidator,
)


def checks(findings):
    return [finding.check for finding in findings]


class TestIdentifierValidator:
    """Tests for IdentifierValidator"""

    def test_first_value_passes(self):
        validator = IdentifierValidator("id")
        assert validator.check("A1", 0) == []

    def test_repeat_is_critical(self):
        """Test a repeated identifier is a critical duplicate"""
        validator = IdentifierValidator("id")
        validator.check("A1", 0)

        findings = validator.check("A1", 1)

        assert checks(findings) == ["uniqueness"]
        assert findings[0].severity == IssueSeverity.CRITICAL
        assert findings[0].category == IssueCategory.DUPLICATE

    def test_text_and_number_compare_equal(self):
        validator = IdentifierValidator("id")
        validator.check(1, 0)
        assert checks(validator.check(" 1 ", 1)) == ["uniqueness"]

    def test_missing_is_critical(self):
        findings = IdentifierValidator("id").check_missing(3)

        assert checks(findings) == ["non_null"]
        assert findings[0].category == IssueCategory.REQUIRED

    @given(st.lists(st.text(min_size=1).filter(lambda s: s.strip() != ""), unique_by=str.strip))
    def test_property_distinct_identifiers_pass(self, values):
        """Property test: distinct identifiers never produce findings"""
        validator = IdentifierValidator("id")
        assert all(validator.check(value, i) == [] for i, value in enumerate(values))


class TestNumericAmountValidator:
    """Tests for NumericAmountValidator"""

    @pytest.mark.parametrize("value", ["12.5", 7, 0.0, " 3 "])
    def test_valid_amounts(self, value):
        assert NumericAmountValidator("amount").check(value, 0) == []

    @pytest.mark.parametrize("value", ["$120", "abc", True, "1_000"])
    def test_unparseable_is_error(self, value):
        findings = NumericAmountValidator("amount").check(value, 0)

        assert checks(findings) == ["numeric_conversion"]
        assert findings[0].severity == IssueSeverity.ERROR

    def test_negative_is_warning(self):
        findings = NumericAmountValidator("amount").check("-5", 0)

        assert checks(findings) == ["non_negative"]
        assert findings[0].severity == IssueSeverity.WARNING

    def test_values_collected(self):
        validator = NumericAmountValidator("amount")
        for i, value in enumerate(["1", "oops", "-2", 3]):
            validator.check(value, i)

        assert validator.values == [1.0, -2.0, 3.0]

    @given(st.floats(min_value=0, max_value=1e12, allow_nan=False))
    def test_property_non_negative_passes(self, value):
        """Property test: any non-negative float is accepted"""
        assert NumericAmountValidator("amount").check(value, 0) == []


class TestDateValidator:
    """Tests for DateValidator"""

    NOW = datetime(2024, 6, 1, 12, 0, 0)

    @pytest.mark.parametrize("value", ["2023-01-15", "15/02/2023", "Feb 15 2023", "31-02-2024"])
    def test_accepted_dates(self, value):
        assert DateValidator("d", reference_time=self.NOW).check(value, 0) == []

    def test_unparseable_is_error(self):
        findings = DateValidator("d", reference_time=self.NOW).check("not a date", 0)
        assert checks(findings) == ["date_parsing"]

    def test_future_is_warning(self):
        """Test dates after the reference time are flagged"""
        findings = DateValidator("d", reference_time=self.NOW).check("2030-01-01", 0)

        assert checks(findings) == ["not_future"]
        assert findings[0].severity == IssueSeverity.WARNING


class TestContactInfoValidator:
    """Tests for ContactInfoValidator"""

    @pytest.mark.parametrize("value", ["john@example.com", "(555) 123-4567", "+44 20 7946 0958", "n/a"])
    def test_accepted_values(self, value):
        assert ContactInfoValidator("contact").check(value, 0) == []

    def test_malformed_email_is_error(self):
        findings = ContactInfoValidator("contact").check("bob@example", 0)

        assert checks(findings) == ["email_regex"]
        assert findings[0].severity == IssueSeverity.ERROR

    @pytest.mark.parametrize("value", ["555-12", "1234567890123456"])
    def test_phone_length_is_warning(self, value):
        assert checks(ContactInfoValidator("contact").check(value, 0)) == ["phone_length"]

    def test_phone_bounds_follow_settings(self, strict_settings):
        """Test the accepted digit range comes from settings"""
        validator = ContactInfoValidator("contact", strict_settings)
        assert checks(validator.check("555-1234", 0)) == ["phone_length"]

    def test_numeric_phone_counts_integer_digits(self):
        """Test a ten digit phone read as a float fits a ten digit range"""
        settings = PipelineSettingsBuilder().with_phone_digits(10, 10).build()
        assert ContactInfoValidator("contact", settings).check(5551234567.0, 0) == []


class TestBooleanFlagValidator:
    """Tests for BooleanFlagValidator"""

    @pytest.mark.parametrize("value", ["true", "FALSE", "0", "1", "Yes", "n", True, 0])
    def test_tokens_accepted(self, value):
        assert BooleanFlagValidator("flag").check(value, 0) == []

    @pytest.mark.parametrize("value", ["maybe", "on", "2"])
    def test_other_values_are_errors(self, value):
        assert checks(BooleanFlagValidator("flag").check(value, 0)) == ["boolean_conversion"]


class TestTextValidators:
    """Tests for free text, name and categorical validators"""

    def test_free_text_length(self, settings):
        text = "x" * (settings.free_text_max_length + 1)
        assert checks(FreeTextValidator("notes", settings).check(text, 0)) == ["length_check"]

    def test_free_text_control_characters(self):
        findings = FreeTextValidator("notes").check("bad\x07bell", 0)

        assert checks(findings) == ["encoding"]
        assert findings[0].category == IssueCategory.ENCODING

    @pytest.mark.parametrize("value", ["\x1fvalue", "value\x1c", "\x0bvalue\x0c"])
    def test_control_characters_at_the_edges(self, value):
        """Test control characters are found even where trimming would remove them"""
        assert checks(FreeTextValidator("notes").check(value, 0)) == ["encoding"]

    def test_whitespace_controls_allowed(self):
        assert FreeTextValidator("notes").check("line one\n\tline two\r\n", 0) == []

    def test_names_accept_anything(self):
        assert NameValidator("name").check("x Æ a-12", 0) == []

    def test_categories_collected(self):
        validator = CategoricalValidator("segment")
        for i, value in enumerate(["retail", " retail ", "wholesale"]):
            assert validator.check(value, i) == []

        assert validator.categories == {"retail", "wholesale"}

    @pytest.mark.parametrize(
        "validator_class,semantic_type",
        [
            (IdentifierValidator, SemanticType.IDENTIFIER),
            (NameValidator, SemanticType.NAME),
            (FreeTextValidator, SemanticType.FREE_TEXT),
            (CategoricalValidator, SemanticType.CATEGORICAL),
            (BooleanFlagValidator, SemanticType.BOOLEAN_FLAG),
            (ContactInfoValidator, SemanticType.CONTACT_INFO),
            (NumericAmountValidator, SemanticType.NUMERIC_AMOUNT),
            (DateValidator, SemanticType.DATE),
        ],
    )
    def test_semantic_types(self, validator_class, semantic_type):
        validator = validator_class("col")

        assert validator.semantic_type == semantic_type
        assert repr(validator) == f"{validator_class.__name__}(column=col)"
