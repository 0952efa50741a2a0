"""
Validation outcome models for both tabular fields and unified records (ephemeral).
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .severity import IssueSeverity, Severity
from .unified_record import Scalar


class IssueCategory(str, Enum):
    TYPE = "type"
    FORMAT = "format"
    RANGE = "range"
    REQUIRED = "required"
    DUPLICATE = "duplicate"
    CONSISTENCY = "consistency"
    ENCODING = "encoding"
    OTHER = "other"


class ValidationIssue(BaseModel):
    """
    A single finding against one cell.

    Attributes:
        row: 0-based index of the row in the caller's row sequence
        column: Column the value came from
        value: Offending value
        message: Human-readable explanation
        severity: Field-level severity
        category: Kind of problem
        check: Name of the check that produced the finding
    """

    row: int = Field(..., ge=0)
    column: str
    value: Scalar = None
    message: str
    severity: IssueSeverity
    category: IssueCategory = IssueCategory.OTHER
    check: str = ""


class FieldValidationResult(BaseModel):
    """
    Aggregated validation outcome for one column.

    Attributes:
        field: Column name
        semantic_type: Semantic type the column was validated as
        total_values: Rows inspected
        valid_values: Present values with no error-level finding
        invalid_values: Values with an error or critical finding
        missing_values: Rows where the value was missing
        warnings: Warning-level findings
        quality_score: 0-100 score for the column
        failed_checks: Deduplicated names of checks that fired, in first-seen order
        severity_counts: Findings per severity
        distinct_values: Distinct values seen (categorical columns only)
    """

    field: str
    semantic_type: str = ""
    total_values: int = Field(0, ge=0)
    valid_values: int = Field(0, ge=0)
    invalid_values: int = Field(0, ge=0)
    missing_values: int = Field(0, ge=0)
    warnings: int = Field(0, ge=0)
    quality_score: int = Field(0, ge=0, le=100)
    failed_checks: list[str] = Field(default_factory=list)
    severity_counts: dict[IssueSeverity, int] = Field(
        default_factory=lambda: {severity: 0 for severity in IssueSeverity}
    )
    distinct_values: int | None = None


class ValidationReport(BaseModel):
    """
    Dataset-level outcome of the field validator.

    Note: ``issues`` is capped; use ``rows_with_critical`` and
    ``rows_with_warnings`` to act on every affected row.
    """

    overall_score: int = Field(0, ge=0, le=100)
    total_records: int = Field(0, ge=0)
    processed_records: int = Field(0, ge=0)
    error_count: int = Field(0, ge=0)
    warning_count: int = Field(0, ge=0)
    status: Literal["pass", "warn", "fail"] = "pass"
    field_results: dict[str, FieldValidationResult] = Field(default_factory=dict)
    issues: list[ValidationIssue] = Field(default_factory=list)
    rows_with_critical: list[int] = Field(default_factory=list)
    rows_with_warnings: list[int] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "overall_score": 83,
                "total_records": 10,
                "processed_records": 10,
                "error_count": 1,
                "warning_count": 1,
                "status": "warn",
                "rows_with_critical": [],
                "rows_with_warnings": [9],
            }
        }


class RecordValidationError(BaseModel):
    """
    A rule violation raised against a unified record.

    Attributes:
        code: Stable machine-readable code (e.g. "EMPTY_CONTENT")
        message: Human-readable explanation
        severity: Record-level severity
        field: Record field the rule looked at
        suggestion: Optional hint for fixing the record
    """

    code: str = Field(..., min_length=1)
    message: str
    severity: Severity
    field: str | None = None
    suggestion: str | None = None


class RecordValidationResult(BaseModel):
    """
    Outcome of running every record rule against one record.

    ``is_valid`` is strict: any finding, even LOW, makes it False. Use
    ``is_acceptable`` to decide whether a record may pass the pipeline.
    """

    record_id: str
    errors: list[RecordValidationError] = Field(default_factory=list)

    @property
    def has_findings(self) -> bool:
        return bool(self.errors)

    @property
    def is_valid(self) -> bool:
        return not self.has_findings

    @property
    def is_acceptable(self) -> bool:
        """True when no finding is HIGH or CRITICAL."""
        return not any(error.severity >= Severity.HIGH for error in self.errors)

    @property
    def highest_severity(self) -> Severity | None:
        return Severity.highest(error.severity for error in self.errors)

    def codes(self) -> list[str]:
        return [error.code for error in self.errors]
