"""
Field validator for tabular rows.

Runs one column validator per mapped column, post-processes numeric
columns for IQR outliers, scores every column and derives the dataset
status.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from recordnorm.core.models import (
    FieldValidationResult,
    IssueCategory,
    IssueSeverity,
    Row,
    SemanticType,
    ValidationIssue,
    ValidationReport,
)
from recordnorm.core.rules.rule_config import PipelineSettings
from recordnorm.core.schema.mapping import coerce_semantic_mapping
from recordnorm.observability.logger import get_logger
from recordnorm.observability.metrics import (
    dataset_quality_score,
    field_issues_total,
    increment_counter,
    set_gauge,
)
from recordnorm.utils.values import is_blank, parse_number

from .base_validator import BaseFieldValidator, FieldFinding
from .boolean_validator import BooleanFlagValidator
from .contact_validator import ContactInfoValidator
from .date_validator import DateValidator
from .identifier_validator import IdentifierValidator
from .numeric_validator import NumericAmountValidator
from .text_validator import CategoricalValidator, FreeTextValidator, NameValidator

logger = get_logger(__name__)

OUTLIER_CHECK = "outlier_iqr"


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positive values.

    Examples:
        >>> round_half_up(82.5)
        83
        >>> round_half_up(82.4)
        82
    """
    return math.floor(value + 0.5)


def field_score(valid: int, warnings: int, total: int, penalty_cap: float = 50.0) -> int:
    """
    Score one column from its counts.

    ``100 * valid / total`` minus a warning penalty capped at
    ``penalty_cap`` points, clamped to 0-100. Empty columns score 0.
    """
    if total <= 0:
        return 0
    score = 100 * valid / total - min(penalty_cap, 100 * warnings / total)
    return round_half_up(max(0.0, min(100.0, score)))


class FieldValidator:
    """
    Validates tabular rows against a semantic mapping.

    A fresh set of column validators is built for every validate() call,
    so one FieldValidator may be reused across datasets.
    """

    VALIDATOR_REGISTRY: dict[SemanticType, type[BaseFieldValidator]] = {
        SemanticType.IDENTIFIER: IdentifierValidator,
        SemanticType.NAME: NameValidator,
        SemanticType.DATE: DateValidator,
        SemanticType.NUMERIC_AMOUNT: NumericAmountValidator,
        SemanticType.CONTACT_INFO: ContactInfoValidator,
        SemanticType.CATEGORICAL: CategoricalValidator,
        SemanticType.BOOLEAN_FLAG: BooleanFlagValidator,
        SemanticType.FREE_TEXT: FreeTextValidator,
    }

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        reference_time: datetime | None = None,
    ):
        """
        Initialize the field validator.

        Args:
            settings: Pipeline thresholds
            reference_time: "Now" for future-date checks (defaults to call time)
        """
        self.settings = settings or PipelineSettings()
        self.reference_time = reference_time

    def _build_validators(self, semantic_mapping: Mapping[str, SemanticType]) -> dict[str, BaseFieldValidator]:
        validators: dict[str, BaseFieldValidator] = {}
        for column, semantic_type in semantic_mapping.items():
            validator_class = self.VALIDATOR_REGISTRY[semantic_type]
            if validator_class is DateValidator:
                validators[column] = DateValidator(column, self.settings, self.reference_time)
            else:
                validators[column] = validator_class(column, self.settings)
        return validators

    def validate(
        self,
        rows: Sequence[Row],
        semantic_mapping: Mapping[str, SemanticType | str],
        row_indices: Sequence[int] | None = None,
    ) -> ValidationReport:
        """
        Validate every mapped column of every row.

        Args:
            rows: Row dicts; missing keys count as missing values
            semantic_mapping: Column -> semantic type
            row_indices: Index to report for each row (defaults to its position)

        Returns:
            ValidationReport

        Raises:
            MappingConfigurationError: If the semantic mapping names an unknown type
            ValueError: If row_indices does not match rows in length
        """
        mapping = coerce_semantic_mapping(semantic_mapping)
        if row_indices is None:
            row_indices = range(len(rows))
        elif len(row_indices) != len(rows):
            raise ValueError(
                f"row_indices has {len(row_indices)} entries for {len(rows)} rows"
            )

        validators = self._build_validators(mapping)
        results = {
            column: FieldValidationResult(field=column, semantic_type=semantic_type.value)
            for column, semantic_type in mapping.items()
        }
        collector = _IssueCollector(self.settings.max_collected_issues)

        for position, row in enumerate(rows):
            row_index = row_indices[position]
            for column, validator in validators.items():
                value = row.get(column)
                result = results[column]
                result.total_values += 1

                if is_blank(value):
                    result.missing_values += 1
                    findings = validator.check_missing(row_index)
                else:
                    findings = validator.check(value, row_index)

                invalid = False
                for finding in findings:
                    collector.add(result, row_index, column, value, finding)
                    if finding.severity >= IssueSeverity.ERROR:
                        invalid = True

                if invalid:
                    result.invalid_values += 1
                elif not is_blank(value):
                    result.valid_values += 1

        for column, validator in validators.items():
            if isinstance(validator, NumericAmountValidator):
                self._flag_outliers(rows, row_indices, validator, results[column], collector)
            elif isinstance(validator, CategoricalValidator):
                results[column].distinct_values = len(validator.categories)

        return self._build_report(rows, results, collector)

    def _flag_outliers(
        self,
        rows: Sequence[Row],
        row_indices: Sequence[int],
        validator: NumericAmountValidator,
        result: FieldValidationResult,
        collector: "_IssueCollector",
    ) -> None:
        bounds = validator.outlier_bounds()
        if bounds is None:
            return

        lower, upper = bounds
        finding = FieldFinding(
            check=OUTLIER_CHECK,
            message=f"Outlier detected (Range: {lower:.2f} - {upper:.2f})",
            severity=IssueSeverity.WARNING,
            category=IssueCategory.RANGE,
        )
        for position, row in enumerate(rows):
            value = row.get(validator.column)
            if is_blank(value):
                continue
            number = parse_number(value)
            if number is not None and (number < lower or number > upper):
                collector.add(result, row_indices[position], validator.column, value, finding)

    def _build_report(
        self,
        rows: Sequence[Row],
        results: dict[str, FieldValidationResult],
        collector: "_IssueCollector",
    ) -> ValidationReport:
        for result in results.values():
            result.quality_score = field_score(
                result.valid_values,
                result.warnings,
                result.total_values,
                self.settings.warning_penalty_cap,
            )

        overall = (
            round_half_up(sum(r.quality_score for r in results.values()) / len(results))
            if results
            else 0
        )

        total = len(rows)
        error_count = collector.counts[IssueSeverity.CRITICAL] + collector.counts[IssueSeverity.ERROR]
        warning_count = collector.counts[IssueSeverity.WARNING]

        if overall < self.settings.fail_score_threshold or error_count > total * self.settings.max_error_ratio:
            status = "fail"
        elif overall < self.settings.warn_score_threshold or warning_count > 0:
            status = "warn"
        else:
            status = "pass"

        report = ValidationReport(
            overall_score=overall,
            total_records=total,
            processed_records=total,
            error_count=error_count,
            warning_count=warning_count,
            status=status,
            field_results=results,
            issues=collector.issues[: self.settings.max_reported_issues],
            rows_with_critical=sorted(collector.critical_rows),
            rows_with_warnings=sorted(collector.warning_rows),
        )
        set_gauge(dataset_quality_score, overall)

        logger.info(
            "Field validation complete",
            extra={
                "rows": total,
                "columns": len(results),
                "overall_score": overall,
                "status": status,
                "error_count": error_count,
                "warning_count": warning_count,
            },
        )
        return report


class _IssueCollector:
    """Collects issues up to a cap while keeping every count exact."""

    def __init__(self, limit: int):
        self.limit = limit
        self.issues: list[ValidationIssue] = []
        self.counts: dict[IssueSeverity, int] = {severity: 0 for severity in IssueSeverity}
        self.critical_rows: set[int] = set()
        self.warning_rows: set[int] = set()

    def add(
        self,
        result: FieldValidationResult,
        row_index: int,
        column: str,
        value: Any,
        finding: FieldFinding,
    ) -> None:
        self.counts[finding.severity] += 1
        result.severity_counts[finding.severity] = result.severity_counts.get(finding.severity, 0) + 1
        if finding.check not in result.failed_checks:
            result.failed_checks.append(finding.check)

        if finding.severity == IssueSeverity.CRITICAL:
            self.critical_rows.add(row_index)
        elif finding.severity == IssueSeverity.WARNING:
            result.warnings += 1
            self.warning_rows.add(row_index)

        increment_counter(field_issues_total, check=finding.check, severity=finding.severity.value)

        if len(self.issues) < self.limit:
            self.issues.append(
                ValidationIssue(
                    row=row_index,
                    column=column,
                    value=value,
                    message=finding.message,
                    severity=finding.severity,
                    category=finding.category,
                    check=finding.check,
                )
            )
