"""
Value cleaning for tabular rows, keyed by semantic type.
"""

import re
from collections.abc import Mapping, Sequence
from datetime import datetime

from recordnorm.core.models import (
    CleaningReport,
    CleaningStats,
    Row,
    Scalar,
    SemanticType,
)
from recordnorm.core.rules.rule_config import PipelineSettings
from recordnorm.core.schema.mapping import check_mapping, coerce_semantic_mapping
from recordnorm.core.validators.field_validator import FieldValidator
from recordnorm.observability.logger import get_logger
from recordnorm.observability.metrics import record_fixes
from recordnorm.utils.values import EMAIL_PATTERN, is_blank, parse_date, phone_digits

logger = get_logger(__name__)

NAME_TOKEN_PATTERN = re.compile(r"\w\S*")
NUMERIC_NOISE_PATTERN = re.compile(r"[^0-9.\-]")

TRUE_TOKENS = frozenset({"true", "1", "yes", "y", "on", "active"})
FALSE_TOKENS = frozenset({"false", "0", "no", "n", "off", "inactive"})


def _changed(before: Scalar, after: Scalar) -> bool:
    """Type-aware change test, so 1 -> 1.0 and "1" -> True count as changes."""
    return type(before) is not type(after) or before != after


def _title_token(match: re.Match[str]) -> str:
    token = match.group(0)
    return token[0].upper() + token[1:].lower()


class FieldCleaner:
    """
    Cleans tabular rows according to their columns' semantic types.

    Rows are first gated on the primary identifier (missing and repeated
    ids are dropped), then every mapped column is cleaned and renamed to its
    target field, and finally the cleaned rows are re-validated. Rows with a
    critical finding after cleaning are dropped as well.
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        reference_time: datetime | None = None,
    ):
        """
        Initialize the cleaner.

        Args:
            settings: Pipeline thresholds
            reference_time: "Now" for the post-cleaning future-date check
        """
        self.settings = settings or PipelineSettings()
        self.validator = FieldValidator(self.settings, reference_time)

    def clean_value(self, value: Scalar, semantic_type: SemanticType) -> tuple[Scalar, str | None]:
        """
        Clean one value.

        Args:
            value: Raw cell value
            semantic_type: Semantic type of the column

        Returns:
            Tuple of (cleaned_value, fix_name); fix_name is None when nothing changed
        """
        if value is None:
            return None, None

        if semantic_type == SemanticType.NAME:
            return self._clean_name(value)
        if semantic_type == SemanticType.CONTACT_INFO:
            return self._clean_contact(value)
        if semantic_type == SemanticType.DATE:
            return self._clean_date(value)
        if semantic_type == SemanticType.NUMERIC_AMOUNT:
            return self._clean_amount(value)
        if semantic_type == SemanticType.BOOLEAN_FLAG:
            return self._clean_flag(value)

        if isinstance(value, str):
            trimmed = value.strip()
            return trimmed, "text_trimmed" if trimmed != value else None
        return value, None

    def _clean_name(self, value: Scalar) -> tuple[Scalar, str | None]:
        if not isinstance(value, str):
            return value, None
        formatted = NAME_TOKEN_PATTERN.sub(_title_token, value.strip())
        return formatted, "names_formatted" if formatted != value else None

    def _clean_contact(self, value: Scalar) -> tuple[Scalar, str | None]:
        if isinstance(value, bool):
            return value, None
        text = value.strip() if isinstance(value, str) else str(value)

        if "@" in text:
            email = text.lower()
            if not EMAIL_PATTERN.match(email):
                return None, "emails_nullified"
            return email, "emails_lowercased" if _changed(value, email) else None

        digits = phone_digits(value)
        if not digits:
            return value, None
        if not self.settings.phone_min_digits <= len(digits) <= self.settings.phone_max_digits:
            return None, "phones_nullified"
        return digits, "phones_normalized" if _changed(value, digits) else None

    def _clean_date(self, value: Scalar) -> tuple[Scalar, str | None]:
        parsed = None if is_blank(value) else parse_date(value)
        if parsed is None:
            return None, "dates_nullified"
        formatted = parsed.strftime("%Y-%m-%d")
        return formatted, "dates_standardized" if _changed(value, formatted) else None

    def _clean_amount(self, value: Scalar) -> tuple[Scalar, str | None]:
        if isinstance(value, bool):
            return None, "numerics_nullified"
        try:
            number = float(NUMERIC_NOISE_PATTERN.sub("", str(value)))
        except ValueError:
            return None, "numerics_nullified"
        if number != number:
            return None, "numerics_nullified"
        if number < 0:
            return None, "negative_values_nullified"
        return number, "numerics_standardized" if _changed(value, number) else None

    def _clean_flag(self, value: Scalar) -> tuple[Scalar, str | None]:
        token = ("true" if value else "false") if isinstance(value, bool) else str(value).strip().lower()
        if token in TRUE_TOKENS:
            flag = True
        elif token in FALSE_TOKENS:
            flag = False
        else:
            return None, "booleans_nullified"
        return flag, "booleans_normalized" if _changed(value, flag) else None

    def _identifier_column(self, mapping: Mapping[str, str],
                           semantic_mapping: Mapping[str, SemanticType]) -> str | None:
        for column, semantic_type in semantic_mapping.items():
            if semantic_type == SemanticType.IDENTIFIER and column in mapping:
                return column
        return None

    def clean(
        self,
        rows: Sequence[Row],
        mapping: Mapping[str, str],
        semantic_mapping: Mapping[str, SemanticType | str],
    ) -> CleaningReport:
        """
        Clean, rename and re-validate rows.

        Args:
            rows: Raw row dicts
            mapping: Source column -> target field
            semantic_mapping: Source column -> semantic type

        Returns:
            CleaningReport with surviving rows keyed by target field

        Raises:
            MappingConfigurationError: If either mapping is malformed
        """
        check_mapping(mapping, semantic_mapping)
        types = coerce_semantic_mapping(semantic_mapping)

        stats = CleaningStats(initial_records=len(rows))
        dropped: set[int] = set()
        cleaned: list[Row] = []
        cleaned_indices: list[int] = []
        seen_ids: set[str] = set()
        id_column = self._identifier_column(mapping, types)

        for index, row in enumerate(rows):
            if id_column is not None:
                raw_id = row.get(id_column)
                if is_blank(raw_id):
                    dropped.add(index)
                    stats.add_fix("missing_ids_removed")
                    continue
                key = str(raw_id).strip()
                if key in seen_ids:
                    dropped.add(index)
                    stats.add_fix("duplicate_ids_removed")
                    continue
                seen_ids.add(key)

            record: Row = {}
            for source, target in mapping.items():
                semantic_type = types.get(source, SemanticType.FREE_TEXT)
                value, fix = self.clean_value(row.get(source), semantic_type)
                if fix is not None:
                    stats.add_fix(fix)
                record[target] = value
            cleaned.append(record)
            cleaned_indices.append(index)

        target_types = {mapping[source]: types[source] for source in mapping if source in types}
        report = self.validator.validate(cleaned, target_types, row_indices=cleaned_indices)

        critical_rows = set(report.rows_with_critical)
        survivors = [
            record for record, index in zip(cleaned, cleaned_indices) if index not in critical_rows
        ]
        dropped.update(critical_rows)

        stats.records_after_validation = len(cleaned)
        stats.records_after_cleaning = len(survivors)
        stats.critical_issues = len(critical_rows)
        stats.warnings = len(set(report.rows_with_warnings) - critical_rows)
        stats.dropped_records = len(dropped)
        record_fixes(stats.fixes_applied)

        logger.info(
            "Row cleaning complete",
            extra={
                "initial_rows": stats.initial_records,
                "kept_rows": stats.records_after_cleaning,
                "dropped_rows": stats.dropped_records,
                "fixes_applied": stats.fixes_applied,
            },
        )
        return CleaningReport(
            stats=stats,
            cleaned_data=survivors,
            dropped_rows=sorted(dropped),
            validation_report=report,
        )
