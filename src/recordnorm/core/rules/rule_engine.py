"""
Rule engine for record-level validation of unified records.

The rule engine instantiates record rules, applies them to records,
and produces validation results.
"""

from collections.abc import Iterable
from typing import Any

from recordnorm.core.models import RecordValidationResult, UnifiedRecord
from recordnorm.observability.logger import get_logger
from recordnorm.observability.metrics import record_rule_violation

from .record_rules import (
    ApiPayloadRule,
    AudioTranscriptRule,
    DocumentTextRule,
    GeneralRule,
    RecordRule,
    TabularRowRule,
)
from .rule_config import PipelineSettings

logger = get_logger(__name__)


class RecordRuleEngine:
    """
    Orchestrates record rules on unified records.

    General rules run first, then every source-specific rule whose source
    types include the record's. Findings keep rule order.
    """

    RULE_REGISTRY: dict[str, type[RecordRule]] = {
        "general": GeneralRule,
        "audio": AudioTranscriptRule,
        "document": DocumentTextRule,
        "api": ApiPayloadRule,
        "tabular": TabularRowRule,
    }

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        enabled_rules: Iterable[str] | None = None,
    ):
        """
        Initialize the rule engine.

        Args:
            settings: Pipeline thresholds
            enabled_rules: Rule type names to enable (all registered rules by default)

        Raises:
            ValueError: If an unknown rule type is requested
        """
        self.settings = settings or PipelineSettings()
        self.rules: list[RecordRule] = []
        self._build_rules(list(enabled_rules) if enabled_rules is not None else list(self.RULE_REGISTRY))

    def _build_rules(self, rule_types: list[str]) -> None:
        """Build rule instances in registry order."""
        unknown = [name for name in rule_types if name not in self.RULE_REGISTRY]
        if unknown:
            raise ValueError(f"Unknown rule type: {', '.join(unknown)}")

        for name, rule_class in self.RULE_REGISTRY.items():
            if name in rule_types:
                self.rules.append(rule_class(self.settings))

    def validate_record(self, record: UnifiedRecord) -> RecordValidationResult:
        """
        Validate a unified record against all applicable rules.

        Args:
            record: The UnifiedRecord to validate

        Returns:
            RecordValidationResult with every finding
        """
        errors = []
        for rule in self.rules:
            if rule.applies_to(record):
                errors.extend(rule.evaluate(record))

        for error in errors:
            record_rule_violation(error.code, error.severity.value)

        if errors:
            logger.debug(
                "Record rule findings",
                extra={"record_id": record.id, "codes": [error.code for error in errors]},
            )

        return RecordValidationResult(record_id=record.id, errors=errors)

    def validate_batch(self, records: list[UnifiedRecord]) -> list[RecordValidationResult]:
        """
        Validate a batch of records.

        Args:
            records: List of UnifiedRecord objects

        Returns:
            List of RecordValidationResult objects, one per record
        """
        return [self.validate_record(record) for record in records]

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule and code counts
        """
        return {
            "total_rules": len(self.rules),
            "total_codes": sum(len(rule.codes) for rule in self.rules),
            "rules_by_type": self._count_by_type(),
            "codes_by_severity": self._count_by_severity(),
        }

    def _count_by_type(self) -> dict[str, int]:
        """Count codes by rule type."""
        counts: dict[str, int] = {}
        for rule in self.rules:
            counts[rule.rule_type] = counts.get(rule.rule_type, 0) + len(rule.codes)
        return counts

    def _count_by_severity(self) -> dict[str, int]:
        """Count codes by severity."""
        counts: dict[str, int] = {}
        for rule in self.rules:
            for severity in rule.codes.values():
                counts[severity.value] = counts.get(severity.value, 0) + 1
        return counts
