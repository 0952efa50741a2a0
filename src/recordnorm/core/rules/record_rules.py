"""
Record-level rules for unified records.

Each rule covers one concern, declares the codes it can raise with their
severities, and returns zero or more RecordValidationError findings.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

from recordnorm.core.models import RecordValidationError, Severity, SourceType, UnifiedRecord

from .rule_config import PipelineSettings

# Markdown heading marker ("# ", "## ", ...) anywhere in the text; cleaning collapses newlines
MARKDOWN_HEADING_PATTERN = re.compile(r"(?:^|\s)#{1,6}\s")
PROHIBITED_AUDIO_OPENINGS = ("this audio", "the lecture")
TOPIC_KEYS = ("topic", "Topic")


def _load_json(content: str | None) -> tuple[bool, Any]:
    """Parse JSON text, returning (ok, value)."""
    try:
        return True, json.loads(content or "")
    except (TypeError, ValueError):
        return False, None


def _defines_topic(payload: Any) -> bool:
    return isinstance(payload, dict) and any(payload.get(key) for key in TOPIC_KEYS)


class RecordRule(ABC):
    """
    Abstract base class for record rules.

    Attributes:
        source_types: Source types the rule applies to (None for every record)
        codes: Error codes the rule can raise, with their severities
    """

    source_types: frozenset[SourceType] | None = None
    codes: dict[str, Severity] = {}

    def __init__(self, settings: PipelineSettings | None = None):
        self.settings = settings or PipelineSettings()

    def applies_to(self, record: UnifiedRecord) -> bool:
        return self.source_types is None or record.source_type in self.source_types

    def finding(self, code: str, message: str, field: str | None = None,
                suggestion: str | None = None) -> RecordValidationError:
        return RecordValidationError(
            code=code,
            message=message,
            severity=self.codes[code],
            field=field,
            suggestion=suggestion,
        )

    @abstractmethod
    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        """
        Evaluate the rule against a record.

        Args:
            record: Record to check

        Returns:
            Findings (empty when the record satisfies the rule)
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(codes={list(self.codes)})"


class GeneralRule(RecordRule):
    """Every record needs content and a linked topic/group."""

    codes = {
        "EMPTY_CONTENT": Severity.CRITICAL,
        "MISSING_TOPIC": Severity.HIGH,
        "MISSING_GROUP_ID": Severity.HIGH,
    }

    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        errors = []
        if not record.structured_content.strip():
            errors.append(self.finding(
                "EMPTY_CONTENT",
                "Structured content must not be empty",
                field="structured_content",
                suggestion="Ensure the source file is not empty or corrupted",
            ))
        if not record.topic.strip():
            errors.append(self.finding(
                "MISSING_TOPIC",
                "Topic must exist",
                field="topic",
                suggestion="Run topic linking before validation or check the document anchor",
            ))
        if not record.group_id.strip():
            errors.append(self.finding("MISSING_GROUP_ID", "Group ID must exist", field="group_id"))
        return errors

    @property
    def rule_type(self) -> str:
        return "general"


class AudioTranscriptRule(RecordRule):
    """Audio records must be raw transcripts, not summaries or notes."""

    source_types = frozenset({SourceType.AUDIO})
    codes = {
        "INVALID_AUDIO_START": Severity.HIGH,
        "POTENTIAL_SUMMARY": Severity.HIGH,
        "MARKDOWN_DETECTED": Severity.MEDIUM,
    }

    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        errors = []
        content = record.structured_content.lower()

        if content.lstrip().startswith(PROHIBITED_AUDIO_OPENINGS):
            errors.append(self.finding(
                "INVALID_AUDIO_START",
                'Audio transcript starts with prohibited phrase (e.g. "This audio", "The lecture")',
                field="structured_content",
                suggestion="Check if this is a summary instead of a raw transcript",
            ))
        if "summary" in content and len(content) < self.settings.audio_summary_max_length:
            errors.append(self.finding(
                "POTENTIAL_SUMMARY",
                "Content appears to be a summary",
                field="structured_content",
                suggestion="Use real speech-to-text",
            ))
        if MARKDOWN_HEADING_PATTERN.search(record.structured_content):
            errors.append(self.finding(
                "MARKDOWN_DETECTED",
                "Audio transcript contains markdown headers, suggesting it might be a summary note",
                field="structured_content",
            ))
        return errors

    @property
    def rule_type(self) -> str:
        return "audio"


class DocumentTextRule(RecordRule):
    """Document pages need enough text and acceptable OCR confidence."""

    source_types = frozenset({SourceType.DOCUMENT})
    codes = {
        "DOCUMENT_TEXT_TOO_SHORT": Severity.HIGH,
        "LOW_OCR_CONFIDENCE": Severity.MEDIUM,
    }

    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        errors = []
        minimum = self.settings.document_min_length
        if len(record.structured_content) < minimum:
            errors.append(self.finding(
                "DOCUMENT_TEXT_TOO_SHORT",
                f"Page text length is below minimum threshold ({minimum} chars)",
                field="structured_content",
                suggestion="Check if page is scanned or blank",
            ))

        confidence = record.metadata.confidence
        if confidence is not None and not isinstance(confidence, bool):
            try:
                score = float(confidence)
            except ValueError:
                score = None
            if score is not None and score < self.settings.ocr_confidence_threshold:
                errors.append(self.finding(
                    "LOW_OCR_CONFIDENCE",
                    f"OCR confidence ({score}) is below threshold",
                    field="metadata.confidence",
                    suggestion="Manual review recommended",
                ))
        return errors

    @property
    def rule_type(self) -> str:
        return "document"


class ApiPayloadRule(RecordRule):
    """API payloads must be JSON and must not carry their own topic."""

    source_types = frozenset({SourceType.API})
    codes = {
        "INVALID_JSON": Severity.CRITICAL,
        "INDEPENDENT_TOPIC_DEFINED": Severity.HIGH,
    }

    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        ok, payload = _load_json(record.raw_content or record.structured_content)
        if not ok:
            return [self.finding("INVALID_JSON", "Source content is not valid JSON", field="raw_content")]
        if _defines_topic(payload):
            return [self.finding(
                "INDEPENDENT_TOPIC_DEFINED",
                "API record defines its own topic field, which is prohibited",
                field="raw_content",
                suggestion='Remove "topic" field from source JSON',
            )]
        return []

    @property
    def rule_type(self) -> str:
        return "api"


class TabularRowRule(RecordRule):
    """Tabular rows are carried as JSON objects; a topic column is only advisory."""

    source_types = frozenset({SourceType.TABULAR})
    codes = {
        "INVALID_TABULAR_JSON": Severity.CRITICAL,
        "TABULAR_TOPIC_COLUMN": Severity.MEDIUM,
    }

    def evaluate(self, record: UnifiedRecord) -> list[RecordValidationError]:
        ok, payload = _load_json(record.raw_content or record.structured_content)
        if not ok:
            return [self.finding(
                "INVALID_TABULAR_JSON",
                "Tabular raw content is not valid JSON structure",
                field="raw_content",
            )]
        if _defines_topic(payload):
            return [self.finding(
                "TABULAR_TOPIC_COLUMN",
                'Row contains a "topic" column which might conflict with system topic',
                field="raw_content",
                suggestion="Ensure this column is not intended to override the group topic",
            )]
        return []

    @property
    def rule_type(self) -> str:
        return "tabular"
