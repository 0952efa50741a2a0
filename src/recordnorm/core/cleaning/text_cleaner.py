"""
Free-text cleaning for unified records.

Applies deterministic textual fixes (header and filler stripping, OCR
corrections, abbreviation expansion, casing, spacing), fills metadata
defaults and drops duplicate records. The textual pass is repeated until
the content is stable, so cleaning already-cleaned records changes nothing.
"""

import re
from collections import Counter
from collections.abc import Sequence

from recordnorm.core.models import (
    CleaningStats,
    ContentType,
    SourceType,
    TextCleaningResult,
    UnifiedRecord,
)
from recordnorm.core.rules.rule_config import PipelineSettings
from recordnorm.observability.logger import get_logger
from recordnorm.observability.metrics import record_fixes

logger = get_logger(__name__)

# Fixpoint guard for the textual pass
MAX_PASSES = 5

HEADER_PATTERN = re.compile(
    r"(?im)^[ \t]*(?:chapter|section|part|page|module|unit)[ \t]+\d+[:.]?"
)
PAGE_MARKER_PATTERN = re.compile(
    r"(?im)^[ \t]*(?:\d+[ \t]*\|[ \t]*page\b|page[ \t]*\d+\b|\d+[ \t]*$)"
)
TIMESTAMP_PATTERN = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\b")
FILLER_PATTERN = re.compile(
    r"(?i)\b(?:um|uh|er|ah|like|you know|sort of|kind of|i mean|actually|basically|"
    r"literally|right|okay|so)\b,?"
)
MULTIPLE_SPACES_PATTERN = re.compile(r"\s{2,}")
SENTENCE_START_PATTERN = re.compile(r"(^\s*|[.?!]\s+)([a-z])")
SECTION_PATTERN = re.compile(r"(?i)\b(section|part|chapter)\s+(\d+)\b")

OCR_FIXES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)(?<!\w)ph0tosynthes1s(?!\w)"), "Photosynthesis"),
    (re.compile(r"(?<!\w)rn(?!\w)"), "m"),
    (re.compile(r"(?<![\w.])1(?![\w.])"), "I"),
    (re.compile(r"(?<!\w)l(?!\w)"), "I"),
    (re.compile(r"(?<!\w)vv(?!\w)"), "w"),
    (re.compile(r"(?i)(?<!\w)teh(?!\w)"), "the"),
    (re.compile(r"(?i)(?<!\w)w1th(?!\w)"), "with"),
    (re.compile(r"(?i)(?<!\w)dat4(?!\w)"), "data"),
)

# w/o must be expanded before w/
ABBREVIATIONS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"(?i)(?<!\w){pattern}"), expansion)
    for pattern, expansion in (
        (r"co2(?!\w)", "carbon dioxide"),
        (r"h2o(?!\w)", "water"),
        (r"w/o(?!\w)", "without"),
        (r"w/", "with "),
        (r"vs(?!\w)", "versus"),
        (r"etc(?!\w)", "et cetera"),
        (r"e\.g\.", "for example"),
        (r"i\.e\.", "that is"),
        (r"approx\.", "approximately"),
    )
)

OCR_SOURCES = frozenset({SourceType.DOCUMENT, SourceType.IMAGE})
USER_SOURCES = frozenset({SourceType.API, SourceType.CHAT})


def _capitalize(match: re.Match[str]) -> str:
    return match.group(1) + match.group(2).upper()


def clean_text(content: str, source_type: SourceType) -> tuple[str, Counter]:
    """
    Run one textual cleaning pass.

    Args:
        content: Text to clean
        source_type: Source of the text (OCR fixes apply to document/image only)

    Returns:
        Tuple of (cleaned_text, fix_counts)
    """
    fixes: Counter = Counter()

    def substitute(name: str, pattern: re.Pattern[str], replacement) -> None:
        nonlocal content
        content, count = pattern.subn(replacement, content)
        fixes[name] += count

    substitute("headers_removed", HEADER_PATTERN, " ")
    substitute("page_markers_removed", PAGE_MARKER_PATTERN, " ")
    substitute("timestamps_removed_from_text", TIMESTAMP_PATTERN, " ")
    substitute("filler_words_removed", FILLER_PATTERN, " ")

    if source_type in OCR_SOURCES:
        for pattern, replacement in OCR_FIXES:
            substitute("ocr_errors_fixed", pattern, replacement)

    for pattern, expansion in ABBREVIATIONS:
        substitute("abbreviations_expanded", pattern, expansion)

    stripped = content.strip()
    if len(stripped) > 10 and stripped.isupper():
        content = stripped[0] + stripped[1:].lower()
        fixes["shouting_fixed"] += 1

    substitute("sentences_capitalized", SENTENCE_START_PATTERN, _capitalize)
    substitute("spacing_fixed", MULTIPLE_SPACES_PATTERN, " ")
    content = content.strip()

    return content, +fixes


def detect_section(content: str) -> str | None:
    """
    Find a "Section/Part/Chapter N" reference.

    Examples:
        >>> detect_section("CHAPTER 3: Light reactions")
        'Chapter 3'
        >>> detect_section("no heading") is None
        True
    """
    match = SECTION_PATTERN.search(content)
    if match is None:
        return None
    return f"{match.group(1).capitalize()} {match.group(2)}"


def detect_event_type(content: str) -> str:
    """Classify api/chat content as error, warning, question or message."""
    lowered = content.lower()
    if "error" in lowered:
        return "error"
    if "warning" in lowered:
        return "warning"
    if "?" in content:
        return "question"
    return "message"


class TextCleaner:
    """
    Cleans, enriches and deduplicates unified records.

    Records from api/tabular/log sources keep their content untouched;
    their payloads are machine-readable and validated structurally later.
    """

    def __init__(self, settings: PipelineSettings | None = None):
        """
        Initialize the cleaner.

        Args:
            settings: Pipeline settings (default speaker and user id)
        """
        self.settings = settings or PipelineSettings()

    def clean_content(self, record: UnifiedRecord) -> tuple[str, Counter]:
        """Clean a record's content to a fixpoint, returning it with fix counts."""
        content = record.structured_content or ""
        fixes: Counter = Counter()
        if record.source_type.is_structured:
            return content, fixes

        for _ in range(MAX_PASSES):
            cleaned, pass_fixes = clean_text(content, record.source_type)
            if cleaned == content and not pass_fixes:
                break
            fixes.update(pass_fixes)
            content = cleaned
        return content, fixes

    def enrich_metadata(self, record: UnifiedRecord, original_content: str) -> dict[str, object]:
        """
        Compute metadata defaults for keys the record does not set yet.

        Args:
            record: Record being cleaned
            original_content: Content before cleaning (headers and timestamps intact)

        Returns:
            Keys to fill, never including keys that already have a value
        """
        metadata = record.metadata
        candidates: dict[str, object] = {}

        if record.source_type == SourceType.DOCUMENT:
            candidates["file_name"] = "unknown_file"
            candidates["page"] = 1
            section = detect_section(original_content)
            if section is not None:
                candidates["section"] = section
        elif record.source_type == SourceType.AUDIO:
            candidates["file_name"] = "unknown_file"
            candidates["speaker"] = self.settings.default_speaker
            timestamps = [m.group(0) for m in TIMESTAMP_PATTERN.finditer(original_content)]
            candidates["timestamp_range"] = (
                f"{timestamps[0]}-{timestamps[-1]}" if timestamps else "unknown"
            )
        elif record.source_type in USER_SOURCES:
            candidates["user_id"] = self.settings.default_user_id
            candidates["event_type"] = detect_event_type(original_content)

        return {key: value for key, value in candidates.items() if getattr(metadata, key) is None}

    def clean(self, records: Sequence[UnifiedRecord]) -> TextCleaningResult:
        """
        Clean a batch of records.

        Args:
            records: Linked records in batch order

        Returns:
            TextCleaningResult with surviving records in input order
        """
        stats = CleaningStats(initial_records=len(records))
        kept: list[UnifiedRecord] = []
        dropped_ids: list[str] = []
        seen: set[tuple[str, str, str]] = set()

        for record in records:
            original = record.structured_content or ""
            content, fixes = self.clean_content(record)
            for name, count in fixes.items():
                stats.add_fix(name, count)

            filled = self.enrich_metadata(record, original)
            stats.add_fix("metadata_enriched", len(filled))

            update: dict[str, object] = {"structured_content": content}
            if filled:
                update["metadata"] = record.metadata.model_copy(update=filled, deep=True)

            event_type = filled.get("event_type", record.metadata.event_type)
            if (
                record.source_type == SourceType.CHAT
                and event_type == "question"
                and record.content_type != ContentType.QUESTION
            ):
                update["content_type"] = ContentType.QUESTION
                stats.add_fix("content_type_refined")

            signature = (record.source_type.value, content.lower().strip(), record.group_id)
            if signature in seen:
                dropped_ids.append(record.id)
                stats.add_fix("duplicates_removed")
                continue
            seen.add(signature)
            kept.append(record.model_copy(update=update, deep=True))

        stats.dropped_records = len(dropped_ids)
        stats.records_after_validation = len(kept)
        stats.records_after_cleaning = len(kept)
        record_fixes(stats.fixes_applied)

        logger.info(
            "Text cleaning complete",
            extra={
                "initial_records": stats.initial_records,
                "kept_records": len(kept),
                "duplicates_removed": len(dropped_ids),
                "fixes_applied": stats.fixes_applied,
            },
        )
        return TextCleaningResult(records=kept, stats=stats, dropped_record_ids=dropped_ids)
