"""
Batch processing pipeline orchestration.

Coordinates the flow for unified records: link -> clean -> validate,
and for tabular rows: analyze -> infer -> map -> clean.
"""

from collections.abc import Awaitable, Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from recordnorm.core.cleaning import FieldCleaner, TextCleaner
from recordnorm.core.linking import TopicLinker, TopicRegistry
from recordnorm.core.models import (
    BatchIngestionResult,
    BatchSummary,
    CleaningStats,
    ColumnAnalysis,
    DomainSchema,
    ErrorReport,
    ErrorReportEntry,
    FailedRecord,
    ProcessedRecordResult,
    RecordStatus,
    RecordValidationError,
    Row,
    Severity,
    TabularResult,
    UnifiedCleaningResult,
    UnifiedRecord,
)
from recordnorm.core.rules import PipelineSettings, RecordRuleEngine, load_settings
from recordnorm.core.schema import SemanticTypeInferrer, analyze_rows, generate_mapping
from recordnorm.observability.logger import get_logger, log_operation
from recordnorm.observability.metrics import (
    batch_size_records,
    files_aborted_total,
    increment_counter,
    observe_histogram,
    records_processed_total,
    stage_duration_seconds,
    track_duration,
)

logger = get_logger(__name__)

FILE_ABORTED = "FILE_ABORTED"
PROCESSING_EXCEPTION = "PROCESSING_EXCEPTION"


class BatchOrchestrator:
    """
    Orchestrates the record normalization pipeline.

    Flow for unified records:
    1. Link records to a canonical topic
    2. Clean, enrich and deduplicate records
    3. Validate records file by file (a CRITICAL finding aborts the rest of its file)

    Flow for tabular rows:
    1. Analyze columns
    2. Infer semantic types
    3. Map columns onto a target schema
    4. Clean and re-validate rows
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        config_path: str | Path | None = None,
        registry: TopicRegistry | None = None,
        reference_time: datetime | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            settings: Pipeline settings (takes precedence over config_path)
            config_path: YAML settings file; $RECORDNORM_CONFIG or defaults when omitted
            registry: Topic registry shared across batches of one session
            reference_time: "Now" for future-date checks on tabular data
        """
        self.settings = settings or load_settings(config_path)

        self.topic_linker = TopicLinker(registry)
        self.text_cleaner = TextCleaner(self.settings)
        self.rule_engine = RecordRuleEngine(self.settings)
        self.inferrer = SemanticTypeInferrer(self.settings)
        self.field_cleaner = FieldCleaner(self.settings, reference_time)

    def process_record(self, record: UnifiedRecord) -> ProcessedRecordResult:
        """
        Validate one record, converting unexpected failures into a HIGH finding.

        Args:
            record: Record to validate

        Returns:
            ProcessedRecordResult (FAILED on HIGH/CRITICAL findings)
        """
        try:
            validation = self.rule_engine.validate_record(record)
        except Exception as e:
            logger.error(
                "Unexpected error while validating record",
                extra={"record_id": record.id, "file_name": record.file_name, "error": str(e)},
                exc_info=True,
            )
            return ProcessedRecordResult(
                record=record,
                status=RecordStatus.FAILED,
                errors=[
                    RecordValidationError(
                        code=PROCESSING_EXCEPTION,
                        message=str(e) or "Unknown error processing record",
                        severity=Severity.HIGH,
                    )
                ],
            )

        status = RecordStatus.SUCCESS if validation.is_acceptable else RecordStatus.FAILED
        return ProcessedRecordResult(record=record, status=status, errors=validation.errors)

    def process_batch(self, records: Sequence[UnifiedRecord]) -> BatchIngestionResult:
        """
        Validate a batch with per-file abort semantics.

        Records are visited in input order. Once a record of a file raises a
        CRITICAL finding, every later record of that file fails with
        FILE_ABORTED without being validated.

        Args:
            records: Records to validate

        Returns:
            BatchIngestionResult
        """
        result = BatchIngestionResult(summary=BatchSummary(total=len(records)))
        aborted: set[str] = set()

        for record in records:
            file_name = record.file_name

            if file_name in aborted:
                result.failed_records.append(
                    FailedRecord(
                        record_id=record.id,
                        source_file=file_name,
                        errors=[
                            RecordValidationError(
                                code=FILE_ABORTED,
                                message="File processing aborted due to an earlier CRITICAL error",
                                severity=Severity.CRITICAL,
                            )
                        ],
                    )
                )
                result.summary.failed += 1
                increment_counter(records_processed_total, source_type=record.source_type.value, status="failed")
                continue

            processed = self.process_record(record)

            if processed.has_critical:
                aborted.add(file_name)
                result.aborted_files.append(file_name)
                increment_counter(files_aborted_total)
                logger.warning(
                    "Aborting file after CRITICAL finding",
                    extra={"file_name": file_name, "record_id": record.id,
                           "codes": [e.code for e in processed.errors]},
                )

            if processed.status == RecordStatus.SUCCESS and not processed.has_critical:
                result.successful_records.append(processed.record)
                result.summary.success += 1
                if processed.errors:
                    result.summary.warnings += 1
                    result.flagged_records.append(
                        FailedRecord(record_id=record.id, source_file=file_name, errors=processed.errors)
                    )
                increment_counter(records_processed_total, source_type=record.source_type.value, status="success")
            else:
                result.failed_records.append(
                    FailedRecord(record_id=record.id, source_file=file_name, errors=processed.errors)
                )
                result.summary.failed += 1
                increment_counter(records_processed_total, source_type=record.source_type.value, status="failed")

        logger.info(
            "Batch validation complete",
            extra={**result.summary.model_dump(), "aborted_files": result.aborted_files},
        )
        return result

    def run(self, records: Sequence[UnifiedRecord]) -> UnifiedCleaningResult:
        """
        Run link -> clean -> validate over a batch.

        Args:
            records: Raw unified records in batch order

        Returns:
            UnifiedCleaningResult with surviving records and merged statistics
        """
        observe_histogram(batch_size_records, len(records), kind="records")

        with log_operation("link_topics", logger, records=len(records)), \
                track_duration(stage_duration_seconds, stage="link"):
            linked = self.topic_linker.link(records)

        with log_operation("clean_text", logger, records=len(linked)), \
                track_duration(stage_duration_seconds, stage="clean_text"):
            cleaned = self.text_cleaner.clean(linked)

        with log_operation("validate_records", logger, records=len(cleaned.records)), \
                track_duration(stage_duration_seconds, stage="validate_records"):
            batch_result = self.process_batch(cleaned.records)

        summary = batch_result.summary
        fixes = dict(cleaned.stats.fixes_applied)
        fixes["validation_passed"] = summary.success

        stats = CleaningStats(
            initial_records=len(records),
            records_after_validation=summary.total,
            records_after_cleaning=summary.success,
            critical_issues=summary.failed,
            warnings=summary.warnings,
            dropped_records=cleaned.stats.dropped_records + summary.failed,
            fixes_applied=fixes,
        )
        return UnifiedCleaningResult(
            records=batch_result.successful_records,
            stats=stats,
            batch_result=batch_result,
        )

    async def run_async(self, sources: Iterable[Awaitable[Sequence[UnifiedRecord]]]) -> UnifiedCleaningResult:
        """
        Await ingestion producers in order, then run the pipeline.

        Args:
            sources: Awaitables that each resolve to a sequence of records

        Returns:
            UnifiedCleaningResult for the concatenated records
        """
        records: list[UnifiedRecord] = []
        for source in sources:
            records.extend(await source)
        return self.run(records)

    def process_table(
        self,
        rows: Sequence[Row],
        schema: DomainSchema | None = None,
        columns: Sequence[ColumnAnalysis] | None = None,
    ) -> TabularResult:
        """
        Run analysis -> inference -> mapping -> cleaning over tabular rows.

        Args:
            rows: Raw row dicts
            schema: Optional target schema for column mapping
            columns: Precomputed column analysis (computed from rows when omitted)

        Returns:
            TabularResult
        """
        observe_histogram(batch_size_records, len(rows), kind="rows")

        analysis = list(columns) if columns is not None else analyze_rows(rows)
        names = [column.name for column in analysis]

        with log_operation("infer_semantics", logger, columns=len(names)):
            semantic_mapping = self.inferrer.infer_mapping(names, rows)

        mapping = generate_mapping(names, schema)

        with log_operation("clean_rows", logger, rows=len(rows)), \
                track_duration(stage_duration_seconds, stage="clean_rows"):
            cleaning = self.field_cleaner.clean(rows, mapping.mapped_columns, semantic_mapping)

        return TabularResult(
            columns=analysis,
            semantic_mapping=semantic_mapping,
            mapping=mapping,
            cleaning=cleaning,
        )


def generate_error_report(
    result: BatchIngestionResult,
    batch_id: str,
    generated_at: datetime | None = None,
    include_warnings: bool = False,
) -> ErrorReport:
    """
    Flatten a batch result into one entry per finding.

    Args:
        result: Batch result to report on
        batch_id: Identifier of the batch
        generated_at: Report timestamp (defaults to now, UTC)
        include_warnings: Also report MEDIUM/LOW findings of successful records

    Returns:
        ErrorReport with failed-record entries first, in input order
    """
    groups = list(result.failed_records)
    if include_warnings:
        groups.extend(result.flagged_records)

    entries = [
        ErrorReportEntry(
            file=failed.source_file,
            record_id=failed.record_id,
            code=error.code,
            severity=error.severity,
            message=error.message,
            suggestion=error.suggestion,
        )
        for failed in groups
        for error in failed.errors
    ]
    return ErrorReport(
        batch_id=batch_id,
        timestamp=generated_at or datetime.now(timezone.utc),
        errors=entries,
    )
