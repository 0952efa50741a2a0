"""
Batch ingestion outcome models.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .cleaning import CleaningReport, CleaningStats
from .severity import Severity
from .tabular import ColumnAnalysis, MappingResult, SemanticMapping
from .unified_record import UnifiedRecord
from .validation_result import RecordValidationError


class RecordStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class ProcessedRecordResult(BaseModel):
    """Outcome of validating a single record inside a batch."""

    record: UnifiedRecord
    status: RecordStatus
    errors: list[RecordValidationError] = Field(default_factory=list)

    @property
    def has_critical(self) -> bool:
        return any(error.severity == Severity.CRITICAL for error in self.errors)


class FailedRecord(BaseModel):
    """
    A record attributed to its source file together with its findings.

    Used both for failed records and for successful records that carry
    MEDIUM/LOW findings.
    """

    record_id: str
    source_file: str
    errors: list[RecordValidationError] = Field(default_factory=list)


class BatchSummary(BaseModel):
    total: int = Field(0, ge=0)
    success: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    warnings: int = Field(0, ge=0)


class BatchIngestionResult(BaseModel):
    """
    Outcome of one orchestrator pass.

    Attributes:
        successful_records: Records that passed, in input order
        failed_records: Failed records with file attribution, in input order
        flagged_records: Successful records carrying MEDIUM/LOW findings
        aborted_files: Files aborted by a CRITICAL finding, in abort order
        summary: Counts
    """

    successful_records: list[UnifiedRecord] = Field(default_factory=list)
    failed_records: list[FailedRecord] = Field(default_factory=list)
    flagged_records: list[FailedRecord] = Field(default_factory=list)
    aborted_files: list[str] = Field(default_factory=list)
    summary: BatchSummary = Field(default_factory=BatchSummary)


class ErrorReportEntry(BaseModel):
    file: str
    record_id: str | None = None
    code: str
    severity: Severity
    message: str
    suggestion: str | None = None


class ErrorReport(BaseModel):
    """Flattened per-finding view of a BatchIngestionResult."""

    batch_id: str = Field(..., min_length=1)
    timestamp: datetime
    errors: list[ErrorReportEntry] = Field(default_factory=list)

    def count_by_severity(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for entry in self.errors:
            counts[entry.severity.value] = counts.get(entry.severity.value, 0) + 1
        return counts

    class Config:
        json_schema_extra = {
            "example": {
                "batch_id": "batch-2024-06-01",
                "timestamp": "2024-06-01T12:00:00Z",
                "errors": [
                    {
                        "file": "f.json",
                        "record_id": "r2",
                        "code": "FILE_ABORTED",
                        "severity": "CRITICAL",
                        "message": "File processing aborted due to an earlier CRITICAL error",
                    }
                ],
            }
        }


class UnifiedCleaningResult(BaseModel):
    """Final outcome of link -> clean -> validate."""

    records: list[UnifiedRecord] = Field(default_factory=list)
    stats: CleaningStats
    batch_result: BatchIngestionResult


class TabularResult(BaseModel):
    """Final outcome of analysis -> inference -> mapping -> structured cleaning."""

    columns: list[ColumnAnalysis] = Field(default_factory=list)
    semantic_mapping: SemanticMapping = Field(default_factory=dict)
    mapping: MappingResult
    cleaning: CleaningReport
