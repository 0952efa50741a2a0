"""
Core data models for the record normalization pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .batch_result import (
    BatchIngestionResult,
    BatchSummary,
    ErrorReport,
    ErrorReportEntry,
    FailedRecord,
    ProcessedRecordResult,
    RecordStatus,
    TabularResult,
    UnifiedCleaningResult,
)
from .cleaning import CleaningReport, CleaningStats, TextCleaningResult
from .severity import IssueSeverity, Severity, compare_severity
from .tabular import (
    BasicType,
    CanonicalField,
    ColumnAnalysis,
    DomainSchema,
    MappingResult,
    Row,
    SemanticMapping,
    SemanticType,
)
from .unified_record import (
    STRUCTURED_SOURCE_TYPES,
    ContentType,
    RecordMetadata,
    Scalar,
    SourceType,
    UnifiedRecord,
)
from .validation_result import (
    FieldValidationResult,
    IssueCategory,
    RecordValidationError,
    RecordValidationResult,
    ValidationIssue,
    ValidationReport,
)

__all__ = [
    "Scalar",
    "Row",
    "SourceType",
    "ContentType",
    "STRUCTURED_SOURCE_TYPES",
    "RecordMetadata",
    "UnifiedRecord",
    "BasicType",
    "SemanticType",
    "SemanticMapping",
    "ColumnAnalysis",
    "CanonicalField",
    "DomainSchema",
    "MappingResult",
    "Severity",
    "IssueSeverity",
    "compare_severity",
    "IssueCategory",
    "ValidationIssue",
    "FieldValidationResult",
    "ValidationReport",
    "RecordValidationError",
    "RecordValidationResult",
    "CleaningStats",
    "CleaningReport",
    "TextCleaningResult",
    "RecordStatus",
    "ProcessedRecordResult",
    "FailedRecord",
    "BatchSummary",
    "BatchIngestionResult",
    "ErrorReportEntry",
    "ErrorReport",
    "UnifiedCleaningResult",
    "TabularResult",
]
