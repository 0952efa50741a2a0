"""
Cleaning statistics and reports.
"""

from pydantic import BaseModel, Field

from .tabular import Row
from .unified_record import UnifiedRecord
from .validation_result import ValidationReport


class CleaningStats(BaseModel):
    """
    Counters describing one cleaning pass.

    Attributes:
        initial_records: Records or rows received
        records_after_validation: Records or rows that reached validation
        records_after_cleaning: Records or rows kept
        critical_issues: Critical findings that forced a drop
        warnings: Warning-level findings on kept records or rows
        dropped_records: Records or rows removed
        fixes_applied: Named fix counters
    """

    initial_records: int = Field(0, ge=0)
    records_after_validation: int = Field(0, ge=0)
    records_after_cleaning: int = Field(0, ge=0)
    critical_issues: int = Field(0, ge=0)
    warnings: int = Field(0, ge=0)
    dropped_records: int = Field(0, ge=0)
    fixes_applied: dict[str, int] = Field(default_factory=dict)

    def add_fix(self, name: str, count: int = 1) -> None:
        if count:
            self.fixes_applied[name] = self.fixes_applied.get(name, 0) + count


class CleaningReport(BaseModel):
    """Outcome of cleaning tabular rows."""

    stats: CleaningStats
    cleaned_data: list[Row] = Field(default_factory=list)
    dropped_rows: list[int] = Field(default_factory=list)
    validation_report: ValidationReport


class TextCleaningResult(BaseModel):
    """Outcome of cleaning unified records."""

    records: list[UnifiedRecord] = Field(default_factory=list)
    stats: CleaningStats
    dropped_record_ids: list[str] = Field(default_factory=list)
