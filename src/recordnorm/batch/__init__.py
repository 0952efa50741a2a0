"""
Batch orchestration for unified records and tabular rows.
"""

from .pipeline import FILE_ABORTED, PROCESSING_EXCEPTION, BatchOrchestrator, generate_error_report

__all__ = [
    "BatchOrchestrator",
    "generate_error_report",
    "FILE_ABORTED",
    "PROCESSING_EXCEPTION",
]
