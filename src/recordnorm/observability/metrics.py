"""
Prometheus metrics collection for recordnorm

This module provides metrics instrumentation for monitoring
pipeline throughput and data quality.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Registry for all pipeline metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

# Records processed counter
records_processed_total = Counter(
    name="recordnorm_records_processed_total",
    documentation="Total number of records processed by the batch orchestrator",
    labelnames=["source_type", "status"],  # status: success, failed
    registry=REGISTRY,
)

# Stage duration histogram
stage_duration_seconds = Histogram(
    name="recordnorm_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["stage"],  # stage: link, clean_text, clean_rows, validate_fields, validate_records
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# Batch size
batch_size_records = Histogram(
    name="recordnorm_batch_size_records",
    documentation="Number of records or rows in each batch",
    labelnames=["kind"],  # kind: records, rows
    buckets=[1, 10, 50, 100, 500, 1000, 5000, 10000],
    registry=REGISTRY,
)

# Files aborted by a CRITICAL error
files_aborted_total = Counter(
    name="recordnorm_files_aborted_total",
    documentation="Total number of source files aborted after a CRITICAL error",
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

# Record-level rule violations
record_rule_violations_total = Counter(
    name="recordnorm_record_rule_violations_total",
    documentation="Total number of record-level rule violations",
    labelnames=["code", "severity"],
    registry=REGISTRY,
)

# Field-level issues
field_issues_total = Counter(
    name="recordnorm_field_issues_total",
    documentation="Total number of field-level validation issues",
    labelnames=["check", "severity"],
    registry=REGISTRY,
)

# Cleaning fixes
cleaning_fixes_total = Counter(
    name="recordnorm_cleaning_fixes_total",
    documentation="Total number of cleaning fixes applied",
    labelnames=["fix"],
    registry=REGISTRY,
)

# Dataset quality score of the last validated table
dataset_quality_score = Gauge(
    name="recordnorm_dataset_quality_score",
    documentation="Quality score (0-100) of the most recently validated dataset",
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(stage_duration_seconds, stage="link"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value"""
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """Observe a value in a histogram metric"""
    histogram.labels(**labels).observe(value)


# =======================
# PIPELINE-SPECIFIC HELPERS
# =======================

def record_fixes(fixes_applied: dict[str, int]) -> None:
    """
    Record cleaning fix counts.

    Args:
        fixes_applied: Mapping of fix category to count
    """
    for fix, count in fixes_applied.items():
        if count > 0:
            increment_counter(cleaning_fixes_total, count, fix=fix)


def record_rule_violation(code: str, severity: str) -> None:
    """Record a single record-level rule violation."""
    increment_counter(record_rule_violations_total, 1, code=code, severity=severity)
