"""
Pytest configuration and fixtures for recordnorm tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from datetime import datetime

import pytest

from recordnorm.core.models import ContentType, RecordMetadata, SourceType, UnifiedRecord
from recordnorm.core.rules import PipelineSettings, PipelineSettingsBuilder


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that exercise several components together"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that test the full pipeline"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SETTINGS FIXTURES
# =======================

@pytest.fixture
def settings() -> PipelineSettings:
    """Default pipeline settings"""
    return PipelineSettings()


@pytest.fixture
def strict_settings() -> PipelineSettings:
    """Settings with tighter thresholds, built programmatically"""
    return (
        PipelineSettingsBuilder()
        .with_phone_digits(10, 12)
        .with_outlier_rule(min_values=5)
        .with_value("document_min_length", 80)
        .build()
    )


@pytest.fixture
def reference_time() -> datetime:
    """Fixed "now" so future-date checks are deterministic"""
    return datetime(2024, 6, 1, 12, 0, 0)


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture
def isolated_config_env(monkeypatch):
    """Keep a developer's $RECORDNORM_CONFIG out of tests that resolve settings"""
    monkeypatch.delenv("RECORDNORM_CONFIG", raising=False)
    return monkeypatch


# =======================
# RECORD FIXTURES
# =======================

def make_record(
    source_type: SourceType | str,
    content: str,
    file_name: str | None = None,
    raw_content: str | None = None,
    content_type: ContentType = ContentType.NOTE,
    **metadata,
) -> UnifiedRecord:
    """Build a UnifiedRecord for tests"""
    return UnifiedRecord(
        source_type=source_type,
        content_type=content_type,
        structured_content=content,
        raw_content=raw_content,
        metadata=RecordMetadata(file_name=file_name, **metadata),
    )


@pytest.fixture
def record_factory():
    """Factory fixture for UnifiedRecord instances"""
    return make_record


@pytest.fixture
def photosynthesis_document() -> UnifiedRecord:
    """Document anchor about photosynthesis"""
    return make_record(
        SourceType.DOCUMENT,
        "CHAPTER 3: Photosynthesis is the process by which green plants convert light energy "
        "into chemical energy stored in glucose.",
        file_name="biology.pdf",
        page=4,
    )


@pytest.fixture
def mixed_records(photosynthesis_document) -> list[UnifiedRecord]:
    """A mixed batch anchored by a document"""
    return [
        make_record(
            SourceType.AUDIO,
            "00:01 um so the chlorophyll absorbs light in the leaves 04:10",
            file_name="lecture.mp3",
        ),
        photosynthesis_document,
        make_record(
            SourceType.API,
            '{"event": "sync", "status": "ok"}',
            file_name="events.json",
            raw_content='{"event": "sync", "status": "ok"}',
        ),
        make_record(SourceType.CHAT, "why do leaves look green?", file_name="chat.txt"),
    ]


# =======================
# TABULAR FIXTURES
# =======================

@pytest.fixture
def customer_rows() -> list[dict]:
    """Dirty customer rows"""
    return [
        {"customer_id": "C001", "full_name": "  alice SMITH ", "email": "  Alice@Example.COM ",
         "amount": "$120.50", "signup_date": "2023-01-15", "active": "Yes"},
        {"customer_id": "C002", "full_name": "bob jones", "email": "bob@example",
         "amount": "80", "signup_date": "15/02/2023", "active": "0"},
        {"customer_id": "C002", "full_name": "Bob Jones", "email": "bob@example.com",
         "amount": "80", "signup_date": "2023-02-15", "active": "no"},
        {"customer_id": "", "full_name": "ghost", "email": "ghost@example.com",
         "amount": "1", "signup_date": "2023-03-01", "active": "yes"},
        {"customer_id": "C004", "full_name": "carol white", "email": "(555) 123-4567",
         "amount": "-5", "signup_date": "not a date", "active": "maybe"},
    ]
