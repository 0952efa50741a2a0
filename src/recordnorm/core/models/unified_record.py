"""
UnifiedRecord model, the canonical atomic unit produced by ingestion adapters.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

Scalar = str | int | float | bool | None


class SourceType(str, Enum):
    """Where a record came from. DOCUMENT is the topic anchor type."""

    DOCUMENT = "document"
    AUDIO = "audio"
    IMAGE = "image"
    API = "api"
    CHAT = "chat"
    TABULAR = "tabular"
    LOG = "log"
    TEXT = "text"

    @property
    def is_structured(self) -> bool:
        """Machine-readable payloads that textual cleaning must not touch."""
        return self in STRUCTURED_SOURCE_TYPES


STRUCTURED_SOURCE_TYPES = frozenset({SourceType.API, SourceType.TABULAR, SourceType.LOG})


class ContentType(str, Enum):
    STUDY_TEXT = "study_text"
    EXPLANATION = "explanation"
    QUESTION = "question"
    LOG = "log"
    NOTE = "note"


class RecordMetadata(BaseModel):
    """
    Typed metadata core plus an explicit extension map.

    Keys the core does not know about are moved into ``extra`` on
    construction, so adapters can pass through arbitrary provenance.

    Attributes:
        file_name: Originating file; the orchestrator groups records by it
        page: Page number for document records
        timestamp: Ingestion or utterance timestamp
        timestamp_range: Span of an audio transcript ("00:01-04:10")
        speaker: Speaker label for audio records
        user_id: Author of api/chat records
        confidence: OCR/transcription confidence (number or label)
        section: Section heading inferred from document content
        event_type: error, warning, question or message for api/chat records
        extra: Extension keys
    """

    file_name: str | None = None
    page: int | str | None = None
    timestamp: str | None = None
    timestamp_range: str | None = None
    speaker: str | None = None
    user_id: str | None = None
    confidence: float | str | None = None
    section: str | None = None
    event_type: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_extension_keys(cls, data: Any) -> Any:
        """Route unknown keys into the extension map."""
        if not isinstance(data, dict):
            return data

        known = set(cls.model_fields)
        core: dict[str, Any] = {}
        extra = dict(data.get("extra") or {})
        for key, value in data.items():
            if key == "extra":
                continue
            if key in known:
                core[key] = value
            else:
                extra[key] = value
        core["extra"] = extra
        return core

    def get(self, key: str, default: Any = None) -> Any:
        """Look a key up in the typed core first, then in ``extra``."""
        if key in type(self).model_fields and key != "extra":
            value = getattr(self, key)
            return default if value is None else value
        return self.extra.get(key, default)


class UnifiedRecord(BaseModel):
    """
    A single ingested unit of content, whatever its original format.

    Identity fields (id, source_type, raw_content, created_at) are frozen;
    topic and group_id are filled by the topic linker, structured_content
    and metadata by the cleaner.

    Attributes:
        id: Opaque unique identifier
        group_id: Canonical grouping key shared by linked records
        topic: Canonical topic shared by linked records
        source_type: Ingestion source
        content_type: Secondary content classification
        structured_content: Primary textual payload
        raw_content: Original payload kept for structural re-validation
        metadata: Provenance metadata
        created_at: Creation timestamp (UTC)
    """

    id: str = Field(default_factory=lambda: str(uuid4()), min_length=1, frozen=True)
    group_id: str = ""
    topic: str = ""
    source_type: SourceType = Field(..., frozen=True)
    content_type: ContentType = ContentType.NOTE
    structured_content: str = ""
    raw_content: str | None = Field(None, frozen=True)
    metadata: RecordMetadata = Field(default_factory=RecordMetadata)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), frozen=True)

    @property
    def file_name(self) -> str:
        return self.metadata.file_name or "unknown_file"

    class Config:
        json_schema_extra = {
            "example": {
                "id": "7d0c8f3e-8a51-4a7e-9b1f-3c2d1e0f9a6b",
                "group_id": "topic-photosynthesis-6c1f",
                "topic": "Photosynthesis",
                "source_type": "document",
                "content_type": "study_text",
                "structured_content": "Plants convert light energy into chemical energy.",
                "raw_content": "CHAPTER 3 Plants convert light energy into chemical energy.",
                "metadata": {"file_name": "biology.pdf", "page": 4, "confidence": 0.93},
            }
        }
