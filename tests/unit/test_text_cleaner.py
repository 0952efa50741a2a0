"""
Unit tests for free-text cleaning of unified records.
"""

import pytest

from recordnorm.core.cleaning import TextCleaner, clean_text
from recordnorm.core.cleaning.text_cleaner import detect_event_type, detect_section
from recordnorm.core.models import ContentType, SourceType
from recordnorm.core.rules import PipelineSettingsBuilder


@pytest.fixture
def cleaner(settings):
    return TextCleaner(settings)


class TestCleanText:
    """Tests for a single textual cleaning pass"""

    def test_header_removed(self):
        text, fixes = clean_text("CHAPTER 3: Plants need light.", SourceType.DOCUMENT)

        assert text == "Plants need light."
        assert fixes["headers_removed"] == 1

    def test_page_markers_removed(self):
        text, fixes = clean_text("Leaves are green\n12\n3 | Page\nroots", SourceType.DOCUMENT)

        assert text == "Leaves are green roots"
        assert fixes["page_markers_removed"] == 2

    def test_transcript_noise_removed(self):
        """Test timestamps and fillers are stripped and the sentence recased"""
        text, fixes = clean_text(
            "00:01 um so the chlorophyll absorbs light in the leaves 04:10", SourceType.AUDIO
        )

        assert text == "The chlorophyll absorbs light in the leaves"
        assert fixes["timestamps_removed_from_text"] == 2
        assert fixes["filler_words_removed"] == 2
        assert fixes["sentences_capitalized"] == 1

    def test_ocr_fixes_on_documents(self):
        text, fixes = clean_text("Ph0tosynthes1s uses teh sun w1th dat4", SourceType.DOCUMENT)

        assert text == "Photosynthesis uses the sun with data"
        assert fixes["ocr_errors_fixed"] == 4

    def test_ocr_fixes_skip_other_sources(self):
        """Test OCR corrections apply to document and image sources only"""
        text, fixes = clean_text("Use teh rn key", SourceType.CHAT)

        assert text == "Use teh rn key"
        assert "ocr_errors_fixed" not in fixes

    def test_ocr_one_keeps_decimals(self):
        """Test a standalone 1 becomes I but decimals are untouched"""
        text, _ = clean_text("Then 1 measured 1.5 grams", SourceType.IMAGE)
        assert text == "Then I measured 1.5 grams"

    def test_abbreviations_expanded(self):
        text, fixes = clean_text("Plants absorb CO2 vs H2O e.g. in leaves", SourceType.TEXT)

        assert text == "Plants absorb carbon dioxide versus water for example in leaves"
        assert fixes["abbreviations_expanded"] == 4

    def test_without_expanded_before_with(self):
        """Test w/o is not read as w/ followed by o"""
        text, _ = clean_text("Tea w/o sugar w/milk", SourceType.TEXT)
        assert text == "Tea without sugar with milk"

    def test_shouting_fixed(self):
        text, fixes = clean_text("THIS IS A VERY LOUD NOTE", SourceType.TEXT)

        assert text == "This is a very loud note"
        assert fixes["shouting_fixed"] == 1

    def test_short_uppercase_kept(self):
        """Test short all-caps text such as acronyms is kept"""
        text, fixes = clean_text("DNA RNA", SourceType.TEXT)
        assert text == "DNA RNA"
        assert "shouting_fixed" not in fixes

    def test_sentence_capitalization(self):
        text, _ = clean_text("leaves are green. roots are not! why?", SourceType.TEXT)
        assert text == "Leaves are green. Roots are not! Why?"

    def test_clean_text_reports_no_empty_counters(self):
        """Test untouched text yields no fix counters"""
        text, fixes = clean_text("Nothing to fix here.", SourceType.TEXT)
        assert text == "Nothing to fix here."
        assert dict(fixes) == {}


class TestDetectors:
    """Tests for section and event detection"""

    def test_detect_section(self):
        assert detect_section("see section 12 for details") == "Section 12"
        assert detect_section("PART 2") == "Part 2"
        assert detect_section("nothing") is None

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("Connection ERROR at 10:00", "error"),
            ("disk warning", "warning"),
            ("is this right?", "question"),
            ("all good", "message"),
        ],
    )
    def test_detect_event_type(self, content, expected):
        assert detect_event_type(content) == expected


class TestTextCleaner:
    """Tests for TextCleaner.clean"""

    def test_structured_content_untouched(self, cleaner, record_factory):
        """Test api payloads are never rewritten"""
        payload = '{"event":  "sync",   "status": "ok"}'
        record = record_factory(SourceType.API, payload)

        result = cleaner.clean([record])

        assert result.records[0].structured_content == payload

    def test_mixed_batch(self, cleaner, mixed_records):
        """Test content, metadata and content type after cleaning"""
        result = cleaner.clean(mixed_records)
        audio, document, api, chat = result.records

        assert audio.structured_content == "The chlorophyll absorbs light in the leaves"
        assert audio.metadata.speaker == "Speaker 1"
        assert audio.metadata.timestamp_range == "00:01-04:10"
        assert audio.metadata.file_name == "lecture.mp3"

        assert document.structured_content.startswith("Photosynthesis is the process")
        assert document.metadata.section == "Chapter 3"
        assert document.metadata.page == 4

        assert api.metadata.user_id == "anonymous"
        assert api.metadata.event_type == "message"

        assert chat.structured_content == "Why do leaves look green?"
        assert chat.metadata.event_type == "question"
        assert chat.content_type == ContentType.QUESTION

        fixes = result.stats.fixes_applied
        assert fixes["headers_removed"] == 1
        assert fixes["metadata_enriched"] == 7
        assert fixes["content_type_refined"] == 1
        assert result.stats.initial_records == 4
        assert result.stats.records_after_cleaning == 4

    def test_inputs_are_not_mutated(self, cleaner, mixed_records):
        originals = [record.structured_content for record in mixed_records]
        cleaner.clean(mixed_records)
        assert [record.structured_content for record in mixed_records] == originals

    def test_document_defaults(self, cleaner, record_factory):
        """Test missing document metadata is defaulted"""
        result = cleaner.clean([record_factory(SourceType.DOCUMENT, "Plain page text")])
        metadata = result.records[0].metadata

        assert metadata.file_name == "unknown_file"
        assert metadata.page == 1
        assert metadata.section is None

    def test_audio_without_timestamps(self, cleaner, record_factory):
        result = cleaner.clean([record_factory(SourceType.AUDIO, "leaves are green")])
        assert result.records[0].metadata.timestamp_range == "unknown"

    def test_configured_defaults(self, record_factory):
        """Test speaker and user defaults come from settings"""
        settings = (
            PipelineSettingsBuilder()
            .with_value("default_speaker", "Narrator")
            .with_value("default_user_id", "system")
            .build()
        )
        result = TextCleaner(settings).clean([
            record_factory(SourceType.AUDIO, "leaves"),
            record_factory(SourceType.CHAT, "hello"),
        ])

        assert result.records[0].metadata.speaker == "Narrator"
        assert result.records[1].metadata.user_id == "system"

    def test_duplicates_dropped(self, cleaner, record_factory):
        """Test records with the same source, cleaned content and group are dropped"""
        first = record_factory(SourceType.CHAT, "hello there")
        second = record_factory(SourceType.CHAT, "Hello there")
        other_source = record_factory(SourceType.TEXT, "hello there")

        result = cleaner.clean([first, second, other_source])

        assert [record.id for record in result.records] == [first.id, other_source.id]
        assert result.dropped_record_ids == [second.id]
        assert result.stats.fixes_applied["duplicates_removed"] == 1
        assert result.stats.dropped_records == 1

    def test_cleaning_is_idempotent(self, cleaner, mixed_records, record_factory):
        """Test cleaning already-cleaned records changes nothing"""
        records = mixed_records + [
            record_factory(SourceType.TEXT, "THIS IS A VERY LOUD NOTE about CO2"),
            record_factory(SourceType.IMAGE, "teh rn 1 vv l w/o"),
        ]
        once = cleaner.clean(records)
        twice = cleaner.clean(once.records)

        assert [r.structured_content for r in twice.records] == [r.structured_content for r in once.records]
        assert [r.metadata for r in twice.records] == [r.metadata for r in once.records]
        assert twice.stats.fixes_applied == {}
