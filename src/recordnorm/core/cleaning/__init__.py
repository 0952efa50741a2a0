"""
Cleaning and normalization for unified records and tabular rows.
"""

from .field_cleaner import FieldCleaner
from .text_cleaner import TextCleaner, clean_text, detect_event_type, detect_section

__all__ = [
    "TextCleaner",
    "FieldCleaner",
    "clean_text",
    "detect_section",
    "detect_event_type",
]
