"""
Topic linking for unified records.
"""

from .topic_linker import (
    TAXONOMY,
    TopicLinker,
    TopicRegistry,
    TopicRule,
    extract_canonical_topic,
    make_group_id,
    short_hash,
    slugify,
)

__all__ = [
    "TopicLinker",
    "TopicRegistry",
    "TopicRule",
    "TAXONOMY",
    "extract_canonical_topic",
    "make_group_id",
    "short_hash",
    "slugify",
]
