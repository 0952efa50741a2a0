"""
Deterministic topic linking across heterogeneous records.

The first document record of a batch is the anchor: its canonical topic
and group id are applied to every record. Without an anchor each record
derives its own topic from its own content.
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import lru_cache

from recordnorm.core.models import SourceType, UnifiedRecord
from recordnorm.observability.logger import get_logger

logger = get_logger(__name__)

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")

SYSTEM_LOGS_TOPIC = "System Logs"
CHAT_HISTORY_TOPIC = "Chat History"
UNCLASSIFIED_TOPIC = "General Unclassified"


@dataclass(frozen=True)
class TopicRule:
    """
    One taxonomy entry.

    Attributes:
        topic: Canonical topic name
        any_of: Term groups; the rule matches when every term of any group matches
        unless: Terms that suppress the rule when any of them matches
    """

    topic: str
    any_of: tuple[tuple[str, ...], ...]
    unless: tuple[str, ...] = ()


SOFTWARE_CONTEXT_TERMS = ("code*", "software", "programming", "function*", "variable*")

TAXONOMY: tuple[TopicRule, ...] = (
    TopicRule(
        "Newton's First Law of Motion",
        (("newton", "first"), ("newton", "1st"), ("newton", "inertia"), ("law of motion", "first")),
    ),
    TopicRule(
        "Newton's Second Law of Motion",
        (("newton", "second"), ("newton", "2nd"), ("newton", "f=ma"), ("newton", "f = ma"),
         ("law of motion", "second")),
    ),
    TopicRule(
        "Newton's Third Law of Motion",
        (("newton", "third"), ("newton", "3rd"), ("newton", "reaction*"), ("law of motion", "third")),
    ),
    TopicRule(
        "Classical Mechanics",
        (("physics",), ("force*",), ("velocit*",), ("acceleration*",), ("gravit*",)),
        unless=SOFTWARE_CONTEXT_TERMS,
    ),
    TopicRule(
        "Photosynthesis",
        (("photosynthe*",), ("photo synthesis",), ("plant*", "light", "energy")),
    ),
    TopicRule("Cell Division (Mitosis)", (("mitosis",), ("cell division",))),
    TopicRule(
        "Database Systems",
        (("database*",), ("*sql*",), ("mongo*",), ("postgres*",), ("dbms",)),
    ),
    TopicRule(
        "API Development",
        (("api",), ("apis",), ("restful",), ("endpoint*",), ("json", "request*")),
    ),
    TopicRule("React Development", (("react",), ("jsx",), ("hook*",), ("component*",))),
)


@lru_cache(maxsize=None)
def _term_pattern(term: str) -> re.Pattern[str]:
    """
    Compile a taxonomy term.

    A trailing ``*`` makes the term a word-prefix stem; a term wrapped in
    ``*`` on both sides also matches inside words ("*sql*" finds MySQL).
    """
    if term.startswith("*") and term.endswith("*"):
        return re.compile(rf"\w*{re.escape(term[1:-1])}\w*")
    if term.endswith("*"):
        return re.compile(rf"(?<!\w){re.escape(term[:-1])}\w*")
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)")


def _matches(term: str, text: str) -> bool:
    return _term_pattern(term).search(text) is not None


def extract_canonical_topic(content: str, source_type: SourceType | str) -> str:
    """
    Map content to a canonical topic.

    Args:
        content: Text to classify (matched case-insensitively)
        source_type: Source type used for the fallback topic

    Returns:
        Canonical topic name

    Examples:
        >>> extract_canonical_topic("Plants use photosynthesis", "document")
        'Photosynthesis'
        >>> extract_canonical_topic("nothing to see", "chat")
        'Chat History'
    """
    text = content.lower()
    for rule in TAXONOMY:
        if not any(all(_matches(term, text) for term in group) for group in rule.any_of):
            continue
        if any(_matches(term, text) for term in rule.unless):
            continue
        return rule.topic

    source = SourceType(source_type)
    if source in (SourceType.LOG, SourceType.API):
        return SYSTEM_LOGS_TOPIC
    if source == SourceType.CHAT:
        return CHAT_HISTORY_TOPIC
    return UNCLASSIFIED_TOPIC


def short_hash(text: str) -> str:
    """
    Four-character hex digest of a 32-bit rolling hash.

    Examples:
        >>> short_hash("ab")
        '0c21'
        >>> short_hash("")
        '0000'
    """
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "x").zfill(4)[:4]


def slugify(topic: str) -> str:
    """Lowercase, hyphen-separated form of a topic name."""
    return SLUG_PATTERN.sub("-", topic.lower()).strip("-")


def make_group_id(topic: str) -> str:
    """
    Build the canonical group id for a topic.

    Examples:
        >>> make_group_id("Photosynthesis").startswith("topic-photosynthesis-")
        True
    """
    return f"topic-{slugify(topic)}-{short_hash(topic)}"


class TopicRegistry:
    """
    Topic -> group id map for one batch or session.

    Owned by the caller and written by a single linker at a time.
    """

    def __init__(self, entries: dict[str, str] | None = None):
        self._entries: dict[str, str] = dict(entries or {})

    def register(self, topic: str) -> str:
        """Return the group id for a topic, registering it on first sight."""
        if topic not in self._entries:
            self._entries[topic] = make_group_id(topic)
        return self._entries[topic]

    def get(self, topic: str) -> str | None:
        return self._entries.get(topic)

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, topic: object) -> bool:
        return topic in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


def _record_text(record: UnifiedRecord) -> str:
    return record.structured_content or record.raw_content or ""


class TopicLinker:
    """
    Assigns a canonical (topic, group_id) pair to every record of a batch.
    """

    def __init__(self, registry: TopicRegistry | None = None):
        """
        Initialize the linker.

        Args:
            registry: Topic registry to resolve group ids through (a fresh one by default)
        """
        self.registry = registry if registry is not None else TopicRegistry()

    def find_anchor(self, records: Sequence[UnifiedRecord]) -> UnifiedRecord | None:
        """Return the first document record, if any."""
        return next((r for r in records if r.source_type == SourceType.DOCUMENT), None)

    def link(self, records: Sequence[UnifiedRecord]) -> list[UnifiedRecord]:
        """
        Link records by topic.

        Args:
            records: Records in batch order

        Returns:
            New records carrying topic and group_id, in input order
        """
        anchor = self.find_anchor(records)
        anchor_pair: tuple[str, str] | None = None
        if anchor is not None:
            topic = extract_canonical_topic(_record_text(anchor), anchor.source_type)
            anchor_pair = (topic, self.registry.register(topic))
            logger.info(
                "Linked batch to document anchor",
                extra={"anchor_id": anchor.id, "topic": topic, "group_id": anchor_pair[1]},
            )

        linked = []
        for record in records:
            if anchor_pair is not None:
                topic, group_id = anchor_pair
            else:
                topic = extract_canonical_topic(_record_text(record), record.source_type)
                group_id = self.registry.register(topic)
            linked.append(record.model_copy(update={"topic": topic, "group_id": group_id}, deep=True))

        return linked
