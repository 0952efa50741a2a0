"""
Semantic type inference for unlabeled tabular columns.

Combines value statistics with column-name hints to decide what a column
means (identifier, contact info, amount, ...) independently of how it is
stored.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from recordnorm.core.models import Row, Scalar, SemanticMapping, SemanticType
from recordnorm.core.rules.rule_config import PipelineSettings
from recordnorm.observability.logger import get_logger
from recordnorm.utils.values import (
    has_currency,
    is_blank,
    is_booleanish,
    is_dateish,
    is_email,
    is_numeric,
    is_phone,
)

logger = get_logger(__name__)

NAME_SPLIT_PATTERN = re.compile(r"[^a-z0-9]+")

ID_TOKENS = frozenset({
    "id", "uid", "user_id", "customer_id", "client_id", "record_id", "invoice", "invoice_id",
    "order", "order_id", "vin", "vehicle_id", "serial", "serial_number", "chassis", "ticket",
    "case", "mrn", "patient_id",
})
NAME_TOKENS = frozenset({
    "name", "full_name", "fullname", "first_name", "last_name", "display_name", "given_name",
    "family_name", "company", "organization", "org", "title",
})
AMOUNT_TOKENS = frozenset({
    "amount", "price", "cost", "salary", "wage", "income", "revenue", "total", "balance",
    "msrp", "ctc", "fee", "payment",
})
CONTACT_TOKENS = frozenset({
    "email", "mail", "email_address", "phone", "mobile", "cell", "tel", "contact",
})
DATE_TOKENS = frozenset({
    "date", "dob", "doj", "joined_at", "created_at", "updated_at", "timestamp", "time", "year",
})
CATEGORY_TOKENS = frozenset({
    "status", "type", "category", "class", "group", "segment", "color", "make", "model",
    "fuel", "fuel_type", "transmission",
})
TEXT_TOKENS = frozenset({
    "description", "notes", "note", "comment", "remarks", "address", "summary", "details", "text",
})


@dataclass(frozen=True)
class ColumnStatistics:
    """Value statistics over the non-null values of one column."""

    non_null: int
    unique_ratio: float
    avg_length: float
    email_ratio: float
    phone_ratio: float
    date_ratio: float
    numeric_ratio: float
    boolean_ratio: float
    has_currency: bool


def column_tokens(column_name: str) -> set[str]:
    """
    Tokenize a column name for hint lookup.

    The snake-joined form of the full name is included so multi-word hints
    such as ``first_name`` match "First Name" as well as "first_name".

    Examples:
        >>> sorted(column_tokens("Customer ID"))
        ['customer', 'customer_id', 'id']
    """
    parts = [part for part in NAME_SPLIT_PATTERN.split(column_name.lower()) if part]
    tokens = set(parts)
    if parts:
        tokens.add("_".join(parts))
    return tokens


class SemanticTypeInferrer:
    """
    Infers the semantic type of a column from its name and values.

    Inference is deterministic: the same name and values always produce
    the same type. Rules are checked in a fixed order and the first match
    wins.
    """

    def __init__(self, settings: PipelineSettings | None = None):
        """
        Initialize the inferrer.

        Args:
            settings: Thresholds (phone digit range); defaults when omitted
        """
        self.settings = settings or PipelineSettings()

    def _looks_like_phone(self, value: Scalar) -> bool:
        # ISO and slash dates carry 8 digits
        if is_dateish(value):
            return False
        return is_phone(value, self.settings.phone_min_digits, self.settings.phone_max_digits)

    def compute_statistics(self, values: Iterable[Scalar]) -> ColumnStatistics:
        """Compute value statistics after filtering out missing values."""
        present = [value for value in values if not is_blank(value)]
        count = len(present)
        if count == 0:
            return ColumnStatistics(0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, False)

        texts = [str(value) for value in present]

        def ratio(predicate) -> float:
            return sum(1 for value in present if predicate(value)) / count

        return ColumnStatistics(
            non_null=count,
            unique_ratio=len(set(texts)) / count,
            avg_length=sum(len(text) for text in texts) / count,
            email_ratio=ratio(is_email),
            phone_ratio=ratio(self._looks_like_phone),
            date_ratio=ratio(is_dateish),
            numeric_ratio=ratio(is_numeric),
            boolean_ratio=ratio(is_booleanish),
            has_currency=any(has_currency(value) for value in present),
        )

    def infer(self, column_name: str, values: Iterable[Scalar]) -> SemanticType:
        """
        Infer the semantic type of a single column.

        Args:
            column_name: Column header
            values: Raw column values (missing values allowed)

        Returns:
            Inferred SemanticType
        """
        stats = self.compute_statistics(values)
        tokens = column_tokens(column_name)

        def hinted(hints: frozenset[str]) -> bool:
            return not tokens.isdisjoint(hints)

        if stats.email_ratio > 0.5 or stats.phone_ratio > 0.5 or hinted(CONTACT_TOKENS):
            return SemanticType.CONTACT_INFO
        if stats.boolean_ratio > 0.7:
            return SemanticType.BOOLEAN_FLAG
        if hinted(DATE_TOKENS) or stats.date_ratio > 0.6:
            return SemanticType.DATE
        if (stats.unique_ratio > 0.9 and stats.avg_length >= 6) or hinted(ID_TOKENS):
            return SemanticType.IDENTIFIER
        if stats.numeric_ratio > 0.7 and (stats.has_currency or hinted(AMOUNT_TOKENS)):
            return SemanticType.NUMERIC_AMOUNT
        if hinted(NAME_TOKENS):
            return SemanticType.NAME
        if hinted(TEXT_TOKENS) or stats.avg_length > 20:
            return SemanticType.FREE_TEXT
        if hinted(CATEGORY_TOKENS) or stats.unique_ratio < 0.2:
            return SemanticType.CATEGORICAL
        if stats.numeric_ratio > 0.7:
            return SemanticType.NUMERIC_AMOUNT
        return SemanticType.FREE_TEXT

    def infer_mapping(self, columns: Sequence[str], rows: Sequence[Row]) -> SemanticMapping:
        """
        Infer semantic types for every column.

        Args:
            columns: Column names, in output order
            rows: Row dicts (sparse rows allowed)

        Returns:
            Column name -> SemanticType
        """
        mapping: SemanticMapping = {}
        for column in columns:
            mapping[column] = self.infer(column, (row.get(column) for row in rows))

        logger.debug(
            "Inferred semantic mapping",
            extra={"columns": len(mapping), "mapping": {k: v.value for k, v in mapping.items()}},
        )
        return mapping
