"""
Basic column analysis for row sequences.
"""

import re
from collections.abc import Sequence

from recordnorm.core.models import BasicType, ColumnAnalysis, Row, Scalar
from recordnorm.utils.values import is_blank, parse_date, parse_number

STORAGE_BOOLEAN_TOKENS = frozenset({"true", "false", "0", "1", "yes", "no"})
STORAGE_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}|^\d{2}/\d{2}/\d{4}")


def collect_columns(rows: Sequence[Row]) -> list[str]:
    """Union of keys across (possibly sparse) rows, in first-seen order."""
    columns: dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def detect_basic_type(values: Sequence[Scalar]) -> BasicType:
    """
    Detect the storage-level type of a column.

    A type is kept only if every non-missing value supports it. Precedence
    is Boolean, Integer, Float, Date, then String. Columns with no values
    are String.
    """
    is_integer = is_float = is_boolean = is_date = True
    has_value = False

    for value in values:
        if is_blank(value):
            continue
        has_value = True

        if isinstance(value, bool):
            is_integer = is_float = is_date = False
            continue

        if isinstance(value, int | float):
            is_date = is_boolean = False
            if isinstance(value, float) and not value.is_integer():
                is_integer = False
            continue

        text = str(value).strip()
        if text.lower() not in STORAGE_BOOLEAN_TOKENS:
            is_boolean = False

        number = parse_number(text)
        if number is None:
            is_integer = is_float = False
        elif not number.is_integer():
            is_integer = False

        if len(text) < 10 or not STORAGE_DATE_PATTERN.match(text) or parse_date(text) is None:
            is_date = False

    if not has_value:
        return BasicType.STRING
    if is_boolean:
        return BasicType.BOOLEAN
    if is_integer:
        return BasicType.INTEGER
    if is_float:
        return BasicType.FLOAT
    if is_date:
        return BasicType.DATE
    return BasicType.STRING


def analyze_rows(rows: Sequence[Row]) -> list[ColumnAnalysis]:
    """
    Analyze every column of a row sequence.

    Args:
        rows: Row dicts; keys missing from a row count as missing values

    Returns:
        One ColumnAnalysis per column, in first-seen column order
    """
    total = len(rows)
    analyses = []
    for column in collect_columns(rows):
        values = [row.get(column) for row in rows]
        present = [value for value in values if not is_blank(value)]
        null_percentage = ((total - len(present)) / total) * 100 if total else 0.0
        analyses.append(
            ColumnAnalysis(
                name=column,
                type=detect_basic_type(values),
                null_percentage=null_percentage,
                sample_values=present[:1],
            )
        )
    return analyses
