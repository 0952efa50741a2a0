"""
Unit tests for basic column analysis.
"""

import pytest

from recordnorm.core.models import BasicType
from recordnorm.core.schema import analyze_rows, collect_columns, detect_basic_type


class TestCollectColumns:
    """Tests for column discovery over sparse rows"""

    def test_union_in_first_seen_order(self):
        """Test columns from later rows are appended"""
        rows = [{"a": 1, "b": 2}, {"c": 3, "a": 4}]
        assert collect_columns(rows) == ["a", "b", "c"]

    def test_no_rows(self):
        """Test an empty input has no columns"""
        assert collect_columns([]) == []


class TestDetectBasicType:
    """Tests for storage-level type detection"""

    @pytest.mark.parametrize(
        "values,expected",
        [
            (["1", "2", "30"], BasicType.INTEGER),
            ([1, 2.0, "3"], BasicType.INTEGER),
            (["1.5", "2"], BasicType.FLOAT),
            (["true", "No", "1"], BasicType.BOOLEAN),
            ([True, False], BasicType.BOOLEAN),
            (["2023-01-15", "15/02/2023"], BasicType.DATE),
            (["abc", "1"], BasicType.STRING),
            ([None, ""], BasicType.STRING),
        ],
    )
    def test_detected_types(self, values, expected):
        """Test each type survives only if every present value supports it"""
        assert detect_basic_type(values) == expected

    def test_missing_values_are_skipped(self):
        """Test missing values do not break a numeric column"""
        assert detect_basic_type(["1", None, " ", "2"]) == BasicType.INTEGER

    def test_single_letter_booleans_are_strings(self):
        """Test y/n are not storage booleans"""
        assert detect_basic_type(["y", "n"]) == BasicType.STRING

    def test_short_date_like_values_are_strings(self):
        """Test values shorter than a full date are not dates"""
        assert detect_basic_type(["2023-1-5"]) == BasicType.STRING


class TestAnalyzeRows:
    """Tests for analyze_rows"""

    def test_analysis(self):
        """Test null percentage and sample value per column"""
        rows = [
            {"id": "1", "name": None},
            {"id": "2", "name": "Ann"},
            {"id": "3"},
            {"id": "4", "name": "Bob"},
        ]
        analysis = {column.name: column for column in analyze_rows(rows)}

        assert analysis["id"].type == BasicType.INTEGER
        assert analysis["id"].null_percentage == 0.0
        assert analysis["name"].type == BasicType.STRING
        assert analysis["name"].null_percentage == 50.0
        assert analysis["name"].sample_values == ["Ann"]

    def test_empty_rows(self):
        """Test no rows yields no columns"""
        assert analyze_rows([]) == []
