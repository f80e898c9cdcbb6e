"""
Tests for schema validation and header translation.
"""
import pytest
import pandas as pd

from src.data.schema import (
    clean_header,
    translate_header,
    build_column_map,
    validate_required_columns,
    check_optional_columns,
    validate_schema,
    ensure_column_types,
    SchemaValidationError
)


class TestHeaderTranslation:
    """Tests for the header alias table."""

    def test_known_headers_translate(self):
        headers = ["날짜", "시간", "센터명", "전체", "마감률(%)", "마감", "잔여", "접수", "할당", "출력"]
        assert [translate_header(h) for h in headers] == [
            "date", "time", "centerName", "total", "completion",
            "closed", "remaining", "receipt", "assigned", "output",
        ]

    def test_unknown_header_passes_through(self):
        assert translate_header("비고") == "비고"
        assert translate_header("efficiency") == "efficiency"

    def test_quotes_and_carriage_return_stripped(self):
        assert clean_header(' "센터명" ') == "센터명"
        assert translate_header("잔여\r") == "remaining"

    def test_column_map_positions(self):
        column_map = build_column_map(["날짜", "시간", "센터명", "비고"])
        assert column_map == {"date": 0, "time": 1, "centerName": 2, "비고": 3}

    def test_duplicate_header_last_wins(self):
        column_map = build_column_map(["마감", "마감"])
        assert column_map["closed"] == 1


class TestValidateRequiredColumns:
    """Tests for required column validation."""

    def test_all_columns_present(self):
        is_valid, missing = validate_required_columns(["date", "time", "centerName"], "throughput")

        assert is_valid is True
        assert missing == []

    def test_missing_columns(self):
        is_valid, missing = validate_required_columns(["date"], "throughput")

        assert is_valid is False
        assert missing == ["time", "centerName"]

    def test_unknown_table(self):
        """Unknown table name should pass (no requirements)."""
        is_valid, missing = validate_required_columns(["any_col"], "unknown_table")

        assert is_valid is True
        assert missing == []


class TestValidateSchema:
    """Tests for full schema validation."""

    def test_strict_mode_raises(self):
        with pytest.raises(SchemaValidationError):
            validate_schema(["date"], "throughput", strict=True)

    def test_non_strict_returns_result(self):
        result = validate_schema(["date", "total"], "throughput", strict=False)

        assert result["is_valid"] is False
        assert result["missing_required"] == ["time", "centerName"]
        assert "total" not in result["missing_optional"]
        assert "closed" in result["missing_optional"]
        assert result["total_columns"] == 2

    def test_empty_optional_for_unknown_table(self):
        assert check_optional_columns(["col"], "unknown") == []


class TestEnsureColumnTypes:
    """Tests for record frame dtypes."""

    def test_coerces_counts_and_rates(self):
        df = pd.DataFrame({
            "date": ["2025-01-01"],
            "total": ["4167"],
            "closed": [None],
            "completion": ["84.0"],
        })

        result = ensure_column_types(df)

        assert result["total"].iloc[0] == 4167
        assert result["closed"].iloc[0] == 0
        assert result["completion"].dtype == float
        assert result["completion"].iloc[0] == pytest.approx(84.0)
