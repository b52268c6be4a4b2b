"""Tests for sqlseed.values.parser module."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from sqlseed.values.classifier import TypeCategory
from sqlseed.values.parser import (
    generate_from_hash,
    is_null,
    is_valid_calendar_date,
    parse_best_effort,
    parse_for_dialect,
    parse_in_clause_values,
    stable_hash,
    try_parse_boolean,
    try_parse_datetime,
    try_parse_decimal,
    try_parse_integer,
)


class TestIsNull:
    """Tests for is_null."""

    @pytest.mark.parametrize("value", [None, "", "   ", "NULL", "null", " Null "])
    def test_null_values(self, value: str | None) -> None:
        assert is_null(value)

    @pytest.mark.parametrize("value", ["0", "none", 0, False])
    def test_non_null_values(self, value: object) -> None:
        assert not is_null(value)


class TestTryParseBoolean:
    """Tests for try_parse_boolean."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "yes", "Y", "on", "1"])
    def test_true_tokens(self, value: str) -> None:
        assert try_parse_boolean(value) == (True, True)

    @pytest.mark.parametrize("value", ["false", "No", "n", "OFF", "0"])
    def test_false_tokens(self, value: str) -> None:
        assert try_parse_boolean(value) == (False, True)

    @pytest.mark.parametrize("value", ["maybe", "2", "-1", "", None])
    def test_unparsable(self, value: str | None) -> None:
        assert try_parse_boolean(value)[1] is False


class TestNumericParsing:
    """Tests for integer and decimal parsing."""

    def test_integer_with_separators(self) -> None:
        assert try_parse_integer("1,234") == (1234, True)
        assert try_parse_integer("1_000") == (1000, True)
        assert try_parse_integer("-42") == (-42, True)

    @pytest.mark.parametrize("value", ["12.5", "abc", "", None, "٣"])
    def test_integer_failures(self, value: str | None) -> None:
        assert try_parse_integer(value)[1] is False

    def test_decimal(self) -> None:
        assert try_parse_decimal("1,234.50") == (Decimal("1234.50"), True)
        assert try_parse_decimal("1e3") == (Decimal("1e3"), True)

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "abc", ""])
    def test_decimal_failures(self, value: str) -> None:
        assert try_parse_decimal(value)[1] is False


class TestTryParseDatetime:
    """Tests for try_parse_datetime."""

    def test_iso_date(self) -> None:
        assert try_parse_datetime("2024-03-15") == (datetime(2024, 3, 15), True)

    def test_iso_timestamp_quoted(self) -> None:
        parsed, ok = try_parse_datetime("'2024-03-15 10:20:30'")
        assert ok
        assert parsed == datetime(2024, 3, 15, 10, 20, 30)

    def test_slash_format_month_first(self) -> None:
        assert try_parse_datetime("03/04/2024") == (datetime(2024, 3, 4), True)

    def test_slash_format_day_first_fallback(self) -> None:
        assert try_parse_datetime("25/12/2024") == (datetime(2024, 12, 25), True)

    def test_timezone_dropped(self) -> None:
        parsed, ok = try_parse_datetime("2024-03-15T10:00:00+02:00")
        assert ok
        assert parsed is not None and parsed.tzinfo is None

    @pytest.mark.parametrize("value", ["yesterday", "", None, "2024-13-45"])
    def test_failures(self, value: str | None) -> None:
        assert try_parse_datetime(value) == (None, False)


class TestParseBestEffort:
    """Tests for parse_best_effort precedence."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("yes", True),
            ("1", True),
            ("42", 42),
            ("3.14", Decimal("3.14")),
            ("2024-01-02", datetime(2024, 1, 2)),
            ("hello", "hello"),
            ("NULL", None),
            ("", None),
        ],
    )
    def test_precedence(self, value: str, expected: object) -> None:
        assert parse_best_effort(value) == expected

    def test_none_gives_none(self) -> None:
        assert parse_best_effort(None) is None


class TestIsValidCalendarDate:
    """Tests for is_valid_calendar_date."""

    def test_rolled_over_date_rejected(self) -> None:
        assert not is_valid_calendar_date("2023-02-30")

    def test_regular_date_accepted(self) -> None:
        assert is_valid_calendar_date("2023-02-28")

    def test_leap_day_accepted(self) -> None:
        assert is_valid_calendar_date("2024-02-29")

    def test_non_leap_day_rejected(self) -> None:
        assert not is_valid_calendar_date("2023-02-29")

    def test_timestamp_uses_date_part(self) -> None:
        assert is_valid_calendar_date("2024-02-29 10:00:00")

    def test_year_bounds(self) -> None:
        """Years before 1900 or far in the future are rejected."""
        today = date(2024, 6, 1)
        assert not is_valid_calendar_date("1899-12-31", today=today)
        assert is_valid_calendar_date("2034-01-01", today=today)
        assert not is_valid_calendar_date("2035-01-01", today=today)

    @pytest.mark.parametrize("value", ["", None, "not a date", "2024-xx-01"])
    def test_garbage(self, value: str | None) -> None:
        assert not is_valid_calendar_date(value)


class TestParseInClauseValues:
    """Tests for parse_in_clause_values."""

    def test_quoted_and_bare(self) -> None:
        assert parse_in_clause_values("('a', \"b\", 3)") == ["a", "b", "3"]

    def test_empty(self) -> None:
        assert parse_in_clause_values("()") == []
        assert parse_in_clause_values(None) == []


class TestGenerateFromHash:
    """Tests for stable_hash and generate_from_hash."""

    def test_stable_hash_is_deterministic(self) -> None:
        assert stable_hash("orders.id") == stable_hash("orders.id")
        assert stable_hash("orders.id") != stable_hash("orders.total")

    def test_maybe_falls_back_to_deterministic_boolean(self) -> None:
        """An unparsable boolean gets the same hash-derived value every time."""
        parsed, ok = try_parse_boolean("maybe")
        assert not ok
        first = generate_from_hash("maybe", TypeCategory.BOOLEAN)
        assert isinstance(first, bool)
        assert generate_from_hash("maybe", TypeCategory.BOOLEAN) == first

    def test_integer_range(self) -> None:
        value = generate_from_hash("x", TypeCategory.INTEGER)
        assert 1 <= value <= 10000

    def test_decimal(self) -> None:
        value = generate_from_hash("x", TypeCategory.DECIMAL)
        assert isinstance(value, Decimal)
        assert value % 1 == Decimal("0.50")

    def test_datetime_within_year_before_anchor(self) -> None:
        anchor = date(2024, 1, 1)
        value = generate_from_hash("x", TypeCategory.DATETIME, anchor=anchor)
        assert isinstance(value, datetime)
        assert (datetime(2024, 1, 1) - value).days < 365

    def test_text_returned_unchanged(self) -> None:
        assert generate_from_hash("abc", TypeCategory.STRING) == "abc"

    def test_empty_input_defaults(self) -> None:
        assert generate_from_hash("", TypeCategory.INTEGER) == 0
        assert generate_from_hash(None, TypeCategory.BOOLEAN) is False
        assert generate_from_hash("", TypeCategory.STRING) is None


class TestParseForDialect:
    """Tests for parse_for_dialect."""

    def test_mysql_tinyint_boolean(self) -> None:
        assert parse_for_dialect("yes", "TINYINT(1)", "mysql") == 1
        assert parse_for_dialect("off", "tinyint(1)", "mysql") == 0
        assert parse_for_dialect("maybe", "tinyint(1)", "mysql") is None

    def test_oracle_number_one(self) -> None:
        assert parse_for_dialect("true", "NUMBER(1)", "oracle") == 1

    def test_oracle_numbers_are_decimal(self) -> None:
        assert parse_for_dialect("12", "NUMBER", "oracle") == Decimal("12")

    def test_integer(self) -> None:
        assert parse_for_dialect("1,000", "int", "postgresql") == 1000
        assert parse_for_dialect("abc", "int", "postgresql") is None

    def test_datetime(self) -> None:
        assert parse_for_dialect("2024-01-02", "date", "sqlserver") == datetime(2024, 1, 2)

    def test_boolean(self) -> None:
        assert parse_for_dialect("no", "boolean", "postgresql") is False

    def test_text_passthrough(self) -> None:
        assert parse_for_dialect("hello", "varchar(10)", "mysql") == "hello"

    def test_null(self) -> None:
        assert parse_for_dialect("NULL", "int", "mysql") is None
        assert parse_for_dialect(None, "int", "mysql") is None
