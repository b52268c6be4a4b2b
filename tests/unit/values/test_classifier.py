"""Tests for sqlseed.values.classifier module."""

from __future__ import annotations

import pytest

from sqlseed.graph.models import ColumnSchema
from sqlseed.values.classifier import (
    TypeCategory,
    base_type,
    classify,
    is_boolean_column,
    is_boolean_name,
    is_date_column,
    is_datetime,
    is_json_column,
    is_large_text,
    is_numeric,
    is_text,
)


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        ("raw_type", "expected"),
        [
            ("int", TypeCategory.INTEGER),
            ("BIGINT", TypeCategory.INTEGER),
            ("number(10)", TypeCategory.INTEGER),
            ("int4", TypeCategory.INTEGER),
            ("varchar(50)", TypeCategory.STRING),
            ("NVARCHAR2(100)", TypeCategory.STRING),
            ("character varying", TypeCategory.STRING),
            ("uuid", TypeCategory.STRING),
            ("datetime2", TypeCategory.DATETIME),
            ("timestamp with time zone", TypeCategory.DATETIME),
            ("date", TypeCategory.DATETIME),
            ("bit", TypeCategory.BOOLEAN),
            ("boolean", TypeCategory.BOOLEAN),
            ("decimal(10,2)", TypeCategory.DECIMAL),
            ("double precision", TypeCategory.DECIMAL),
            ("money", TypeCategory.DECIMAL),
            ("jsonb", TypeCategory.JSON),
            ("bytea", TypeCategory.BINARY),
            ("varbinary(max)", TypeCategory.BINARY),
            ("enum('a','b')", TypeCategory.ENUM),
        ],
    )
    def test_known_types(self, raw_type: str, expected: TypeCategory) -> None:
        """Recognized type names map onto their category."""
        assert classify(raw_type) is expected

    @pytest.mark.parametrize("raw_type", ["", "   ", None, "geometry", "xml", "🙂"])
    def test_unknown_inputs_default(self, raw_type: str | None) -> None:
        """Anything unrecognized, including empty input, is UNKNOWN."""
        assert classify(raw_type) is TypeCategory.UNKNOWN

    def test_surrounding_whitespace_ignored(self) -> None:
        assert classify("  Integer  ") is TypeCategory.INTEGER


class TestTypePredicates:
    """Tests for the category shortcut predicates."""

    def test_is_numeric(self) -> None:
        assert is_numeric("int")
        assert is_numeric("decimal(5,2)")
        assert not is_numeric("varchar(5)")

    def test_is_text(self) -> None:
        assert is_text("text")
        assert not is_text("int")

    def test_is_datetime(self) -> None:
        assert is_datetime("timestamp")
        assert not is_datetime("text")

    def test_is_large_text(self) -> None:
        """TEXT and CLOB variants are large text, VARCHAR is not."""
        assert is_large_text("longtext")
        assert is_large_text("CLOB")
        assert not is_large_text("varchar(255)")

    def test_base_type_strips_size(self) -> None:
        assert base_type("VARCHAR(50)") == "varchar"
        assert base_type("decimal (10, 2)") == "decimal"


class TestBooleanHeuristics:
    """Tests for boolean name and column heuristics."""

    @pytest.mark.parametrize(
        "name",
        ["is_active", "has_children", "can_edit", "enabled", "user_verified", "Deleted"],
    )
    def test_boolean_names(self, name: str) -> None:
        assert is_boolean_name(name)

    @pytest.mark.parametrize("name", ["status", "amount", "", None])
    def test_non_boolean_names(self, name: str | None) -> None:
        assert not is_boolean_name(name)

    def test_tinyint_with_length_one(self) -> None:
        """is_active tinyint with max length 1 is a boolean column."""
        column = ColumnSchema(name="is_active", data_type="tinyint", max_length=1)
        assert classify(column.data_type) is TypeCategory.INTEGER
        assert is_boolean_column(column)

    def test_tinyint_one_type(self) -> None:
        column = ColumnSchema(name="flag", data_type="tinyint(1)")
        assert is_boolean_column(column)

    def test_oracle_number_one(self) -> None:
        column = ColumnSchema(name="flag", data_type="NUMBER", precision=1, scale=0)
        assert is_boolean_column(column)

    def test_plain_integer_is_not_boolean(self) -> None:
        column = ColumnSchema(name="quantity", data_type="int")
        assert not is_boolean_column(column)

    def test_none_column(self) -> None:
        assert not is_boolean_column(None)


class TestJsonAndDateHeuristics:
    """Tests for JSON and date column heuristics."""

    def test_json_type(self) -> None:
        assert is_json_column(ColumnSchema(name="payload", data_type="json"))

    def test_json_name(self) -> None:
        assert is_json_column(ColumnSchema(name="user_settings", data_type="text"))

    def test_not_json(self) -> None:
        assert not is_json_column(ColumnSchema(name="title", data_type="text"))
        assert not is_json_column(None)

    def test_date_type(self) -> None:
        assert is_date_column(ColumnSchema(name="x", data_type="date"))

    def test_date_name(self) -> None:
        assert is_date_column(ColumnSchema(name="created_on", data_type="varchar(20)"))

    def test_not_date(self) -> None:
        assert not is_date_column(ColumnSchema(name="title", data_type="text"))
        assert not is_date_column(None)
