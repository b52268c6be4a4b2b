"""Maps raw column type names onto a small set of semantic categories."""

from __future__ import annotations

import re
from enum import Enum

from ..graph.models import ColumnSchema


class TypeCategory(Enum):
    """Semantic column type categories."""

    UNKNOWN = "unknown"
    INTEGER = "integer"
    DECIMAL = "decimal"
    STRING = "string"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    JSON = "json"
    BINARY = "binary"
    ENUM = "enum"


INTEGER_TYPES = frozenset(
    {
        "int",
        "integer",
        "bigint",
        "smallint",
        "tinyint",
        "mediumint",
        "number",
        "long",
        "short",
        "byte",
        "serial",
        "bigserial",
        "int2",
        "int4",
        "int8",
    }
)

STRING_TYPES = frozenset(
    {
        "varchar",
        "nvarchar",
        "varchar2",
        "nvarchar2",
        "text",
        "ntext",
        "char",
        "nchar",
        "string",
        "clob",
        "nclob",
        "longtext",
        "mediumtext",
        "tinytext",
        "character varying",
        "character",
        "uuid",
        "uniqueidentifier",
    }
)

DATETIME_TYPES = frozenset(
    {
        "datetime",
        "datetime2",
        "date",
        "timestamp",
        "time",
        "smalldatetime",
        "datetimeoffset",
        "timestamptz",
        "timestamp with time zone",
        "timestamp without time zone",
    }
)

BOOLEAN_TYPES = frozenset({"bit", "boolean", "bool"})

DECIMAL_TYPES = frozenset(
    {
        "decimal",
        "numeric",
        "float",
        "double",
        "double precision",
        "money",
        "smallmoney",
        "real",
        "binary_float",
        "binary_double",
    }
)

JSON_TYPES = frozenset({"json", "jsonb"})

BINARY_TYPES = frozenset(
    {
        "blob",
        "longblob",
        "mediumblob",
        "tinyblob",
        "binary",
        "varbinary",
        "image",
        "bytea",
        "raw",
    }
)

LARGE_TEXT_MARKERS = ("text", "clob")

_SIZE_SUFFIX = re.compile(r"\s*\([^)]*\)")

_CATEGORY_SETS = (
    (INTEGER_TYPES, TypeCategory.INTEGER),
    (STRING_TYPES, TypeCategory.STRING),
    (DATETIME_TYPES, TypeCategory.DATETIME),
    (BOOLEAN_TYPES, TypeCategory.BOOLEAN),
    (DECIMAL_TYPES, TypeCategory.DECIMAL),
    (JSON_TYPES, TypeCategory.JSON),
    (BINARY_TYPES, TypeCategory.BINARY),
)

BOOLEAN_NAME_PREFIXES = ("is_", "has_", "can_", "should_", "enable", "disable")
BOOLEAN_NAME_SUFFIXES = (
    "_active",
    "_enabled",
    "_deleted",
    "_verified",
    "_approved",
    "_published",
)
BOOLEAN_NAMES = frozenset(
    {
        "active",
        "enabled",
        "deleted",
        "verified",
        "approved",
        "published",
        "visible",
        "locked",
        "expired",
        "completed",
    }
)
JSON_NAME_PATTERNS = (
    "permissions",
    "metadata",
    "settings",
    "config",
    "data",
    "attributes",
    "properties",
)
DATE_NAME_PATTERNS = (
    "date",
    "time",
    "created",
    "updated",
    "modified",
    "birth",
    "expire",
    "start",
    "end",
)


def normalize_type(raw_type: str | None) -> str:
    """Trim and lower-case a raw type name."""
    return (raw_type or "").strip().lower()


def base_type(raw_type: str | None) -> str:
    """Normalized type with any size suffix removed (``varchar(50)`` -> ``varchar``)."""
    return _SIZE_SUFFIX.sub("", normalize_type(raw_type)).strip()


def classify(raw_type: str | None) -> TypeCategory:
    """
    Classify a raw type name.

    Total over all inputs: anything unrecognized maps to UNKNOWN.
    """
    normalized = normalize_type(raw_type)
    if not normalized:
        return TypeCategory.UNKNOWN

    if normalized.startswith("enum(") or normalized.startswith("enum ("):
        return TypeCategory.ENUM

    for candidate in (normalized, base_type(normalized)):
        for type_set, category in _CATEGORY_SETS:
            if candidate in type_set:
                return category

    return TypeCategory.UNKNOWN


def is_numeric(raw_type: str | None) -> bool:
    return classify(raw_type) in (TypeCategory.INTEGER, TypeCategory.DECIMAL)


def is_text(raw_type: str | None) -> bool:
    return classify(raw_type) is TypeCategory.STRING


def is_datetime(raw_type: str | None) -> bool:
    return classify(raw_type) is TypeCategory.DATETIME


def is_boolean_type(raw_type: str | None) -> bool:
    return classify(raw_type) is TypeCategory.BOOLEAN


def is_large_text(raw_type: str | None) -> bool:
    """Whether a string type should map onto a CLOB/TEXT equivalent."""
    lowered = base_type(raw_type)
    return any(marker in lowered for marker in LARGE_TEXT_MARKERS)


def is_boolean_name(column_name: str | None) -> bool:
    """Check if a column name suggests a boolean flag."""
    lowered = (column_name or "").lower()
    if not lowered:
        return False
    if lowered.startswith(BOOLEAN_NAME_PREFIXES):
        return True
    if lowered.endswith(BOOLEAN_NAME_SUFFIXES):
        return True
    return lowered in BOOLEAN_NAMES


def is_boolean_column(column: ColumnSchema | None) -> bool:
    """
    Check if a column is likely used as a boolean.

    Combines the declared type, MySQL ``TINYINT(1)`` and Oracle ``NUMBER(1)``
    conventions, and the column name.
    """
    if column is None:
        return False

    if is_boolean_type(column.data_type):
        return True

    normalized = normalize_type(column.data_type)
    if "tinyint" in normalized and (
        column.max_length == 1 or normalized.replace(" ", "") == "tinyint(1)"
    ):
        return True

    if "number" in normalized and column.precision == 1 and (column.scale or 0) == 0:
        return True

    if classify(column.data_type) is TypeCategory.INTEGER and column.max_length == 1:
        return True

    return is_boolean_name(column.name)


def is_json_name(column_name: str | None) -> bool:
    lowered = (column_name or "").lower()
    return bool(lowered) and any(p in lowered for p in JSON_NAME_PATTERNS)


def is_json_column(column: ColumnSchema | None) -> bool:
    """Check if a column likely stores JSON documents."""
    if column is None:
        return False
    if classify(column.data_type) is TypeCategory.JSON:
        return True
    return is_json_name(column.name)


def is_date_column(column: ColumnSchema | None) -> bool:
    """Check if a column likely stores dates."""
    if column is None:
        return False
    if is_datetime(column.data_type):
        return True
    lowered = column.name.lower()
    return any(p in lowered for p in DATE_NAME_PATTERNS)
