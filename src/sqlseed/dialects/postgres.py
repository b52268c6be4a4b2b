"""PostgreSQL dialect handler."""

from __future__ import annotations

from ..values.classifier import TypeCategory, base_type, normalize_type
from .base import Dialect, DialectHandler

POSTGRES_RESERVED_WORDS = frozenset(
    {
        "ALL", "ANALYSE", "ANALYZE", "AND", "ANY", "ARRAY", "AS", "ASC",
        "ASYMMETRIC", "BOTH", "CASE", "CAST", "CHECK", "COLLATE", "COLUMN",
        "CONSTRAINT", "CREATE", "CURRENT_CATALOG", "CURRENT_DATE",
        "CURRENT_ROLE", "CURRENT_TIME", "CURRENT_TIMESTAMP", "CURRENT_USER",
        "DEFAULT", "DEFERRABLE", "DESC", "DISTINCT", "DO", "ELSE", "END",
        "EXCEPT", "FALSE", "FETCH", "FOR", "FOREIGN", "FROM", "GRANT",
        "GROUP", "HAVING", "IN", "INITIALLY", "INTERSECT", "INTO", "LATERAL",
        "LEADING", "LIMIT", "LOCALTIME", "LOCALTIMESTAMP", "NOT", "NULL",
        "OFFSET", "ON", "ONLY", "OR", "ORDER", "PLACING", "PRIMARY",
        "REFERENCES", "RETURNING", "SELECT", "SESSION_USER", "SOME",
        "SYMMETRIC", "TABLE", "THEN", "TO", "TRAILING", "TRUE", "UNION",
        "UNIQUE", "USER", "USING", "VARIADIC", "WHEN", "WHERE", "WINDOW",
        "WITH",
    }
)  # fmt: skip


class PostgresDialectHandler(DialectHandler):
    """PostgreSQL."""

    dialect = Dialect.POSTGRESQL
    reserved_words = POSTGRES_RESERVED_WORDS
    type_map = {
        TypeCategory.INTEGER: "INTEGER",
        TypeCategory.DECIMAL: "DECIMAL",
        TypeCategory.STRING: "VARCHAR(255)",
        TypeCategory.DATETIME: "TIMESTAMP",
        TypeCategory.BOOLEAN: "BOOLEAN",
        TypeCategory.JSON: "JSONB",
        TypeCategory.BINARY: "BYTEA",
    }
    generic_text_type = "VARCHAR(255)"
    large_text_type = "TEXT"
    identifier_quotes = ('"', '"')
    # Unquoted identifiers fold to lower case.
    quote_mixed_case = True

    def datetime_type(self, source_raw_type: str) -> str:
        lowered = normalize_type(source_raw_type)
        if lowered == "date":
            return "DATE"
        if lowered == "time":
            return "TIME"
        if lowered in ("timestamptz", "timestamp with time zone", "datetimeoffset"):
            return "TIMESTAMPTZ"
        return "TIMESTAMP"

    def render_boolean(self, flag: bool, declared_type: str) -> str:
        # bit columns take bit-string literals, not boolean expressions.
        if base_type(declared_type) == "bit":
            return "B'1'" if flag else "B'0'"
        return "TRUE" if flag else "FALSE"

    def pagination_clause(self, offset: int, limit: int) -> str:
        return f"LIMIT {limit} OFFSET {offset}"

    def auto_increment_reference(self, table: str, column: str) -> str:
        return f"nextval('{table}_{column}_seq')"
