"""MySQL dialect handler."""

from __future__ import annotations

import re

from ..values.classifier import TypeCategory, normalize_type
from .base import Dialect, DialectHandler

MYSQL_RESERVED_WORDS = frozenset(
    {
        "SELECT", "FROM", "WHERE", "INSERT", "UPDATE", "DELETE", "CREATE",
        "DROP", "ALTER", "TABLE", "INDEX", "VIEW", "TRIGGER", "PROCEDURE",
        "FUNCTION", "EVENT", "SCHEMA", "DATABASE", "USER", "GRANT", "REVOKE",
        "COMMIT", "ROLLBACK", "START", "TRANSACTION", "SAVEPOINT", "LOCK",
        "UNLOCK", "SHOW", "DESCRIBE", "EXPLAIN", "USE", "SET", "RESET",
        "ORDER", "GROUP", "HAVING", "UNION", "INTERSECT", "EXCEPT", "ALL",
        "DISTINCT", "AS", "IN", "EXISTS", "BETWEEN", "LIKE", "IS", "AND",
        "OR", "NOT", "ANY", "SOME", "CASE", "WHEN", "THEN", "ELSE", "END",
        "IF", "IFNULL", "NULLIF", "COALESCE", "GREATEST", "LEAST", "KEY",
        "KEYS", "RANGE", "RANK", "ROWS", "STATUS",
    }
)  # fmt: skip

_ENUM_KEYWORD = re.compile(r"^enum\s*\(", re.IGNORECASE)


class MySqlDialectHandler(DialectHandler):
    """MySQL and MariaDB."""

    dialect = Dialect.MYSQL
    reserved_words = MYSQL_RESERVED_WORDS
    type_map = {
        TypeCategory.INTEGER: "INT",
        TypeCategory.DECIMAL: "DECIMAL",
        TypeCategory.STRING: "VARCHAR(255)",
        TypeCategory.DATETIME: "DATETIME",
        TypeCategory.BOOLEAN: "TINYINT(1)",
        TypeCategory.JSON: "JSON",
        TypeCategory.BINARY: "BLOB",
    }
    generic_text_type = "VARCHAR(255)"
    large_text_type = "LONGTEXT"
    identifier_quotes = ("`", "`")
    escape_backslashes = True
    boolean_storage_types = frozenset({"tinyint(1)"})

    def equivalent_type(self, category: TypeCategory, source_raw_type: str = "") -> str:
        if category is TypeCategory.ENUM and source_raw_type:
            return _ENUM_KEYWORD.sub("ENUM(", source_raw_type.strip(), count=1)
        return super().equivalent_type(category, source_raw_type)

    def datetime_type(self, source_raw_type: str) -> str:
        lowered = normalize_type(source_raw_type)
        if lowered == "date":
            return "DATE"
        if lowered == "time":
            return "TIME"
        return "DATETIME"

    def render_boolean(self, flag: bool, declared_type: str) -> str:
        if normalize_type(declared_type).replace(" ", "") == "tinyint(1)":
            return "1" if flag else "0"
        return "TRUE" if flag else "FALSE"

    @property
    def transaction_begin(self) -> str | None:
        return "START TRANSACTION;"

    def pagination_clause(self, offset: int, limit: int) -> str:
        return f"LIMIT {limit} OFFSET {offset}"

    def auto_increment_reference(self, table: str, column: str) -> str:
        return "AUTO_INCREMENT"
