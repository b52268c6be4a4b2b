"""SQL Server dialect handler."""

from __future__ import annotations

import re

from ..values.classifier import TypeCategory, normalize_type
from .base import Dialect, DialectHandler

SQLSERVER_RESERVED_WORDS = frozenset(
    {
        "ADD", "ALL", "ALTER", "AND", "ANY", "AS", "ASC", "AUTHORIZATION",
        "BACKUP", "BEGIN", "BETWEEN", "BREAK", "BROWSE", "BULK", "BY",
        "CASCADE", "CASE", "CHECK", "CHECKPOINT", "CLOSE", "CLUSTERED",
        "COALESCE", "COLLATE", "COLUMN", "COMMIT", "COMPUTE", "CONSTRAINT",
        "CONTAINS", "CONTINUE", "CONVERT", "CREATE", "CROSS", "CURRENT",
        "CURRENT_DATE", "CURRENT_TIME", "CURRENT_TIMESTAMP", "CURRENT_USER",
        "CURSOR", "DATABASE", "DEALLOCATE", "DECLARE", "DEFAULT", "DELETE",
        "DENY", "DESC", "DISTINCT", "DROP", "ELSE", "END", "EXCEPT", "EXEC",
        "EXECUTE", "EXISTS", "EXIT", "FETCH", "FILE", "FOR", "FOREIGN",
        "FROM", "FULL", "FUNCTION", "GOTO", "GRANT", "GROUP", "HAVING",
        "IDENTITY", "IF", "IN", "INDEX", "INNER", "INSERT", "INTERSECT",
        "INTO", "IS", "JOIN", "KEY", "KILL", "LEFT", "LIKE", "MERGE",
        "NOCHECK", "NOT", "NULL", "NULLIF", "OF", "OFF", "ON", "OPEN", "OR",
        "ORDER", "OUTER", "OVER", "PERCENT", "PIVOT", "PLAN", "PRIMARY",
        "PRINT", "PROC", "PROCEDURE", "PUBLIC", "RAISERROR", "READ",
        "REFERENCES", "RESTORE", "RETURN", "REVOKE", "RIGHT", "ROLLBACK",
        "ROWCOUNT", "RULE", "SAVE", "SCHEMA", "SELECT", "SESSION_USER", "SET",
        "SOME", "TABLE", "THEN", "TO", "TOP", "TRAN", "TRANSACTION",
        "TRIGGER", "TRUNCATE", "UNION", "UNIQUE", "UPDATE", "USE", "USER",
        "VALUES", "VIEW", "WHEN", "WHERE", "WHILE", "WITH",
    }
)  # fmt: skip

_FUNCTION_MAP = (
    (re.compile(r"\bNOW\s*\(\s*\)", re.IGNORECASE), "GETDATE()"),
    (re.compile(r"\bCURDATE\s*\(\s*\)", re.IGNORECASE), "CAST(GETDATE() AS DATE)"),
    (re.compile(r"\bCURTIME\s*\(\s*\)", re.IGNORECASE), "CAST(GETDATE() AS TIME)"),
)


class SqlServerDialectHandler(DialectHandler):
    """Microsoft SQL Server."""

    dialect = Dialect.SQLSERVER
    reserved_words = SQLSERVER_RESERVED_WORDS
    type_map = {
        TypeCategory.INTEGER: "INT",
        TypeCategory.DECIMAL: "DECIMAL",
        TypeCategory.STRING: "NVARCHAR(255)",
        TypeCategory.DATETIME: "DATETIME2",
        TypeCategory.BOOLEAN: "BIT",
        TypeCategory.JSON: "NVARCHAR(MAX)",
        TypeCategory.BINARY: "VARBINARY(MAX)",
    }
    generic_text_type = "NVARCHAR(255)"
    large_text_type = "NVARCHAR(MAX)"
    identifier_quotes = ("[", "]")

    def sized_string_type(self, length: int) -> str:
        return f"NVARCHAR({length})"

    def datetime_type(self, source_raw_type: str) -> str:
        lowered = normalize_type(source_raw_type)
        if lowered == "date":
            return "DATE"
        if lowered == "time":
            return "TIME"
        return "DATETIME2"

    def render_boolean(self, flag: bool, declared_type: str) -> str:
        return "1" if flag else "0"

    @property
    def transaction_begin(self) -> str | None:
        return "BEGIN TRANSACTION;"

    @property
    def transaction_commit(self) -> str:
        return "COMMIT TRANSACTION;"

    def pagination_clause(self, offset: int, limit: int) -> str:
        return f"OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"

    def auto_increment_reference(self, table: str, column: str) -> str:
        return "IDENTITY(1,1)"

    def convert_date_function(self, expression: str) -> str:
        converted = expression
        for pattern, replacement in _FUNCTION_MAP:
            converted = pattern.sub(replacement, converted)
        return converted
