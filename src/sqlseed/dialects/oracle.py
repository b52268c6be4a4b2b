"""Oracle dialect handler."""

from __future__ import annotations

import re
from datetime import date, datetime

from ..values.classifier import TypeCategory, normalize_type
from .base import Dialect, DialectHandler

ORACLE_RESERVED_WORDS = frozenset(
    {
        "ACCESS", "ADD", "ALL", "ALTER", "AND", "ANY", "AS", "ASC", "AUDIT",
        "BETWEEN", "BY", "CHAR", "CHECK", "CLUSTER", "COLUMN", "COMMENT",
        "COMPRESS", "CONNECT", "CREATE", "CURRENT", "DATE", "DECIMAL",
        "DEFAULT", "DELETE", "DESC", "DISTINCT", "DROP", "ELSE", "EXCLUSIVE",
        "EXISTS", "FILE", "FLOAT", "FOR", "FROM", "GRANT", "GROUP", "HAVING",
        "IDENTIFIED", "IMMEDIATE", "IN", "INCREMENT", "INDEX", "INITIAL",
        "INSERT", "INTEGER", "INTERSECT", "INTO", "IS", "LEVEL", "LIKE",
        "LOCK", "LONG", "MAXEXTENTS", "MINUS", "MLSLABEL", "MODE", "MODIFY",
        "NOAUDIT", "NOCOMPRESS", "NOT", "NOWAIT", "NULL", "NUMBER", "OF",
        "OFFLINE", "ON", "ONLINE", "OPTION", "OR", "ORDER", "PCTFREE",
        "PRIOR", "PUBLIC", "RAW", "RENAME", "RESOURCE", "REVOKE", "ROW",
        "ROWID", "ROWNUM", "ROWS", "SELECT", "SESSION", "SET", "SHARE",
        "SIZE", "SMALLINT", "START", "SUCCESSFUL", "SYNONYM", "SYSDATE",
        "TABLE", "THEN", "TO", "TRIGGER", "UID", "UNION", "UNIQUE", "UPDATE",
        "USER", "VALIDATE", "VALUES", "VARCHAR", "VARCHAR2", "VIEW",
        "WHENEVER", "WHERE", "WITH", "TYPE",
    }
)  # fmt: skip

_DATE_ADD = re.compile(
    r"DATE_ADD\s*\(\s*(.+?)\s*,\s*INTERVAL\s+(\d+)\s+DAY\s*\)", re.IGNORECASE
)
_DATE_SUB = re.compile(
    r"DATE_SUB\s*\(\s*(.+?)\s*,\s*INTERVAL\s+(\d+)\s+DAY\s*\)", re.IGNORECASE
)
_DATE_PART = re.compile(r"\b(YEAR|MONTH|DAY)\s*\(\s*([^()]+?)\s*\)", re.IGNORECASE)

_FUNCTION_MAP = (
    (re.compile(r"\bNOW\s*\(\s*\)", re.IGNORECASE), "SYSDATE"),
    (re.compile(r"\bCURDATE\s*\(\s*\)", re.IGNORECASE), "TRUNC(SYSDATE)"),
    (re.compile(r"\bCURTIME\s*\(\s*\)", re.IGNORECASE), "SYSTIMESTAMP"),
    (re.compile(r"\bCURRENT_TIMESTAMP\b(\s*\(\s*\))?", re.IGNORECASE), "SYSTIMESTAMP"),
)


class OracleDialectHandler(DialectHandler):
    """
    Oracle Database.

    Oracle has no boolean column type; flags are stored as NUMBER(1) and
    rendered as 1/0. Date literals go through TO_DATE/TO_TIMESTAMP so they
    do not depend on the session's NLS settings.
    """

    dialect = Dialect.ORACLE
    reserved_words = ORACLE_RESERVED_WORDS
    type_map = {
        TypeCategory.INTEGER: "NUMBER",
        TypeCategory.DECIMAL: "NUMBER",
        TypeCategory.STRING: "VARCHAR2(255)",
        TypeCategory.DATETIME: "TIMESTAMP",
        TypeCategory.BOOLEAN: "NUMBER(1)",
        TypeCategory.JSON: "CLOB",
        TypeCategory.BINARY: "BLOB",
        TypeCategory.ENUM: "VARCHAR2(50)",
    }
    generic_text_type = "VARCHAR2(255)"
    large_text_type = "CLOB"
    identifier_quotes = ('"', '"')
    quote_mixed_case = True
    boolean_storage_types = frozenset({"number(1)"})

    def sized_string_type(self, length: int) -> str:
        return f"VARCHAR2({length})"

    def datetime_type(self, source_raw_type: str) -> str:
        if normalize_type(source_raw_type) == "date":
            return "DATE"
        return "TIMESTAMP"

    def render_boolean(self, flag: bool, declared_type: str) -> str:
        return "1" if flag else "0"

    def render_date(self, value: date) -> str:
        return f"TO_DATE('{value:%Y-%m-%d}', 'YYYY-MM-DD')"

    def render_timestamp(self, value: datetime) -> str:
        return f"TO_TIMESTAMP('{value:%Y-%m-%d %H:%M:%S}', 'YYYY-MM-DD HH24:MI:SS')"

    @property
    def statement_terminator(self) -> str:
        return ""

    @property
    def transaction_begin(self) -> str | None:
        # Oracle opens a transaction implicitly with the first DML statement.
        return None

    def pagination_clause(self, offset: int, limit: int) -> str:
        if offset:
            # ROWNUM is assigned after filtering, so it cannot skip rows.
            return f"OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"
        return f"WHERE ROWNUM <= {limit}"

    def auto_increment_reference(self, table: str, column: str) -> str:
        return f"{table}_seq.NEXTVAL"

    def convert_date_function(self, expression: str) -> str:
        converted = expression
        for pattern, replacement in _FUNCTION_MAP:
            converted = pattern.sub(replacement, converted)
        converted = _DATE_ADD.sub(r"\1 + \2", converted)
        converted = _DATE_SUB.sub(r"\1 - \2", converted)
        converted = _DATE_PART.sub(
            lambda m: f"EXTRACT({m.group(1).upper()} FROM {m.group(2)})", converted
        )
        return converted
