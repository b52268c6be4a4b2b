"""Dialect handler interface and shared literal formatting."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from ..utils.exceptions import UnsupportedDialectError
from ..values.classifier import (
    TypeCategory,
    base_type,
    classify,
    is_large_text,
    normalize_type,
)
from ..values.parser import (
    is_null,
    try_parse_boolean,
    try_parse_datetime,
    try_parse_decimal,
)

NULL_LITERAL = "NULL"

_IDENTIFIER_SAFE = re.compile(r"^[A-Za-z0-9_]+$")
_LENGTH_SUFFIX = re.compile(r"\(\s*(\d+)\s*\)")
_TIME_FORMATS = ("%H:%M:%S", "%H:%M", "%H:%M:%S.%f")


class Dialect(Enum):
    """Supported target SQL dialects."""

    MYSQL = "mysql"
    ORACLE = "oracle"
    POSTGRESQL = "postgresql"
    SQLSERVER = "sqlserver"

    @classmethod
    def parse(cls, name: str | Dialect) -> Dialect:
        """
        Resolve a dialect from its name or a common alias.

        Raises:
            UnsupportedDialectError: If the name matches no dialect
        """
        if isinstance(name, Dialect):
            return name
        key = (name or "").strip().lower().replace(" ", "").replace("_", "")
        aliases = {
            "mysql": cls.MYSQL,
            "mariadb": cls.MYSQL,
            "oracle": cls.ORACLE,
            "postgresql": cls.POSTGRESQL,
            "postgres": cls.POSTGRESQL,
            "pg": cls.POSTGRESQL,
            "sqlserver": cls.SQLSERVER,
            "mssql": cls.SQLSERVER,
            "tsql": cls.SQLSERVER,
        }
        if key not in aliases:
            raise UnsupportedDialectError(f"Unsupported SQL dialect: {name!r}")
        return aliases[key]


class DialectHandler(ABC):
    """
    Per-dialect type mapping, literal formatting and identifier quoting.

    Subclasses fill in the lookup tables and the few rendering hooks that
    genuinely differ between engines. Nothing here raises on unexpected
    input: unknown categories fall back to the generic text type and
    unusable values to the NULL literal.
    """

    dialect: Dialect
    reserved_words: frozenset[str] = frozenset()
    type_map: dict[TypeCategory, str] = {}
    generic_text_type = "VARCHAR(255)"
    large_text_type = "TEXT"
    identifier_quotes: tuple[str, str] = ('"', '"')
    quote_mixed_case = False
    escape_backslashes = False
    boolean_storage_types: frozenset[str] = frozenset()
    date_has_no_time = True
    requires_explicit_identity = False

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def equivalent_type(self, category: TypeCategory, source_raw_type: str = "") -> str:
        """
        Declared type in this dialect for a semantic category.

        Args:
            category: Semantic category of the source column
            source_raw_type: Original type name, used for length and
                large-text detection

        Returns:
            Type name, never empty
        """
        if category is TypeCategory.STRING:
            if is_large_text(source_raw_type):
                return self.large_text_type
            length = _declared_length(source_raw_type)
            if length is not None:
                return self.sized_string_type(length)
        if category is TypeCategory.DATETIME:
            return self.datetime_type(source_raw_type)
        return self.type_map.get(category, self.generic_text_type)

    def sized_string_type(self, length: int) -> str:
        return f"VARCHAR({length})"

    def datetime_type(self, source_raw_type: str) -> str:
        return self.type_map.get(TypeCategory.DATETIME, self.generic_text_type)

    # ------------------------------------------------------------------
    # Literals
    # ------------------------------------------------------------------

    def format_literal(self, value: Any, declared_type: str | None = None) -> str:
        """
        Render a value as a SQL literal for a column of the declared type.

        Empty values and the NULL sentinel give NULL. Numeric columns only
        accept values that parse as decimals. Date columns only accept
        values that parse as dates. Boolean columns render ambiguous input
        as false.
        """
        if is_null(value):
            return NULL_LITERAL

        if isinstance(value, bool) and not declared_type:
            return self.render_boolean(value, "boolean")

        if self.is_boolean_storage(declared_type):
            return self._format_boolean(value, declared_type or "")

        category = classify(declared_type)

        if category in (TypeCategory.INTEGER, TypeCategory.DECIMAL):
            return self._format_number(value)

        if category is TypeCategory.DATETIME:
            return self._format_datetime(value, declared_type or "")

        if not declared_type:
            if isinstance(value, (int, float, Decimal)):
                return self._format_number(value)
            if isinstance(value, (datetime, date)):
                return self._format_datetime(value, "timestamp")

        return self.quote_string(_as_text(value))

    def quote_string(self, text: str) -> str:
        """Wrap text in single quotes, escaping embedded quotes."""
        escaped = text
        if self.escape_backslashes:
            escaped = escaped.replace("\\", "\\\\")
        escaped = escaped.replace("'", "''")
        return f"'{escaped}'"

    def unescape_literal(self, literal: str) -> str | None:
        """
        Recover the original text from a quoted string literal.

        Returns:
            The unquoted text, or None for the NULL literal and anything
            that is not a single well-formed string literal
        """
        if literal.strip().upper() == NULL_LITERAL:
            return None
        if len(literal) < 2 or literal[0] != "'" or literal[-1] != "'":
            return None

        body = literal[1:-1]
        chars: list[str] = []
        i = 0
        while i < len(body):
            char = body[i]
            if char == "'":
                if i + 1 < len(body) and body[i + 1] == "'":
                    chars.append("'")
                    i += 2
                    continue
                return None
            if char == "\\" and self.escape_backslashes:
                if i + 1 < len(body):
                    chars.append(body[i + 1])
                    i += 2
                    continue
                return None
            chars.append(char)
            i += 1
        return "".join(chars)

    def is_boolean_storage(self, declared_type: str | None) -> bool:
        """Whether values for this declared type are rendered as booleans."""
        if not declared_type:
            return False
        if classify(declared_type) is TypeCategory.BOOLEAN:
            return True
        return normalize_type(declared_type).replace(" ", "") in self.boolean_storage_types

    def render_boolean(self, flag: bool, declared_type: str) -> str:
        return "TRUE" if flag else "FALSE"

    def render_date(self, value: date) -> str:
        return f"'{value:%Y-%m-%d}'"

    def render_timestamp(self, value: datetime) -> str:
        return f"'{value:%Y-%m-%d %H:%M:%S}'"

    def render_time(self, value: time) -> str:
        return f"'{value:%H:%M:%S}'"

    def _format_boolean(self, value: Any, declared_type: str) -> str:
        if isinstance(value, bool):
            flag = value
        else:
            flag, ok = try_parse_boolean(_as_text(value))
            if not ok:
                flag = False
        return self.render_boolean(flag, declared_type)

    def _format_number(self, value: Any) -> str:
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float) and value != value:
            return NULL_LITERAL
        parsed, ok = try_parse_decimal(_as_text(value))
        if not ok:
            return NULL_LITERAL
        return format(parsed, "f")

    def _format_datetime(self, value: Any, declared_type: str) -> str:
        kind = base_type(declared_type)

        if kind == "time":
            parsed_time = _parse_time(value)
            return self.render_time(parsed_time) if parsed_time else NULL_LITERAL

        if isinstance(value, datetime):
            parsed: datetime | None = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time())
        else:
            parsed, ok = try_parse_datetime(_as_text(value))
            if not ok:
                parsed = None
        if parsed is None:
            return NULL_LITERAL

        if kind == "date" and self.date_has_no_time:
            return self.render_date(parsed.date())
        return self.render_timestamp(parsed)

    # ------------------------------------------------------------------
    # Identifiers and statement idioms
    # ------------------------------------------------------------------

    def escape_identifier(self, identifier: str) -> str:
        """Quote an identifier only when the dialect requires it."""
        if not identifier:
            return identifier
        if not self.needs_quoting(identifier):
            return identifier
        opening, closing = self.identifier_quotes
        escaped = identifier.replace(closing, closing * 2)
        return f"{opening}{escaped}{closing}"

    def needs_quoting(self, identifier: str) -> bool:
        if identifier.upper() in self.reserved_words:
            return True
        if not _IDENTIFIER_SAFE.match(identifier):
            return True
        if identifier[0].isdigit():
            return True
        if self.quote_mixed_case and identifier not in (
            identifier.upper(),
            identifier.lower(),
        ):
            return True
        return False

    def qualified_name(self, name: str) -> str:
        """Escape each dot-separated part of a possibly qualified name."""
        return ".".join(self.escape_identifier(part) for part in name.split("."))

    @property
    def statement_terminator(self) -> str:
        return ";"

    @property
    def transaction_begin(self) -> str | None:
        """Statement opening an explicit transaction, if the dialect needs one."""
        return "BEGIN;"

    @property
    def transaction_commit(self) -> str:
        return "COMMIT;"

    @abstractmethod
    def pagination_clause(self, offset: int, limit: int) -> str:
        """Clause restricting a SELECT to ``limit`` rows after ``offset``."""

    @abstractmethod
    def auto_increment_reference(self, table: str, column: str) -> str:
        """Idiom that yields the next identity value for a column."""

    def convert_date_function(self, expression: str) -> str:
        """Rewrite a MySQL-style date expression for this dialect."""
        return expression

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _declared_length(raw_type: str) -> int | None:
    match = _LENGTH_SUFFIX.search(raw_type or "")
    if match and classify(raw_type) is TypeCategory.STRING:
        return int(match.group(1))
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _parse_time(value: Any) -> time | None:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    text = _as_text(value).strip().strip("'\"")
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    parsed, ok = try_parse_datetime(text)
    return parsed.time() if ok and parsed else None
