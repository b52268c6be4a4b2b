"""
Best-effort lexical extraction of tables, aliases and predicates from SQL.

This is not a parser. Table references are recovered from the tokens that
follow FROM, JOIN, INTO and UPDATE; nested subqueries, CTEs and vendor
extensions may be missed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..graph.models import SqlPredicate
from ..utils.exceptions import TableExtractionError
from ..utils.logging_config import get_logger
from ..values.parser import parse_in_clause_values

logger = get_logger(__name__)

SQL_KEYWORDS = frozenset(
    {
        "SELECT", "FROM", "WHERE", "JOIN", "INNER", "LEFT", "RIGHT", "FULL",
        "OUTER", "CROSS", "ON", "AND", "OR", "NOT", "NULL", "TRUE", "FALSE",
        "ORDER", "BY", "GROUP", "HAVING", "LIMIT", "OFFSET", "UNION", "ALL",
        "DISTINCT", "AS", "CASE", "WHEN", "THEN", "ELSE", "END", "IN",
        "EXISTS", "BETWEEN", "LIKE", "IS", "ASC", "DESC", "SET", "VALUES",
        "USING", "INTO", "UPDATE", "INSERT", "DELETE", "FETCH", "WITH",
    }
)  # fmt: skip

# A table reference: optional schema qualifier, then a bare, bracketed or
# backticked name, then an optional alias.
_TABLE_REF = (
    r"(?:(?:\[[^\]]+\]|`[^`]+`|\"[^\"]+\"|\w+)\.)?"
    r"(?:\[(?P<bracket>[^\]]+)\]|`(?P<backtick>[^`]+)`|\"(?P<quoted>[^\"]+)\"|(?P<bare>\w+))"
    r"(?:\s+(?:AS\s+)?(?P<alias>\w+))?"
)

_TABLE_PATTERNS = (
    re.compile(r"\bFROM\s+" + _TABLE_REF, re.IGNORECASE),
    re.compile(
        r"\b(?:(?:INNER|LEFT|RIGHT|FULL|CROSS)\s+)?(?:OUTER\s+)?JOIN\s+" + _TABLE_REF,
        re.IGNORECASE,
    ),
    re.compile(r"\bINTO\s+" + _TABLE_REF, re.IGNORECASE),
    re.compile(r"\bUPDATE\s+" + _TABLE_REF, re.IGNORECASE),
)

# Additional comma-separated entries in a FROM list: "FROM a x, b y".
_FROM_LIST = re.compile(
    r"\bFROM\s+(?P<body>.+?)(?=\bWHERE\b|\bJOIN\b|\bINNER\b|\bLEFT\b|\bRIGHT\b"
    r"|\bFULL\b|\bCROSS\b|\bGROUP\b|\bORDER\b|\bHAVING\b|\bLIMIT\b|\bUNION\b|\)|;|$)",
    re.IGNORECASE | re.DOTALL,
)

_FALLBACK_PATTERN = re.compile(r"\b(?:FROM|JOIN|INTO|UPDATE)\s+(\w+)", re.IGNORECASE)

_LINE_COMMENT = re.compile(r"--[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")

_WHERE_CLAUSE = re.compile(
    r"\bWHERE\b(?P<body>.*?)(?=\bGROUP\s+BY\b|\bORDER\s+BY\b|\bHAVING\b|\bLIMIT\b|\bUNION\b|;|$)",
    re.IGNORECASE | re.DOTALL,
)

_LITERAL = r"('(?:[^']|'')*'|-?\d+(?:\.\d+)?|\w+)"

_COMPARISON = re.compile(
    r"(\w+)\.(\w+)\s*(<=|>=|<>|!=|=|<|>)\s*" + _LITERAL,
    re.IGNORECASE,
)
_LIKE = re.compile(
    r"(\w+)\.(\w+)\s+(NOT\s+LIKE|LIKE)\s+('(?:[^']|'')*')",
    re.IGNORECASE,
)
_IN_LIST = re.compile(r"(\w+)\.(\w+)\s+IN\s*(\([^)]*\))", re.IGNORECASE)
_YEAR_EQUALS = re.compile(
    r"YEAR\s*\(\s*(\w+)\.(\w+)\s*\)\s*=\s*(\d{4})",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ExtractionResult:
    """Tables and aliases recovered from a query, or the lack of them."""

    tables: tuple[str, ...] = ()
    aliases: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether at least one table was found."""
        return bool(self.tables)

    def require(self) -> tuple[str, ...]:
        """
        Return the tables or fail.

        Raises:
            TableExtractionError: If no table could be extracted
        """
        if not self.ok:
            raise TableExtractionError(self.error or "No tables found in query")
        return self.tables


def strip_comments(sql: str) -> str:
    """Remove ``--`` line comments and ``/* */`` block comments."""
    without_blocks = _BLOCK_COMMENT.sub(" ", sql)
    return _LINE_COMMENT.sub(" ", without_blocks)


def strip_string_literals(sql: str) -> str:
    """Replace single-quoted literals with empty ones so their text is not scanned."""
    return _STRING_LITERAL.sub("''", sql)


def extract_tables(sql: str | None) -> ExtractionResult:
    """
    Extract referenced tables and explicit aliases from query text.

    Args:
        sql: Query text

    Returns:
        ExtractionResult with table names in first-seen order
    """
    if not sql or not sql.strip():
        return ExtractionResult(error="Query is empty")

    cleaned = strip_string_literals(strip_comments(sql))
    tables: dict[str, str] = {}
    aliases: dict[str, str] = {}
    found: list[tuple[int, str, str | None]] = []

    for pattern in _TABLE_PATTERNS:
        for match in pattern.finditer(cleaned):
            found.append((match.start(), _table_name(match), match.group("alias")))

    for match in _FROM_LIST.finditer(cleaned):
        body = match.group("body")
        if "(" in body:
            continue
        offset = match.start("body")
        for index, part in enumerate(body.split(",")):
            if index:
                entry = re.match(r"\s*" + _TABLE_REF, part, re.IGNORECASE)
                if entry:
                    found.append((offset, _table_name(entry), entry.group("alias")))
            offset += len(part) + 1

    for _, table, alias in sorted(found, key=lambda item: item[0]):
        if not table or table.upper() in SQL_KEYWORDS:
            continue
        tables.setdefault(table.lower(), table)
        if alias and alias.upper() not in SQL_KEYWORDS:
            aliases.setdefault(alias.lower(), tables[table.lower()])

    if not tables:
        logger.debug("Primary table patterns matched nothing, trying fallback")
        for match in _FALLBACK_PATTERN.finditer(cleaned):
            table = match.group(1)
            if table.upper() not in SQL_KEYWORDS:
                tables.setdefault(table.lower(), table)

    if not tables:
        return ExtractionResult(error="No tables found in query")

    logger.debug(f"Extracted tables: {', '.join(tables.values())}")
    return ExtractionResult(tables=tuple(tables.values()), aliases=aliases)


def extract_alias_map(
    sql: str | None, known_tables: Iterable[str] | None = None
) -> dict[str, str]:
    """
    Map each alias used in the query to its table.

    Explicit bindings come from the FROM/JOIN clauses. When ``known_tables``
    is given, qualifiers used in column references that were never bound
    explicitly are resolved with :func:`resolve_alias`.

    Keys are lower-cased aliases.
    """
    result = extract_tables(sql)
    alias_map = dict(result.aliases)
    if not known_tables or not sql:
        return alias_map

    candidates = list(known_tables)
    cleaned = strip_string_literals(strip_comments(sql))
    for qualifier in re.findall(r"\b([A-Za-z_]\w*)\.[A-Za-z_]", cleaned):
        key = qualifier.lower()
        if key in alias_map or qualifier.upper() in SQL_KEYWORDS:
            continue
        resolved = resolve_alias(qualifier, candidates)
        if resolved is not None:
            alias_map[key] = resolved
    return alias_map


def resolve_alias(alias: str, tables: Iterable[str]) -> str | None:
    """
    Guess which table an unbound alias refers to.

    Tried in order: exact name, prefix (aliases of up to three characters),
    acronym of the ``_``/``-`` separated name segments, then substring
    containment in either direction. The first hit wins. This is a
    heuristic and can pick the wrong table when names are similar.
    """
    lowered = alias.lower()
    candidates = list(tables)
    if not lowered:
        return None

    for table in candidates:
        if table.lower() == lowered:
            return table

    if len(lowered) <= 3:
        for table in candidates:
            if table.lower().startswith(lowered):
                return table

    for table in candidates:
        if _acronym(table) == lowered:
            return table

    for table in candidates:
        name = table.lower()
        if lowered in name or name in lowered:
            return table

    return None


def extract_predicates(
    sql: str | None, alias_map: dict[str, str] | None = None
) -> list[SqlPredicate]:
    """
    Collect ``alias.column <op> literal`` comparisons from the WHERE clause.

    Qualifiers are resolved through ``alias_map`` (keys compared without
    case); unknown qualifiers are assumed to be table names. Every
    predicate is kept, including several on the same column.
    """
    if not sql:
        return []

    aliases = {k.lower(): v for k, v in (alias_map or {}).items()}
    body = strip_comments(sql)
    predicates: list[SqlPredicate] = []

    for where in _WHERE_CLAUSE.finditer(body):
        clause = where.group("body")
        consumed: list[tuple[int, int]] = []

        for match in _YEAR_EQUALS.finditer(clause):
            consumed.append(match.span())
            predicates.append(
                SqlPredicate(
                    table=_resolve_qualifier(match.group(1), aliases),
                    column=match.group(2),
                    operator="YEAR_EQUALS",
                    value=match.group(3),
                )
            )

        for match in _IN_LIST.finditer(clause):
            consumed.append(match.span())
            values = tuple(parse_in_clause_values(match.group(3)))
            predicates.append(
                SqlPredicate(
                    table=_resolve_qualifier(match.group(1), aliases),
                    column=match.group(2),
                    operator="IN",
                    values=values,
                )
            )

        for match in _LIKE.finditer(clause):
            consumed.append(match.span())
            operator = " ".join(match.group(3).upper().split())
            predicates.append(
                SqlPredicate(
                    table=_resolve_qualifier(match.group(1), aliases),
                    column=match.group(2),
                    operator=operator,
                    value=_unquote(match.group(4)),
                )
            )

        for match in _COMPARISON.finditer(clause):
            if _overlaps(match.span(), consumed):
                continue
            literal = match.group(4)
            # Join conditions compare two columns, not a column and a literal.
            if re.match(r"[A-Za-z_]\w*\.\w+", clause[match.start(4) :]):
                continue
            if not literal.startswith("'") and literal.upper() in SQL_KEYWORDS:
                continue
            predicates.append(
                SqlPredicate(
                    table=_resolve_qualifier(match.group(1), aliases),
                    column=match.group(2),
                    operator=match.group(3),
                    value=_unquote(literal),
                )
            )

    return predicates


def _table_name(match: re.Match[str]) -> str:
    for group in ("bracket", "backtick", "quoted", "bare"):
        value = match.group(group)
        if value:
            return value.strip()
    return ""


def _acronym(table: str) -> str:
    segments = [s for s in re.split(r"[_\-]", table.lower()) if s]
    if len(segments) == 1:
        return segments[0][:2]
    return "".join(s[0] for s in segments)


def _resolve_qualifier(qualifier: str, aliases: dict[str, str]) -> str:
    return aliases.get(qualifier.lower(), qualifier)


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == "'" and literal[-1] == "'":
        return literal[1:-1].replace("''", "'")
    return literal


def _overlaps(span: tuple[int, int], consumed: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < c_end and c_start < end for c_start, c_end in consumed)
