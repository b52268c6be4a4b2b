"""INSERT statement rendering and script assembly."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from .. import __version__
from ..dialects.base import DialectHandler
from ..graph.models import ColumnSchema, InsertStatement, SchemaGraph, TableSchema
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

_COLUMN_LIST = re.compile(
    r"^\s*INSERT\s+INTO\s+.+?\((?P<columns>[^)]*)\)\s*VALUES",
    re.IGNORECASE | re.DOTALL,
)


class SQLGenerator:
    """Renders generated rows as INSERT statements for one dialect."""

    def __init__(self, handler: DialectHandler) -> None:
        """
        Initialize SQL generator.

        Args:
            handler: Dialect used for identifiers, literals and terminators
        """
        self.handler = handler

    def insertable_columns(self, table: TableSchema) -> list[ColumnSchema]:
        """Columns that receive explicit values, in declaration order."""
        return [
            column
            for column in table.columns
            if not column.is_generated
            and (not column.is_identity or self.handler.requires_explicit_identity)
        ]

    def render_insert(self, table: TableSchema, row: dict[str, Any]) -> str:
        """
        Render a single-row INSERT.

        Only insertable columns present in ``row`` are listed. Values are
        formatted against the column's declared type.
        """
        columns = [c for c in self.insertable_columns(table) if c.name in row]
        column_list = ", ".join(self.handler.escape_identifier(c.name) for c in columns)
        values = ", ".join(
            self.handler.format_literal(row[c.name], c.data_type) for c in columns
        )
        target = self.handler.qualified_name(table.full_name)
        return (
            f"INSERT INTO {target} ({column_list}) VALUES ({values})"
            f"{self.handler.statement_terminator}"
        )

    def build_statement(self, table: TableSchema, row: dict[str, Any]) -> InsertStatement:
        """Render a row and tag it with its execution priority."""
        return InsertStatement(
            table_name=table.name,
            sql=self.render_insert(table, row),
            priority=1 if table.foreign_keys else 0,
        )

    def leaked_columns(self, statement: InsertStatement, table: TableSchema) -> list[str]:
        """Generated columns that appear in a statement's column list."""
        match = _COLUMN_LIST.match(statement.sql)
        if not match:
            return []
        opening, closing = self.handler.identifier_quotes
        listed = {
            name.strip().strip(opening).strip(closing).lower()
            for name in match.group("columns").split(",")
        }
        return [
            column.name
            for column in table.columns
            if column.is_generated and column.name.lower() in listed
        ]

    def validate_statements(
        self, statements: Iterable[InsertStatement], schema: SchemaGraph
    ) -> list[str]:
        """
        Check that no database-generated column received a value.

        Returns:
            One message per offending statement
        """
        problems = []
        for statement in statements:
            table = schema.get(statement.table_name)
            if table is None:
                continue
            leaked = self.leaked_columns(statement, table)
            if leaked:
                problems.append(
                    f"Generated column(s) {', '.join(leaked)} present in INSERT "
                    f"for {statement.table_name}"
                )
        return problems

    def generate_script(
        self,
        statements: Sequence[InsertStatement],
        include_transaction: bool = True,
    ) -> str:
        """
        Assemble statements into an executable script.

        Statements keep their order and are grouped under one comment per
        consecutive run of the same table.

        Args:
            statements: Statements in insertion order
            include_transaction: Wrap in the dialect's transaction statements

        Returns:
            Complete SQL script
        """
        lines = [
            f"-- Generated by sqlseed v{__version__}",
            f"-- Date: {datetime.now():%Y-%m-%d %H:%M:%S}",
            f"-- Dialect: {self.handler.dialect.value}",
            f"-- Records: {len(statements)}",
            "",
        ]

        if include_transaction and self.handler.transaction_begin:
            lines.append(self.handler.transaction_begin)
            lines.append("")

        for table_name, group in _group_by_table(statements):
            lines.append(f"-- Table: {table_name} ({len(group)} records)")
            for statement in group:
                sql = statement.sql
                if not sql.rstrip().endswith(";"):
                    sql = f"{sql};"
                lines.append(sql)
            lines.append("")

        if include_transaction:
            lines.append(self.handler.transaction_commit)
            lines.append("")

        logger.debug(f"Rendered script with {len(statements)} statements")
        return "\n".join(lines)


def _group_by_table(
    statements: Sequence[InsertStatement],
) -> list[tuple[str, list[InsertStatement]]]:
    groups: list[tuple[str, list[InsertStatement]]] = []
    for statement in statements:
        if groups and groups[-1][0] == statement.table_name:
            groups[-1][1].append(statement)
        else:
            groups.append((statement.table_name, [statement]))
    return groups
