"""Schema metadata loading from a JSON document."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import replace
from pathlib import Path
from typing import Any, Protocol

from ..graph.models import ColumnSchema, ForeignKey, SchemaGraph, TableSchema
from ..utils.exceptions import SchemaError
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class SchemaProvider(Protocol):
    """Source of table metadata for a generation run."""

    def load_schema(self, table_names: Iterable[str] | None = None) -> SchemaGraph:
        """Return a schema graph covering at least the requested tables."""
        ...


class JsonSchemaProvider:
    """
    Loads table metadata from a JSON document.

    The document is either a list of tables or an object with a ``tables``
    list. Each table looks like::

        {
            "name": "orders",
            "schema": "sales",
            "columns": [
                {"name": "id", "type": "int", "nullable": false,
                 "primary_key": true, "identity": true},
                {"name": "status", "type": "varchar(20)", "max_length": 20,
                 "enum": ["new", "paid"]}
            ],
            "primary_keys": ["id"],
            "foreign_keys": [
                {"name": "fk_orders_customer", "column": "customer_id",
                 "referenced_table": "customers", "referenced_column": "id"}
            ]
        }

    A table whose foreign key entries are malformed is loaded without
    foreign keys and a warning is recorded.
    """

    def __init__(self, source: str | Path | dict[str, Any] | list[Any]) -> None:
        self.source = source
        self.warnings: list[str] = []
        self._graph: SchemaGraph | None = None

    def load_schema(self, table_names: Iterable[str] | None = None) -> SchemaGraph:
        """
        Load the schema graph.

        Args:
            table_names: Tables of interest. When given, the graph is limited
                to these tables and everything they reference. Names missing
                from the document are skipped.

        Returns:
            SchemaGraph

        Raises:
            SchemaError: If the document cannot be read or is malformed
        """
        if self._graph is None:
            self._graph = SchemaGraph(
                self._parse_table(raw) for raw in self._table_entries()
            )
            logger.info(f"Loaded schema with {len(self._graph)} tables")

        if table_names is None:
            return self._graph

        wanted: list[TableSchema] = []
        seen: set[str] = set()
        pending = list(table_names)
        while pending:
            name = pending.pop(0)
            table = self._graph.get(name)
            if table is None:
                logger.debug(f"Table {name} not found in schema document")
                continue
            if table.name.lower() in seen:
                continue
            seen.add(table.name.lower())
            wanted.append(table)
            pending.extend(table.referenced_tables)

        return SchemaGraph(wanted)

    def _read_document(self) -> Any:
        if isinstance(self.source, (dict, list)):
            return self.source

        path = Path(self.source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaError(f"Cannot read schema file {path}: {e}") from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Invalid JSON in schema file {path}: {e}") from e

    def _table_entries(self) -> list[dict[str, Any]]:
        document = self._read_document()
        entries = document.get("tables") if isinstance(document, dict) else document
        if not isinstance(entries, list):
            raise SchemaError("Schema document must contain a list of tables")
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("name"):
                raise SchemaError(f"Table entry without a name: {entry!r}")
        return entries

    def _parse_table(self, raw: dict[str, Any]) -> TableSchema:
        name = str(raw["name"])
        columns = tuple(self._parse_column(name, c) for c in raw.get("columns", []))

        primary_keys = {str(pk) for pk in raw.get("primary_keys", [])}
        primary_keys |= {c.name for c in columns if c.is_primary_key}
        columns = tuple(
            _mark_primary_key(c) if c.name in primary_keys else c for c in columns
        )

        return TableSchema(
            name=name,
            columns=columns,
            primary_keys=frozenset(primary_keys),
            foreign_keys=self._parse_foreign_keys(name, raw.get("foreign_keys", [])),
            schema_name=raw.get("schema"),
        )

    def _parse_column(self, table: str, raw: Any) -> ColumnSchema:
        if not isinstance(raw, dict) or not raw.get("name"):
            raise SchemaError(f"Malformed column in table {table}: {raw!r}")

        try:
            return ColumnSchema(
                name=str(raw["name"]),
                data_type=str(raw.get("type") or raw.get("data_type") or ""),
                nullable=bool(raw.get("nullable", True)),
                max_length=_optional_int(raw.get("max_length")),
                precision=_optional_int(raw.get("precision")),
                scale=_optional_int(raw.get("scale")),
                is_primary_key=bool(raw.get("primary_key", False)),
                is_identity=bool(raw.get("identity", False)),
                is_generated=bool(raw.get("generated", False)),
                is_unique=bool(raw.get("unique", False)),
                enum_values=tuple(str(v) for v in raw.get("enum", None) or ()),
                default=None if raw.get("default") is None else str(raw["default"]),
            )
        except (TypeError, ValueError) as e:
            raise SchemaError(
                f"Malformed column {raw.get('name')} in table {table}: {e}"
            ) from e

    def _parse_foreign_keys(self, table: str, raw: Any) -> tuple[ForeignKey, ...]:
        try:
            if not isinstance(raw, list):
                raise ValueError("foreign_keys must be a list")
            return tuple(
                ForeignKey(
                    constraint_name=str(
                        fk.get("name") or f"fk_{table}_{fk['column']}"
                    ),
                    column=str(fk["column"]),
                    referenced_table=str(fk["referenced_table"]),
                    referenced_column=str(fk.get("referenced_column") or "id"),
                )
                for fk in raw
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            message = (
                f"Foreign key metadata for {table} could not be loaded ({e}); "
                "treating table as having no foreign keys"
            )
            logger.warning(message)
            self.warnings.append(message)
            return ()


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def _mark_primary_key(column: ColumnSchema) -> ColumnSchema:
    if column.is_primary_key:
        return column
    return replace(column, is_primary_key=True)
