"""Data models for schema metadata, resolution results and generated output."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..utils.exceptions import SchemaError


@dataclass(frozen=True)
class ColumnSchema:
    """Represents a database column."""

    name: str
    data_type: str  # Raw type name as reported by the schema provider
    nullable: bool = True
    max_length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_primary_key: bool = False
    is_identity: bool = False
    is_generated: bool = False  # Computed by the database, never inserted
    is_unique: bool = False
    enum_values: tuple[str, ...] = ()
    default: str | None = None


@dataclass(frozen=True)
class ForeignKey:
    """Represents a foreign key from a column to a referenced table."""

    constraint_name: str
    column: str
    referenced_table: str
    referenced_column: str

    def __hash__(self) -> int:
        """Make hashable for use in sets."""
        return hash(
            (
                self.column.lower(),
                self.referenced_table.lower(),
                self.referenced_column.lower(),
            )
        )


@dataclass(frozen=True)
class TableSchema:
    """Represents a database table with complete metadata."""

    name: str
    columns: tuple[ColumnSchema, ...] = ()
    primary_keys: frozenset[str] = frozenset()
    foreign_keys: tuple[ForeignKey, ...] = ()
    schema_name: str | None = None

    @property
    def full_name(self) -> str:
        """Get qualified table name when a schema is known."""
        if self.schema_name:
            return f"{self.schema_name}.{self.name}"
        return self.name

    def get_column(self, name: str) -> ColumnSchema | None:
        """Find a column by case-insensitive name."""
        lowered = name.lower()
        for column in self.columns:
            if column.name.lower() == lowered:
                return column
        return None

    def foreign_key_for(self, column_name: str) -> ForeignKey | None:
        """Find the foreign key owned by a column."""
        lowered = column_name.lower()
        for fk in self.foreign_keys:
            if fk.column.lower() == lowered:
                return fk
        return None

    @property
    def referenced_tables(self) -> list[str]:
        """Distinct referenced table names, in declaration order."""
        seen: set[str] = set()
        result = []
        for fk in self.foreign_keys:
            key = fk.referenced_table.lower()
            if key not in seen:
                seen.add(key)
                result.append(fk.referenced_table)
        return result


class SchemaGraph:
    """
    Case-insensitive mapping of table name to TableSchema.

    Built once per generation run and treated as read-only afterwards.
    """

    def __init__(self, tables: Iterable[TableSchema] = ()) -> None:
        self._tables: dict[str, TableSchema] = {}
        for table in tables:
            key = table.name.lower()
            if key in self._tables:
                raise SchemaError(f"Duplicate table name in schema: {table.name}")
            self._tables[key] = table

    def get(self, name: str) -> TableSchema | None:
        """Look up a table, ignoring case."""
        return self._tables.get(name.lower())

    def canonical_name(self, name: str) -> str:
        """Return the table's declared spelling, or the name itself if unknown."""
        table = self.get(name)
        return table.name if table else name

    @property
    def table_names(self) -> list[str]:
        """Declared table names in insertion order."""
        return [table.name for table in self._tables.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._tables

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(self._tables.values())

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        return f"SchemaGraph({', '.join(self.table_names)})"


@dataclass(frozen=True)
class DependencyClosure:
    """Tables required for a run and the order they must be inserted in."""

    required_tables: frozenset[str]
    insertion_order: tuple[str, ...]
    ignored_edges: tuple[tuple[str, str], ...] = ()  # (child, parent) cycle edges

    @property
    def has_cycles(self) -> bool:
        """Whether ordering had to break a foreign key cycle."""
        return bool(self.ignored_edges)


class ConstraintKind(Enum):
    """Declarative column constraint kinds."""

    NOT_NULL = "NOT_NULL"
    LENGTH = "LENGTH"
    ENUM = "ENUM"
    UNIQUE = "UNIQUE"


@dataclass(frozen=True)
class ColumnConstraint:
    """A symbolic constraint handed to the value generator."""

    kind: ConstraintKind
    max_length: int | None = None
    allowed_values: tuple[str, ...] = ()

    def describe(self) -> str:
        """Human-readable form used in prompts and logs."""
        if self.kind is ConstraintKind.LENGTH:
            return f"Maximum length: {self.max_length}"
        if self.kind is ConstraintKind.ENUM:
            return f"Must be one of: {', '.join(self.allowed_values)}"
        if self.kind is ConstraintKind.NOT_NULL:
            return "Value is required"
        return "Value must be unique"


@dataclass(frozen=True)
class SqlPredicate:
    """A comparison extracted from a query's WHERE clause."""

    table: str
    column: str
    operator: str  # =, !=, <>, <, <=, >, >=, LIKE, NOT LIKE, IN, YEAR_EQUALS
    value: str | None = None
    values: tuple[str, ...] = ()  # IN list members


@dataclass(frozen=True)
class RelationshipHint:
    """Reference from a column to a parent table."""

    referenced_table: str
    referenced_column: str
    source: str = "foreign_key"  # foreign_key | naming_convention


@dataclass(frozen=True)
class BusinessHints:
    """Domain hints derived from table and column names."""

    domain: str = "generic_business"
    semantic_hints: tuple[str, ...] = ()


@dataclass
class GenerationContext:
    """Everything known about one column while generating one table."""

    table_name: str
    column: ColumnSchema
    constraints: list[ColumnConstraint] = field(default_factory=list)
    predicates: list[SqlPredicate] = field(default_factory=list)
    relationship: RelationshipHint | None = None
    hints: BusinessHints = field(default_factory=BusinessHints)
    looks_boolean: bool = False
    looks_json: bool = False
    looks_date: bool = False

    @property
    def max_length(self) -> int | None:
        """Length limit from the LENGTH constraint, if any."""
        for constraint in self.constraints:
            if constraint.kind is ConstraintKind.LENGTH:
                return constraint.max_length
        return None

    @property
    def allowed_values(self) -> tuple[str, ...]:
        """Enumeration domain from the ENUM constraint, if any."""
        for constraint in self.constraints:
            if constraint.kind is ConstraintKind.ENUM:
                return constraint.allowed_values
        return ()

    @property
    def is_required(self) -> bool:
        """Whether a NOT_NULL constraint applies."""
        return any(c.kind is ConstraintKind.NOT_NULL for c in self.constraints)

    @property
    def is_unique(self) -> bool:
        """Whether values must be distinct across records."""
        return any(c.kind is ConstraintKind.UNIQUE for c in self.constraints)


@dataclass(frozen=True)
class InsertStatement:
    """One rendered INSERT, the terminal artifact of a run."""

    table_name: str
    sql: str
    priority: int = 0  # 0 = no FK dependencies, 1 = has FK dependencies


@dataclass
class TableRecords:
    """Rows generated for one table, keyed by column name."""

    table_name: str
    rows: list[dict[str, Any]] = field(default_factory=list)

    def column_values(self, column: str) -> list[Any]:
        """All generated values for a column, ignoring case."""
        lowered = column.lower()
        values = []
        for row in self.rows:
            for key, value in row.items():
                if key.lower() == lowered:
                    values.append(value)
                    break
        return values
