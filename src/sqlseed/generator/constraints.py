"""Per-column declarative constraints derived from schema metadata."""

from __future__ import annotations

import re
from dataclasses import replace

from ..graph.models import ColumnConstraint, ColumnSchema, ConstraintKind, TableSchema
from ..values.classifier import TypeCategory, classify

_ENUM_BODY = re.compile(r"enum\s*\(\s*(.+?)\s*\)\s*$", re.IGNORECASE | re.DOTALL)


def parse_enum_values(raw_type: str | None) -> tuple[str, ...]:
    """
    Parse the member list of an ``enum('a','b')`` type definition.

    Returns:
        Members in declaration order, empty when the type is not an enum
    """
    if not raw_type:
        return ()
    match = _ENUM_BODY.search(raw_type.strip())
    if not match:
        return ()

    values = []
    for raw in match.group(1).split(","):
        value = raw.strip().strip("'\"")
        if value:
            values.append(value)
    return tuple(values)


def enum_domain(column: ColumnSchema) -> tuple[str, ...]:
    """Explicit enum values, or those parsed from an ``enum(...)`` type."""
    if column.enum_values:
        return column.enum_values
    if classify(column.data_type) is TypeCategory.ENUM:
        return parse_enum_values(column.data_type)
    return ()


def column_constraints(column: ColumnSchema) -> list[ColumnConstraint]:
    """Constraints for a single column, in a fixed order."""
    constraints = []

    if column.max_length is not None:
        constraints.append(
            ColumnConstraint(ConstraintKind.LENGTH, max_length=column.max_length)
        )

    if not column.nullable:
        constraints.append(ColumnConstraint(ConstraintKind.NOT_NULL))

    domain = enum_domain(column)
    if domain:
        constraints.append(ColumnConstraint(ConstraintKind.ENUM, allowed_values=domain))

    if column.is_unique or column.is_primary_key:
        constraints.append(ColumnConstraint(ConstraintKind.UNIQUE))

    return constraints


def extract_constraints(table: TableSchema) -> dict[str, list[ColumnConstraint]]:
    """
    Map every column of a table to its constraints.

    Generated columns are included; they are informational here and the
    orchestrator leaves them out of value acquisition.
    """
    result = {}
    for column in table.columns:
        if column.name in table.primary_keys and not column.is_primary_key:
            column = replace(column, is_primary_key=True)
        result[column.name] = column_constraints(column)
    return result
