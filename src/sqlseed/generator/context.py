"""Builds the per-column generation context for a table."""

from __future__ import annotations

from collections.abc import Iterable

from ..graph.models import (
    BusinessHints,
    ColumnSchema,
    GenerationContext,
    RelationshipHint,
    SchemaGraph,
    SqlPredicate,
    TableSchema,
)
from ..utils.logging_config import get_logger
from ..values.classifier import is_boolean_column, is_date_column, is_json_column
from .constraints import extract_constraints

logger = get_logger(__name__)

DOMAIN_PATTERNS = (
    ("user_management", ("user", "person", "employee")),
    ("company_management", ("company", "organization", "business")),
    ("product_management", ("product", "item", "inventory")),
    ("transaction_management", ("order", "sale", "transaction")),
)

SEMANTIC_PATTERNS = (
    ("email", "email_format"),
    ("phone", "phone_format"),
    ("address", "address_format"),
    ("name", "name_format"),
    ("code", "code_format"),
    ("url", "url_format"),
    ("date", "date_format"),
)


def determine_domain(table_name: str) -> str:
    """Guess the business domain of a table from its name."""
    lowered = table_name.lower()
    for domain, patterns in DOMAIN_PATTERNS:
        if any(p in lowered for p in patterns):
            return domain
    return "generic_business"


def semantic_hints(column_name: str) -> tuple[str, ...]:
    """Format hints implied by a column name."""
    lowered = column_name.lower()
    return tuple(hint for pattern, hint in SEMANTIC_PATTERNS if pattern in lowered)


def business_hints(table_name: str, column_name: str) -> BusinessHints:
    return BusinessHints(
        domain=determine_domain(table_name),
        semantic_hints=semantic_hints(column_name),
    )


class ContextBuilder:
    """
    Merges schema constraints, relationships, query predicates and name
    heuristics into one GenerationContext per column.
    """

    def __init__(
        self, schema: SchemaGraph, predicates: Iterable[SqlPredicate] = ()
    ) -> None:
        self.schema = schema
        self.predicates = list(predicates)

    def build(self, table: TableSchema) -> list[GenerationContext]:
        """
        Build contexts for every column of a table, in column order.

        Generated columns are included; callers decide what to skip.
        """
        constraints = extract_constraints(table)
        contexts = []
        for column in table.columns:
            contexts.append(
                GenerationContext(
                    table_name=table.name,
                    column=column,
                    constraints=constraints.get(column.name, []),
                    predicates=self.predicates_for(table.name, column.name),
                    relationship=self.relationship_for(table, column),
                    hints=business_hints(table.name, column.name),
                    looks_boolean=is_boolean_column(column),
                    looks_json=is_json_column(column),
                    looks_date=is_date_column(column),
                )
            )
        logger.debug(f"Built {len(contexts)} column contexts for {table.name}")
        return contexts

    def predicates_for(self, table_name: str, column_name: str) -> list[SqlPredicate]:
        """All WHERE predicates on ``table.column``, in query order."""
        table_key = table_name.lower()
        column_key = column_name.lower()
        return [
            p
            for p in self.predicates
            if p.table.lower() == table_key and p.column.lower() == column_key
        ]

    def relationship_for(
        self, table: TableSchema, column: ColumnSchema
    ) -> RelationshipHint | None:
        """
        Parent reference for a column.

        A declared foreign key wins. Otherwise a column named like
        ``customer_id`` or ``customerid`` is linked to a table named after
        its stem when one exists in the schema.
        """
        fk = table.foreign_key_for(column.name)
        if fk is not None:
            if fk.referenced_table not in self.schema:
                return None
            return RelationshipHint(
                referenced_table=self.schema.canonical_name(fk.referenced_table),
                referenced_column=fk.referenced_column,
            )

        if column.is_primary_key or column.name in table.primary_keys:
            return None

        stem = _id_stem(column.name)
        if not stem:
            return None

        for candidate in _table_name_candidates(stem):
            parent = self.schema.get(candidate)
            if parent is None or parent.name.lower() == table.name.lower():
                continue
            referenced_column = next(iter(sorted(parent.primary_keys)), "id")
            return RelationshipHint(
                referenced_table=parent.name,
                referenced_column=referenced_column,
                source="naming_convention",
            )
        return None


def _id_stem(column_name: str) -> str | None:
    lowered = column_name.lower()
    if lowered.endswith("_id") and len(lowered) > 3:
        return lowered[:-3]
    if lowered.endswith("id") and len(lowered) > 2:
        return lowered[:-2]
    return None


def _table_name_candidates(stem: str) -> list[str]:
    candidates = [stem, f"{stem}s", f"{stem}es"]
    if stem.endswith("y"):
        candidates.append(f"{stem[:-1]}ies")
    return candidates
