"""Tests for sqlseed.generator.context module."""

from __future__ import annotations

import pytest

from sqlseed.graph.models import (
    ColumnSchema,
    GenerationContext,
    SchemaGraph,
    SqlPredicate,
)
from sqlseed.generator.context import (
    ContextBuilder,
    business_hints,
    determine_domain,
    semantic_hints,
)
from tests.factories import ColumnFactory, ForeignKeyFactory, TableFactory


class TestBusinessHints:
    """Tests for domain and semantic hints."""

    @pytest.mark.parametrize(
        ("table", "domain"),
        [
            ("app_users", "user_management"),
            ("Employees", "user_management"),
            ("company_profiles", "company_management"),
            ("inventory_items", "product_management"),
            ("sales_orders", "transaction_management"),
            ("settings", "generic_business"),
        ],
    )
    def test_determine_domain(self, table: str, domain: str) -> None:
        assert determine_domain(table) == domain

    def test_semantic_hints(self) -> None:
        assert semantic_hints("contact_email") == ("email_format",)
        assert semantic_hints("first_name") == ("name_format",)
        assert semantic_hints("home_phone") == ("phone_format",)
        assert semantic_hints("quantity") == ()

    def test_business_hints(self) -> None:
        hints = business_hints("users", "email")
        assert hints.domain == "user_management"
        assert hints.semantic_hints == ("email_format",)


class TestContextBuilder:
    """Tests for ContextBuilder."""

    def _schema(self) -> SchemaGraph:
        return SchemaGraph(
            [
                TableFactory.create(name="customers"),
                TableFactory.create(name="categories"),
                TableFactory.create(name="boxes"),
                TableFactory.create(
                    name="orders",
                    columns=[
                        ColumnFactory.create_primary_key(),
                        ColumnFactory.create_foreign_key_column("customer_id"),
                        ColumnFactory.create_foreign_key_column("category_id"),
                        ColumnFactory.create_foreign_key_column("boxid"),
                        ColumnFactory.create_foreign_key_column("warehouse_id"),
                        ColumnFactory.create_foreign_key_column("supplier_id"),
                        ColumnSchema(name="is_paid", data_type="tinyint(1)"),
                        ColumnSchema(name="metadata", data_type="text"),
                        ColumnSchema(name="created_at", data_type="datetime"),
                    ],
                    foreign_keys=[
                        ForeignKeyFactory.create("customer_id", "customers"),
                        ForeignKeyFactory.create("supplier_id", "suppliers"),
                    ],
                ),
            ]
        )

    def _context(
        self, column: str, predicates: list[SqlPredicate] | None = None
    ) -> GenerationContext:
        schema = self._schema()
        builder = ContextBuilder(schema, predicates or [])
        orders = schema.get("orders")
        assert orders is not None
        contexts = {c.column.name: c for c in builder.build(orders)}
        return contexts[column]

    def test_one_context_per_column_in_order(self) -> None:
        schema = self._schema()
        orders = schema.get("orders")
        assert orders is not None
        contexts = ContextBuilder(schema).build(orders)
        assert [c.column.name for c in contexts] == [c.name for c in orders.columns]
        assert all(c.table_name == "orders" for c in contexts)

    def test_declared_foreign_key(self) -> None:
        relationship = self._context("customer_id").relationship
        assert relationship is not None
        assert relationship.referenced_table == "customers"
        assert relationship.referenced_column == "id"
        assert relationship.source == "foreign_key"

    def test_foreign_key_to_missing_table_is_unconstrained(self) -> None:
        assert self._context("supplier_id").relationship is None

    def test_naming_convention_plural_ies(self) -> None:
        relationship = self._context("category_id").relationship
        assert relationship is not None
        assert relationship.referenced_table == "categories"
        assert relationship.source == "naming_convention"

    def test_naming_convention_without_underscore(self) -> None:
        relationship = self._context("boxid").relationship
        assert relationship is not None
        assert relationship.referenced_table == "boxes"

    def test_naming_convention_without_match(self) -> None:
        assert self._context("warehouse_id").relationship is None

    def test_primary_key_has_no_relationship(self) -> None:
        assert self._context("id").relationship is None

    def test_predicates_attached_by_table_and_column(self) -> None:
        predicates = [
            SqlPredicate("Orders", "CREATED_AT", ">", "2024-01-01"),
            SqlPredicate("orders", "created_at", "<", "2024-06-01"),
            SqlPredicate("customers", "created_at", "=", "2020-01-01"),
        ]
        context = self._context("created_at", predicates)
        assert [p.operator for p in context.predicates] == [">", "<"]

    def test_heuristic_flags(self) -> None:
        assert self._context("is_paid").looks_boolean
        assert self._context("metadata").looks_json
        assert self._context("created_at").looks_date
        assert not self._context("customer_id").looks_boolean

    def test_constraints_and_hints(self) -> None:
        context = self._context("id")
        assert context.is_required
        assert context.is_unique
        assert context.hints.domain == "transaction_management"
