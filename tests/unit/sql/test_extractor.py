"""Tests for sqlseed.sql.extractor module."""

from __future__ import annotations

import pytest

from sqlseed.graph.models import SqlPredicate
from sqlseed.sql.extractor import (
    ExtractionResult,
    extract_alias_map,
    extract_predicates,
    extract_tables,
    resolve_alias,
    strip_comments,
    strip_string_literals,
)
from sqlseed.utils.exceptions import TableExtractionError


class TestExtractTables:
    """Tests for extract_tables."""

    def test_users_roles_scenario(self) -> None:
        """Tables and aliases are recovered from a simple join."""
        result = extract_tables("SELECT * FROM Users u JOIN Roles r ON u.role_id=r.id")

        assert result.ok
        assert result.tables == ("Users", "Roles")
        assert result.aliases == {"u": "Users", "r": "Roles"}

    def test_as_keyword_alias(self) -> None:
        result = extract_tables("SELECT * FROM orders AS o LEFT OUTER JOIN customers AS c ON 1=1")
        assert result.tables == ("orders", "customers")
        assert result.aliases == {"o": "orders", "c": "customers"}

    def test_table_without_alias(self) -> None:
        """Keywords following a table name are not aliases."""
        result = extract_tables("SELECT * FROM users WHERE id = 1")
        assert result.tables == ("users",)
        assert result.aliases == {}

    def test_duplicates_collapse_ignoring_case(self) -> None:
        result = extract_tables(
            "SELECT * FROM users a JOIN USERS b ON a.manager_id = b.id"
        )
        assert result.tables == ("users",)
        assert result.aliases == {"a": "users", "b": "users"}

    def test_comma_separated_from_list(self) -> None:
        result = extract_tables("SELECT * FROM users u, roles r WHERE u.role_id = r.id")
        assert result.tables == ("users", "roles")
        assert result.aliases["r"] == "roles"

    def test_schema_qualified_and_quoted_names(self) -> None:
        result = extract_tables(
            'SELECT * FROM dbo.[Order Items] oi JOIN `products` p ON 1=1 '
            'JOIN "Clients" c ON 1=1'
        )
        assert result.tables == ("Order Items", "products", "Clients")
        assert result.aliases == {"oi": "Order Items", "p": "products", "c": "Clients"}

    def test_insert_and_update_targets(self) -> None:
        assert extract_tables("INSERT INTO audit_log (id) VALUES (1)").tables == ("audit_log",)
        assert extract_tables("UPDATE accounts SET x = 1").tables == ("accounts",)

    def test_comments_and_literals_ignored(self) -> None:
        """Table-like words in comments and strings are not extracted."""
        sql = """
            -- FROM ghosts
            /* JOIN phantoms */
            SELECT * FROM users WHERE note = 'from invoices'
        """
        assert extract_tables(sql).tables == ("users",)

    def test_subquery_table_found(self) -> None:
        result = extract_tables(
            "SELECT * FROM orders o WHERE o.customer_id IN (SELECT id FROM customers)"
        )
        assert result.tables == ("orders", "customers")

    @pytest.mark.parametrize("sql", ["", "   ", None, "SELECT 1", "SELECT now()"])
    def test_no_tables(self, sql: str | None) -> None:
        """Queries without table references produce an error result."""
        result = extract_tables(sql)
        assert not result.ok
        assert result.tables == ()
        assert result.error

    def test_require_raises_without_tables(self) -> None:
        with pytest.raises(TableExtractionError):
            extract_tables("SELECT 1").require()

    def test_require_returns_tables(self) -> None:
        assert extract_tables("SELECT * FROM a").require() == ("a",)


class TestExtractionResult:
    """Tests for ExtractionResult."""

    def test_default_is_not_ok(self) -> None:
        assert not ExtractionResult().ok

    def test_require_uses_error_message(self) -> None:
        with pytest.raises(TableExtractionError, match="Query is empty"):
            ExtractionResult(error="Query is empty").require()


class TestStripping:
    """Tests for comment and literal stripping."""

    def test_strip_comments(self) -> None:
        sql = "SELECT 1 -- trailing\n/* block\ncomment */ FROM t"
        cleaned = strip_comments(sql)
        assert "trailing" not in cleaned
        assert "block" not in cleaned
        assert "FROM t" in cleaned

    def test_strip_string_literals(self) -> None:
        assert strip_string_literals("x = 'it''s from here'") == "x = ''"


class TestResolveAlias:
    """Tests for the alias heuristic."""

    TABLES = ["users", "user_roles", "orders", "order_items", "products"]

    def test_exact_match(self) -> None:
        assert resolve_alias("orders", self.TABLES) == "orders"

    def test_short_prefix(self) -> None:
        assert resolve_alias("pro", self.TABLES) == "products"

    def test_acronym(self) -> None:
        assert resolve_alias("oi", self.TABLES) == "order_items"
        assert resolve_alias("ur", self.TABLES) == "user_roles"

    def test_single_segment_acronym(self) -> None:
        assert resolve_alias("pr", ["categories", "products"]) == "products"

    def test_substring(self) -> None:
        assert resolve_alias("product", self.TABLES) == "products"

    def test_no_match(self) -> None:
        assert resolve_alias("zz", self.TABLES) is None
        assert resolve_alias("", self.TABLES) is None

    def test_prefix_can_pick_wrong_table(self) -> None:
        """Short prefixes take the first table that starts with them."""
        # "u" was meant for user_roles but users comes first.
        assert resolve_alias("u", ["users", "user_roles"]) == "users"
        assert resolve_alias("u", ["user_roles", "users"]) == "user_roles"

    def test_substring_can_match_unrelated_table(self) -> None:
        """Substring containment ignores word boundaries."""
        assert resolve_alias("item", ["line_items_archive", "items"]) == "line_items_archive"


class TestExtractAliasMap:
    """Tests for extract_alias_map."""

    def test_explicit_aliases(self) -> None:
        alias_map = extract_alias_map("SELECT * FROM Users u JOIN Roles r ON u.role_id=r.id")
        assert alias_map == {"u": "Users", "r": "Roles"}

    def test_unbound_qualifier_resolved_from_known_tables(self) -> None:
        sql = "SELECT ord.id FROM orders JOIN customers ON orders.customer_id = customers.id"
        alias_map = extract_alias_map(sql, ["orders", "customers"])
        assert alias_map["ord"] == "orders"
        assert alias_map["customers"] == "customers"

    def test_without_known_tables_only_explicit(self) -> None:
        alias_map = extract_alias_map("SELECT x.id FROM orders o", None)
        assert alias_map == {"o": "orders"}

    def test_numbers_are_not_qualifiers(self) -> None:
        alias_map = extract_alias_map("SELECT * FROM t WHERE t.price > 3.5", ["t"])
        assert "3" not in alias_map


class TestExtractPredicates:
    """Tests for extract_predicates."""

    ALIASES = {"o": "orders", "c": "customers"}

    def _single(self, where: str) -> SqlPredicate:
        predicates = extract_predicates(
            f"SELECT * FROM orders o JOIN customers c ON o.customer_id = c.id WHERE {where}",
            self.ALIASES,
        )
        assert len(predicates) == 1, predicates
        return predicates[0]

    def test_equality_with_string(self) -> None:
        predicate = self._single("c.status = 'active'")
        assert predicate.table == "customers"
        assert predicate.column == "status"
        assert predicate.operator == "="
        assert predicate.value == "active"

    @pytest.mark.parametrize("operator", [">", ">=", "<", "<=", "<>", "!="])
    def test_comparison_operators(self, operator: str) -> None:
        predicate = self._single(f"o.total {operator} 100")
        assert predicate.operator == operator
        assert predicate.value == "100"

    def test_decimal_literal(self) -> None:
        assert self._single("o.total > 3.5").value == "3.5"

    def test_escaped_quote_in_literal(self) -> None:
        assert self._single("c.name = 'O''Brien'").value == "O'Brien"

    def test_in_list(self) -> None:
        predicate = self._single("o.state IN ('new', 'paid')")
        assert predicate.operator == "IN"
        assert predicate.values == ("new", "paid")

    def test_like_and_not_like(self) -> None:
        assert self._single("c.email LIKE '%@example.com'").operator == "LIKE"
        not_like = self._single("c.email NOT  LIKE 'test%'")
        assert not_like.operator == "NOT LIKE"
        assert not_like.value == "test%"

    def test_year_equals(self) -> None:
        predicate = self._single("YEAR(o.created_at) = 2023")
        assert predicate.operator == "YEAR_EQUALS"
        assert predicate.column == "created_at"
        assert predicate.value == "2023"

    def test_join_conditions_skipped(self) -> None:
        assert extract_predicates(
            "SELECT * FROM orders o, customers c WHERE o.customer_id = c.id", self.ALIASES
        ) == []

    def test_keyword_literals_skipped(self) -> None:
        assert extract_predicates("SELECT * FROM orders o WHERE o.x = NULL", self.ALIASES) == []

    def test_multiple_predicates_on_same_column_kept(self) -> None:
        predicates = extract_predicates(
            "SELECT * FROM orders o WHERE o.total >= 10 AND o.total < 20", self.ALIASES
        )
        assert [(p.operator, p.value) for p in predicates] == [(">=", "10"), ("<", "20")]

    def test_unknown_qualifier_used_as_table(self) -> None:
        predicates = extract_predicates("SELECT * FROM orders WHERE orders.id = 5", {})
        assert predicates[0].table == "orders"

    def test_predicates_stop_at_order_by(self) -> None:
        predicates = extract_predicates(
            "SELECT * FROM orders o WHERE o.id = 1 ORDER BY o.total", self.ALIASES
        )
        assert len(predicates) == 1

    def test_no_where_clause(self) -> None:
        assert extract_predicates("SELECT * FROM orders", self.ALIASES) == []
        assert extract_predicates(None) == []
