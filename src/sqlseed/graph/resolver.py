"""Foreign key closure and insertion ordering for generated tables."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any

from ..utils.logging_config import get_logger
from .models import DependencyClosure, SchemaGraph

logger = get_logger(__name__)

# DFS colour marks
_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


class DependencyResolver:
    """
    Computes which tables need rows and the order to insert them in.

    Foreign keys pointing at tables absent from the schema graph are
    ignored. Cycles never fail: the edge that closes a cycle is skipped
    and recorded on the resulting closure.
    """

    def __init__(self, schema: SchemaGraph) -> None:
        self.schema = schema

    def resolve_closure(self, seed_tables: Iterable[str]) -> frozenset[str]:
        """
        Breadth-first walk from the seed tables through foreign keys.

        Args:
            seed_tables: Tables referenced by the query

        Returns:
            Seed tables plus every table reachable through foreign keys,
            using the schema's spelling where the table is known
        """
        closure: dict[str, str] = {}
        queue: deque[str] = deque()

        for table in seed_tables:
            key = table.lower()
            if key not in closure:
                closure[key] = self.schema.canonical_name(table)
                queue.append(table)

        while queue:
            current = queue.popleft()
            table_schema = self.schema.get(current)
            if table_schema is None:
                continue

            for fk in table_schema.foreign_keys:
                if fk.referenced_table not in self.schema:
                    logger.debug(
                        f"{table_schema.name}.{fk.column} references unknown table "
                        f"{fk.referenced_table}, treating as unconstrained"
                    )
                    continue
                key = fk.referenced_table.lower()
                if key not in closure:
                    closure[key] = self.schema.canonical_name(fk.referenced_table)
                    queue.append(fk.referenced_table)

        logger.debug(f"Closure resolved to {len(closure)} tables")
        return frozenset(closure.values())

    def order_tables(self, required_tables: Iterable[str]) -> list[str]:
        """
        Order tables so parents come before children.

        Args:
            required_tables: Tables to order (typically a closure)

        Returns:
            Linear insertion order
        """
        order, _ = self._order(required_tables)
        return order

    def resolve(self, seed_tables: Iterable[str]) -> DependencyClosure:
        """Compute closure and insertion order in one step."""
        seeds = list(seed_tables)
        closure = self.resolve_closure(seeds)

        # Seeds first in query order, then the rest alphabetically, so
        # independent subgraphs keep a stable order between runs.
        seed_keys = {s.lower() for s in seeds}
        ordered_input = [self.schema.canonical_name(s) for s in _dedupe(seeds)]
        ordered_input += sorted(
            (t for t in closure if t.lower() not in seed_keys), key=str.lower
        )

        order, ignored = self._order(ordered_input)
        for child, parent in ignored:
            logger.warning(
                f"Foreign key cycle between {child} and {parent}; "
                f"ignoring edge {child} -> {parent} for ordering"
            )

        return DependencyClosure(
            required_tables=closure,
            insertion_order=tuple(order),
            ignored_edges=tuple(ignored),
        )

    def insertion_levels(self, closure: DependencyClosure) -> list[list[str]]:
        """
        Group the insertion order into waves of mutually independent tables.

        Every table lands in a later wave than each in-closure parent it
        references, except through ignored cycle edges. Tables within one
        wave share no foreign key edge and may be generated concurrently.
        """
        required = {t.lower() for t in closure.insertion_order}
        ignored = {(c.lower(), p.lower()) for c, p in closure.ignored_edges}
        level_of: dict[str, int] = {}
        levels: list[list[str]] = []

        for table in closure.insertion_order:
            key = table.lower()
            level = 0
            table_schema = self.schema.get(table)
            if table_schema is not None:
                for parent in table_schema.referenced_tables:
                    parent_key = parent.lower()
                    if parent_key == key or parent_key not in required:
                        continue
                    if (key, parent_key) in ignored:
                        continue
                    if parent_key in level_of:
                        level = max(level, level_of[parent_key] + 1)
            level_of[key] = level
            while len(levels) <= level:
                levels.append([])
            levels[level].append(table)

        return levels

    def analyze_dependencies(self, tables: Iterable[str]) -> dict[str, Any]:
        """
        Analyze foreign key fan-out for a set of tables.

        Args:
            tables: Tables to analyze

        Returns:
            Dictionary with dependency statistics
        """
        table_list = list(tables)
        if not table_list:
            return {
                "total_tables": 0,
                "tables_with_deps": 0,
                "max_dependencies": 0,
                "avg_dependencies": 0.0,
            }

        dep_counts = []
        for table in table_list:
            table_schema = self.schema.get(table)
            count = len(table_schema.referenced_tables) if table_schema else 0
            dep_counts.append(count)

        return {
            "total_tables": len(table_list),
            "tables_with_deps": sum(1 for c in dep_counts if c > 0),
            "max_dependencies": max(dep_counts),
            "avg_dependencies": sum(dep_counts) / len(dep_counts),
        }

    def _order(
        self, required_tables: Iterable[str]
    ) -> tuple[list[str], list[tuple[str, str]]]:
        tables = _dedupe(required_tables)
        required = {t.lower() for t in tables}
        marks: dict[str, int] = {}
        result: list[str] = []
        ignored: list[tuple[str, str]] = []

        def visit(table: str) -> None:
            key = table.lower()
            marks[key] = _IN_PROGRESS

            table_schema = self.schema.get(table)
            if table_schema is not None:
                for fk in table_schema.foreign_keys:
                    parent_key = fk.referenced_table.lower()
                    if parent_key not in required or parent_key == key:
                        continue
                    mark = marks.get(parent_key, _UNVISITED)
                    if mark == _IN_PROGRESS:
                        edge = (
                            self.schema.canonical_name(table),
                            self.schema.canonical_name(fk.referenced_table),
                        )
                        if edge not in ignored:
                            ignored.append(edge)
                        continue
                    if mark == _UNVISITED:
                        visit(self.schema.canonical_name(fk.referenced_table))

            marks[key] = _DONE
            result.append(self.schema.canonical_name(table))

        for table in tables:
            if marks.get(table.lower(), _UNVISITED) == _UNVISITED:
                visit(table)

        return result, ignored


def _dedupe(tables: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for table in tables:
        key = table.lower()
        if key not in seen:
            seen.add(key)
            result.append(table)
    return result
