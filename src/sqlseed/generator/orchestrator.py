"""End-to-end generation run: query in, ordered INSERT statements out."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import time
from typing import Any

from ..config import GenerationConfig
from ..db.schema import SchemaProvider
from ..dialects import get_dialect_handler
from ..dialects.base import DialectHandler
from ..dumper.sql_generator import SQLGenerator
from ..graph.models import (
    DependencyClosure,
    GenerationContext,
    InsertStatement,
    SchemaGraph,
    TableRecords,
    TableSchema,
)
from ..graph.resolver import DependencyResolver
from ..sql.extractor import extract_alias_map, extract_predicates, extract_tables
from ..utils.exceptions import (
    ConfigurationError,
    ConstraintLoadError,
    GeneratorUnavailableError,
    ResolutionError,
    SqlSeedError,
)
from ..utils.logging_config import get_logger
from ..values.classifier import TypeCategory, base_type, classify
from ..values.parser import (
    generate_from_hash,
    is_null,
    is_valid_calendar_date,
    try_parse_boolean,
    try_parse_datetime,
    try_parse_decimal,
    try_parse_integer,
)
from .context import ContextBuilder
from .values import LocalValueGenerator, ValueGenerator

logger = get_logger(__name__)

STAGE_EXTRACTION = "extraction"
STAGE_RESOLUTION = "resolution"
STAGE_CONSTRAINT_LOADING = "constraint_loading"
STAGE_GENERATION = "generation"


@dataclass
class GenerationResult:
    """Outcome of one generation run."""

    statements: list[InsertStatement] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failed_stage: str | None = None
    error: str | None = None
    cancelled: bool = False
    closure: DependencyClosure | None = None
    records: dict[str, TableRecords] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the run finished every stage without failing or cancelling."""
        return self.failed_stage is None and not self.cancelled

    @property
    def partial_statements(self) -> list[InsertStatement]:
        """Statements produced before a failure or cancellation."""
        return [] if self.ok else list(self.statements)

    def statements_for(self, table_name: str) -> list[InsertStatement]:
        lowered = table_name.lower()
        return [s for s in self.statements if s.table_name.lower() == lowered]

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)


@dataclass
class _TableOutcome:
    records: TableRecords
    statements: list[InsertStatement]
    warnings: list[str]
    cancelled: bool = False


class InsertionOrchestrator:
    """
    Drives extraction, resolution, context building and value generation.

    Tables are generated one insertion level at a time. Tables within a
    level share no foreign key and run concurrently, bounded by
    ``max_parallelism``. Results are merged on the calling thread.
    """

    def __init__(
        self,
        schema_provider: SchemaProvider,
        config: GenerationConfig | None = None,
        value_generator: ValueGenerator | None = None,
        handler: DialectHandler | None = None,
    ) -> None:
        self.schema_provider = schema_provider
        self.config = config or GenerationConfig()
        self.handler = handler or get_dialect_handler(self.config.dialect)
        self.fallback = LocalValueGenerator(seed=self.config.seed)
        self.value_generator: ValueGenerator = value_generator or self.fallback
        self.sql_generator = SQLGenerator(self.handler)

    def run(
        self,
        query: str,
        record_count: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> GenerationResult:
        """
        Generate INSERT statements for a query.

        Args:
            query: SELECT query the data should satisfy
            record_count: Records per table, defaults to the configured count
            cancel_event: Set from another thread to stop between records

        Returns:
            GenerationResult; on failure ``failed_stage`` names the stage
            and ``statements`` holds whatever was produced before it
        """
        count = self.config.record_count if record_count is None else record_count
        if count < 1:
            raise ConfigurationError(f"record_count must be at least 1, got {count}")
        cancel = cancel_event or threading.Event()
        result = GenerationResult()

        # Extraction
        extraction = extract_tables(query)
        if not extraction.ok:
            return self._fail(result, STAGE_EXTRACTION, extraction.error)
        logger.info(f"Query references tables: {', '.join(extraction.tables)}")

        # Resolution
        try:
            schema = self.schema_provider.load_schema(extraction.tables)
        except SqlSeedError as e:
            return self._fail(result, STAGE_RESOLUTION, str(e))
        for message in getattr(self.schema_provider, "warnings", []):
            result.warn(message)

        seeds = [t for t in extraction.tables if t in schema]
        for table in extraction.tables:
            if table not in schema:
                result.warn(f"Table {table} not found in schema, skipped")
        resolver = DependencyResolver(schema)
        try:
            if not seeds:
                raise ResolutionError("None of the query's tables exist in the schema")
            closure = resolver.resolve(seeds)
        except SqlSeedError as e:
            return self._fail(result, STAGE_RESOLUTION, str(e))
        result.closure = closure
        for child, parent in closure.ignored_edges:
            result.warn(
                f"Foreign key cycle: edge {child} -> {parent} ignored for ordering"
            )
        logger.info(f"Insertion order: {' -> '.join(closure.insertion_order)}")

        # Constraint loading
        try:
            contexts = self._build_contexts(query, schema, closure)
        except SqlSeedError as e:
            return self._fail(result, STAGE_CONSTRAINT_LOADING, str(e))

        # Generation
        try:
            self._generate(schema, resolver, closure, contexts, count, cancel, result)
        except SqlSeedError as e:
            return self._fail(result, STAGE_GENERATION, str(e))

        for problem in self.sql_generator.validate_statements(result.statements, schema):
            result.warn(problem)

        logger.info(
            f"Generated {len(result.statements)} statements for "
            f"{len(closure.insertion_order)} tables"
        )
        return result

    def _build_contexts(
        self, query: str, schema: SchemaGraph, closure: DependencyClosure
    ) -> dict[str, list[GenerationContext]]:
        alias_map = extract_alias_map(query, schema.table_names)
        predicates = [
            replace(p, table=schema.canonical_name(p.table))
            for p in extract_predicates(query, alias_map)
            if p.table in schema
        ]
        builder = ContextBuilder(schema, predicates)

        contexts = {}
        for table_name in closure.insertion_order:
            table = schema.get(table_name)
            if table is None:
                continue
            try:
                contexts[table.name] = builder.build(table)
            except (ValueError, TypeError, KeyError) as e:
                raise ConstraintLoadError(
                    f"Could not load constraints for {table.name}: {e}"
                ) from e
        return contexts

    def _generate(
        self,
        schema: SchemaGraph,
        resolver: DependencyResolver,
        closure: DependencyClosure,
        contexts: dict[str, list[GenerationContext]],
        count: int,
        cancel: threading.Event,
        result: GenerationResult,
    ) -> None:
        outcomes: dict[str, _TableOutcome] = {}

        try:
            for level in resolver.insertion_levels(closure):
                if cancel.is_set():
                    result.cancelled = True
                    break

                tables = [schema.get(name) for name in level]
                known = [t for t in tables if t is not None]
                parents = {name: o.records for name, o in outcomes.items()}
                workers = max(1, min(self.config.max_parallelism, len(known)))

                with ThreadPoolExecutor(max_workers=workers) as pool:
                    futures = [
                        pool.submit(
                            self._generate_table,
                            table,
                            contexts.get(table.name, []),
                            parents,
                            count,
                            cancel,
                        )
                        for table in known
                    ]
                    level_outcomes = [future.result() for future in futures]

                for table, outcome in zip(known, level_outcomes):
                    outcomes[table.name.lower()] = outcome
                    for message in outcome.warnings:
                        result.warn(message)
                    if outcome.cancelled:
                        result.cancelled = True

                if result.cancelled:
                    break
        finally:
            self._collect(closure, outcomes, result)

        if result.cancelled:
            logger.warning("Generation cancelled, returning partial statements")

    def _collect(
        self,
        closure: DependencyClosure,
        outcomes: dict[str, _TableOutcome],
        result: GenerationResult,
    ) -> None:
        for table_name in closure.insertion_order:
            outcome = outcomes.get(table_name.lower())
            if outcome is None:
                continue
            result.records[table_name] = outcome.records
            result.statements.extend(outcome.statements)

    def _generate_table(
        self,
        table: TableSchema,
        contexts: list[GenerationContext],
        parents: dict[str, TableRecords],
        count: int,
        cancel: threading.Event,
    ) -> _TableOutcome:
        insertable = {c.name for c in self.sql_generator.insertable_columns(table)}
        active = [c for c in contexts if c.column.name in insertable]
        outcome = _TableOutcome(
            records=TableRecords(table_name=table.name), statements=[], warnings=[]
        )

        for record_index in range(1, count + 1):
            if cancel.is_set():
                outcome.cancelled = True
                break

            row = {}
            for context in active:
                row[context.column.name] = self._acquire_value(
                    context, record_index, parents, outcome.warnings
                )

            # A cancelled record never becomes a statement.
            if cancel.is_set():
                outcome.cancelled = True
                break

            outcome.records.rows.append(row)
            outcome.statements.append(self.sql_generator.build_statement(table, row))

        logger.debug(
            f"Generated {len(outcome.statements)} records for {table.name}"
        )
        return outcome

    def _acquire_value(
        self,
        context: GenerationContext,
        record_index: int,
        parents: dict[str, TableRecords],
        warnings: list[str],
    ) -> Any:
        relationship = context.relationship
        if (
            relationship is not None
            and relationship.referenced_table.lower() == context.table_name.lower()
        ):
            # Self-reference: each row points at the one before it, the
            # first row at nothing when the column allows it.
            if record_index > 1:
                return record_index - 1
            if context.column.nullable:
                return None

        parent_value = self._parent_value(context, record_index, parents)
        if parent_value is not None:
            return parent_value

        value = None
        if self.value_generator is not self.fallback:
            try:
                value = self.value_generator.generate_value(context, record_index)
            except GeneratorUnavailableError as e:
                _note(warnings, f"Value generator unavailable, using local values: {e}")
            except Exception as e:
                logger.debug(f"Value generator error: {e}")
                _note(
                    warnings,
                    f"Value generator failed for {context.table_name}."
                    f"{context.column.name} ({type(e).__name__}), using local values",
                )
            value = self._coerce_external(context, value, warnings)

        if is_null(value):
            value = self.fallback.generate_value(context, record_index)

        if is_null(value) and not context.column.nullable:
            value = generate_from_hash(
                f"{context.table_name}.{context.column.name}.{record_index}",
                classify(context.column.data_type),
            )
        return value

    def _coerce_external(
        self, context: GenerationContext, value: Any, warnings: list[str]
    ) -> Any:
        """
        Convert text from the external generator to the column's type.

        Text that does not parse is replaced by a value derived from its
        hash, or by ``None`` for unique columns so the local generator
        numbers them instead. Dates must also name a real calendar date
        within the supported year range.
        """
        if not isinstance(value, str) or is_null(value):
            return value

        category = classify(context.column.data_type)
        parsed, ok = _parse_for_column(value, category, context)
        if ok:
            return parsed

        _note(
            warnings,
            f"Unusable value from generator for {context.table_name}."
            f"{context.column.name}, using derived values",
        )
        if context.is_unique:
            return None
        return generate_from_hash(value, category)

    def _parent_value(
        self,
        context: GenerationContext,
        record_index: int,
        parents: dict[str, TableRecords],
    ) -> Any:
        relationship = context.relationship
        if relationship is None:
            return None
        records = parents.get(relationship.referenced_table.lower())
        if records is None or not records.rows:
            return None

        values = [v for v in records.column_values(relationship.referenced_column)]
        values = [v for v in values if v is not None]
        if values:
            return values[(record_index - 1) % len(values)]

        # Parent key assigned by the database; rows are numbered from 1.
        return (record_index - 1) % len(records.rows) + 1

    def _fail(
        self, result: GenerationResult, stage: str, message: str | None
    ) -> GenerationResult:
        result.failed_stage = stage
        result.error = message or f"Generation failed during {stage}"
        logger.error(f"Generation failed during {stage}: {result.error}")
        return result


def _parse_for_column(
    text: str, category: TypeCategory, context: GenerationContext
) -> tuple[Any, bool]:
    if category is TypeCategory.INTEGER and context.looks_boolean:
        parsed_bool, ok = try_parse_boolean(text)
        if ok:
            return parsed_bool, True
    if category is TypeCategory.INTEGER:
        return try_parse_integer(text)
    if category is TypeCategory.DECIMAL:
        return try_parse_decimal(text)
    if category is TypeCategory.BOOLEAN:
        return try_parse_boolean(text)
    if category is TypeCategory.DATETIME:
        if base_type(context.column.data_type) == "time":
            try:
                return time.fromisoformat(text.strip()), True
            except ValueError:
                return None, False
        if not is_valid_calendar_date(text):
            return None, False
        return try_parse_datetime(text)
    return text, True


def _note(warnings: list[str], message: str) -> None:
    if message not in warnings:
        logger.warning(message)
        warnings.append(message)
