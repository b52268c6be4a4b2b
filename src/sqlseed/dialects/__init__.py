"""SQL dialect handlers and the registry that dispatches to them."""

from __future__ import annotations

from typing import Any

from ..utils.logging_config import get_logger
from ..values.classifier import TypeCategory, classify
from .base import NULL_LITERAL, Dialect, DialectHandler
from .mysql import MySqlDialectHandler
from .oracle import OracleDialectHandler
from .postgres import PostgresDialectHandler
from .sqlserver import SqlServerDialectHandler

logger = get_logger(__name__)

_HANDLERS: dict[Dialect, DialectHandler] = {
    Dialect.MYSQL: MySqlDialectHandler(),
    Dialect.ORACLE: OracleDialectHandler(),
    Dialect.POSTGRESQL: PostgresDialectHandler(),
    Dialect.SQLSERVER: SqlServerDialectHandler(),
}


def get_dialect_handler(dialect: Dialect | str) -> DialectHandler:
    """
    Look up the handler for a dialect.

    Handlers are stateless, so one shared instance per dialect is returned.

    Raises:
        UnsupportedDialectError: If a dialect name cannot be resolved
    """
    return _HANDLERS[Dialect.parse(dialect)]


def equivalent_type(raw_type: str, dialect: Dialect | str) -> str:
    """Classify a raw type and map it onto the dialect's declared type."""
    category = classify(raw_type)
    if category is TypeCategory.UNKNOWN:
        logger.warning(
            f"Unknown column type {raw_type!r}, using generic text type for "
            f"{Dialect.parse(dialect).value}"
        )
    return get_dialect_handler(dialect).equivalent_type(category, raw_type)


def format_literal(value: Any, declared_type: str | None, dialect: Dialect | str) -> str:
    """Render a value as a literal for a column in the given dialect."""
    return get_dialect_handler(dialect).format_literal(value, declared_type)


__all__ = [
    "NULL_LITERAL",
    "Dialect",
    "DialectHandler",
    "MySqlDialectHandler",
    "OracleDialectHandler",
    "PostgresDialectHandler",
    "SqlServerDialectHandler",
    "equivalent_type",
    "format_literal",
    "get_dialect_handler",
]
