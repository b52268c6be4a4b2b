"""Shared pytest fixtures for sqlseed tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from faker import Faker

from sqlseed.config import GenerationConfig
from sqlseed.db.schema import JsonSchemaProvider
from sqlseed.dialects.base import Dialect
from sqlseed.graph.models import SchemaGraph
from tests.factories import SchemaFactory, schema_document

# =============================================================================
# Faker Instance
# =============================================================================


@pytest.fixture
def fake() -> Faker:
    """Provide a Faker instance for test data generation."""
    return Faker()


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def generation_config(tmp_path: Path) -> GenerationConfig:
    """Provide a small deterministic generation configuration."""
    return GenerationConfig(
        dialect=Dialect.MYSQL,
        record_count=3,
        max_parallelism=2,
        seed=7,
        output_dir=tmp_path / "inserts",
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every sqlseed variable from the environment."""
    for var in (
        "SQLSEED_DIALECT",
        "SQLSEED_ROWS",
        "SQLSEED_MAX_PARALLELISM",
        "SQLSEED_SEED",
        "SQLSEED_TRANSACTION",
        "SQLSEED_OUTPUT_DIR",
        "SQLSEED_GENERATOR_ENDPOINT",
        "SQLSEED_GENERATOR_MODEL",
        "SQLSEED_GENERATOR_API_KEY",
        "SQLSEED_GENERATOR_TIMEOUT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def orders_schema() -> SchemaGraph:
    """orders -> customers schema graph."""
    return SchemaFactory.orders_customers()


@pytest.fixture
def orders_provider(orders_schema: SchemaGraph) -> JsonSchemaProvider:
    """Schema provider backed by the orders -> customers document."""
    return JsonSchemaProvider(schema_document(*orders_schema))


@pytest.fixture
def schema_file(tmp_path: Path, orders_schema: SchemaGraph) -> Path:
    """orders -> customers schema written to a JSON file."""
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(schema_document(*orders_schema)), encoding="utf-8")
    return path


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Restore the root logger after a test reconfigures it."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
