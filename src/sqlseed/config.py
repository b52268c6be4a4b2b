"""Configuration management for sqlseed."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .dialects.base import Dialect
from .utils.exceptions import ConfigurationError


@dataclass(frozen=True)
class GenerationConfig:
    """Settings for one generation run."""

    dialect: Dialect = Dialect.MYSQL
    record_count: int = 10
    max_parallelism: int = 4
    seed: int = 0
    log_level: str = "INFO"
    include_transaction: bool = True
    output_dir: Path = field(
        default_factory=lambda: Path.home() / ".sqlseed" / "inserts"
    )

    def __post_init__(self) -> None:
        if self.record_count < 1:
            raise ConfigurationError(
                f"record_count must be at least 1, got {self.record_count}"
            )
        if self.max_parallelism < 1:
            raise ConfigurationError(
                f"max_parallelism must be at least 1, got {self.max_parallelism}"
            )


@dataclass(frozen=True)
class GeneratorConfig:
    """Connection settings for an external value generator."""

    endpoint: str = ""
    model: str = ""
    api_key: str = field(default="", repr=False)
    timeout: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    generation: GenerationConfig
    generator: GeneratorConfig


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.

    A ``.env`` file is read first when one is found; variables
    already set in the environment take precedence.

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    load_dotenv()

    output_dir_env = os.getenv("SQLSEED_OUTPUT_DIR")
    output_dir = (
        Path(output_dir_env)
        if output_dir_env
        else Path.home() / ".sqlseed" / "inserts"
    )

    generation = GenerationConfig(
        dialect=Dialect.parse(os.getenv("SQLSEED_DIALECT", "mysql")),
        record_count=_int_env("SQLSEED_ROWS", 10),
        max_parallelism=_int_env("SQLSEED_MAX_PARALLELISM", 4),
        seed=_int_env("SQLSEED_SEED", 0),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        include_transaction=os.getenv("SQLSEED_TRANSACTION", "true").lower()
        in ("true", "1", "yes", "on"),
        output_dir=output_dir,
    )

    generator = GeneratorConfig(
        endpoint=os.getenv("SQLSEED_GENERATOR_ENDPOINT", ""),
        model=os.getenv("SQLSEED_GENERATOR_MODEL", ""),
        api_key=os.getenv("SQLSEED_GENERATOR_API_KEY", ""),
        timeout=_float_env("SQLSEED_GENERATOR_TIMEOUT", 30.0),
    )

    return AppConfig(generation=generation, generator=generator)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
