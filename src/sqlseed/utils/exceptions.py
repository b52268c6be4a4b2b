"""Custom exceptions for sqlseed."""


class SqlSeedError(Exception):
    """Base exception for sqlseed."""

    pass


class ConfigurationError(SqlSeedError):
    """Configuration error."""

    pass


class UnsupportedDialectError(ConfigurationError):
    """Requested SQL dialect is not registered."""

    pass


class SchemaError(SqlSeedError):
    """Schema metadata could not be loaded or is inconsistent."""

    pass


class TableExtractionError(SqlSeedError):
    """No tables could be extracted from the query text."""

    pass


class ResolutionError(SqlSeedError):
    """Dependency resolution failed."""

    pass


class ConstraintLoadError(SqlSeedError):
    """Column constraints could not be loaded for a table."""

    pass


class GeneratorUnavailableError(SqlSeedError):
    """External value generator is not reachable or refused the request."""

    pass
