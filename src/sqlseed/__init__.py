"""sqlseed: synthesize INSERT statements that make a SELECT query return rows."""

__version__ = "0.1.0"
