"""File output handling for generated SQL scripts."""

from __future__ import annotations

import re
import sys
from datetime import datetime
from pathlib import Path

from ..utils.logging_config import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[\\/\s:*?\"<>|]+")


class SQLWriter:
    """Handles writing SQL scripts to files or stdout."""

    @staticmethod
    def write_to_file(sql_content: str, output_path: str | Path) -> None:
        """
        Write SQL content to file.

        Args:
            sql_content: SQL script content
            output_path: Output file path

        Raises:
            OSError: If file cannot be written
        """
        output_path = Path(output_path)

        logger.info(f"Writing SQL to {output_path}")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(sql_content, encoding="utf-8")

            file_size = output_path.stat().st_size
            line_count = sql_content.count("\n")

            logger.info(
                f"Successfully wrote {file_size:,} bytes ({line_count:,} lines) to {output_path}"
            )

        except OSError as e:
            logger.error(f"Failed to write to {output_path}: {e}")
            raise

    @staticmethod
    def write_to_stdout(sql_content: str) -> None:
        """
        Write SQL content to stdout.

        Args:
            sql_content: SQL script content
        """
        logger.debug("Writing SQL to stdout")
        sys.stdout.write(sql_content)
        if sql_content and not sql_content.endswith("\n"):
            sys.stdout.write("\n")
        sys.stdout.flush()

    @staticmethod
    def generate_default_filename(
        table_name: str, dialect: str, schema: str | None = None
    ) -> str:
        """
        Build a timestamped script filename.

        Args:
            table_name: Main table of the query
            dialect: Target dialect name
            schema: Schema name, included when given

        Returns:
            Filename such as ``orders_mysql_20240315_143052.sql``
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        parts = [table_name, dialect]
        if schema:
            parts.insert(0, schema)
        stem = "_".join(_UNSAFE_FILENAME_CHARS.sub("_", p).strip("_") for p in parts)
        return f"{stem}_{timestamp}.sql"

    @staticmethod
    def get_default_output_path(
        output_dir: Path, table_name: str, dialect: str, schema: str | None = None
    ) -> Path:
        """
        Default output path inside ``output_dir``, creating the directory.

        Args:
            output_dir: Directory for generated scripts
            table_name: Main table of the query
            dialect: Target dialect name
            schema: Optional schema name

        Returns:
            Full path of the script file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        filename = SQLWriter.generate_default_filename(table_name, dialect, schema)
        return output_dir / filename
