"""I/O utilities for erythroid-ir.

Provides logging and delimited-table I/O.
"""

from .logging import get_timestamped_log_path, log_yaml
from .tables import (
    ensure_output_dir,
    read_table,
    require_columns,
    write_dataframe,
)

__all__ = [
    # Logging
    "get_timestamped_log_path",
    "log_yaml",
    # Tables
    "ensure_output_dir",
    "read_table",
    "require_columns",
    "write_dataframe",
]
