"""Logging utilities for erythroid-ir.

Provides timestamped log file names and the YAML run manifest that
records the resolved configuration next to the pipeline outputs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def get_timestamped_log_path(log_path: PathLike) -> Path:
    """Insert a timestamp before the suffix of a log path.

    Example: retention.log -> retention_20251209_080530.log
    """
    log_path = Path(log_path)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    suffix = log_path.suffix or ".log"
    return log_path.parent / f"{log_path.stem}_{timestamp}{suffix}"


def log_yaml(
    log_path: PathLike,
    record: dict[str, Any],
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Append a YAML document to log_path, or emit it on a logger.

    Parameters
    ----------
    log_path : PathLike
        Path to the YAML log file.
    record : dict
        Mapping to serialize.
    logger : logging.Logger, optional
        If provided, log the document instead of writing the file.
    """
    yaml_text = yaml.safe_dump(record, sort_keys=False, default_flow_style=False).rstrip("\n")
    message = f"{yaml_text}\n---"
    if logger is not None:
        logger.info("%s", message)
        return

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(message)
        handle.write("\n")
