"""Delimited table I/O for erythroid-ir.

Provides reading and writing of the long retention, coverage and test
tables. The delimiter is chosen from the file suffix (``.tsv``/``.txt``
are tab-separated, everything else comma-separated).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

TAB_SUFFIXES = {".tsv", ".txt", ".tab"}


def ensure_output_dir(path: PathLike) -> Path:
    """Create the directory at path if it does not exist and return it.

    Parameters
    ----------
    path : PathLike
        Directory path to create.

    Returns
    -------
    Path
        The created/existing directory path.
    """
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def _separator_for(path: Path) -> str:
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    if suffixes and suffixes[-1] in TAB_SUFFIXES:
        return "\t"
    return ","


def require_columns(
    df: pd.DataFrame,
    required_columns: Iterable[str],
    source: Optional[PathLike] = None,
) -> None:
    """Validate that required columns are present in a table.

    Parameters
    ----------
    df : pd.DataFrame
        Table to validate.
    required_columns : Iterable[str]
        Required column names.
    source : PathLike, optional
        Table origin used in the error message.

    Raises
    ------
    ValueError
        If any required columns are missing.
    """
    missing = [col for col in required_columns if col not in df.columns]
    if missing:
        where = f" in {source}" if source is not None else ""
        raise ValueError(f"Table missing columns{where}: {missing}")


def read_table(
    path: PathLike,
    required_columns: Optional[Iterable[str]] = None,
    dtype: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """Read a delimited table and validate its schema.

    Parameters
    ----------
    path : PathLike
        Path to a CSV or TSV file (optionally gzipped).
    required_columns : Iterable[str], optional
        Columns that must be present.
    dtype : dict, optional
        Column dtypes passed to ``pandas.read_csv``.

    Returns
    -------
    pd.DataFrame
        Loaded table.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If required columns are missing.
    """
    table_path = Path(path)
    if not table_path.exists():
        raise FileNotFoundError(f"Table not found: {table_path}")

    df = pd.read_csv(table_path, sep=_separator_for(table_path), dtype=dtype)
    if required_columns is not None:
        require_columns(df, required_columns, table_path)

    logger.debug("Read %d rows x %d columns from %s", len(df), df.shape[1], table_path)
    return df


def write_dataframe(df: pd.DataFrame, path: PathLike, *, index: bool = False) -> Path:
    """Write DataFrame to path ensuring the parent directory exists.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to write.
    path : PathLike
        Output path. ``.tsv`` paths are written tab-separated.
    index : bool
        Whether to write row index (default: False).

    Returns
    -------
    Path
        The output path.
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(output_path, sep=_separator_for(output_path), index=index, na_rep="NA")
    return output_path
