"""DataFrame I/O and schema checks shared by every pipeline stage."""

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

logger = logging.getLogger(__name__)

_PARQUET_SUFFIXES = {".parquet", ".pq"}


def require_columns(df: pd.DataFrame, columns: Iterable[str], frame_name: str = "frame") -> None:
    """
    Raise if any required column is missing.

    Args:
        df: Input frame
        columns: Column names the caller depends on
        frame_name: Name used in the error message

    Raises:
        ValueError: Listing every missing column
    """
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(
            f"{frame_name} is missing required columns: {', '.join(missing)}"
        )


def read_table(path: Path | str, **kwargs) -> pd.DataFrame:
    """Read a CSV or Parquet table, chosen by file suffix."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input table not found: {path}")

    if path.suffix.lower() in _PARQUET_SUFFIXES:
        df = pd.read_parquet(path, **kwargs)
    else:
        df = pd.read_csv(path, **kwargs)

    logger.info(f"Loaded {len(df):,} rows from {path.name}")
    return df


def write_table(df: pd.DataFrame, path: Path | str) -> Path:
    """Write a CSV or Parquet table, chosen by file suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() in _PARQUET_SUFFIXES:
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False)

    logger.info(f"Wrote {len(df):,} rows to {path}")
    return path
