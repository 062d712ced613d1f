"""CSV helpers for the batch tables."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..config import AREA_COLUMN


def read_observations_csv(path: Path) -> pd.DataFrame:
    """Load an observation table, keeping area ids as strings (e.g. zero-padded FIPS codes)."""
    return pd.read_csv(path, dtype={AREA_COLUMN: str})


def write_table_csv(frame: pd.DataFrame, path: Path) -> None:
    """Write a table to CSV, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)


__all__ = ["read_observations_csv", "write_table_csv"]
