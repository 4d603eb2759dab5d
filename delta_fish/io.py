from __future__ import annotations
from pathlib import Path
import pandas as pd

from delta_fish.config import RAW_FILES, OUTPUT_COLS
from delta_fish.validators.schema import validate_frame


def read_raw_table(raw_dir: str | Path, table: str) -> pd.DataFrame:
    path = Path(raw_dir) / RAW_FILES[table]
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    df = pd.read_csv(path)
    validate_frame(df, table)
    return df


def read_raw_tables(raw_dir: str | Path) -> dict[str, pd.DataFrame]:
    """
    Load the four survey tables (stations, tows, catch, species).
    Raises on a missing file or a missing column; nothing downstream can run without them.
    """
    return {table: read_raw_table(raw_dir, table) for table in RAW_FILES}


def read_observations(path: str | Path) -> pd.DataFrame:
    """Load a processed observations CSV written by the ETL."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Processed file not found: {path.resolve()}")
    df = pd.read_csv(path, dtype={"station": "string", "species": "string"})
    missing = set(OUTPUT_COLS) - set(df.columns)
    if missing:
        raise ValueError(f"Missing expected columns: {sorted(missing)}")

    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    for c in ("latitude", "longitude", "cpue"):
        df[c] = pd.to_numeric(df[c], errors="coerce")
    return df[OUTPUT_COLS]


def write_observations(df: pd.DataFrame, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df[OUTPUT_COLS].to_csv(path, index=False, date_format="%Y-%m-%d")
    return path
