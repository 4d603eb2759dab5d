from __future__ import annotations
import pandas as pd

from delta_fish.config import REQUIRED_COLS

def validate_frame(df: pd.DataFrame, table: str) -> None:
    if table not in REQUIRED_COLS:
        raise KeyError(f"Unknown raw table: {table!r}")

    miss = set(REQUIRED_COLS[table]) - set(df.columns)
    if miss:
        raise ValueError(f"Missing expected columns in {table}: {sorted(miss)}")

    # Counts/durations may be blank, but never negative
    for c in ("TowDuration", "Catch"):
        if c in REQUIRED_COLS[table]:
            vals = pd.to_numeric(df[c], errors="coerce").dropna()
            if (vals < 0).any():
                raise ValueError(f"Negative values in {table}.{c}")


def coordinate_problems(stations: pd.DataFrame) -> pd.DataFrame:
    """Stations whose decimal coordinates are missing or outside valid ranges."""
    lat, lon = stations["latitude"], stations["longitude"]
    bad = (
        lat.isna() | lon.isna()
        | ~lat.between(-90, 90)
        | ~lon.between(-180, 0)
    )
    return stations.loc[bad]
