# delta_fish/queries/filters.py
from __future__ import annotations
from datetime import date
from typing import Optional, Tuple
import pandas as pd

from delta_fish.config import ALL_LABEL

# Grouping key for the map: one marker per station
STATION_KEYS = ["station", "longitude", "latitude", "species"]
RESULT_COLS = STATION_KEYS + ["cpue"]

# -------- option lists for the controls --------
def available_species(df: pd.DataFrame) -> list[str]:
    """Distinct species names with the "All" total pinned first."""
    names = sorted(df["species"].dropna().astype("string").str.strip().unique().tolist())
    rest = [n for n in names if n != ALL_LABEL]
    return [ALL_LABEL] + rest if ALL_LABEL in names else rest

def date_bounds(df: pd.DataFrame) -> Optional[Tuple[date, date]]:
    dates = pd.to_datetime(df["date"], errors="coerce").dropna()
    if dates.empty:
        return None
    return dates.min().date(), dates.max().date()

# -------- the map query --------
def slice_observations(df: pd.DataFrame, species: str, date_range: Tuple) -> pd.DataFrame:
    """Rows for one species inside the inclusive [start, end] date window."""
    start, end = (pd.Timestamp(d) for d in date_range)
    return df[(df["species"] == species) & df["date"].between(start, end)]

def filter_observations(df: pd.DataFrame, species: str, date_range: Tuple) -> pd.DataFrame:
    """
    Average CPUE per station for one species over [start, end].
    Missing CPUE is left out of the mean; a mean of exactly 0 comes back as NaN
    so the map can draw it as "no catch". No match -> empty frame, same columns.
    """
    f = slice_observations(df, species, date_range)
    if f.empty:
        return pd.DataFrame(columns=RESULT_COLS)

    out = (
        f.groupby(STATION_KEYS, dropna=False, as_index=False)["cpue"]
         .mean()
    )
    out["cpue"] = out["cpue"].mask(out["cpue"] == 0)
    return out[RESULT_COLS].sort_values("station").reset_index(drop=True)

__all__ = [
    "available_species",
    "date_bounds",
    "slice_observations",
    "filter_observations",
]
