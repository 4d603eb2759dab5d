from __future__ import annotations
from typing import Tuple
import pandas as pd

from delta_fish.config import ALL_LABEL
from delta_fish.queries.filters import slice_observations

def kpis_block(slice_df: pd.DataFrame, stations_df: pd.DataFrame) -> dict:
    """
    Core KPIs for the current selection.
    slice_df: raw rows for the species/date window; stations_df: per-station averages.
    """
    if slice_df.empty:
        return {
            "stations": 0,
            "stations_with_catch": 0,
            "sample_dates": 0,
            "mean_cpue": None,
        }

    mean = stations_df["cpue"].mean()
    return {
        "stations": int(stations_df["station"].nunique()),
        "stations_with_catch": int(stations_df["cpue"].notna().sum()),
        "sample_dates": int(slice_df["date"].nunique()),
        "mean_cpue": None if pd.isna(mean) else float(mean),
    }

def cpue_by_date(df: pd.DataFrame, species: str, date_range: Tuple) -> pd.DataFrame:
    """Mean CPUE across stations for each sample date (missing values skipped)."""
    f = slice_observations(df, species, date_range)
    if f.empty:
        return pd.DataFrame(columns=["date", "cpue", "stations"])
    return (
        f.groupby("date", dropna=True)
         .agg(cpue=("cpue", "mean"), stations=("station", "nunique"))
         .reset_index()
         .sort_values("date")
    )

def species_ranking(df: pd.DataFrame, date_range: Tuple, top_n: int = 10) -> pd.DataFrame:
    """Mean CPUE per species over the window, "All" excluded, highest first."""
    start, end = (pd.Timestamp(d) for d in date_range)
    f = df[(df["species"] != ALL_LABEL) & df["date"].between(start, end)]
    if f.empty:
        return pd.DataFrame(columns=["species", "cpue"])
    gp = (
        f.groupby("species", dropna=True)["cpue"]
         .mean()
         .dropna()
         .reset_index()
         .sort_values("cpue", ascending=False)
    )
    return gp.head(top_n)
