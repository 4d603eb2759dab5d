# delta_fish/etl/clean_transform.py
"""
ETL for the Delta trawl survey tables.

Usage examples:
  # 1) Build the observations table from the four raw CSVs:
  python -m delta_fish.etl.clean_transform \
    --raw-dir data/raw \
    --out data/processed/observations.csv

  # 2) Same, but drop species cells that were never observed on a tow:
  python -m delta_fish.etl.clean_transform --drop-unobserved --verbose

Notes:
- Raw inputs are stations.csv, tows.csv, catch.csv and species.csv.
- Output is one long table: station, date, latitude, longitude, species, cpue.
  Every tow also gets an "All" row holding the sum of its species CPUE.
"""

from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Dict

import numpy as np
import pandas as pd

from delta_fish.cleaning import normalize_stations, clean_tows, clean_catch, clean_species
from delta_fish.config import RAW_DIR, OBSERVATIONS_PATH, TOW_KEYS, OUTPUT_COLS, ALL_LABEL
from delta_fish.io import read_raw_tables, write_observations
from delta_fish.validators.schema import coordinate_problems

# Columns carried past the joins
JOINED_COLS = ["date", "station", "latitude", "longitude", "species", "catch", "duration"]

def _setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )

def _is_all(species: pd.Series) -> pd.Series:
    return species.astype("string").eq(ALL_LABEL).fillna(False).astype(bool)

def join_tables(
    stations: pd.DataFrame,
    tows: pd.DataFrame,
    catch: pd.DataFrame,
    species: pd.DataFrame,
) -> pd.DataFrame:
    """
    Inner-join stations -> tows -> catch -> species lookup.
    Rows without a partner on either side are dropped; an empty result is allowed.
    """
    df = stations.merge(tows, on="station", how="inner")
    logging.debug(f"stations x tows: {len(df):,} rows")

    df = df.merge(catch, on=["station", "date", "tow_number"], how="inner")
    logging.debug(f"... x catch: {len(df):,} rows")

    df = df.merge(species, on="organism_code", how="inner")
    logging.info(f"Joined shape: {len(df):,} rows")

    return df[JOINED_COLS]

def compute_cpue(df: pd.DataFrame) -> pd.DataFrame:
    """Catch per unit effort. Zero-duration tows get a missing CPUE, not inf."""
    df = df.copy()
    cpue = df["catch"] / df["duration"]
    degenerate = int((df["duration"] == 0).sum())
    if degenerate:
        logging.warning(f"{degenerate:,} catch rows have zero tow duration; CPUE left missing")
    df["cpue"] = cpue.replace([np.inf, -np.inf], np.nan)
    return df

def pivot_species(df: pd.DataFrame, value: str = "cpue") -> pd.DataFrame:
    """
    Long -> wide: one row per tow key, one column per species.
    Duplicate (tow, species) rows are summed; all-missing cells stay missing.
    """
    if df.empty:
        return pd.DataFrame(columns=TOW_KEYS).set_index(TOW_KEYS)
    return (
        df.groupby(TOW_KEYS + ["species"], dropna=False)[value]
          .sum(min_count=1)
          .unstack("species")
          .rename_axis(columns=None)
    )

def add_all_species(wide: pd.DataFrame) -> pd.DataFrame:
    """Add the "All" column: row-wise sum of every species, missing counted as 0."""
    out = wide.copy()
    species = out.drop(columns=ALL_LABEL, errors="ignore")
    out[ALL_LABEL] = species.sum(axis=1)
    return out

def melt_species(wide: pd.DataFrame, drop_unobserved: bool = False) -> pd.DataFrame:
    """
    Wide -> long. Every species column becomes a row per tow, so species not
    caught on a tow show up with a missing CPUE unless drop_unobserved is set.
    """
    long = wide.reset_index().melt(id_vars=TOW_KEYS, var_name="species", value_name="cpue")
    if drop_unobserved:
        long = long[long["cpue"].notna() | _is_all(long["species"])]
    return long

def build_observations(tables: Dict[str, pd.DataFrame], drop_unobserved: bool = False) -> pd.DataFrame:
    """Raw tables -> analysis-ready long table (OUTPUT_COLS)."""
    stations = normalize_stations(tables["stations"])
    bad = coordinate_problems(stations)
    if not bad.empty:
        logging.warning(
            f"{len(bad):,} stations have missing or out-of-range coordinates: "
            f"{bad['station'].tolist()}"
        )

    joined = join_tables(
        stations,
        clean_tows(tables["tows"]),
        clean_catch(tables["catch"]),
        clean_species(tables["species"]),
    )
    joined = compute_cpue(joined)

    wide = add_all_species(pivot_species(joined))
    long = melt_species(wide, drop_unobserved=drop_unobserved)

    return (
        long[OUTPUT_COLS]
        .sort_values(["date", "station", "species"])
        .reset_index(drop=True)
    )

def all_total_mismatches(df: pd.DataFrame) -> pd.DataFrame:
    """Station/dates where the "All" CPUE differs from the per-species sum."""
    is_all = _is_all(df["species"])
    keys = ["station", "date"]
    totals = df.loc[is_all].groupby(keys, dropna=False)["cpue"].sum().rename("all_cpue")
    parts = df.loc[~is_all].groupby(keys, dropna=False)["cpue"].sum().rename("species_sum")
    cmp = pd.concat([totals, parts], axis=1).fillna(0.0)
    bad = ~np.isclose(cmp["all_cpue"], cmp["species_sum"])
    return cmp.loc[bad].reset_index()

def summarize(df: pd.DataFrame) -> dict:
    if df.empty:
        return {"rows": 0}
    dates = df["date"].dropna()
    return {
        "rows": int(len(df)),
        "date_span": (dates.min().date().isoformat(), dates.max().date().isoformat()) if not dates.empty else None,
        "stations": int(df["station"].nunique()),
        "species_count": int(df.loc[~_is_all(df["species"]), "species"].nunique()),
        "missing_cpue": int(df["cpue"].isna().sum()),
    }

def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="ETL: join Delta trawl tables into a CPUE observations table.")
    parser.add_argument("--raw-dir", type=Path, default=RAW_DIR, help="Directory holding the four raw CSVs")
    parser.add_argument("--out", type=Path, default=OBSERVATIONS_PATH, help="Destination CSV for observations")
    parser.add_argument("--drop-unobserved", action="store_true",
                        help="Drop species rows with no catch recorded on that tow")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    logging.info(f"Reading raw tables from {args.raw_dir}…")
    tables = read_raw_tables(args.raw_dir)
    for name, t in tables.items():
        logging.info(f"Raw {name}: {t.shape[0]:,} rows × {t.shape[1]} cols")

    logging.info("Joining tables & deriving CPUE…")
    obs = build_observations(tables, drop_unobserved=args.drop_unobserved)

    if obs.empty:
        logging.warning("Observations table is empty. Check join keys across the raw tables.")

    path = write_observations(obs, args.out)
    logging.info(f"Wrote observations -> {path} ({len(obs):,} rows)")
    logging.info(f"[Summary] {summarize(obs)}")
    return path

if __name__ == "__main__":
    main()
