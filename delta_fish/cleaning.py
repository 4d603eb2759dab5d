# delta_fish/cleaning.py
from __future__ import annotations
import pandas as pd

from delta_fish.config import RENAME_MAP

def standardize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """Rename headers from the raw CSVs to what the pipeline expects."""
    return df.rename(columns=RENAME_MAP)


def dms_to_decimal(degrees, minutes, seconds, west: bool = False):
    """
    Degrees/minutes/seconds -> decimal degrees.
    Works on scalars or Series. No range checks: bad input gives bad output.
    With west=True the result is forced non-positive.
    """
    decimal = degrees + minutes / 60 + seconds / 3600
    if west:
        return -abs(decimal)
    return decimal


def normalize_stations(df: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse the split DMS fields into signed decimal degrees.
    Fields arrive with mixed encodings (ints, floats, padded strings);
    anything unparseable becomes NaN and flows through as a missing coordinate.
    """
    out = df.copy()
    for c in ("LatD", "LatM", "LatS", "LonD", "LonM", "LonS"):
        out[c] = pd.to_numeric(out[c].astype(str).str.strip(), errors="coerce").astype(float)

    out["latitude"] = dms_to_decimal(out["LatD"], out["LatM"], out["LatS"])
    out["longitude"] = dms_to_decimal(out["LonD"], out["LonM"], out["LonS"], west=True)

    out = standardize_headers(out)
    out["station"] = out["station"].astype("string").str.strip()
    return out[["station", "latitude", "longitude"]]


def clean_tows(df: pd.DataFrame) -> pd.DataFrame:
    out = standardize_headers(df)
    out["station"] = out["station"].astype("string").str.strip()
    out["date"] = pd.to_datetime(out["date"], errors="coerce").dt.normalize()
    out["tow_number"] = pd.to_numeric(out["tow_number"], errors="coerce")
    out["duration"] = pd.to_numeric(out["duration"], errors="coerce")
    return out


def clean_catch(df: pd.DataFrame) -> pd.DataFrame:
    out = standardize_headers(df)
    out["station"] = out["station"].astype("string").str.strip()
    out["date"] = pd.to_datetime(out["date"], errors="coerce").dt.normalize()
    out["tow_number"] = pd.to_numeric(out["tow_number"], errors="coerce")
    out["organism_code"] = pd.to_numeric(out["organism_code"], errors="coerce")
    out["catch"] = pd.to_numeric(out["catch"], errors="coerce")
    return out


def clean_species(df: pd.DataFrame) -> pd.DataFrame:
    """Lookup table: organism code -> title-cased common name."""
    out = standardize_headers(df)
    out["organism_code"] = pd.to_numeric(out["organism_code"], errors="coerce")
    out["species"] = (
        out["species"]
        .astype("string")
        .str.strip()
        .str.replace(r"\s+", " ", regex=True)
        .str.title()
    )
    # Codes without a name can't be labelled; drop them like unmatched join keys
    out = out[out["species"].str.len().fillna(0) > 0]
    return out[["organism_code", "species"]]
