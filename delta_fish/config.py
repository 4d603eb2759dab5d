import os
from pathlib import Path

# Root-relative data directories
DATA_DIR = Path(os.getenv("DELTA_FISH_DATA", "data"))
RAW_DIR = DATA_DIR / "raw"
PROC_DIR = DATA_DIR / "processed"
OBSERVATIONS_PATH = PROC_DIR / "observations.csv"

# Raw survey tables (comma-delimited, header row)
RAW_FILES = {
    "stations": "stations.csv",
    "tows": "tows.csv",
    "catch": "catch.csv",
    "species": "species.csv",
}

# Columns we expect in each raw table
REQUIRED_COLS = {
    "stations": ["StationCode", "LatD", "LatM", "LatS", "LonD", "LonM", "LonS"],
    "tows": ["StationCode", "SampleDate", "TowNumber", "TowDuration"],
    "catch": ["StationCode", "SampleDate", "TowNumber", "OrganismCode", "Catch"],
    "species": ["OrganismCode", "CommonName"],
}

# Raw header -> canonical snake_case name
RENAME_MAP = {
    "StationCode": "station",
    "SampleDate": "date",
    "TowNumber": "tow_number",
    "TowDuration": "duration",
    "OrganismCode": "organism_code",
    "Catch": "catch",
    "CommonName": "species",
}

# Wide-table key (one row per tow) and processed output layout
TOW_KEYS = ["station", "latitude", "longitude", "duration", "date"]
OUTPUT_COLS = ["station", "date", "latitude", "longitude", "species", "cpue"]

# Synthetic species label for the per-tow total
ALL_LABEL = "All"

# Binned colour scale for CPUE markers
CPUE_BINS = [0, 0.1, 1, 10, 100, 1000]

# Map fallback when a selection has no stations (central Delta)
DEFAULT_VIEW = {"latitude": 38.05, "longitude": -121.7, "zoom": 9}
