# app.py
from __future__ import annotations

import streamlit as st
import pandas as pd
from pathlib import Path
import plotly.express as px

from delta_fish.config import OBSERVATIONS_PATH, RAW_DIR, ALL_LABEL
from delta_fish.debug import cpue_doctor
from delta_fish.etl.clean_transform import build_observations
from delta_fish.io import read_observations, read_raw_tables
from delta_fish.queries.filters import available_species, date_bounds, filter_observations, slice_observations
from delta_fish.queries.metrics import kpis_block, cpue_by_date, species_ranking
from delta_fish.ui.controls import species_select, date_range_input
from delta_fish.viz.charts import cpue_trend
from delta_fish.viz.maps import render_cpue_map, legend_entries

# -----------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# -----------------------------------------------------------------------------
st.set_page_config(page_title="Delta Fish Map", layout="wide")

# -----------------------------------------------------------------------------
# Data loading
# -----------------------------------------------------------------------------
def _signature(paths: list[Path]) -> tuple:
    return tuple((str(p), p.stat().st_size, int(p.stat().st_mtime)) for p in paths if p.exists())

@st.cache_data(show_spinner="Loading survey data…")
def load_observations(processed_path: Path, raw_dir: Path, file_sig: tuple = ()) -> pd.DataFrame:
    """Processed CSV if present, otherwise run the ETL over data/raw."""
    if processed_path.exists():
        return read_observations(processed_path)
    if raw_dir.exists() and any(raw_dir.glob("*.csv")):
        return build_observations(read_raw_tables(raw_dir))
    return pd.DataFrame()

@st.cache_data(show_spinner=False)
def station_cpue(df: pd.DataFrame, species: str, start, end) -> pd.DataFrame:
    return filter_observations(df, species, (start, end))


sig = _signature([OBSERVATIONS_PATH, *sorted(RAW_DIR.glob("*.csv"))])
df = load_observations(OBSERVATIONS_PATH, RAW_DIR, sig)

st.title("Delta Fish Map")

if df.empty:
    st.warning(f"No observations found. Expected {OBSERVATIONS_PATH} or raw CSVs in {RAW_DIR}.")
    st.stop()

bounds = date_bounds(df)
if bounds is None:
    st.warning("Observations table has no valid sample dates.")
    st.stop()

# -----------------------------------------------------------------------------
# Sidebar filters (shared)
# -----------------------------------------------------------------------------
with st.sidebar:
    st.header("Filters")
    sb_species = species_select("Species", available_species(df))
    sb_start, sb_end = date_range_input("Date range", bounds)

stations = station_cpue(df, sb_species, sb_start, sb_end)
slice_df = slice_observations(df, sb_species, (sb_start, sb_end))

# -----------------------------------------------------------------------------
# Tabs
# -----------------------------------------------------------------------------
tabs = st.tabs(["Map", "Trends", "Diagnostics"])

# -----------------------------------------------------------------------------
# Map Tab
# -----------------------------------------------------------------------------
with tabs[0]:
    st.subheader(f"Catch per unit effort — {sb_species}")
    st.caption(f"Average CPUE per station, {sb_start:%Y-%m-%d} to {sb_end:%Y-%m-%d}")

    k = kpis_block(slice_df, stations)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Stations", f"{k['stations']:,}")
    c2.metric("Stations with catch", f"{k['stations_with_catch']:,}")
    c3.metric("Sample dates", f"{k['sample_dates']:,}")
    c4.metric("Mean CPUE", "–" if k["mean_cpue"] is None else f"{k['mean_cpue']:,.3f}")

    if stations.empty:
        st.info("No tows for this species in the selected date range.")

    deck = render_cpue_map(stations)
    st.pydeck_chart(deck, use_container_width=True)

    legend = "  \n".join(
        f"<span style='color:rgb({c[0]},{c[1]},{c[2]})'>●</span> {label}"
        for label, c in legend_entries()
    )
    st.markdown(f"**Legend (CPUE)**  \n{legend}", unsafe_allow_html=True)

    with st.expander("Station table"):
        st.dataframe(stations, use_container_width=True)

# -----------------------------------------------------------------------------
# Trends Tab
# -----------------------------------------------------------------------------
with tabs[1]:
    st.subheader("Trends")
    trend = cpue_by_date(df, sb_species, (sb_start, sb_end))
    st.altair_chart(cpue_trend(trend, sb_species), use_container_width=True)

    st.markdown("### Species Ranking (selected date range)")
    rank = species_ranking(df, (sb_start, sb_end))
    if rank.empty:
        st.info("No species CPUE in the selected range.")
    else:
        bar = px.bar(
            rank.sort_values("cpue"),
            x="cpue",
            y="species",
            orientation="h",
            title=f"Mean CPUE by Species (excluding '{ALL_LABEL}')",
        )
        st.plotly_chart(bar, use_container_width=True)

# -----------------------------------------------------------------------------
# Diagnostics Tab
# -----------------------------------------------------------------------------
with tabs[2]:
    with st.expander("🩺 Debug: data checks", expanded=True):
        cpue_doctor(df, stations)
        dbg = getattr(deck, "_fish_debug", {})
        st.write("Markers plotted:", dbg.get("plotted"))
        st.write("Markers with no catch:", dbg.get("no_catch"))
        st.write("Stations skipped (no coordinates):", dbg.get("skipped_no_coords"))
