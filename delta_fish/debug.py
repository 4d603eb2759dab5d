# delta_fish/debug.py
from __future__ import annotations
import numpy as np
import pandas as pd
import streamlit as st

from delta_fish.config import ALL_LABEL
from delta_fish.etl.clean_transform import all_total_mismatches
from delta_fish.validators.schema import coordinate_problems


def cpue_doctor(observations: pd.DataFrame, filtered: pd.DataFrame):
    st.markdown("### 🧪 CPUE Doctor")
    st.caption("Sanity checks on the observations table and the current map selection.")

    c1, c2, c3 = st.columns(3)
    with c1:
        st.write("Rows (table / on map)", len(observations), "/", len(filtered))
    with c2:
        st.write("Stations:", int(observations["station"].nunique()))
    with c3:
        species = observations.loc[observations["species"] != ALL_LABEL, "species"]
        st.write("Species:", int(species.nunique()))

    # 1) Missing / non-finite CPUE
    cpue = pd.to_numeric(observations["cpue"], errors="coerce")
    st.write(f"- Missing CPUE rows: **{int(cpue.isna().sum())}**")
    st.write(f"- Non-finite CPUE rows: **{int(np.isinf(cpue).sum())}**")
    st.write(f"- Map markers with no catch: **{int(filtered['cpue'].isna().sum())}**")

    # 2) "All" must equal the per-species sum for every station/date
    bad = all_total_mismatches(observations)
    if bad.empty:
        st.success(f"'{ALL_LABEL}' totals match the per-species sums.")
    else:
        st.error(f"⚠️ {len(bad)} station/dates where '{ALL_LABEL}' != sum of species CPUE.")
        st.dataframe(bad.head(20), use_container_width=True)

    # 3) Coordinates
    stations = observations.drop_duplicates(subset=["station"])[["station", "latitude", "longitude"]]
    off = coordinate_problems(stations)
    if not off.empty:
        st.warning(f"⚠️ {len(off)} stations with missing or out-of-range coordinates.")
        st.dataframe(off, use_container_width=True)

    # 4) Sampling effort by date
    per_date = (
        observations.loc[observations["species"] == ALL_LABEL]
        .groupby("date", dropna=False)
        .agg(stations=("station", "nunique"), total_cpue=("cpue", "sum"))
        .reset_index()
    )
    st.write("- Stations sampled per date:")
    st.dataframe(per_date, use_container_width=True)
