# delta_fish/viz/charts.py
from __future__ import annotations
import altair as alt
import pandas as pd

def cpue_trend(df: pd.DataFrame, species: str) -> alt.Chart:
    """Mean CPUE per sample date; expects columns date, cpue, stations."""
    if df.empty:
        return alt.Chart(pd.DataFrame({"note": ["No data"]})).mark_text(size=16).encode(text="note")
    return (
        alt.Chart(df)
        .mark_line(point=True)
        .encode(
            x=alt.X("date:T", title="Sample date"),
            y=alt.Y("cpue:Q", title="Mean CPUE"),
            tooltip=[
                alt.Tooltip("date:T", title="Date"),
                alt.Tooltip("cpue:Q", title="Mean CPUE", format=",.3f"),
                alt.Tooltip("stations:Q", title="Stations"),
            ],
        )
        .properties(height=280, title=f"CPUE over time — {species}")
        .interactive()
    )
