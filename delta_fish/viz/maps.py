from __future__ import annotations
import numpy as np
import pandas as pd
import pydeck as pdk

from delta_fish.config import CPUE_BINS, DEFAULT_VIEW

# RGBA per CPUE bin, low -> high
BIN_COLORS = [
    [68, 1, 84, 200],
    [59, 82, 139, 200],
    [33, 145, 140, 200],
    [94, 201, 98, 200],
    [253, 231, 37, 220],
]
NO_DATA_COLOR = [160, 160, 160, 140]  # neutral gray
MARKER_PX = 8
NO_DATA_PX = 4

def cpue_bin(cpue) -> pd.Series:
    """
    Bin index 0..4 on CPUE_BINS (left-closed); -1 for missing.
    Anything past the top edge lands in the last bin.
    """
    s = pd.to_numeric(pd.Series(cpue), errors="coerce").astype(float)
    idx = np.digitize(s.fillna(0.0), CPUE_BINS[1:-1])
    return pd.Series(np.where(s.isna(), -1, idx), index=s.index)

def legend_entries() -> list[tuple[str, list[int]]]:
    labels = [f"{lo:g} – {hi:g}" for lo, hi in zip(CPUE_BINS[:-1], CPUE_BINS[1:])]
    return list(zip(labels, BIN_COLORS)) + [("No catch / no data", NO_DATA_COLOR)]

def estimate_zoom_level(extent_width: float) -> int:
    if extent_width is None or extent_width <= 0:
        return 12
    if extent_width < 0.05: return 13
    if extent_width < 0.1:  return 12
    if extent_width < 0.2:  return 11
    if extent_width < 0.5:  return 10
    if extent_width < 1:    return 9
    if extent_width < 2:    return 8
    if extent_width < 5:    return 7
    return 6

def view_for(df: pd.DataFrame) -> pdk.ViewState:
    """Fit the view to the min/max coordinates; fixed Delta view when nothing to show."""
    pts = df.dropna(subset=["latitude", "longitude"]) if not df.empty else df
    if pts.empty:
        return pdk.ViewState(**DEFAULT_VIEW)

    lat_min, lat_max = float(pts["latitude"].min()), float(pts["latitude"].max())
    lon_min, lon_max = float(pts["longitude"].min()), float(pts["longitude"].max())
    extent = max(lat_max - lat_min, lon_max - lon_min)
    return pdk.ViewState(
        latitude=(lat_min + lat_max) / 2,
        longitude=(lon_min + lon_max) / 2,
        zoom=estimate_zoom_level(extent),
    )

def marker_frame(df: pd.DataFrame) -> pd.DataFrame:
    """JSON-safe marker rows: position, colour, radius and tooltip labels."""
    plot = df.dropna(subset=["latitude", "longitude"]).reset_index(drop=True)
    bins = cpue_bin(plot["cpue"])

    return pd.DataFrame({
        "station": plot["station"].astype(str),
        "longitude": plot["longitude"].astype(float),
        "latitude": plot["latitude"].astype(float),
        "fill_color": [NO_DATA_COLOR if b < 0 else BIN_COLORS[b] for b in bins],
        "radius": np.where(bins < 0, NO_DATA_PX, MARKER_PX),
        "cpue_label": [
            "No catch" if pd.isna(v) else f"{v:,.3f}" for v in plot["cpue"]
        ],
        "coords_label": [
            f"{la:.4f}, {lo:.4f}" for la, lo in zip(plot["latitude"], plot["longitude"])
        ],
    })

def render_cpue_map(df_stations: pd.DataFrame) -> pdk.Deck:
    """One marker per station, coloured by binned average CPUE."""
    markers = marker_frame(df_stations)

    layer = pdk.Layer(
        "ScatterplotLayer",
        markers,
        get_position=["longitude", "latitude"],
        get_fill_color="fill_color",
        get_radius="radius",
        radius_units="pixels",
        get_line_color=[40, 40, 40, 200],
        line_width_min_pixels=1,
        stroked=True,
        filled=True,
        pickable=True,
    )

    tooltip = {
        "html": "<b>CPUE:</b> {cpue_label}<br/><b>Station:</b> {station}<br/><b>Lat, Lon:</b> {coords_label}",
        "style": {"backgroundColor": "rgba(30,30,30,0.9)", "color": "white"},
    }

    deck = pdk.Deck(layers=[layer], initial_view_state=view_for(markers), tooltip=tooltip, map_style=None)
    deck._fish_debug = {
        "plotted": int(len(markers)),
        "no_catch": int((markers["radius"] == NO_DATA_PX).sum()),
        "skipped_no_coords": int(len(df_stations) - len(markers)),
    }
    return deck
