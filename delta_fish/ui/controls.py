from __future__ import annotations
from datetime import date
from typing import Iterable, Tuple
import streamlit as st

from delta_fish.config import ALL_LABEL

def species_select(
    label: str,
    options: Iterable[str],
    *,
    key: str | None = None,
    help: str | None = None,
    all_label: str = ALL_LABEL,
) -> str:
    """
    Streamlit selectbox with the 'All' total pinned as the first (default) choice.
    """
    opts = [str(x) for x in sorted({o.strip() for o in options if isinstance(o, str) and o.strip()} - {all_label})]
    display_opts = [all_label] + opts
    return st.selectbox(label, display_opts, index=0, key=key, help=help)

def normalize_date_range(value, bounds: Tuple[date, date]) -> Tuple[date, date]:
    """
    st.date_input hands back a 1-tuple while the user is mid-pick;
    close it so the query always sees an inclusive (start, end) pair.
    """
    if isinstance(value, date):
        return value, value
    picked = tuple(value or ())
    if len(picked) == 0:
        return bounds
    if len(picked) == 1:
        return picked[0], picked[0]
    start, end = picked[0], picked[1]
    return (start, end) if start <= end else (end, start)

def date_range_input(
    label: str,
    bounds: Tuple[date, date],
    *,
    key: str | None = None,
) -> Tuple[date, date]:
    lo, hi = bounds
    value = st.date_input(label, value=(lo, hi), min_value=lo, max_value=hi, key=key)
    return normalize_date_range(value, bounds)
