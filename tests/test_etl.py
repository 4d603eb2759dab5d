from pathlib import Path
import logging
import numpy as np
import pandas as pd
import pytest

from delta_fish.config import ALL_LABEL, OUTPUT_COLS
from delta_fish.etl.clean_transform import (
    JOINED_COLS,
    join_tables,
    compute_cpue,
    pivot_species,
    add_all_species,
    melt_species,
    build_observations,
    all_total_mismatches,
    summarize,
    main,
)
from delta_fish.cleaning import normalize_stations
from delta_fish.io import read_raw_tables, read_observations
from delta_fish.validators.schema import coordinate_problems

SAMPLE_RAW = Path(__file__).resolve().parents[1] / "data" / "raw"

def _tables(station_ids=("A", "B")):
    dates = pd.to_datetime(["2021-09-01", "2021-09-02"])
    stations = pd.DataFrame({
        "station": list(station_ids),
        "latitude": [38.0, 38.1],
        "longitude": [-121.5, -121.6],
    })
    tows = pd.DataFrame({"station": ["A", "B"], "date": dates, "tow_number": [1, 1], "duration": [10.0, 5.0]})
    catch = pd.DataFrame({
        "station": ["A", "B"],
        "date": dates,
        "tow_number": [1, 1],
        "organism_code": [1, 2],
        "catch": [5, 10],
    })
    species = pd.DataFrame({
        "organism_code": [1, 2, 3],
        "species": ["Delta Smelt", "Striped Bass", "Chinook Salmon"],
    })
    return stations, tows, catch, species

def test_join_all_keys_match():
    out = join_tables(*_tables())
    assert list(out.columns) == JOINED_COLS
    # every catch row has a partner everywhere -> smaller operand's row count
    assert len(out) == 2
    assert set(out["species"]) == {"Delta Smelt", "Striped Bass"}

def test_join_disjoint_keys_is_empty():
    out = join_tables(*_tables(station_ids=("X", "Y")))
    assert out.empty
    assert list(out.columns) == JOINED_COLS

def test_join_drops_unmatched_rows():
    stations, tows, catch, species = _tables()
    catch = pd.concat([catch, pd.DataFrame({
        "station": ["A", "ZZ"],
        "date": pd.to_datetime(["2021-09-01", "2021-09-01"]),
        "tow_number": [1, 1],
        "organism_code": [99, 1],
        "catch": [7, 7],
    })], ignore_index=True)
    out = join_tables(stations, tows, catch, species)
    assert len(out) == 2

def test_cpue_zero_duration_is_missing(caplog):
    df = pd.DataFrame({"catch": [5, 3, 0], "duration": [10.0, 0.0, 0.0]})
    with caplog.at_level(logging.WARNING):
        out = compute_cpue(df)
    assert out.loc[0, "cpue"] == pytest.approx(0.5)
    assert out["cpue"].iloc[1:].isna().all()
    assert not np.isinf(out["cpue"]).any()
    assert "zero tow duration" in caplog.text

def _joined_with_duplicates():
    base = dict(station="A", latitude=38.0, longitude=-121.5, duration=10.0)
    rows = [
        dict(base, date=pd.Timestamp("2021-09-01"), species="Delta Smelt", cpue=0.5),
        dict(base, date=pd.Timestamp("2021-09-01"), species="Delta Smelt", cpue=0.25),
        dict(base, date=pd.Timestamp("2021-09-01"), species="Striped Bass", cpue=1.0),
        dict(base, date=pd.Timestamp("2021-09-02"), species="Striped Bass", cpue=np.nan),
        dict(base, date=pd.Timestamp("2021-09-03"), species="Delta Smelt", cpue=2.0),
    ]
    return pd.DataFrame(rows)

def test_pivot_sums_duplicates_and_keeps_missing():
    wide = pivot_species(_joined_with_duplicates())
    assert sorted(wide.columns) == ["Delta Smelt", "Striped Bass"]
    first = wide.xs(pd.Timestamp("2021-09-01"), level="date").iloc[0]
    assert first["Delta Smelt"] == pytest.approx(0.75)
    # Not caught on the 3rd -> missing, not zero
    third = wide.xs(pd.Timestamp("2021-09-03"), level="date").iloc[0]
    assert np.isnan(third["Striped Bass"])

def test_all_column_is_sum_with_missing_as_zero():
    wide = add_all_species(pivot_species(_joined_with_duplicates()))
    assert wide[ALL_LABEL].tolist() == pytest.approx([1.75, 0.0, 2.0])

def test_reshape_round_trip():
    wide = add_all_species(pivot_species(_joined_with_duplicates()))
    long = melt_species(wide)
    # one row per tow per species, "All" included
    assert len(long) == len(wide) * 3
    back = pivot_species(long)
    pd.testing.assert_frame_equal(back, wide, check_like=True, check_column_type=False)

def test_melt_drop_unobserved_keeps_all_rows():
    wide = add_all_species(pivot_species(_joined_with_duplicates()))
    long = melt_species(wide, drop_unobserved=True)
    assert (long["species"] == ALL_LABEL).sum() == 3
    assert long.loc[long["species"] != ALL_LABEL, "cpue"].notna().all()

def test_empty_join_reshapes_to_empty():
    stations, tows, catch, species = _tables(station_ids=("X", "Y"))
    joined = compute_cpue(join_tables(stations, tows, catch, species))
    long = melt_species(add_all_species(pivot_species(joined)))
    assert long.empty
    assert {"station", "date", "species", "cpue"} <= set(long.columns)

def test_build_observations_sample():
    obs = build_observations(read_raw_tables(SAMPLE_RAW))
    assert list(obs.columns) == OUTPUT_COLS
    # 8 surviving tows x (5 caught species + All)
    assert len(obs) == 48
    assert (obs["species"] == ALL_LABEL).sum() == 8
    assert "Chinook Salmon" not in set(obs["species"])
    assert "999" not in set(obs["station"].astype(str))

    st319 = obs[obs["station"] == "319"].iloc[0]
    assert st319["latitude"] == pytest.approx(38.0525, abs=1e-4)
    assert st319["longitude"] == pytest.approx(-121.6892, abs=1e-4)
    assert (obs["longitude"] <= 0).all()

    row = obs[(obs["station"] == "319") & (obs["date"] == pd.Timestamp("2021-09-14")) & (obs["species"] == ALL_LABEL)]
    assert row["cpue"].iloc[0] == pytest.approx(0.5 + 1.2)

    assert all_total_mismatches(obs).empty

def test_build_observations_drop_unobserved_sample():
    obs = build_observations(read_raw_tables(SAMPLE_RAW), drop_unobserved=True)
    assert len(obs) == 17

def test_all_total_mismatches_flags_tampering():
    obs = build_observations(read_raw_tables(SAMPLE_RAW))
    tampered = obs.copy()
    idx = tampered.index[tampered["species"] == ALL_LABEL][0]
    tampered.loc[idx, "cpue"] = 999.0
    bad = all_total_mismatches(tampered)
    assert len(bad) == 1

def test_schema_mismatch_is_fatal(tmp_path: Path):
    for name in ("stations", "tows", "catch", "species"):
        (tmp_path / f"{name}.csv").write_text((SAMPLE_RAW / f"{name}.csv").read_text())
    pd.read_csv(SAMPLE_RAW / "tows.csv").drop(columns="TowDuration").to_csv(tmp_path / "tows.csv", index=False)
    with pytest.raises(ValueError, match="TowDuration"):
        read_raw_tables(tmp_path)

def test_missing_file_is_fatal(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_raw_tables(tmp_path)

def test_cli_writes_observations(tmp_path: Path):
    out = tmp_path / "processed" / "observations.csv"
    path = main(["--raw-dir", str(SAMPLE_RAW), "--out", str(out)])
    assert path == out and out.exists()
    obs = read_observations(out)
    assert len(obs) == 48
    assert summarize(obs)["stations"] == 5
    assert summarize(obs)["species_count"] == 5

def test_summarize_empty():
    assert summarize(pd.DataFrame(columns=OUTPUT_COLS)) == {"rows": 0}

def test_blank_species_name_is_dropped():
    tables = read_raw_tables(SAMPLE_RAW)
    sp = tables["species"].copy()
    sp["CommonName"] = sp["CommonName"].astype(object)
    sp.loc[sp["OrganismCode"] == 4, "CommonName"] = None
    tables["species"] = sp

    obs = build_observations(tables)
    assert "Longfin Smelt" not in set(obs["species"])
    assert obs["species"].notna().all()
    # station 322's only named catch was code 4, so its tow drops out:
    # 7 tows x (4 species + All)
    assert len(obs) == 35
    assert all_total_mismatches(obs).empty

def test_all_column_ignores_unlabelled_species():
    wide = pd.DataFrame([[1.0, 2.0]], columns=pd.Index(["Delta Smelt", pd.NA], dtype="string"))
    out = add_all_species(wide)
    assert out[ALL_LABEL].tolist() == pytest.approx([3.0])

def test_bad_coordinates_warn_but_keep_rows(caplog):
    tables = read_raw_tables(SAMPLE_RAW)
    st = tables["stations"].copy()
    st["LatD"] = st["LatD"].astype(object)
    st["LonD"] = st["LonD"].astype(object)
    st.loc[st["StationCode"] == 320, "LatD"] = 95
    st.loc[st["StationCode"] == 321, "LonD"] = "abc"
    tables["stations"] = st

    problems = coordinate_problems(normalize_stations(st))
    assert set(problems["station"]) == {"320", "321"}

    with caplog.at_level(logging.WARNING):
        obs = build_observations(tables)
    assert "out-of-range coordinates" in caplog.text
    assert {"320", "321"} <= set(obs["station"].astype(str))
    assert obs.loc[obs["station"] == "320", "latitude"].iloc[0] > 90
    assert obs.loc[obs["station"] == "321", "longitude"].isna().all()

def test_negative_duration_is_fatal(tmp_path: Path):
    for name in ("stations", "tows", "catch", "species"):
        (tmp_path / f"{name}.csv").write_text((SAMPLE_RAW / f"{name}.csv").read_text())
    tows = pd.read_csv(SAMPLE_RAW / "tows.csv")
    tows.loc[0, "TowDuration"] = -1
    tows.to_csv(tmp_path / "tows.csv", index=False)
    with pytest.raises(ValueError, match="Negative"):
        read_raw_tables(tmp_path)
