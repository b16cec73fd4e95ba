import pandas as pd
import pytest

from config import ALLOWED_TABLES
from records.compare import (
    MAX_COMPARE_ITEMS,
    SelectionLimitError,
    available_items,
    compare_stats,
    radar_frame,
    toggle_item,
)
from records.schema import records_from_rows


def test_toggle_item_adds_and_removes():
    sel = toggle_item([], "A")
    assert sel == ["A"]
    sel = toggle_item(sel, "B")
    assert sel == ["A", "B"]
    assert toggle_item(sel, "A") == ["B"]


def test_toggle_item_limit():
    sel = [str(i) for i in range(MAX_COMPARE_ITEMS)]
    with pytest.raises(SelectionLimitError):
        toggle_item(sel, "extra")
    # removing is always allowed
    assert len(toggle_item(sel, "0")) == MAX_COMPARE_ITEMS - 1


def test_available_items(records):
    assert available_items(records, "orte", ALLOWED_TABLES) == ["Geesthacht", "Worth"]
    assert available_items(records, "sparten", ALLOWED_TABLES) == ["Gas", "Strom"]
    assert available_items(records, "tabellen", ALLOWED_TABLES)[0] == "Geesthacht"
    with pytest.raises(ValueError):
        available_items(records, "unbekannt", ALLOWED_TABLES)


def test_compare_stats_by_place(records):
    out = compare_stats(records, "orte", ["Geesthacht", "Worth"])
    assert out.to_dict("records") == [
        {"name": "Geesthacht", "anzahl": 2, "unique_arten": 2, "unique_sparten": 2},
        {"name": "Worth", "anzahl": 1, "unique_arten": 1, "unique_sparten": 1},
    ]


def test_compare_stats_by_sparte(records):
    out = compare_stats(records, "sparten", ["Strom"])
    assert out.iloc[0]["anzahl"] == 2
    assert out.iloc[0]["unique_sparten"] == 1


def test_compare_stats_by_table():
    df = pd.concat(
        [
            records_from_rows([{"Ort": "A"}, {"Ort": "B"}], table="Gefilterte_Adressen_Worth"),
            records_from_rows([{"Ort": "C"}], table="Gefilterte_Adressen_Kollow"),
        ],
        ignore_index=True,
    )
    out = compare_stats(df, "tabellen", ["Worth", "Kollow", "Hamwarde"], ALLOWED_TABLES)
    assert out["anzahl"].tolist() == [2, 1, 0]


def test_radar_frame_scales_to_max(records):
    stats = compare_stats(records, "orte", ["Geesthacht", "Worth"])
    radar = radar_frame(stats)
    assert radar["subject"].tolist() == ["Anzahl", "Arten", "Sparten"]
    assert radar.loc[0, "Geesthacht"] == 100.0
    assert radar.loc[0, "Worth"] == 50.0
    assert radar_frame(pd.DataFrame()).empty
