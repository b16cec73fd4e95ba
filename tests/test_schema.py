from datetime import date

import numpy as np
import pandas as pd

from records.schema import (
    ADDRESS,
    RECORD_COLUMNS,
    TABLE_COLUMN,
    has_coords,
    kw_value,
    normalize_records,
    record_year,
    records_from_rows,
)
from utils.normalize import as_text, safe_float


def test_normalize_adds_missing_columns_in_order():
    df = normalize_records(pd.DataFrame({"Ort": ["Worth"], "Extra": ["x"]}))
    assert list(df.columns) == RECORD_COLUMNS + ["Extra"]
    assert df.loc[0, "Sparte"] == ""
    assert np.isnan(df.loc[0, "latitude"])


def test_normalize_text_fields():
    df = normalize_records(pd.DataFrame({"PLZ": [21502.0], "Haus-Nr": [7.0], "Ort": ["  Worth "]}))
    assert df.loc[0, "PLZ"] == "21502"
    assert df.loc[0, "Haus-Nr"] == "7"
    assert df.loc[0, "Ort"] == "Worth"


def test_normalize_coordinates_accept_decimal_comma():
    df = normalize_records(pd.DataFrame({"latitude": ["53,4371", "abc"], "longitude": ["10.3706", ""]}))
    assert df.loc[0, "latitude"] == 53.4371
    assert df.loc[0, "longitude"] == 10.3706
    assert np.isnan(df.loc[1, "latitude"])
    assert np.isnan(df.loc[1, "longitude"])


def test_display_address_derived_when_absent():
    df = normalize_records(pd.DataFrame({"Ort": ["Geesthacht"], "Strasse": ["Hauptstraße"], "Haus-Nr": ["5"]}))
    assert df.loc[0, ADDRESS] == "Geesthacht, Hauptstraße 5"


def test_display_address_kept_when_present():
    df = normalize_records(pd.DataFrame({"Ort": ["A"], ADDRESS: ["Irgendwo 1"]}))
    assert df.loc[0, ADDRESS] == "Irgendwo 1"


def test_records_from_rows_tags_table_last(rows):
    df = records_from_rows(rows, table="Gefilterte_Adressen_Worth")
    assert df.columns[-1] == TABLE_COLUMN
    assert set(df[TABLE_COLUMN]) == {"Gefilterte_Adressen_Worth"}
    assert len(df) == len(rows)


def test_records_from_rows_empty():
    df = records_from_rows([], table="Gefilterte_Adressen_Worth")
    assert df.empty
    assert TABLE_COLUMN in df.columns


def test_duplicates_survive():
    row = {"Ort": "A", "Strasse": "B", "Haus-Nr": "1"}
    assert len(records_from_rows([row, row])) == 2


def test_kw_value():
    assert kw_value("10") == 10.0
    assert kw_value("12,5") == 12.5
    assert kw_value("1.500") == 1.5
    assert kw_value("1.500,5") == 0.0
    assert kw_value("22 kW") == 22.0
    assert kw_value("bad") == 0.0
    assert kw_value(None) == 0.0
    assert kw_value("") == 0.0


def test_record_year_formats():
    today = date(2024, 6, 1)
    assert record_year("2021-05-01", today=today) == 2021
    assert record_year("15.03.2019", today=today) == 2019
    assert record_year(pd.Timestamp("2020-01-02"), today=today) == 2020
    assert record_year(date(2018, 1, 1), today=today) == 2018


def test_record_year_invalid():
    today = date(2024, 6, 1)
    assert record_year("", today=today) is None
    assert record_year(None, today=today) is None
    assert record_year("kein Datum", today=today) is None
    assert record_year("1850-01-01", today=today) is None
    assert record_year("2025-01-01", today=today) is None


def test_has_coords():
    df = normalize_records(
        pd.DataFrame({"latitude": [53.4, 0.0, None, 53.4], "longitude": [10.3, 0.0, 10.3, None]})
    )
    assert has_coords(df).tolist() == [True, False, False, False]


def test_as_text_and_safe_float():
    assert as_text(None) == ""
    assert as_text(5.0) == "5"
    assert as_text(pd.Timestamp("2021-05-01")) == "2021-05-01"
    assert safe_float("N/A", default=-1.0) == -1.0
    assert safe_float(float("nan")) == 0.0
