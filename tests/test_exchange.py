import pandas as pd
import pytest

from records.exchange import (
    ImportFormatError,
    export_columns,
    read_csv,
    read_upload,
    read_workbook,
    to_csv_bytes,
    to_excel_bytes,
)
from records.schema import TABLE_COLUMN, records_from_rows


def test_export_columns_drop_internal_tag(records):
    cols = export_columns(records)
    assert TABLE_COLUMN not in cols
    assert cols[0] == "Geändert am"


def test_excel_round_trip(records):
    back = read_workbook(to_excel_bytes(records))
    assert TABLE_COLUMN not in back.columns
    cols = export_columns(records)
    pd.testing.assert_frame_equal(back[cols], records[cols])


def test_csv_round_trip(records):
    data = to_csv_bytes(records)
    assert data.startswith(b"\xef\xbb\xbf")
    back = read_csv(data)
    cols = export_columns(records)
    pd.testing.assert_frame_equal(back[cols], records[cols])


def test_read_upload_dispatches_on_extension(records):
    assert len(read_upload("daten.csv", to_csv_bytes(records))) == len(records)
    assert len(read_upload("daten.xlsx", to_excel_bytes(records))) == len(records)


def test_read_upload_rejects_garbage():
    with pytest.raises(ImportFormatError):
        read_upload("kaputt.xlsx", b"not a workbook")


def test_workbook_keeps_leading_zeros(tmp_path):
    path = tmp_path / "in.xlsx"
    pd.DataFrame({"PLZ": ["01067"], "Ort": ["Dresden"], "Haus-Nr": ["3"]}).to_excel(path, index=False)
    df = read_workbook(str(path))
    assert df.loc[0, "PLZ"] == "01067"
    assert df.loc[0, "Ort, Strasse Haus-Nr"] == "Dresden, 3"


def test_excel_keeps_formula_like_text(rows):
    rows[0]["Notiz"] = "=1+1"
    rows[1]["Notiz"] = ""
    rows[2]["Notiz"] = "=HYPERLINK(\"http://x\")"
    df = records_from_rows(rows, table="Gefilterte_Adressen_Geesthacht")
    back = read_workbook(to_excel_bytes(df))
    assert back["Notiz"].tolist() == ["=1+1", "", "=HYPERLINK(\"http://x\")"]
    cols = export_columns(df)
    pd.testing.assert_frame_equal(back[cols], df[cols])
