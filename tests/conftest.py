import pandas as pd
import pytest

from records.schema import records_from_rows


@pytest.fixture(autouse=True)
def _event_log(tmp_path, monkeypatch):
    # keep log_event output out of the working tree
    monkeypatch.setattr("utils.log.LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr("utils.log.LOG_PATH", str(tmp_path / "logs" / "pipeline.log"))


@pytest.fixture
def rows():
    return [
        {
            "Sparte": "Strom",
            "Ort": "Geesthacht",
            "PLZ": "21502",
            "Strasse": "Hauptstraße",
            "Haus-Nr": "5",
            "Datum": "2021-05-01",
            "KW-Zahl": "10",
            "Art": "Neuanschluss",
            "latitude": 53.4371,
            "longitude": 10.3706,
        },
        {
            "Sparte": "Gas",
            "Ort": "Geesthacht",
            "PLZ": "21502",
            "Strasse": "Bergedorfer Straße",
            "Haus-Nr": "12a",
            "Datum": "15.03.2019",
            "KW-Zahl": "12,5",
            "Art": "Erweiterung",
            "latitude": 53.4402,
            "longitude": 10.3655,
        },
        {
            "Sparte": "Strom",
            "Ort": "Worth",
            "PLZ": "21502",
            "Strasse": "Dorfstraße",
            "Haus-Nr": "1",
            "Datum": "",
            "KW-Zahl": "bad",
            "Art": "Neuanschluss",
            "latitude": None,
            "longitude": None,
        },
    ]


@pytest.fixture
def records(rows) -> pd.DataFrame:
    return records_from_rows(rows, table="Gefilterte_Adressen_Geesthacht")
