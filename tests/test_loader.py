from unittest.mock import MagicMock

from records.loader import load_tables
from records.schema import TABLE_COLUMN


class FakeSource:
    def __init__(self, tables, failing=()):
        self.tables = tables
        self.failing = set(failing)
        self.calls = []

    def fetch_table(self, table):
        self.calls.append(table)
        if table in self.failing:
            raise RuntimeError("Verbindung abgelehnt")
        return self.tables[table]


def test_partial_failure_keeps_other_tables():
    source = FakeSource(
        {
            "T1": [{"Ort": "A", "latitude": 53.4, "longitude": 10.3}],
            "T2": [{"Ort": "B"}],
            "T3": [{"Ort": "C"}, {"Ort": "D"}],
        },
        failing=["T2"],
    )
    result = load_tables(source, ["T1", "T2", "T3"])

    assert source.calls == ["T1", "T2", "T3"]
    assert result.total == 3
    assert result.geocoded == 1
    assert result.loaded == ["T1", "T3"]
    assert [e.table for e in result.errors] == ["T2"]
    assert result.errors[0].message == "Verbindung abgelehnt"
    assert result.records[TABLE_COLUMN].tolist() == ["T1", "T3", "T3"]
    assert result.summary() == "3 Anschlüsse geladen, 1 mit Koordinaten"


def test_all_tables_failing_gives_empty_set():
    source = FakeSource({}, failing=["T1", "T2"])
    result = load_tables(source, ["T1", "T2"])
    assert result.records.empty
    assert len(result.errors) == 2
    assert result.geocoded == 0


def test_empty_tables_are_loaded_not_failed():
    result = load_tables(FakeSource({"T1": []}), ["T1"])
    assert result.loaded == ["T1"]
    assert result.errors == []
    assert result.total == 0


def test_progress_callback():
    progress = MagicMock()
    load_tables(FakeSource({"T1": [], "T2": []}), ["T1", "T2"], on_progress=progress)
    progress.assert_any_call(1, 2, "T1")
    progress.assert_any_call(2, 2, "T2")
