from datetime import date, datetime

from records.stats import kw_by_place, summary_stats, top_places
from reports.pdf import make_summary_pdf, summary_rows
from utils.strings import fmt_de, table_from_label, table_label, truncate


def test_fmt_de():
    assert fmt_de(1234567.8) == "1.234.568"
    assert fmt_de(7.5, 1) == "7,5"
    assert fmt_de("x") == "—"


def test_table_labels():
    assert table_label("Gefilterte_Adressen_Worth") == "Worth"
    assert table_from_label("Worth", ["Gefilterte_Adressen_Worth"]) == "Gefilterte_Adressen_Worth"
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"


def test_summary_rows(records):
    rows = summary_rows(summary_stats(records, today=date(2024, 1, 1)), generated=datetime(2024, 1, 2, 8, 30))
    assert rows[0] == ["Kennzahl", "Wert"]
    assert ["Erstellt", "02.01.2024 08:30"] in rows
    assert ["Einträge", "3"] in rows
    assert ["Top Sparte", "Strom (2)"] in rows


def test_make_summary_pdf(records):
    places = top_places(records).merge(kw_by_place(records), on="name", how="left")
    pdf = make_summary_pdf("Zusammenfassung", summary_rows(summary_stats(records)), places)
    assert pdf.startswith(b"%PDF")
