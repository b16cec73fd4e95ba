from __future__ import annotations

import io
from datetime import datetime
from typing import Any, Dict

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.styles import getSampleStyleSheet

from utils.strings import fmt_de


def summary_rows(stats: Dict[str, Any], generated: datetime | None = None) -> list[list[str]]:
    generated = generated or datetime.now()
    return [
        ["Kennzahl", "Wert"],
        ["Erstellt", generated.strftime("%d.%m.%Y %H:%M")],
        ["Einträge", fmt_de(stats.get("total_entries", 0))],
        ["Orte", fmt_de(stats.get("unique_orte", 0))],
        ["KW gesamt", fmt_de(stats.get("total_kw", 0))],
        ["Ø KW pro Eintrag", fmt_de(stats.get("avg_kw", 0), 1)],
        ["Top Sparte", f"{stats.get('top_sparte', 'N/A')} ({fmt_de(stats.get('top_sparte_count', 0))})"],
        ["Top Art", f"{stats.get('top_art', 'N/A')} ({fmt_de(stats.get('top_art_count', 0))})"],
        ["Mit Koordinaten", fmt_de(stats.get("geocoded", 0))],
    ]


def make_summary_pdf(title: str, summary: list[list[str]], places: pd.DataFrame) -> bytes:
    styles = getSampleStyleSheet()
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, rightMargin=36, leftMargin=36, topMargin=36, bottomMargin=36)
    story = [Paragraph(title, styles["Title"]), Spacer(1, 12)]

    if summary:
        story.append(Paragraph("Zusammenfassung", styles["Heading2"]))
        t = Table(summary, colWidths=[200, 300])
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]))
        story.append(t)
        story.append(Spacer(1, 14))

    if places is not None and not places.empty:
        story.append(Paragraph("Orte nach Anzahl", styles["Heading2"]))
        data = [["Ort", "Anzahl", "KW gesamt"]]
        for _, r in places.head(25).iterrows():
            data.append([str(r["name"])[:40], fmt_de(r["value"]), fmt_de(r.get("kw", 0))])
        t2 = Table(data, repeatRows=1)
        t2.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.3, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ]))
        story.append(t2)

    doc.build(story)
    return buf.getvalue()
