from __future__ import annotations

from config import TABLE_PREFIX


def table_label(table: str) -> str:
    """Gefilterte_Adressen_Worth -> Worth"""
    s = str(table or "")
    if s.startswith(TABLE_PREFIX):
        return s[len(TABLE_PREFIX):]
    return s


def table_from_label(label: str, tables) -> str:
    for t in tables:
        if table_label(t) == label:
            return t
    return TABLE_PREFIX + str(label)


def truncate(s: str, n: int = 20) -> str:
    s = str(s)
    return s[:n] + "..." if len(s) > n else s


def fmt_de(x, digits: int = 0) -> str:
    """1234567.8 -> '1.234.568' (German grouping)."""
    try:
        s = f"{float(x):,.{digits}f}"
    except (TypeError, ValueError):
        return "—"
    return s.replace(",", "X").replace(".", ",").replace("X", ".")
