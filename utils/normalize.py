import math
from datetime import date, datetime

import pandas as pd

_NULL_TOKENS = {"", "NA", "N/A", "NAN", "NULL", "NONE", "-"}


def is_missing(x) -> bool:
    if x is None:
        return True
    if isinstance(x, float) and math.isnan(x):
        return True
    try:
        return bool(pd.isna(x)) if not isinstance(x, (list, tuple, dict)) else False
    except (TypeError, ValueError):
        return False


def safe_str(x) -> str:
    if is_missing(x):
        return ""
    try:
        s = str(x)
    except Exception:
        return ""
    return s


def as_text(x) -> str:
    """Render a cell as text; integral floats lose their ".0" (Excel PLZ, Haus-Nr)."""
    if is_missing(x):
        return ""
    if isinstance(x, bool):
        return str(x)
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    if isinstance(x, (pd.Timestamp, datetime)):
        ts = pd.Timestamp(x)
        if ts == ts.normalize():
            return ts.strftime("%Y-%m-%d")
        return ts.isoformat(sep=" ")
    if isinstance(x, date):
        return x.isoformat()
    return safe_str(x).strip()


def safe_float(x, default: float = 0.0) -> float:
    if is_missing(x):
        return default
    if isinstance(x, bool):
        return default
    if isinstance(x, (int, float)):
        v = float(x)
        return default if math.isnan(v) or math.isinf(v) else v
    s = safe_str(x).strip()
    if s.upper() in _NULL_TOKENS:
        return default
    s = s.replace(" ", "").replace("kW", "").replace("KW", "")
    # "12,5" is a decimal comma; a dot is always the decimal point
    if "," in s and "." not in s:
        s = s.replace(",", ".")
    try:
        v = float(s)
    except ValueError:
        return default
    return default if math.isnan(v) or math.isinf(v) else v
