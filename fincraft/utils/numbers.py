# PURPOSE: Number helpers for prompt text, allocation repair and currency amounts.
# CONTEXT: Form inputs arrive as numbers or "" and model output carries numbers as
#          strings ("35", "12.5%"), so parsing and printing live in one place.

import math
import re
from decimal import Decimal, ROUND_HALF_UP

# Leading numeric prefix, the same part a browser's parseFloat would read.
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def is_provided(value) -> bool:
    """
    True when a form value carries a real number.

    notes:
    - None, "" and non-finite floats count as "not provided".
    - 0 is a real value and counts as provided.
    - Numeric strings ("42") are accepted; other strings are not.
    """
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return False
        try:
            value = float(value)
        except ValueError:
            return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def to_number(value):
    """Return an int when the value is integral, else a float. Assumes is_provided(value)."""
    f = float(value.strip() if isinstance(value, str) else value)
    return int(f) if f.is_integer() else f


def format_number(value, thousands: bool = False) -> str:
    """
    Render a provided number without float noise: 30.0 -> "30", 2.5 -> "2.5".

    parameters:
    - value: number or numeric string (must satisfy is_provided).
    - thousands: bool – add "," separators (money amounts).
    """
    n = to_number(value)
    if thousands:
        return f"{n:,}"
    return str(n)


def parse_leading_float(text) -> float:
    """Parse the leading number of a string; float('nan') when there is none."""
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    m = _LEADING_FLOAT.match(str(text))
    if not m:
        return float("nan")
    try:
        return float(m.group(1))
    except ValueError:
        return float("nan")


def js_number_str(x: float) -> str:
    """Print a float the way JavaScript's String(number) prints ordinary values."""
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x.is_integer():
        return str(int(x))
    return repr(x)


def round_money(value, places: int = 2) -> float:
    """Round half-up to fixed decimal places using Decimal for exact behaviour."""
    q = Decimal(str(value)).quantize(Decimal(f"1e-{places}"), ROUND_HALF_UP)
    return float(q)
