"""
utils.py
Formatting helpers for tables, cards and reports
"""

from typing import Optional

import pandas as pd


def _is_blank(x) -> bool:
    return x is None or (isinstance(x, float) and pd.isna(x))


def fmt_currency(x) -> str:
    """Format as whole dollars with commas"""
    try:
        if _is_blank(x):
            return "—"
        return f"${round(float(x)):,}"
    except (TypeError, ValueError):
        return "—"


def fmt_pct(x: Optional[float], decimals: int = 1) -> str:
    """Format a decimal rate as a percent; undefined rates show N/A, never 0%"""
    if _is_blank(x):
        return "N/A"
    return f"{float(x) * 100:.{decimals}f}%"


def fmt_multiple(x) -> str:
    """Format a multiple, e.g. 1.50x"""
    try:
        if _is_blank(x):
            return "—"
        return f"{float(x):.2f}x"
    except (TypeError, ValueError):
        return "—"
