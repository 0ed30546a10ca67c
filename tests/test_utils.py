import math

from utils import fmt_currency, fmt_pct, fmt_multiple


def test_fmt_currency():
    assert fmt_currency(1234567.4) == "$1,234,567"
    assert fmt_currency(None) == "—"
    assert fmt_currency("abc") == "—"


def test_fmt_pct_undefined_is_na():
    assert fmt_pct(None) == "N/A"
    assert fmt_pct(math.nan) == "N/A"
    assert fmt_pct(0.0) == "0.0%"
    assert fmt_pct(0.1234, decimals=2) == "12.34%"


def test_fmt_multiple():
    assert fmt_multiple(1.5) == "1.50x"
    assert fmt_multiple(None) == "—"
