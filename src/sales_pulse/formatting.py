"""Display formatting for dashboard values."""

import math


def format_currency(value: float) -> str:
    """Whole US dollars with separators, e.g. 1234.5 -> '$1,235'."""
    # Intl currency rounding: halves go away from zero
    rounded = math.floor(abs(value) + 0.5)
    sign = "-" if value < 0 and rounded else ""
    return f"{sign}${rounded:,}"


def format_percent(value: float) -> str:
    """Fraction as a whole percentage, e.g. 0.5 -> '50%'."""
    # Math.round semantics: halves go toward +infinity
    return f"{math.floor(value * 100 + 0.5)}%"


def format_number(value: float) -> str:
    """Thousands separators, at most three decimals, trailing zeros dropped."""
    if float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
