"""Display formatting. The engine never rounds; rounding happens here."""

from decimal import ROUND_HALF_UP, Decimal

from tiptrack.engine.calculations import to_decimal

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "EUR": "€",
    "GBP": "£",
}

CENT = Decimal("0.01")


def format_currency(amount, currency: str = "USD") -> str:
    """
    Format money with two decimals and thousands separators.

    >>> format_currency(Decimal("1234.5"))
    '$1,234.50'
    >>> format_currency(-20)
    '-$20.00'
    """
    value = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    symbol = CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if value < 0 else ""
    body = f"{abs(value):,.2f}"
    if symbol is None:
        return f"{sign}{body} {currency.upper()}"
    return f"{sign}{symbol}{body}"


def format_percentage(value, decimals: int = 1) -> str:
    """`12.345` -> `'12.3%'`"""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:.{decimals}f}%"


def format_hours(hours) -> str:
    """
    Hours as 'Xh Ym', dropping the minutes when there are none.

    >>> format_hours(Decimal("7.5"))
    '7h 30m'
    >>> format_hours(8)
    '8h'
    """
    value = to_decimal(hours)
    whole = int(value)
    minutes = int(((value - whole) * 60).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if minutes == 60:
        whole, minutes = whole + 1, 0
    if minutes > 0:
        return f"{whole}h {minutes}m"
    return f"{whole}h"
