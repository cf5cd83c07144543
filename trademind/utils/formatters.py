"""Number formatting for terminal display."""

from typing import Union

from trademind.models import Market


CURRENCY_SYMBOLS = {
    Market.INDIA: "₹",
    Market.USA: "$",
    Market.CRYPTO: "$",
}


def format_currency(value: float, market: Union[Market, str]) -> str:
    """Format a price in the market's currency (INR for India, USD otherwise).

    Examples:
        >>> format_currency(1234.5, Market.INDIA)
        '₹1,234.50'
        >>> format_currency(-3.2, "USA")
        '-$3.20'
    """
    symbol = CURRENCY_SYMBOLS[Market(market)]
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_large_number(num: float) -> str:
    """Abbreviate a number with K/M/B suffixes, 2 decimals."""
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:.2f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return f"{num:.2f}"


def format_change(change: float, change_percent: float) -> str:
    """Signed change with percent, e.g. ``+1.23 (+0.45%)``."""
    return f"{change:+.2f} ({change_percent:+.2f}%)"
