"""Display helpers for TradeMind."""

from trademind.utils.formatters import format_change, format_currency, format_large_number

__all__ = ["format_change", "format_currency", "format_large_number"]
