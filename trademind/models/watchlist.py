"""Watchlist data model."""

from pydantic import BaseModel, Field, field_validator


DEFAULT_WATCHLIST_ID = "default"
DEFAULT_WATCHLIST_NAME = "My Watchlist"


class Watchlist(BaseModel):
    """Represents a named list of tracked symbols."""

    id: str = Field(default=DEFAULT_WATCHLIST_ID, min_length=1, description="Watchlist ID")
    name: str = Field(default=DEFAULT_WATCHLIST_NAME, description="Display name")
    symbols: tuple[str, ...] = Field(default=(), description="Symbols in insertion order")

    model_config = {"frozen": True}

    @field_validator("symbols")
    @classmethod
    def _normalize_symbols(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        seen: list[str] = []
        for symbol in value:
            symbol = symbol.strip().upper()
            if symbol and symbol not in seen:
                seen.append(symbol)
        return tuple(seen)

    def contains(self, symbol: str) -> bool:
        """Check whether a symbol is on the list."""
        return symbol.strip().upper() in self.symbols

    def toggled(self, symbol: str) -> "Watchlist":
        """Return a copy with the symbol added, or removed if already present."""
        symbol = symbol.strip().upper()
        if symbol in self.symbols:
            symbols = tuple(s for s in self.symbols if s != symbol)
        else:
            symbols = self.symbols + (symbol,)
        return Watchlist(id=self.id, name=self.name, symbols=symbols)
