"""Instrument seed, price point and live instrument state models."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Market(str, Enum):
    """Markets covered by the simulation."""

    USA = "USA"
    INDIA = "INDIA"
    CRYPTO = "CRYPTO"


class InstrumentSeed(BaseModel):
    """Static identity and base economics of a tradable instrument."""

    symbol: str = Field(..., min_length=1, description="Unique short code")
    name: str = Field(..., min_length=1, description="Display name")
    sector: str = Field(..., description="Sector label")
    market: Market = Field(..., description="Market the instrument trades in")
    base_price: float = Field(..., description="Nominal base price")
    market_cap: float = Field(..., description="Nominal market capitalization (billions)")

    model_config = {"frozen": True}

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        symbol = value.strip().upper()
        if not symbol:
            raise ValueError("symbol must not be blank")
        return symbol


class PricePoint(BaseModel):
    """A single observation in an instrument's history window."""

    time: str = Field(..., description="Wall-clock label (HH:MM)")
    price: float = Field(..., gt=0, description="Price rounded to 2 decimals")

    model_config = {"frozen": True}


class InstrumentState(BaseModel):
    """Live simulated state of one instrument.

    Values are immutable; every tick produces a new instance. ``change``
    and ``change_percent`` are measured against the oldest point of the
    current history window, which slides forward with each tick.
    """

    symbol: str = Field(..., min_length=1, description="Unique short code")
    name: str = Field(..., description="Display name")
    sector: str = Field(..., description="Sector label")
    market: Market = Field(..., description="Market the instrument trades in")
    market_cap: float = Field(..., description="Market capitalization (billions)")
    price: float = Field(..., gt=0, description="Current price")
    change: float = Field(..., description="Price minus window open")
    change_percent: float = Field(..., description="Change as percent of window open")
    volume: int = Field(..., ge=0, description="Volume, fixed at initialization")
    pe_ratio: float = Field(..., description="P/E ratio, fixed at initialization")
    high_52_week: float = Field(..., description="52-week high")
    low_52_week: float = Field(..., description="52-week low")
    history: tuple[PricePoint, ...] = Field(..., description="Rolling price window, oldest first")

    model_config = {"frozen": True}

    @property
    def open_price(self) -> float:
        """Price at the oldest point of the window (the sliding session open)."""
        return self.history[0].price

    @property
    def is_up(self) -> bool:
        return self.change >= 0

    def public_fields(self) -> dict:
        """Plain read-only view handed to the text-generation service."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "market": self.market.value,
            "sector": self.sector,
            "price": self.price,
            "change_percent": self.change_percent,
            "history": [point.price for point in self.history],
        }
