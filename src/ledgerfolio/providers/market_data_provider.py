"""Market data provider protocol and base types."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol


@dataclass
class QuoteData:
    """Raw quote as returned by a provider."""

    ticker: str
    price: Decimal
    previous_close: Optional[Decimal] = None
    currency: Optional[str] = None
    dividend_yield: Optional[Decimal] = None  # percent
    fifty_two_week_high: Optional[Decimal] = None
    fifty_two_week_low: Optional[Decimal] = None
    name: Optional[str] = None
    logo_url: Optional[str] = None


@dataclass
class SymbolMatch:
    """Result row of a ticker search."""

    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    quote_type: Optional[str] = None


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations may be slow or rate limited; callers wrap them with a
    timeout and treat any exception as a missing quote.
    """

    def quote(self, ticker: str) -> Optional[QuoteData]:
        """Fetch one quote; None when the ticker is unknown."""
        ...

    def search(self, query: str) -> list[SymbolMatch]:
        """Find tickers matching free text."""
        ...
