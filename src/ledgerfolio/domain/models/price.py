"""Quote cache entry."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class PriceCacheEntry:
    """Last known quote for a ticker, fresh while younger than the cache TTL."""

    ticker: str
    price: Decimal
    updated_at: datetime
    previous_close: Optional[Decimal] = None
    currency: Optional[str] = None
    dividend_yield: Optional[Decimal] = None  # percent, e.g. 3.5 == 3.5%
    fifty_two_week_high: Optional[Decimal] = None
    fifty_two_week_low: Optional[Decimal] = None
    name: Optional[str] = None
    logo_url: Optional[str] = None
