"""View models for dividend history and projections."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class DividendFrequency(str, Enum):
    """Payment cadence detected from history."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    IRREGULAR = "irregular"


@dataclass
class MonthlyDividend:
    month: str  # YYYY-MM
    currency: str
    amount: Decimal


@dataclass
class SymbolDividendSummary:
    symbol: str
    currency: str
    total: Decimal
    payments: int
    last_payment: Optional[date] = None


@dataclass
class DividendProjection:
    """Forward income estimate for one held symbol."""

    symbol: str
    currency: str
    frequency: DividendFrequency
    average_payment: Decimal
    payments_per_year: int
    projected_annual: Decimal
    remaining_payments: int
    remaining_this_year: Decimal
    confidence: int
    payment_months: list[int] = field(default_factory=list)
    last_payment: Optional[date] = None


@dataclass
class MonthlyProjection:
    month: int  # 1-12
    currency: str
    amount: Decimal
    symbols: list[str] = field(default_factory=list)


@dataclass
class YieldProjection:
    """Income implied by the quote's dividend yield."""

    symbol: str
    currency: str
    quantity: Decimal
    price: Decimal
    dividend_yield: Decimal
    annual_income: Decimal
