"""Pydantic schemas for dividend endpoints."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ledgerfolio.domain.views import DividendFrequency


class MonthlyDividendResponse(BaseModel):
    model_config = {"from_attributes": True}

    month: str
    currency: str
    amount: Decimal


class SymbolDividendResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    currency: str
    total: Decimal
    payments: int
    last_payment: Optional[date] = None


class DividendProjectionResponse(BaseModel):
    """History-based forward income for one symbol."""

    model_config = {"from_attributes": True}

    symbol: str
    currency: str
    frequency: DividendFrequency
    average_payment: Decimal
    payments_per_year: int
    projected_annual: Decimal
    remaining_payments: int
    remaining_this_year: Decimal
    confidence: int
    payment_months: list[int]
    last_payment: Optional[date] = None


class MonthlyProjectionResponse(BaseModel):
    model_config = {"from_attributes": True}

    month: int
    currency: str
    amount: Decimal
    symbols: list[str]


class YieldProjectionResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    currency: str
    quantity: Decimal
    price: Decimal
    dividend_yield: Decimal
    annual_income: Decimal
