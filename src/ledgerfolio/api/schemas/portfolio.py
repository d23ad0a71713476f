"""Pydantic schemas for holdings, quotes and allocation endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingResponse(BaseModel):
    """Response schema for a derived position."""

    model_config = {"from_attributes": True}

    account_id: str
    symbol: str
    quantity: Decimal
    average_cost: Decimal
    book_value: Decimal
    currency: str
    updated_at_est: Optional[datetime] = None


class HoldingAnomalyResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    requested: Decimal
    available: Decimal
    transaction_date: Optional[date] = None


class HoldingsSyncResponse(BaseModel):
    model_config = {"from_attributes": True}

    account_id: str
    holdings: list[HoldingResponse]
    removed_symbols: list[str]
    anomalies: list[HoldingAnomalyResponse]


class QuoteResponse(BaseModel):
    """Response schema for a cached or freshly fetched quote."""

    model_config = {"from_attributes": True}

    ticker: str
    price: Decimal
    updated_at: datetime
    cached: bool
    stale: bool = False
    previous_close: Optional[Decimal] = None
    currency: Optional[str] = None
    dividend_yield: Optional[Decimal] = None
    fifty_two_week_high: Optional[Decimal] = None
    fifty_two_week_low: Optional[Decimal] = None
    name: Optional[str] = None
    logo_url: Optional[str] = None


class QuotesResponse(BaseModel):
    quotes: dict[str, QuoteResponse]
    missing: list[str]


class SymbolMatchResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    name: Optional[str] = None
    exchange: Optional[str] = None
    quote_type: Optional[str] = None


class AllocationLineResponse(BaseModel):
    """Buy instruction for one target."""

    model_config = {"from_attributes": True}

    symbol: str
    currency: str
    target_weight: Decimal
    current_value_cad: Decimal
    current_weight: Decimal
    gap: Decimal
    base_amount_cad: Decimal
    bonus_amount_cad: Decimal
    raw_amount_cad: Decimal
    fx_fee_cad: Decimal
    amount: Decimal


class AllocationPlanResponse(BaseModel):
    model_config = {"from_attributes": True}

    allocations: list[AllocationLineResponse]
    total_fx_fee: Decimal
    total_weekly_amount: Decimal
    total_market_value_cad: Decimal
    fx_rate: Decimal
    weights_warning: bool
