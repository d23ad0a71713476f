"""Pydantic schemas for broker sync endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class PositionDiscrepancyResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    broker_quantity: Decimal
    ledger_quantity: Decimal
    difference: Decimal


class BrokerSyncResponse(BaseModel):
    """Outcome of one broker account sync."""

    model_config = {"from_attributes": True}

    account_number: str
    fetched: int
    mapped: int
    inserted: int
    skipped: int
    failed: int
    failed_chunks: list[tuple[date, date]]
    discrepancies: list[PositionDiscrepancyResponse]
    synced_at: Optional[datetime] = None


class BrokerSyncListResponse(BaseModel):
    results: list[BrokerSyncResponse]
