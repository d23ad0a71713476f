"""Pydantic schemas for account endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class AccountResponse(BaseModel):
    """Response schema for a single account."""

    model_config = {"from_attributes": True}

    account_id: str
    account_number: str
    account_type: Optional[str] = None
    currency: str
    created_at_est: Optional[datetime] = None


class AccountListResponse(BaseModel):
    accounts: list[AccountResponse]


class CashResponse(BaseModel):
    """Cash balances and net deposits per currency."""

    balances: dict[str, Decimal]
    net_deposits: dict[str, Decimal]
    total_in_base_currency: Decimal
    base_currency: str
    fx_rate: Decimal
