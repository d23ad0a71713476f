"""Pydantic schemas for ledger endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ledgerfolio.domain.models import ImportSource, TransactionAction


class TransactionCreateRequest(BaseModel):
    """Request schema for a hand-entered ledger row."""

    account_number: str = Field(..., min_length=1, description="Broker account number")
    action: TransactionAction = Field(..., description="Ledger action")
    currency: str = Field(default="CAD", min_length=3, max_length=3)
    transaction_date: Optional[date] = Field(
        default=None,
        description="Trade date (US/Eastern); defaults to today",
    )
    symbol: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    price: Optional[Decimal] = Field(default=None, ge=0)
    commission: Optional[Decimal] = Field(default=None, ge=0)
    net_amount: Optional[Decimal] = None
    account_type: Optional[str] = None

    @field_validator("symbol", "currency")
    @classmethod
    def uppercase(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None


class TransactionResponse(BaseModel):
    """Response schema for a single ledger row."""

    model_config = {"from_attributes": True}

    txn_id: str
    account_id: str
    transaction_date: date
    settlement_date: Optional[date] = None
    action: TransactionAction
    symbol: Optional[str] = None
    symbol_mapped: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    gross_amount: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    currency: str
    currency_equivalent: Optional[Decimal] = None
    source: ImportSource
    created_at_est: Optional[datetime] = None


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
