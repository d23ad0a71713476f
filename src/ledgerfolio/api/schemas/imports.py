"""Pydantic schemas for file import endpoints."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from ledgerfolio.domain.models import ImportSource, TransactionAction


class RowErrorResponse(BaseModel):
    model_config = {"from_attributes": True}

    row: int
    message: str


class ImportResultResponse(BaseModel):
    """Counts and diagnostics for one import."""

    model_config = {"from_attributes": True}

    success: bool
    total: int
    inserted: int
    skipped: int
    failed: int
    errors: list[RowErrorResponse]
    import_id: Optional[str] = None
    file_hash: Optional[str] = None
    account_ids: list[str]


class PreviewRowResponse(BaseModel):
    model_config = {"from_attributes": True}

    row_number: Optional[int] = None
    transaction_date: date
    action: TransactionAction
    account_number: str
    symbol: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    currency: str


class PreviewResponse(BaseModel):
    """Parse-only view of an upload."""

    model_config = {"from_attributes": True}

    valid_rows: int
    rows: list[PreviewRowResponse]
    errors: list[RowErrorResponse]
    accounts: list[str]
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    currency_totals: dict[str, Decimal]


class ImportFileResponse(BaseModel):
    model_config = {"from_attributes": True}

    import_id: str
    filename: str
    file_hash: str
    source: ImportSource
    row_count: int
    inserted_rows: int
    skipped_rows: int
    failed_rows: int
    imported_at_est: Optional[datetime] = None
