"""Ledger query and manual entry endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_ledger_service
from ledgerfolio.api.schemas import (
    ImportResultResponse,
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from ledgerfolio.domain.models import TransactionAction
from ledgerfolio.services import LedgerService, TransactionCreate

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    account: Optional[list[str]] = Query(None, description="Account numbers (all if empty)"),
    symbol: Optional[list[str]] = Query(None),
    action: Optional[list[TransactionAction]] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """Query the ledger, ordered by trade date."""
    account_ids = None
    if account:
        account_ids = [ledger.get_account_by_number(number).account_id for number in account]

    transactions = ledger.query_transactions(
        account_ids=account_ids,
        symbols=symbol,
        actions=action,
        start_date=start_date,
        end_date=end_date,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        total=len(transactions),
    )


@router.post("", response_model=ImportResultResponse, status_code=201)
def create_transaction(
    request: TransactionCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> ImportResultResponse:
    """Append a hand-entered row; holdings are resynchronized."""
    result = ledger.add_transaction(TransactionCreate(**request.model_dump()))
    return ImportResultResponse.model_validate(result)
