"""Holdings endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_holdings_sync, resolve_account_id
from ledgerfolio.api.schemas import HoldingResponse, HoldingsSyncResponse
from ledgerfolio.services import HoldingsSynchronizer

router = APIRouter(prefix="/holdings", tags=["holdings"])


@router.get("", response_model=list[HoldingResponse])
def list_holdings(
    aggregate: bool = Query(False, description="Combine the same symbol across accounts"),
    account_id: Optional[str] = Depends(resolve_account_id),
    holdings_sync: HoldingsSynchronizer = Depends(get_holdings_sync),
) -> list[HoldingResponse]:
    if aggregate:
        holdings = holdings_sync.aggregate_holdings([account_id] if account_id else None)
    else:
        holdings = holdings_sync.get_holdings(account_id)
    return [HoldingResponse.model_validate(h) for h in holdings]


@router.post("/sync", response_model=list[HoldingsSyncResponse])
def sync_holdings(
    account_id: Optional[str] = Depends(resolve_account_id),
    holdings_sync: HoldingsSynchronizer = Depends(get_holdings_sync),
) -> list[HoldingsSyncResponse]:
    """Recompute holdings from the ledger (every account when none is given)."""
    results = [holdings_sync.sync(account_id)] if account_id else holdings_sync.sync_all()
    return [HoldingsSyncResponse.model_validate(r) for r in results]
