"""Broker sync endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_broker_sync_service
from ledgerfolio.api.schemas import BrokerSyncListResponse, BrokerSyncResponse
from ledgerfolio.services import BrokerSyncService

router = APIRouter(prefix="/broker", tags=["broker"])


@router.post("/sync", response_model=BrokerSyncListResponse)
def sync(
    account: Optional[str] = Query(None, description="Broker account number (all if empty)"),
    account_type: Optional[str] = Query(None),
    service: BrokerSyncService = Depends(get_broker_sync_service),
) -> BrokerSyncListResponse:
    """Pull activity history from the broker and merge it into the ledger."""
    if account:
        results = [service.sync_account(account, account_type)]
    else:
        results = service.sync_all()
    return BrokerSyncListResponse(
        results=[BrokerSyncResponse.model_validate(r) for r in results]
    )


@router.post("/auto-sync", response_model=BrokerSyncListResponse)
def auto_sync(service: BrokerSyncService = Depends(get_broker_sync_service)) -> BrokerSyncListResponse:
    """Sync accounts whose last sync is older than the configured interval."""
    return BrokerSyncListResponse(
        results=[BrokerSyncResponse.model_validate(r) for r in service.auto_sync()]
    )
