"""Account and cash endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from ledgerfolio.api.deps import get_ledger_service, get_quote_cache, resolve_account_id
from ledgerfolio.api.schemas import AccountListResponse, AccountResponse, CashResponse
from ledgerfolio.config.settings import get_settings
from ledgerfolio.services import LedgerService, QuoteCache

router = APIRouter(tags=["accounts"])


@router.get("/accounts", response_model=AccountListResponse)
def list_accounts(ledger: LedgerService = Depends(get_ledger_service)) -> AccountListResponse:
    """List all accounts seen in imported data."""
    return AccountListResponse(
        accounts=[AccountResponse.model_validate(a) for a in ledger.list_accounts()]
    )


@router.get("/accounts/{account_number}", response_model=AccountResponse)
def get_account(
    account_number: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> AccountResponse:
    return AccountResponse.model_validate(ledger.get_account_by_number(account_number))


@router.get("/cash", response_model=CashResponse)
def get_cash(
    account_id: Optional[str] = Depends(resolve_account_id),
    ledger: LedgerService = Depends(get_ledger_service),
    quotes: QuoteCache = Depends(get_quote_cache),
) -> CashResponse:
    """Cash balances per currency, net deposits and the base-currency total."""
    base_currency = get_settings().base_currency
    fx_rate = quotes.get_fx_rate()
    return CashResponse(
        balances=ledger.cash_balances(account_id),
        net_deposits=ledger.net_deposits(account_id),
        total_in_base_currency=ledger.cash_in_base_currency(fx_rate, account_id, base_currency),
        base_currency=base_currency,
        fx_rate=fx_rate,
    )
