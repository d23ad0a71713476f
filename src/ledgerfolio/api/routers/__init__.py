"""API routers package."""

from ledgerfolio.api.routers.accounts import router as accounts_router
from ledgerfolio.api.routers.transactions import router as transactions_router
from ledgerfolio.api.routers.imports import router as imports_router
from ledgerfolio.api.routers.holdings import router as holdings_router
from ledgerfolio.api.routers.quotes import router as quotes_router
from ledgerfolio.api.routers.dividends import router as dividends_router
from ledgerfolio.api.routers.allocation import router as allocation_router
from ledgerfolio.api.routers.settings import router as settings_router
from ledgerfolio.api.routers.broker import router as broker_router

__all__ = [
    "accounts_router",
    "transactions_router",
    "imports_router",
    "holdings_router",
    "quotes_router",
    "dividends_router",
    "allocation_router",
    "settings_router",
    "broker_router",
]
