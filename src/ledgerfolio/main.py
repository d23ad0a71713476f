"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ledgerfolio import __version__
from ledgerfolio.api.routers import (
    accounts_router,
    allocation_router,
    broker_router,
    dividends_router,
    holdings_router,
    imports_router,
    quotes_router,
    settings_router,
    transactions_router,
)
from ledgerfolio.config.logging_config import setup_logging
from ledgerfolio.config.settings import get_settings
from ledgerfolio.core.exceptions import AppError
from ledgerfolio.repositories.sqlalchemy.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging()
    init_db()
    yield


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Ledger reconciliation and portfolio valuation",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(imports_router)
app.include_router(holdings_router)
app.include_router(quotes_router)
app.include_router(dividends_router)
app.include_router(allocation_router)
app.include_router(settings_router)
app.include_router(broker_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
