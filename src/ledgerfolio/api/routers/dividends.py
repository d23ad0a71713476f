"""Dividend history and projection endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ledgerfolio.api.deps import get_dividend_service, resolve_account_id
from ledgerfolio.api.schemas import (
    DividendProjectionResponse,
    MonthlyDividendResponse,
    MonthlyProjectionResponse,
    SymbolDividendResponse,
    YieldProjectionResponse,
)
from ledgerfolio.services import DividendService

router = APIRouter(prefix="/dividends", tags=["dividends"])


@router.get("/history", response_model=list[MonthlyDividendResponse])
def monthly_history(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    symbol: Optional[str] = Query(None),
    account_id: Optional[str] = Depends(resolve_account_id),
    dividends: DividendService = Depends(get_dividend_service),
) -> list[MonthlyDividendResponse]:
    """Dividend income per month and currency."""
    history = dividends.monthly_history(year=year, account_id=account_id, symbol=symbol)
    return [MonthlyDividendResponse.model_validate(m) for m in history]


@router.get("/by-symbol", response_model=list[SymbolDividendResponse])
def by_symbol(
    year: Optional[int] = Query(None, ge=1900, le=2100),
    account_id: Optional[str] = Depends(resolve_account_id),
    dividends: DividendService = Depends(get_dividend_service),
) -> list[SymbolDividendResponse]:
    return [
        SymbolDividendResponse.model_validate(s)
        for s in dividends.by_symbol(year=year, account_id=account_id)
    ]


@router.get("/projection", response_model=list[DividendProjectionResponse])
def projection(
    account_id: Optional[str] = Depends(resolve_account_id),
    dividends: DividendService = Depends(get_dividend_service),
) -> list[DividendProjectionResponse]:
    """Forward income for held symbols based on their payment history."""
    return [DividendProjectionResponse.model_validate(p) for p in dividends.project(account_id)]


@router.get("/projection/monthly", response_model=list[MonthlyProjectionResponse])
def projection_monthly(
    account_id: Optional[str] = Depends(resolve_account_id),
    dividends: DividendService = Depends(get_dividend_service),
) -> list[MonthlyProjectionResponse]:
    return [
        MonthlyProjectionResponse.model_validate(m)
        for m in dividends.projected_monthly(account_id)
    ]


@router.get("/yield", response_model=list[YieldProjectionResponse])
def yield_projection(
    account_id: Optional[str] = Depends(resolve_account_id),
    dividends: DividendService = Depends(get_dividend_service),
) -> list[YieldProjectionResponse]:
    """Income implied by current dividend yields."""
    return [
        YieldProjectionResponse.model_validate(y)
        for y in dividends.yield_projections(account_id)
    ]
