"""Pydantic schemas for API request/response."""

from ledgerfolio.api.schemas.account import (
    AccountResponse,
    AccountListResponse,
    CashResponse,
)
from ledgerfolio.api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from ledgerfolio.api.schemas.imports import (
    RowErrorResponse,
    ImportResultResponse,
    PreviewRowResponse,
    PreviewResponse,
    ImportFileResponse,
)
from ledgerfolio.api.schemas.portfolio import (
    HoldingResponse,
    HoldingAnomalyResponse,
    HoldingsSyncResponse,
    QuoteResponse,
    QuotesResponse,
    SymbolMatchResponse,
    AllocationLineResponse,
    AllocationPlanResponse,
)
from ledgerfolio.api.schemas.dividends import (
    MonthlyDividendResponse,
    SymbolDividendResponse,
    DividendProjectionResponse,
    MonthlyProjectionResponse,
    YieldProjectionResponse,
)
from ledgerfolio.api.schemas.settings import (
    AllocationTargetSchema,
    PortfolioSettingsSchema,
)
from ledgerfolio.api.schemas.broker import (
    PositionDiscrepancyResponse,
    BrokerSyncResponse,
    BrokerSyncListResponse,
)

__all__ = [
    "AccountResponse",
    "AccountListResponse",
    "CashResponse",
    "TransactionCreateRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "RowErrorResponse",
    "ImportResultResponse",
    "PreviewRowResponse",
    "PreviewResponse",
    "ImportFileResponse",
    "HoldingResponse",
    "HoldingAnomalyResponse",
    "HoldingsSyncResponse",
    "QuoteResponse",
    "QuotesResponse",
    "SymbolMatchResponse",
    "AllocationLineResponse",
    "AllocationPlanResponse",
    "MonthlyDividendResponse",
    "SymbolDividendResponse",
    "DividendProjectionResponse",
    "MonthlyProjectionResponse",
    "YieldProjectionResponse",
    "AllocationTargetSchema",
    "PortfolioSettingsSchema",
    "PositionDiscrepancyResponse",
    "BrokerSyncResponse",
    "BrokerSyncListResponse",
]
