"""View models package."""

from ledgerfolio.domain.views.imports import (
    NormalizedRow,
    RowFailure,
    ParseResult,
    ImportResult,
    PreviewResult,
)
from ledgerfolio.domain.views.portfolio import (
    Quote,
    HoldingAnomaly,
    HoldingsSyncResult,
    PositionValue,
    AllocationLine,
    AllocationSummary,
    PositionDiscrepancy,
    BrokerSyncResult,
)
from ledgerfolio.domain.views.dividends import (
    DividendFrequency,
    MonthlyDividend,
    SymbolDividendSummary,
    DividendProjection,
    MonthlyProjection,
    YieldProjection,
)

__all__ = [
    "NormalizedRow",
    "RowFailure",
    "ParseResult",
    "ImportResult",
    "PreviewResult",
    "Quote",
    "HoldingAnomaly",
    "HoldingsSyncResult",
    "PositionValue",
    "AllocationLine",
    "AllocationSummary",
    "PositionDiscrepancy",
    "BrokerSyncResult",
    "DividendFrequency",
    "MonthlyDividend",
    "SymbolDividendSummary",
    "DividendProjection",
    "MonthlyProjection",
    "YieldProjection",
]
