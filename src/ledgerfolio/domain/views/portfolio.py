"""View models for holdings, quotes and allocation outputs."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ledgerfolio.domain.models import Holding


@dataclass
class Quote:
    """Market quote served by the quote cache."""

    ticker: str
    price: Decimal
    updated_at: datetime
    cached: bool
    previous_close: Optional[Decimal] = None
    currency: Optional[str] = None
    dividend_yield: Optional[Decimal] = None
    fifty_two_week_high: Optional[Decimal] = None
    fifty_two_week_low: Optional[Decimal] = None
    name: Optional[str] = None
    logo_url: Optional[str] = None
    stale: bool = False


@dataclass
class HoldingAnomaly:
    """A disposal larger than the quantity the ledger says was held."""

    symbol: str
    requested: Decimal
    available: Decimal
    transaction_date: Optional[date] = None


@dataclass
class HoldingsSyncResult:
    """Outcome of recomputing one account's holdings."""

    account_id: str
    holdings: list[Holding] = field(default_factory=list)
    removed_symbols: list[str] = field(default_factory=list)
    anomalies: list[HoldingAnomaly] = field(default_factory=list)


@dataclass
class PositionValue:
    """A holding valued in its own currency, input to the allocation planner."""

    symbol: str
    market_value: Decimal
    currency: str = "CAD"
    symbol_mapped: Optional[str] = None
    account_id: Optional[str] = None


@dataclass
class AllocationLine:
    """Buy instruction for one target."""

    symbol: str
    currency: str
    target_weight: Decimal
    current_value_cad: Decimal
    current_weight: Decimal
    gap: Decimal
    base_amount_cad: Decimal
    bonus_amount_cad: Decimal
    raw_amount_cad: Decimal
    fx_fee_cad: Decimal
    amount: Decimal  # in the target's native currency


@dataclass
class AllocationSummary:
    """Weekly buy plan across all targets."""

    allocations: list[AllocationLine] = field(default_factory=list)
    total_fx_fee: Decimal = field(default_factory=lambda: Decimal("0"))
    total_weekly_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    total_market_value_cad: Decimal = field(default_factory=lambda: Decimal("0"))
    fx_rate: Decimal = field(default_factory=lambda: Decimal("1"))
    weights_warning: bool = False


@dataclass
class PositionDiscrepancy:
    """Broker-reported quantity that disagrees with the ledger-derived holding."""

    symbol: str
    broker_quantity: Decimal
    ledger_quantity: Decimal

    @property
    def difference(self) -> Decimal:
        return self.broker_quantity - self.ledger_quantity


@dataclass
class BrokerSyncResult:
    """Outcome of syncing one broker account."""

    account_number: str
    fetched: int = 0
    mapped: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    failed_chunks: list[tuple[date, date]] = field(default_factory=list)
    discrepancies: list[PositionDiscrepancy] = field(default_factory=list)
    synced_at: Optional[datetime] = None
