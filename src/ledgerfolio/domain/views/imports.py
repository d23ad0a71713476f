"""View models for ingestion inputs and outputs."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerfolio.domain.models.enums import TransactionAction


@dataclass
class NormalizedRow:
    """
    A transaction row in the common shape shared by every source.

    Produced by the row normalizer (files) or the broker activity mapper,
    consumed by the reconciliation engine.
    """

    transaction_date: date
    action: TransactionAction
    currency: str
    account_number: str
    settlement_date: Optional[date] = None
    symbol: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    gross_amount: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    account_type: Optional[str] = None
    activity_type: Optional[str] = None
    raw_action: Optional[str] = None
    # Spreadsheet row number (header is row 1); used in diagnostics
    row_number: Optional[int] = None


@dataclass
class RowFailure:
    """A row that was excluded from the batch, with the reason."""

    row: int
    message: str


@dataclass
class ParseResult:
    """Outcome of normalizing a whole file."""

    rows: list[NormalizedRow] = field(default_factory=list)
    errors: list[RowFailure] = field(default_factory=list)

    @property
    def valid_rows(self) -> int:
        return len(self.rows)


@dataclass
class ImportResult:
    """Summary of one ingestion batch."""

    total: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[RowFailure] = field(default_factory=list)
    import_id: Optional[str] = None
    file_hash: Optional[str] = None
    account_ids: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.inserted > 0 or self.skipped > 0 or self.failed == 0


@dataclass
class PreviewResult:
    """Parse-only view of an upload."""

    valid_rows: int
    rows: list[NormalizedRow] = field(default_factory=list)
    errors: list[RowFailure] = field(default_factory=list)
    accounts: list[str] = field(default_factory=list)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    currency_totals: dict[str, Decimal] = field(default_factory=dict)
