"""Transaction (ledger row) domain model."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ledgerfolio.domain.models.enums import TransactionAction, ImportSource


@dataclass
class Transaction:
    """
    Ledger row (source of truth).

    Immutable once inserted: corrections arrive as new offsetting rows.
    `source_row_hash` is globally unique and identifies the row's origin.
    """

    txn_id: str
    account_id: str
    transaction_date: date
    action: TransactionAction
    currency: str
    source_row_hash: str
    settlement_date: Optional[date] = None
    symbol: Optional[str] = None
    symbol_mapped: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    gross_amount: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    currency_equivalent: Optional[Decimal] = None
    activity_type: Optional[str] = None
    source: ImportSource = ImportSource.FILE
    import_file_id: Optional[str] = None
    created_at_est: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.action, str):
            self.action = TransactionAction(self.action)
        if isinstance(self.source, str):
            self.source = ImportSource(self.source)

    @property
    def holding_symbol(self) -> Optional[str]:
        """Symbol the row is aggregated under: mapped first, raw otherwise."""
        return self.symbol_mapped or self.symbol
