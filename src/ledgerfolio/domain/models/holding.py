"""Derived holding model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Holding:
    """
    Position per account/symbol, derived from the ledger.

    IMPORTANT: Never edit directly; always resynchronize from the ledger.
    """

    account_id: str
    symbol: str
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    average_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    currency: str = "CAD"
    updated_at_est: Optional[datetime] = field(default=None)

    @property
    def book_value(self) -> Decimal:
        return self.quantity * self.average_cost
