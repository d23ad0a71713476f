"""Portfolio allocation settings."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

CASH_SYMBOL = "CASH"


@dataclass
class AllocationTarget:
    """Desired weight (percent of portfolio value) for one symbol or CASH."""

    symbol: str
    target_weight: Decimal
    currency: str = "CAD"

    @property
    def is_cash(self) -> bool:
        return self.symbol == CASH_SYMBOL


@dataclass
class PortfolioSettings:
    """Weekly contribution settings; weights are expected to sum to ~100."""

    weekly_amount: Decimal = field(default_factory=lambda: Decimal("0"))
    fx_fee_percent: Decimal = field(default_factory=lambda: Decimal("1.5"))
    targets: list[AllocationTarget] = field(default_factory=list)

    @property
    def total_weight(self) -> Decimal:
        return sum((t.target_weight for t in self.targets), Decimal("0"))

    def find_target(self, symbol: str) -> Optional[AllocationTarget]:
        for target in self.targets:
            if target.symbol == symbol:
                return target
        return None
