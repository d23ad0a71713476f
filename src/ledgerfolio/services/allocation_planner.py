"""Weekly contribution planner for target-weight portfolios."""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from ledgerfolio.domain.models import AllocationTarget, PortfolioSettings
from ledgerfolio.domain.views import AllocationLine, AllocationSummary, PositionValue
from ledgerfolio.repositories.protocols import HoldingRepository
from ledgerfolio.services.ledger_service import LedgerService
from ledgerfolio.services.quote_cache import QuoteCache
from ledgerfolio.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_WEIGHT_TOLERANCE = Decimal("0.01")
# Share of the contribution split by target weight when some target is underweight;
# the rest goes to underweight targets in proportion to their gap
_BASE_RATIO_WITH_GAPS = Decimal("0.5")
FOREIGN_CURRENCY = "USD"


def _matches(target_symbol: str, position: PositionValue) -> bool:
    mapped = (position.symbol_mapped or "").upper()
    symbol = position.symbol.upper()
    return (
        (bool(mapped) and mapped.replace(".TO", "") == target_symbol)
        or mapped == target_symbol
        or symbol == target_symbol
        or symbol.replace(".TO", "") == target_symbol
    )


def _value_cad(position: PositionValue, fx_rate: Decimal) -> Decimal:
    if position.currency.upper() == FOREIGN_CURRENCY:
        return position.market_value * fx_rate
    return position.market_value


def plan(
    positions: Sequence[PositionValue],
    settings: PortfolioSettings,
    fx_rate: Decimal,
    cash_balance: Decimal = _ZERO,
) -> AllocationSummary:
    """
    Split the weekly contribution across targets.

    Half follows target weights and half goes to underweight targets in
    proportion to their gap; with no underweight target everything follows
    target weights. USD targets (other than CASH) pay the FX fee on the CAD
    amount before conversion. Stateless.
    """
    fx_rate = Decimal(str(fx_rate))
    cash_balance = Decimal(str(cash_balance))
    weekly = settings.weekly_amount
    fee_percent = settings.fx_fee_percent
    targets = [
        AllocationTarget(
            symbol=t.symbol.upper(),
            target_weight=t.target_weight,
            currency=(t.currency or "CAD").upper(),
        )
        for t in settings.targets
    ]

    has_cash_target = any(t.is_cash for t in targets)
    total_value = sum((_value_cad(p, fx_rate) for p in positions), _ZERO)
    if has_cash_target:
        total_value += cash_balance

    sum_weights = sum((t.target_weight for t in targets), _ZERO)
    weights_warning = bool(targets) and abs(sum_weights - _HUNDRED) > _WEIGHT_TOLERANCE
    if weights_warning:
        logger.warning("Target weights sum to %s, not 100", sum_weights)

    current_values = {}
    gaps = {}
    for target in targets:
        if target.is_cash:
            current = cash_balance
        else:
            current = sum(
                (_value_cad(p, fx_rate) for p in positions if _matches(target.symbol, p)),
                _ZERO,
            )
        current_weight = current / total_value * _HUNDRED if total_value > 0 else _ZERO
        current_values[target.symbol] = (current, current_weight)
        gaps[target.symbol] = target.target_weight - current_weight

    total_gap = sum((g for g in gaps.values() if g > 0), _ZERO)
    base_ratio = _BASE_RATIO_WITH_GAPS if total_gap > 0 else Decimal("1")

    summary = AllocationSummary(
        total_weekly_amount=weekly,
        total_market_value_cad=total_value,
        fx_rate=fx_rate,
        weights_warning=weights_warning,
    )
    for target in targets:
        current, current_weight = current_values[target.symbol]
        gap = gaps[target.symbol]

        base = target.target_weight / sum_weights * weekly * base_ratio if sum_weights > 0 else _ZERO
        bonus = gap / total_gap * weekly * (1 - base_ratio) if gap > 0 and total_gap > 0 else _ZERO
        raw = base + bonus

        if target.currency == FOREIGN_CURRENCY and not target.is_cash:
            fee = raw * fee_percent / _HUNDRED
            amount = (raw - fee) / fx_rate if fx_rate > 0 else _ZERO
        else:
            fee = _ZERO
            amount = raw

        summary.total_fx_fee += fee
        summary.allocations.append(
            AllocationLine(
                symbol=target.symbol,
                currency=target.currency,
                target_weight=target.target_weight,
                current_value_cad=current,
                current_weight=current_weight,
                gap=gap,
                base_amount_cad=base,
                bonus_amount_cad=bonus,
                raw_amount_cad=raw,
                fx_fee_cad=fee,
                amount=amount,
            )
        )
    return summary


class AllocationService:
    """Builds the weekly plan from stored holdings, quotes and settings."""

    def __init__(
        self,
        holding_repo: HoldingRepository,
        quote_cache: QuoteCache,
        settings_service: SettingsService,
        ledger_service: LedgerService,
        base_currency: str = "CAD",
    ):
        self._holding_repo = holding_repo
        self._quote_cache = quote_cache
        self._settings_service = settings_service
        self._ledger_service = ledger_service
        self._base_currency = base_currency

    def current_positions(self) -> list[PositionValue]:
        """Holdings valued at the latest quote, or at average cost when unpriced."""
        holdings = self._holding_repo.list_all()
        quotes = self._quote_cache.get_quotes(sorted({h.symbol for h in holdings}))
        positions = []
        for h in holdings:
            quote = quotes.get(h.symbol)
            price = quote.price if quote else h.average_cost
            positions.append(
                PositionValue(
                    symbol=h.symbol,
                    symbol_mapped=h.symbol,
                    market_value=h.quantity * price,
                    currency=h.currency,
                    account_id=h.account_id,
                )
            )
        return positions

    def build_plan(self, weekly_amount: Optional[Decimal] = None) -> AllocationSummary:
        settings = self._settings_service.get()
        if weekly_amount is not None:
            settings.weekly_amount = weekly_amount
        fx_rate = self._quote_cache.get_fx_rate()
        cash = self._ledger_service.cash_in_base_currency(fx_rate, base_currency=self._base_currency)
        return plan(self.current_positions(), settings, fx_rate, cash)
