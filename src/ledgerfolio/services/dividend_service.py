"""Dividend history aggregation and forward income projection."""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ledgerfolio.core.timezone import today_eastern
from ledgerfolio.domain.models import Holding, Transaction, TransactionAction
from ledgerfolio.domain.views import (
    DividendFrequency,
    DividendProjection,
    MonthlyDividend,
    MonthlyProjection,
    SymbolDividendSummary,
    YieldProjection,
)
from ledgerfolio.repositories.protocols import HoldingRepository, TransactionRepository
from ledgerfolio.services.quote_cache import QuoteCache

logger = logging.getLogger(__name__)

_PAYMENTS_PER_YEAR = {
    DividendFrequency.MONTHLY: 12,
    DividendFrequency.QUARTERLY: 4,
    DividendFrequency.ANNUAL: 1,
}


def dividend_amount(txn: Transaction) -> Decimal:
    """Cash paid by a dividend row as |net|; quantity x price when no net amount is given."""
    if txn.net_amount is not None:
        return abs(txn.net_amount)
    if txn.quantity is not None and txn.price is not None:
        return abs(txn.quantity * txn.price)
    return Decimal("0")


def detect_frequency(payment_dates: list[date]) -> DividendFrequency:
    """Classify cadence from the average gap between consecutive payment days."""
    days = sorted(set(payment_dates))
    if len(days) < 2:
        return DividendFrequency.IRREGULAR
    gaps = [(b - a).days for a, b in zip(days, days[1:])]
    average = sum(gaps) / len(gaps)
    if 20 <= average <= 45:
        return DividendFrequency.MONTHLY
    if 75 <= average <= 120:
        return DividendFrequency.QUARTERLY
    if 300 <= average <= 400:
        return DividendFrequency.ANNUAL
    return DividendFrequency.IRREGULAR


def projection_confidence(first_payment: date, last_payment: date, frequency: DividendFrequency) -> int:
    """0-100 score from history length plus a bonus for a regular cadence."""
    years = (last_payment - first_payment).days / 365.25
    if years >= 3:
        score = 85
    elif years >= 2:
        score = 75
    elif years >= 1:
        score = 60
    else:
        score = 50
    if frequency != DividendFrequency.IRREGULAR:
        score += 10
    return min(score, 100)


def payment_months(frequency: DividendFrequency, paid_months: list[int]) -> list[int]:
    """Calendar months a symbol is expected to pay in."""
    if frequency == DividendFrequency.MONTHLY:
        return list(range(1, 13))
    if frequency == DividendFrequency.QUARTERLY:
        first = ((min(paid_months) - 1) % 3) + 1 if paid_months else 3
        return [first, first + 3, first + 6, first + 9]
    if frequency == DividendFrequency.ANNUAL:
        return [paid_months[-1] if paid_months else 12]
    return sorted(set(paid_months))


class DividendService:
    """
    Groups dividend rows of the ledger and projects future income.

    History-based projections look at the trailing twelve months of
    payments; yield-based projections use quote cache data instead.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        holding_repo: HoldingRepository,
        quote_cache: Optional[QuoteCache] = None,
    ):
        self._transaction_repo = transaction_repo
        self._holding_repo = holding_repo
        self._quote_cache = quote_cache

    def monthly_history(
        self,
        year: Optional[int] = None,
        account_id: Optional[str] = None,
        symbol: Optional[str] = None,
    ) -> list[MonthlyDividend]:
        """Dividend income per month (YYYY-MM) and currency, oldest first."""
        totals: dict[tuple[str, str], Decimal] = defaultdict(lambda: Decimal("0"))
        for txn in self._dividends(year, account_id, symbol):
            month = txn.transaction_date.strftime("%Y-%m")
            totals[(month, txn.currency)] += dividend_amount(txn)
        return [
            MonthlyDividend(month=month, currency=currency, amount=amount)
            for (month, currency), amount in sorted(totals.items())
        ]

    def by_symbol(
        self,
        year: Optional[int] = None,
        account_id: Optional[str] = None,
    ) -> list[SymbolDividendSummary]:
        """Dividend totals per symbol and currency, largest first."""
        summaries: dict[tuple[str, str], SymbolDividendSummary] = {}
        for txn in self._dividends(year, account_id, None):
            if not txn.holding_symbol:
                continue
            key = (txn.holding_symbol, txn.currency)
            summary = summaries.get(key)
            if summary is None:
                summary = summaries[key] = SymbolDividendSummary(
                    symbol=txn.holding_symbol,
                    currency=txn.currency,
                    total=Decimal("0"),
                    payments=0,
                )
            summary.total += dividend_amount(txn)
            summary.payments += 1
            if summary.last_payment is None or txn.transaction_date > summary.last_payment:
                summary.last_payment = txn.transaction_date
        return sorted(summaries.values(), key=lambda s: (-s.total, s.symbol))

    def project(
        self,
        account_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[DividendProjection]:
        """History-based projection for each held symbol that paid in the last year."""
        today = today or today_eastern()
        held = {h.symbol for h in self._holdings(account_id)}
        if not held:
            return []

        payments: dict[str, dict[date, Decimal]] = defaultdict(
            lambda: defaultdict(lambda: Decimal("0"))
        )
        currencies: dict[str, str] = {}
        for txn in self._dividends(None, account_id, None):
            symbol = txn.holding_symbol
            if symbol not in held:
                continue
            # Same-day rows form one payment
            payments[symbol][txn.transaction_date] += dividend_amount(txn)
            currencies[symbol] = txn.currency

        window_start = today - timedelta(days=365)
        projections = []
        for symbol in sorted(payments):
            by_day = payments[symbol]
            recent = {d: a for d, a in by_day.items() if window_start < d <= today}
            if not recent:
                continue

            days = sorted(by_day)
            frequency = detect_frequency(days)
            average = sum(recent.values(), Decimal("0")) / len(recent)
            per_year = _PAYMENTS_PER_YEAR.get(frequency, len(recent))
            months = payment_months(frequency, [d.month for d in sorted(recent)])
            paid_this_month = any(d.year == today.year and d.month == today.month for d in recent)
            remaining = sum(
                1
                for m in months
                if m > today.month or (m == today.month and not paid_this_month)
            )

            projections.append(
                DividendProjection(
                    symbol=symbol,
                    currency=currencies[symbol],
                    frequency=frequency,
                    average_payment=average,
                    payments_per_year=per_year,
                    projected_annual=average * per_year,
                    remaining_payments=remaining,
                    remaining_this_year=average * remaining,
                    confidence=projection_confidence(days[0], days[-1], frequency),
                    payment_months=months,
                    last_payment=days[-1],
                )
            )
        return projections

    def projected_monthly(
        self,
        account_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[MonthlyProjection]:
        """Spread projected payments over calendar months, per currency."""
        buckets: dict[tuple[int, str], MonthlyProjection] = {}
        for projection in self.project(account_id, today):
            for month in projection.payment_months:
                key = (month, projection.currency)
                bucket = buckets.get(key)
                if bucket is None:
                    bucket = buckets[key] = MonthlyProjection(
                        month=month,
                        currency=projection.currency,
                        amount=Decimal("0"),
                    )
                bucket.amount += projection.average_payment
                bucket.symbols.append(projection.symbol)
        return [buckets[k] for k in sorted(buckets)]

    def yield_projections(self, account_id: Optional[str] = None) -> list[YieldProjection]:
        """Annual income implied by each held symbol's dividend yield."""
        if self._quote_cache is None:
            return []
        quantities: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for holding in self._holdings(account_id):
            quantities[holding.symbol] += holding.quantity
        if not quantities:
            return []

        quotes = self._quote_cache.get_quotes(sorted(quantities))
        projections = []
        for symbol in sorted(quantities):
            quote = quotes.get(symbol)
            if quote is None or not quote.dividend_yield:
                continue
            quantity = quantities[symbol]
            projections.append(
                YieldProjection(
                    symbol=symbol,
                    currency=quote.currency or "USD",
                    quantity=quantity,
                    price=quote.price,
                    dividend_yield=quote.dividend_yield,
                    annual_income=quote.dividend_yield / Decimal("100") * quote.price * quantity,
                )
            )
        return projections

    def _dividends(
        self,
        year: Optional[int],
        account_id: Optional[str],
        symbol: Optional[str],
    ) -> list[Transaction]:
        return self._transaction_repo.query(
            account_ids=[account_id] if account_id else None,
            symbols=[symbol.upper()] if symbol else None,
            actions=[TransactionAction.DIVIDEND_CASH],
            start_date=date(year, 1, 1) if year else None,
            end_date=date(year, 12, 31) if year else None,
        )

    def _holdings(self, account_id: Optional[str]) -> list[Holding]:
        if account_id:
            return self._holding_repo.list_by_account(account_id)
        return self._holding_repo.list_all()
