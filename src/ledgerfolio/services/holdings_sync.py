"""Holdings synchronizer: derives positions from the ledger."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from ledgerfolio.core.exceptions import NotFoundError
from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.domain.models import Holding, Transaction, TransactionAction
from ledgerfolio.domain.views import HoldingAnomaly, HoldingsSyncResult
from ledgerfolio.repositories.protocols import (
    AccountRepository,
    HoldingRepository,
    TransactionRepository,
    UnitOfWork,
)

logger = logging.getLogger(__name__)

# Positions at or below this quantity are treated as closed
MIN_QUANTITY = Decimal("0.0001")
_QTY_STEP = Decimal("0.00000001")
_COST_STEP = Decimal("0.000001")

_ACQUIRE = (
    TransactionAction.BUY,
    TransactionAction.DIVIDEND_DRIP,
    TransactionAction.TRANSFER_IN,
)
_DISPOSE = (TransactionAction.SELL, TransactionAction.TRANSFER_OUT)


@dataclass
class _Position:
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    average_cost: Decimal = field(default_factory=lambda: Decimal("0"))
    currency: str = "CAD"


def _unit_cost(txn: Transaction) -> Decimal:
    """Per-share cost of an acquisition."""
    # In-kind transfers carry price 0 and net 0; their cost is the C$ equivalent
    if (
        txn.action == TransactionAction.TRANSFER_IN
        and txn.currency_equivalent is not None
        and txn.quantity
    ):
        return txn.currency_equivalent / abs(txn.quantity)
    if txn.price is not None and txn.price > 0:
        return txn.price
    if txn.net_amount and txn.quantity:
        return abs(txn.net_amount) / txn.quantity
    return Decimal("0")


def replay_ledger(
    transactions: Iterable[Transaction],
) -> tuple[dict[str, _Position], list[HoldingAnomaly]]:
    """
    Walk transactions in order and accumulate quantity and average cost.

    Pure function; disposals beyond the tracked quantity floor at zero and
    are reported as anomalies.
    """
    positions: dict[str, _Position] = defaultdict(_Position)
    anomalies: list[HoldingAnomaly] = []

    for txn in transactions:
        symbol = txn.holding_symbol
        quantity = txn.quantity
        if not symbol or quantity is None or quantity == 0:
            continue
        quantity = abs(quantity)
        pos = positions[symbol]
        pos.currency = txn.currency

        if txn.action in _ACQUIRE:
            new_qty = pos.quantity + quantity
            pos.average_cost = (
                pos.quantity * pos.average_cost + quantity * _unit_cost(txn)
            ) / new_qty
            pos.quantity = new_qty

        elif txn.action in _DISPOSE:
            if quantity > pos.quantity:
                anomalies.append(
                    HoldingAnomaly(
                        symbol=symbol,
                        requested=quantity,
                        available=pos.quantity,
                        transaction_date=txn.transaction_date,
                    )
                )
                pos.quantity = Decimal("0")
            else:
                pos.quantity -= quantity
            if pos.quantity == 0:
                pos.average_cost = Decimal("0")

        elif txn.action == TransactionAction.SPLIT:
            # Split rows carry the additional shares; total cost is unchanged
            new_qty = pos.quantity + quantity
            pos.average_cost = pos.quantity * pos.average_cost / new_qty
            pos.quantity = new_qty

    return dict(positions), anomalies


class HoldingsSynchronizer:
    """
    Keeps the holdings table consistent with the ledger.

    Holdings are never edited directly; sync() recomputes them from the full
    transaction history and writes the difference in one commit. Running it
    again without new transactions changes nothing.
    """

    def __init__(
        self,
        account_repo: AccountRepository,
        transaction_repo: TransactionRepository,
        holding_repo: HoldingRepository,
        unit_of_work: UnitOfWork,
    ):
        self._account_repo = account_repo
        self._transaction_repo = transaction_repo
        self._holding_repo = holding_repo
        self._uow = unit_of_work

    def sync(self, account_id: str) -> HoldingsSyncResult:
        """Recompute and persist holdings for one account."""
        if not self._account_repo.get_by_id(account_id):
            raise NotFoundError("Account", account_id)

        transactions = self._transaction_repo.list_by_account(account_id)
        positions, anomalies = replay_ledger(transactions)
        for anomaly in anomalies:
            logger.warning(
                "Account %s: disposal of %s %s exceeds tracked %s on %s; clamped to zero",
                account_id,
                anomaly.requested,
                anomaly.symbol,
                anomaly.available,
                anomaly.transaction_date,
            )

        existing = {h.symbol: h for h in self._holding_repo.list_by_account(account_id)}
        sync_time = now_eastern()
        holdings: list[Holding] = []

        try:
            for symbol, pos in sorted(positions.items()):
                quantity = pos.quantity.quantize(_QTY_STEP)
                if quantity <= MIN_QUANTITY:
                    continue
                average_cost = pos.average_cost.quantize(_COST_STEP)
                current = existing.get(symbol)
                if current and _unchanged(current, quantity, average_cost, pos.currency):
                    holdings.append(current)
                    continue
                holdings.append(
                    self._holding_repo.upsert(
                        Holding(
                            account_id=account_id,
                            symbol=symbol,
                            quantity=quantity,
                            average_cost=average_cost,
                            currency=pos.currency,
                            updated_at_est=sync_time,
                        )
                    )
                )

            kept = {h.symbol for h in holdings}
            removed = sorted(symbol for symbol in existing if symbol not in kept)
            self._holding_repo.delete(account_id, removed)
            self._uow.commit()
        except Exception:
            self._uow.rollback()
            raise

        logger.info(
            "Synced holdings for %s: %d held, %d removed, %d anomalies",
            account_id,
            len(holdings),
            len(removed),
            len(anomalies),
        )
        return HoldingsSyncResult(
            account_id=account_id,
            holdings=holdings,
            removed_symbols=removed,
            anomalies=anomalies,
        )

    def sync_all(self) -> list[HoldingsSyncResult]:
        """Resynchronize every account."""
        return [self.sync(account.account_id) for account in self._account_repo.list_all()]

    def get_holdings(self, account_id: Optional[str] = None) -> list[Holding]:
        """Holdings for one account, or for all accounts."""
        if account_id:
            return self._holding_repo.list_by_account(account_id)
        return self._holding_repo.list_all()

    def aggregate_holdings(self, account_ids: Optional[list[str]] = None) -> list[Holding]:
        """
        Combine holdings of the same symbol across accounts.

        Average cost is weighted by quantity.
        """
        if account_ids:
            source = [h for a in account_ids for h in self._holding_repo.list_by_account(a)]
        else:
            source = self._holding_repo.list_all()

        combined: dict[str, Holding] = {}
        for h in source:
            agg = combined.get(h.symbol)
            if agg is None:
                combined[h.symbol] = Holding(
                    account_id="*",
                    symbol=h.symbol,
                    quantity=h.quantity,
                    average_cost=h.average_cost,
                    currency=h.currency,
                    updated_at_est=h.updated_at_est,
                )
                continue
            total = agg.quantity + h.quantity
            agg.average_cost = (agg.book_value + h.book_value) / total
            agg.quantity = total
        return [combined[s] for s in sorted(combined)]


def _unchanged(current: Holding, quantity: Decimal, average_cost: Decimal, currency: str) -> bool:
    return (
        current.quantity == quantity
        and current.average_cost == average_cost
        and current.currency == currency
    )
