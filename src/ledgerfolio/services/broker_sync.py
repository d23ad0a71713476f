"""Broker API synchronization through the reconciliation engine."""

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from ledgerfolio.core.exceptions import (
    AppError,
    ReconnectRequiredError,
    UpstreamUnavailableError,
)
from ledgerfolio.core.timezone import now_eastern, to_eastern
from ledgerfolio.domain.models import ImportSource, TransactionAction
from ledgerfolio.domain.views import (
    BrokerSyncResult,
    NormalizedRow,
    PositionDiscrepancy,
)
from ledgerfolio.ingest import compute_file_hash, normalize_account_type, row_signature
from ledgerfolio.providers.broker_client import BrokerActivity, BrokerClient
from ledgerfolio.repositories.protocols import (
    AccountRepository,
    BrokerSyncStateRepository,
    UnitOfWork,
)
from ledgerfolio.services.holdings_sync import MIN_QUANTITY, HoldingsSynchronizer
from ledgerfolio.services.reconciliation_service import ReconciliationEngine

logger = logging.getLogger(__name__)

A = TransactionAction

# Checked in order against the broker's action and type text
ACTIVITY_KEYWORDS: list[tuple[tuple[str, ...], TransactionAction]] = [
    (("reinvest", "drip"), A.DIVIDEND_DRIP),
    (("dividend",), A.DIVIDEND_CASH),
    (("transfer in", "deposit", "contribution"), A.TRANSFER_IN),
    (("transfer out", "withdrawal"), A.TRANSFER_OUT),
    (("split",), A.SPLIT),
    (("buy",), A.BUY),
    (("sell",), A.SELL),
]


def map_activity(
    activity: BrokerActivity,
    account_number: str,
    account_type: Optional[str] = None,
) -> Optional[NormalizedRow]:
    """Map a broker activity onto a normalized row, or None when it is not a ledger event."""
    text = " ".join(part for part in (activity.action, activity.type) if part).lower()
    action = None
    for keywords, candidate in ACTIVITY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            action = candidate
            break
    if action is None:
        return None

    symbol = (activity.symbol or "").strip().upper() or None
    if action.requires_symbol and not symbol:
        return None

    quantity = abs(activity.quantity) if activity.quantity is not None else None
    price = abs(activity.price) if activity.price is not None else None
    net_amount = activity.net_amount
    if net_amount is None and quantity is not None and price is not None:
        net_amount = quantity * price
        if action is A.BUY:
            net_amount = -net_amount

    return NormalizedRow(
        transaction_date=activity.trade_date,
        action=action,
        currency=(activity.currency or "CAD").upper(),
        account_number=account_number,
        settlement_date=activity.settlement_date,
        symbol=symbol,
        description=activity.description,
        quantity=quantity,
        price=price,
        gross_amount=activity.gross_amount,
        commission=activity.commission,
        net_amount=net_amount,
        account_type=account_type,
        activity_type=activity.type,
        raw_action=activity.action,
    )


def occurrence_ordinals(rows: list[NormalizedRow]) -> list[int]:
    """Ordinal of each row among rows with identical content, in order."""
    seen: Counter = Counter()
    ordinals = []
    for row in rows:
        signature = row_signature(row)
        ordinals.append(seen[signature])
        seen[signature] += 1
    return ordinals


def chunk_windows(start: date, end: date, chunk_days: int) -> list[tuple[date, date]]:
    """Split [start, end] into consecutive inclusive windows of at most chunk_days."""
    windows = []
    cursor = start
    while cursor <= end:
        window_end = min(cursor + timedelta(days=chunk_days - 1), end)
        windows.append((cursor, window_end))
        cursor = window_end + timedelta(days=1)
    return windows


class BrokerSyncService:
    """
    Pulls activity history from a broker API into the ledger.

    Broker rows go through the same reconciliation engine as file imports,
    so an activity already imported from a spreadsheet is recognized by its
    content signature and skipped. Broker-reported positions are compared to
    the derived holdings and never written.
    """

    def __init__(
        self,
        client: BrokerClient,
        engine: ReconciliationEngine,
        holdings_sync: HoldingsSynchronizer,
        account_repo: AccountRepository,
        state_repo: BrokerSyncStateRepository,
        unit_of_work: UnitOfWork,
        history_days: int = 365,
        chunk_days: int = 30,
        auto_sync_interval: timedelta = timedelta(minutes=60),
        clock: Callable[[], datetime] = now_eastern,
    ):
        self._client = client
        self._engine = engine
        self._holdings_sync = holdings_sync
        self._account_repo = account_repo
        self._state_repo = state_repo
        self._uow = unit_of_work
        self._history_days = history_days
        self._chunk_days = chunk_days
        self._auto_sync_interval = auto_sync_interval
        self._clock = clock

    def sync_account(
        self,
        account_number: str,
        account_type: Optional[str] = None,
        today: Optional[date] = None,
    ) -> BrokerSyncResult:
        """
        Sync one account's activity history.

        Raises:
            ReconnectRequiredError: the broker credential is no longer valid
        """
        today = today or self._clock().date()
        start = today - timedelta(days=self._history_days)
        result = BrokerSyncResult(account_number=account_number)
        account_type = normalize_account_type(account_type)

        rows: list[NormalizedRow] = []
        for window_start, window_end in chunk_windows(start, today, self._chunk_days):
            try:
                activities = self._client.get_activities(account_number, window_start, window_end)
            except ReconnectRequiredError:
                raise
            except Exception as e:
                logger.warning(
                    "Activity fetch failed for %s %s..%s: %s",
                    account_number,
                    window_start,
                    window_end,
                    e,
                )
                result.failed_chunks.append((window_start, window_end))
                continue

            result.fetched += len(activities)
            for activity in activities:
                row = map_activity(activity, account_number, account_type)
                if row is None:
                    logger.debug("Skipping broker activity %r", activity.action)
                    continue
                rows.append(row)

        result.mapped = len(rows)
        if rows:
            imported = self._engine.ingest(
                rows,
                filename=f"broker-sync-{account_number}",
                file_hash=compute_file_hash(f"broker:{account_number}".encode("utf-8")),
                source=ImportSource.BROKER,
                dedup_by_signature=True,
                row_identity=occurrence_ordinals(rows),
            )
            result.inserted = imported.inserted
            result.skipped = imported.skipped
            result.failed = imported.failed

        account = self._account_repo.get_by_number(account_number)
        if account is not None:
            self._holdings_sync.sync(account.account_id)
            result.discrepancies = self._compare_positions(account_number, account.account_id)

        result.synced_at = self._clock()
        self._state_repo.mark_synced(account_number, result.synced_at)
        self._uow.commit()

        logger.info(
            "Broker sync %s: %d fetched, %d inserted, %d skipped, %d failed chunks",
            account_number,
            result.fetched,
            result.inserted,
            result.skipped,
            len(result.failed_chunks),
        )
        return result

    def sync_all(self, today: Optional[date] = None) -> list[BrokerSyncResult]:
        return [
            self.sync_account(account.number, account.type, today=today)
            for account in self._list_accounts()
        ]

    def auto_sync(self, now: Optional[datetime] = None) -> list[BrokerSyncResult]:
        """Sync only accounts whose last sync is older than the auto-sync interval."""
        now = to_eastern(now or self._clock())
        results = []
        for account in self._list_accounts():
            last = self._state_repo.get_last_synced(account.number)
            if last is not None and now - to_eastern(last) < self._auto_sync_interval:
                logger.debug("Broker account %s synced at %s; not due", account.number, last)
                continue
            results.append(self.sync_account(account.number, account.type, today=now.date()))
        return results

    def _list_accounts(self):
        try:
            return self._client.get_accounts()
        except (ReconnectRequiredError, UpstreamUnavailableError):
            raise
        except AppError as e:
            raise UpstreamUnavailableError(f"Broker account list unavailable: {e.message}") from e
        except Exception as e:
            raise UpstreamUnavailableError(f"Broker account list unavailable: {e}") from e

    def _compare_positions(self, account_number: str, account_id: str) -> list[PositionDiscrepancy]:
        try:
            positions = self._client.get_positions(account_number)
        except ReconnectRequiredError:
            raise
        except Exception as e:
            logger.warning("Position fetch failed for %s: %s", account_number, e)
            return []

        derived = {h.symbol: h.quantity for h in self._holdings_sync.get_holdings(account_id)}
        reported: dict[str, Decimal] = {}
        for position in positions:
            symbol = position.symbol.strip().upper()
            reported[symbol] = reported.get(symbol, Decimal("0")) + position.quantity

        discrepancies = []
        for symbol in sorted(set(derived) | set(reported)):
            broker_qty = reported.get(symbol, Decimal("0"))
            ledger_qty = derived.get(symbol, Decimal("0"))
            if abs(broker_qty - ledger_qty) >= MIN_QUANTITY:
                discrepancies.append(
                    PositionDiscrepancy(
                        symbol=symbol,
                        broker_quantity=broker_qty,
                        ledger_quantity=ledger_qty,
                    )
                )
        if discrepancies:
            logger.warning(
                "Broker positions for %s differ from ledger: %s",
                account_number,
                ", ".join(d.symbol for d in discrepancies),
            )
        return discrepancies
