"""
Integration tests for broker API synchronization.

Tests cover:
- Activities mapped and merged through the reconciliation engine
- Repeated syncs and file imports never duplicate rows
- Failed activity windows reported without aborting the sync
- Reconnect errors and unreachable brokers
- Position comparison against derived holdings
- Auto-sync interval
"""

from datetime import date
from decimal import Decimal

import pytest

from ledgerfolio.core.exceptions import ReconnectRequiredError, UpstreamUnavailableError
from ledgerfolio.domain.models import ImportSource
from ledgerfolio.providers import BrokerAccount, BrokerActivity, BrokerPosition
from ledgerfolio.services import BrokerSyncService
from tests.conftest import FakeBrokerClient, questrade_row

ACCOUNT = "51234567"


def _buy(trade_date: date, symbol: str = "AAPL", quantity: str = "10", price: str = "185.50", net=None):
    return BrokerActivity(
        trade_date=trade_date,
        action="Buy",
        currency="USD",
        symbol=symbol,
        quantity=Decimal(quantity),
        price=Decimal(price),
        net_amount=Decimal(net) if net is not None else None,
        type="Trades",
    )


@pytest.fixture
def scripted_client(broker_client: FakeBrokerClient) -> FakeBrokerClient:
    broker_client.accounts = [BrokerAccount(number=ACCOUNT, type="Individual TFSA")]
    broker_client.activities[ACCOUNT] = [
        _buy(date(2024, 5, 1), net="-1855.00"),
        _buy(date(2024, 6, 3), symbol="MSFT", quantity="2", price="378.25"),
        BrokerActivity(
            trade_date=date(2024, 4, 1),
            action="",
            type="Deposits",
            currency="CAD",
            net_amount=Decimal("5000"),
        ),
        BrokerActivity(
            trade_date=date(2024, 4, 2),
            action="Interest",
            currency="CAD",
            net_amount=Decimal("1.20"),
        ),
    ]
    broker_client.positions[ACCOUNT] = [
        BrokerPosition(symbol="AAPL", quantity=Decimal("10")),
        BrokerPosition(symbol="MSFT", quantity=Decimal("2")),
    ]
    return broker_client


class TestSyncAccount:
    def test_activities_are_merged_into_ledger(
        self,
        scripted_client,
        broker_sync: BrokerSyncService,
        transaction_repo,
        account_repo,
    ):
        result = broker_sync.sync_account(ACCOUNT, "Individual TFSA")

        assert result.fetched == 4
        assert result.mapped == 3
        assert result.inserted == 3
        assert result.failed_chunks == []
        assert result.discrepancies == []
        assert result.synced_at is not None

        rows = transaction_repo.query()
        assert len(rows) == 3
        assert all(r.source == ImportSource.BROKER for r in rows)
        assert account_repo.get_by_number(ACCOUNT).account_type == "TFSA"

    def test_history_is_fetched_in_windows(self, scripted_client, broker_sync):
        broker_sync.sync_account(ACCOUNT)

        windows = [(start, end) for _, start, end in scripted_client.activity_calls]
        assert windows[0] == (date(2024, 3, 17), date(2024, 4, 15))
        assert windows[-1][1] == date(2024, 6, 15)
        assert all((end - start).days < 30 for start, end in windows)

    def test_repeated_sync_is_idempotent(self, scripted_client, broker_sync, transaction_repo):
        broker_sync.sync_account(ACCOUNT)

        again = broker_sync.sync_account(ACCOUNT)

        assert again.inserted == 0
        assert again.skipped == 3
        assert len(transaction_repo.query()) == 3

    def test_rows_from_file_import_are_not_duplicated(
        self,
        scripted_client,
        broker_sync,
        import_rows,
        transaction_repo,
    ):
        """
        GIVEN an AAPL buy already imported from a Questrade export
        WHEN the same buy is reported by the broker API
        THEN it is recognized by content and skipped
        """
        import_rows([questrade_row(trade_date="2024-05-01")])

        result = broker_sync.sync_account(ACCOUNT)

        assert result.skipped == 1
        assert result.inserted == 2
        assert len(transaction_repo.query()) == 3

    def test_identical_activities_are_both_kept(self, broker_client, broker_sync, transaction_repo):
        broker_client.activities[ACCOUNT] = [_buy(date(2024, 5, 1)), _buy(date(2024, 5, 1))]

        first = broker_sync.sync_account(ACCOUNT)
        second = broker_sync.sync_account(ACCOUNT)

        assert first.inserted == 2
        assert second.inserted == 0
        assert len(transaction_repo.query()) == 2

    def test_failed_window_is_reported(self, scripted_client, broker_sync, transaction_repo):
        failing = (date(2024, 4, 16), date(2024, 5, 15))
        scripted_client.failing_windows.add(failing)

        result = broker_sync.sync_account(ACCOUNT)

        assert result.failed_chunks == [failing]
        # The May 1 buy sits in the failed window
        assert result.inserted == 2
        assert len(transaction_repo.query()) == 2

    def test_expired_credential_propagates(self, scripted_client, broker_sync, broker_state_repo):
        scripted_client.expired = True

        with pytest.raises(ReconnectRequiredError):
            broker_sync.sync_account(ACCOUNT)

        assert broker_state_repo.get_last_synced(ACCOUNT) is None

    def test_position_discrepancy_reported(self, scripted_client, broker_sync, holding_repo, account_repo):
        scripted_client.positions[ACCOUNT] = [
            BrokerPosition(symbol="aapl", quantity=Decimal("12")),
            BrokerPosition(symbol="MSFT", quantity=Decimal("2")),
        ]

        result = broker_sync.sync_account(ACCOUNT)

        assert len(result.discrepancies) == 1
        discrepancy = result.discrepancies[0]
        assert discrepancy.symbol == "AAPL"
        assert discrepancy.difference == Decimal("2")
        # Broker positions are never written
        account_id = account_repo.get_by_number(ACCOUNT).account_id
        assert holding_repo.get(account_id, "AAPL").quantity == Decimal("10")


class TestSyncAllAndAutoSync:
    def test_sync_all(self, scripted_client, broker_sync):
        results = broker_sync.sync_all()

        assert [r.account_number for r in results] == [ACCOUNT]

    def test_auto_sync_respects_interval(self, scripted_client, broker_sync, clock):
        assert len(broker_sync.auto_sync()) == 1

        clock.advance(minutes=30)
        assert broker_sync.auto_sync() == []

        clock.advance(minutes=31)
        assert len(broker_sync.auto_sync()) == 1

    def test_unreachable_broker(self, broker_sync, broker_client, monkeypatch):
        def boom():
            raise ConnectionError("connection refused")

        monkeypatch.setattr(broker_client, "get_accounts", boom)

        with pytest.raises(UpstreamUnavailableError):
            broker_sync.sync_all()
