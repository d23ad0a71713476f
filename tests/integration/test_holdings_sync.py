"""
Integration tests for the holdings synchronizer.

Tests cover:
- Holdings equal the replay of the ledger after import
- A second sync without new rows changes nothing (timestamps included)
- Fully closed positions are removed
- Aggregation across accounts
"""

from decimal import Decimal

import pytest

from ledgerfolio.core.exceptions import NotFoundError
from ledgerfolio.services import HoldingsSynchronizer
from tests.conftest import questrade_row


def _account_id(account_repo, number: str = "51234567") -> str:
    return account_repo.get_by_number(number).account_id


class TestHoldingsConsistency:
    def test_sync_after_import_matches_ledger(self, import_rows, holdings_sync, account_repo):
        """
        GIVEN buys and a partial sell of AAPL
        WHEN holdings are synchronized
        THEN the stored holding equals the replayed position
        """
        import_rows(
            [
                questrade_row(trade_date="2024-01-02", quantity="10", price="100", net_amount="-1000"),
                questrade_row(trade_date="2024-01-03", quantity="10", price="110", net_amount="-1100"),
                questrade_row(action="Sell", trade_date="2024-01-04", quantity="-5", price="120",
                              net_amount="600"),
            ]
        )

        result = holdings_sync.sync(_account_id(account_repo))

        assert len(result.holdings) == 1
        holding = result.holdings[0]
        assert holding.symbol == "AAPL"
        assert holding.quantity == Decimal("15")
        assert holding.average_cost == Decimal("105")
        assert holding.book_value == Decimal("1575")

    def test_second_sync_is_a_no_op(self, import_rows, holdings_sync, holding_repo, account_repo):
        import_rows([questrade_row()])
        account_id = _account_id(account_repo)
        before = holding_repo.get(account_id, "AAPL")

        result = holdings_sync.sync(account_id)
        after = holding_repo.get(account_id, "AAPL")

        assert result.removed_symbols == []
        assert after.quantity == before.quantity
        assert after.average_cost == before.average_cost
        assert after.updated_at_est == before.updated_at_est

    def test_closed_position_is_removed(self, import_rows, holding_repo, account_repo):
        import_rows([questrade_row(trade_date="2024-01-02")])
        account_id = _account_id(account_repo)
        assert holding_repo.get(account_id, "AAPL") is not None

        import_rows(
            [questrade_row(action="Sell", trade_date="2024-02-01", quantity="10", price="190",
                           net_amount="1900")],
            filename="february.csv",
        )

        assert holding_repo.get(account_id, "AAPL") is None
        assert holding_repo.list_by_account(account_id) == []

    def test_over_sell_reports_anomaly(self, import_rows, holdings_sync, account_repo):
        import_rows(
            [
                questrade_row(trade_date="2024-01-02", quantity="5", price="100", net_amount="-500"),
                questrade_row(action="Sell", trade_date="2024-01-03", quantity="8", price="100",
                              net_amount="800"),
            ]
        )

        result = holdings_sync.sync(_account_id(account_repo))

        assert result.holdings == []
        assert len(result.anomalies) == 1
        assert result.anomalies[0].symbol == "AAPL"

    def test_unknown_account(self, holdings_sync: HoldingsSynchronizer):
        with pytest.raises(NotFoundError):
            holdings_sync.sync("missing")


class TestAggregation:
    def test_same_symbol_combined_across_accounts(self, import_rows, holdings_sync):
        import_rows(
            [
                questrade_row(account="111", quantity="10", price="100", net_amount="-1000"),
                questrade_row(account="222", quantity="30", price="200", net_amount="-6000"),
            ]
        )

        combined = holdings_sync.aggregate_holdings()

        assert len(combined) == 1
        assert combined[0].quantity == Decimal("40")
        assert combined[0].average_cost == Decimal("175")

    def test_sync_all_covers_every_account(self, import_rows, holdings_sync):
        import_rows([questrade_row(account="111"), questrade_row(account="222", symbol="MSFT")])

        results = holdings_sync.sync_all()

        assert {r.holdings[0].symbol for r in results} == {"AAPL", "MSFT"}
