"""
Integration tests for SQLAlchemy repositories with SQLite.

Tests cover:
- Account repository create and lookup
- Ledger insert-only semantics and unique source hashes
- Query filters (symbol matches raw or mapped symbol)
- Holding upsert/delete
- Price cache and symbol mapping persistence
- Unit-of-work savepoints
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.domain.models import (
    Account,
    Holding,
    PriceCacheEntry,
    SymbolMapping,
    Transaction,
    TransactionAction,
)
from tests.conftest import eastern_datetime


def _account(number: str = "51234567") -> Account:
    return Account(
        account_id=f"acc-{number}",
        account_number=number,
        account_type="TFSA",
        currency="CAD",
        created_at_est=eastern_datetime(2024, 1, 15),
    )


def _txn(account_id: str, row_hash: str = None, **kwargs) -> Transaction:
    values = dict(
        txn_id=str(uuid.uuid4()),
        account_id=account_id,
        transaction_date=date(2024, 1, 15),
        action=TransactionAction.BUY,
        currency="USD",
        source_row_hash=row_hash or uuid.uuid4().hex,
        symbol="AAPL",
        quantity=Decimal("10"),
        price=Decimal("185.50"),
        net_amount=Decimal("-1855.00"),
    )
    values.update(kwargs)
    return Transaction(**values)


# =============================================================================
# ACCOUNT REPOSITORY TESTS
# =============================================================================


class TestAccountRepository:
    def test_create_and_lookup(self, account_repo):
        """
        GIVEN an in-memory SQLite database
        WHEN I create an account
        THEN it can be retrieved by id and by number
        """
        account_repo.create(_account())

        assert account_repo.get_by_id("acc-51234567").account_number == "51234567"
        assert account_repo.get_by_number("51234567").account_type == "TFSA"
        assert account_repo.get_by_number("missing") is None

    def test_list_all(self, account_repo):
        account_repo.create(_account("111"))
        account_repo.create(_account("222"))

        assert {a.account_number for a in account_repo.list_all()} == {"111", "222"}


# =============================================================================
# TRANSACTION REPOSITORY TESTS
# =============================================================================


class TestTransactionRepository:
    @pytest.fixture(autouse=True)
    def _account(self, account_repo):
        account_repo.create(_account())

    def test_insert_and_exists(self, transaction_repo):
        transaction_repo.insert(_txn("acc-51234567", row_hash="h1"))

        assert transaction_repo.exists_by_hash("h1") is True
        assert transaction_repo.exists_by_hash("h2") is False

    def test_duplicate_hash_rejected(self, transaction_repo, unit_of_work):
        transaction_repo.insert(_txn("acc-51234567", row_hash="h1"))

        with pytest.raises(IntegrityError):
            with unit_of_work.savepoint():
                transaction_repo.insert(_txn("acc-51234567", row_hash="h1"))

        # The outer transaction survives the failed savepoint
        assert len(transaction_repo.query()) == 1

    def test_decimals_round_trip(self, transaction_repo, unit_of_work):
        transaction_repo.insert(_txn("acc-51234567", quantity=Decimal("0.12345678")))
        unit_of_work.commit()

        stored = transaction_repo.query()[0]
        assert stored.quantity == Decimal("0.12345678")
        assert stored.net_amount == Decimal("-1855.00")

    def test_symbol_filter_matches_mapped_symbol(self, transaction_repo):
        transaction_repo.insert(_txn("acc-51234567", symbol="H062990", symbol_mapped="QQQ"))
        transaction_repo.insert(_txn("acc-51234567", symbol="MSFT"))

        assert [t.symbol for t in transaction_repo.query(symbols=["QQQ"])] == ["H062990"]

    def test_date_and_action_filters(self, transaction_repo):
        transaction_repo.insert(_txn("acc-51234567", transaction_date=date(2024, 1, 10)))
        transaction_repo.insert(
            _txn(
                "acc-51234567",
                transaction_date=date(2024, 2, 10),
                action=TransactionAction.DIVIDEND_CASH,
                quantity=None,
                price=None,
                net_amount=Decimal("5.00"),
            )
        )

        dividends = transaction_repo.query(actions=[TransactionAction.DIVIDEND_CASH])
        january = transaction_repo.query(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))

        assert len(dividends) == 1
        assert len(january) == 1
        assert january[0].action == TransactionAction.BUY

    def test_list_by_account_keeps_insertion_order_within_a_day(self, transaction_repo):
        first = transaction_repo.insert(_txn("acc-51234567", symbol="AAPL"))
        second = transaction_repo.insert(_txn("acc-51234567", symbol="MSFT"))

        rows = transaction_repo.list_by_account("acc-51234567")

        assert [r.txn_id for r in rows] == [first.txn_id, second.txn_id]

    def test_rows_with_account_numbers(self, transaction_repo):
        transaction_repo.insert(_txn("acc-51234567"))

        rows = transaction_repo.list_with_account_numbers(date(2024, 1, 1), date(2024, 1, 31))

        assert len(rows) == 1
        assert rows[0][1] == "51234567"


# =============================================================================
# HOLDING / CACHE REPOSITORY TESTS
# =============================================================================


class TestHoldingRepository:
    def test_upsert_then_delete(self, account_repo, holding_repo):
        account_repo.create(_account())
        holding = Holding(
            account_id="acc-51234567",
            symbol="AAPL",
            quantity=Decimal("10"),
            average_cost=Decimal("185.50"),
            currency="USD",
            updated_at_est=eastern_datetime(2024, 1, 15),
        )

        holding_repo.upsert(holding)
        holding.quantity = Decimal("12")
        holding_repo.upsert(holding)

        assert holding_repo.get("acc-51234567", "AAPL").quantity == Decimal("12")
        assert len(holding_repo.list_by_account("acc-51234567")) == 1

        holding_repo.delete("acc-51234567", ["AAPL"])
        assert holding_repo.get("acc-51234567", "AAPL") is None


class TestPriceCacheRepository:
    def test_upsert_overwrites(self, price_repo):
        price_repo.upsert(
            PriceCacheEntry(ticker="AAPL", price=Decimal("185.50"), updated_at=eastern_datetime(2024, 6, 1))
        )
        price_repo.upsert(
            PriceCacheEntry(
                ticker="AAPL",
                price=Decimal("190.00"),
                updated_at=eastern_datetime(2024, 6, 2),
                dividend_yield=Decimal("0.52"),
            )
        )

        entry = price_repo.get("AAPL")
        assert entry.price == Decimal("190.00")
        assert entry.dividend_yield == Decimal("0.52")
        assert list(price_repo.get_many(["AAPL", "MSFT"])) == ["AAPL"]
        assert len(price_repo.list_all()) == 1


class TestSymbolMappingRepository:
    def test_first_mapping_wins(self, mapping_repo):
        mapping_repo.save(SymbolMapping(internal_code="H062990", symbol="QQQ"))
        mapping_repo.save(SymbolMapping(internal_code="H062990", symbol="XYZ"))

        assert mapping_repo.get("H062990").symbol == "QQQ"
        assert mapping_repo.get("H000000") is None

    def test_created_at_is_eastern_wall_clock(self, mapping_repo):
        mapping_repo.save(SymbolMapping(internal_code="H062990", symbol="QQQ"))

        created = mapping_repo.get("H062990").created_at_est.replace(tzinfo=None)

        assert abs(created - now_eastern().replace(tzinfo=None)) < timedelta(minutes=5)
