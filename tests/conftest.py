"""
Pytest configuration and fixtures for ledger reconciliation tests.

This module provides:
- In-memory SQLite database fixtures (with SAVEPOINT support)
- Repository, unit-of-work and service fixtures
- Deterministic, counting, failing and slow market data providers
- A scriptable fake broker client
- Builders for Questrade-style CSV and Excel uploads
- Time helpers for Eastern timezone
"""

import csv
import io
import time
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ledgerfolio.api import deps
from ledgerfolio.config.settings import Settings, reset_settings, set_settings
from ledgerfolio.core.exceptions import ReconnectRequiredError
from ledgerfolio.core.timezone import EASTERN_TZ
from ledgerfolio.domain.models import BrokerProfile
from ledgerfolio.ingest import SymbolResolver
from ledgerfolio.main import app
from ledgerfolio.providers import (
    BrokerAccount,
    BrokerActivity,
    BrokerPosition,
    QuoteData,
    StubMarketDataProvider,
    SymbolMatch,
)
from ledgerfolio.repositories.sqlalchemy import orm_models  # noqa: F401
from ledgerfolio.repositories.sqlalchemy import (
    SqlAlchemyAccountRepository,
    SqlAlchemyBrokerSyncStateRepository,
    SqlAlchemyHoldingRepository,
    SqlAlchemyImportFileRepository,
    SqlAlchemyPriceCacheRepository,
    SqlAlchemySettingsRepository,
    SqlAlchemySymbolMappingRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
from ledgerfolio.repositories.sqlalchemy.database import (
    Base,
    enable_sqlite_savepoints,
    get_db,
    reset_database,
)
from ledgerfolio.services import (
    BrokerSyncService,
    DividendService,
    HoldingsSynchronizer,
    LedgerService,
    LocalSettingsCache,
    QuoteCache,
    ReconciliationEngine,
    SettingsService,
)


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


# =============================================================================
# SETTINGS / DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def app_settings(tmp_path) -> Settings:
    """Settings pointing every file at a temporary data directory."""
    reset_settings()
    settings = Settings(data_dir=tmp_path, quote_batch_delay_seconds=0.0)
    set_settings(settings)
    yield settings
    reset_settings()


@pytest.fixture(scope="function")
def test_engine(app_settings):
    """Create test database engine with shared in-memory SQLite."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def account_repo(test_session) -> SqlAlchemyAccountRepository:
    return SqlAlchemyAccountRepository(test_session)


@pytest.fixture
def transaction_repo(test_session) -> SqlAlchemyTransactionRepository:
    return SqlAlchemyTransactionRepository(test_session)


@pytest.fixture
def holding_repo(test_session) -> SqlAlchemyHoldingRepository:
    return SqlAlchemyHoldingRepository(test_session)


@pytest.fixture
def price_repo(test_session) -> SqlAlchemyPriceCacheRepository:
    return SqlAlchemyPriceCacheRepository(test_session)


@pytest.fixture
def import_repo(test_session) -> SqlAlchemyImportFileRepository:
    return SqlAlchemyImportFileRepository(test_session)


@pytest.fixture
def settings_repo(test_session) -> SqlAlchemySettingsRepository:
    return SqlAlchemySettingsRepository(test_session)


@pytest.fixture
def mapping_repo(test_session) -> SqlAlchemySymbolMappingRepository:
    return SqlAlchemySymbolMappingRepository(test_session)


@pytest.fixture
def broker_state_repo(test_session) -> SqlAlchemyBrokerSyncStateRepository:
    return SqlAlchemyBrokerSyncStateRepository(test_session)


@pytest.fixture
def unit_of_work(test_session) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(test_session)


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class CountingMarketProvider:
    """
    Deterministic provider that records every call.

    Prices can be overridden per ticker to observe refreshes.
    """

    def __init__(self):
        self._stub = StubMarketDataProvider()
        self.calls: list[str] = []
        self.search_calls: list[str] = []
        self.overrides: dict[str, Decimal] = {}

    def quote(self, ticker: str) -> Optional[QuoteData]:
        self.calls.append(ticker)
        data = self._stub.quote(ticker)
        if data is not None and ticker in self.overrides:
            data.price = self.overrides[ticker]
        return data

    def search(self, query: str) -> list[SymbolMatch]:
        self.search_calls.append(query)
        return self._stub.search(query)

    def call_count(self, ticker: str) -> int:
        return self.calls.count(ticker)


class FailingMarketProvider:
    """Market provider that always raises an exception."""

    def quote(self, ticker: str) -> Optional[QuoteData]:
        raise ConnectionError("Network unavailable")

    def search(self, query: str) -> list[SymbolMatch]:
        raise ConnectionError("Network unavailable")


class SlowMarketProvider:
    """Market provider that answers after a delay."""

    def __init__(self, delay: float = 0.5):
        self._stub = StubMarketDataProvider()
        self._delay = delay

    def quote(self, ticker: str) -> Optional[QuoteData]:
        time.sleep(self._delay)
        return self._stub.quote(ticker)

    def search(self, query: str) -> list[SymbolMatch]:
        time.sleep(self._delay)
        return self._stub.search(query)


@pytest.fixture
def market_provider() -> CountingMarketProvider:
    return CountingMarketProvider()


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    return FailingMarketProvider()


@pytest.fixture
def quote_cache_factory(
    price_repo,
    holding_repo,
    unit_of_work,
    clock,
) -> Callable[..., QuoteCache]:
    """Build a QuoteCache around any provider; sleeps are recorded, never slept."""

    def _create(provider, **kwargs) -> QuoteCache:
        sleeps = kwargs.pop("sleeps", [])
        options = dict(
            ttl=timedelta(minutes=15),
            batch_size=5,
            batch_delay_seconds=0.5,
            timeout_seconds=2.0,
            holding_repo=holding_repo,
            clock=clock,
            sleep=sleeps.append,
        )
        options.update(kwargs)
        return QuoteCache(
            price_repo=price_repo,
            provider=provider,
            unit_of_work=unit_of_work,
            **options,
        )

    return _create


@pytest.fixture
def quote_cache(quote_cache_factory, market_provider) -> QuoteCache:
    return quote_cache_factory(market_provider)


# =============================================================================
# BROKER FIXTURES
# =============================================================================


class FakeBrokerClient:
    """Scriptable broker API double."""

    def __init__(self):
        self.accounts: list[BrokerAccount] = []
        self.activities: dict[str, list[BrokerActivity]] = {}
        self.positions: dict[str, list[BrokerPosition]] = {}
        self.failing_windows: set[tuple[date, date]] = set()
        self.expired = False
        self.activity_calls: list[tuple[str, date, date]] = []

    def get_accounts(self) -> list[BrokerAccount]:
        if self.expired:
            raise ReconnectRequiredError("Broker session expired")
        return list(self.accounts)

    def get_positions(self, account_number: str) -> list[BrokerPosition]:
        if self.expired:
            raise ReconnectRequiredError("Broker session expired")
        return list(self.positions.get(account_number, []))

    def get_activities(self, account_number: str, start: date, end: date) -> list[BrokerActivity]:
        if self.expired:
            raise ReconnectRequiredError("Broker session expired")
        self.activity_calls.append((account_number, start, end))
        if (start, end) in self.failing_windows:
            raise ConnectionError("Gateway timeout")
        return [
            a
            for a in self.activities.get(account_number, [])
            if start <= a.trade_date <= end
        ]


@pytest.fixture
def broker_client() -> FakeBrokerClient:
    return FakeBrokerClient()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def symbol_resolver(mapping_repo) -> SymbolResolver:
    return SymbolResolver(mapping_repo)


@pytest.fixture
def holdings_sync(account_repo, transaction_repo, holding_repo, unit_of_work) -> HoldingsSynchronizer:
    return HoldingsSynchronizer(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        holding_repo=holding_repo,
        unit_of_work=unit_of_work,
    )


@pytest.fixture
def engine(
    account_repo,
    transaction_repo,
    import_repo,
    unit_of_work,
    symbol_resolver,
    holdings_sync,
) -> ReconciliationEngine:
    """Provide test ReconciliationEngine wired to holdings sync."""
    return ReconciliationEngine(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        import_repo=import_repo,
        unit_of_work=unit_of_work,
        symbol_resolver=symbol_resolver,
        holdings_sync=holdings_sync,
    )


@pytest.fixture
def ledger_service(account_repo, transaction_repo, engine) -> LedgerService:
    return LedgerService(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        engine=engine,
    )


@pytest.fixture
def dividend_service(transaction_repo, holding_repo, quote_cache) -> DividendService:
    return DividendService(
        transaction_repo=transaction_repo,
        holding_repo=holding_repo,
        quote_cache=quote_cache,
    )


@pytest.fixture
def settings_service(settings_repo, unit_of_work, tmp_path) -> SettingsService:
    return SettingsService(
        settings_repo=settings_repo,
        unit_of_work=unit_of_work,
        local_cache=LocalSettingsCache(tmp_path / "portfolio_settings.json"),
    )


@pytest.fixture
def broker_sync(
    broker_client,
    engine,
    holdings_sync,
    account_repo,
    broker_state_repo,
    unit_of_work,
    clock,
) -> BrokerSyncService:
    return BrokerSyncService(
        client=broker_client,
        engine=engine,
        holdings_sync=holdings_sync,
        account_repo=account_repo,
        state_repo=broker_state_repo,
        unit_of_work=unit_of_work,
        history_days=90,
        chunk_days=30,
        auto_sync_interval=timedelta(minutes=60),
        clock=clock,
    )


# =============================================================================
# UPLOAD BUILDERS
# =============================================================================


QUESTRADE_HEADERS = [
    "Transaction Date",
    "Settlement Date",
    "Action",
    "Symbol",
    "Description",
    "Quantity",
    "Price",
    "Gross Amount",
    "Commission",
    "Net Amount",
    "Currency",
    "Account #",
    "Account Type",
    "Activity Type",
]


def questrade_row(
    action: str = "Buy",
    symbol: Optional[str] = "AAPL",
    trade_date: Any = "2024-01-15",
    quantity: Any = "10",
    price: Any = "185.50",
    net_amount: Any = "-1855.00",
    currency: str = "USD",
    account: str = "51234567",
    description: str = "APPLE INC",
    commission: Any = "0",
    account_type: str = "Individual TFSA",
    activity_type: str = "Trades",
) -> dict[str, Any]:
    """One Questrade export row keyed by header."""
    return {
        "Transaction Date": trade_date,
        "Settlement Date": trade_date,
        "Action": action,
        "Symbol": symbol,
        "Description": description,
        "Quantity": quantity,
        "Price": price,
        "Gross Amount": net_amount,
        "Commission": commission,
        "Net Amount": net_amount,
        "Currency": currency,
        "Account #": account,
        "Account Type": account_type,
        "Activity Type": activity_type,
    }


def make_csv(rows: list[dict[str, Any]], headers: Optional[list[str]] = None) -> bytes:
    headers = headers or QUESTRADE_HEADERS
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=headers)
    writer.writeheader()
    for row in rows:
        writer.writerow({h: "" if row.get(h) is None else row.get(h) for h in headers})
    return buffer.getvalue().encode("utf-8")


def make_xlsx(rows: list[dict[str, Any]], headers: Optional[list[str]] = None) -> bytes:
    headers = headers or QUESTRADE_HEADERS
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(headers)
    for row in rows:
        sheet.append([row.get(h) for h in headers])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def import_rows(engine) -> Callable[..., Any]:
    """Import Questrade rows as a CSV upload."""

    def _import(rows: list[dict[str, Any]], filename: str = "activity.csv", **kwargs):
        kwargs.setdefault("profile", BrokerProfile.QUESTRADE)
        return engine.import_file(make_csv(rows), filename, **kwargs)

    return _import


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_broker_client() -> FakeBrokerClient:
    return FakeBrokerClient()


@pytest.fixture
def client(test_engine, api_broker_client) -> TestClient:
    """Provide FastAPI test client with test database and offline providers."""
    reset_database()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_market_provider] = StubMarketDataProvider
    app.dependency_overrides[deps.get_broker_client] = lambda: api_broker_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(Decimal(str(actual)) - Decimal(str(expected)))
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
