"""Dependency injection for FastAPI."""

from datetime import timedelta
from decimal import Decimal
from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from ledgerfolio.config.settings import get_settings
from ledgerfolio.core.exceptions import NotFoundError
from ledgerfolio.ingest import SymbolResolver
from ledgerfolio.providers import (
    BrokerClient,
    DisconnectedBrokerClient,
    MarketDataProvider,
)
from ledgerfolio.providers.yahoo_provider import YahooMarketDataProvider
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
    get_db,
)
from ledgerfolio.services import (
    AllocationService,
    BrokerSyncService,
    DividendService,
    HoldingsSynchronizer,
    LedgerService,
    LocalSettingsCache,
    QuoteCache,
    ReconciliationEngine,
    SettingsService,
)


def get_account_repo(db: Session = Depends(get_db)) -> SqlAlchemyAccountRepository:
    return SqlAlchemyAccountRepository(db)


def get_transaction_repo(db: Session = Depends(get_db)) -> SqlAlchemyTransactionRepository:
    return SqlAlchemyTransactionRepository(db)


def get_holding_repo(db: Session = Depends(get_db)) -> SqlAlchemyHoldingRepository:
    return SqlAlchemyHoldingRepository(db)


def get_price_cache_repo(db: Session = Depends(get_db)) -> SqlAlchemyPriceCacheRepository:
    return SqlAlchemyPriceCacheRepository(db)


def get_import_file_repo(db: Session = Depends(get_db)) -> SqlAlchemyImportFileRepository:
    return SqlAlchemyImportFileRepository(db)


def get_unit_of_work(db: Session = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(db)


def get_market_provider() -> MarketDataProvider:
    """Provide the live market data provider (overridden in tests)."""
    return YahooMarketDataProvider()


def get_broker_client() -> BrokerClient:
    """Provide the broker client; no credential store is configured by default."""
    return DisconnectedBrokerClient()


def get_symbol_resolver(db: Session = Depends(get_db)) -> SymbolResolver:
    return SymbolResolver(SqlAlchemySymbolMappingRepository(db))


def get_holdings_sync(
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
) -> HoldingsSynchronizer:
    """Provide HoldingsSynchronizer instance."""
    return HoldingsSynchronizer(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        holding_repo=holding_repo,
        unit_of_work=unit_of_work,
    )


def get_reconciliation_engine(
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    import_repo: SqlAlchemyImportFileRepository = Depends(get_import_file_repo),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    resolver: SymbolResolver = Depends(get_symbol_resolver),
    holdings_sync: HoldingsSynchronizer = Depends(get_holdings_sync),
) -> ReconciliationEngine:
    """Provide ReconciliationEngine instance."""
    settings = get_settings()
    return ReconciliationEngine(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        import_repo=import_repo,
        unit_of_work=unit_of_work,
        symbol_resolver=resolver,
        holdings_sync=holdings_sync,
        error_limit=settings.import_error_limit,
        parse_error_limit=settings.parse_error_limit,
        supported_currencies=settings.supported_currencies,
    )


def get_ledger_service(
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(
        account_repo=account_repo,
        transaction_repo=transaction_repo,
        engine=engine,
    )


def get_quote_cache(
    price_repo: SqlAlchemyPriceCacheRepository = Depends(get_price_cache_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    provider: MarketDataProvider = Depends(get_market_provider),
) -> QuoteCache:
    """Provide QuoteCache instance."""
    settings = get_settings()
    return QuoteCache(
        price_repo=price_repo,
        provider=provider,
        unit_of_work=unit_of_work,
        ttl=timedelta(minutes=settings.quote_cache_ttl_minutes),
        batch_size=settings.quote_batch_size,
        batch_delay_seconds=settings.quote_batch_delay_seconds,
        timeout_seconds=settings.provider_timeout_seconds,
        holding_repo=holding_repo,
        fx_ticker=settings.fx_ticker,
        default_fx_rate=Decimal(str(settings.default_fx_rate)),
    )


def get_dividend_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    quote_cache: QuoteCache = Depends(get_quote_cache),
) -> DividendService:
    """Provide DividendService instance."""
    return DividendService(
        transaction_repo=transaction_repo,
        holding_repo=holding_repo,
        quote_cache=quote_cache,
    )


def get_settings_service(
    db: Session = Depends(get_db),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
) -> SettingsService:
    """Provide SettingsService instance backed by the local JSON copy."""
    return SettingsService(
        settings_repo=SqlAlchemySettingsRepository(db),
        unit_of_work=unit_of_work,
        local_cache=LocalSettingsCache(get_settings().get_settings_cache_file()),
    )


def get_allocation_service(
    holding_repo: SqlAlchemyHoldingRepository = Depends(get_holding_repo),
    quote_cache: QuoteCache = Depends(get_quote_cache),
    settings_service: SettingsService = Depends(get_settings_service),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> AllocationService:
    """Provide AllocationService instance."""
    return AllocationService(
        holding_repo=holding_repo,
        quote_cache=quote_cache,
        settings_service=settings_service,
        ledger_service=ledger_service,
        base_currency=get_settings().base_currency,
    )


def get_broker_sync_service(
    db: Session = Depends(get_db),
    client: BrokerClient = Depends(get_broker_client),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
    holdings_sync: HoldingsSynchronizer = Depends(get_holdings_sync),
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
) -> BrokerSyncService:
    """Provide BrokerSyncService instance."""
    settings = get_settings()
    return BrokerSyncService(
        client=client,
        engine=engine,
        holdings_sync=holdings_sync,
        account_repo=account_repo,
        state_repo=SqlAlchemyBrokerSyncStateRepository(db),
        unit_of_work=unit_of_work,
        history_days=settings.broker_history_days,
        chunk_days=settings.broker_chunk_days,
        auto_sync_interval=timedelta(minutes=settings.auto_sync_interval_minutes),
    )


def resolve_account_id(
    account: Optional[str] = Query(None, description="Account number (all accounts if empty)"),
    account_repo: SqlAlchemyAccountRepository = Depends(get_account_repo),
) -> Optional[str]:
    """Translate the `account` query parameter into an internal account ID."""
    if not account:
        return None
    found = account_repo.get_by_number(account)
    if found is None:
        raise NotFoundError("Account", account)
    return found.account_id
