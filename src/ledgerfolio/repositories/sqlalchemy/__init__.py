"""SQLAlchemy repository implementations."""

from ledgerfolio.repositories.sqlalchemy.database import (
    Base,
    get_db,
    init_db,
    SqlAlchemyUnitOfWork,
)
from ledgerfolio.repositories.sqlalchemy.account_repo import SqlAlchemyAccountRepository
from ledgerfolio.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from ledgerfolio.repositories.sqlalchemy.holding_repo import SqlAlchemyHoldingRepository
from ledgerfolio.repositories.sqlalchemy.price_cache_repo import SqlAlchemyPriceCacheRepository
from ledgerfolio.repositories.sqlalchemy.import_file_repo import SqlAlchemyImportFileRepository
from ledgerfolio.repositories.sqlalchemy.settings_repo import SqlAlchemySettingsRepository
from ledgerfolio.repositories.sqlalchemy.symbol_mapping_repo import SqlAlchemySymbolMappingRepository
from ledgerfolio.repositories.sqlalchemy.broker_state_repo import SqlAlchemyBrokerSyncStateRepository

__all__ = [
    "Base",
    "get_db",
    "init_db",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyAccountRepository",
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyHoldingRepository",
    "SqlAlchemyPriceCacheRepository",
    "SqlAlchemyImportFileRepository",
    "SqlAlchemySettingsRepository",
    "SqlAlchemySymbolMappingRepository",
    "SqlAlchemyBrokerSyncStateRepository",
]
