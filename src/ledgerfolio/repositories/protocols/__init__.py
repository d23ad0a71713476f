"""Repository protocols (interfaces)."""

from ledgerfolio.repositories.protocols.account_repo import AccountRepository
from ledgerfolio.repositories.protocols.transaction_repo import TransactionRepository
from ledgerfolio.repositories.protocols.holding_repo import HoldingRepository
from ledgerfolio.repositories.protocols.price_cache_repo import PriceCacheRepository
from ledgerfolio.repositories.protocols.import_file_repo import ImportFileRepository
from ledgerfolio.repositories.protocols.settings_repo import SettingsRepository
from ledgerfolio.repositories.protocols.symbol_mapping_repo import SymbolMappingRepository
from ledgerfolio.repositories.protocols.broker_state_repo import BrokerSyncStateRepository
from ledgerfolio.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "AccountRepository",
    "TransactionRepository",
    "HoldingRepository",
    "PriceCacheRepository",
    "ImportFileRepository",
    "SettingsRepository",
    "SymbolMappingRepository",
    "BrokerSyncStateRepository",
    "UnitOfWork",
]
