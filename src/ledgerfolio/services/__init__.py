"""Application services."""

from ledgerfolio.services.reconciliation_service import ReconciliationEngine
from ledgerfolio.services.holdings_sync import HoldingsSynchronizer, replay_ledger
from ledgerfolio.services.quote_cache import QuoteCache
from ledgerfolio.services.ledger_service import LedgerService, TransactionCreate
from ledgerfolio.services.dividend_service import DividendService
from ledgerfolio.services.settings_service import LocalSettingsCache, SettingsService
from ledgerfolio.services.allocation_planner import AllocationService, plan
from ledgerfolio.services.broker_sync import BrokerSyncService, map_activity

__all__ = [
    "ReconciliationEngine",
    "HoldingsSynchronizer",
    "replay_ledger",
    "QuoteCache",
    "LedgerService",
    "TransactionCreate",
    "DividendService",
    "LocalSettingsCache",
    "SettingsService",
    "AllocationService",
    "plan",
    "BrokerSyncService",
    "map_activity",
]
