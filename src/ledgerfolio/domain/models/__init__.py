"""Domain models package."""

from ledgerfolio.domain.models.enums import TransactionAction, ImportSource, BrokerProfile
from ledgerfolio.domain.models.account import Account
from ledgerfolio.domain.models.transaction import Transaction
from ledgerfolio.domain.models.import_file import ImportFile
from ledgerfolio.domain.models.holding import Holding
from ledgerfolio.domain.models.price import PriceCacheEntry
from ledgerfolio.domain.models.settings import AllocationTarget, PortfolioSettings, CASH_SYMBOL
from ledgerfolio.domain.models.symbol_mapping import SymbolMapping

__all__ = [
    "TransactionAction",
    "ImportSource",
    "BrokerProfile",
    "Account",
    "Transaction",
    "ImportFile",
    "Holding",
    "PriceCacheEntry",
    "AllocationTarget",
    "PortfolioSettings",
    "CASH_SYMBOL",
    "SymbolMapping",
]
