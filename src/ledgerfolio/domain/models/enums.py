"""Enumerations for domain models."""

from enum import Enum


class TransactionAction(str, Enum):
    """Canonical ledger actions."""

    BUY = "BUY"
    SELL = "SELL"
    DIVIDEND_CASH = "DIVIDEND_CASH"
    DIVIDEND_DRIP = "DIVIDEND_DRIP"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    SPLIT = "SPLIT"
    OTHER = "OTHER"

    @property
    def requires_symbol(self) -> bool:
        """Security actions must name the instrument they act on."""
        return self in _SECURITY_ACTIONS

    @property
    def is_transfer(self) -> bool:
        return self in (TransactionAction.TRANSFER_IN, TransactionAction.TRANSFER_OUT)


_SECURITY_ACTIONS = frozenset(
    {
        TransactionAction.BUY,
        TransactionAction.SELL,
        TransactionAction.DIVIDEND_CASH,
        TransactionAction.DIVIDEND_DRIP,
        TransactionAction.SPLIT,
    }
)


class ImportSource(str, Enum):
    """Channel a batch of ledger rows arrived through."""

    FILE = "FILE"
    BROKER = "BROKER"
    MANUAL = "MANUAL"


class BrokerProfile(str, Enum):
    """Column layouts understood by the row normalizer."""

    QUESTRADE = "QUESTRADE"
    WEALTHSIMPLE = "WEALTHSIMPLE"
    GENERIC = "GENERIC"
