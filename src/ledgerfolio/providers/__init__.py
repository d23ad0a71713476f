"""Market data and broker providers module."""

from ledgerfolio.providers.market_data_provider import MarketDataProvider, QuoteData, SymbolMatch
from ledgerfolio.providers.stub_provider import StubMarketDataProvider
from ledgerfolio.providers.broker_client import (
    BrokerClient,
    BrokerAccount,
    BrokerPosition,
    BrokerActivity,
    DisconnectedBrokerClient,
)

__all__ = [
    "MarketDataProvider",
    "QuoteData",
    "SymbolMatch",
    "StubMarketDataProvider",
    "BrokerClient",
    "BrokerAccount",
    "BrokerPosition",
    "BrokerActivity",
    "DisconnectedBrokerClient",
]
