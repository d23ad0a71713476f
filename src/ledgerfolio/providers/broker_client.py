"""Broker collaborator protocol and transfer types."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol

from ledgerfolio.core.exceptions import ReconnectRequiredError


@dataclass
class BrokerAccount:
    number: str
    type: Optional[str] = None
    currency: Optional[str] = None


@dataclass
class BrokerPosition:
    symbol: str
    quantity: Decimal
    average_cost: Optional[Decimal] = None
    currency: Optional[str] = None


@dataclass
class BrokerActivity:
    """One account activity as reported by the broker API."""

    trade_date: date
    action: str
    currency: str
    settlement_date: Optional[date] = None
    symbol: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    gross_amount: Optional[Decimal] = None
    commission: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    type: Optional[str] = None


class BrokerClient(Protocol):
    """
    Authenticated broker API access for one user.

    Implementations raise ReconnectRequiredError when the stored credential
    has expired or been revoked.
    """

    def get_accounts(self) -> list[BrokerAccount]:
        ...

    def get_positions(self, account_number: str) -> list[BrokerPosition]:
        ...

    def get_activities(self, account_number: str, start: date, end: date) -> list[BrokerActivity]:
        """Activities in [start, end]; brokers cap the window at about 30 days."""
        ...


class DisconnectedBrokerClient:
    """Client used when no broker credential has been configured."""

    def get_accounts(self) -> list[BrokerAccount]:
        raise ReconnectRequiredError("No broker connection configured")

    def get_positions(self, account_number: str) -> list[BrokerPosition]:
        raise ReconnectRequiredError("No broker connection configured")

    def get_activities(self, account_number: str, start: date, end: date) -> list[BrokerActivity]:
        raise ReconnectRequiredError("No broker connection configured")
