"""Broker sync bookkeeping protocol."""

from datetime import datetime
from typing import Protocol, Optional


class BrokerSyncStateRepository(Protocol):
    """Tracks when each broker account was last synchronized."""

    def get_last_synced(self, account_number: str) -> Optional[datetime]:
        ...

    def mark_synced(self, account_number: str, synced_at: datetime) -> None:
        ...
