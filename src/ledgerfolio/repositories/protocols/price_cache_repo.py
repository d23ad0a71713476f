"""Price cache repository protocol."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import PriceCacheEntry


class PriceCacheRepository(Protocol):
    """Interface for stored quotes."""

    def get(self, ticker: str) -> Optional[PriceCacheEntry]:
        ...

    def get_many(self, tickers: list[str]) -> dict[str, PriceCacheEntry]:
        ...

    def list_all(self) -> list[PriceCacheEntry]:
        ...

    def upsert(self, entry: PriceCacheEntry) -> PriceCacheEntry:
        """Last write wins."""
        ...
