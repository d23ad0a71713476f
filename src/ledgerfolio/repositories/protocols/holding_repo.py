"""Holding repository protocol for derived positions."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import Holding


class HoldingRepository(Protocol):
    """Interface for holding data access."""

    def list_by_account(self, account_id: str) -> list[Holding]:
        """Get all holdings for an account ordered by symbol."""
        ...

    def list_all(self) -> list[Holding]:
        """Get holdings across all accounts."""
        ...

    def get(self, account_id: str, symbol: str) -> Optional[Holding]:
        """Get a single holding."""
        ...

    def upsert(self, holding: Holding) -> Holding:
        """Insert or update the holding for (account, symbol)."""
        ...

    def delete(self, account_id: str, symbols: list[str]) -> None:
        """Delete holdings for the given symbols."""
        ...
