"""Account repository protocol."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import Account


class AccountRepository(Protocol):
    """Interface for account data access."""

    def create(self, account: Account) -> Account:
        """Persist a new account."""
        ...

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Retrieve account by ID."""
        ...

    def get_by_number(self, account_number: str) -> Optional[Account]:
        """Retrieve account by external account number."""
        ...

    def list_all(self) -> list[Account]:
        """List all accounts."""
        ...
