"""Transaction repository protocol."""

from datetime import date
from typing import Protocol, Optional

from ledgerfolio.domain.models import Transaction, TransactionAction


class TransactionRepository(Protocol):
    """Interface for ledger data access. Rows are insert-only."""

    def insert(self, transaction: Transaction) -> Transaction:
        """
        Persist a new ledger row.

        Raises sqlalchemy.exc.IntegrityError when the row hash already exists.
        """
        ...

    def exists_by_hash(self, source_row_hash: str) -> bool:
        """Return True if a row with this source hash is already stored."""
        ...

    def list_by_account(self, account_id: str) -> list[Transaction]:
        """List an account's rows in chronological (then insertion) order."""
        ...

    def list_with_account_numbers(
        self,
        start_date: date,
        end_date: date,
    ) -> list[tuple[Transaction, str]]:
        """List rows dated within [start_date, end_date] with their account numbers."""
        ...

    def query(
        self,
        account_ids: Optional[list[str]] = None,
        symbols: Optional[list[str]] = None,
        actions: Optional[list[TransactionAction]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """Query rows with filters; symbols match raw or mapped symbol."""
        ...
