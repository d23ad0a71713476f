"""Transaction boundary protocol."""

from contextlib import AbstractContextManager
from typing import Protocol


class UnitOfWork(Protocol):
    """
    Transaction boundary owned by services.

    Repository writes only flush; nothing is durable until commit().
    """

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    def savepoint(self) -> AbstractContextManager:
        """Nested scope rolled back on its own if the block raises."""
        ...
