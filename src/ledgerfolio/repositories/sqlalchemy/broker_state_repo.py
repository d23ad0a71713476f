"""SQLAlchemy implementation of BrokerSyncStateRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.repositories.sqlalchemy.orm_models import BrokerSyncStateORM


class SqlAlchemyBrokerSyncStateRepository:
    """Last-sync timestamps per broker account."""

    def __init__(self, db: Session):
        self._db = db

    def get_last_synced(self, account_number: str) -> Optional[datetime]:
        row = self._db.get(BrokerSyncStateORM, account_number)
        return row.last_synced_at if row else None

    def mark_synced(self, account_number: str, synced_at: datetime) -> None:
        row = self._db.get(BrokerSyncStateORM, account_number)
        if row is None:
            row = BrokerSyncStateORM(account_number=account_number, last_synced_at=synced_at)
            self._db.add(row)
        else:
            row.last_synced_at = synced_at
        self._db.flush()
