"""SQLAlchemy implementation of AccountRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.domain.models import Account
from ledgerfolio.repositories.sqlalchemy.orm_models import AccountORM


class SqlAlchemyAccountRepository:
    """SQLAlchemy-backed account repository."""

    def __init__(self, db: Session):
        self._db = db

    def create(self, account: Account) -> Account:
        """Persist a new account (flushed, committed by the caller)."""
        orm_account = AccountORM(
            account_id=account.account_id,
            account_number=account.account_number,
            account_type=account.account_type,
            currency=account.currency,
            created_at_est=account.created_at_est,
        )
        self._db.add(orm_account)
        self._db.flush()
        return self._to_domain(orm_account)

    def get_by_id(self, account_id: str) -> Optional[Account]:
        """Retrieve account by ID."""
        orm_account = self._db.query(AccountORM).filter(
            AccountORM.account_id == account_id
        ).first()
        return self._to_domain(orm_account) if orm_account else None

    def get_by_number(self, account_number: str) -> Optional[Account]:
        """Retrieve account by external account number."""
        orm_account = self._db.query(AccountORM).filter(
            AccountORM.account_number == account_number
        ).first()
        return self._to_domain(orm_account) if orm_account else None

    def list_all(self) -> list[Account]:
        """List all accounts ordered by account number."""
        orm_accounts = self._db.query(AccountORM).order_by(AccountORM.account_number).all()
        return [self._to_domain(a) for a in orm_accounts]

    @staticmethod
    def _to_domain(orm: AccountORM) -> Account:
        """Convert ORM model to domain model."""
        return Account(
            account_id=orm.account_id,
            account_number=orm.account_number,
            account_type=orm.account_type,
            currency=orm.currency,
            created_at_est=orm.created_at_est,
        )
