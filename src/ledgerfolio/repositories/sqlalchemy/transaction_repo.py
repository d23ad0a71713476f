"""SQLAlchemy implementation of TransactionRepository."""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from ledgerfolio.domain.models import Transaction, TransactionAction
from ledgerfolio.repositories.sqlalchemy.orm_models import AccountORM, TransactionORM


class SqlAlchemyTransactionRepository:
    """SQLAlchemy-backed ledger repository (insert-only)."""

    def __init__(self, db: Session):
        self._db = db

    def insert(self, transaction: Transaction) -> Transaction:
        """Persist a new ledger row; a duplicate hash raises IntegrityError on flush."""
        orm_txn = self._to_orm(transaction)
        orm_txn.seq = self._next_seq()
        self._db.add(orm_txn)
        self._db.flush()
        return self._to_domain(orm_txn)

    def exists_by_hash(self, source_row_hash: str) -> bool:
        """Return True if a row with this source hash is already stored."""
        return (
            self._db.query(TransactionORM.txn_id)
            .filter(TransactionORM.source_row_hash == source_row_hash)
            .first()
            is not None
        )

    def list_by_account(self, account_id: str) -> list[Transaction]:
        """List an account's rows ordered by date, settlement date, insertion."""
        query = (
            self._db.query(TransactionORM)
            .filter(TransactionORM.account_id == account_id)
            .order_by(
                TransactionORM.transaction_date,
                TransactionORM.settlement_date,
                TransactionORM.seq,
            )
        )
        return [self._to_domain(t) for t in query.all()]

    def list_with_account_numbers(
        self,
        start_date: date,
        end_date: date,
    ) -> list[tuple[Transaction, str]]:
        """List rows dated within the range together with their account numbers."""
        rows = (
            self._db.query(TransactionORM, AccountORM.account_number)
            .join(AccountORM, AccountORM.account_id == TransactionORM.account_id)
            .filter(
                TransactionORM.transaction_date >= start_date,
                TransactionORM.transaction_date <= end_date,
            )
            .all()
        )
        return [(self._to_domain(t), number) for t, number in rows]

    def query(
        self,
        account_ids: Optional[list[str]] = None,
        symbols: Optional[list[str]] = None,
        actions: Optional[list[TransactionAction]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """Query rows with filters."""
        query = self._db.query(TransactionORM)

        conditions = []
        if account_ids:
            conditions.append(TransactionORM.account_id.in_(account_ids))
        if symbols:
            conditions.append(
                or_(
                    TransactionORM.symbol.in_(symbols),
                    TransactionORM.symbol_mapped.in_(symbols),
                )
            )
        if actions:
            conditions.append(TransactionORM.action.in_(actions))
        if start_date:
            conditions.append(TransactionORM.transaction_date >= start_date)
        if end_date:
            conditions.append(TransactionORM.transaction_date <= end_date)

        if conditions:
            query = query.filter(and_(*conditions))

        query = query.order_by(TransactionORM.transaction_date, TransactionORM.seq)
        return [self._to_domain(t) for t in query.all()]

    def _next_seq(self) -> int:
        current = self._db.query(func.max(TransactionORM.seq)).scalar()
        return (current or 0) + 1

    @staticmethod
    def _to_orm(txn: Transaction) -> TransactionORM:
        return TransactionORM(
            txn_id=txn.txn_id,
            account_id=txn.account_id,
            import_file_id=txn.import_file_id,
            transaction_date=txn.transaction_date,
            settlement_date=txn.settlement_date,
            action=txn.action,
            symbol=txn.symbol,
            symbol_mapped=txn.symbol_mapped,
            description=txn.description,
            quantity=txn.quantity,
            price=txn.price,
            gross_amount=txn.gross_amount,
            commission=txn.commission,
            net_amount=txn.net_amount,
            currency=txn.currency,
            currency_equivalent=txn.currency_equivalent,
            activity_type=txn.activity_type,
            source=txn.source,
            source_row_hash=txn.source_row_hash,
            created_at_est=txn.created_at_est,
        )

    @staticmethod
    def _to_domain(orm: TransactionORM) -> Transaction:
        """Convert ORM model to domain model."""
        return Transaction(
            txn_id=orm.txn_id,
            account_id=orm.account_id,
            import_file_id=orm.import_file_id,
            transaction_date=orm.transaction_date,
            settlement_date=orm.settlement_date,
            action=orm.action,
            symbol=orm.symbol,
            symbol_mapped=orm.symbol_mapped,
            description=orm.description,
            quantity=_to_decimal(orm.quantity),
            price=_to_decimal(orm.price),
            gross_amount=_to_decimal(orm.gross_amount),
            commission=_to_decimal(orm.commission),
            net_amount=_to_decimal(orm.net_amount),
            currency=orm.currency,
            currency_equivalent=_to_decimal(orm.currency_equivalent),
            activity_type=orm.activity_type,
            source=orm.source,
            source_row_hash=orm.source_row_hash,
            created_at_est=orm.created_at_est,
        )


def _to_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None
