"""SQLAlchemy implementation of HoldingRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.domain.models import Holding
from ledgerfolio.repositories.sqlalchemy.orm_models import HoldingORM


class SqlAlchemyHoldingRepository:
    """SQLAlchemy-backed repository for derived holdings."""

    def __init__(self, db: Session):
        self._db = db

    def list_by_account(self, account_id: str) -> list[Holding]:
        """Get all holdings for an account."""
        orm_holdings = (
            self._db.query(HoldingORM)
            .filter(HoldingORM.account_id == account_id)
            .order_by(HoldingORM.symbol)
            .all()
        )
        return [self._to_domain(h) for h in orm_holdings]

    def list_all(self) -> list[Holding]:
        """Get holdings across every account."""
        orm_holdings = (
            self._db.query(HoldingORM)
            .order_by(HoldingORM.account_id, HoldingORM.symbol)
            .all()
        )
        return [self._to_domain(h) for h in orm_holdings]

    def get(self, account_id: str, symbol: str) -> Optional[Holding]:
        """Get a single holding."""
        orm_holding = self._find(account_id, symbol)
        return self._to_domain(orm_holding) if orm_holding else None

    def upsert(self, holding: Holding) -> Holding:
        """Insert or update the holding for (account, symbol)."""
        orm_holding = self._find(holding.account_id, holding.symbol)

        if orm_holding:
            orm_holding.quantity = holding.quantity
            orm_holding.average_cost = holding.average_cost
            orm_holding.currency = holding.currency
            orm_holding.updated_at_est = holding.updated_at_est
        else:
            orm_holding = HoldingORM(
                account_id=holding.account_id,
                symbol=holding.symbol,
                quantity=holding.quantity,
                average_cost=holding.average_cost,
                currency=holding.currency,
                updated_at_est=holding.updated_at_est,
            )
            self._db.add(orm_holding)

        self._db.flush()
        return self._to_domain(orm_holding)

    def delete(self, account_id: str, symbols: list[str]) -> None:
        """Delete holdings for the given symbols."""
        if not symbols:
            return
        self._db.query(HoldingORM).filter(
            HoldingORM.account_id == account_id,
            HoldingORM.symbol.in_(symbols),
        ).delete(synchronize_session="fetch")
        self._db.flush()

    def _find(self, account_id: str, symbol: str) -> Optional[HoldingORM]:
        return (
            self._db.query(HoldingORM)
            .filter(
                HoldingORM.account_id == account_id,
                HoldingORM.symbol == symbol,
            )
            .first()
        )

    @staticmethod
    def _to_domain(orm: HoldingORM) -> Holding:
        """Convert ORM holding to domain model."""
        return Holding(
            account_id=orm.account_id,
            symbol=orm.symbol,
            quantity=Decimal(str(orm.quantity)) if orm.quantity is not None else Decimal("0"),
            average_cost=Decimal(str(orm.average_cost)) if orm.average_cost is not None else Decimal("0"),
            currency=orm.currency,
            updated_at_est=orm.updated_at_est,
        )
