"""SQLAlchemy implementation of PriceCacheRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.domain.models import PriceCacheEntry
from ledgerfolio.repositories.sqlalchemy.orm_models import PriceCacheORM

_FIELDS = (
    "price",
    "previous_close",
    "currency",
    "dividend_yield",
    "fifty_two_week_high",
    "fifty_two_week_low",
    "name",
    "logo_url",
    "updated_at",
)


class SqlAlchemyPriceCacheRepository:
    """SQLAlchemy-backed quote store."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, ticker: str) -> Optional[PriceCacheEntry]:
        orm_entry = self._db.get(PriceCacheORM, ticker)
        return self._to_domain(orm_entry) if orm_entry else None

    def get_many(self, tickers: list[str]) -> dict[str, PriceCacheEntry]:
        if not tickers:
            return {}
        orm_entries = (
            self._db.query(PriceCacheORM)
            .filter(PriceCacheORM.ticker.in_(tickers))
            .all()
        )
        return {e.ticker: self._to_domain(e) for e in orm_entries}

    def list_all(self) -> list[PriceCacheEntry]:
        orm_entries = self._db.query(PriceCacheORM).order_by(PriceCacheORM.ticker).all()
        return [self._to_domain(e) for e in orm_entries]

    def upsert(self, entry: PriceCacheEntry) -> PriceCacheEntry:
        """Insert or overwrite the entry for a ticker."""
        orm_entry = self._db.get(PriceCacheORM, entry.ticker)
        if orm_entry is None:
            orm_entry = PriceCacheORM(ticker=entry.ticker)
            self._db.add(orm_entry)
        for name in _FIELDS:
            setattr(orm_entry, name, getattr(entry, name))
        self._db.flush()
        return self._to_domain(orm_entry)

    @staticmethod
    def _to_domain(orm: PriceCacheORM) -> PriceCacheEntry:
        return PriceCacheEntry(
            ticker=orm.ticker,
            price=Decimal(str(orm.price)),
            updated_at=orm.updated_at,
            previous_close=_opt_decimal(orm.previous_close),
            currency=orm.currency,
            dividend_yield=_opt_decimal(orm.dividend_yield),
            fifty_two_week_high=_opt_decimal(orm.fifty_two_week_high),
            fifty_two_week_low=_opt_decimal(orm.fifty_two_week_low),
            name=orm.name,
            logo_url=orm.logo_url,
        )


def _opt_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None
