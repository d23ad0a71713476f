"""SQLAlchemy implementation of SymbolMappingRepository."""

from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.core.timezone import now_eastern
from ledgerfolio.domain.models import SymbolMapping
from ledgerfolio.repositories.sqlalchemy.orm_models import SymbolMappingORM


class SqlAlchemySymbolMappingRepository:
    """SQLAlchemy-backed store of learned broker-code mappings."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, internal_code: str) -> Optional[SymbolMapping]:
        orm_mapping = self._db.get(SymbolMappingORM, internal_code)
        return self._to_domain(orm_mapping) if orm_mapping else None

    def save(self, mapping: SymbolMapping) -> SymbolMapping:
        orm_mapping = self._db.get(SymbolMappingORM, mapping.internal_code)
        if orm_mapping is None:
            orm_mapping = SymbolMappingORM(
                internal_code=mapping.internal_code,
                symbol=mapping.symbol,
                description=mapping.description,
                created_at_est=mapping.created_at_est or now_eastern(),
            )
            self._db.add(orm_mapping)
            self._db.flush()
        return self._to_domain(orm_mapping)

    @staticmethod
    def _to_domain(orm: SymbolMappingORM) -> SymbolMapping:
        return SymbolMapping(
            internal_code=orm.internal_code,
            symbol=orm.symbol,
            description=orm.description,
            created_at_est=orm.created_at_est,
        )
