"""SQLAlchemy implementation of SettingsRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ledgerfolio.domain.models import AllocationTarget, PortfolioSettings
from ledgerfolio.repositories.sqlalchemy.orm_models import (
    AllocationTargetORM,
    PortfolioSettingsORM,
)

_SETTINGS_ROW_ID = 1


class SqlAlchemySettingsRepository:
    """Stores the single portfolio settings row and its targets."""

    def __init__(self, db: Session):
        self._db = db

    def load(self) -> Optional[PortfolioSettings]:
        row = self._db.get(PortfolioSettingsORM, _SETTINGS_ROW_ID)
        if row is None:
            return None
        targets = (
            self._db.query(AllocationTargetORM)
            .order_by(AllocationTargetORM.id)
            .all()
        )
        return PortfolioSettings(
            weekly_amount=Decimal(str(row.weekly_amount)),
            fx_fee_percent=Decimal(str(row.fx_fee_percent)),
            targets=[
                AllocationTarget(
                    symbol=t.symbol,
                    target_weight=Decimal(str(t.target_weight)),
                    currency=t.currency,
                )
                for t in targets
            ],
        )

    def replace(self, settings: PortfolioSettings) -> PortfolioSettings:
        row = self._db.get(PortfolioSettingsORM, _SETTINGS_ROW_ID)
        if row is None:
            row = PortfolioSettingsORM(id=_SETTINGS_ROW_ID)
            self._db.add(row)
        row.weekly_amount = settings.weekly_amount
        row.fx_fee_percent = settings.fx_fee_percent

        self._db.query(AllocationTargetORM).delete(synchronize_session="fetch")
        for target in settings.targets:
            self._db.add(
                AllocationTargetORM(
                    symbol=target.symbol,
                    target_weight=target.target_weight,
                    currency=target.currency,
                )
            )
        self._db.flush()
        return settings
