"""Portfolio settings with a local fallback copy."""

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ledgerfolio.core.exceptions import ValidationError
from ledgerfolio.domain.models import AllocationTarget, PortfolioSettings
from ledgerfolio.repositories.protocols import SettingsRepository, UnitOfWork

logger = logging.getLogger(__name__)


def default_settings() -> PortfolioSettings:
    return PortfolioSettings(
        weekly_amount=Decimal("0"),
        fx_fee_percent=Decimal("1.5"),
        targets=[],
    )


def clean_settings(settings: PortfolioSettings) -> PortfolioSettings:
    """
    Validate and canonicalize settings before they are stored.

    Targets are de-duplicated by symbol (last occurrence wins), symbols are
    upper-cased and currency defaults to CAD.

    Raises:
        ValidationError: negative amounts or weights outside 0..100
    """
    if settings.weekly_amount < 0:
        raise ValidationError("weekly_amount must not be negative")
    if not Decimal("0") <= settings.fx_fee_percent <= Decimal("100"):
        raise ValidationError("fx_fee_percent must be between 0 and 100")

    targets: dict[str, AllocationTarget] = {}
    for target in settings.targets:
        symbol = (target.symbol or "").strip().upper()
        if not symbol:
            raise ValidationError("Target symbol is required")
        if not Decimal("0") <= target.target_weight <= Decimal("100"):
            raise ValidationError(f"Target weight for {symbol} must be between 0 and 100")
        targets[symbol] = AllocationTarget(
            symbol=symbol,
            target_weight=target.target_weight,
            currency=(target.currency or "CAD").strip().upper(),
        )

    return PortfolioSettings(
        weekly_amount=settings.weekly_amount,
        fx_fee_percent=settings.fx_fee_percent,
        targets=list(targets.values()),
    )


class LocalSettingsCache:
    """JSON mirror of the last known settings, with a pending-upload flag."""

    def __init__(self, path: Path):
        self._path = Path(path)

    def read(self) -> Optional[tuple[PortfolioSettings, bool]]:
        """Return (settings, pending) or None when there is no usable copy."""
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            settings = PortfolioSettings(
                weekly_amount=Decimal(data["weekly_amount"]),
                fx_fee_percent=Decimal(data["fx_fee_percent"]),
                targets=[
                    AllocationTarget(
                        symbol=t["symbol"],
                        target_weight=Decimal(t["target_weight"]),
                        currency=t.get("currency", "CAD"),
                    )
                    for t in data.get("targets", [])
                ],
            )
        except (OSError, ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning("Ignoring unreadable settings cache %s: %s", self._path, e)
            return None
        return settings, bool(data.get("pending", False))

    def write(self, settings: PortfolioSettings, pending: bool = False) -> None:
        payload = {
            "pending": pending,
            "weekly_amount": str(settings.weekly_amount),
            "fx_fee_percent": str(settings.fx_fee_percent),
            "targets": [
                {
                    "symbol": t.symbol,
                    "target_weight": str(t.target_weight),
                    "currency": t.currency,
                }
                for t in settings.targets
            ],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not write settings cache %s: %s", self._path, e)


class SettingsService:
    """
    Read-through/write-through access to portfolio settings.

    The store is authoritative. The local copy is read only when the store
    cannot be reached; a save made during an outage is kept locally as
    pending and pushed to the store on the next successful load.
    """

    def __init__(
        self,
        settings_repo: SettingsRepository,
        unit_of_work: UnitOfWork,
        local_cache: Optional[LocalSettingsCache] = None,
    ):
        self._settings_repo = settings_repo
        self._uow = unit_of_work
        self._local = local_cache

    def get(self) -> PortfolioSettings:
        local = self._local.read() if self._local else None
        try:
            stored = self._settings_repo.load()
            if local is not None and local[1]:
                logger.info("Uploading settings saved while the store was unavailable")
                stored = self._settings_repo.replace(local[0])
                self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            if local is None:
                raise
            logger.warning("Settings store unavailable, using local copy: %s", e)
            return local[0]

        settings = stored or default_settings()
        if self._local:
            self._local.write(settings, pending=False)
        return settings

    def save(self, settings: PortfolioSettings) -> PortfolioSettings:
        cleaned = clean_settings(settings)
        try:
            self._settings_repo.replace(cleaned)
            self._uow.commit()
        except SQLAlchemyError as e:
            self._uow.rollback()
            if self._local is None:
                raise
            logger.warning("Settings store unavailable, saved locally: %s", e)
            self._local.write(cleaned, pending=True)
            return cleaned

        if self._local:
            self._local.write(cleaned, pending=False)
        return cleaned
