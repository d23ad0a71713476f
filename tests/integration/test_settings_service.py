"""
Integration tests for portfolio settings storage and the local fallback copy.
"""

import json
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from ledgerfolio.core.exceptions import ValidationError
from ledgerfolio.domain.models import AllocationTarget, PortfolioSettings
from ledgerfolio.services import LocalSettingsCache, SettingsService


class FlakySettingsRepository:
    """Wraps the real repository; raises while `down` is set."""

    def __init__(self, inner):
        self._inner = inner
        self.down = False

    def load(self):
        if self.down:
            raise OperationalError("SELECT portfolio_settings", {}, Exception("database is locked"))
        return self._inner.load()

    def replace(self, settings):
        if self.down:
            raise OperationalError("UPDATE portfolio_settings", {}, Exception("database is locked"))
        return self._inner.replace(settings)


def _settings(*targets, weekly="230") -> PortfolioSettings:
    return PortfolioSettings(
        weekly_amount=Decimal(weekly),
        fx_fee_percent=Decimal("1.5"),
        targets=[AllocationTarget(symbol=s, target_weight=Decimal(w)) for s, w in targets],
    )


@pytest.fixture
def local_path(tmp_path):
    return tmp_path / "portfolio_settings.json"


@pytest.fixture
def flaky_repo(settings_repo):
    return FlakySettingsRepository(settings_repo)


@pytest.fixture
def flaky_service(flaky_repo, unit_of_work, local_path) -> SettingsService:
    return SettingsService(flaky_repo, unit_of_work, LocalSettingsCache(local_path))


class TestSaveAndLoad:
    def test_defaults_when_nothing_saved(self, settings_service: SettingsService):
        settings = settings_service.get()

        assert settings.weekly_amount == Decimal("0")
        assert settings.fx_fee_percent == Decimal("1.5")
        assert settings.targets == []

    def test_round_trip(self, settings_service: SettingsService):
        settings_service.save(_settings(("AAPL", "60"), ("CASH", "40")))

        loaded = settings_service.get()

        assert loaded.weekly_amount == Decimal("230")
        assert {t.symbol: t.target_weight for t in loaded.targets} == {
            "AAPL": Decimal("60"),
            "CASH": Decimal("40"),
        }

    def test_save_replaces_previous_targets(self, settings_service: SettingsService):
        settings_service.save(_settings(("AAPL", "100")))
        settings_service.save(_settings(("MSFT", "100")))

        assert [t.symbol for t in settings_service.get().targets] == ["MSFT"]

    def test_duplicate_symbols_keep_last(self, settings_service: SettingsService):
        saved = settings_service.save(_settings(("aapl", "30"), ("AAPL", "70")))

        assert len(saved.targets) == 1
        assert saved.targets[0].symbol == "AAPL"
        assert saved.targets[0].target_weight == Decimal("70")

    @pytest.mark.parametrize(
        "settings",
        [
            _settings(weekly="-1"),
            _settings(("AAPL", "101")),
            _settings(("", "10")),
        ],
    )
    def test_invalid_settings_rejected(self, settings_service: SettingsService, settings):
        with pytest.raises(ValidationError):
            settings_service.save(settings)

    def test_local_copy_written_after_save(self, settings_service: SettingsService, tmp_path):
        settings_service.save(_settings(("AAPL", "100")))

        data = json.loads((tmp_path / "portfolio_settings.json").read_text())
        assert data["pending"] is False
        assert data["targets"][0]["symbol"] == "AAPL"


class TestStoreOutage:
    def test_get_falls_back_to_local_copy(self, flaky_service, flaky_repo):
        flaky_service.save(_settings(("AAPL", "100")))
        flaky_repo.down = True

        settings = flaky_service.get()

        assert settings.targets[0].symbol == "AAPL"

    def test_get_without_local_copy_raises(self, flaky_service, flaky_repo, local_path):
        flaky_repo.down = True

        with pytest.raises(OperationalError):
            flaky_service.get()
        assert not local_path.exists()

    def test_save_during_outage_is_uploaded_later(self, flaky_service, flaky_repo, settings_repo, local_path):
        """
        GIVEN the store is unavailable
        WHEN settings are saved
        THEN they are kept locally as pending and uploaded on the next load
        """
        flaky_repo.down = True
        flaky_service.save(_settings(("VOO", "100")))
        assert json.loads(local_path.read_text())["pending"] is True
        assert settings_repo.load() is None

        flaky_repo.down = False
        settings = flaky_service.get()

        assert [t.symbol for t in settings.targets] == ["VOO"]
        assert [t.symbol for t in settings_repo.load().targets] == ["VOO"]
        assert json.loads(local_path.read_text())["pending"] is False

    def test_save_without_local_copy_raises(self, flaky_repo, unit_of_work):
        service = SettingsService(flaky_repo, unit_of_work)
        flaky_repo.down = True

        with pytest.raises(OperationalError):
            service.save(_settings(("AAPL", "100")))

    def test_corrupt_local_copy_is_ignored(self, local_path):
        local_path.write_text("{not json")

        assert LocalSettingsCache(local_path).read() is None
