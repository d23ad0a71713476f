"""Portfolio settings repository protocol."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import PortfolioSettings


class SettingsRepository(Protocol):
    """Interface for the single portfolio settings record."""

    def load(self) -> Optional[PortfolioSettings]:
        """Return stored settings, or None if never saved."""
        ...

    def replace(self, settings: PortfolioSettings) -> PortfolioSettings:
        """Overwrite the settings row and replace every target."""
        ...
