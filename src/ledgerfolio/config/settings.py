"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / "Documents" / "Ledgerfolio"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Ledgerfolio"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Quote cache
    quote_cache_ttl_minutes: int = 15
    quote_batch_size: int = 5
    quote_batch_delay_seconds: float = 0.5
    provider_timeout_seconds: float = 10.0

    # Valuation
    base_currency: str = "CAD"
    supported_currencies: list[str] = ["CAD", "USD"]
    default_fx_rate: float = 1.35
    fx_ticker: str = "CAD=X"

    # Ingestion
    import_error_limit: int = 20
    parse_error_limit: int = 10

    # Broker sync
    broker_history_days: int = 365
    broker_chunk_days: int = 30
    auto_sync_interval_minutes: int = 60

    # Local mirror of portfolio settings, used when the store is unreachable
    settings_cache_file: Optional[Path] = None

    @field_validator("quote_batch_size")
    @classmethod
    def clamp_batch_size(cls, v: int) -> int:
        return min(max(v, 3), 5)

    @field_validator("supported_currencies")
    @classmethod
    def uppercase_currencies(cls, v: list[str]) -> list[str]:
        return [c.strip().upper() for c in v]

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "ledgerfolio.db"
        return f"sqlite:///{db_path}"

    def get_settings_cache_file(self) -> Path:
        """Get the path of the local portfolio settings mirror."""
        if self.settings_cache_file:
            return self.settings_cache_file
        return self.get_data_dir() / "portfolio_settings.json"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
