"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".finledger"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FINLEDGER_",
    )

    app_name: str = "Finance Ledger"
    app_version: str = "0.1.0"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # Derivation rules
    credit_accounts: list[str] = ["CreditCard"]

    # Assets that price at 1 in the currency of the same name
    usd_pegged_assets: list[str] = ["USD", "USDT", "USDC"]

    # Calendar used to turn timestamps into ledger dates
    ledger_timezone: str = "Asia/Ho_Chi_Minh"

    # Reports
    days_in_year: int = 365
    top_expenses_limit: int = 10

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "ledger.db"
        return f"sqlite:///{db_path}"


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
