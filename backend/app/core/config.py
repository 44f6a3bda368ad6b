"""
Application Configuration

All settings loaded from environment variables.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    app_name: str = "VaultLedger Backend"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Identities
    contract_owner: str = "admin"  # Only identity allowed to run admin operations
    custody_account: str = "vault-ledger"  # Holds deposited settlement currency

    # SQLite (ledger store)
    sqlite_path: Optional[str] = None  # Defaults to ./data/vaultledger.db
    database_url: Optional[str] = None  # Overrides sqlite_path when set

    # Redis (event stream)
    redis_url: str = "redis://localhost:6379"
    enable_redis_events: bool = False
    event_channel: str = "vaultledger:events"
    event_history_size: int = 1000

    # CORS (Frontend URL)
    frontend_url: str = "http://localhost:3000"
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Structural limits
    max_allocation_entries: int = 10
    max_supported_tokens: int = 10
    max_position_entries: int = 5
    max_batch_actions: int = 10
    min_risk_level: int = 1
    max_risk_level: int = 10

    # User risk settings (percent)
    max_user_risk_setting: int = 50
    default_liquidation_alert_threshold: int = 5
    default_rebalance_threshold: int = 10
    default_max_slippage: int = 3
    default_notifications: bool = True

    # Valuation placeholder (percent LTV reported by the fixed oracle)
    placeholder_ltv: int = 75
    use_tracked_positions_for_ltv: bool = False

    # Ledger behaviour
    allow_inactive_withdrawals: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
