"""Configuration management using Pydantic Settings"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./billboard_billing.db"
    create_schema: bool = False  # create tables on startup (local SQLite use)

    # Service
    service_name: str = "billboard-billing"
    log_level: str = "INFO"

    # Installment rules
    balance_tolerance: Decimal = Decimal("1")  # save gate
    manual_tolerance: Decimal = Decimal("0.01")
    redistribution_threshold: Decimal = Decimal("1")  # ignore total jitter at or below this
    max_installments: int = 24


settings = Settings()
