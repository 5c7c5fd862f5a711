"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./smm_broker.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class ProviderSettings(BaseModel):
    api_url: str = "https://peakerr.com/api/v2"
    api_key: SecretStr = SecretStr("")
    timeout_seconds: float = Field(default=5.0, gt=0)
    batch_size: int = Field(default=100, ge=1, le=100)
    # Platform markup applied to provider rates when the catalog is synced.
    rate_markup: Decimal = Decimal("0.10")


class JobSettings(BaseModel):
    enabled: bool = True
    run_on_startup: bool = True
    order_status_interval: float = Field(default=180.0, gt=0)
    placement_recovery_interval: float = Field(default=300.0, gt=0)
    service_sync_interval: float = Field(default=86400.0, gt=0)


class WalletSettings(BaseModel):
    currency: str = "NGN"
    transaction_id_start: int = 2301780
    level_thresholds: list[Decimal] = Field(default_factory=lambda: [Decimal("25000"), Decimal("100000")])


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "SMM Order Broker"

    database: DatabaseSettings = DatabaseSettings()
    provider: ProviderSettings = ProviderSettings()
    jobs: JobSettings = JobSettings()
    wallet: WalletSettings = WalletSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
