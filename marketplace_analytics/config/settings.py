"""
Marketplace Revenue Analytics configuration.

Each concern reads its own environment prefix; ``Settings`` composes them
and ``get_settings()`` caches one instance per process.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "staging", "production", "testing")


class DatabaseSettings(BaseSettings):
    """Read replica / primary the analytics queries run against (``POSTGRES_*``)"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    url: str = Field(default="", description="Complete async SQLAlchemy URL; wins over the parts below")
    host: str = "localhost"
    port: int = 5432
    db: str = "marketplace"
    user: str = "marketplace"
    password: SecretStr = SecretStr("marketplace")
    echo: bool = Field(default=False, description="Log every SQL statement")

    @property
    def async_url(self) -> str:
        if self.url:
            return self.url
        secret = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{secret}@{self.host}:{self.port}/{self.db}"


class MonitoringSettings(BaseSettings):
    """Log level and rendering (``LOG_LEVEL``, ``LOG_FORMAT``)"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"


class AnalyticsSettings(BaseSettings):
    """Thresholds, limits and windows of the read-models (``ANALYTICS_*``)"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    low_stock_threshold: int = Field(default=10, ge=1, description="Stock below this raises an alert")
    low_stock_limit: int = Field(default=20, ge=1)
    pending_orders_limit: int = Field(default=10, ge=1)
    recent_orders_limit: int = Field(default=10, ge=1)
    top_n: int = Field(default=10, ge=1, description="Size of product and store rankings")
    category_cap: int = Field(default=10, ge=1)
    admin_trend_months: int = Field(default=6, ge=1)
    admin_revenue_window_days: int = Field(default=30, ge=1, description="Platform revenue and top stores window")
    seller_revenue_window_days: int = Field(default=7, ge=1)
    max_ids_per_query: int = Field(default=500, ge=1, description="Ids per IN clause before a query is split")
    currency_symbol: str = "$"


class Settings(BaseSettings):
    """Application settings, composed from the sections above."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: List[str] = Field(default=["http://localhost:3000"], alias="CORS_ORIGINS")
    version: str = "1.0.0"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        if v.lower() not in ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of: {', '.join(ENVIRONMENTS)}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
