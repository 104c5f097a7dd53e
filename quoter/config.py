# quoter/config.py
import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # === General ===
    app_env: str = "local"  # local | development | production

    # === Logging ===
    log_level: str = "INFO"
    log_json: bool = True

    # === Catalog ===
    catalog_path: Optional[str] = Field(
        None, description="YAML catalog to load; the bundled seed catalog when empty"
    )

    # === Display (single convention) ===
    currency_symbol: str = "R$"
    thousands_separator: str = "."
    decimal_separator: str = ","
    price_decimals: int = 2

    # === Form defaults ===
    delivery_lead_days: int = 30
    default_quantity: int = 1

    # === Pydantic Settings config ===
    model_config = SettingsConfigDict(
        env_prefix="QUOTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance with simple environment overrides."""
    s = Settings()

    env = os.getenv("ENVIRONMENT", s.app_env).lower()
    if env == "production":
        s.log_level = "WARNING"
    elif env == "development":
        s.log_level = "DEBUG"
        s.log_json = False

    return s


settings = get_settings()
