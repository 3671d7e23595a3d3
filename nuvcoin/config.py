"""
Configuration settings for nuvcoin.

Uses Pydantic Settings to load environment variables for local storage,
the remote finance API, synchronization timing, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Local storage
    data_dir: Path = Field(Path(".nuvcoin"), alias="NUVCOIN_DATA_DIR")
    storage_key: str = Field("nuvcoin_finance_items_v1", alias="NUVCOIN_STORAGE_KEY")
    store_poll_interval: float = Field(0.5, alias="NUVCOIN_STORE_POLL_INTERVAL")

    # Remote authority
    use_api: bool = Field(False, alias="NUVCOIN_USE_API")
    api_base_url: str = Field("http://localhost:8000/api/finance", alias="NUVCOIN_API_BASE_URL")
    http_timeout: float = Field(10.0, alias="NUVCOIN_HTTP_TIMEOUT")

    # Synchronization
    sync_min_interval: float = Field(3.0, alias="NUVCOIN_SYNC_MIN_INTERVAL")
    echo_window: float = Field(0.5, alias="NUVCOIN_ECHO_WINDOW")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
