from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_BASE_URL = "https://siftrics.com/api/hydra"


class Settings(BaseSettings):
    """Client settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HYDRA_",
        extra="ignore",
    )

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = Field(default=300.0, gt=0)
    channel_capacity: int = Field(default=16, ge=1)
    distinguish_not_found: bool = True

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("HYDRA_API_KEY", "SIFTRICS_API_KEY"),
    )

    def endpoint_for(self, data_source_id: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/{data_source_id}/"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
