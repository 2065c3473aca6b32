"""Configuration for generated operation clients."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OAS_CLIENT_", case_sensitive=False)

    base_url: Optional[str] = Field(default=None)
    timeout_seconds: float = Field(default=30)
    verify_ssl: bool = Field(default=True)

    channel_timeout_seconds: float = Field(default=30)
    spec_cache_seconds: int = Field(default=3600)

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
