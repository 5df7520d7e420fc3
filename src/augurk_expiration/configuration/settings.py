from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Pre-release versions such as 1.2.0-beta.1
DEFAULT_EXPIRATION_REGEX = r"\d+\.\d+\.\d+-.+"


class ExpirationSettings(BaseSettings):
    """
    Defaults for the expiration configuration and the job that applies it.

    The values seed the stored configuration document the first time it is
    created; after that the stored document wins.
    """

    enabled: bool = Field(default=False)
    days: int = Field(default=30, ge=0)
    regex: str = Field(default=DEFAULT_EXPIRATION_REGEX)
    interval_seconds: int = Field(default=3600, ge=0)

    model_config = SettingsConfigDict(
        env_prefix="EXPIRATION_",  # EXPIRATION_ENABLED, EXPIRATION_DAYS, ...
        env_file=".env",
        extra="ignore",
    )


@lru_cache
def get_expiration_settings(**kwargs) -> ExpirationSettings:
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return ExpirationSettings(**filtered)
