from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """
    Document store settings.

    Env support:
      - Prefer STORE_* variables:
          STORE_BACKEND, STORE_URL, STORE_DATABASE, STORE_COLLECTION, STORE_BATCH_SIZE
      - Also accepts MONGO_URL and MONGO_DB as fallbacks for convenience.
    """

    backend: Literal["memory", "mongo"] = Field(default="mongo")
    url: Optional[str] = Field(default=None)
    database: Optional[str] = Field(default=None)
    collection: str = Field(default="documents")
    batch_size: int = Field(default=512, ge=1)
    server_selection_timeout_ms: int = Field(default=5000)

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_url(self) -> str:
        url = self.url or os.getenv("MONGO_URL")
        if not url:
            raise ValueError("MONGO_URL or STORE_URL must be set for the mongo document store")
        return url

    @property
    def resolved_database(self) -> str:
        return self.database or os.getenv("MONGO_DB") or "augurk"


@lru_cache
def get_store_settings(**kwargs) -> StoreSettings:
    # Only include kwargs that are not None, so defaults in StoreSettings are used
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return StoreSettings(**filtered)
