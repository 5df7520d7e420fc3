from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .settings import DEFAULT_EXPIRATION_REGEX, ExpirationSettings, get_expiration_settings


class Configuration(BaseModel):
    """Expiration policy configuration, persisted with PascalCase keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    expiration_enabled: bool = Field(default=False, alias="ExpirationEnabled")
    expiration_days: int = Field(default=30, ge=0, alias="ExpirationDays")
    expiration_regex: str = Field(default=DEFAULT_EXPIRATION_REGEX, alias="ExpirationRegex")

    @field_validator("expiration_regex")
    @classmethod
    def _regex_must_compile(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid regular expression {value!r}: {exc}") from exc
        return value

    def compiled_regex(self) -> re.Pattern[str]:
        return re.compile(self.expiration_regex)

    def matches(self, version: str) -> bool:
        # Unanchored, like Regex.IsMatch: `\d` matches "1.0.0".
        return self.compiled_regex().search(version) is not None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_settings(cls, settings: Optional[ExpirationSettings] = None) -> "Configuration":
        s = settings or get_expiration_settings()
        return cls(expiration_enabled=s.enabled, expiration_days=s.days, expiration_regex=s.regex)
