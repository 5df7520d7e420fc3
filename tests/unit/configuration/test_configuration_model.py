from __future__ import annotations

import pytest
from pydantic import ValidationError

from augurk_expiration.configuration.models import Configuration
from augurk_expiration.configuration.settings import (
    DEFAULT_EXPIRATION_REGEX,
    ExpirationSettings,
    get_expiration_settings,
)


def test_defaults():
    c = Configuration()
    assert c.expiration_enabled is False
    assert c.expiration_days == 30
    assert c.expiration_regex == DEFAULT_EXPIRATION_REGEX


def test_accepts_pascal_case_aliases():
    c = Configuration.model_validate(
        {"ExpirationEnabled": True, "ExpirationDays": 3, "ExpirationRegex": r"\d"}
    )
    assert c.expiration_enabled is True
    assert c.expiration_days == 3
    assert c.matches("1.0.0")


def test_to_document_uses_aliases():
    c = Configuration(expiration_enabled=True, expiration_days=1, expiration_regex="x")
    assert c.to_document() == {
        "ExpirationEnabled": True,
        "ExpirationDays": 1,
        "ExpirationRegex": "x",
    }


def test_rejects_invalid_regex():
    with pytest.raises(ValidationError) as exc_info:
        Configuration(expiration_regex="(unclosed")
    assert "invalid regular expression" in str(exc_info.value)


def test_rejects_negative_days():
    with pytest.raises(ValidationError):
        Configuration(expiration_days=-1)


def test_default_regex_matches_prerelease_versions_only():
    c = Configuration()
    assert c.matches("1.2.0-beta.1")
    assert not c.matches("1.2.0")


def test_from_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("EXPIRATION_ENABLED", "true")
    monkeypatch.setenv("EXPIRATION_DAYS", "9")
    monkeypatch.setenv("EXPIRATION_REGEX", "-rc")

    c = Configuration.from_settings(ExpirationSettings())

    assert c == Configuration(expiration_enabled=True, expiration_days=9, expiration_regex="-rc")


def test_get_expiration_settings_ignores_none_overrides():
    get_expiration_settings.cache_clear()
    try:
        s = get_expiration_settings(days=None, interval_seconds=60)
        assert s.days == 30
        assert s.interval_seconds == 60
    finally:
        get_expiration_settings.cache_clear()
