"""Per-document metadata and the keys the store and the expiration policy agree on."""

from __future__ import annotations

import re
from collections.abc import Iterator, MutableMapping
from datetime import datetime, timezone
from typing import Any, Optional

LAST_MODIFIED = "@last-modified"
EXPIRES = "@expires"
UPLOAD_DATE = "upload-date"

# Keys maintained by the store itself; callers cannot override them through a session.
STORE_MANAGED_KEYS = frozenset({LAST_MODIFIED})

_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    Convert a stored metadata value into an aware UTC datetime.

    Accepts datetimes and ISO-8601 strings, including the `Z` suffix and the
    seven-digit fractions some document stores write.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        text = _LONG_FRACTION.sub(r"\1", value.strip())
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError as exc:
            raise ValueError(f"Invalid metadata timestamp: {value!r}") from exc
    raise TypeError(f"Metadata timestamp must be a datetime or ISO string, got {type(value).__name__}")


class Metadata(MutableMapping[str, Any]):
    """String-keyed metadata attached to a stored document."""

    def __init__(self, values: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"

    def get_timestamp(self, key: str) -> Optional[datetime]:
        value = self._values.get(key)
        if value is None:
            return None
        return parse_timestamp(value)

    def set_timestamp(self, key: str, value: datetime) -> None:
        self._values[key] = ensure_utc(value)

    def remove(self, key: str) -> bool:
        """Drop `key`; returns whether it was present."""
        if key not in self._values:
            return False
        del self._values[key]
        return True

    def copy(self) -> "Metadata":
        return Metadata(self._values)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)
