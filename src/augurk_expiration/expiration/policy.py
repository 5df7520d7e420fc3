"""The per-document expiration rule, kept free of any store access."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Optional

from augurk_expiration.configuration.models import Configuration
from augurk_expiration.db.nosql.base import StoredDocument
from augurk_expiration.db.nosql.metadata import EXPIRES, LAST_MODIFIED, UPLOAD_DATE, utcnow


class PolicyOutcome(StrEnum):
    """What `apply_policy` did to a document."""

    SKIPPED = "skipped"
    CLEARED = "cleared"
    MARKED = "marked"
    EXPIRING = "expiring"


def apply_policy(
    document: StoredDocument,
    configuration: Configuration,
    *,
    pattern: Optional[re.Pattern[str]] = None,
    now: Optional[datetime] = None,
) -> PolicyOutcome:
    """
    Bring the `upload-date` and `@expires` metadata of one document in line
    with `configuration`, mutating `document.metadata` in place.

    An existing `upload-date` is kept: it records when the matching version was
    first seen, and `@last-modified` moves every time the metadata is saved.
    """
    version = document.version
    if version is None:
        return PolicyOutcome.SKIPPED

    metadata = document.metadata
    pattern = pattern or configuration.compiled_regex()
    if pattern.search(version) is None:
        metadata.remove(UPLOAD_DATE)
        metadata.remove(EXPIRES)
        return PolicyOutcome.CLEARED

    upload_date = metadata.get_timestamp(UPLOAD_DATE)
    if upload_date is None:
        upload_date = metadata.get_timestamp(LAST_MODIFIED) or now or utcnow()
        metadata.set_timestamp(UPLOAD_DATE, upload_date)

    if not configuration.expiration_enabled:
        metadata.remove(EXPIRES)
        return PolicyOutcome.MARKED

    metadata.set_timestamp(EXPIRES, upload_date + timedelta(days=configuration.expiration_days))
    return PolicyOutcome.EXPIRING
