"""Tests for ExpirationManager against the in-memory document store."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from augurk_expiration.configuration.models import Configuration
from augurk_expiration.db.nosql.metadata import EXPIRES, LAST_MODIFIED, UPLOAD_DATE
from augurk_expiration.db.provider import DocumentStoreProvider
from augurk_expiration.exceptions import StoreNotInitializedError
from augurk_expiration.expiration.manager import ExpirationManager
from tests.helpers import persist_document, read_metadata

pytestmark = [pytest.mark.expiration, pytest.mark.asyncio]


async def assert_metadata(
    store,
    document_id: str,
    expected_upload_date: Optional[datetime],
    expected_expires: Optional[datetime],
) -> None:
    metadata = await read_metadata(store, document_id)
    if expected_upload_date is not None:
        assert UPLOAD_DATE in metadata
        assert metadata.get_timestamp(UPLOAD_DATE) == expected_upload_date
    else:
        assert UPLOAD_DATE not in metadata
    if expected_expires is not None:
        assert EXPIRES in metadata
        assert metadata.get_timestamp(EXPIRES) == expected_expires
    else:
        assert EXPIRES not in metadata


async def test_sets_expiration(store, store_provider, clock):
    configuration = Configuration(expiration_enabled=True, expiration_days=1, expiration_regex=r"\d")
    expected_upload_date = await persist_document(store, "testdocument1", {"Version": "1.0.0"})
    clock.advance(minutes=5)

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)
    await store.wait_for_indexing()

    await assert_metadata(
        store, "testdocument1", expected_upload_date, expected_upload_date + timedelta(days=1)
    )


async def test_removes_expiration_from_non_matching_version(store, store_provider):
    configuration = Configuration(
        expiration_enabled=True, expiration_days=1, expiration_regex="Hello World"
    )
    await persist_document(
        store, "testdocument1", {"Version": "1.0.0"}, {EXPIRES: datetime.now(timezone.utc)}
    )

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)

    await assert_metadata(store, "testdocument1", None, None)


async def test_removes_upload_date_from_non_matching_version(store, store_provider):
    await persist_document(store, "testdocument1", {"Version": "1.0.0"})
    manager = ExpirationManager(store_provider)
    await manager.apply_expiration_policy(Configuration(expiration_regex=r"\d"))

    await manager.apply_expiration_policy(Configuration(expiration_regex="Hello World"))

    await assert_metadata(store, "testdocument1", None, None)


async def test_removes_expiration_when_disabled(store, store_provider):
    configuration = Configuration(expiration_enabled=False, expiration_days=1, expiration_regex=r"\d")
    expected_upload_date = await persist_document(
        store, "testdocument1", {"Version": "1.0.0"}, {EXPIRES: datetime.now(timezone.utc)}
    )

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)

    await assert_metadata(store, "testdocument1", expected_upload_date, None)


async def test_sets_upload_date_on_new_documents_when_disabled(store, store_provider):
    configuration = Configuration(expiration_enabled=False, expiration_days=1, expiration_regex=r"\d")
    expected_upload_date = await persist_document(store, "testdocument1", {"Version": "1.0.0"})

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)

    await assert_metadata(store, "testdocument1", expected_upload_date, None)


async def test_does_not_set_expiration_on_non_versioned_documents(store, store_provider):
    configuration = Configuration(
        expiration_enabled=True, expiration_days=1, expiration_regex="Hello World"
    )
    await persist_document(store, "testdocument1", {"SomeProperty": "SomeValue"})

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)

    await assert_metadata(store, "testdocument1", None, None)


async def test_does_not_remove_expiration_from_non_versioned_documents(store, store_provider):
    configuration = Configuration(expiration_enabled=False)
    expires = datetime(2019, 3, 15, 12, 0, 0, tzinfo=timezone.utc)
    await persist_document(store, "testdocument1", {"SomeProperty": "SomeValue"}, {EXPIRES: expires})

    await ExpirationManager(store_provider).apply_expiration_policy(configuration)

    await assert_metadata(store, "testdocument1", None, expires)


async def test_null_version_counts_as_missing(store, store_provider):
    expires = datetime(2019, 3, 15, tzinfo=timezone.utc)
    await persist_document(store, "testdocument1", {"Version": None}, {EXPIRES: expires})

    report = await ExpirationManager(store_provider).apply_expiration_policy(
        Configuration(expiration_enabled=False, expiration_regex=".*")
    )

    assert report.scanned == 0
    await assert_metadata(store, "testdocument1", None, expires)


async def test_reapplying_keeps_upload_date(store, store_provider, clock):
    configuration = Configuration(expiration_enabled=True, expiration_days=7, expiration_regex=r"\d")
    uploaded = await persist_document(store, "feature", {"Version": "2.1.0"})
    manager = ExpirationManager(store_provider)

    clock.advance(hours=1)
    await manager.apply_expiration_policy(configuration)
    clock.advance(hours=1)
    report = await manager.apply_expiration_policy(configuration)

    assert report.scanned == 1
    assert report.saved == 0
    metadata = await read_metadata(store, "feature")
    assert metadata.get_timestamp(UPLOAD_DATE) == uploaded
    assert metadata.get_timestamp(LAST_MODIFIED) == uploaded + timedelta(hours=1)
    assert metadata.get_timestamp(EXPIRES) == uploaded + timedelta(days=7)


async def test_changing_days_moves_expiration_from_upload_date(store, store_provider, clock):
    uploaded = await persist_document(store, "feature", {"Version": "2.1.0-rc.1"})
    manager = ExpirationManager(store_provider)
    clock.advance(days=2)

    await manager.apply_expiration_policy(
        Configuration(expiration_enabled=True, expiration_days=7, expiration_regex=r"-rc")
    )
    await manager.apply_expiration_policy(
        Configuration(expiration_enabled=True, expiration_days=30, expiration_regex=r"-rc")
    )

    await assert_metadata(store, "feature", uploaded, uploaded + timedelta(days=30))


async def test_report_counts_outcomes(store, store_provider):
    await persist_document(store, "release", {"Version": "1.0.0"})
    await persist_document(store, "beta", {"Version": "1.1.0-beta.2"})
    await persist_document(store, "notes", {"Title": "Release notes"})

    report = await ExpirationManager(store_provider).apply_expiration_policy(
        Configuration(expiration_enabled=True, expiration_days=3)
    )

    assert report.as_dict() == {
        "scanned": 2,
        "saved": 1,
        "expiring": 1,
        "marked": 0,
        "cleared": 1,
    }


async def test_commits_in_batches(store, store_settings):
    for i in range(5):
        await persist_document(store, f"doc-{i}", {"Version": f"1.0.{i}"})
    provider = DocumentStoreProvider(store, settings=store_settings)

    report = await ExpirationManager(provider, batch_size=2).apply_expiration_policy(
        Configuration(expiration_enabled=True, expiration_days=1, expiration_regex=r"\d")
    )

    assert report.scanned == 5
    assert report.saved == 5
    for i in range(5):
        metadata = await read_metadata(store, f"doc-{i}")
        assert EXPIRES in metadata


async def test_requires_initialized_provider(store_settings):
    provider = DocumentStoreProvider(settings=store_settings)

    with pytest.raises(StoreNotInitializedError):
        await ExpirationManager(provider).apply_expiration_policy(Configuration())
