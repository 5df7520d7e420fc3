"""Shared test helpers for persisting documents and reading metadata back."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from augurk_expiration.db.nosql.memory import InMemoryDocumentStore
from augurk_expiration.db.nosql.metadata import LAST_MODIFIED, Metadata


class FakeClock:
    """Deterministic clock; every call returns the current instant."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2019, 3, 14, 9, 26, 53, 589793, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


async def persist_document(
    store: InMemoryDocumentStore,
    document_id: str,
    body: Dict[str, Any],
    additional_metadata: Optional[Dict[str, Any]] = None,
) -> datetime:
    """Store a document and return the last-modified timestamp the store assigned."""
    async with store.open_session() as session:
        document = session.store(document_id, body, additional_metadata)
        await session.save_changes()
        await store.wait_for_indexing()
        return session.get_metadata(document)[LAST_MODIFIED]


async def read_metadata(store: InMemoryDocumentStore, document_id: str) -> Metadata:
    async with store.open_session() as session:
        document = await session.load(document_id)
        assert document is not None, f"{document_id} was not found"
        return session.get_metadata(document)
