from __future__ import annotations

import asyncio
import logging
import uuid
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Optional

from augurk_expiration.exceptions import ConcurrencyError, StoreError

from .base import INDEXES, Change, ChangeKind, Committed, DocumentSession, DocumentStore, StoredDocument
from .metadata import EXPIRES, LAST_MODIFIED, Metadata, parse_timestamp, utcnow

logger = logging.getLogger(__name__)


@dataclass
class _Record:
    body: dict[str, Any]
    metadata: dict[str, Any]
    etag: str


def _new_etag() -> str:
    return uuid.uuid4().hex


class InMemorySession(DocumentSession):
    def __init__(self, store: "InMemoryDocumentStore"):
        super().__init__()
        self._store = store

    async def _fetch(self, document_id: str) -> Optional[StoredDocument]:
        record = self._store._records.get(document_id)
        if record is None:
            return None
        return self._store._to_document(document_id, record)

    async def _query(self, index: str) -> AsyncIterator[StoredDocument]:
        predicate = self._store._index(index)
        # Snapshot the ids so commits made while iterating do not disturb the scan.
        for document_id in sorted(self._store._records):
            record = self._store._records.get(document_id)
            if record is None or not predicate(record.body):
                continue
            yield self._store._to_document(document_id, record)
            await asyncio.sleep(0)

    async def _commit(self, changes: list[Change]) -> dict[str, Committed]:
        return await self._store._apply(changes)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Mirrors the behaviour the expiration subsystem relies on from a real
    document database: `@last-modified` is refreshed on every committed
    change, patches are rejected when the document changed since it was read,
    and documents whose `@expires` timestamp is due can be purged.
    """

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None):
        self._records: dict[str, _Record] = {}
        self._clock = clock or utcnow
        self._lock = asyncio.Lock()
        self._closed = False

    def _index(self, name: str) -> Callable[[dict[str, Any]], bool]:
        try:
            return INDEXES[name]
        except KeyError:
            raise StoreError(f"Unknown index '{name}'") from None

    @staticmethod
    def _to_document(document_id: str, record: _Record) -> StoredDocument:
        return StoredDocument(
            id=document_id,
            body=deepcopy(record.body),
            metadata=Metadata(dict(record.metadata)),
            etag=record.etag,
        )

    def open_session(self) -> InMemorySession:
        if self._closed:
            raise StoreError("In-memory document store is closed")
        return InMemorySession(self)

    async def _apply(self, changes: list[Change]) -> dict[str, Committed]:
        async with self._lock:
            # Validate every change before touching anything so a conflict leaves the store unchanged.
            for change in changes:
                current = self._records.get(change.document_id)
                if change.kind == ChangeKind.PATCH and (
                    current is None or current.etag != change.expected_etag
                ):
                    raise ConcurrencyError(change.document_id)
                if (
                    change.kind == ChangeKind.DELETE
                    and change.expected_etag is not None
                    and current is not None
                    and current.etag != change.expected_etag
                ):
                    raise ConcurrencyError(change.document_id)

            now = self._clock()
            committed: dict[str, Committed] = {}
            for change in changes:
                if change.kind == ChangeKind.DELETE:
                    self._records.pop(change.document_id, None)
                    continue
                etag = _new_etag()
                metadata = dict(change.metadata or {})
                metadata[LAST_MODIFIED] = now
                self._records[change.document_id] = _Record(
                    body=deepcopy(change.body or {}), metadata=metadata, etag=etag
                )
                committed[change.document_id] = Committed(etag=etag, last_modified=now)
            return committed

    async def wait_for_indexing(self, timeout: float = 15.0) -> None:
        # Indexes are evaluated on read, so they are never stale.
        await asyncio.sleep(0)

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or self._clock()
        async with self._lock:
            due = [
                document_id
                for document_id, record in self._records.items()
                if record.metadata.get(EXPIRES) is not None
                and parse_timestamp(record.metadata[EXPIRES]) <= now
            ]
            for document_id in due:
                del self._records[document_id]
        if due:
            logger.info("Purged %d expired document(s) from the in-memory store", len(due))
        return len(due)

    async def ping(self) -> bool:
        return not self._closed

    async def close(self) -> None:
        self._closed = True

    def __len__(self) -> int:
        return len(self._records)
