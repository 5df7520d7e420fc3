from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Optional

from augurk_expiration.db.nosql.base import (
    VERSION_FIELD,
    VERSIONED_DOCUMENTS_INDEX,
    Change,
    ChangeKind,
    Committed,
    DocumentSession,
    DocumentStore,
    StoredDocument,
)
from augurk_expiration.db.nosql.metadata import EXPIRES, LAST_MODIFIED, Metadata, utcnow
from augurk_expiration.exceptions import ConcurrencyError, StoreError

logger = logging.getLogger(__name__)

METADATA_FIELD = "@metadata"
ETAG_FIELD = "@etag"
RESERVED_FIELDS = frozenset({"_id", METADATA_FIELD, ETAG_FIELD})

# index name -> Mongo filter selecting the same documents
INDEX_FILTERS: dict[str, dict[str, Any]] = {
    VERSIONED_DOCUMENTS_INDEX: {VERSION_FIELD: {"$ne": None}},
}


def to_document(raw: dict[str, Any]) -> StoredDocument:
    body = {k: v for k, v in raw.items() if k not in RESERVED_FIELDS}
    return StoredDocument(
        id=str(raw["_id"]),
        body=body,
        metadata=Metadata(dict(raw.get(METADATA_FIELD) or {})),
        etag=raw.get(ETAG_FIELD),
    )


def to_raw(document_id: str, body: dict[str, Any], metadata: dict[str, Any], etag: str) -> dict[str, Any]:
    raw = {k: v for k, v in body.items() if k not in RESERVED_FIELDS}
    raw["_id"] = document_id
    raw[METADATA_FIELD] = metadata
    raw[ETAG_FIELD] = etag
    return raw


class MongoSession(DocumentSession):
    def __init__(self, store: "MongoDocumentStore"):
        super().__init__()
        self._store = store

    async def _fetch(self, document_id: str) -> Optional[StoredDocument]:
        raw = await self._store.collection.find_one({"_id": document_id})
        return to_document(raw) if raw else None

    async def _query(self, index: str) -> AsyncIterator[StoredDocument]:
        try:
            query = INDEX_FILTERS[index]
        except KeyError:
            raise StoreError(f"Unknown index '{index}'") from None
        cursor = self._store.collection.find(query).sort("_id", 1)
        async for raw in cursor:
            yield to_document(raw)

    async def _commit(self, changes: list[Change]) -> dict[str, Committed]:
        # Changes are written one by one; a conflict stops the batch but earlier writes stay
        # and are reported on the error.
        collection = self._store.collection
        now = self._store.now()
        committed: dict[str, Committed] = {}
        for change in changes:
            if change.kind == ChangeKind.DELETE:
                query: dict[str, Any] = {"_id": change.document_id}
                if change.expected_etag is not None:
                    query[ETAG_FIELD] = change.expected_etag
                await collection.delete_one(query)
                continue

            etag = uuid.uuid4().hex
            metadata = dict(change.metadata or {})
            metadata[LAST_MODIFIED] = now
            raw = to_raw(change.document_id, change.body or {}, metadata, etag)

            if change.kind == ChangeKind.PUT:
                await collection.replace_one({"_id": change.document_id}, raw, upsert=True)
            else:
                result = await collection.replace_one(
                    {"_id": change.document_id, ETAG_FIELD: change.expected_etag}, raw
                )
                if result.matched_count == 0:
                    raise ConcurrencyError(change.document_id, committed=committed)
            committed[change.document_id] = Committed(etag=etag, last_modified=now)
        return committed


class MongoDocumentStore(DocumentStore):
    """
    Document store backed by a single MongoDB collection.

    Body fields live at the top level of each Mongo document so the
    `Version` index can serve the versioned-documents query; metadata is kept
    under `@metadata`. A TTL index on `@metadata.@expires` lets MongoDB delete
    expired documents on its own.
    """

    def __init__(
        self,
        db: Any,
        collection_name: str = "documents",
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._db = db
        self._collection_name = collection_name
        self._clock = clock or utcnow

    @property
    def collection(self) -> Any:
        return self._db[self._collection_name]

    def now(self) -> datetime:
        return self._clock()

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(VERSION_FIELD, name="version_1")
        await self.collection.create_index(
            f"{METADATA_FIELD}.{EXPIRES}", name="expires_ttl", expireAfterSeconds=0
        )
        logger.debug("Ensured indexes on collection %s", self._collection_name)

    def open_session(self) -> MongoSession:
        return MongoSession(self)

    async def wait_for_indexing(self, timeout: float = 15.0) -> None:
        # Mongo secondary indexes are updated synchronously with each write.
        return None

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or self.now()
        result = await self.collection.delete_many({f"{METADATA_FIELD}.{EXPIRES}": {"$lte": now}})
        deleted = int(result.deleted_count or 0)
        if deleted:
            logger.info("Purged %d expired document(s) from %s", deleted, self._collection_name)
        return deleted

    async def ping(self) -> bool:
        res = await self._db.command("ping")
        return bool(res.get("ok"))
