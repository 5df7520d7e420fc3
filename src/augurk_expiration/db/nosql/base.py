from __future__ import annotations

from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, AsyncIterator, Mapping, Optional, Union

from augurk_expiration.exceptions import ConcurrencyError, DocumentNotFoundError

from .metadata import LAST_MODIFIED, STORE_MANAGED_KEYS, Metadata

VERSION_FIELD = "Version"
VERSIONED_DOCUMENTS_INDEX = "Documents/ByVersion"


def document_version(body: Mapping[str, Any]) -> Optional[str]:
    """The document's `Version` as a string, or None when it has none."""
    value = body.get(VERSION_FIELD)
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def has_version(body: Mapping[str, Any]) -> bool:
    return body.get(VERSION_FIELD) is not None


# index name -> predicate over the document body
INDEXES = {
    VERSIONED_DOCUMENTS_INDEX: has_version,
}


@dataclass
class StoredDocument:
    id: str
    body: dict[str, Any]
    metadata: Metadata = field(default_factory=Metadata)
    etag: Optional[str] = None

    @property
    def version(self) -> Optional[str]:
        return document_version(self.body)


class ChangeKind(StrEnum):
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


@dataclass
class Change:
    kind: ChangeKind
    document_id: str
    body: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
    expected_etag: Optional[str] = None


@dataclass
class Committed:
    """What the store assigned to a document when a change was committed."""

    etag: str
    last_modified: datetime


@dataclass
class _Tracked:
    document: StoredDocument
    body_snapshot: dict[str, Any]
    metadata_snapshot: dict[str, Any]
    is_new: bool = False


class DocumentSession(ABC):
    """
    Unit of work over a document store.

    Documents loaded, streamed or stored through the session are tracked;
    `save_changes()` commits only the ones that were created, changed or
    deleted since they entered the session.
    """

    def __init__(self) -> None:
        self._tracked: dict[str, _Tracked] = {}
        self._deleted: dict[str, Optional[str]] = {}
        self._closed = False

    async def __aenter__(self) -> "DocumentSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # Backend hooks
    @abstractmethod
    async def _fetch(self, document_id: str) -> Optional[StoredDocument]: ...

    @abstractmethod
    def _query(self, index: str) -> AsyncIterator[StoredDocument]: ...

    @abstractmethod
    async def _commit(self, changes: list[Change]) -> dict[str, Committed]: ...

    # Public API
    def _track(self, document: StoredDocument, *, is_new: bool = False) -> StoredDocument:
        self._tracked[document.id] = _Tracked(
            document=document,
            body_snapshot={} if is_new else deepcopy(document.body),
            metadata_snapshot={} if is_new else document.metadata.to_dict(),
            is_new=is_new,
        )
        return document

    async def load(self, document_id: str) -> Optional[StoredDocument]:
        if document_id in self._deleted:
            return None
        tracked = self._tracked.get(document_id)
        if tracked is not None:
            return tracked.document
        document = await self._fetch(document_id)
        if document is None:
            return None
        return self._track(document)

    def store(
        self,
        document_id: str,
        body: Mapping[str, Any],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> StoredDocument:
        """Create or overwrite a document; it is written on the next `save_changes()`."""
        self._deleted.pop(document_id, None)
        document = StoredDocument(id=document_id, body=dict(body), metadata=Metadata(dict(metadata or {})))
        return self._track(document, is_new=True)

    def delete(self, document: Union[StoredDocument, str]) -> None:
        document_id = document if isinstance(document, str) else document.id
        tracked = self._tracked.pop(document_id, None)
        self._deleted[document_id] = tracked.document.etag if tracked else None

    def get_metadata(self, document: Union[StoredDocument, str]) -> Metadata:
        document_id = document if isinstance(document, str) else document.id
        tracked = self._tracked.get(document_id)
        if tracked is None:
            raise DocumentNotFoundError(document_id)
        return tracked.document.metadata

    async def stream(self, index: str) -> AsyncIterator[StoredDocument]:
        """Iterate the documents in `index`, tracking each one."""
        async for document in self._query(index):
            if document.id in self._deleted:
                continue
            tracked = self._tracked.get(document.id)
            if tracked is not None:
                yield tracked.document
            else:
                yield self._track(document)

    def _pending_changes(self) -> list[Change]:
        changes: list[Change] = []
        for document_id, etag in self._deleted.items():
            changes.append(Change(ChangeKind.DELETE, document_id, expected_etag=etag))
        for document_id, tracked in self._tracked.items():
            doc = tracked.document
            metadata = {k: v for k, v in doc.metadata.items() if k not in STORE_MANAGED_KEYS}
            if tracked.is_new:
                changes.append(Change(ChangeKind.PUT, document_id, body=dict(doc.body), metadata=metadata))
                continue
            snapshot_metadata = {
                k: v for k, v in tracked.metadata_snapshot.items() if k not in STORE_MANAGED_KEYS
            }
            if doc.body != tracked.body_snapshot or metadata != snapshot_metadata:
                changes.append(
                    Change(
                        ChangeKind.PATCH,
                        document_id,
                        body=dict(doc.body),
                        metadata=metadata,
                        expected_etag=doc.etag,
                    )
                )
        return changes

    @property
    def has_changes(self) -> bool:
        return bool(self._pending_changes())

    async def save_changes(self) -> int:
        """Commit pending changes; returns the number of documents written or deleted."""
        changes = self._pending_changes()
        if not changes:
            return 0
        try:
            committed = await self._commit(changes)
        except ConcurrencyError as exc:
            self._accept(exc.committed)
            raise
        self._accept(committed)
        self._deleted.clear()
        return len(changes)

    def _accept(self, committed: Mapping[str, Committed]) -> None:
        for document_id, result in committed.items():
            tracked = self._tracked.get(document_id)
            if tracked is None:
                continue
            tracked.document.etag = result.etag
            tracked.document.metadata.set_timestamp(LAST_MODIFIED, result.last_modified)
            self._track(tracked.document)

    def clear(self) -> None:
        """Stop tracking every document, discarding unsaved changes."""
        self._tracked.clear()
        self._deleted.clear()

    async def close(self) -> None:
        self.clear()
        self._closed = True


class DocumentStore(ABC):
    """Narrow interface the expiration subsystem needs from a document database."""

    @abstractmethod
    def open_session(self) -> DocumentSession: ...

    @abstractmethod
    async def wait_for_indexing(self, timeout: float = 15.0) -> None: ...

    @abstractmethod
    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete documents whose expiration timestamp is due; returns how many."""

    @abstractmethod
    async def ping(self) -> bool: ...

    async def close(self) -> None:
        return None
