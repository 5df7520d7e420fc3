from __future__ import annotations

from typing import Any, Optional


class AugurkError(Exception):
    """Base class for errors raised by augurk-expiration."""


class StoreError(AugurkError):
    """A document store operation failed."""


class StoreNotInitializedError(StoreError):
    def __init__(self) -> None:
        super().__init__(
            "Document store is not initialized; call DocumentStoreProvider.initialize() first"
        )


class DocumentNotFoundError(StoreError):
    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document '{document_id}' does not exist")
        self.document_id = document_id


class ConcurrencyError(StoreError):
    """Raised when a document changed since it was loaded into the session."""

    def __init__(self, document_id: str, committed: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            f"Document '{document_id}' was modified concurrently; reload it and try again"
        )
        self.document_id = document_id
        # writes that landed before the conflict, keyed by document id
        self.committed = dict(committed or {})


class InvalidConfigurationError(AugurkError):
    """The stored expiration configuration could not be read."""
