from __future__ import annotations

import logging
from typing import Optional

from augurk_expiration.exceptions import StoreError, StoreNotInitializedError

from .nosql.base import DocumentStore
from .nosql.memory import InMemoryDocumentStore
from .settings import StoreSettings, get_store_settings

logger = logging.getLogger(__name__)


class DocumentStoreProvider:
    """Owns the lifetime of the configured document store."""

    def __init__(self, store: Optional[DocumentStore] = None, *, settings: Optional[StoreSettings] = None):
        self._store = store
        self._owns_store = store is None
        self.settings = settings or get_store_settings()

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            raise StoreNotInitializedError()
        return self._store

    async def initialize(self) -> DocumentStore:
        if self._store is not None:
            return self._store

        if self.settings.backend == "memory":
            self._store = InMemoryDocumentStore()
        else:
            try:
                url = self.settings.resolved_url
            except ValueError as exc:
                raise StoreError(str(exc)) from exc

            from .nosql.mongo import MongoDocumentStore, initialize_mongo

            db = await initialize_mongo(
                url,
                self.settings.resolved_database,
                server_selection_timeout_ms=self.settings.server_selection_timeout_ms,
            )
            store = MongoDocumentStore(db, self.settings.collection)
            await store.ensure_indexes()
            self._store = store
        logger.info("Document store attached: backend=%s", self.settings.backend)
        return self._store

    async def dispose(self) -> None:
        if self._store is None or not self._owns_store:
            return
        await self._store.close()
        if self.settings.backend == "mongo":
            from .nosql.mongo import dispose_mongo

            await dispose_mongo()
        self._store = None

    async def __aenter__(self) -> "DocumentStoreProvider":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
