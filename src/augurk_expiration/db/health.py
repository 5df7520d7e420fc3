from __future__ import annotations

import logging

from .nosql.base import DocumentStore

logger = logging.getLogger(__name__)


async def store_healthcheck(store: DocumentStore) -> bool:
    try:
        return await store.ping()
    except Exception:
        logger.warning("Document store health check failed", exc_info=True)
        return False
