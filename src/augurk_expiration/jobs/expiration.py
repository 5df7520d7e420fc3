from __future__ import annotations

import logging
from typing import Optional

from augurk_expiration.configuration.manager import ConfigurationManager
from augurk_expiration.configuration.settings import get_expiration_settings
from augurk_expiration.db.provider import DocumentStoreProvider
from augurk_expiration.expiration.manager import ExpirationManager, ExpirationReport

from .scheduler import InMemoryScheduler

logger = logging.getLogger(__name__)

APPLY_POLICY_TASK = "apply-expiration-policy"
PURGE_EXPIRED_TASK = "purge-expired-documents"


def register_expiration_jobs(
    scheduler: InMemoryScheduler,
    store_provider: DocumentStoreProvider,
    *,
    interval_seconds: Optional[int] = None,
    configuration_manager: Optional[ConfigurationManager] = None,
) -> None:
    """Schedule the policy pass and the purge of expired documents."""
    interval = (
        interval_seconds if interval_seconds is not None else get_expiration_settings().interval_seconds
    )
    configurations = configuration_manager or ConfigurationManager(store_provider)
    expiration_manager = ExpirationManager(store_provider)

    async def apply_policy() -> ExpirationReport:
        configuration = await configurations.get_or_create_configuration()
        return await expiration_manager.apply_expiration_policy(configuration)

    async def purge_expired() -> int:
        return await store_provider.store.purge_expired()

    scheduler.add_task(APPLY_POLICY_TASK, interval_seconds=interval, func=apply_policy)
    scheduler.add_task(PURGE_EXPIRED_TASK, interval_seconds=interval, func=purge_expired)
    logger.info("Registered expiration jobs every %ss", interval)
