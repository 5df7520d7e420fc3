from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from augurk_expiration.db.provider import DocumentStoreProvider
from augurk_expiration.exceptions import InvalidConfigurationError

from .models import Configuration
from .settings import ExpirationSettings

logger = logging.getLogger(__name__)

CONFIGURATION_DOCUMENT_ID = "urn:Augurk:Configuration"


class ConfigurationManager:
    """Reads and writes the expiration configuration document."""

    def __init__(
        self,
        store_provider: DocumentStoreProvider,
        *,
        defaults: Optional[ExpirationSettings] = None,
    ):
        self._store_provider = store_provider
        self._defaults = defaults

    async def get_or_create_configuration(self) -> Configuration:
        async with self._store_provider.store.open_session() as session:
            document = await session.load(CONFIGURATION_DOCUMENT_ID)
            if document is not None:
                try:
                    return Configuration.model_validate(document.body)
                except ValidationError as exc:
                    raise InvalidConfigurationError(
                        f"Stored configuration '{CONFIGURATION_DOCUMENT_ID}' is invalid: {exc}"
                    ) from exc

            configuration = Configuration.from_settings(self._defaults)
            session.store(CONFIGURATION_DOCUMENT_ID, configuration.to_document())
            await session.save_changes()
            logger.info("Created default configuration %s", CONFIGURATION_DOCUMENT_ID)
            return configuration

    async def insert_or_update_configuration(self, configuration: Configuration) -> None:
        async with self._store_provider.store.open_session() as session:
            session.store(CONFIGURATION_DOCUMENT_ID, configuration.to_document())
            await session.save_changes()
        logger.info(
            "Stored configuration: enabled=%s days=%s regex=%s",
            configuration.expiration_enabled,
            configuration.expiration_days,
            configuration.expiration_regex,
        )
