from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from augurk_expiration.configuration.models import Configuration
from augurk_expiration.db.nosql.base import VERSIONED_DOCUMENTS_INDEX
from augurk_expiration.db.provider import DocumentStoreProvider

from .policy import PolicyOutcome, apply_policy

logger = logging.getLogger(__name__)


@dataclass
class ExpirationReport:
    """Summary of one pass of the expiration policy."""

    scanned: int = 0
    saved: int = 0
    outcomes: Counter = field(default_factory=Counter)

    @property
    def expiring(self) -> int:
        return self.outcomes[PolicyOutcome.EXPIRING]

    @property
    def marked(self) -> int:
        return self.outcomes[PolicyOutcome.MARKED]

    @property
    def cleared(self) -> int:
        return self.outcomes[PolicyOutcome.CLEARED]

    def as_dict(self) -> dict[str, int]:
        return {
            "scanned": self.scanned,
            "saved": self.saved,
            "expiring": self.expiring,
            "marked": self.marked,
            "cleared": self.cleared,
        }


class ExpirationManager:
    """Applies the expiration policy to every versioned document in the store."""

    def __init__(self, store_provider: DocumentStoreProvider, *, batch_size: Optional[int] = None):
        self._store_provider = store_provider
        self._batch_size = batch_size or store_provider.settings.batch_size

    async def apply_expiration_policy(self, configuration: Configuration) -> ExpirationReport:
        store = self._store_provider.store
        pattern = configuration.compiled_regex()
        report = ExpirationReport()

        async with store.open_session() as session:
            pending = 0
            async for document in session.stream(VERSIONED_DOCUMENTS_INDEX):
                report.scanned += 1
                outcome = apply_policy(document, configuration, pattern=pattern)
                report.outcomes[outcome] += 1
                logger.debug("Expiration policy outcome: %s", outcome, extra={"document_id": document.id})

                pending += 1
                if pending >= self._batch_size:
                    report.saved += await session.save_changes()
                    session.clear()
                    pending = 0
            report.saved += await session.save_changes()

        await store.wait_for_indexing()
        logger.info(
            "Applied expiration policy (enabled=%s days=%s regex=%s): %s",
            configuration.expiration_enabled,
            configuration.expiration_days,
            configuration.expiration_regex,
            report.as_dict(),
        )
        return report
