"""
Composition root for the tracker core.

Builds the key-value medium named in the settings, the contract store, the
extraction pipeline and the edit session, and tears them down in reverse
order. A presentation layer holds one ContractTracker for the life of the
process.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Union

from .alerts import AlertSummary, ExpiryAlert, alerts, summarize
from .config import Settings, get_settings
from .exceptions import StorageError
from .extraction import (
    ExtractionBackend,
    ExtractionPipeline,
    PlaceholderExtractionBackend,
)
from .models import ContractRecord
from .session import EditSession
from .storage import (
    ContractRecordStore,
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)
from .utils.logging import log_event, track


async def create_key_value_store(settings: Settings) -> KeyValueStore:
    """
    Build and connect the medium selected by ``settings.storage_backend``.

    Raises:
        StorageError: If the backend is unknown or cannot be reached
    """
    backend = settings.storage_backend
    if backend == "memory":
        kv: KeyValueStore = InMemoryKeyValueStore()
    elif backend == "json":
        kv = JSONFileKeyValueStore(settings.storage_path)
    elif backend == "redis":
        kv = RedisKeyValueStore(settings.redis_url)
        await kv.initialize()
    else:
        raise StorageError(f"Unknown storage backend: {backend}")

    log_event("key_value_store_ready", {"backend": backend}, level=logging.DEBUG)
    return kv


class ContractTracker:
    """
    Owns the store, pipeline and session for one running tracker.

    Usage:
        async with ContractTracker(settings) as tracker:
            await tracker.session.drop_file(upload)
            await tracker.session.commit()
            soon = tracker.upcoming(date.today())
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        kv: Optional[KeyValueStore] = None,
        backend: Optional[ExtractionBackend] = None,
    ):
        """
        Args:
            settings: Configuration (defaults to the global settings)
            kv: Medium to use instead of the one named in settings
            backend: Extraction backend (defaults to the placeholder)
        """
        self.settings = settings or get_settings()
        self._kv = kv
        self._backend = backend
        self._initialized = False

        self.store: Optional[ContractRecordStore] = None
        self.pipeline: Optional[ExtractionPipeline] = None
        self.session: Optional[EditSession] = None

    @track(operation="tracker_initialize", include_args=False)
    async def initialize(self) -> None:
        """Build every component in dependency order."""
        if self._initialized:
            return

        if self._kv is None:
            self._kv = await create_key_value_store(self.settings)

        self.store = await ContractRecordStore.open(
            self._kv, key=self.settings.storage_key
        )

        backend = self._backend or PlaceholderExtractionBackend(
            latency_seconds=self.settings.extraction_latency_seconds,
            counterparty_suffix=self.settings.counterparty_suffix,
        )
        self.pipeline = ExtractionPipeline(backend)
        self.session = EditSession(self.store, self.pipeline)
        self._initialized = True

        log_event(
            "service_ready",
            {"service": "contract_tracker", "contract_count": len(self.store)},
        )

    async def cleanup(self) -> None:
        """Cancel pending extraction, flush writes and close the medium."""
        if self.session is not None:
            self.session.cancel()
        if self.store is not None:
            await self.store.close()
        if self._kv is not None:
            await self._kv.close()
        self._initialized = False

    async def __aenter__(self) -> "ContractTracker":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()

    def _require_store(self) -> ContractRecordStore:
        if self.store is None:
            raise RuntimeError("ContractTracker not initialized")
        return self.store

    def contracts(self) -> List[ContractRecord]:
        return list(self._require_store().list())

    def alerts(self, as_of: Union[date, datetime]) -> List[ExpiryAlert]:
        return alerts(
            self._require_store().list(), as_of, self.settings.alert_horizon_days
        )

    def upcoming(self, as_of: Union[date, datetime]) -> List[ContractRecord]:
        """Contracts expiring within the configured horizon, soonest first."""
        return [alert.record for alert in self.alerts(as_of)]

    def summary(self, as_of: Union[date, datetime]) -> AlertSummary:
        return summarize(
            self._require_store().list(), as_of, self.settings.alert_horizon_days
        )
