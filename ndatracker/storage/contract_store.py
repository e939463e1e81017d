"""
Contract record store.

The store owns the authoritative, ordered collection of contract records
for a running session and mirrors it to a KeyValueStore. Every mutation
re-serializes the whole collection under one key (full replace, last write
wins). Writes are queued to a single background writer so they land in
issue order without making callers wait on the medium.
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import NotFoundError, PersistenceError, ValidationError
from ..models import ContractRecord, Draft
from ..utils.logging import log_event, track
from .key_value import KeyValueStore

DEFAULT_STORAGE_KEY = "ndaContracts"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContractRecordStore:
    """
    Ordered collection of ContractRecords persisted through a KeyValueStore.

    Usage:
        store = await ContractRecordStore.open(InMemoryKeyValueStore())
        record = await store.create(Draft(title="Acme-NDA"))
        await store.close()

    Persistence failures never roll back the in-memory state; the latest
    one is kept in ``last_persistence_error``.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        """
        Args:
            kv: Medium the collection is persisted to
            key: Fixed key the serialized collection lives under
            clock: Source of ``date_added`` timestamps
            id_factory: Source of candidate record ids
        """
        self.kv = kv
        self.key = key
        self._clock = clock
        self._id_factory = id_factory

        self._records: List[ContractRecord] = []
        # Every id seen this session, including deleted ones
        self._issued_ids: Set[str] = set()

        self._write_queue: "asyncio.Queue[str]" = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

        self.last_persistence_error: Optional[PersistenceError] = None
        self.persistence_failures = 0
        self._initialized = False

    @classmethod
    async def open(cls, kv: KeyValueStore, **kwargs) -> "ContractRecordStore":
        """Construct a store and load its persisted collection."""
        store = cls(kv, **kwargs)
        await store.initialize()
        return store

    @track(operation="contract_store_initialize", include_args=False)
    async def initialize(self) -> None:
        """
        Load the persisted collection, falling back to empty.

        Never raises: a missing key, an unreadable medium or a corrupt blob
        all start the session with no contracts.
        """
        if self._initialized:
            return

        try:
            blob = await self.kv.read(self.key)
        except Exception as e:
            log_event(
                "contracts_load_failed",
                {"key": self.key, "reason": f"read failed: {e}"},
                level=logging.WARNING,
            )
            blob = None

        self._records = self._deserialize(blob)
        self._issued_ids.update(record.id for record in self._records)
        self._initialized = True

        log_event(
            "contracts_loaded",
            {"key": self.key, "contract_count": len(self._records)},
            level=logging.DEBUG,
        )

    def _deserialize(self, blob: Optional[str]) -> List[ContractRecord]:
        if blob is None:
            return []

        try:
            payload = json.loads(blob)
        except (ValueError, RecursionError, TypeError) as e:
            log_event(
                "contracts_load_failed",
                {"key": self.key, "reason": f"corrupt data: {e}"},
                level=logging.WARNING,
            )
            return []

        if not isinstance(payload, list):
            log_event(
                "contracts_load_failed",
                {"key": self.key, "reason": "expected a list of contracts"},
                level=logging.WARNING,
            )
            return []

        records: List[ContractRecord] = []
        seen: Set[str] = set()
        for index, entry in enumerate(payload):
            try:
                record = ContractRecord.model_validate(entry)
            except PydanticValidationError as e:
                log_event(
                    "contract_entry_skipped",
                    {"index": index, "reason": f"{e.error_count()} invalid fields"},
                    level=logging.WARNING,
                )
                continue

            if record.id in seen:
                log_event(
                    "contract_entry_skipped",
                    {"index": index, "reason": f"duplicate id {record.id}"},
                    level=logging.WARNING,
                )
                continue

            seen.add(record.id)
            records.append(record)

        return records

    def serialize(self) -> str:
        """The current collection in its persisted JSON form."""
        return json.dumps(
            [record.model_dump(mode="json", by_alias=True) for record in self._records]
        )

    # Queries

    def list(self) -> Tuple[ContractRecord, ...]:
        """All records in insertion order."""
        return tuple(self._records)

    def get(self, record_id: str) -> ContractRecord:
        """
        Raises:
            NotFoundError: If no record has this id
        """
        return self._records[self._index_of(record_id)]

    def __contains__(self, record_id: str) -> bool:
        return any(record.id == record_id for record in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        raise NotFoundError(record_id)

    # Mutations

    @staticmethod
    def _require_title(draft: Draft) -> None:
        if not draft.has_title():
            raise ValidationError("Contract title is required")

    def _new_id(self) -> str:
        record_id = self._id_factory()
        while record_id in self._issued_ids:
            record_id = self._id_factory()
        self._issued_ids.add(record_id)
        return record_id

    @track(operation="contract_create", include_args=False)
    async def create(self, draft: Draft) -> ContractRecord:
        """
        Commit a draft as a new record at the end of the collection.

        Raises:
            ValidationError: If the draft's title is blank
        """
        self._require_title(draft)

        record = ContractRecord(
            id=self._new_id(), date_added=self._clock(), **draft.field_values()
        )
        self._records.append(record)
        self._persist()

        log_event(
            "contract_created",
            {"record_id": record.id, "contract_count": len(self._records)},
        )
        return record

    @track(operation="contract_update", include_args=["record_id"])
    async def update(self, record_id: str, draft: Draft) -> ContractRecord:
        """
        Replace every editable field of a record, keeping its position.

        Raises:
            NotFoundError: If no record has this id
            ValidationError: If the draft's title is blank
        """
        index = self._index_of(record_id)
        self._require_title(draft)

        record = self._records[index].replaced_by(draft)
        self._records[index] = record
        self._persist()

        log_event(
            "contract_updated",
            {"record_id": record_id, "contract_count": len(self._records)},
        )
        return record

    @track(operation="contract_delete", include_args=["record_id"])
    async def delete(self, record_id: str) -> bool:
        """
        Remove a record. Unknown ids are ignored.

        Returns:
            True if a record was removed
        """
        try:
            index = self._index_of(record_id)
        except NotFoundError:
            return False

        del self._records[index]
        self._persist()

        log_event(
            "contract_deleted",
            {"record_id": record_id, "contract_count": len(self._records)},
        )
        return True

    @track(operation="contract_clear", include_args=False)
    async def clear(self) -> int:
        """Remove every record. Returns how many were removed."""
        removed = len(self._records)
        self._records = []
        self._persist()
        return removed

    # Persistence

    def _persist(self) -> None:
        """Queue a full snapshot for the background writer."""
        if self._writer is None or self._writer.done():
            self._writer = asyncio.get_running_loop().create_task(self._write_loop())
        self._write_queue.put_nowait(self.serialize())

    async def _write_loop(self) -> None:
        while True:
            payload = await self._write_queue.get()
            try:
                await self._write(payload)
            finally:
                self._write_queue.task_done()

    async def _write(self, payload: str) -> None:
        error: Optional[PersistenceError] = None
        try:
            if not await self.kv.write(self.key, payload):
                error = PersistenceError(self.key, "medium rejected the write")
        except Exception as e:
            error = PersistenceError(self.key, str(e))

        if error is None:
            log_event(
                "contracts_persisted",
                {"key": self.key, "size_bytes": len(payload)},
                level=logging.DEBUG,
            )
            return

        self.last_persistence_error = error
        self.persistence_failures += 1
        log_event(
            "persistence_failed",
            {"key": self.key, "error": error.reason},
            level=logging.ERROR,
        )

    async def flush(self) -> None:
        """Wait until every queued write has been attempted."""
        if self._writer is not None and not self._writer.done():
            await self._write_queue.join()

    async def close(self) -> None:
        """Flush pending writes and stop the writer."""
        await self.flush()
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None
