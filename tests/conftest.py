from datetime import date

import pytest
import pytest_asyncio

from ndatracker.extraction import ExtractionPipeline, PlaceholderExtractionBackend
from ndatracker.session import EditSession
from ndatracker.storage import ContractRecordStore, InMemoryKeyValueStore
from tests.factories import FIXED_ADDED_AT
from tests.mocks import GatedExtractionBackend

TODAY = date(2024, 1, 5)


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest_asyncio.fixture
async def store(kv: InMemoryKeyValueStore):
    store = await ContractRecordStore.open(kv, clock=lambda: FIXED_ADDED_AT)
    yield store
    await store.close()


@pytest.fixture
def placeholder_backend() -> PlaceholderExtractionBackend:
    return PlaceholderExtractionBackend(latency_seconds=0, clock=lambda: TODAY)


@pytest.fixture
def gated_backend() -> GatedExtractionBackend:
    return GatedExtractionBackend()


@pytest.fixture
def session(
    store: ContractRecordStore, placeholder_backend: PlaceholderExtractionBackend
) -> EditSession:
    return EditSession(store, ExtractionPipeline(placeholder_backend))


@pytest.fixture
def gated_session(
    store: ContractRecordStore, gated_backend: GatedExtractionBackend
) -> EditSession:
    return EditSession(store, ExtractionPipeline(gated_backend))
