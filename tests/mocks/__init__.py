from tests.mocks.extraction import (
    GatedExtractionBackend,
    UnreadableFileBackend,
    wait_until,
)
from tests.mocks.storage import (
    FailingKeyValueStore,
    RecordingKeyValueStore,
    UnreadableKeyValueStore,
)

__all__ = [
    "FailingKeyValueStore",
    "GatedExtractionBackend",
    "RecordingKeyValueStore",
    "UnreadableFileBackend",
    "UnreadableKeyValueStore",
    "wait_until",
]
