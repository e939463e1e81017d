"""
Custom exceptions for NDA Tracker.
"""


class NDATrackerError(Exception):
    """Base exception for NDA Tracker errors."""

    pass


class ValidationError(NDATrackerError):
    """Raised when a record or draft fails validation (e.g. blank title)."""

    pass


class NotFoundError(NDATrackerError):
    """Raised when a targeted operation names an unknown record id."""

    def __init__(self, record_id: str):
        super().__init__(f"Contract not found: {record_id}")
        self.record_id = record_id


class ExtractionError(NDATrackerError):
    """Raised when an uploaded file cannot be read or extracted at all."""

    pass


class ExtractionSupersededError(NDATrackerError):
    """Raised when a newer extraction replaced the one being awaited."""

    def __init__(self, generation: int):
        super().__init__(f"Extraction {generation} was superseded")
        self.generation = generation


class StorageError(NDATrackerError):
    """Raised when a key-value medium cannot be reached or configured."""

    pass


class PersistenceError(StorageError):
    """Raised when writing the contract collection to storage fails."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Failed to persist '{key}': {reason}")
        self.key = key
        self.reason = reason
