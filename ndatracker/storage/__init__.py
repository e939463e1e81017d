"""
Storage layer for NDA Tracker.
"""

from .contract_store import DEFAULT_STORAGE_KEY, ContractRecordStore
from .key_value import InMemoryKeyValueStore, JSONFileKeyValueStore, KeyValueStore
from .redis_key_value import RedisKeyValueStore

__all__ = [
    "ContractRecordStore",
    "DEFAULT_STORAGE_KEY",
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "RedisKeyValueStore",
]
