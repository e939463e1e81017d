"""
Key-value storage media for the contract collection.

The tracker only needs two capabilities from durable storage: read a string
under a key and write a string under a key. Any medium that offers them can
back the ContractRecordStore, so the rest of the system never knows whether
data lives in memory, in a JSON file or in Redis.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import aiofiles

from ..utils.logging import log_event


class KeyValueStore(ABC):
    """
    Abstract base class for key-value media.

    ``write`` reports failure by returning False or raising; callers treat
    both the same way.
    """

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    async def write(self, key: str, value: str) -> bool:
        """
        Replace the value stored under a key.

        Args:
            key: Storage key
            value: Complete serialized value

        Returns:
            True if the value was stored
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the medium."""
        return None


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed medium. Durable only for the life of the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def write(self, key: str, value: str) -> bool:
        self.data[key] = value
        return True


class JSONFileKeyValueStore(KeyValueStore):
    """
    JSON file-based medium.

    File structure:
    {
        "ndaContracts": "[{...}, {...}]",
        ...
    }

    Writes go through a temporary file and an atomic rename so a crash in
    the middle of a write never leaves a truncated file behind.
    """

    def __init__(self, storage_path: Path):
        """
        Args:
            storage_path: Path to the JSON file for persistence
        """
        self.storage_path = Path(storage_path)
        self._lock = asyncio.Lock()

    async def _load(self) -> Dict[str, str]:
        if not self.storage_path.exists():
            return {}

        try:
            async with aiofiles.open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            log_event(
                "key_value_file_unreadable",
                {"path": str(self.storage_path), "error": str(e)},
                level=logging.WARNING,
            )
            return {}

        if not isinstance(data, dict):
            log_event(
                "key_value_file_unreadable",
                {"path": str(self.storage_path), "error": "top level is not an object"},
                level=logging.WARNING,
            )
            return {}

        return data

    async def read(self, key: str) -> Optional[str]:
        async with self._lock:
            value = (await self._load()).get(key)
        return value if isinstance(value, str) else None

    async def write(self, key: str, value: str) -> bool:
        async with self._lock:
            data = await self._load()
            data[key] = value

            temp_path = self.storage_path.with_suffix(".tmp")
            try:
                self.storage_path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                    await f.write(json.dumps(data, indent=2))
                temp_path.replace(self.storage_path)
            except OSError as e:
                if temp_path.exists():
                    temp_path.unlink()

                log_event(
                    "key_value_file_write_failed",
                    {"path": str(self.storage_path), "key": key, "error": str(e)},
                    level=logging.ERROR,
                )
                return False

        return True
