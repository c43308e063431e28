"""Concrete implementations of the KeyValueStore interface.

`InMemoryKeyValueStore` lives for the process only. `DiskKeyValueStore` is
backed by `diskcache` and keeps entries across process restarts. Neither
applies a TTL: geographic-to-currency mappings do not go stale.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

import diskcache as dc

from agrohub.domain.interfaces.cache import KeyValueStore
from agrohub.domain.models.common import CacheKey

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".agrohub" / "cache"


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: CacheKey) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: CacheKey, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: CacheKey) -> None:
        self._data.pop(key, None)

    async def clear(self) -> int:
        count = len(self._data)
        self._data.clear()
        return count

    def __len__(self) -> int:
        return len(self._data)


class DiskKeyValueStore(KeyValueStore):
    """Persistent store on top of a diskcache.Cache directory."""

    def __init__(self, directory: Union[str, Path] = DEFAULT_CACHE_DIR):
        """Opens (or creates) the cache directory.

        Args:
            directory: Where diskcache keeps its SQLite index and files.
        """
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._cache = dc.Cache(str(self.directory), timeout=1)
        except OSError as e:
            logger.error(f"Failed to open disk cache at {self.directory}: {e}")
            raise
        logger.info(f"Initialized disk key-value store at: {self._cache.directory}")

    async def get(self, key: CacheKey) -> Optional[str]:
        value = self._cache.get(key, default=None)
        if value is None:
            return None
        if not isinstance(value, str):
            # Written by something else; hand back text so the caller's decoder can reject it
            return str(value)
        return value

    async def set(self, key: CacheKey, value: str) -> None:
        self._cache.set(key, value)
        logger.debug(f"Disk store PUT key: {key}")

    async def delete(self, key: CacheKey) -> None:
        self._cache.delete(key)
        logger.debug(f"Disk store DELETE key: {key}")

    async def clear(self) -> int:
        count = self._cache.clear()
        logger.info(f"Cleared disk key-value store. Removed {count} items.")
        return count

    def close(self) -> None:
        self._cache.close()
