"""Interface for the persistent key-value store.

A string-keyed, string-valued store that outlives the process, used by the
location resolver to remember geo-bucketed results.
"""

import abc
from typing import Optional

# Import relevant domain models
from ..models.common import CacheKey


class KeyValueStore(abc.ABC):
    """Abstract Base Class for string key-value storage."""

    @abc.abstractmethod
    async def get(self, key: CacheKey) -> Optional[str]:
        """Returns the stored string, or None if the key is absent."""
        pass

    @abc.abstractmethod
    async def set(self, key: CacheKey, value: str) -> None:
        """Stores a string under `key` with no expiry."""
        pass

    @abc.abstractmethod
    async def delete(self, key: CacheKey) -> None:
        """Removes `key`. Missing keys are ignored."""
        pass

    @abc.abstractmethod
    async def clear(self) -> int:
        """Removes every entry and returns how many were removed."""
        pass
