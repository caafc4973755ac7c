"""Key-value stores backing the rate-limit counters."""

import logging
from typing import Dict, Optional, Protocol

from diskcache import Cache

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal string store used by the rate limiter."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store, mainly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class DiskStore:
    """Durable store on top of diskcache; survives process restarts and is
    shared by every process pointing at the same directory."""

    def __init__(self, directory: str):
        self.directory = directory
        self.cache = Cache(directory)
        logger.debug(f"Rate-limit store opened at {directory}")

    def get(self, key: str) -> Optional[str]:
        value = self.cache.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        self.cache.set(key, value)

    def close(self) -> None:
        self.cache.close()
