import time
import logging
from typing import Dict, Optional, Tuple

from storefront.storage.base import StorageInterface

logger = logging.getLogger(__name__)


class MemoryStorage(StorageInterface):
    """Process-local key/value store with optional expiry, used for development and tests."""

    def __init__(self, clock=time.monotonic):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            logger.debug(f"Memory storage: key {key} expired")
            del self._data[key]
            return None
        return value

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl else None
        self._data[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def ping(self) -> bool:
        return True

    def clear(self):
        self._data.clear()
