# app/db/cache.py

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class ReadThroughCache:
    """
    Small in-process read-through cache with a fixed TTL.

    Entries are (expiry, value) pairs keyed by string. A ttl of 0 or less
    turns caching off: every read goes to the loader. Writers must call
    invalidate(); nothing here watches the database.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        if not self.enabled:
            return loader()

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry[0] > self._clock():
                logger.debug("Cache hit for %s", key)
                return entry[1]
            generation = self._generation

        # Loader runs outside the lock
        logger.debug("Cache miss for %s", key)
        value = loader()

        with self._lock:
            # An invalidate() during the load means the value may already be stale
            if generation == self._generation:
                self._entries[key] = (self._clock() + self.ttl_seconds, value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            self._generation += 1
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
