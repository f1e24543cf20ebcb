"""
In-process TTL cache for proxied GET responses.
Entries are grouped by resource so that a write can drop everything it made stale.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .airtable_client import BackingResponse

# Setup logging
logger = logging.getLogger(__name__)


class ResponseCache:
    """
    Resource-scoped response cache.

    Args:
        clock: Time source in seconds, injectable for tests
        purge_interval: Seconds between sweeps of expired entries, run on write
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, purge_interval: int = 60):
        self._clock = clock
        self._lock = threading.Lock()
        self._purge_interval = purge_interval
        self._next_purge = 0.0
        # key -> (resource, expires_at, response)
        self._entries: Dict[str, Tuple[str, float, BackingResponse]] = {}

    @staticmethod
    def make_key(method: str, path: str, query_string: str = '') -> str:
        key = f"{method.upper()}:{path}"
        if query_string:
            key += f"?{query_string}"
        return key

    def get(self, key: str) -> Optional[BackingResponse]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            _, expires_at, response = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return response

    def set(self, key: str, resource: str, response: BackingResponse, ttl: int) -> None:
        now = self._clock()
        if now >= self._next_purge:
            self.purge_expired()
            self._next_purge = now + self._purge_interval
        with self._lock:
            self._entries[key] = (resource, now + ttl, response)

    def invalidate(self, resource: str) -> int:
        """Drop every entry cached for a resource; returns how many were removed."""
        with self._lock:
            stale = [key for key, entry in self._entries.items() if entry[0] == resource]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached response(s) for {resource}")
        return len(stale)

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now >= entry[1]]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
