"""
In-process TTL cache
====================

Thread-safe key/value cache with per-entry expiry. Used for values that
are expensive to fetch and safe to share across requests, such as the
identity provider's signing key set.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Union
from uuid import UUID

logger = logging.getLogger(__name__)

CACHE_DEFAULT_TTL = 600  # 10 minutes

CACHE_PREFIX_JWKS = "jwks"


class TTLCache:
    """In-memory cache where each entry expires `ttl` seconds after it was set."""

    def __init__(self, default_ttl: int = CACHE_DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, tuple] = {}  # key -> (value, expiry_time)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, expiry = entry
            if expiry is not None and self._clock() >= expiry:
                del self._entries[key]
                return None

            return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        expiry = (self._clock() + ttl) if ttl else None
        with self._lock:
            self._entries[key] = (value, expiry)


def build_cache_key(*parts: Union[str, int, UUID]) -> str:
    """Build cache key from parts."""
    return ":".join(str(part) for part in parts)
