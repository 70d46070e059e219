"""Time- and size-bounded cache of connected transports."""

import logging
import threading
import time
from typing import Any, Callable, Generic, TypeVar

from cachetools import TTLCache

from .utils import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _RetiringTTLCache(TTLCache):
    """TTLCache that remembers every value it expires or evicts."""

    def __init__(self, maxsize: int, ttl: float, timer: Callable[[], float]):
        super().__init__(maxsize=maxsize, ttl=ttl, timer=timer)
        self.retired: list[Any] = []

    def expire(self, time=None):
        expired = super().expire(time)
        self.retired.extend(value for _, value in expired)
        return expired

    def popitem(self):
        key, value = super().popitem()
        self.retired.append(value)
        return key, value


class TransportCache(Generic[T]):
    """Get-or-create cache keyed by connection identity.

    Entries expire ``ttl`` seconds after insertion; once ``max_size`` entries
    are held the least recently used one is evicted. Expired, evicted and
    invalidated values are not closed straight away, since a caller may still
    be using them; they are kept aside and closed by :meth:`close_all`
    together with the live entries. All methods are safe to call from several
    threads.

    Examples:
        >>> cache = TransportCache(ttl=60, max_size=50)
        >>> transport = cache.get_or_create(
        ...     remote.cache_key, lambda: create_transport(remote)
        ... )
    """

    def __init__(
        self,
        ttl: float = DEFAULT_CACHE_TTL,
        max_size: int = DEFAULT_CACHE_MAX_SIZE,
        timer: Callable[[], float] = time.monotonic,
    ):
        """Initialize cache.

        Args:
            ttl: Seconds an entry stays valid after insertion
            max_size: Maximum number of entries
            timer: Clock used for expiry
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.ttl = ttl
        self.max_size = max_size
        self._entries = _RetiringTTLCache(maxsize=max_size, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    def get_or_create(self, key: str, factory: Callable[[], T]) -> T:
        """Return the cached value for ``key``, creating it if absent or expired.

        The factory runs under the cache lock, so concurrent callers asking
        for the same key get the same value. A factory exception propagates
        and nothing is cached.
        """
        with self._lock:
            self._entries.expire()
            value = self._entries.get(key)
            if value is not None:
                return value
            logger.debug(f"Transport cache miss: {key}")
            value = factory()
            self._entries[key] = value
            return value

    def invalidate(self, key: str) -> None:
        """Drop a single entry."""
        with self._lock:
            value = self._entries.pop(key, None)
            if value is not None:
                self._entries.retired.append(value)

    def invalidate_all(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.expire()
            self._entries.retired.extend(self._entries.values())
            self._entries.clear()
        logger.debug("Transport cache cleared")

    def close_all(self) -> None:
        """Close every live and retired value that has a ``close`` method."""
        with self._lock:
            self._entries.expire()
            values = self._entries.retired + list(self._entries.values())
            self._entries.clear()
            self._entries.retired = []

        closed: set[int] = set()
        for value in values:
            if id(value) in closed:
                continue
            closed.add(id(value))
            close = getattr(value, "close", None)
            if callable(close):
                try:
                    close()
                except Exception as e:
                    logger.debug(f"Error closing cached transport {value!r}: {e}")

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
