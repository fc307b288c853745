"""In-process memoizing cache for price series lookups."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List

from data_providers.base import PriceSeries

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    entries: int
    in_flight: int
    hits: int
    misses: int
    failures: int


class MemoizingCache:
    """Thread-safe, single-flight memoization keyed by an opaque string.

    The first caller to miss on a key computes the value outside the lock while
    concurrent callers for the same key wait for that result. Entries live until
    :meth:`invalidate` or :meth:`clear` removes them; failures are never cached.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, PriceSeries] = {}
        self._in_flight: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._failures = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_or_compute(self, key: str, compute: Callable[[], PriceSeries]) -> PriceSeries:
        """Return the value stored for *key*, running *compute* on a miss.

        Callers that arrive while another thread is computing the same key share
        that computation's outcome, including its exception.
        """
        with self._lock:
            if key in self._entries:
                self._hits += 1
                LOGGER.debug("Cache hit for %s", key)
                return self._entries[key]

            flight = self._in_flight.get(key)
            leader = flight is None
            if leader:
                self._misses += 1
                flight = Future()
                self._in_flight[key] = flight

        if not leader:
            LOGGER.debug("Waiting for in-flight computation of %s", key)
            return flight.result()

        LOGGER.debug("Cache miss for %s; computing value", key)
        try:
            value = compute()
        except BaseException as exc:
            with self._lock:
                self._failures += 1
                self._in_flight.pop(key, None)
            LOGGER.debug("Computation for %s failed: %s", key, exc)
            flight.set_exception(exc)
            raise

        with self._lock:
            stored = self._entries.setdefault(key, value)
            self._in_flight.pop(key, None)
        flight.set_result(stored)
        return stored

    def invalidate(self, key: str) -> bool:
        """Drop the entry for *key*; return whether one was present."""
        LOGGER.info("Invalidating cache entry for %s", key)
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        LOGGER.warning("Clearing all cache entries")
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._entries),
                in_flight=len(self._in_flight),
                hits=self._hits,
                misses=self._misses,
                failures=self._failures,
            )

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


__all__ = ["CacheStats", "MemoizingCache"]
