"""In-process cache of rendered tile payloads keyed by parameter fingerprints.

The cache never expires entries on its own: without a ``capacity`` it grows for
the lifetime of the process. A positive ``capacity`` switches on
least-recently-used eviction.

Concurrent requests for the same fingerprint are coalesced. The first caller
of :meth:`RenderCache.get_or_compute` runs the computation; later callers block
on a shared future and receive the same payload (or the same exception).
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
import logging
from threading import Lock

from .models import TilePayload


_log = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheStats:
    """Counters describing cache effectiveness."""

    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    evictions: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "evictions": self.evictions,
        }


class RenderCache:
    """Thread-safe fingerprint to payload mapping with in-flight coordination."""

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.stats = CacheStats()
        self._entries: OrderedDict[str, TilePayload] = OrderedDict()
        self._inflight: dict[str, Future[TilePayload]] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries

    def get(self, fingerprint: str) -> TilePayload | None:
        """Return the cached payload or ``None``."""
        with self._lock:
            return self._lookup(fingerprint)

    def put(self, fingerprint: str, payload: TilePayload) -> None:
        """Store ``payload``; an existing entry for the fingerprint is replaced."""
        with self._lock:
            self._store(fingerprint, payload)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_or_compute(
        self,
        fingerprint: str,
        compute: Callable[[], TilePayload],
    ) -> tuple[TilePayload, bool]:
        """Return ``(payload, hit)``, running ``compute`` at most once per fingerprint.

        ``hit`` is True when the payload came from the cache or from a
        computation started by another caller. Each call bumps exactly one of
        ``hits``, ``misses`` or ``coalesced``.
        """
        with self._lock:
            pending = self._inflight.get(fingerprint)
            if pending is not None:
                self.stats.coalesced += 1
                owner = False
            else:
                cached = self._lookup(fingerprint)
                if cached is not None:
                    return cached, True
                future: Future[TilePayload] = Future()
                self._inflight[fingerprint] = future
                owner = True

        if not owner:
            _log.debug("Waiting for in-flight render %s", fingerprint[:12])
            return pending.result(), True

        try:
            payload = compute()
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(fingerprint, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._store(fingerprint, payload)
            self._inflight.pop(fingerprint, None)
        future.set_result(payload)
        return payload, False

    def _lookup(self, fingerprint: str) -> TilePayload | None:
        payload = self._entries.get(fingerprint)
        if payload is None:
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        self._entries.move_to_end(fingerprint)
        return payload

    def _store(self, fingerprint: str, payload: TilePayload) -> None:
        self._entries[fingerprint] = payload
        self._entries.move_to_end(fingerprint)
        if self.capacity is None:
            return
        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            self.stats.evictions += 1
            _log.debug("Evicted cached render %s", evicted[:12])


__all__ = ["CacheStats", "RenderCache"]
