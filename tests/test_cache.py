from __future__ import annotations

import threading
import time

import pytest

from mathtiles.core.cache import RenderCache
from mathtiles.core.models import CropInfo, TilePayload


def _payload(marker: int) -> TilePayload:
    return TilePayload(
        tiles=(bytes((marker, 0, 0, 255)),),
        width=1,
        height=1,
        channels=4,
        tile_height=8,
        crop=CropInfo(0, 0, 1, 1, 1, 1),
    )


def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.005)


def test_get_or_compute_runs_once_per_fingerprint() -> None:
    cache = RenderCache()
    calls: list[str] = []

    def compute() -> TilePayload:
        calls.append("run")
        return _payload(1)

    first, first_hit = cache.get_or_compute("abc", compute)
    second, second_hit = cache.get_or_compute("abc", compute)

    assert calls == ["run"]
    assert (first_hit, second_hit) == (False, True)
    assert second is first
    assert "abc" in cache
    assert cache.stats.hits == 1
    assert cache.stats.misses == 1


def test_unbounded_by_default() -> None:
    cache = RenderCache()
    for index in range(50):
        cache.put(f"key-{index}", _payload(index))

    assert len(cache) == 50
    assert cache.stats.evictions == 0


def test_capacity_evicts_least_recently_used() -> None:
    cache = RenderCache(capacity=2)
    cache.put("a", _payload(1))
    cache.put("b", _payload(2))
    assert cache.get("a") is not None

    cache.put("c", _payload(3))

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert cache.stats.evictions == 1


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError, match="capacity"):
        RenderCache(capacity=0)


def test_failed_compute_is_not_cached() -> None:
    cache = RenderCache()

    def explode() -> TilePayload:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        cache.get_or_compute("abc", explode)

    assert "abc" not in cache
    payload, hit = cache.get_or_compute("abc", lambda: _payload(2))
    assert hit is False
    assert payload.tiles[0][0] == 2


def test_concurrent_requests_share_one_computation() -> None:
    cache = RenderCache()
    release = threading.Event()
    calls: list[int] = []
    results: list[tuple[TilePayload, bool]] = []

    def slow() -> TilePayload:
        calls.append(1)
        release.wait(5)
        return _payload(7)

    def worker() -> None:
        results.append(cache.get_or_compute("shared", slow))

    owner = threading.Thread(target=worker)
    owner.start()
    _wait_for(lambda: calls)
    waiter = threading.Thread(target=worker)
    waiter.start()
    _wait_for(lambda: cache.stats.coalesced == 1)
    release.set()
    owner.join(5)
    waiter.join(5)

    assert calls == [1]
    assert len(results) == 2
    assert results[0][0] is results[1][0]
    assert sorted(hit for _, hit in results) == [False, True]
    assert cache.stats.as_dict() == {"hits": 0, "misses": 1, "coalesced": 1, "evictions": 0}


def test_waiters_receive_the_owner_failure() -> None:
    cache = RenderCache()
    release = threading.Event()
    started = threading.Event()
    errors: list[BaseException] = []

    def failing() -> TilePayload:
        started.set()
        release.wait(5)
        raise ValueError("bad markup")

    def worker() -> None:
        try:
            cache.get_or_compute("shared", failing)
        except ValueError as exc:
            errors.append(exc)

    owner = threading.Thread(target=worker)
    owner.start()
    started.wait(5)
    waiter = threading.Thread(target=worker)
    waiter.start()
    _wait_for(lambda: cache.stats.coalesced == 1)
    release.set()
    owner.join(5)
    waiter.join(5)

    assert [str(exc) for exc in errors] == ["bad markup", "bad markup"]
    assert len(cache) == 0


def test_clear_drops_entries() -> None:
    cache = RenderCache()
    cache.put("a", _payload(1))

    cache.clear()

    assert len(cache) == 0
    assert cache.get("a") is None
