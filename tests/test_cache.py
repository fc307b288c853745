from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from data_providers.base import Interval, PriceSeries, ProviderError
from stock_service.cache import MemoizingCache


def _series(symbol: str = "AAPL", price: float = 100.5) -> PriceSeries:
    return PriceSeries(symbol=symbol, interval=Interval.DAILY, prices={"2024-01-02": price})


class CountingCompute:
    def __init__(self, value: PriceSeries | None = None, error: Exception | None = None) -> None:
        self.value = value or _series()
        self.error = error
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> PriceSeries:
        with self._lock:
            self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value


def test_second_lookup_is_served_from_cache() -> None:
    cache = MemoizingCache()
    compute = CountingCompute()

    first = cache.get_or_compute("DAILY_AAPL", compute)
    second = cache.get_or_compute("DAILY_AAPL", compute)

    assert compute.calls == 1
    assert first is second
    assert cache.size() == 1
    assert "DAILY_AAPL" in cache


def test_concurrent_callers_share_one_stored_value() -> None:
    cache = MemoizingCache()
    workers = 8
    barrier = threading.Barrier(workers)
    calls: list[int] = []
    calls_lock = threading.Lock()

    def compute() -> PriceSeries:
        with calls_lock:
            calls.append(1)
        time.sleep(0.05)
        return _series(price=float(len(calls)))

    def worker() -> PriceSeries:
        barrier.wait()
        return cache.get_or_compute("DAILY_AAPL", compute)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: worker(), range(workers)))

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
    assert cache.size() == 1
    assert cache.keys() == ["DAILY_AAPL"]


def test_caller_arriving_mid_flight_waits_for_leader() -> None:
    cache = MemoizingCache()
    release = threading.Event()
    compute = CountingCompute()

    def slow_compute() -> PriceSeries:
        release.wait(timeout=5)
        return compute()

    results: dict[str, PriceSeries] = {}
    leader = threading.Thread(target=lambda: results.setdefault("leader", cache.get_or_compute("K", slow_compute)))
    follower = threading.Thread(target=lambda: results.setdefault("follower", cache.get_or_compute("K", compute)))

    leader.start()
    deadline = time.monotonic() + 5
    while cache.stats().in_flight == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    follower.start()
    time.sleep(0.1)
    release.set()
    leader.join(timeout=5)
    follower.join(timeout=5)

    assert compute.calls == 1
    assert results["leader"] is results["follower"]


def test_invalidate_forces_recomputation() -> None:
    cache = MemoizingCache()
    compute = CountingCompute()
    cache.get_or_compute("WEEKLY_MSFT", compute)

    assert cache.invalidate("WEEKLY_MSFT") is True
    assert cache.size() == 0

    cache.get_or_compute("WEEKLY_MSFT", compute)
    assert compute.calls == 2


def test_invalidate_unknown_key_is_noop() -> None:
    cache = MemoizingCache()
    cache.get_or_compute("DAILY_AAPL", CountingCompute())

    assert cache.invalidate("DAILY_MSFT") is False
    assert cache.size() == 1


def test_clear_empties_every_entry() -> None:
    cache = MemoizingCache()
    first = CountingCompute(_series("AAPL"))
    second = CountingCompute(_series("MSFT"))
    cache.get_or_compute("DAILY_AAPL", first)
    cache.get_or_compute("DAILY_MSFT", second)

    cache.clear()

    assert cache.size() == 0
    assert len(cache) == 0
    cache.get_or_compute("DAILY_AAPL", first)
    cache.get_or_compute("DAILY_MSFT", second)
    assert first.calls == 2
    assert second.calls == 2


def test_failure_is_not_cached() -> None:
    cache = MemoizingCache()
    failing = CountingCompute(error=ProviderError("upstream down"))

    with pytest.raises(ProviderError, match="upstream down"):
        cache.get_or_compute("DAILY_AAPL", failing)

    assert cache.size() == 0
    assert "DAILY_AAPL" not in cache

    recovery = CountingCompute()
    result = cache.get_or_compute("DAILY_AAPL", recovery)

    assert recovery.calls == 1
    assert result is recovery.value
    assert cache.stats().failures == 1
    assert cache.stats().in_flight == 0


def test_concurrent_failure_stores_nothing() -> None:
    cache = MemoizingCache()
    workers = 4
    barrier = threading.Barrier(workers)
    failing = CountingCompute(error=ProviderError("bad gateway"))

    def slow_failure() -> PriceSeries:
        time.sleep(0.05)
        return failing()

    def worker() -> str:
        barrier.wait()
        try:
            cache.get_or_compute("MONTHLY_IBM", slow_failure)
        except ProviderError as exc:
            return str(exc)
        return "no error"

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: worker(), range(workers)))

    assert outcomes == ["bad gateway"] * workers
    assert cache.size() == 0
    assert cache.stats().in_flight == 0


def test_clear_during_flight_allows_repopulation() -> None:
    cache = MemoizingCache()
    release = threading.Event()

    def slow_compute() -> PriceSeries:
        release.wait(timeout=5)
        return _series()

    thread = threading.Thread(target=lambda: cache.get_or_compute("DAILY_AAPL", slow_compute))
    thread.start()
    deadline = time.monotonic() + 5
    while cache.stats().in_flight == 0 and time.monotonic() < deadline:
        time.sleep(0.01)

    cache.clear()
    release.set()
    thread.join(timeout=5)

    assert cache.keys() == ["DAILY_AAPL"]


def test_stats_track_hits_and_misses() -> None:
    cache = MemoizingCache()
    compute = CountingCompute()

    cache.get_or_compute("DAILY_AAPL", compute)
    cache.get_or_compute("DAILY_AAPL", compute)
    cache.get_or_compute("DAILY_AAPL", compute)

    stats = cache.stats()
    assert stats.entries == 1
    assert stats.misses == 1
    assert stats.hits == 2
    assert stats.failures == 0


def test_invalidate_during_flight_leaves_computation_untouched() -> None:
    cache = MemoizingCache()
    release = threading.Event()
    compute = CountingCompute()

    def slow_compute() -> PriceSeries:
        release.wait(timeout=5)
        return compute()

    results: dict[str, PriceSeries] = {}
    leader = threading.Thread(target=lambda: results.setdefault("leader", cache.get_or_compute("K", slow_compute)))
    follower = threading.Thread(target=lambda: results.setdefault("follower", cache.get_or_compute("K", compute)))

    leader.start()
    deadline = time.monotonic() + 5
    while cache.stats().in_flight == 0 and time.monotonic() < deadline:
        time.sleep(0.01)
    follower.start()
    time.sleep(0.1)

    assert cache.invalidate("K") is False
    assert cache.stats().in_flight == 1

    release.set()
    leader.join(timeout=5)
    follower.join(timeout=5)

    assert compute.calls == 1
    assert "K" in cache
    assert results["follower"] is results["leader"]
    assert cache.get_or_compute("K", compute) is results["leader"]
