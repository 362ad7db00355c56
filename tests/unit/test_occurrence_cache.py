"""Tests for the (country, year) occurrence cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest

from caribbean_almanac.occurrence_cache import OccurrenceCache

pytestmark = pytest.mark.unit


class TestOccurrenceCache:
    """Tests for OccurrenceCache."""

    def test_miss_then_hit(self) -> None:
        cache = OccurrenceCache(max_size=4)
        factory = Mock(return_value="result")

        assert cache.get_or_compute(("JM", 2026), factory) == "result"
        assert cache.get_or_compute(("JM", 2026), factory) == "result"

        factory.assert_called_once()
        assert cache.stats["hits"] == 1
        assert cache.stats["misses"] == 1

    def test_fifo_eviction(self) -> None:
        cache = OccurrenceCache(max_size=2)
        for year in (2024, 2025, 2026):
            cache.get_or_compute(("JM", year), lambda year=year: year)

        assert len(cache) == 2
        assert ("JM", 2024) not in cache
        assert ("JM", 2026) in cache
        assert cache.stats["evictions"] == 1

    def test_invalidate_all(self) -> None:
        cache = OccurrenceCache()
        cache.get_or_compute(("TT", 2024), lambda: "x")
        cache.invalidate_all()

        assert len(cache) == 0
        assert cache.stats["invalidations"] == 1

    def test_get_stats_hit_rate(self) -> None:
        cache = OccurrenceCache()
        assert cache.get_stats()["hit_rate"] == 0.0

        cache.get_or_compute("k", lambda: 1)
        cache.get_or_compute("k", lambda: 1)
        stats = cache.get_stats()
        assert stats["hit_rate"] == 0.5
        assert stats["size"] == 1

    def test_factory_error_is_not_cached(self) -> None:
        cache = OccurrenceCache()
        with pytest.raises(RuntimeError):
            cache.get_or_compute("k", Mock(side_effect=RuntimeError("boom")))
        assert "k" not in cache
        assert cache.get_or_compute("k", lambda: "ok") == "ok"

    def test_rejects_non_positive_size(self) -> None:
        with pytest.raises(ValueError):
            OccurrenceCache(max_size=0)

    def test_concurrent_callers_compute_each_key_once(self) -> None:
        cache = OccurrenceCache()
        calls = []
        calls_lock = threading.Lock()

        def factory() -> str:
            with calls_lock:
                calls.append(1)
            time.sleep(0.01)
            return "value"

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.get_or_compute(("BS", 2025), factory), range(32)))

        assert results == ["value"] * 32
        assert len(calls) == 1
