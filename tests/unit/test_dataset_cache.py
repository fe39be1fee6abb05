"""
Unit tests -- dataset caching layer.
"""
import asyncio

import pytest

from conftest import recent_cells
from src.core.config import Settings
from src.core.errors import DataFetchError
from src.sheets import sources
from src.sheets.cache import DatasetCache, get_dataset_cache


def _get(cache):
    return asyncio.run(cache.get_dataset())


def test_first_request_fetches(make_cache, today):
    cache, source = make_cache(recent_cells(today, days=3))
    rows = _get(cache)
    assert len(rows) == 3
    assert source.calls == 1
    assert cache.state() == "active"


def test_fresh_snapshot_is_reused(make_cache, clock, today):
    cache, source = make_cache(recent_cells(today))
    first = _get(cache)
    clock.advance(3599)
    assert _get(cache) is first
    assert source.calls == 1


def test_expired_snapshot_refetches(make_cache, clock, today):
    cache, source = make_cache(recent_cells(today), ttl=60)
    _get(cache)
    clock.advance(60)
    assert not cache.is_fresh()
    _get(cache)
    assert source.calls == 2


def test_empty_sheet_is_never_fresh(make_cache):
    cache, source = make_cache([])
    assert _get(cache) == ()
    assert _get(cache) == ()
    assert source.calls == 2


def test_fetch_failure_propagates_and_keeps_old_rows(make_cache, clock, today):
    cache, source = make_cache(recent_cells(today), ttl=60)
    rows = _get(cache)

    clock.advance(120)
    source.error = DataFetchError("quota exceeded")
    with pytest.raises(DataFetchError, match="quota exceeded"):
        _get(cache)
    assert cache.state() == "active"
    assert cache.stats()["rows"] == len(rows)

    source.error = None
    assert len(_get(cache)) == len(rows)
    assert cache.stats()["fetches"] == 2


def test_state_empty_before_first_fetch(make_cache):
    cache, _ = make_cache()
    assert cache.state() == "empty"
    assert not cache.is_fresh()


def test_invalidate_forces_refetch(make_cache, today):
    cache, source = make_cache(recent_cells(today, days=4))
    _get(cache)
    assert cache.invalidate() == 4
    assert cache.state() == "empty"
    assert cache.invalidate() == 0
    _get(cache)
    assert source.calls == 2


def test_stats(make_cache, clock, today):
    cache, _ = make_cache(recent_cells(today, days=5), ttl=600)
    _get(cache)
    clock.advance(12.34)
    _get(cache)
    _get(cache)
    stats = cache.stats()
    assert stats["state"] == "active"
    assert stats["rows"] == 5
    assert stats["age_seconds"] == 12.3
    assert stats["ttl_seconds"] == 600
    assert (stats["hits"], stats["misses"], stats["fetches"]) == (2, 1, 1)
    assert stats["hit_rate"] == 0.667


def test_stats_before_any_request(make_cache):
    cache, _ = make_cache()
    stats = cache.stats()
    assert stats["age_seconds"] is None
    assert stats["hit_rate"] == 0.0


def test_concurrent_readers_see_whole_snapshots(make_cache, today):
    cache, _ = make_cache(recent_cells(today, days=6))

    async def read_many():
        return await asyncio.gather(*(cache.get_dataset() for _ in range(5)))

    for rows in asyncio.run(read_many()):
        assert len(rows) == 6


def test_global_cache_singleton():
    assert get_dataset_cache() is get_dataset_cache()
    assert isinstance(get_dataset_cache(), DatasetCache)


def test_unknown_data_source_is_fetch_error(monkeypatch):
    monkeypatch.setattr(sources, "get_settings", lambda: Settings(data_source="excel"))
    cache = DatasetCache(ttl=60)
    with pytest.raises(DataFetchError, match="Unknown data_source"):
        _get(cache)
    assert cache.state() == "empty"
