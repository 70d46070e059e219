"""Tests for the transport cache."""

import threading
from unittest.mock import Mock

import pytest

from pyremsync.cache import TransportCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTransportCache:
    """Test TransportCache functionality."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return TransportCache(ttl=60, max_size=3, timer=clock)

    def test_defaults(self):
        cache = TransportCache()
        assert cache.ttl == 60
        assert cache.max_size == 50

    def test_get_or_create_reuses_value(self, cache):
        factory = Mock(side_effect=lambda: object())
        first = cache.get_or_create("k", factory)
        second = cache.get_or_create("k", factory)
        assert first is second
        assert factory.call_count == 1

    def test_distinct_keys(self, cache):
        a = cache.get_or_create("a", object)
        b = cache.get_or_create("b", object)
        assert a is not b
        assert len(cache) == 2

    def test_entries_expire(self, cache, clock):
        first = cache.get_or_create("k", object)
        clock.now = 61
        second = cache.get_or_create("k", object)
        assert first is not second

    def test_entry_valid_before_ttl(self, cache, clock):
        first = cache.get_or_create("k", object)
        clock.now = 59
        assert cache.get_or_create("k", object) is first

    def test_len_ignores_expired(self, cache, clock):
        cache.get_or_create("k", object)
        clock.now = 120
        assert len(cache) == 0

    def test_capacity_evicts_least_recently_used(self, cache):
        cache.get_or_create("a", object)
        cache.get_or_create("b", object)
        cache.get_or_create("c", object)
        cache.get_or_create("a", object)  # touch a
        cache.get_or_create("d", object)

        assert len(cache) == 3
        assert "b" not in cache
        assert "a" in cache

    def test_invalidate(self, cache):
        first = cache.get_or_create("k", object)
        cache.invalidate("k")
        cache.invalidate("missing")
        assert cache.get_or_create("k", object) is not first

    def test_invalidate_all(self, cache):
        cache.get_or_create("a", object)
        cache.get_or_create("b", object)
        cache.invalidate_all()
        assert len(cache) == 0

    def test_factory_error_caches_nothing(self, cache):
        with pytest.raises(RuntimeError):
            cache.get_or_create("k", Mock(side_effect=RuntimeError("connect failed")))
        assert "k" not in cache

    def test_close_all(self, cache):
        transport = Mock()
        broken = Mock()
        broken.close.side_effect = OSError("already closed")
        cache.get_or_create("a", lambda: transport)
        cache.get_or_create("b", lambda: broken)

        cache.close_all()

        transport.close.assert_called_once()
        assert len(cache) == 0

    def test_close_all_closes_expired_entries(self, cache, clock):
        first = cache.get_or_create("k", Mock)
        clock.now = 61
        second = cache.get_or_create("k", Mock)
        first.close.assert_not_called()

        cache.close_all()

        first.close.assert_called_once()
        second.close.assert_called_once()

    def test_close_all_closes_entries_expired_without_lookup(self, cache, clock):
        transport = cache.get_or_create("k", Mock)
        clock.now = 120

        cache.close_all()

        transport.close.assert_called_once()

    def test_close_all_closes_evicted_entries(self, cache):
        created = [cache.get_or_create(key, Mock) for key in "abcd"]
        assert "a" not in cache
        created[0].close.assert_not_called()

        cache.close_all()

        for transport in created:
            transport.close.assert_called_once()

    def test_close_all_closes_invalidated_entries(self, cache):
        one = cache.get_or_create("one", Mock)
        two = cache.get_or_create("two", Mock)
        cache.invalidate("one")
        cache.invalidate_all()

        cache.close_all()

        one.close.assert_called_once()
        two.close.assert_called_once()

    def test_close_all_twice_closes_once(self, cache):
        transport = cache.get_or_create("k", Mock)
        cache.close_all()
        cache.close_all()
        transport.close.assert_called_once()

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            TransportCache(ttl=0)
        with pytest.raises(ValueError):
            TransportCache(max_size=0)

    def test_concurrent_get_or_create(self):
        cache = TransportCache()
        factory = Mock(side_effect=lambda: object())
        results = []

        def worker():
            results.append(cache.get_or_create("shared", factory))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert factory.call_count == 1
        assert all(r is results[0] for r in results)
