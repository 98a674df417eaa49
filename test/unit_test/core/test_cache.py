"""Unit tests for the TTL cache and cached_fetch."""

import asyncio

import pytest

from orgdesk.core.cache import CACHE_EXPIRY, TTLStorage, cached_fetch


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(clock) -> TTLStorage:
    return TTLStorage(clock=clock)


class TestTTLStorage:
    def test_expiry_constants(self):
        assert CACHE_EXPIRY == {"SHORT": 60, "MEDIUM": 300, "LONG": 3600, "DAY": 86400}

    def test_get_before_and_after_expiry(self, storage, clock):
        storage.set("conversations", ["c-1"], ttl_seconds=60)

        clock.advance(59)
        assert storage.get("conversations") == ["c-1"]

        clock.advance(1)
        assert storage.get("conversations") is None
        assert storage.size() == 0

    def test_get_returns_default_for_missing_key(self, storage):
        assert storage.get("missing", default="fallback") == "fallback"
        assert storage.has("missing") is False

    def test_peek_does_not_evict(self, storage, clock):
        storage.set("k", 1, ttl_seconds=10)
        clock.advance(20)

        assert storage.peek("k") == (1, False)
        assert storage.size() == 1
        assert storage.peek("nothing") == (None, False)

    def test_falsy_values_are_cached(self, storage):
        storage.set("empty", [])

        assert storage.has("empty") is True

    def test_remove_prefix(self, storage):
        storage.set("messages_c-1", [1])
        storage.set("messages_c-2", [2])
        storage.set("conversations", [])

        assert storage.remove_prefix("messages_") == 2
        assert storage.size() == 1
        storage.remove("conversations")
        storage.remove("conversations")
        assert storage.size() == 0

    def test_cleanup_drops_only_expired(self, storage, clock):
        storage.set("short", 1, ttl_seconds=CACHE_EXPIRY["SHORT"])
        storage.set("long", 2, ttl_seconds=CACHE_EXPIRY["LONG"])
        clock.advance(120)

        assert storage.cleanup() == 1
        assert storage.get("long") == 2
        assert storage.cleanup() == 0

    def test_debug_dump(self, storage, clock):
        storage.set("a", "x", ttl_seconds=30)
        storage.set("b", "y", ttl_seconds=5)
        clock.advance(10)

        dump = storage.debug_dump()

        assert dump["a"] == {"value": "x", "expires_in": 20.0, "expired": False}
        assert dump["b"]["expired"] is True
        assert storage.size() == 2

    def test_clear(self, storage):
        storage.set("a", 1)
        storage.clear()

        assert storage.size() == 0


class TestCachedFetch:
    async def test_loads_once_while_fresh(self, storage):
        calls = []

        async def loader():
            calls.append(1)
            return "value"

        assert await cached_fetch(storage, "k", loader) == "value"
        assert await cached_fetch(storage, "k", loader) == "value"
        assert len(calls) == 1

    async def test_reloads_after_expiry(self, storage, clock):
        values = iter(["old", "new"])

        async def loader():
            return next(values)

        await cached_fetch(storage, "k", loader, ttl_seconds=10)
        clock.advance(11)

        assert await cached_fetch(storage, "k", loader, ttl_seconds=10) == "new"

    async def test_concurrent_callers_share_one_load(self, storage):
        calls = []
        release = asyncio.Event()

        async def loader():
            calls.append(1)
            await release.wait()
            return 42

        first = asyncio.create_task(cached_fetch(storage, "k", loader))
        second = asyncio.create_task(cached_fetch(storage, "k", loader))
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(first, second) == [42, 42]
        assert len(calls) == 1

    async def test_stale_value_served_when_load_fails(self, storage, clock):
        storage.set("k", "stale", ttl_seconds=1)
        clock.advance(5)

        async def failing():
            raise RuntimeError("backend down")

        assert await cached_fetch(storage, "k", failing) == "stale"

    async def test_failure_without_stale_value_propagates(self, storage):
        async def failing():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError, match="backend down"):
            await cached_fetch(storage, "k", failing)

        assert storage.has("k") is False

    async def test_cancelled_load_does_not_strand_waiters(self, storage):
        calls = []

        async def loader():
            calls.append(1)
            if len(calls) == 1:
                await asyncio.Event().wait()
            return 7

        first = asyncio.create_task(cached_fetch(storage, "k", loader))
        second = asyncio.create_task(cached_fetch(storage, "k", loader))
        await asyncio.sleep(0)
        first.cancel()

        with pytest.raises(asyncio.CancelledError):
            await first
        assert await asyncio.wait_for(second, timeout=1) == 7
        assert len(calls) == 2
        assert storage.get("k") == 7

    async def test_cancelled_waiter_leaves_load_running(self, storage):
        release = asyncio.Event()

        async def loader():
            await release.wait()
            return "done"

        first = asyncio.create_task(cached_fetch(storage, "k", loader))
        second = asyncio.create_task(cached_fetch(storage, "k", loader))
        await asyncio.sleep(0)
        second.cancel()
        release.set()

        assert await first == "done"
        with pytest.raises(asyncio.CancelledError):
            await second
