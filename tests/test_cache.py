# Tests for ResponseCache: TTLs, de-duplication, stale-while-revalidate.

import asyncio

import pytest

from inbo.cache import CacheKeys, CacheTTL, ResponseCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rc(clock):
    return ResponseCache(clock=clock)


def counter(value="v"):
    calls = []

    async def fetch():
        calls.append(1)
        return f"{value}{len(calls)}"

    return fetch, calls


class TestBasics:
    def test_make_key_sorts_params(self):
        a = ResponseCache.make_key("/inbox", {"page": 1, "filter": "latest"})
        b = ResponseCache.make_key("/inbox", {"filter": "latest", "page": 1})
        assert a == b
        assert ResponseCache.make_key("/inbox") == "/inbox:"

    def test_get_set(self, rc):
        rc.set("k", {"a": 1})
        assert rc.get("k") == {"a": 1}
        assert rc.get("missing") is None

    def test_expired_entry_dropped(self, rc, clock):
        rc.set("k", "v", ttl=10)
        clock.advance(10)
        assert rc.get("k") is None
        assert rc.stats()["entries"] == 0

    def test_invalidate(self, rc):
        rc.set("k", "v")
        rc.invalidate("k")
        rc.invalidate("never-set")
        assert rc.get("k") is None

    def test_invalidate_prefix(self, rc):
        rc.set(CacheKeys.email_detail("1"), 1)
        rc.set(CacheKeys.email_detail("2"), 2)
        rc.set(CacheKeys.INBOX, 3)
        assert rc.invalidate_prefix("email:") == 2
        assert rc.get(CacheKeys.INBOX) == 3

    def test_cleanup(self, rc, clock):
        rc.set("short", 1, ttl=CacheTTL.SHORT)
        rc.set("long", 2, ttl=CacheTTL.LONG)
        clock.advance(CacheTTL.SHORT + 1)
        assert rc.cleanup() == 1
        assert rc.get("long") == 2

    def test_ttl_presets(self):
        assert CacheTTL.SHORT < CacheTTL.MEDIUM < CacheTTL.LONG < CacheTTL.VERY_LONG
        assert CacheTTL.PERMANENT == 86400


class TestFetch:
    async def test_miss_then_hit(self, rc):
        fetch, calls = counter()
        assert await rc.fetch("k", fetch, ttl=60) == "v1"
        assert await rc.fetch("k", fetch, ttl=60) == "v1"
        assert len(calls) == 1

    async def test_force_refresh(self, rc):
        fetch, calls = counter()
        await rc.fetch("k", fetch)
        assert await rc.fetch("k", fetch, force_refresh=True) == "v2"
        assert rc.get("k") == "v2"

    async def test_expired_entry_refetched(self, rc, clock):
        fetch, calls = counter()
        await rc.fetch("k", fetch, ttl=10)
        clock.advance(11)
        assert await rc.fetch("k", fetch, ttl=10) == "v2"

    async def test_concurrent_fetches_share_one_call(self, rc):
        calls = []
        release = asyncio.Event()

        async def slow():
            calls.append(1)
            await release.wait()
            return "shared"

        tasks = [asyncio.create_task(rc.fetch("k", slow)) for _ in range(3)]
        await asyncio.sleep(0)
        assert rc.stats()["pending"] == 1
        release.set()

        assert await asyncio.gather(*tasks) == ["shared"] * 3
        assert len(calls) == 1
        assert rc.stats()["pending"] == 0

    async def test_failed_fetch_not_cached(self, rc):
        async def broken():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError):
            await rc.fetch("k", broken)
        assert rc.get("k") is None
        assert rc.stats()["pending"] == 0

    async def test_invalidate_all_discards_in_flight_result(self, rc):
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "stale session data"

        task = asyncio.create_task(rc.fetch("k", slow))
        await asyncio.sleep(0)
        rc.invalidate_all()
        release.set()

        assert await task == "stale session data"
        assert rc.get("k") is None


class TestStaleWhileRevalidate:
    async def test_fresh_entry_not_revalidated(self, rc, clock):
        fetch, calls = counter()
        await rc.fetch("k", fetch, ttl=100)
        clock.advance(50)
        await rc.fetch("k", fetch, ttl=100)
        await asyncio.sleep(0)
        assert len(calls) == 1

    async def test_stale_entry_served_then_refreshed(self, rc, clock):
        fetch, calls = counter()
        await rc.fetch("k", fetch, ttl=100)
        clock.advance(80)

        assert await rc.fetch("k", fetch, ttl=100) == "v1"
        await asyncio.sleep(0.01)

        assert len(calls) == 2
        assert rc.get("k") == "v2"

    async def test_one_background_refresh_per_key(self, rc, clock):
        fetch, calls = counter()
        await rc.fetch("k", fetch, ttl=100)
        clock.advance(80)

        await rc.fetch("k", fetch, ttl=100)
        await rc.fetch("k", fetch, ttl=100)
        await asyncio.sleep(0.01)
        assert len(calls) == 2

    async def test_background_failure_keeps_old_value(self, rc, clock):
        fetch, _ = counter()
        await rc.fetch("k", fetch, ttl=100)
        clock.advance(80)

        async def broken():
            raise RuntimeError("nope")

        assert await rc.fetch("k", broken, ttl=100) == "v1"
        await asyncio.sleep(0.01)
        assert rc.get("k") == "v1"

    async def test_disabled(self, rc, clock):
        fetch, calls = counter()
        await rc.fetch("k", fetch, ttl=100)
        clock.advance(80)
        await rc.fetch("k", fetch, ttl=100, stale_while_revalidate=False)
        await asyncio.sleep(0.01)
        assert len(calls) == 1
