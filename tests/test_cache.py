"""Unit tests for the read-through CacheStore."""

from __future__ import annotations

import asyncio

import pytest

from aiinfra.sync import CacheKey, CacheKind, CacheStore, GatewayError

LIST_KEY = CacheKey(CacheKind.AI_PROVIDER_LIST)


class CountingFetcher:
    """Fetcher returning 1, 2, 3, ... and optionally blocking on a gate."""

    def __init__(self, gate: asyncio.Event | None = None) -> None:
        self.calls = 0
        self.gate = gate

    async def __call__(self) -> int:
        self.calls += 1
        value = self.calls
        if self.gate is not None:
            await self.gate.wait()
        return value


def test_cache_keys_compare_structurally() -> None:
    """Keys with the same kind and id are equal and hash alike."""
    a = CacheKey(CacheKind.AI_PROVIDER_ITEM, "p1")
    b = CacheKey(CacheKind.AI_PROVIDER_ITEM, "p1")
    assert a == b
    assert hash(a) == hash(b)
    assert a != CacheKey(CacheKind.AI_PROVIDER_ITEM, "p2")
    assert a != CacheKey(CacheKind.AI_PROVIDER_LIST, "p1")
    assert str(a) == "FETCH_AI_PROVIDER_ITEM:p1"


@pytest.mark.asyncio
async def test_read_fetches_once_and_then_serves_cached_value() -> None:
    """A second read of a fresh entry does not fetch again."""
    cache = CacheStore()
    fetcher = CountingFetcher()
    cache.bind(LIST_KEY, fetcher)

    assert await cache.read(LIST_KEY) == 1
    assert await cache.read(LIST_KEY) == 1
    assert fetcher.calls == 1
    assert cache.is_stale(LIST_KEY) is False


@pytest.mark.asyncio
@pytest.mark.parametrize("readers", [2, 5, 20])
async def test_concurrent_reads_share_one_fetch(readers: int) -> None:
    """N concurrent readers of an uncached key trigger exactly one fetch."""
    gate = asyncio.Event()
    cache = CacheStore()
    fetcher = CountingFetcher(gate)
    cache.bind(LIST_KEY, fetcher)

    tasks = [asyncio.create_task(cache.read(LIST_KEY)) for _ in range(readers)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks)

    assert results == [1] * readers
    assert fetcher.calls == 1


@pytest.mark.asyncio
async def test_read_unbound_key_raises_key_error() -> None:
    cache = CacheStore()
    with pytest.raises(KeyError, match="FETCH_AI_PROVIDER"):
        await cache.read(LIST_KEY)


@pytest.mark.asyncio
async def test_disabled_key_reads_none_without_fetching() -> None:
    """Binding None disables the key; reads and invalidations do nothing."""
    cache = CacheStore()
    cache.bind(LIST_KEY, None)

    assert await cache.read(LIST_KEY) is None
    assert await cache.invalidate(LIST_KEY) is None
    assert cache.is_bound(LIST_KEY) is False


@pytest.mark.asyncio
async def test_invalidate_refetches_and_notifies_subscribers() -> None:
    cache = CacheStore()
    fetcher = CountingFetcher()
    cache.bind(LIST_KEY, fetcher)
    seen: list[tuple[CacheKey, int]] = []
    cache.subscribe(CacheKind.AI_PROVIDER_LIST, lambda k, v: seen.append((k, v)))

    await cache.read(LIST_KEY)
    assert await cache.invalidate(LIST_KEY) == 2

    assert fetcher.calls == 2
    assert cache.peek(LIST_KEY) == 2
    assert seen == [(LIST_KEY, 1), (LIST_KEY, 2)]


@pytest.mark.asyncio
async def test_invalidate_fetches_bound_key_that_was_never_read() -> None:
    cache = CacheStore()
    fetcher = CountingFetcher()
    cache.bind(LIST_KEY, fetcher)

    assert await cache.invalidate(LIST_KEY) == 1
    assert fetcher.calls == 1


@pytest.mark.asyncio
async def test_invalidate_unknown_key_is_a_noop() -> None:
    cache = CacheStore()
    assert await cache.invalidate(CacheKey(CacheKind.AI_PROVIDER_ITEM, "x")) is None


@pytest.mark.asyncio
async def test_subscribers_only_see_their_kind_and_can_unsubscribe() -> None:
    cache = CacheStore()
    item_key = CacheKey(CacheKind.AI_PROVIDER_ITEM, "p1")
    cache.bind(LIST_KEY, CountingFetcher())
    cache.bind(item_key, CountingFetcher())
    items: list[CacheKey] = []
    unsubscribe = cache.subscribe(
        CacheKind.AI_PROVIDER_ITEM,
        lambda k, v: items.append(k),
    )

    await cache.read(LIST_KEY)
    await cache.read(item_key)
    unsubscribe()
    await cache.invalidate(item_key)

    assert items == [item_key]


@pytest.mark.asyncio
async def test_failed_fetch_propagates_and_next_read_retries() -> None:
    cache = CacheStore()
    attempts = 0

    async def flaky() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise GatewayError("boom")
        return "ok"

    cache.bind(LIST_KEY, flaky)

    with pytest.raises(GatewayError, match="boom"):
        await cache.read(LIST_KEY)
    assert cache.is_stale(LIST_KEY) is True
    assert cache.peek(LIST_KEY) is None

    assert await cache.read(LIST_KEY) == "ok"
    assert attempts == 2


@pytest.mark.asyncio
async def test_failed_refetch_keeps_previous_value() -> None:
    cache = CacheStore()
    results: list[object] = ["first", GatewayError("down")]

    async def fetch() -> object:
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    cache.bind(LIST_KEY, fetch)
    await cache.read(LIST_KEY)

    with pytest.raises(GatewayError):
        await cache.invalidate(LIST_KEY)
    assert cache.peek(LIST_KEY) == "first"
    assert cache.is_stale(LIST_KEY) is True


@pytest.mark.asyncio
async def test_invalidate_waits_for_older_in_flight_fetch() -> None:
    """An invalidation never races an older fetch to write the value."""
    gate = asyncio.Event()
    cache = CacheStore()
    fetcher = CountingFetcher(gate)
    cache.bind(LIST_KEY, fetcher)
    written: list[int] = []
    cache.subscribe(CacheKind.AI_PROVIDER_LIST, lambda k, v: written.append(v))

    first = asyncio.create_task(cache.read(LIST_KEY))
    await asyncio.sleep(0)
    refresh = asyncio.create_task(cache.invalidate(LIST_KEY))
    await asyncio.sleep(0)
    # the follow-up fetch has not started while the first one is pending
    assert fetcher.calls == 1

    gate.set()
    assert await first == 1
    assert await refresh == 2
    assert written == [1, 2]
    assert cache.peek(LIST_KEY) == 2
    assert cache.is_stale(LIST_KEY) is False


@pytest.mark.asyncio
async def test_concurrent_invalidations_share_the_follow_up_fetch() -> None:
    gate = asyncio.Event()
    cache = CacheStore()
    fetcher = CountingFetcher(gate)
    cache.bind(LIST_KEY, fetcher)

    first = asyncio.create_task(cache.read(LIST_KEY))
    await asyncio.sleep(0)
    refreshes = [
        asyncio.create_task(cache.invalidate(LIST_KEY)) for _ in range(3)
    ]
    await asyncio.sleep(0)
    gate.set()

    await first
    assert await asyncio.gather(*refreshes) == [2, 2, 2]
    assert fetcher.calls == 2
