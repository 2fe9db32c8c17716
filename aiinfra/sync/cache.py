# -*- coding: utf-8 -*-
"""Read-through cache keyed by (kind, id) with awaitable invalidation.

Every key runs at most one fetch at a time. Readers that arrive while a
fetch is in flight share it; invalidations that arrive while an older fetch
is in flight wait for it and then share a single follow-up fetch, so values
are always written in request order.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
# (key, value) after every successful fetch of a key of the subscribed kind
Listener = Callable[["CacheKey", Any], None]


class CacheKind(str, Enum):
    AI_PROVIDER_LIST = "FETCH_AI_PROVIDER"
    AI_PROVIDER_ITEM = "FETCH_AI_PROVIDER_ITEM"
    AI_PROVIDER_RUNTIME_STATE = "FETCH_AI_PROVIDER_RUNTIME_STATE"


@dataclass(frozen=True)
class CacheKey:
    kind: CacheKind
    id: Optional[str] = None

    def __str__(self) -> str:
        if self.id is None:
            return self.kind.value
        return f"{self.kind.value}:{self.id}"


class _Entry:
    __slots__ = (
        "fetcher",
        "value",
        "has_value",
        "stale",
        "generation",
        "task",
        "task_generation",
    )

    def __init__(self, fetcher: Optional[Fetcher]) -> None:
        self.fetcher = fetcher
        self.value: Any = None
        self.has_value = False
        self.stale = True
        # bumped by every invalidate(); a fetch satisfies an invalidation
        # only if it started at or after that invalidation's generation
        self.generation = 0
        self.task: Optional[asyncio.Task] = None
        self.task_generation = -1


class CacheStore:
    def __init__(self) -> None:
        self._entries: Dict[CacheKey, _Entry] = {}
        self._listeners: Dict[CacheKind, List[Listener]] = defaultdict(list)

    # -----------------------------------------------------------------------
    # Binding and subscription
    # -----------------------------------------------------------------------

    def bind(self, key: CacheKey, fetcher: Optional[Fetcher]) -> None:
        """Bind the fetch function for ``key``.

        Binding ``None`` disables the key: reads return ``None`` and
        invalidations fetch nothing. The cached value is kept either way.
        """
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = _Entry(fetcher)
        else:
            entry.fetcher = fetcher

    def is_bound(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.fetcher is not None

    def subscribe(
        self,
        kind: CacheKind,
        listener: Listener,
    ) -> Callable[[], None]:
        """Call ``listener(key, value)`` after each successful fetch.

        Returns a function that removes the listener.
        """
        self._listeners[kind].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[kind]:
                self._listeners[kind].remove(listener)

        return unsubscribe

    # -----------------------------------------------------------------------
    # Inspection
    # -----------------------------------------------------------------------

    def peek(self, key: CacheKey) -> Any:
        """Return the cached value for ``key`` without fetching."""
        entry = self._entries.get(key)
        if entry is None or not entry.has_value:
            return None
        return entry.value

    def is_stale(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or entry.stale

    # -----------------------------------------------------------------------
    # Read-through / invalidate
    # -----------------------------------------------------------------------

    async def read(self, key: CacheKey) -> Any:
        """Return the fresh value for ``key``, fetching it on a miss.

        Raises ``KeyError`` if no fetcher was ever bound to ``key``.
        """
        entry = self._entries.get(key)
        if entry is None:
            raise KeyError(f"no fetcher bound for cache key {key}")
        if entry.fetcher is None:
            return None
        if entry.has_value and not entry.stale:
            return entry.value
        if entry.task is not None:
            return await asyncio.shield(entry.task)
        return await self._start_fetch(key, entry)

    async def invalidate(self, key: CacheKey) -> Any:
        """Mark ``key`` stale and resolve a fresh value before returning.

        Unknown or disabled keys are only marked stale; nothing is fetched
        and ``None`` is returned.
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("invalidate %s: not cached, skipped", key)
            return None

        entry.stale = True
        entry.generation += 1
        generation = entry.generation
        if entry.fetcher is None:
            logger.debug("invalidate %s: key disabled, marked stale", key)
            return None

        logger.debug("invalidate %s (generation %s)", key, generation)
        while entry.task is not None:
            if entry.task_generation >= generation:
                return await asyncio.shield(entry.task)
            # an older fetch owns the slot; let it land first
            await asyncio.wait([entry.task])
        if entry.fetcher is None:
            return None
        return await self._start_fetch(key, entry)

    async def _start_fetch(self, key: CacheKey, entry: _Entry) -> Any:
        generation = entry.generation
        entry.task = asyncio.ensure_future(
            self._run_fetch(key, entry, entry.fetcher, generation),
        )
        entry.task_generation = generation
        return await asyncio.shield(entry.task)

    async def _run_fetch(
        self,
        key: CacheKey,
        entry: _Entry,
        fetcher: Fetcher,
        generation: int,
    ) -> Any:
        logger.debug("fetch %s", key)
        try:
            value = await fetcher()
        except Exception:
            logger.debug("fetch %s failed", key, exc_info=True)
            raise
        finally:
            entry.task = None
            entry.task_generation = -1

        entry.value = value
        entry.has_value = True
        entry.stale = entry.generation > generation
        for listener in list(self._listeners.get(key.kind, ())):
            listener(key, value)
        return value
