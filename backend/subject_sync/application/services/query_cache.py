"""Query cache: keyed in-memory store of entity collections.

The single source of truth the UI renders from. Reads and writes are
synchronous; only fetches suspend. Each fetch carries a generation number
so a cancelled or superseded fetch can never overwrite newer data, even if
its fetcher ignores cancellation.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from subject_sync.domain.entities import CacheEntry, FetchStatus, QueryKey, key_matches
from subject_sync.domain.exceptions import get_error_message
from subject_sync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
slog = SyncLogger("QueryCache")

Fetcher = Callable[[], Awaitable[Any]]
Listener = Callable[[QueryKey, CacheEntry], None]


class QueryCache:
    """Explicit, injectable cache store. Create one per client, or one per test.

    Listeners registered with ``subscribe`` are called synchronously after
    every data transition, never before.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[QueryKey, CacheEntry] = {}
        self._fetchers: dict[QueryKey, Fetcher] = {}
        self._in_flight: dict[QueryKey, asyncio.Task[Any]] = {}
        self._generations: dict[QueryKey, int] = {}
        self._listeners: list[Listener] = []

    # ── Reads ────────────────────────────────────────────────────────

    def get(self, key: QueryKey) -> Any:
        """Current cached value for ``key``, or None when never fetched."""
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def get_entry(self, key: QueryKey) -> CacheEntry | None:
        return self._entries.get(key)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def is_fetching(self, key: QueryKey) -> bool:
        task = self._in_flight.get(key)
        return task is not None and not task.done()

    def is_stale(self, key: QueryKey, stale_time: float) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.data is None or entry.updated_at is None:
            return True
        if entry.is_invalidated:
            return True
        return self._clock() - entry.updated_at >= stale_time

    # ── Writes ───────────────────────────────────────────────────────

    def set(self, key: QueryKey, value: Any) -> Any:
        """Replace the value for ``key`` in one visible transition.

        ``value`` may be a plain value or an updater ``prev -> next``. The
        updater must return a new value rather than edit ``prev``. Writing
        None to a key that has no entry is a no-op.
        """
        entry = self._entries.get(key)
        if callable(value):
            new_value = value(entry.data if entry is not None else None)
        else:
            new_value = value

        if entry is None:
            if new_value is None:
                logger.debug("Ignoring empty write to unknown key %s", key)
                return None
            entry = CacheEntry(key=key)
            self._entries[key] = entry

        entry.data = new_value
        entry.updated_at = self._clock()
        entry.is_invalidated = False
        self._notify(key, entry)
        return new_value

    def cancel_in_flight(self, prefix: QueryKey) -> int:
        """Cancel outstanding fetches for every key starting with ``prefix``.

        Synchronous: once this returns, no cancelled fetch can write to the
        cache. Returns the number of fetches cancelled.
        """
        cancelled = 0
        for key in [k for k in self._in_flight if key_matches(k, prefix)]:
            if self._cancel_fetch(key):
                cancelled += 1
        if cancelled:
            slog.step(SyncStage.CANCEL, "cancelled in-flight fetches", prefix=prefix, count=cancelled)
        return cancelled

    def invalidate(self, prefix: QueryKey) -> list[QueryKey]:
        """Mark matching entries stale and refetch them in the background.

        Does not change what ``get`` returns until the refetch lands.
        """
        matched = [k for k in self._entries if key_matches(k, prefix)]
        for key in matched:
            self._entries[key].is_invalidated = True
            if key in self._fetchers and _has_running_loop():
                self._cancel_fetch(key)
                self._start_fetch(key, self._fetchers[key])
        if matched:
            slog.step(SyncStage.INVALIDATE, "invalidated", prefix=prefix, count=len(matched))
        return matched

    def remove(self, key: QueryKey) -> None:
        self._cancel_fetch(key)
        self._fetchers.pop(key, None)
        self._entries.pop(key, None)

    def clear(self) -> None:
        for key in list(self._in_flight):
            self._cancel_fetch(key)
        self._entries.clear()
        self._fetchers.clear()
        self._generations.clear()

    # ── Fetching ─────────────────────────────────────────────────────

    async def fetch(
        self, key: QueryKey, fetcher: Fetcher, *, stale_time: float = 0.0
    ) -> Any:
        """Return fresh data for ``key``, fetching when missing or stale.

        Concurrent calls for the same key share one fetch. If the fetch is
        cancelled (see ``cancel_in_flight``) the current cached value is
        returned instead. Fetch failures are recorded on the entry and
        re-raised; previously cached data is kept.
        """
        self._fetchers[key] = fetcher
        if not self.is_stale(key, stale_time):
            return self.get(key)

        task = self._in_flight.get(key)
        if task is None or task.done():
            task = self._start_fetch(key, fetcher)

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                return self.get(key)
            raise

    async def wait_idle(self) -> None:
        """Wait until no fetch is in flight, including background refetches."""
        while True:
            tasks = [t for t in self._in_flight.values() if not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    def _start_fetch(self, key: QueryKey, fetcher: Fetcher) -> asyncio.Task[Any]:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation

        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry(key=key)
            self._entries[key] = entry
        entry.status = FetchStatus.FETCHING

        task = asyncio.create_task(self._run_fetch(key, fetcher, generation))
        self._in_flight[key] = task
        task.add_done_callback(lambda t, k=key: self._forget_fetch(k, t))
        slog.step(SyncStage.FETCH, "fetch started", key=key, generation=generation)
        return task

    async def _run_fetch(self, key: QueryKey, fetcher: Fetcher, generation: int) -> Any:
        try:
            data = await fetcher()
        except Exception as exc:
            entry = self._entries.get(key)
            if entry is not None and self._generations.get(key) == generation:
                entry.status = FetchStatus.ERROR
                entry.error = get_error_message(exc)
                self._notify(key, entry)
            raise

        entry = self._entries.get(key)
        if entry is None or self._generations.get(key) != generation:
            slog.step(SyncStage.FETCH, "discarded superseded result", key=key, generation=generation)
            return self.get(key)

        entry.data = data
        entry.status = FetchStatus.IDLE
        entry.error = None
        entry.updated_at = self._clock()
        entry.is_invalidated = False
        self._notify(key, entry)
        return data

    def _cancel_fetch(self, key: QueryKey) -> bool:
        task = self._in_flight.pop(key, None)
        if task is None:
            return False
        # Any result still on its way belongs to an older generation now
        self._generations[key] = self._generations.get(key, 0) + 1
        entry = self._entries.get(key)
        if entry is not None and entry.status is FetchStatus.FETCHING:
            entry.status = FetchStatus.IDLE
        if task.done():
            return False
        task.cancel()
        return True

    def _forget_fetch(self, key: QueryKey, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Fetch for %s failed: %s", key, get_error_message(exc))

    # ── Subscribers ──────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, key: QueryKey, entry: CacheEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, entry)
            except Exception:
                logger.exception("Cache listener failed for key %s", key)


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
