"""Query-keyed result cache with explicit invalidation.

A query key is a tuple whose first element names the query (``"books"``,
``"book"``, ``"reviews"``, ...) and whose remaining elements are its
parameters. ``fetch`` resolves a key once and serves the stored result until
a mutation calls ``invalidate`` with a matching key prefix. Concurrent
fetches of the same key share one in-flight request.

At most ``max_results`` results are kept; past that the oldest stored result
is dropped and read again on its next fetch.

Failures are not stored, so the next read asks the store again; nothing is
retried automatically.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, Tuple, TypeVar

from loguru import logger

from bookreview.Helper.Settings import CFG

T = TypeVar("T")
QueryKey = Tuple[Any, ...]


class QueryClient:
    def __init__(self, max_results: int = 256):
        self.max_results = max_results
        self._results: Dict[QueryKey, Any] = {}
        self._in_flight: Dict[QueryKey, asyncio.Future] = {}

    async def fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[T]]) -> T:
        if key in self._results:
            logger.debug(f"Query cache hit for {key}")
            return self._results[key]

        task = self._in_flight.get(key)
        if task is None or task.get_loop() is not asyncio.get_running_loop():
            task = asyncio.ensure_future(self._resolve(key, fetcher))
            self._in_flight[key] = task
        # a cancelled caller must not cancel the request other callers wait on
        return await asyncio.shield(task)

    async def _resolve(self, key: QueryKey, fetcher: Callable[[], Awaitable[T]]) -> T:
        this_task = asyncio.current_task()
        try:
            result = await fetcher()
        finally:
            # invalidate() drops the in-flight entry, so a stale request no longer owns its key
            owned = self._in_flight.get(key) is this_task
            if owned:
                del self._in_flight[key]
        if owned:
            self._store(key, result)
        return result

    def _store(self, key: QueryKey, result: Any):
        self._results[key] = result
        while len(self._results) > self.max_results:
            oldest = next(iter(self._results))
            del self._results[oldest]
            logger.debug(f"Evicted query {oldest}")

    def invalidate(self, *prefix: Any) -> int:
        """Drop every stored or in-flight result whose key starts with ``prefix``."""
        size = len(prefix)
        matched = {key for key in (*self._results, *self._in_flight) if key[:size] == prefix}
        for key in matched:
            self._results.pop(key, None)
            self._in_flight.pop(key, None)
        if matched:
            logger.debug(f"Invalidated {len(matched)} queries for {prefix}")
        return len(matched)

    def peek(self, key: QueryKey) -> Any:
        return self._results.get(key)

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._results

    def __len__(self) -> int:
        return len(self._results) + len(self._in_flight)

    def clear(self):
        self._results.clear()
        self._in_flight.clear()


# process-wide client shared by every view
query_client = QueryClient(CFG.query_cache_size)
