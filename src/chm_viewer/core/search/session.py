"""Debounced, cancellable search for interactive callers."""

import asyncio
import contextlib
from collections.abc import Callable

from loguru import logger

from chm_viewer.config import SEARCH_DEBOUNCE_SECONDS
from chm_viewer.models.node import SearchResult

SearchFn = Callable[[str], list[SearchResult]]
ResultsCallback = Callable[[list[SearchResult]], None]


class SearchSession:
    """One logical search box.

    Each submitted query replaces the one in flight: the previous task is
    cancelled, and a query only publishes its results if no newer query has
    been submitted since. Must be used from within a running event loop.
    """

    def __init__(
        self,
        search: SearchFn,
        *,
        on_results: ResultsCallback | None = None,
        debounce: float = SEARCH_DEBOUNCE_SECONDS,
    ) -> None:
        self._search = search
        self._on_results = on_results
        self._debounce = debounce
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self.results: list[SearchResult] = []
        self.is_searching = False

    def submit(self, query: str) -> asyncio.Task[None] | None:
        """Start a search for query, superseding any search in flight.

        Blank queries clear the results immediately and return None.
        """
        self.cancel()
        self._generation += 1
        query = query.strip()
        if not query:
            self._publish([])
            return None

        self.is_searching = True
        self._task = asyncio.create_task(self._run(query, self._generation))
        return self._task

    def cancel(self) -> None:
        """Cancel the search in flight, if any."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.is_searching = False

    async def wait(self) -> None:
        """Wait for the current search to finish or be cancelled."""
        task = self._task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _run(self, query: str, generation: int) -> None:
        try:
            await asyncio.sleep(self._debounce)
            try:
                results = await asyncio.to_thread(self._search, query)
            except Exception:
                logger.exception("Search failed for {!r}", query)
                results = []
            if generation != self._generation:
                logger.debug("Discarding stale results for {!r}", query)
                return
            self._publish(results)
        finally:
            if generation == self._generation:
                self.is_searching = False

    def _publish(self, results: list[SearchResult]) -> None:
        self.results = results
        if self._on_results is not None:
            self._on_results(results)
