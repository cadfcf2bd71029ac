"""Debounced, latest-query-wins search controller for interactive input."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from food_search.domain.errors import FoodSearchError, RateLimitExceededError
from food_search.domain.foods import (
    CanonicalFoodResult,
    LocalFoodRecord,
    Provenance,
    SearchResponse,
)
from food_search.services.normalizer import QueryNormalizer

_logger = logging.getLogger(__name__)


class SearchState(StrEnum):
    """Lifecycle of the controller."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True)
class SearchSnapshot:
    """Published search state for the UI."""

    query: str | None
    results: list[CanonicalFoodResult] = field(default_factory=list)
    provenance: Provenance | None = None
    error: Exception | None = None
    retry_after_ms: int | None = None


class SearchRunner(Protocol):
    """Anything that can run an aggregated search."""

    async def search(
        self,
        raw_query: str,
        local_items: list[LocalFoodRecord] | None = None,
        limit: int | None = None,
    ) -> SearchResponse:
        """Run one search."""


SnapshotListener = Callable[[SearchSnapshot], None]


@dataclass
class DebouncedSearchController:
    """Debounce input changes and publish only the latest query's outcome.

    Every input change bumps a generation counter. A search publishes its
    outcome only if its generation is still current, so a superseded
    request that resolves late never overwrites newer state, whether or not
    the cancellation reached the transport.
    """

    runner: SearchRunner
    normalizer: QueryNormalizer = field(default_factory=QueryNormalizer)
    local_items: Callable[[], list[LocalFoodRecord]] = list
    min_query_length: int = 3
    short_delay_ms: int = 300
    long_delay_ms: int = 600
    long_query_threshold: int = 10
    defer_on_rate_limit: bool = True
    state: SearchState = field(default=SearchState.IDLE, init=False)
    snapshot: SearchSnapshot = field(
        default_factory=lambda: SearchSnapshot(query=None), init=False
    )
    _generation: int = field(default=0, init=False, repr=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _last_completed_query: str | None = field(default=None, init=False, repr=False)
    _listeners: list[SnapshotListener] = field(
        default_factory=list, init=False, repr=False
    )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a listener for published snapshots; returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_query(self, raw: str) -> None:
        """Handle an input change. Must be called from the event loop."""
        self._supersede()
        query = self.normalizer.normalize(raw)
        if query is None or len(query) < self.min_query_length:
            self._last_completed_query = None
            self.state = SearchState.IDLE
            self._publish(SearchSnapshot(query=None))
            return
        if query == self._last_completed_query:
            self.state = SearchState.IDLE
            return

        delay_ms = self.debounce_delay_ms(raw)
        self.state = SearchState.DEBOUNCING
        self._task = asyncio.get_running_loop().create_task(
            self._run(self._generation, query, delay_ms)
        )

    def debounce_delay_ms(self, raw: str) -> int:
        """Longer input is more likely final, so it waits less."""
        if len(raw.strip()) >= self.long_query_threshold:
            return self.short_delay_ms
        return self.long_delay_ms

    def clear(self) -> None:
        """Drop the current query and any pending work."""
        self._supersede()
        self._last_completed_query = None
        self.state = SearchState.IDLE
        self._publish(SearchSnapshot(query=None))

    async def wait_idle(self) -> None:
        """Wait until no search task is pending."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    async def aclose(self) -> None:
        """Cancel outstanding work."""
        task = self._task
        self._supersede()
        self.state = SearchState.IDLE
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _supersede(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int, query: str, delay_ms: int) -> None:
        while True:
            await asyncio.sleep(delay_ms / 1000)
            if not self._is_current(generation):
                return
            self.state = SearchState.IN_FLIGHT
            try:
                local_items = await asyncio.to_thread(self.local_items)
                response = await self.runner.search(query, local_items)
            except RateLimitExceededError as exc:
                if not self._is_current(generation):
                    return
                self._publish(
                    SearchSnapshot(
                        query=query, error=exc, retry_after_ms=exc.retry_after_ms
                    )
                )
                if self.defer_on_rate_limit and exc.retry_after_ms > 0:
                    self.state = SearchState.DEBOUNCING
                    delay_ms = exc.retry_after_ms
                    continue
                self.state = SearchState.IDLE
                return
            except FoodSearchError as exc:
                if not self._is_current(generation):
                    return
                self._publish(SearchSnapshot(query=query, error=exc))
                self.state = SearchState.IDLE
                return
            except Exception as exc:
                if not self._is_current(generation):
                    return
                _logger.exception("Search for %r failed unexpectedly", query)
                self._publish(SearchSnapshot(query=query, error=exc))
                self.state = SearchState.IDLE
                return

            if not self._is_current(generation):
                return
            self._last_completed_query = response.query
            self.state = SearchState.IDLE
            self._publish(
                SearchSnapshot(
                    query=response.query,
                    results=response.results,
                    provenance=response.provenance,
                )
            )
            return

    def _publish(self, snapshot: SearchSnapshot) -> None:
        self.snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
