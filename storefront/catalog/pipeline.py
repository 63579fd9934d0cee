"""Query graph, memoization and filter sessions.

Every query the shop page runs is a `QueryNode` that names the
`FilterState` fields it reads. Its cache key holds only those fields, so
changing the sort order re-runs the listing fetch but reuses every facet,
and toggling a color re-runs only what depends on colors.

`FilterSession` drives one page: each selection event reduces the state,
cancels the computation started for the previous state and discards any
result whose state is no longer current.
"""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from storefront.catalog.filter_state import FilterAction, FilterState, reduce
from storefront.domain.results import Result
from storefront.infrastructure.config import settings

if TYPE_CHECKING:
    from storefront.catalog.context import PageContext
    from storefront.catalog.service import ShopService, ShopView

logger = structlog.get_logger()

T = TypeVar("T")


# ============================================================================
# Query Graph
# ============================================================================


@dataclass(frozen=True)
class QueryNode:
    """A memoizable query and the filter fields it depends on.

    Attributes:
        name: Query name.
        depends_on: FilterState field names the query reads.
        cacheable: Whether results may be memoized.
    """

    name: str
    depends_on: tuple[str, ...] = ()
    cacheable: bool = True

    def cache_key(self, context_key: Hashable, state: FilterState, *extra: Hashable) -> tuple:
        """Build the memo key for one evaluation.

        Args:
            context_key: Page the query runs on.
            state: Current filter state; only `depends_on` fields are used.
            extra: Additional inputs (seller allowlist, attribute id, ...).

        Returns:
            Hashable cache key.
        """
        return (self.name, context_key, state.project(self.depends_on), *extra)


_ALL_FIELDS = tuple(f.name for f in fields(FilterState))

PAGE_CONTEXT = QueryNode("page_context")
SELLERS = QueryNode("sellers")
COLOR_CANDIDATES = QueryNode("candidates.colors", ("levels", "colors"))
SIZE_CANDIDATES = QueryNode("candidates.sizes", ("levels", "sizes"))
ATTRIBUTE_CANDIDATES = QueryNode("candidates.attribute", ("levels",))
COLOR_FACET = QueryNode("facet.colors", ("levels", "brands", "sizes", "attributes"))
SIZE_FACET = QueryNode("facet.sizes", ("levels", "brands", "colors", "attributes"))
BRAND_FACET = QueryNode("facet.brands", ("levels", "colors", "sizes", "attributes"))
ATTRIBUTE_FACET = QueryNode("facet.attribute", ("levels", "brands", "colors", "sizes", "attributes"))
PRODUCT_PAGE = QueryNode("products", _ALL_FIELDS, cacheable=False)

QUERY_GRAPH: dict[str, QueryNode] = {
    node.name: node
    for node in (
        PAGE_CONTEXT,
        SELLERS,
        COLOR_CANDIDATES,
        SIZE_CANDIDATES,
        ATTRIBUTE_CANDIDATES,
        COLOR_FACET,
        SIZE_FACET,
        BRAND_FACET,
        ATTRIBUTE_FACET,
        PRODUCT_PAGE,
    )
}


def affected_queries(previous: FilterState, current: FilterState) -> list[str]:
    """Names of the queries whose inputs differ between two states.

    Args:
        previous: State before the transition.
        current: State after the transition.

    Returns:
        Query names in graph order.
    """
    return [
        node.name
        for node in QUERY_GRAPH.values()
        if previous.project(node.depends_on) != current.project(node.depends_on)
    ]


# ============================================================================
# Memo Cache
# ============================================================================


class QueryCache:
    """TTL + LRU memo for query results.

    Only successful results are kept. Concurrent requests for the same key
    share one computation; a caller that is cancelled leaves the shared
    computation running for the others.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize cache.

        Args:
            ttl_seconds: Lifetime of an entry.
            max_entries: Entry limit; least recently used entries go first.
            clock: Monotonic time source.
        """
        self.ttl_seconds = settings.facet_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = max_entries or settings.facet_cache_max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, Result[Any]]] = OrderedDict()
        self._inflight: dict[Hashable, asyncio.Future] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Result[Any] | None:
        """Get a fresh cached result, if any."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, result = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return result

    def put(self, key: Hashable, result: Result[Any]) -> None:
        """Store a successful result; failures are ignored."""
        if not result.success:
            return
        self._entries[key] = (self._clock() + self.ttl_seconds, result)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        """Drop every cached result."""
        self._entries.clear()

    async def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Awaitable[Result[T]]],
    ) -> Result[T]:
        """Return the cached result for a key, computing it on a miss.

        Args:
            key: Memo key.
            compute: Coroutine factory producing the result.

        Returns:
            Cached or freshly computed result.
        """
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        future = self._inflight.get(key)
        if future is None:
            self.misses += 1
            future = asyncio.ensure_future(compute())
            self._inflight[key] = future
            future.add_done_callback(lambda done: self._on_done(key, done))

        return await asyncio.shield(future)

    def _on_done(self, key: Hashable, future: asyncio.Future) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        if future.cancelled() or future.exception() is not None:
            return
        self.put(key, future.result())


# ============================================================================
# Filter Session
# ============================================================================


class FilterSession:
    """Filter state of one shop page, with last-state-wins refreshes.

    Example usage:
        session = service.open_session(context)
        view = await session.apply(ToggleColor("Red"))
        if view is None:
            pass  # a newer selection superseded this one
    """

    def __init__(
        self,
        service: "ShopService",
        context: "PageContext",
        state: FilterState | None = None,
    ) -> None:
        """Initialize session.

        Args:
            service: Shop service that builds views.
            context: Page the session filters.
            state: Initial state, empty when omitted.
        """
        self.service = service
        self.context = context
        self._state = state or FilterState()
        self._inflight: asyncio.Task | None = None

    @property
    def state(self) -> FilterState:
        """Current state snapshot."""
        return self._state

    def dispatch(self, action: FilterAction) -> FilterState:
        """Reduce one selection event into the current state.

        Args:
            action: Selection event.

        Returns:
            New current state.
        """
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is not previous:
            logger.debug(
                "Filter state changed",
                action=type(action).__name__,
                recompute=affected_queries(previous, self._state),
            )
        return self._state

    async def apply(self, action: FilterAction, page: int = 0) -> "Result[ShopView] | None":
        """Dispatch an action and refresh the view.

        Returns:
            View for the new state, or None if a later call superseded it.
        """
        self.dispatch(action)
        return await self.refresh(page)

    async def refresh(self, page: int = 0) -> "Result[ShopView] | None":
        """Build the view for the current state.

        A refresh in flight for an earlier call is cancelled. The result is
        dropped if the state snapshot changed while it was computed.

        Args:
            page: Zero-based result page.

        Returns:
            View for the snapshot that triggered the call, or None if it is
            no longer current.
        """
        snapshot = self._state
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.ensure_future(self.service.build_view(self.context, snapshot, page))
        self._inflight = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task.cancelled() or snapshot is not self._state:
            logger.debug("Discarded superseded view", page=page)
            return None
        return task.result()
