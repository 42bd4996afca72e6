"""
Data Orchestrator.

Composes the asynchronous relationship fetch with the synchronous graph
pipeline (build -> filter -> highlight) and keeps the view-state store in
step with it:

- raw responses are cached per (asset id, fetch options) for a bounded
  staleness window, and concurrent requests for one key share one fetch
- ``is_loading`` is true while any fetch is outstanding
- failures become a readable ``error`` while the last good graph for the
  asset stays on display
- a successful load clears ``error`` and advances ``last_updated``
- a selected node (other than the root) gets its path from the root
  highlighted, and tearing down a session clears that highlight

Requests are numbered per asset. A response that arrives after a newer
request for the same asset was issued is returned to its caller but never
written to the store.
"""

import asyncio
import itertools
import logging
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from ..config import EngineConfig
from ..core.types import GraphData, GraphLink, RelationsResponse
from ..graph.builder import build_graph
from ..graph.filters import GraphSearchResult, apply_filter_state, search_graph
from ..graph.highlight import highlight_path
from ..graph.paths import find_path
from ..state.debounce import DebouncedFilterWriter
from ..state.store import GraphViewState, GraphViewStore, utc_timestamp
from .cache import QueryCache
from .source import FetchOptions, RelationshipFetchError, RelationshipSource, coerce_response

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryStatus(StrEnum):
    IDLE = "idle"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class QueryResult(Generic[T]):
    """
    Outcome of one orchestrated query.

    An ERROR result may still carry ``data``: for graph loads it is the
    last good graph for the asset, if there was one.
    """

    status: QueryStatus = QueryStatus.IDLE
    data: Optional[T] = None
    error: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.status == QueryStatus.IDLE

    @property
    def is_success(self) -> bool:
        return self.status == QueryStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status == QueryStatus.ERROR


class QueryKeys:
    """Cache key factory. Equal inputs always give equal keys."""

    ROOT = "derivatives"

    @staticmethod
    def derivatives(asset_id: str, options: Optional[FetchOptions] = None) -> Tuple[Any, ...]:
        options = options or FetchOptions()
        return (
            QueryKeys.ROOT,
            asset_id,
            options.max_depth,
            options.include_disputes,
            options.include_siblings,
        )

    @staticmethod
    def asset_id(key: Tuple[Any, ...]) -> Optional[str]:
        if len(key) > 1 and key[0] == QueryKeys.ROOT:
            return key[1]
        return None


query_keys = QueryKeys()


class GraphDataOrchestrator:
    """
    Fetches relationship data and turns it into display-ready graphs.

    Example:
        ```python
        store = GraphViewStore()
        orchestrator = GraphDataOrchestrator(source, store)
        result = await orchestrator.load_graph("0xabc")
        if result.is_success:
            render(result.data)
        ```
    """

    def __init__(
        self,
        source: RelationshipSource,
        store: Optional[GraphViewStore] = None,
        config: Optional[EngineConfig] = None,
        cache: Optional[QueryCache] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.source = source
        self.store = store or GraphViewStore()
        self.config = config or EngineConfig()
        self.cache = cache or QueryCache(
            stale_time=self.config.stale_time_seconds,
            gc_time=self.config.gc_time_seconds,
        )
        self._sleep = sleep

        self._outstanding = 0
        self._counter = itertools.count(1)
        self._sequence: Dict[str, int] = {}
        self._base: Dict[str, GraphData] = {}
        self._displayed: Dict[str, GraphData] = {}

    # =========================================================================
    # Fetching
    # =========================================================================

    def _options(self, options: Optional[FetchOptions]) -> FetchOptions:
        return options or self.config.fetch_options()

    def _next_sequence(self, asset_id: str) -> int:
        self._sequence[asset_id] = next(self._counter)
        return self._sequence[asset_id]

    def _is_current(self, asset_id: str, sequence: int) -> bool:
        return self._sequence.get(asset_id) == sequence

    def _settle(self, asset_id: str, sequence: int) -> bool:
        """Whether the finished request was current. Current requests release their slot."""
        if not self._is_current(asset_id, sequence):
            return False
        del self._sequence[asset_id]
        return True

    def _begin_loading(self) -> None:
        self._outstanding += 1
        if self._outstanding == 1:
            self.store.set_loading(True)

    def _end_loading(self) -> None:
        self._outstanding -= 1
        if self._outstanding == 0:
            self.store.set_loading(False)

    async def _fetch(self, asset_id: str, options: FetchOptions) -> RelationsResponse:
        attempts = self.config.fetch_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                logger.info(f"Fetching relationships for {asset_id} (attempt {attempt}/{attempts})")
                payload = await self.source.fetch_relationships(asset_id, options)
                return coerce_response(asset_id, payload)
            except Exception as e:
                last_error = e
                logger.warning(f"Fetch for {asset_id} failed on attempt {attempt}/{attempts}: {e}")
                if attempt < attempts:
                    await self._sleep(self.config.retry_delay_seconds * attempt)

        if isinstance(last_error, RelationshipFetchError):
            raise last_error
        message = str(last_error) or type(last_error).__name__
        raise RelationshipFetchError(asset_id, message) from last_error

    async def _request(self, asset_id: str, options: FetchOptions) -> RelationsResponse:
        key = query_keys.derivatives(asset_id, options)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Serving {asset_id} from cache")
            return cached

        self._begin_loading()
        try:
            return await self.cache.get_or_fetch(key, lambda: self._fetch(asset_id, options))
        finally:
            self._end_loading()

    async def fetch_relations(
        self, asset_id: Optional[str], options: Optional[FetchOptions] = None
    ) -> QueryResult[RelationsResponse]:
        """
        Fetch (or serve from cache) the raw relationship response for an asset.

        An empty ``asset_id`` gives an idle result and fetches nothing.
        """
        if not asset_id:
            return QueryResult()

        sequence = self._next_sequence(asset_id)
        try:
            response = await self._request(asset_id, self._options(options))
        except RelationshipFetchError as e:
            if self._settle(asset_id, sequence):
                self.store.set_error(e.message)
            return QueryResult(status=QueryStatus.ERROR, error=e.message)

        timestamp = utc_timestamp()
        if self._settle(asset_id, sequence):
            self.store.set_error(None)
            self.store.set_last_updated(timestamp)
        return QueryResult(status=QueryStatus.SUCCESS, data=response, updated_at=timestamp)

    # =========================================================================
    # Graph pipeline
    # =========================================================================

    def render(self, graph: GraphData, publish: bool = True) -> GraphData:
        """
        Filter ``graph`` with the store's filters and highlight the path to
        the selected node.

        With ``publish`` the path is also written to the store's
        ``highlighted_path`` (``None`` when the selection is the root or is
        unreachable).
        """
        filtered = apply_filter_state(graph, self.store.filters)

        selected = self.store.selected_node
        root_id = graph.root_id
        if not selected:
            return filtered
        if selected == root_id:
            if publish:
                self.store.highlight_path(None)
            return filtered

        path = find_path(filtered, root_id, selected)
        if publish:
            self.store.highlight_path(path)
        if path is None:
            logger.debug(f"No forward path from {root_id} to selected node {selected}")
            return filtered
        return highlight_path(filtered, path, dim_opacity=self.config.dim_opacity)

    async def load_graph(
        self, asset_id: Optional[str], options: Optional[FetchOptions] = None
    ) -> QueryResult[GraphData]:
        """
        Fetch, build, filter and highlight the graph for an asset.

        On failure the result carries the error and the previously displayed
        graph for the asset (if any); the store keeps showing that graph.
        """
        if not asset_id:
            return QueryResult()

        sequence = self._next_sequence(asset_id)
        try:
            response = await self._request(asset_id, self._options(options))
        except RelationshipFetchError as e:
            if self._settle(asset_id, sequence):
                self.store.set_error(e.message)
            else:
                logger.warning(f"Ignoring failure of superseded request {sequence} for {asset_id}")
            return QueryResult(
                status=QueryStatus.ERROR,
                data=self._displayed.get(asset_id),
                error=e.message,
            )

        base = build_graph(response)
        timestamp = utc_timestamp()

        if not self._settle(asset_id, sequence):
            logger.warning(f"Dropping superseded graph for {asset_id} (request {sequence})")
            return QueryResult(
                status=QueryStatus.SUCCESS,
                data=self.render(base, publish=False),
                updated_at=timestamp,
            )

        self._base[asset_id] = base
        graph = self.render(base)
        self._displayed[asset_id] = graph
        self.store.set_error(None)
        self.store.set_last_updated(timestamp)
        return QueryResult(status=QueryStatus.SUCCESS, data=graph, updated_at=timestamp)

    def rerender(self, asset_id: str) -> Optional[GraphData]:
        """Recompute the displayed graph for an already loaded asset."""
        base = self._base.get(asset_id)
        if base is None:
            return None
        graph = self.render(base)
        self._displayed[asset_id] = graph
        return graph

    def filter_writer(self) -> DebouncedFilterWriter:
        """A debounced writer for this store's filters, using the configured window."""
        return DebouncedFilterWriter(self.store, delay=self.config.debounce_seconds)

    def current_graph(self, asset_id: str) -> Optional[GraphData]:
        return self._displayed.get(asset_id)

    def base_graph(self, asset_id: str) -> Optional[GraphData]:
        return self._base.get(asset_id)

    # =========================================================================
    # Queries over loaded graphs
    # =========================================================================

    def search(self, query: str, graph: GraphData) -> QueryResult[GraphSearchResult]:
        result = search_graph(graph, query)
        if result is None:
            return QueryResult()
        return QueryResult(status=QueryStatus.SUCCESS, data=result, updated_at=utc_timestamp())

    @contextmanager
    def track_path(
        self, source_id: str, target_id: str, graph: GraphData
    ) -> Iterator[Optional[List[GraphLink]]]:
        """Highlight the path between two nodes for the duration of the block."""
        path = find_path(graph, source_id, target_id)
        self.store.highlight_path(path)
        try:
            yield path
        finally:
            self.store.highlight_path(None)

    @asynccontextmanager
    async def session(
        self, asset_id: str, options: Optional[FetchOptions] = None
    ) -> AsyncIterator["GraphSession"]:
        """
        Keep a graph for ``asset_id`` in step with the store.

        Example:
            ```python
            async with orchestrator.session("0xabc") as session:
                store.set_selected_node("0xdef")
                render(session.graph)
            ```
        """
        session = GraphSession(self, asset_id, options)
        await session.open()
        try:
            yield session
        finally:
            session.close()

    # =========================================================================
    # Cache control
    # =========================================================================

    async def prefetch(self, asset_id: str, options: Optional[FetchOptions] = None) -> bool:
        """Warm the cache for an asset without touching the displayed graph."""
        if not asset_id:
            return False
        try:
            await self._request(asset_id, self._options(options))
        except RelationshipFetchError as e:
            logger.warning(f"Prefetch for {asset_id} failed: {e.message}")
            return False
        return True

    def invalidate(self, asset_id: Optional[str] = None) -> None:
        """
        Forget cached responses for one asset (or all) and supersede any
        request for it that is still in flight.

        The last displayed graph is kept; use ``forget`` to drop it too.
        """
        if asset_id is None:
            self.cache.clear()
            self._sequence.clear()
            return

        for key in self.cache.keys():
            if query_keys.asset_id(key) == asset_id:
                self.cache.invalidate(key)
        self._sequence.pop(asset_id, None)

    def forget(self, asset_id: Optional[str] = None) -> None:
        """Invalidate an asset (or all) and drop its built and displayed graphs."""
        self.invalidate(asset_id)
        if asset_id is None:
            self._base.clear()
            self._displayed.clear()
            return
        self._base.pop(asset_id, None)
        self._displayed.pop(asset_id, None)



class GraphSession:
    """
    A live graph for one asset.

    While open, changes to the store's filters or selection recompute
    ``graph`` from the last fetched data. Other store writes are ignored.
    """

    def __init__(
        self,
        orchestrator: GraphDataOrchestrator,
        asset_id: str,
        options: Optional[FetchOptions] = None,
    ):
        self.orchestrator = orchestrator
        self.asset_id = asset_id
        self.options = options
        self.graph: Optional[GraphData] = None
        self.result: QueryResult[GraphData] = QueryResult()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_open(self) -> bool:
        return self._unsubscribe is not None

    async def open(self) -> QueryResult[GraphData]:
        self._unsubscribe = self.orchestrator.store.subscribe(self._on_change)
        return await self.refresh()

    async def refresh(self) -> QueryResult[GraphData]:
        self.result = await self.orchestrator.load_graph(self.asset_id, self.options)
        if self.result.data is not None:
            self.graph = self.result.data
        return self.result

    def _on_change(self, new: GraphViewState, old: GraphViewState) -> None:
        if new.filters == old.filters and new.selected_node == old.selected_node:
            return
        if new.selected_node is None and old.selected_node is not None:
            self.orchestrator.store.highlight_path(None)

        graph = self.orchestrator.rerender(self.asset_id)
        if graph is not None:
            self.graph = graph

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.orchestrator.store.highlight_path(None)
