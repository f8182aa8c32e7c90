"""
==============================================================================
Search Feed Controller Module
==============================================================================

Debounced, paginated, cancellation-safe catalog search for the picker.

State Machine:
-------------
┌──────┐ load   ┌─────────┐ fresh page ┌────────┐
│ IDLE │ ─────▶ │ LOADING │ ─────────▶ │ LOADED │
└──────┘        └─────────┘            └────────┘
                  │    ▲                   │
          failure │    │ retry / next page │
                  ▼    │ / new query       │
               ┌─────────┐                 │
               │ ERRORED │ ◀───────────────┘ (via LOADING)
               └─────────┘

Request Tokens:
--------------
Every request carries a token from a monotonically increasing counter and
becomes the only fresh request. A response is applied only if its token
still equals ``state.token``; otherwise it is discarded whole. Opening or
closing the session and changing the query supersede outstanding requests
this way. In-flight requests are never cancelled, only ignored, and a
cancelled caller of load_next_page/retry leaves its fetch running.

The page state is one immutable SearchPageState value; all transitions
are the pure functions below.

==============================================================================
"""

from __future__ import annotations

import asyncio
import enum
import itertools
import logging
from typing import FrozenSet, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict

from app.catalog.models import CatalogProduct, Identifier
from app.core.exceptions import CatalogSearchError


# Module logger
logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    """Catalog search collaborator (ProductCatalog, CatalogClient)."""

    async def search(self, query: str, page: int, limit: int) -> List[CatalogProduct]:
        ...


class FeedStatus(str, enum.Enum):
    """Search feed status enumeration."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"

    def __str__(self) -> str:
        """Return the enum value as string."""
        return self.value


class SearchPageState(BaseModel):
    """
    Page state of one picker session.

    Attributes:
        query: Query the results belong to
        cursor: Index of the next page to request
        results: Accumulated results, exclusions filtered out
        exhausted: True once a page came back short
        status: Feed status
        token: Token of the only fresh request (None when none issued)
        error: Message of the last failure
        retryable: Whether the last failure can be retried
    """

    model_config = ConfigDict(frozen=True)

    query: str = ""
    cursor: int = 0
    results: Tuple[CatalogProduct, ...] = ()
    exhausted: bool = False
    status: FeedStatus = FeedStatus.IDLE
    token: Optional[int] = None
    error: Optional[str] = None
    retryable: bool = False

    def find_product(self, product_id: Identifier) -> Optional[CatalogProduct]:
        """Get a loaded product by id."""
        for product in self.results:
            if str(product.id) == str(product_id):
                return product
        return None


# =============================================================================
# PURE TRANSITIONS
# =============================================================================

def reset_for_query(state: SearchPageState, query: str) -> SearchPageState:
    """Start over for a new query: cursor 0, no results."""
    return SearchPageState(query=query)


def begin_request(state: SearchPageState, token: int) -> SearchPageState:
    """Mark a request for (query, cursor) as the only fresh one."""
    return state.model_copy(update={
        "status": FeedStatus.LOADING,
        "token": token,
        "error": None,
        "retryable": False,
    })


def is_stale(state: SearchPageState, token: int) -> bool:
    """Check whether a response token has been superseded."""
    return state.status != FeedStatus.LOADING or state.token != token


def apply_page(
    state: SearchPageState,
    token: int,
    page: Sequence[CatalogProduct],
    limit: int,
    exclusions: FrozenSet[str] = frozenset(),
) -> SearchPageState:
    """
    Apply a fetched page.

    Stale pages leave the state unchanged. Exhaustion is judged on the raw
    page length, before exclusion filtering.
    """
    if is_stale(state, token):
        return state

    fresh = tuple(p for p in page if str(p.id) not in exclusions)

    return state.model_copy(update={
        "results": state.results + fresh,
        "cursor": state.cursor + 1,
        "exhausted": len(page) < limit,
        "status": FeedStatus.LOADED,
    })


def apply_failure(
    state: SearchPageState,
    token: int,
    message: str,
    retryable: bool,
) -> SearchPageState:
    """Record a failed fetch; accumulated results are kept."""
    if is_stale(state, token):
        return state

    return state.model_copy(update={
        "status": FeedStatus.ERRORED,
        "error": message,
        "retryable": retryable,
    })


# =============================================================================
# CONTROLLER
# =============================================================================

class SearchFeedController:
    """
    Drives one picker session's search feed against a catalog source.

    Must be used from inside a running event loop.

    Example:
        >>> feed = SearchFeedController(catalog, page_size=10, debounce_seconds=0.5)
        >>> feed.open(exclusions={77})
        >>> await feed.load_next_page()
        >>> feed.set_query("hood")          # fires after 0.5s of quiet
        >>> await feed.wait_idle()
        >>> feed.state.results
    """

    def __init__(
        self,
        source: CatalogSource,
        page_size: int = 10,
        debounce_seconds: float = 0.5,
    ) -> None:
        """
        Initialize the controller.

        Args:
            source: Catalog search collaborator
            page_size: Products requested per page
            debounce_seconds: Quiet interval before a typed query fires
        """
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        self._source = source
        self._page_size = page_size
        self._debounce_seconds = debounce_seconds
        self._tokens = itertools.count(1)
        self._state = SearchPageState()
        self._exclusions: FrozenSet[str] = frozenset()
        self._debounce_task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._fetches: Set[asyncio.Task] = set()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> SearchPageState:
        """Current page state."""
        return self._state

    @property
    def exclusions(self) -> FrozenSet[str]:
        """Catalog ids hidden from results (as strings)."""
        return self._exclusions

    @property
    def page_size(self) -> int:
        """Products requested per page."""
        return self._page_size

    @property
    def has_pending_query(self) -> bool:
        """Check whether a typed query is waiting out the debounce interval."""
        return self._debounce_task is not None and not self._debounce_task.done()

    def is_excluded(self, product_id: Identifier) -> bool:
        """Check whether a product is bound elsewhere in the offer."""
        return str(product_id) in self._exclusions

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    def open(self, exclusions: Iterable[Identifier] = ()) -> None:
        """
        Start a session: reset page state and set the exclusion set.

        Outstanding requests of a previous session become stale.
        """
        self._cancel_debounce()
        self._state = SearchPageState()
        self._exclusions = frozenset(str(product_id) for product_id in exclusions)
        logger.debug(f"Search feed opened with {len(self._exclusions)} exclusion(s)")

    def close(self) -> None:
        """End the session; outstanding requests become stale."""
        self._cancel_debounce()
        self._state = SearchPageState()
        self._exclusions = frozenset()

    # =========================================================================
    # QUERY / PAGINATION
    # =========================================================================

    def set_query(self, text: str) -> None:
        """
        Debounce a typed query.

        Only the last text set within the quiet interval issues a request.
        """
        self._cancel_debounce()
        self._debounce_task = asyncio.create_task(self._debounced_query(text))

    async def _debounced_query(self, text: str) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._apply_query(text)

    def _apply_query(self, text: str) -> None:
        """Switch to a new query and request its first page."""
        if text == self._state.query and self._state.status != FeedStatus.IDLE:
            return

        logger.debug(f"Search query changed to {text!r}")
        self._state = reset_for_query(self._state, text)
        self._spawn_fetch()

    async def load_next_page(self) -> SearchPageState:
        """
        Request the page at the cursor.

        No-op while a request is loading or once the feed is exhausted.

        Returns:
            State after the request settled
        """
        if self._state.status == FeedStatus.LOADING or self._state.exhausted:
            return self._state

        await asyncio.shield(self._spawn_fetch())
        return self._state

    async def retry(self) -> SearchPageState:
        """
        Re-issue the request for the current (query, cursor).

        The retried request supersedes any outstanding one. No-op after a
        failure that is not retryable.
        """
        if self._state.status == FeedStatus.ERRORED and not self._state.retryable:
            return self._state
        if self._state.exhausted and self._state.status != FeedStatus.ERRORED:
            return self._state

        await asyncio.shield(self._spawn_fetch())
        return self._state

    async def wait_idle(self) -> SearchPageState:
        """
        Wait until no debounced query and no fresh request is pending.

        Superseded requests still in flight are not waited for.
        """
        while True:
            pending = {
                task for task in (self._debounce_task, self._inflight)
                if task is not None and not task.done()
            }
            if not pending:
                return self._state
            await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

    # =========================================================================
    # FETCHING
    # =========================================================================

    def _spawn_fetch(self) -> asyncio.Task:
        token = next(self._tokens)
        self._state = begin_request(self._state, token)
        task = asyncio.create_task(
            self._fetch(token, self._state.query, self._state.cursor)
        )
        self._inflight = task
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)
        return task

    async def _fetch(self, token: int, query: str, cursor: int) -> None:
        """Fetch one page and apply it if still fresh."""
        try:
            page = await self._source.search(query, cursor, self._page_size)
        except CatalogSearchError as e:
            self._fail(token, e.message, e.retryable)
            return
        except Exception as e:
            logger.exception(f"Unexpected catalog source failure: {e}")
            self._fail(token, "Failed to load products", True)
            return

        if is_stale(self._state, token):
            logger.debug(f"Discarding stale response (token {token}, query {query!r}, page {cursor})")
            return

        self._state = apply_page(self._state, token, page, self._page_size, self._exclusions)

        logger.debug(
            f"Loaded page {cursor} for {query!r}: {len(page)} product(s), "
            f"{len(self._state.results)} shown, exhausted={self._state.exhausted}"
        )

    def _fail(self, token: int, message: str, retryable: bool) -> None:
        if is_stale(self._state, token):
            logger.debug(f"Ignoring failure of stale request (token {token})")
            return

        logger.warning(f"Catalog search failed: {message} (retryable={retryable})")
        self._state = apply_failure(self._state, token, message, retryable)

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None
