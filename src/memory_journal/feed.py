"""Cursor-paginated infinite-scroll memory feeds.

The server returns memories newest first. Each page after the first is
requested with the id of the last memory already shown
(``lastMemoryId``); a page shorter than the requested size means the
feed is exhausted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial

import httpx

from .client import ApiError, JournalClient
from .models import VISIBILITY_SCOPES, FeedItem, FeedPage
from .scope import CancelScope, RequestSlot

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 5

# (size, last_id) -> one page of feed items
FetchPage = Callable[[int, int | None], Awaitable[FeedPage]]


def member_feed(client: JournalClient, memory_type: str) -> FetchPage:
    """Page source for the signed-in member's memories of one scope."""
    if memory_type not in VISIBILITY_SCOPES:
        raise ValueError(f"Unknown memory type: {memory_type}")
    return partial(client.fetch_member_feed, memory_type)


def public_feed(client: JournalClient) -> FetchPage:
    return client.fetch_public_feed


class CursorFeedPaginator:
    """Grows a feed one page at a time as the reader scrolls.

    Only one page request is in flight at a time. Failed requests leave
    the list and ``has_more`` untouched, so the next scroll retries.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        page_size: int = DEFAULT_PAGE_SIZE,
        scope: CancelScope | None = None,
        name: str = "feed",
    ):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._fetch_page = fetch_page
        self.page_size = page_size
        self.name = name
        self._scope = scope or CancelScope(name)
        self._slot = RequestSlot()
        self._items: list[FeedItem] = []
        self._ids: set[int] = set()
        self._has_more = True
        self._is_initial_load = True
        self.requests_issued = 0

    @property
    def items(self) -> list[FeedItem]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        return self._slot.busy

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_initial_load(self) -> bool:
        return self._is_initial_load

    @property
    def last_id(self) -> int | None:
        return self._items[-1].id if self._items else None

    def can_load_more(self) -> bool:
        return not self.loading and self._has_more and not self._is_initial_load

    def request_more(self) -> asyncio.Task | None:
        """Start fetching the page after the last loaded item.

        The in-flight slot is taken before the fetch is scheduled, so a
        second call in the same tick returns None instead of issuing a
        duplicate request.
        """
        if self._scope.closed or not self._has_more:
            return None
        if not self._slot.try_acquire():
            return None
        return self._scope.spawn(self._fetch_and_release(self.last_id))

    async def load_initial(self) -> bool:
        return await self.fetch_next()

    async def fetch_next(self, cursor: int | None = None) -> bool:
        """Fetch the page after ``cursor`` (the first page when None).

        Returns True when a page was applied, False when the call was a
        no-op or the request failed.
        """
        if self._scope.closed or not self._has_more:
            return False
        if not self._slot.try_acquire():
            logger.debug("%s: fetch already in flight, skipping", self.name)
            return False
        return await self._fetch_and_release(cursor)

    async def _fetch_and_release(self, cursor: int | None) -> bool:
        try:
            return await self._fetch(cursor)
        finally:
            self._slot.release()

    async def _fetch(self, cursor: int | None) -> bool:
        self.requests_issued += 1
        logger.info(
            "%s: fetching %d items after %s", self.name, self.page_size, cursor or "start"
        )
        try:
            page = await self._fetch_page(self.page_size, cursor)
        except (httpx.HTTPError, ApiError) as e:
            logger.error("%s: failed to fetch page after %s: %s", self.name, cursor, e)
            return False

        if self._scope.closed:
            logger.debug("%s: discarding page that arrived after close", self.name)
            return False

        if cursor is None:
            self._items = []
            self._ids = set()

        added = 0
        for item in page.items:
            if item.id in self._ids:
                logger.debug("%s: skipping duplicate memory %d", self.name, item.id)
                continue
            self._ids.add(item.id)
            self._items.append(item)
            added += 1

        # entries dropped while parsing still count towards a full page
        if page.returned < self.page_size:
            logger.info(
                "%s: short page (%d items), end of feed", self.name, page.returned
            )
            self._has_more = False

        self._is_initial_load = False
        logger.info(
            "%s: added %d items (total: %d)", self.name, added, len(self._items)
        )
        return True

    def close(self) -> None:
        self._scope.close()
