"""Page-numbered memory search.

Every navigation replaces the visible results with the requested page;
nothing is merged across pages. Boundaries come from the ``hasNext`` and
``hasPrevious`` flags of the last response rather than being recomputed
locally.
"""

import logging

import httpx

from .client import ApiError, JournalClient
from .models import SearchResult, SearchResultPage
from .notify import Notification, Notifier, log_notifier
from .scope import CancelScope

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
PAGE_WINDOW = 5


def page_window(current_page: int, total_pages: int, width: int = PAGE_WINDOW) -> list[int]:
    """Return the 0-indexed page numbers to show as buttons.

    The window is centred on the current page where possible and slides
    to stay inside ``[0, total_pages)``.
    """
    if total_pages <= 0:
        return []
    start = max(0, min(current_page - 2, max(0, total_pages - width)))
    return [p for p in range(start, start + width) if p < total_pages]


class OffsetSearchPaginator:
    def __init__(
        self,
        client: JournalClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        notifier: Notifier = log_notifier,
        scope: CancelScope | None = None,
    ):
        self._client = client
        self.page_size = page_size
        self._notify = notifier
        self._scope = scope or CancelScope("search")
        self.query: str = ""
        self.page: SearchResultPage | None = None
        self.error: str | None = None
        self.loading = False
        self._latest_request = 0

    @property
    def results(self) -> list[SearchResult]:
        return list(self.page.results) if self.page else []

    @property
    def has_next(self) -> bool:
        return bool(self.page and self.page.page_info.has_next)

    @property
    def has_previous(self) -> bool:
        return bool(self.page and self.page.page_info.has_previous)

    def page_numbers(self) -> list[int]:
        if not self.page:
            return []
        info = self.page.page_info
        return page_window(info.current_page, info.total_pages)

    async def search(self, query: str) -> bool:
        """Run a new search starting at the first page."""
        return await self.fetch_page(query, 0)

    async def fetch_page(self, query: str, page: int, size: int | None = None) -> bool:
        """Fetch one page and make it the visible result set.

        If several requests overlap, only the most recently issued one is
        applied.
        """
        query = query.strip()
        if not query:
            logger.debug("Ignoring blank search query")
            return False
        if self._scope.closed:
            return False

        size = size or self.page_size
        self._latest_request += 1
        request_id = self._latest_request
        self.loading = True
        self.error = None
        logger.info("Searching %r (page %d, size %d)", query, page, size)

        try:
            result = await self._client.search_memories(query, page, size)
        except (httpx.HTTPError, ApiError) as e:
            if self._scope.closed or request_id != self._latest_request:
                return False
            logger.error("Search for %r failed: %s", query, e)
            self.error = "Search failed."
            self.page = None
            self.loading = False
            self._notify(Notification("error", "Search failed", str(e)))
            return False

        if self._scope.closed or request_id != self._latest_request:
            logger.debug("Discarding stale search response for %r page %d", query, page)
            return False

        self.query = query
        self.page = result
        self.loading = False
        info = result.page_info
        logger.info(
            "Search %r: page %d/%d, %d results total",
            query,
            info.current_page + 1,
            info.total_pages,
            info.total_elements,
        )
        return True

    async def go_to(self, page: int) -> bool:
        if not self.page:
            return False
        if not 0 <= page < self.page.page_info.total_pages:
            logger.warning(
                "Page %d is outside [0, %d)", page, self.page.page_info.total_pages
            )
            return False
        return await self.fetch_page(self.query, page)

    async def next_page(self) -> bool:
        if not self.has_next:
            return False
        return await self.fetch_page(self.query, self.page.page_info.current_page + 1)

    async def previous_page(self) -> bool:
        if not self.has_previous:
            return False
        return await self.fetch_page(self.query, self.page.page_info.current_page - 1)

    def clear(self) -> None:
        self.page = None
        self.error = None
        self.query = ""

    def close(self) -> None:
        self._scope.close()
