"""Two-level comment threads for a single memory.

Top-level comments are paginated and shown newest first; replies are
embedded in their parent and never paginated on their own. Only
top-level comments accept replies.

Thread lifecycle::

    COLLAPSED --expand--> LOADING --> LOADED --load_more--> LOADING_MORE --> LOADED
        ^                                |
        +------------collapse------------+

Creating a comment or reply keeps the thread in LOADED.
"""

import enum
import logging

import httpx

from .client import ApiError, JournalClient
from .models import CommentNode
from .notify import Notification, Notifier, log_notifier
from .scope import CancelScope, RequestSlot

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class ThreadState(enum.Enum):
    COLLAPSED = "collapsed"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"


def can_reply(node: CommentNode) -> bool:
    return node.depth == 0


class CommentThreadStore:
    def __init__(
        self,
        client: JournalClient,
        memory_id: int,
        page_size: int = DEFAULT_PAGE_SIZE,
        notifier: Notifier = log_notifier,
        scope: CancelScope | None = None,
    ):
        self._client = client
        self.memory_id = memory_id
        self.page_size = page_size
        self._notify = notifier
        self._scope = scope or CancelScope(f"comments-{memory_id}")
        self._slot = RequestSlot()
        self._generation = 0
        self._reset()

    def _reset(self) -> None:
        self.state = ThreadState.COLLAPSED
        self.comments: list[CommentNode] = []
        self.total_count = 0
        self.current_page = 0
        self.has_next = False

    def find(self, comment_id: int) -> CommentNode | None:
        """Look up a loaded comment or reply by id."""
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
            for reply in comment.children:
                if reply.id == comment_id:
                    return reply
        return None

    async def expand(self) -> bool:
        if self.state is not ThreadState.COLLAPSED:
            return False
        return await self.load_page(0)

    def collapse(self) -> None:
        """Discard everything loaded; the next expand starts from page 0."""
        self._generation += 1
        self._reset()

    async def toggle(self) -> bool:
        if self.state is ThreadState.COLLAPSED:
            return await self.expand()
        self.collapse()
        return True

    async def load_more(self) -> bool:
        if self.state is not ThreadState.LOADED or not self.has_next:
            return False
        return await self.load_page(self.current_page + 1)

    async def load_page(self, page: int = 0, size: int | None = None) -> bool:
        """Load one page of top-level comments.

        Page 0 replaces the thread; later pages are appended along with
        their embedded replies.
        """
        if self._scope.closed or not self._slot.try_acquire():
            return False

        previous = self.state
        self.state = ThreadState.LOADING if page == 0 else ThreadState.LOADING_MORE
        generation = self._generation
        try:
            result = await self._client.fetch_comments(
                self.memory_id, page, size or self.page_size
            )
        except (httpx.HTTPError, ApiError) as e:
            logger.error(
                "Failed to load comments for memory %d page %d: %s",
                self.memory_id,
                page,
                e,
            )
            if generation == self._generation and not self._scope.closed:
                self.state = previous
                self._notify(Notification("error", "Failed to load comments", str(e)))
            return False
        finally:
            self._slot.release()

        if self._scope.closed or generation != self._generation:
            logger.debug("Discarding comments for memory %d after reset", self.memory_id)
            return False

        if page == 0:
            self.comments = list(result.comments)
        else:
            self.comments.extend(result.comments)
        self.total_count = result.total_count
        self.current_page = result.current_page
        self.has_next = result.has_next
        self.state = ThreadState.LOADED
        logger.info(
            "Memory %d: %d top-level comments loaded, %d total",
            self.memory_id,
            len(self.comments),
            self.total_count,
        )
        return True

    async def create_top_level(self, content: str) -> CommentNode | None:
        comment = await self._create(content)
        if comment is None:
            return None
        self.comments.insert(0, comment)
        self.total_count += 1
        return comment

    async def create_reply(self, parent_id: int, content: str) -> CommentNode | None:
        """Post a reply and attach it under its parent if that is loaded.

        A parent that is not loaded (it sits on a page not fetched yet)
        gets the reply server-side only; the local tree stays unchanged.
        """
        parent = self.find(parent_id)
        if parent is not None and not can_reply(parent):
            raise ValueError(f"Comment {parent_id} is a reply and cannot be replied to")

        reply = await self._create(content, parent_id)
        if reply is None:
            return None

        parent = self.find(parent_id)
        if parent is None:
            logger.debug(
                "Reply %d posted to comment %d which is not loaded", reply.id, parent_id
            )
            return reply

        parent.children.append(reply)
        parent.children_count += 1
        self.total_count += 1
        return reply

    async def _create(self, content: str, parent_id: int | None = None) -> CommentNode | None:
        content = content.strip()
        if not content:
            raise ValueError("Comment content must not be empty")
        if self._scope.closed:
            return None

        generation = self._generation
        try:
            comment = await self._client.create_comment(self.memory_id, content, parent_id)
        except (httpx.HTTPError, ApiError) as e:
            logger.error("Failed to post comment on memory %d: %s", self.memory_id, e)
            self._notify(Notification("error", "Failed to post comment", str(e)))
            return None

        self._notify(Notification("success", "Comment posted"))
        if self._scope.closed or generation != self._generation:
            return None
        return comment

    async def comments_count(self) -> int:
        """Cheap total comment count, 0 when unavailable."""
        try:
            result = await self._client.fetch_comments(self.memory_id, 0, 1)
        except (httpx.HTTPError, ApiError) as e:
            logger.warning("Failed to count comments for memory %d: %s", self.memory_id, e)
            return 0
        return result.total_count

    def close(self) -> None:
        self._scope.close()
