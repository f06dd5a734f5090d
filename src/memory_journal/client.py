"""Async client for the memory journal JSON API.

Every response is wrapped in ``{statusCode, message, data}``. A
``statusCode`` other than 200 is a failure even when the HTTP exchange
itself succeeded, so callers only ever see unwrapped ``data`` or an
exception.

Authentication is a bearer token. Without one the client talks to the
``/public/`` variants of the read endpoints; the choice is made once per
client via ``authenticated``, not per request.
"""

import logging
from typing import Any

import httpx

from .models import CommentNode, CommentsPage, FeedPage, SearchResultPage, Suggestion
from .parser import (
    parse_comment,
    parse_comments_page,
    parse_feed_page,
    parse_search_page,
    parse_suggestions,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(RuntimeError):
    """The server rejected a request or reported a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ApiError):
    pass


class RateLimitError(ApiError):
    pass


class MalformedResponseError(ApiError):
    """A 200 envelope whose ``data`` could not be parsed."""


class JournalClient:
    """Client for the feed, search, autocomplete and comment endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
        }
        if token:
            headers["authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self.authenticated = bool(token)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and return the unwrapped ``data`` field."""
        response = await self._client.request(method, path, **kwargs)

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed. Your token may be expired. "
                "Run `memory-journal setup` to store a fresh one.",
                status_code=response.status_code,
            )

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            wait_msg = f" Retry in {retry_after}s." if retry_after else ""
            raise RateLimitError(
                f"Rate limited by the server.{wait_msg}", status_code=429
            )

        try:
            body = response.json()
        except ValueError:
            response.raise_for_status()
            raise ApiError(
                f"Unexpected non-JSON response from {path}",
                status_code=response.status_code,
            )

        if response.is_error:
            raise ApiError(
                _message(body) or f"HTTP {response.status_code} for {path}",
                status_code=response.status_code,
            )

        status_code = body.get("statusCode") if isinstance(body, dict) else None
        if status_code != 200:
            raise ApiError(
                _message(body) or f"Request to {path} failed with status {status_code}",
                status_code=status_code,
            )

        return body.get("data")

    def _memories_path(self, suffix: str) -> str:
        if self.authenticated:
            return f"/v1/memories/{suffix}"
        return f"/v1/memories/public/{suffix}"

    async def fetch_member_feed(
        self, memory_type: str, size: int, last_id: int | None = None
    ) -> FeedPage:
        """Fetch one page of the signed-in member's memories of a scope."""
        params: dict = {"memoryType": memory_type, "size": size}
        if last_id is not None:
            params["lastMemoryId"] = last_id
        data = await self._request("GET", "/v1/memories/member", params=params)
        return _parse(parse_feed_page, data or [], "feed")

    async def fetch_public_feed(
        self, size: int, last_id: int | None = None
    ) -> FeedPage:
        params: dict = {"size": size}
        if last_id is not None:
            params["lastMemoryId"] = last_id
        data = await self._request("GET", "/v1/memories/public", params=params)
        return _parse(parse_feed_page, data or [], "feed")

    async def search_memories(
        self, query: str, page: int, size: int
    ) -> SearchResultPage:
        body = {
            "type": "ALL",
            "highlight": True,
            "query": query,
            "page": page,
            "size": size,
        }
        data = await self._request("POST", self._memories_path("search"), json=body)
        return _parse(parse_search_page, data, "search")

    async def autocomplete(self, query: str, limit: int = 10) -> list[Suggestion]:
        params = {"query": query.strip(), "limit": limit}
        data = await self._request(
            "GET", self._memories_path("autocomplete"), params=params
        )
        return _parse(parse_suggestions, data or {}, "autocomplete")

    async def fetch_comments(
        self, memory_id: int, page: int = 0, size: int = 10
    ) -> CommentsPage:
        if self.authenticated:
            path = f"/v1/comments/memory/{memory_id}/top-level"
        else:
            path = f"/v1/comments/memory/public/{memory_id}/top-level"
        data = await self._request(
            "GET", path, params={"page": page, "size": size}
        )
        return _parse(parse_comments_page, data, "comments")

    async def create_comment(
        self, memory_id: int, content: str, parent_comment_id: int | None = None
    ) -> CommentNode:
        body: dict = {"memoryId": memory_id, "content": content}
        if parent_comment_id is not None:
            body["parentCommentId"] = parent_comment_id
        data = await self._request("POST", "/v1/comments", json=body)
        return _parse(parse_comment, data, "comment")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()


def _message(body: Any) -> str:
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""


def _parse(parse, data: Any, what: str):
    try:
        return parse(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Unreadable %s payload: %s: %s", what, type(e).__name__, e)
        raise MalformedResponseError(f"Malformed {what} response: {e}") from e
