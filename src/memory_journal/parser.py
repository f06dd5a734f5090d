"""Parse memory journal API payloads into model objects.

Payloads are the ``data`` part of the ``{statusCode, message, data}``
envelope, already unwrapped by the client. Field names follow the API's
camelCase; missing optional fields fall back to empty values.
"""

import logging
from datetime import datetime

from .models import (
    CommentNode,
    CommentsPage,
    FeedItem,
    FeedPage,
    Member,
    PageInfo,
    SearchMetadata,
    SearchResult,
    SearchResultPage,
    Suggestion,
)

logger = logging.getLogger(__name__)


def parse_feed_items(raw_items: list[dict]) -> list[FeedItem]:
    """Parse a list of raw memory dicts, skipping malformed ones."""
    items = []
    for raw in raw_items:
        try:
            items.append(parse_feed_item(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed memory %s: %s", _raw_id(raw, "id"), e)
    return items


def parse_feed_page(data: list) -> FeedPage:
    if not isinstance(data, list):
        raise TypeError(f"expected a list of memories, got {type(data).__name__}")
    return FeedPage(items=parse_feed_items(data), returned=len(data))


def parse_feed_item(raw: dict) -> FeedItem:
    files = raw.get("files") or []
    return FeedItem(
        id=int(raw["id"]),
        author=parse_member(raw.get("member") or {}),
        title=raw.get("title", ""),
        content=raw.get("content", ""),
        memory_type=raw.get("memoryType", "PUBLIC"),
        location_name=raw.get("locationName") or "",
        memorable_date=raw.get("memorableDate"),
        hashtags=list(raw.get("hashtags") or []),
        media_urls=[f["fileUrl"] for f in files if f.get("fileUrl")],
        comment_count=int(raw.get("commentCount", 0)),
    )


def parse_member(raw: dict) -> Member:
    """Parse a member reference.

    The profile image lives under ``profile.fileUrl`` for full member
    objects and under ``fileUrl`` in some flattened payloads.
    """
    profile = raw.get("profile") or {}
    return Member(
        id=int(raw.get("id", 0)),
        nickname=raw.get("nickname") or raw.get("name") or "unknown",
        name=raw.get("name") or "",
        email=raw.get("email") or "",
        profile_image_url=profile.get("fileUrl") or raw.get("fileUrl"),
    )


def parse_search_page(data: dict) -> SearchResultPage:
    # the server has used both "memories" and "results" for the list
    raw_results = data.get("memories")
    if raw_results is None:
        raw_results = data.get("results") or []

    results = []
    for raw in raw_results:
        try:
            results.append(_parse_search_result(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(
                "Skipping malformed search result %s: %s", _raw_id(raw, "memoryId"), e
            )

    metadata = None
    raw_meta = data.get("metadata")
    if raw_meta:
        metadata = SearchMetadata(
            search_type=raw_meta.get("searchType", "ALL"),
            query=raw_meta.get("query", ""),
            search_time_ms=int(raw_meta.get("searchTimeMs") or 0),
        )

    return SearchResultPage(
        results=results,
        page_info=parse_page_info(data["pageInfo"]),
        metadata=metadata,
    )


def parse_page_info(raw: dict) -> PageInfo:
    return PageInfo(
        current_page=int(raw["currentPage"]),
        total_pages=int(raw["totalPages"]),
        page_size=int(raw.get("pageSize", 0)),
        total_elements=int(raw.get("totalElements", 0)),
        has_next=bool(raw.get("hasNext", False)),
        has_previous=bool(raw.get("hasPrevious", False)),
    )


def _parse_search_result(raw: dict) -> SearchResult:
    return SearchResult(
        memory_id=int(raw["memoryId"]),
        title=raw.get("title", ""),
        content=raw.get("content", ""),
        memory_type=raw.get("memoryType", "PUBLIC"),
        member_id=int(raw.get("memberId", 0)),
        member_nickname=raw.get("memberNickname") or raw.get("memberName") or "",
        location_name=raw.get("locationName") or "",
        memorable_date_text=raw.get("memorableDateText") or "",
        hashtags=list(raw.get("hashtags") or []),
        highlights=raw.get("highlights"),
    )


def parse_suggestions(data: dict) -> list[Suggestion]:
    suggestions = []
    for raw in data.get("suggestions") or []:
        try:
            suggestions.append(
                Suggestion(
                    text=raw["text"],
                    type=raw["type"],
                    match_count=int(raw.get("matchCount", 0)),
                    score=float(raw.get("score", 0.0)),
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed suggestion %r: %s", raw, e)
    return suggestions


def parse_comments_page(data: dict) -> CommentsPage:
    return CommentsPage(
        comments=_parse_comments(data.get("comments") or []),
        total_count=int(data.get("totalCount", 0)),
        current_page=int(data.get("currentPage", 0)),
        page_size=int(data.get("pageSize", 0)),
        has_next=bool(data.get("hasNext", False)),
    )


def parse_comment(raw: dict) -> CommentNode:
    """Parse a comment and its embedded replies.

    Replies are only kept under depth-0 comments; anything nested deeper
    than one level is dropped because the thread model has two levels.
    """
    depth = int(raw.get("depth", 0))
    children = []
    if depth == 0:
        nested = []
        for child in raw.get("children") or []:
            if isinstance(child, dict) and int(child.get("depth", 1)) != 1:
                logger.debug("Dropping comment %s nested below depth 1", child.get("id"))
                continue
            nested.append(child)
        children = _parse_comments(nested)

    return CommentNode(
        id=int(raw["id"]),
        author=parse_member(raw.get("member") or {}),
        content=raw.get("content", ""),
        created_at=_parse_datetime(raw.get("createDate")),
        depth=depth,
        parent_id=raw.get("parentCommentId"),
        children_count=int(raw.get("childrenCount", len(children))),
        children=children,
        is_author=bool(raw.get("isAuthor", False)),
    )


def _parse_comments(raw_comments: list) -> list[CommentNode]:
    comments = []
    for raw in raw_comments:
        try:
            comments.append(parse_comment(raw))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed comment %s: %s", _raw_id(raw, "id"), e)
    return comments


def _raw_id(raw, key: str):
    return raw.get(key, "?") if isinstance(raw, dict) else "?"


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparseable timestamp %r", value)
        return None
