"""Data models for parsed memory journal API data."""

from dataclasses import dataclass, field
from datetime import datetime

VISIBILITY_SCOPES = ("PUBLIC", "PRIVATE", "RELATIONSHIP")


@dataclass
class Member:
    id: int
    nickname: str
    name: str = ""
    email: str = ""
    profile_image_url: str | None = None


@dataclass
class FeedItem:
    id: int  # decreasing with recency, used as the feed cursor
    author: Member
    title: str
    content: str
    memory_type: str  # "PUBLIC", "PRIVATE", "RELATIONSHIP"
    location_name: str = ""
    memorable_date: str | None = None
    hashtags: list[str] = field(default_factory=list)
    media_urls: list[str] = field(default_factory=list)
    comment_count: int = 0


@dataclass
class FeedPage:
    items: list[FeedItem]
    returned: int  # entries the server sent, parseable or not


@dataclass
class PageInfo:
    current_page: int
    total_pages: int
    page_size: int
    total_elements: int
    has_next: bool
    has_previous: bool


@dataclass
class SearchMetadata:
    search_type: str
    query: str
    search_time_ms: int = 0


@dataclass
class SearchResult:
    memory_id: int
    title: str
    content: str
    memory_type: str
    member_id: int
    member_nickname: str
    location_name: str = ""
    memorable_date_text: str = ""
    hashtags: list[str] = field(default_factory=list)
    highlights: dict | None = None


@dataclass
class SearchResultPage:
    results: list[SearchResult]
    page_info: PageInfo
    metadata: SearchMetadata | None = None


@dataclass
class Suggestion:
    text: str
    type: str  # "TITLE" or "HASHTAG"
    match_count: int
    score: float


@dataclass
class AggregatedSuggestion:
    text: str
    type_tags: list[str]  # in first-seen order
    total_match_count: int
    max_score: float


@dataclass
class CommentNode:
    id: int
    author: Member
    content: str
    created_at: datetime | None
    depth: int  # 0 = top-level, 1 = reply
    parent_id: int | None = None
    children_count: int = 0
    children: list["CommentNode"] = field(default_factory=list)
    is_author: bool = False


@dataclass
class CommentsPage:
    comments: list[CommentNode]
    total_count: int
    current_page: int
    page_size: int
    has_next: bool
