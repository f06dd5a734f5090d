"""Render feeds, search pages and comment threads as terminal text."""

from .models import AggregatedSuggestion, CommentNode, FeedItem, SearchResultPage
from .search import page_window

MAX_SNIPPET = 140


def render_feed(items: list[FeedItem]) -> str:
    """Render feed items in the order they were loaded."""
    if not items:
        return ""
    return "\n".join(_render_feed_item(item) for item in items)


def _render_feed_item(item: FeedItem) -> str:
    lines: list[str] = []
    lines.append(f"### {item.title or '(untitled)'}  [{item.memory_type}]")
    lines.append(f"@{item.author.nickname} - #{item.id}")

    text = _snippet(item.content)
    if text:
        lines.append(f"> {text}")

    meta: list[str] = []
    if item.location_name:
        meta.append(f"Location: {item.location_name}")
    if item.memorable_date:
        meta.append(f"Date: {item.memorable_date}")
    if item.media_urls:
        meta.append(f"Photos: {len(item.media_urls)}")
    if item.comment_count:
        meta.append(f"Comments: {item.comment_count}")
    if meta:
        lines.append(" | ".join(meta))
    if item.hashtags:
        lines.append(" ".join(f"#{tag}" for tag in item.hashtags))

    lines.append("---")
    return "\n".join(lines)


def render_search_page(page: SearchResultPage) -> str:
    info = page.page_info
    lines: list[str] = [
        f"{info.total_elements} results (page {info.current_page + 1} of {max(info.total_pages, 1)})"
    ]
    for result in page.results:
        lines.append("")
        lines.append(f"- {result.title or '(untitled)'} [#{result.memory_id}] @{result.member_nickname}")
        text = _snippet(result.content)
        if text:
            lines.append(f"  {text}")
        if result.hashtags:
            lines.append("  " + " ".join(f"#{tag}" for tag in result.hashtags))

    if info.total_pages > 1:
        lines.append("")
        lines.append(render_page_buttons(info.current_page, info.total_pages, info.has_previous, info.has_next))
    return "\n".join(lines)


def render_page_buttons(
    current_page: int, total_pages: int, has_previous: bool, has_next: bool
) -> str:
    """Render pager buttons; current page bracketed, disabled arrows dotted."""
    buttons = ["<" if has_previous else "."]
    for page in page_window(current_page, total_pages):
        label = str(page + 1)
        buttons.append(f"[{label}]" if page == current_page else label)
    buttons.append(">" if has_next else ".")
    return " ".join(buttons)


def render_suggestions(suggestions: list[AggregatedSuggestion]) -> str:
    lines = []
    for s in suggestions:
        tags = ",".join(s.type_tags)
        lines.append(f"{s.text}  ({tags}, {s.total_match_count} matches, score {s.max_score:.2f})")
    return "\n".join(lines)


def render_thread(comments: list[CommentNode], total_count: int) -> str:
    lines = [f"Comments ({total_count})"]
    for comment in comments:
        lines.append(_render_comment(comment, indent=""))
        for reply in comment.children:
            lines.append(_render_comment(reply, indent="    "))
    return "\n".join(lines)


def _render_comment(comment: CommentNode, indent: str) -> str:
    when = comment.created_at.strftime("%Y-%m-%d %H:%M") if comment.created_at else ""
    header = f"{indent}@{comment.author.nickname} #{comment.id}"
    if when:
        header += f" ({when})"
    if comment.depth == 0 and comment.children_count:
        header += f" - {comment.children_count} replies"
    return f"{header}\n{indent}  {comment.content}"


def _snippet(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= MAX_SNIPPET:
        return text
    return text[: MAX_SNIPPET - 3].rstrip() + "..."
