"""CLI interface for memory-journal.

Commands:
    setup     - Configure the API address and bearer token
    status    - Show current configuration
    feed      - Scroll through a memory feed
    search    - Search memories, one page at a time
    suggest   - Show aggregated autocomplete suggestions
    comments  - Show the comment thread of a memory
    comment   - Post a comment or a reply
"""

import asyncio
import sys
from pathlib import Path

import click

from .config import CONFIG_FILE, AppConfig, config_exists, load_config, save_config
from .logging_config import setup_logging
from .models import VISIBILITY_SCOPES
from .notify import Notification


def _click_notifier(notification: Notification) -> None:
    if notification.status == "error":
        message = notification.title
        if notification.description:
            message += f": {notification.description}"
        click.echo(f"Error: {message}", err=True)
    else:
        click.echo(notification.title, err=True)


def _require_config(ctx) -> AppConfig:
    config_path = ctx.obj["config_path"]
    if not config_exists(config_path):
        click.echo(
            "Error: No config found. Run 'memory-journal setup' first.", err=True
        )
        sys.exit(1)
    return load_config(config_path)


def _client(config: AppConfig):
    # Lazy import so --help stays fast
    from .client import JournalClient

    return JournalClient(config.base_url, token=config.token)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(), default=None, help="Config file path")
@click.pass_context
def main(ctx, verbose, config):
    """Memory Journal: browse feeds, search and comments from the terminal."""
    setup_logging(debug=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else CONFIG_FILE


@main.command()
@click.pass_context
def setup(ctx):
    """Configure the API address and authentication token."""
    config_path = ctx.obj["config_path"]

    click.echo("Memory Journal - Setup")
    click.echo("=" * 40)
    click.echo()
    base_url = click.prompt("API base URL")

    click.echo()
    click.echo("(Optional) Bearer token - press Enter to use public endpoints only.")
    token = click.prompt("token", default="", show_default=False, hide_input=True)

    config = AppConfig(base_url=base_url, token=token or None)
    save_config(config, config_path)
    click.echo(f"\nConfig saved to {config_path}")


@main.command()
@click.pass_context
def status(ctx):
    """Show current configuration."""
    config_path = ctx.obj["config_path"]
    has_config = config_exists(config_path)

    click.echo("Memory Journal - Status")
    click.echo("=" * 40)
    click.echo(f"Config: {'Found' if has_config else 'Not configured'} ({config_path})")

    if not has_config:
        click.echo("\nRun 'memory-journal setup' to get started.")
        return

    config = load_config(config_path)
    click.echo(f"API: {config.base_url}")
    click.echo(f"Authenticated: {'yes' if config.token else 'no (public endpoints)'}")
    click.echo(f"Feed page size: {config.feed_page_size}")
    click.echo(f"Search page size: {config.search_page_size}")
    click.echo(f"Comments page size: {config.comments_page_size}")


@main.command()
@click.option(
    "--scope",
    "memory_type",
    type=click.Choice(VISIBILITY_SCOPES, case_sensitive=False),
    default=None,
    help="Your memories of this scope (default: the public feed)",
)
@click.option("--pages", default=1, show_default=True, help="Pages to load")
@click.pass_context
def feed(ctx, memory_type, pages):
    """Scroll through a memory feed."""
    config = _require_config(ctx)
    if memory_type and not config.token:
        click.echo("Error: Your own feeds need a token. Run setup again.", err=True)
        sys.exit(1)

    items = asyncio.run(_scroll_feed(config, memory_type, pages))
    if not items:
        click.echo("No memories found.")
        return

    from .render import render_feed

    click.echo(render_feed(items))
    click.echo(f"Loaded {len(items)} memories.", err=True)


async def _scroll_feed(config: AppConfig, memory_type: str | None, pages: int):
    from .feed import CursorFeedPaginator, member_feed, public_feed
    from .scope import CancelScope
    from .visibility import VisibilityBridge

    async with _client(config) as client:
        if memory_type:
            source = member_feed(client, memory_type.upper())
        else:
            source = public_feed(client)

        scope = CancelScope("feed")
        paginator = CursorFeedPaginator(source, config.feed_page_size, scope=scope)
        bridge = VisibilityBridge(paginator)
        try:
            await paginator.load_initial()
            # Each extra page is one scroll that brings the sentinel into view.
            for _ in range(pages - 1):
                bridge.observe(0.0)
                task = bridge.observe(1.0)
                if task is None:
                    break
                await task
            return paginator.items
        finally:
            bridge.dispose()
            await scope.aclose()


@main.command()
@click.argument("query")
@click.option("--page", default=1, show_default=True, help="Page number (1-based)")
@click.pass_context
def search(ctx, query, page):
    """Search memories by title, content and hashtags."""
    config = _require_config(ctx)
    if page < 1:
        click.echo("Error: --page must be 1 or greater.", err=True)
        sys.exit(1)

    result = asyncio.run(_search(config, query, page - 1))
    if result is None:
        sys.exit(1)

    from .render import render_search_page

    click.echo(render_search_page(result))


async def _search(config: AppConfig, query: str, page: int):
    from .search import OffsetSearchPaginator

    async with _client(config) as client:
        paginator = OffsetSearchPaginator(
            client, config.search_page_size, notifier=_click_notifier
        )
        try:
            await paginator.fetch_page(query, page)
        finally:
            paginator.close()
        return paginator.page


@main.command()
@click.argument("query")
@click.pass_context
def suggest(ctx, query):
    """Show autocomplete suggestions for QUERY."""
    config = _require_config(ctx)
    suggestions, error = asyncio.run(_suggest(config, query))
    if error:
        click.echo(f"Error: {error}", err=True)
        sys.exit(1)
    if not suggestions:
        click.echo("No suggestions.")
        return

    from .render import render_suggestions

    click.echo(render_suggestions(suggestions))


async def _suggest(config: AppConfig, query: str):
    from .suggestions import AutocompleteSession

    async with _client(config) as client:
        session = AutocompleteSession(
            client,
            limit=config.autocomplete_limit,
            debounce=config.autocomplete_debounce,
        )
        try:
            await session.lookup(query)
        finally:
            session.close()
        return session.suggestions, session.error


@main.command()
@click.argument("memory_id", type=int)
@click.option("--pages", default=1, show_default=True, help="Pages of comments to load")
@click.pass_context
def comments(ctx, memory_id, pages):
    """Show the comment thread of MEMORY_ID."""
    config = _require_config(ctx)
    store = asyncio.run(_load_thread(config, memory_id, pages))

    from .comments import ThreadState
    from .render import render_thread

    if store.state is not ThreadState.LOADED:
        sys.exit(1)
    click.echo(render_thread(store.comments, store.total_count))
    if store.has_next:
        click.echo(f"More comments available (--pages {pages + 1}).", err=True)


async def _load_thread(config: AppConfig, memory_id: int, pages: int):
    from .comments import CommentThreadStore

    async with _client(config) as client:
        store = CommentThreadStore(
            client, memory_id, config.comments_page_size, notifier=_click_notifier
        )
        try:
            await store.expand()
            for _ in range(pages - 1):
                if not await store.load_more():
                    break
        finally:
            store.close()
        return store


@main.command()
@click.argument("memory_id", type=int)
@click.argument("content")
@click.option("--reply-to", type=int, default=None, help="Top-level comment id to reply to")
@click.pass_context
def comment(ctx, memory_id, content, reply_to):
    """Post CONTENT as a comment on MEMORY_ID."""
    config = _require_config(ctx)
    if not config.token:
        click.echo("Error: Posting comments needs a token. Run setup again.", err=True)
        sys.exit(1)
    if not content.strip():
        click.echo("Error: Comment must not be empty.", err=True)
        sys.exit(1)

    try:
        created, total = asyncio.run(
            _post_comment(config, memory_id, content, reply_to)
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if created is None:
        sys.exit(1)
    kind = "Reply" if reply_to is not None else "Comment"
    click.echo(f"{kind} #{created.id} posted on memory {memory_id}.")
    if total:
        click.echo(f"Memory {memory_id} now has {total} comments.")


async def _post_comment(config: AppConfig, memory_id: int, content: str, reply_to: int | None):
    from .comments import CommentThreadStore

    async with _client(config) as client:
        store = CommentThreadStore(
            client, memory_id, config.comments_page_size, notifier=_click_notifier
        )
        try:
            if reply_to is None:
                created = await store.create_top_level(content)
            else:
                # Load the first page so a reply to a loaded reply can be refused
                await store.expand()
                created = await store.create_reply(reply_to, content)
            if created is None:
                return None, 0
            return created, await store.comments_count()
        finally:
            store.close()
