"""Autocomplete suggestions behind a debounced query.

The server may return the same text once per match type (a title and a
hashtag that both read "seoul"). ``aggregate`` folds those into a single
entry. Every batch is aggregated on its own; nothing carries over from
the previous query.
"""

import asyncio
import logging

import httpx

from .client import ApiError, JournalClient
from .models import AggregatedSuggestion, Suggestion
from .scope import CancelScope

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
DEFAULT_DEBOUNCE = 1.0


def aggregate(suggestions: list[Suggestion]) -> list[AggregatedSuggestion]:
    """Collapse suggestions sharing a text, best score first.

    Ties keep first-seen order.
    """
    merged: dict[str, AggregatedSuggestion] = {}
    for s in suggestions:
        entry = merged.get(s.text)
        if entry is None:
            merged[s.text] = AggregatedSuggestion(
                text=s.text,
                type_tags=[s.type],
                total_match_count=s.match_count,
                max_score=s.score,
            )
            continue
        if s.type not in entry.type_tags:
            entry.type_tags.append(s.type)
        entry.total_match_count += s.match_count
        entry.max_score = max(entry.max_score, s.score)

    return sorted(merged.values(), key=lambda a: a.max_score, reverse=True)


class AutocompleteSession:
    """Debounces keystrokes into autocomplete requests.

    Each keystroke cancels the pending lookup; only input that stays
    unchanged for ``debounce`` seconds reaches the server.
    """

    def __init__(
        self,
        client: JournalClient,
        limit: int = DEFAULT_LIMIT,
        debounce: float = DEFAULT_DEBOUNCE,
        scope: CancelScope | None = None,
    ):
        self._client = client
        self.limit = limit
        self.debounce = debounce
        self._scope = scope or CancelScope("autocomplete")
        self._pending: asyncio.Task | None = None
        self.query = ""
        self.suggestions: list[AggregatedSuggestion] = []
        self.error: str | None = None
        self.loading = False

    def type(self, text: str) -> asyncio.Task | None:
        """Record new input; schedule a lookup once typing settles."""
        self._cancel_pending()
        self.query = text
        if not text.strip():
            self.clear()
            return None
        if self._scope.closed:
            return None
        self._pending = self._scope.spawn(self._debounced(text))
        return self._pending

    async def _debounced(self, text: str) -> None:
        await asyncio.sleep(self.debounce)
        await self.lookup(text)

    async def lookup(self, text: str) -> bool:
        """Fetch suggestions for ``text`` now and replace the current ones."""
        if not text.strip():
            self.clear()
            return False

        self.loading = True
        self.error = None
        try:
            batch = await self._client.autocomplete(text, self.limit)
        except (httpx.HTTPError, ApiError) as e:
            logger.error("Autocomplete for %r failed: %s", text, e)
            if not self._scope.closed:
                self.error = "Autocomplete failed."
                self.suggestions = []
            return False
        finally:
            self.loading = False

        if self._scope.closed:
            return False
        self.suggestions = aggregate(batch)
        logger.debug(
            "Autocomplete %r: %d raw, %d aggregated",
            text,
            len(batch),
            len(self.suggestions),
        )
        return True

    def clear(self) -> None:
        self.suggestions = []
        self.error = None

    def _cancel_pending(self) -> None:
        if self._pending and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def close(self) -> None:
        self._cancel_pending()
        self._scope.close()
