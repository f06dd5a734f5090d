"""Turn sentinel visibility changes into "load more" requests.

A screen places a sentinel after the last item of a list and reports how
much of it is visible (a ratio between 0 and 1) whenever that changes.
When the sentinel crosses into the visible region the bridge asks its
target for more items, provided the target says it can load right now.

The bridge holds a reference to a long-lived target object rather than a
snapshot of its state, so the guard and the cursor are always read from
the target's current fields at the moment the transition happens.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Fraction of the sentinel that must be visible before a fetch is requested.
VISIBILITY_THRESHOLD = 0.9


class LoadMoreTarget(Protocol):
    def can_load_more(self) -> bool:
        ...

    def request_more(self) -> Any:
        ...


class VisibilityBridge:
    def __init__(self, target: LoadMoreTarget, threshold: float = VISIBILITY_THRESHOLD):
        if not 0.0 < threshold <= 1.0:
            raise ValueError(f"threshold must be in (0, 1], got {threshold}")
        self._target = target
        self.threshold = threshold
        self._visible = False
        self._disposed = False
        self.triggered = 0

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def visible(self) -> bool:
        return self._visible

    def observe(self, ratio: float) -> Any:
        """Record a visibility observation for the sentinel.

        Returns whatever the target's ``request_more`` returned (usually a
        task) when a fetch was requested, otherwise None.
        """
        if self._disposed:
            return None

        was_visible = self._visible
        self._visible = ratio >= self.threshold
        if not self._visible or was_visible:
            return None

        if not self._target.can_load_more():
            logger.debug("Sentinel visible but target cannot load more")
            return None

        self.triggered += 1
        return self._target.request_more()

    def dispose(self) -> None:
        """Stop reacting to observations. Safe to call more than once."""
        self._disposed = True
        self._visible = False
