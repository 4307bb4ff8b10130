"""Debounced commit of free-text edits.

Each ``push`` replaces the pending value and restarts the delay; the commit
callback runs once the input has been quiet for ``delay`` seconds. Leaving
the ``async with`` block (or calling ``cancel``) drops a pending commit.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.5


class DebouncedCommit:
    def __init__(
        self,
        commit: Callable[[str], None],
        delay: float = DEFAULT_DELAY,
        label: str = "",
    ):
        self._commit = commit
        self.delay = delay
        self.label = label              # names the edited field in log messages
        self._pending: Optional[str] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> Optional[str]:
        """The buffered value not yet committed, if any."""
        return self._pending

    def push(self, value: str) -> None:
        """Buffer *value* and restart the delay. Needs a running event loop."""
        self._cancel_task()
        self._pending = value
        self._task = asyncio.get_running_loop().create_task(self._commit_later())

    async def _commit_later(self) -> None:
        await asyncio.sleep(self.delay)
        self._task = None
        # Unawaited task: commit failures stop here.
        try:
            self._fire()
        except Exception:
            logger.exception("Debounced commit failed for %s", self.label or "edit")

    def _fire(self) -> None:
        value, self._pending = self._pending, None
        if value is not None:
            self._commit(value)

    def flush(self) -> None:
        """Commit the pending value now instead of waiting."""
        self._cancel_task()
        self._fire()

    def cancel(self) -> None:
        """Drop the pending value without committing it."""
        self._cancel_task()
        if self._pending is not None:
            logger.debug("Discarding uncommitted edit %r", self._pending)
        self._pending = None

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def __aenter__(self) -> DebouncedCommit:
        return self

    async def __aexit__(self, *args) -> None:
        self.cancel()
