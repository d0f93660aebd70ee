"""Rate limiting for scroll key events read from the terminal."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from .events import KeyInput

_RATE_LIMITED_KEYS = frozenset({"up", "down"})
_END = object()
_NO_EVENT = object()


async def _pull(iterator: AsyncIterator[Any]) -> Any:
    try:
        return await anext(iterator)
    except StopAsyncIteration:
        return _END


class RateLimitedEventStream:
    """Wraps an async stream of terminal events and throttles scroll keys.

    Up/down key events are emitted at most once per ``delay`` seconds, like a
    leading and trailing debouncer: the first is emitted at once, and of those
    arriving during the delay only the most recent is emitted when it ends.
    All other events pass straight through.
    """

    def __init__(self, source: AsyncIterable[Any], delay: float) -> None:
        self.delay = delay
        self._source = aiter(source)
        self._next: asyncio.Task[Any] | None = None
        self._deadline: float | None = None
        self._pending: Any = _NO_EVENT
        self._can_emit = True
        self._exhausted = False

    def should_rate_limit(self, event: Any) -> bool:
        """Whether ``event`` is subject to rate limiting (up/down keys)."""
        return isinstance(event, KeyInput) and event.key in _RATE_LIMITED_KEYS

    def __aiter__(self) -> RateLimitedEventStream:
        return self

    def _take_pending(self) -> Any:
        event, self._pending = self._pending, _NO_EVENT
        return event

    def _has_pending(self) -> bool:
        return self._pending is not _NO_EVENT

    def _start_timer(self, now: float) -> None:
        self._can_emit = False
        self._deadline = now + self.delay

    async def __anext__(self) -> Any:
        loop = asyncio.get_running_loop()
        while True:
            now = loop.time()
            if self._deadline is not None and now >= self._deadline:
                self._deadline = None
                self._can_emit = True
                if self._has_pending():
                    self._start_timer(now)
                    return self._take_pending()

            if self._exhausted:
                if self._has_pending():
                    return self._take_pending()
                raise StopAsyncIteration

            if self._next is None:
                self._next = asyncio.ensure_future(_pull(self._source))

            timeout = None
            if self._deadline is not None and self._has_pending():
                timeout = max(0.0, self._deadline - now)

            done, _ = await asyncio.wait({self._next}, timeout=timeout)
            if not done:
                continue

            task, self._next = self._next, None
            event = task.result()
            if event is _END:
                self._exhausted = True
                continue

            if not self.should_rate_limit(event):
                return event

            now = loop.time()
            if self._deadline is not None and now >= self._deadline:
                self._deadline = None
                self._can_emit = True
                if self._has_pending():
                    earlier = self._take_pending()
                    self._pending = event
                    self._start_timer(now)
                    return earlier

            if self._can_emit:
                self._start_timer(now)
                return event
            # Keep only the most recent event seen during the delay.
            self._pending = event