"""Keyed debouncer on the asyncio event loop.

Each key owns one timer. Submitting again under the same key cancels the
pending timer, so only the last submission in a quiet window is delivered.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Delivers the last item submitted per key after ``delay`` seconds of quiet.

    Example:
        ```python
        queue: asyncio.Queue[str] = asyncio.Queue()
        debouncer = Debouncer(0.5, queue.put_nowait)
        debouncer.submit("template", "{{hello}}")
        ```
    """

    def __init__(self, delay: float, deliver: Callable[[T], None]) -> None:
        """Initialize the debouncer.

        Args:
            delay: Quiet period in seconds before an item is delivered.
            deliver: Called with the settled item on the event loop.
        """
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self._delay = delay
        self._deliver = deliver
        self._timers: dict[str, asyncio.Task[None]] = {}

    @property
    def delay(self) -> float:
        return self._delay

    def submit(self, key: str, item: T) -> None:
        """Schedule ``item`` for delivery, replacing any pending item for ``key``.

        Must be called from a running event loop.
        """
        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._timers[key] = loop.create_task(self._settle(key, item))

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for ``key``.

        Returns:
            True if a pending timer was cancelled.
        """
        timer = self._timers.pop(key, None)
        if timer is None or timer.done():
            return False
        timer.cancel()
        logger.debug(f"Debounce timer reset: {key}")
        return True

    def cancel_matching(self, predicate: Callable[[str], bool]) -> int:
        """Cancel every pending timer whose key satisfies ``predicate``."""
        return sum(self.cancel(key) for key in [k for k in self._timers if predicate(k)])

    def cancel_all(self) -> int:
        return self.cancel_matching(lambda _: True)

    def is_pending(self, key: str | None = None) -> bool:
        """Whether a timer is pending for ``key``, or for any key if None."""
        if key is not None:
            timer = self._timers.get(key)
            return timer is not None and not timer.done()
        return any(not timer.done() for timer in self._timers.values())

    def pending_timers(self) -> list[asyncio.Task[None]]:
        return [timer for timer in self._timers.values() if not timer.done()]

    async def _settle(self, key: str, item: T) -> None:
        await asyncio.sleep(self._delay)
        # No await past this point: a cancelled timer delivers nothing.
        if self._timers.get(key) is asyncio.current_task():
            del self._timers[key]
        self._deliver(item)
