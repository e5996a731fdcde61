"""Deferred callbacks keyed on the race clock."""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledCall:
    """Handle for a pending callback; ``cancel()`` prevents it from running."""

    due: float
    sequence: int
    label: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False, repr=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Runs callbacks once the race clock passes their due time.

    Times are absolute milliseconds, so transitions stay correct under a
    variable frame rate. Callbacks due at the same time run in scheduling
    order.
    """

    def __init__(self) -> None:
        self._queue: list[ScheduledCall] = []
        self._counter = itertools.count()

    def schedule(self, due: float, callback: Callable[[], None], label: str = "") -> ScheduledCall:
        """Schedule ``callback`` to run at race time ``due`` (ms)."""
        call = ScheduledCall(due=due, sequence=next(self._counter), label=label, callback=callback)
        heapq.heappush(self._queue, call)
        return call

    def run_due(self, now: float) -> int:
        """Run every pending callback due at or before ``now``.

        Callbacks scheduled by a running callback are picked up in the same
        pass when they are already due.

        Returns:
            Number of callbacks executed
        """
        executed = 0
        while self._queue and self._queue[0].due <= now:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            logger.debug("Running scheduled %s (due %.1f ms)", call.label or "callback", call.due)
            call.callback()
            executed += 1
        return executed

    def cancel_all(self) -> int:
        """Cancel every pending callback.

        Returns:
            Number of callbacks cancelled
        """
        pending = sum(1 for call in self._queue if not call.cancelled)
        for call in self._queue:
            call.cancel()
        self._queue.clear()
        return pending

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)
