"""Deferred events driven by the session clock.

Sessions never start detached timers. Work that must happen "a bit later"
(e.g. advancing the card queue after the exit animation) is queued here and
fired by the session's own tick, so it runs on the same serialized path as
every other mutation. Tearing the session down cancels whatever is pending.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger("swipe_beat.scheduling")


@dataclass(order=True)
class ScheduledEvent:
    """A callback due at ``due`` seconds on the session clock."""
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    name: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)
    fired: bool = field(default=False, compare=False)

    def cancel(self):
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class EventScheduler:
    """Min-heap of scheduled events, fired in due order by :meth:`run_due`."""

    def __init__(self):
        self._queue: list[ScheduledEvent] = []
        self._counter = itertools.count()
        self._closed = False

    def schedule(self, now: float, delay: float, callback: Callable[[], None], name: str = "") -> ScheduledEvent:
        """Queue ``callback`` to fire once the clock reaches ``now + delay``."""
        event = ScheduledEvent(due=now + max(0.0, delay), seq=next(self._counter), callback=callback, name=name)
        if self._closed:
            event.cancel()
            logger.debug("Scheduler closed, dropping %s", name or "event")
            return event
        heapq.heappush(self._queue, event)
        return event

    def run_due(self, now: float) -> int:
        """Fire every pending event with ``due <= now``. Returns the number fired."""
        fired = 0
        while self._queue and self._queue[0].due <= now:
            event = heapq.heappop(self._queue)
            if event.cancelled:
                continue
            event.fired = True
            event.callback()
            fired += 1
        return fired

    def cancel_all(self):
        for event in self._queue:
            event.cancel()
        self._queue.clear()

    def close(self):
        """Cancel everything and refuse new events."""
        self.cancel_all()
        self._closed = True

    @property
    def pending_count(self) -> int:
        return sum(1 for e in self._queue if e.pending)

    @property
    def next_due(self) -> float | None:
        for event in sorted(self._queue):
            if event.pending:
                return event.due
        return None
