"""Clock sources and audio transport collaborators.

The core only needs "seconds since session start" and a fire-and-forget
play/pause/seek control. Real front ends plug in their audio player here;
tests and the CLI use :class:`ManualClock` and :class:`NullTransport`.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

logger = logging.getLogger("swipe_beat.clock")


class Clock(Protocol):
    def now(self) -> float:
        """Elapsed seconds since session start. Never decreases."""
        ...


class AudioTransport(Protocol):
    def seek_to_start(self) -> None: ...
    def play(self) -> None: ...
    def pause(self) -> None: ...


class MonotonicClock:
    """Wall clock based on ``time.monotonic``, zeroed at construction or :meth:`restart`."""

    def __init__(self):
        self._origin = time.monotonic()

    def restart(self):
        self._origin = time.monotonic()

    def now(self) -> float:
        return time.monotonic() - self._origin


class ManualClock:
    """Clock advanced explicitly. Used for simulation and tests."""

    def __init__(self, start: float = 0.0):
        self._now = start

    def now(self) -> float:
        return self._now

    def set(self, seconds: float):
        self._now = seconds

    def advance(self, seconds: float) -> float:
        self._now += seconds
        return self._now


class NullTransport:
    """Audio transport that only logs. Tracks state for inspection."""

    def __init__(self, name: Optional[str] = None):
        self.name = name or "null"
        self.playing = False
        self.calls: list[str] = []

    def seek_to_start(self):
        self.calls.append("seek_to_start")
        logger.debug("[%s] seek to start", self.name)

    def play(self):
        self.calls.append("play")
        self.playing = True
        logger.debug("[%s] play", self.name)

    def pause(self):
        self.calls.append("pause")
        self.playing = False
        logger.debug("[%s] pause", self.name)
