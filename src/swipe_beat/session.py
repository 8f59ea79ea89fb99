"""Game session drivers.

A session owns exactly one engine (rhythm mode) or card queue (simple mode)
plus its collaborators: a clock, an audio transport, a deferred-event
scheduler, metrics and plugins. Every mutation (ticks, swipes, scheduled
events) goes through one lock, so a tick-driven sequence load can never
interleave with a swipe.

Usage:
    session = RhythmSession(Beatmap.load("song.yml"))
    session.on_complete(lambda summary: print(summary.accuracy))
    asyncio.run(session.run())

    # from the input layer, once per finished drag:
    session.swipe(dx=-180, dy=12, vx=-900, vy=40)
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
from typing import Callable, Optional

from swipe_beat.beatmap import Beatmap
from swipe_beat.card_queue import CardQueue
from swipe_beat.cards import Card, CardGenerator, Direction
from swipe_beat.classifier import SwipeClassifier
from swipe_beat.clock import AudioTransport, Clock, MonotonicClock, NullTransport
from swipe_beat.config import GameConfig
from swipe_beat.engine import CardResolution, EngineEvent, EngineSnapshot, Phase, SequenceEngine
from swipe_beat.metrics import MetricsCollector
from swipe_beat.plugins import PluginEvent, PluginManager
from swipe_beat.progress import DisplayCard, project, project_snapshot, waiting_progress
from swipe_beat.scheduling import EventScheduler
from swipe_beat.summary import SessionSummary

logger = logging.getLogger("swipe_beat.session")


class GameSession:
    """Shared lifecycle for both game modes.

    Subclasses implement ``_on_tick``, ``_apply_direction``, ``summary`` and
    ``progress``.
    """

    mode = "base"

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        clock: Optional[Clock] = None,
        transport: Optional[AudioTransport] = None,
        metrics: Optional[MetricsCollector] = None,
        plugins: Optional[PluginManager] = None,
    ):
        self.config = config or GameConfig()
        self.clock = clock or MonotonicClock()
        self.transport = transport or NullTransport()
        self.metrics = metrics or MetricsCollector()
        self.plugins = plugins or PluginManager()
        self.classifier = SwipeClassifier(
            swipe_threshold=self.config.swipe_threshold,
            velocity_threshold=self.config.velocity_threshold,
        )
        self.scheduler = EventScheduler()

        self._lock = threading.RLock()
        self._origin = 0.0
        self._started = False
        self._closed = False
        self._finished = False
        self._complete_callbacks: list[Callable[[SessionSummary], None]] = []

    # --- Hooks for subclasses ---

    def _on_tick(self, now: float):
        raise NotImplementedError

    def _apply_direction(self, direction: Direction, now: float):
        raise NotImplementedError

    @property
    def summary(self) -> Optional[SessionSummary]:
        raise NotImplementedError

    def progress(self) -> list[DisplayCard]:
        raise NotImplementedError

    # --- Lifecycle ---

    def on_complete(self, callback: Callable[[SessionSummary], None]):
        """Register the result consumer. Called once, when the session completes."""
        self._complete_callbacks.append(callback)

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def completed(self) -> bool:
        return self.summary is not None

    def now(self) -> float:
        """Seconds since :meth:`start` on the session clock."""
        return self.clock.now() - self._origin

    def start(self):
        with self._lock:
            if self._started or self._closed:
                return
            self._origin = self.clock.now()
            self._started = True
            self.transport.seek_to_start()
            self.transport.play()
            self.plugins.startup({"session": self, "mode": self.mode})
            logger.info("%s session started", self.mode.capitalize())

    def close(self):
        """Tear down: cancel scheduled work, stop audio, ignore further input."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.scheduler.close()
            if self._started and not self._finished:
                self.transport.pause()
            self.plugins.shutdown()
            logger.info("%s session closed", self.mode.capitalize())

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.close()

    # --- Inputs ---

    def tick(self) -> bool:
        """Advance to the clock's current time. Returns True once completed."""
        with self._lock:
            if self._closed or not self._started:
                logger.debug("Tick ignored: session not running")
                return self.completed

            t0 = time.perf_counter()
            now = self.now()
            self._on_tick(now)
            self.scheduler.run_due(now)
            self.metrics.record_tick(time.perf_counter() - t0)

            self._check_finished()
            return self.completed

    def swipe(self, dx: float, dy: float, vx: float = 0.0, vy: float = 0.0):
        """Classify one terminal drag sample and apply it."""
        with self._lock:
            if self._closed or not self._started:
                logger.debug("Swipe ignored: session not running")
                return None

            result = self.classifier.classify(dx, dy, vx, vy)
            if not result.swiped:
                self.metrics.record_no_swipe()
                self._dispatch_swipe("none")
                return None
            return self._apply_swipe(result.direction)

    def swipe_direction(self, direction: Direction):
        """Apply an already-classified swipe."""
        with self._lock:
            if self._closed or not self._started:
                logger.debug("Swipe ignored: session not running")
                return None
            return self._apply_swipe(direction)

    async def run(self, tick_interval: Optional[float] = None):
        """Tick on a fixed period until completed or closed, then tear down."""
        interval = tick_interval or self.config.tick_interval
        self.start()
        try:
            while not self._closed:
                if self.tick():
                    break
                await asyncio.sleep(interval)
        finally:
            self.close()

    # --- Internals ---

    def _apply_swipe(self, direction: Direction):
        # Only swipes that resolve a card are counted as swipes.
        outcome = self._apply_direction(direction, self.now())
        if outcome is None:
            self.metrics.record_ignored_swipe()
            logger.debug("Swipe %s ignored: nothing to resolve", direction.value)
            return None
        self.metrics.record_swipe(direction.value)
        self._dispatch_swipe(direction.value)
        return outcome

    def _dispatch_swipe(self, name: str):
        self.plugins.dispatch("swipe", PluginEvent(type="swipe", name=name, timestamp=self.now()))

    def _record_card(self, card: Card, data: Optional[dict] = None):
        self.metrics.record_card(card.status.value, beat_match=card.is_beat_match)
        payload = {"card_id": card.id, "beat_match": card.is_beat_match, **(data or {})}
        self.plugins.dispatch(
            "card", PluginEvent(type="card", name=card.status.value, data=payload, timestamp=self.now())
        )

    def _check_finished(self):
        summary = self.summary
        if summary is None or self._finished:
            return
        self._finished = True
        self.transport.pause()
        self.metrics.record_session_completed(self.mode)
        self.plugins.dispatch(
            "complete",
            PluginEvent(type="complete", name=self.mode, data=summary.to_dict(), timestamp=self.now()),
        )
        for cb in self._complete_callbacks:
            try:
                cb(summary)
            except Exception as e:
                logger.error("Result consumer error: %s", e)


class RhythmSession(GameSession):
    """Beatmap-driven session around a :class:`SequenceEngine`."""

    mode = "rhythm"

    def __init__(self, beatmap: Beatmap, config: Optional[GameConfig] = None, **kwargs):
        super().__init__(config=config, **kwargs)
        self.beatmap = beatmap
        self.engine = SequenceEngine(beatmap, beat_match_tolerance=self.config.beat_match_tolerance)
        self.engine.on_event(self._on_engine_event)

    @property
    def phase(self) -> Phase:
        return self.engine.phase

    @property
    def summary(self) -> Optional[SessionSummary]:
        return self.engine.summary

    def snapshot(self) -> EngineSnapshot:
        with self._lock:
            return self.engine.snapshot()

    def progress(self) -> list[DisplayCard]:
        return project_snapshot(self.snapshot(), self.config.max_visible)

    def waiting_progress(self) -> Optional[float]:
        return waiting_progress(self.snapshot(), self.beatmap)

    def _on_tick(self, now: float):
        if now < self.engine.clock_seconds:
            self.metrics.record_clock_regression()
        self.engine.tick(now)

    def _apply_direction(self, direction: Direction, now: float) -> Optional[CardResolution]:
        # Completion after the final card is picked up by the next tick.
        return self.engine.apply_swipe(direction, now * 1000.0)

    def _on_engine_event(self, event: EngineEvent):
        if event.type == "card":
            self.metrics.record_card(event.name, beat_match=bool(event.data.get("beat_match")))
            logger.debug("Card %s resolved %s", event.data.get("card_id"), event.name)
        if event.type in ("card", "sequence", "phase"):
            self.plugins.dispatch(
                event.type,
                PluginEvent(type=event.type, name=event.name, data=dict(event.data), timestamp=event.clock_seconds),
            )


class SimpleSession(GameSession):
    """Card-queue session with deferred advancement after each swipe."""

    mode = "simple"

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        **kwargs,
    ):
        super().__init__(config=config, **kwargs)
        self.queue = CardQueue(
            max_cards=self.config.max_cards,
            initial_cards=self.config.initial_cards,
            refill_lookahead=self.config.refill_lookahead,
            generator=CardGenerator(rng),
        )

    @property
    def summary(self) -> Optional[SessionSummary]:
        return self.queue.summary

    def start(self):
        super().start()
        self.queue.start(0.0)

    def progress(self) -> list[DisplayCard]:
        with self._lock:
            return project(self.queue.cards, self.queue.current_index, self.config.max_visible)

    def _on_tick(self, now: float):
        pass

    def _apply_direction(self, direction: Direction, now: float) -> Optional[Card]:
        card = self.queue.apply_swipe(direction)
        if card is None:
            return None
        self._record_card(card)
        self.scheduler.schedule(now, self.config.advance_delay, self._advance, name="advance")
        return card

    def _advance(self):
        self.queue.advance(self.now())
