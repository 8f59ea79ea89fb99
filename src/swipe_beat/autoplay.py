"""Scripted player for driving sessions without a human.

Feeds synthetic drag gestures into a session on a :class:`ManualClock`,
swiping the right way with probability ``accuracy`` and landing beat-match
swipes ``timing_jitter`` seconds (uniform, symmetric) around the beat.
Used by the CLI ``simulate`` commands and integration tests.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from swipe_beat.cards import Direction
from swipe_beat.clock import ManualClock
from swipe_beat.session import RhythmSession, SimpleSession
from swipe_beat.summary import SessionSummary

logger = logging.getLogger("swipe_beat.autoplay")

# Unit drag vectors in screen coordinates (y grows downward)
_VECTORS = {
    Direction.LEFT: (-1.0, 0.0),
    Direction.RIGHT: (1.0, 0.0),
    Direction.UP: (0.0, -1.0),
    Direction.DOWN: (0.0, 1.0),
}


class AutoPlayer:
    def __init__(
        self,
        accuracy: float = 1.0,
        timing_jitter: float = 0.0,
        swipe_distance: float = 160.0,
        swipe_velocity: float = 800.0,
        rng: Optional[random.Random] = None,
    ):
        self.accuracy = accuracy
        self.timing_jitter = timing_jitter
        self.swipe_distance = swipe_distance
        self.swipe_velocity = swipe_velocity
        self._rng = rng or random.Random()

    def choose(self, target: Direction) -> Direction:
        """Target direction, or a wrong one with probability ``1 - accuracy``."""
        if self._rng.random() < self.accuracy:
            return target
        return self._rng.choice([d for d in Direction if d is not target])

    def gesture(self, direction: Direction) -> tuple[float, float, float, float]:
        ux, uy = _VECTORS[direction]
        return (
            ux * self.swipe_distance,
            uy * self.swipe_distance,
            ux * self.swipe_velocity,
            uy * self.swipe_velocity,
        )

    def play_rhythm(
        self,
        session: RhythmSession,
        clock: ManualClock,
        step: Optional[float] = None,
        max_seconds: Optional[float] = None,
    ) -> Optional[SessionSummary]:
        """Run a rhythm session to completion. Returns None if it did not finish in time."""
        step = step or session.config.tick_interval
        limit = max_seconds if max_seconds is not None else session.beatmap.duration + 10.0

        session.start()
        while not session.tick():
            if session.now() > limit:
                logger.warning("Rhythm autoplay gave up at %.2fs", session.now())
                return None

            self._play_sequence(session, clock)
            clock.advance(step)

        return session.summary

    def _play_sequence(self, session: RhythmSession, clock: ManualClock):
        engine = session.engine
        index = engine.active_sequence_index
        # Stop at the sequence boundary; an early-loaded next sequence waits for the next tick.
        while engine.active_sequence_index == index:
            cards = engine.active_cards
            if engine.active_card_cursor >= len(cards):
                break
            card = cards[engine.active_card_cursor]
            if card.is_beat_match:
                beat = engine.active_sequence.beat_match.beat_time
                target = beat + self._rng.uniform(-self.timing_jitter, self.timing_jitter)
                if target > session.now():
                    clock.advance(target - session.now())
            if session.swipe(*self.gesture(self.choose(card.target_direction))) is None:
                break

    def play_simple(
        self,
        session: SimpleSession,
        clock: ManualClock,
        step: Optional[float] = None,
        max_ticks: int = 10_000,
    ) -> Optional[SessionSummary]:
        """Run a simple-mode session to completion."""
        step = step or session.config.tick_interval

        session.start()
        for _ in range(max_ticks):
            if session.tick():
                return session.summary
            card = session.queue.current_card
            if card is not None and not session.queue.awaiting_advance:
                session.swipe(*self.gesture(self.choose(card.target_direction)))
            clock.advance(step)

        logger.warning("Simple autoplay gave up after %d ticks", max_ticks)
        return None
