"""Rhythm-mode sequence engine.

Drives a beatmap through a linear state machine::

    Ready ──(clock >= start_offset)──▶ Playing ──(no sequences left)──▶ Completed

While Playing, the engine is always in exactly one of two sub-states: a
sequence's cards are loaded (``ActiveSequence``) or it is waiting for the
next sequence's start time (``Waiting``). Each phase carries its own payload
so impossible combinations (cards loaded while Ready, a countdown while
Completed, ...) cannot be represented.

The engine is fed by two inputs, both serialized by the owning session:

- ``tick(clock_seconds)``: advance the music clock; loads due sequences and
  detects completion.
- ``apply_swipe(direction, wall_clock_ms)``: resolve the card under the
  cursor. Ordinary cards only need the right direction. The trailing
  beat-match card additionally needs the swipe to land within
  ``beat_match_tolerance`` seconds of the sequence's ``beat_time``; only
  beat-match cards touch the score.

Invalid input (swipes with no card loaded, clock going backwards) is a
no-op, never an exception.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Optional, Union

from swipe_beat.beatmap import Beatmap, Sequence
from swipe_beat.cards import Card, Direction
from swipe_beat.summary import SessionSummary

logger = logging.getLogger("swipe_beat.engine")

BEAT_MATCH_TOLERANCE = 0.2


class Phase(Enum):
    READY = "ready"
    PLAYING = "playing"
    COMPLETED = "completed"


@dataclass
class Score:
    hits: int = 0
    misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses


# --- Phase payloads ---

@dataclass(frozen=True)
class Ready:
    """Waiting for the intro to pass."""


@dataclass
class ActiveSequence:
    """Playing, with one sequence's cards loaded."""
    sequence: Sequence
    cards: list[Card]
    cursor: int = 0

    @property
    def current_card(self) -> Optional[Card]:
        if 0 <= self.cursor < len(self.cards):
            return self.cards[self.cursor]
        return None


@dataclass(frozen=True)
class Waiting:
    """Playing, between sequences.

    ``anchor_time`` is the clock value when the previous sequence finished;
    it is None before the first sequence and once no sequences remain.
    """
    anchor_time: Optional[float] = None


@dataclass(frozen=True)
class Completed:
    summary: SessionSummary


EngineState = Union[Ready, ActiveSequence, Waiting, Completed]


@dataclass(frozen=True)
class EngineEvent:
    """Notification of a state change, delivered to ``on_event`` callbacks."""
    type: str  # "phase", "sequence", "card"
    name: str
    clock_seconds: float
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CardResolution:
    """Result of applying one swipe to the card under the cursor."""
    card: Card
    direction: Direction
    correct: bool
    sequence_index: int
    timing_delta: Optional[float] = None  # swipe time minus beat_time, beat-match cards only

    @property
    def is_beat_match(self) -> bool:
        return self.card.is_beat_match


@dataclass(frozen=True)
class EngineSnapshot:
    """Read-only copy of engine state for display code."""
    phase: Phase
    clock_seconds: float
    countdown: int
    active_sequence_index: int
    active_cards: tuple[Card, ...]
    active_card_cursor: int
    waiting_anchor_time: Optional[float]
    hits: int
    misses: int
    summary: Optional[SessionSummary] = None


class SequenceEngine:
    """State machine for one rhythm session. Owns and mutates its state exclusively."""

    def __init__(self, beatmap: Beatmap, beat_match_tolerance: float = BEAT_MATCH_TOLERANCE):
        beatmap.validate()
        self.beatmap = beatmap
        self.beat_match_tolerance = beat_match_tolerance

        self._state: EngineState = Ready()
        self._clock_seconds = 0.0
        self._sequence_index = 0
        self.score = Score()
        self._callbacks: list[Callable[[EngineEvent], None]] = []

    def on_event(self, callback: Callable[[EngineEvent], None]):
        """Register a callback for phase changes, sequence loads and card resolutions."""
        self._callbacks.append(callback)

    # --- Read-only views ---

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def phase(self) -> Phase:
        if isinstance(self._state, Ready):
            return Phase.READY
        if isinstance(self._state, Completed):
            return Phase.COMPLETED
        return Phase.PLAYING

    @property
    def clock_seconds(self) -> float:
        return self._clock_seconds

    @property
    def active_sequence_index(self) -> int:
        return self._sequence_index

    @property
    def active_sequence(self) -> Optional[Sequence]:
        if isinstance(self._state, ActiveSequence):
            return self._state.sequence
        return None

    @property
    def active_cards(self) -> list[Card]:
        if isinstance(self._state, ActiveSequence):
            return list(self._state.cards)
        return []

    @property
    def active_card_cursor(self) -> int:
        if isinstance(self._state, ActiveSequence):
            return self._state.cursor
        return 0

    @property
    def waiting_anchor_time(self) -> Optional[float]:
        if isinstance(self._state, Waiting):
            return self._state.anchor_time
        return None

    @property
    def countdown(self) -> int:
        """Whole seconds left before play starts. Informational only."""
        return math.ceil(max(0.0, self.beatmap.start_offset - self._clock_seconds))

    @property
    def summary(self) -> Optional[SessionSummary]:
        if isinstance(self._state, Completed):
            return self._state.summary
        return None

    @property
    def completed(self) -> bool:
        return isinstance(self._state, Completed)

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            phase=self.phase,
            clock_seconds=self._clock_seconds,
            countdown=self.countdown,
            active_sequence_index=self._sequence_index,
            active_cards=tuple(replace(c) for c in self.active_cards),
            active_card_cursor=self.active_card_cursor,
            waiting_anchor_time=self.waiting_anchor_time,
            hits=self.score.hits,
            misses=self.score.misses,
            summary=self.summary,
        )

    # --- Inputs ---

    def tick(self, clock_seconds: float) -> Phase:
        """Advance the music clock and run any due transitions. Returns the phase."""
        if isinstance(self._state, Completed):
            return Phase.COMPLETED

        if clock_seconds < self._clock_seconds:
            logger.warning(
                "Clock regression ignored: %.3fs after %.3fs", clock_seconds, self._clock_seconds
            )
            return self.phase

        self._clock_seconds = clock_seconds

        if isinstance(self._state, Ready):
            if clock_seconds < self.beatmap.start_offset:
                return Phase.READY
            self._state = Waiting()
            logger.info("Playing at %.2fs", clock_seconds)
            self._emit("phase", Phase.PLAYING.value)

        if isinstance(self._state, Waiting):
            upcoming = self.beatmap.sequence(self._sequence_index)
            if upcoming is None:
                self._complete()
            elif clock_seconds >= upcoming.time:
                self._load(self._sequence_index)

        return self.phase

    def apply_swipe(self, direction: Direction, wall_clock_ms: float) -> Optional[CardResolution]:
        """Resolve the card under the cursor. Returns None if there is no such card."""
        state = self._state
        if not isinstance(state, ActiveSequence):
            logger.debug("Swipe %s ignored in %s", direction.value, self.phase.value)
            return None

        card = state.current_card
        if card is None:
            logger.debug("Swipe %s ignored: cursor %d out of range", direction.value, state.cursor)
            return None

        direction_match = card.target_direction == direction
        timing_delta = None
        if card.is_beat_match:
            timing_delta = wall_clock_ms / 1000.0 - state.sequence.beat_match.beat_time
            correct = direction_match and abs(timing_delta) <= self.beat_match_tolerance
            if correct:
                self.score.hits += 1
            else:
                self.score.misses += 1
        else:
            correct = direction_match

        card.resolve(correct)
        state.cursor += 1

        resolution = CardResolution(
            card=replace(card),
            direction=direction,
            correct=correct,
            sequence_index=self._sequence_index,
            timing_delta=timing_delta,
        )
        self._emit("card", card.status.value, card_id=card.id, beat_match=card.is_beat_match,
                   timing_delta=timing_delta)

        if state.cursor >= len(state.cards):
            self._finish_sequence()

        return resolution

    # --- Internals ---

    def _load(self, index: int):
        seq = self.beatmap.sequences[index]
        cards = [
            Card(id=f"s{index}-c{i}", target_direction=d)
            for i, d in enumerate(seq.pattern)
        ]
        cards.append(Card(
            id=f"s{index}-beat",
            target_direction=seq.beat_match.direction,
            is_beat_match=True,
        ))
        self._state = ActiveSequence(sequence=seq, cards=cards)
        logger.info("Loaded sequence %d (%d cards) at %.2fs", index, len(cards), self._clock_seconds)
        self._emit("sequence", "loaded", index=index, cards=len(cards))

    def _finish_sequence(self):
        finished = self._sequence_index
        self._sequence_index += 1
        self._emit("sequence", "finished", index=finished)

        upcoming = self.beatmap.sequence(self._sequence_index)
        if upcoming is not None and self._clock_seconds >= upcoming.time:
            self._load(self._sequence_index)
        elif upcoming is not None:
            self._state = Waiting(anchor_time=self._clock_seconds)
        else:
            self._state = Waiting()

    def _complete(self):
        summary = SessionSummary(
            duration_seconds=self._clock_seconds,
            success_count=self.score.hits,
            failed_count=self.score.misses,
            total_cards=len(self.beatmap),
        )
        self._state = Completed(summary)
        logger.info(
            "Rhythm session complete at %.2fs: %d hits, %d misses",
            self._clock_seconds, self.score.hits, self.score.misses,
        )
        self._emit("phase", Phase.COMPLETED.value, **summary.to_dict())

    def _emit(self, event_type: str, name: str, **data):
        event = EngineEvent(type=event_type, name=name, clock_seconds=self._clock_seconds, data=data)
        for cb in self._callbacks:
            try:
                cb(event)
            except Exception as e:
                logger.error("Engine callback error on %s/%s: %s", event_type, name, e)
