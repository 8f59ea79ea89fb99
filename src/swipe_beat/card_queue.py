"""Rolling card queue for simple (non-rhythm) mode.

The player works through a queue of randomly generated cards one at a time.
Swiping resolves the current card immediately; moving on to the next card
happens in a separate :meth:`CardQueue.advance` step that the session fires
after a short exit-animation delay. The queue starts with a handful of cards
and tops itself up while fewer than ``refill_lookahead`` remain ahead, until
``max_cards`` cards exist in total.
"""

from __future__ import annotations

import logging
from typing import Optional

from swipe_beat.cards import Card, CardGenerator, Direction
from swipe_beat.summary import SessionSummary

logger = logging.getLogger("swipe_beat.card_queue")

MAX_CARDS = 20


class CardQueue:
    def __init__(
        self,
        max_cards: int = MAX_CARDS,
        initial_cards: int = 10,
        refill_lookahead: int = 3,
        generator: Optional[CardGenerator] = None,
    ):
        if refill_lookahead < 1:
            raise ValueError(f"refill_lookahead must be at least 1, got {refill_lookahead}")
        self.max_cards = max_cards
        self.initial_cards = initial_cards
        self.refill_lookahead = refill_lookahead
        self._generator = generator or CardGenerator()
        self._reset_state(0.0)

    def _reset_state(self, now: float):
        self.cards: list[Card] = self._generator.cards(min(self.initial_cards, self.max_cards))
        self.current_index = 0
        self.success_count = 0
        self.failed_count = 0
        self._start_time = now
        self._awaiting_advance = False
        self._summary: Optional[SessionSummary] = None

    def start(self, now: float = 0.0):
        """Mark the session start time used for the summary duration."""
        self._start_time = now

    def reset(self, now: float = 0.0):
        """Throw away all progress and deal a fresh queue."""
        self._reset_state(now)

    @property
    def current_card(self) -> Optional[Card]:
        if 0 <= self.current_index < len(self.cards):
            return self.cards[self.current_index]
        return None

    @property
    def awaiting_advance(self) -> bool:
        """True between resolving a card and the advance that follows it."""
        return self._awaiting_advance

    @property
    def completed(self) -> bool:
        return self._summary is not None

    @property
    def summary(self) -> Optional[SessionSummary]:
        return self._summary

    @property
    def unresolved_ahead(self) -> int:
        return sum(1 for card in self.cards[self.current_index:] if not card.resolved)

    def apply_swipe(self, direction: Direction) -> Optional[Card]:
        """Resolve the current card against ``direction``.

        Returns the resolved card, or None when there is nothing to resolve
        (session over, index past the end, or an advance still pending).
        """
        if self.completed or self._awaiting_advance:
            logger.debug("Ignoring swipe %s: queue not ready", direction.value)
            return None

        card = self.current_card
        if card is None:
            logger.debug("Ignoring swipe %s: no card at index %d", direction.value, self.current_index)
            return None

        correct = card.target_direction == direction
        if not card.resolve(correct):
            return None

        if correct:
            self.success_count += 1
        else:
            self.failed_count += 1
        self._awaiting_advance = True
        return card

    def advance(self, now: Optional[float] = None) -> bool:
        """Move past the current card. Returns True once the session is complete."""
        if self.completed:
            return True

        self._awaiting_advance = False
        self.current_index += 1

        if self.current_index >= self.max_cards:
            end = now if now is not None else self._start_time
            self._summary = SessionSummary(
                duration_seconds=max(0.0, end - self._start_time),
                success_count=self.success_count,
                failed_count=self.failed_count,
                total_cards=self.max_cards,
            )
            logger.info(
                "Simple session complete: %d correct, %d incorrect",
                self.success_count, self.failed_count,
            )
            return True

        if self.unresolved_ahead < self.refill_lookahead and len(self.cards) < self.max_cards:
            self.cards.append(self._generator.card())

        return False
