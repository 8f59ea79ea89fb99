"""Card data model: directions, resolution status and card generation."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Direction(Enum):
    """Swipe direction a card asks for."""
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class CardStatus(Enum):
    """Resolution state of a card. Set once, never reverted."""
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


# Cosmetic only; never read by game logic.
CARD_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
    "#F8C471", "#82E0AA", "#F1948A", "#85C1E9", "#D7BDE2",
    "#A3E4D7", "#F9E79F", "#FADBD8", "#D5DBDB", "#AED6F1",
]


@dataclass
class Card:
    """A single swipe target.

    Everything except ``status`` is fixed at creation. ``status`` moves from
    PENDING to CORRECT or INCORRECT exactly once via :meth:`resolve`.
    """
    id: str
    target_direction: Direction
    status: CardStatus = CardStatus.PENDING
    is_beat_match: bool = False
    color: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.status is not CardStatus.PENDING

    def resolve(self, correct: bool) -> bool:
        """Record the verdict. Returns False if the card was already resolved."""
        if self.resolved:
            return False
        self.status = CardStatus.CORRECT if correct else CardStatus.INCORRECT
        return True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "target_direction": self.target_direction.value,
            "status": self.status.value,
            "is_beat_match": self.is_beat_match,
            "color": self.color,
        }


class CardGenerator:
    """Produces fresh pending cards with a random direction and color."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def direction(self) -> Direction:
        return self._rng.choice(list(Direction))

    def card(self) -> Card:
        return Card(
            id=uuid.UUID(int=self._rng.getrandbits(128)).hex,
            target_direction=self.direction(),
            color=self._rng.choice(CARD_COLORS),
        )

    def cards(self, count: int) -> list[Card]:
        return [self.card() for _ in range(count)]
