"""Progress-window projection for the card indicator strip.

Pure functions over a snapshot of cards; nothing here is retained between
calls or mutates its input.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from swipe_beat.beatmap import Beatmap
from swipe_beat.cards import Card
from swipe_beat.engine import EngineSnapshot

MAX_VISIBLE = 6


class DisplayStatus(Enum):
    CURRENT = "current"
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class DisplayCard:
    """One slot of the progress window.

    ``display_index`` is the 1-based position in the full collection, or -1
    for placeholders.
    """
    id: str
    status: DisplayStatus
    display_index: int

    @property
    def interactive(self) -> bool:
        return self.status is not DisplayStatus.PLACEHOLDER


def window_start(total: int, current_index: int, max_visible: int = MAX_VISIBLE) -> int:
    """First absolute index shown, centered on ``current_index`` and clamped to the end."""
    start = max(0, current_index - max_visible // 2)
    if start + max_visible > total:
        start = max(0, total - max_visible)
    return start


def project(cards: Sequence[Card], current_index: int, max_visible: int = MAX_VISIBLE) -> list[DisplayCard]:
    """Build exactly ``max_visible`` display slots, padding with placeholders."""
    start = window_start(len(cards), current_index, max_visible)

    window: list[DisplayCard] = []
    for offset, card in enumerate(cards[start:start + max_visible]):
        index = start + offset
        if index == current_index:
            status = DisplayStatus.CURRENT
        else:
            status = DisplayStatus(card.status.value)
        window.append(DisplayCard(id=str(card.id), status=status, display_index=index + 1))

    while len(window) < max_visible:
        window.append(DisplayCard(
            id=f"placeholder-{len(window)}",
            status=DisplayStatus.PLACEHOLDER,
            display_index=-1,
        ))

    return window


def project_snapshot(snapshot: EngineSnapshot, max_visible: int = MAX_VISIBLE) -> list[DisplayCard]:
    """Progress window over the engine's loaded sequence."""
    return project(snapshot.active_cards, snapshot.active_card_cursor, max_visible)


def waiting_progress(snapshot: EngineSnapshot, beatmap: Beatmap) -> Optional[float]:
    """Fraction of the gap to the next sequence already elapsed, in [0, 1].

    None unless the engine is waiting between sequences with an anchor set.
    """
    anchor = snapshot.waiting_anchor_time
    if anchor is None:
        return None
    upcoming = beatmap.sequence(snapshot.active_sequence_index)
    if upcoming is None:
        return None

    span = upcoming.time - anchor
    if span <= 0:
        return 1.0
    return min(1.0, max(0.0, (snapshot.clock_seconds - anchor) / span))
