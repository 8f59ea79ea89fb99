"""Tests for the progress-window projection."""

import random

import pytest

from swipe_beat.beatmap import Beatmap
from swipe_beat.cards import Card, CardGenerator, CardStatus, Direction
from swipe_beat.engine import SequenceEngine
from swipe_beat.progress import (
    DisplayStatus,
    project,
    project_snapshot,
    waiting_progress,
    window_start,
)


def make_cards(n):
    return CardGenerator(random.Random(1)).cards(n)


class TestWindow:
    @pytest.mark.parametrize("current, expected", [
        (0, [1, 2, 3, 4, 5, 6]),
        (5, [3, 4, 5, 6, 7, 8]),
        (9, [5, 6, 7, 8, 9, 10]),
    ])
    def test_window_positions(self, current, expected):
        window = project(make_cards(10), current, 6)
        assert [d.display_index for d in window] == expected

    def test_current_marked(self):
        cards = make_cards(10)
        window = project(cards, 5, 6)
        current = [d for d in window if d.status == DisplayStatus.CURRENT]
        assert len(current) == 1
        assert current[0].id == cards[5].id
        assert current[0].display_index == 6

    def test_resolved_statuses_carried(self):
        cards = make_cards(4)
        cards[0].resolve(True)
        cards[1].resolve(False)
        window = project(cards, 2, 6)
        assert [d.status for d in window[:4]] == [
            DisplayStatus.CORRECT,
            DisplayStatus.INCORRECT,
            DisplayStatus.CURRENT,
            DisplayStatus.PENDING,
        ]

    def test_window_start_clamps(self):
        assert window_start(10, 0, 6) == 0
        assert window_start(10, 9, 6) == 4
        assert window_start(3, 2, 6) == 0


class TestPadding:
    def test_empty_collection_is_all_placeholders(self):
        window = project([], 0, 6)
        assert len(window) == 6
        assert all(d.status == DisplayStatus.PLACEHOLDER for d in window)
        assert all(d.display_index == -1 for d in window)
        assert not any(d.interactive for d in window)
        assert len({d.id for d in window}) == 6

    def test_short_collection_padded(self):
        window = project(make_cards(3), 1, 6)
        assert len(window) == 6
        assert [d.display_index for d in window] == [1, 2, 3, -1, -1, -1]
        assert window[1].status == DisplayStatus.CURRENT
        assert all(d.interactive for d in window[:3])

    def test_always_max_visible(self):
        for n in range(0, 15):
            for current in range(0, n + 1):
                assert len(project(make_cards(n), current, 6)) == 6

    def test_idempotent_and_non_mutating(self):
        cards = [Card(id=f"c{i}", target_direction=Direction.UP) for i in range(8)]
        first = project(cards, 4, 6)
        second = project(cards, 4, 6)
        assert first == second
        assert all(c.status == CardStatus.PENDING for c in cards)


class TestEngineProjection:
    def test_project_snapshot(self):
        engine = SequenceEngine(Beatmap.with_defaults())
        engine.tick(8.1)
        engine.apply_swipe(Direction.LEFT, 9000)
        window = project_snapshot(engine.snapshot())
        assert [d.display_index for d in window] == [1, 2, 3, 4, 5, -1]
        assert window[0].status == DisplayStatus.CORRECT
        assert window[1].status == DisplayStatus.CURRENT


class TestWaitingProgress:
    def finish_first_sequence(self):
        beatmap = Beatmap.with_defaults()
        engine = SequenceEngine(beatmap)
        engine.tick(8.1)
        for direction in (Direction.LEFT, Direction.UP, Direction.RIGHT, Direction.DOWN):
            engine.apply_swipe(direction, 9000)
        engine.apply_swipe(Direction.LEFT, 12500)
        return engine, beatmap

    def test_halfway(self):
        engine, beatmap = self.finish_first_sequence()
        engine.tick(11.05)
        assert waiting_progress(engine.snapshot(), beatmap) == pytest.approx(0.5)

    def test_zero_at_anchor(self):
        engine, beatmap = self.finish_first_sequence()
        assert waiting_progress(engine.snapshot(), beatmap) == pytest.approx(0.0)

    def test_none_when_not_waiting(self):
        beatmap = Beatmap.with_defaults()
        engine = SequenceEngine(beatmap)
        assert waiting_progress(engine.snapshot(), beatmap) is None
        engine.tick(8.0)  # waiting for the first sequence, no anchor
        assert waiting_progress(engine.snapshot(), beatmap) is None
        engine.tick(8.1)
        assert waiting_progress(engine.snapshot(), beatmap) is None
