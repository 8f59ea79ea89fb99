"""Stress tests for swipe-beat."""

import random
import threading
import time

import numpy as np

from swipe_beat.beatmap import Beatmap
from swipe_beat.cards import Direction
from swipe_beat.classifier import SwipeClassifier
from swipe_beat.clock import ManualClock
from swipe_beat.engine import Phase, SequenceEngine
from swipe_beat.metrics import MetricsCollector
from swipe_beat.progress import project
from swipe_beat.session import SimpleSession


class TestHighVolume:
    def test_10k_classifications(self):
        """Classify 10,000 random drags."""
        classifier = SwipeClassifier()
        rng = np.random.default_rng(42)
        counts = {d: 0 for d in Direction}
        none = 0
        for dx, dy, vx, vy in rng.uniform(-600, 600, size=(10_000, 4)):
            result = classifier.classify(dx, dy, vx, vy)
            if result.swiped:
                counts[result.direction] += 1
            else:
                none += 1
        assert sum(counts.values()) + none == 10_000
        assert all(c > 0 for c in counts.values())

    def test_long_beatmap(self):
        beatmap = Beatmap.generate(bpm=180, start_offset=0.5, count=500, rng=random.Random(0))
        engine = SequenceEngine(beatmap)
        clock = 0.0
        while engine.phase != Phase.COMPLETED:
            clock += 0.05
            engine.tick(clock)
            seq = engine.active_sequence
            while seq is not None and engine.active_sequence is seq:
                card = engine.active_cards[engine.active_card_cursor]
                engine.apply_swipe(card.target_direction, seq.beat_match.beat_time * 1000)
        assert engine.summary.success_count == 500
        assert engine.summary.total_cards == 500

    def test_projection_over_large_collection(self):
        cards = [c for c in SimpleSession(rng=random.Random(0)).queue.cards] * 200
        for current in range(0, len(cards), 97):
            assert len(project(cards, current, 6)) == 6


class TestConcurrentSession:
    def test_concurrent_swipes_serialized(self):
        """Swipes from several threads never double-resolve a card."""
        clock = ManualClock()
        session = SimpleSession(rng=random.Random(1), clock=clock)
        session.start()
        resolved = []
        errors = []
        done = threading.Event()

        def swiper(seed):
            rng = random.Random(seed)
            try:
                while not done.is_set():
                    card = session.swipe_direction(rng.choice(list(Direction)))
                    if card is not None:
                        resolved.append(card.id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=swiper, args=(i,)) for i in range(4)]
        for t in threads:
            t.start()
        # Let the swipers in between ticks until every card is resolved
        deadline = time.monotonic() + 10.0
        while not session.completed and time.monotonic() < deadline:
            clock.advance(0.1)
            session.tick()
            time.sleep(0.001)
        done.set()
        for t in threads:
            t.join()

        assert errors == [], f"Thread errors: {errors}"
        assert session.completed
        assert len(resolved) == len(set(resolved)) == 20
        summary = session.summary
        assert summary.success_count + summary.failed_count == 20


class TestMetricsStress:
    def test_concurrent_recording(self):
        m = MetricsCollector()

        def record(direction):
            for _ in range(1000):
                m.record_swipe(direction)
                m.record_card("correct", beat_match=True)

        threads = [threading.Thread(target=record, args=(d.value,)) for d in Direction]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sum(m.swipe_counts.values()) == 4000
        assert m.card_counts == {"correct": 4000}
        assert m.beat_match_counts == {"hit": 4000}
