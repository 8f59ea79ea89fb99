"""Prometheus-style metrics for swipe-beat sessions.

Renders the Prometheus text exposition format directly, no client library.

Tracked metrics:
- swipe_beat_swipes_total (counter, by direction)
- swipe_beat_no_swipes_total (counter)
- swipe_beat_ignored_swipes_total (counter)
- swipe_beat_cards_total (counter, by status)
- swipe_beat_beat_matches_total (counter, by result)
- swipe_beat_clock_regressions_total (counter)
- swipe_beat_sessions_completed_total (counter, by mode)
- swipe_beat_tick_latency_seconds (histogram)
"""

from __future__ import annotations

import threading
import time
from collections import Counter


class _Histogram:
    """Simple histogram with configurable buckets."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> str:
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} histogram",
        ]
        with self._lock:
            cumulative = 0
            for i, b in enumerate(self.buckets):
                cumulative += self.bucket_counts[i]
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return "\n".join(lines)


class MetricsCollector:
    """Counts swipes, card outcomes and session lifecycle events."""

    def __init__(self):
        self._swipes: Counter = Counter()
        self._cards: Counter = Counter()
        self._beat_matches: Counter = Counter()
        self._sessions: Counter = Counter()
        self._no_swipes = 0
        self._ignored_swipes = 0
        self._clock_regressions = 0
        self._lock = threading.Lock()

        # Tick handling latency: 10µs to 10ms
        self._tick_latency = _Histogram([0.00001, 0.0001, 0.0005, 0.001, 0.005, 0.010])

        self._start_time = time.time()

    def record_swipe(self, direction: str):
        with self._lock:
            self._swipes[direction] += 1

    def record_no_swipe(self):
        with self._lock:
            self._no_swipes += 1

    def record_ignored_swipe(self):
        with self._lock:
            self._ignored_swipes += 1

    def record_card(self, status: str, beat_match: bool = False):
        with self._lock:
            self._cards[status] += 1
            if beat_match:
                self._beat_matches["hit" if status == "correct" else "miss"] += 1

    def record_clock_regression(self):
        with self._lock:
            self._clock_regressions += 1

    def record_session_completed(self, mode: str):
        with self._lock:
            self._sessions[mode] += 1

    def record_tick(self, latency_seconds: float):
        self._tick_latency.observe(latency_seconds)

    @staticmethod
    def _counter(lines: list[str], name: str, help_text: str, values: dict, label: str):
        lines.append(f"# HELP {name} {help_text}")
        lines.append(f"# TYPE {name} counter")
        for key, count in sorted(values.items()):
            lines.append(f'{name}{{{label}="{key}"}} {count}')
        lines.append("")

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        lines: list[str] = []

        uptime = time.time() - self._start_time
        lines.append("# HELP swipe_beat_uptime_seconds Time since collector creation")
        lines.append("# TYPE swipe_beat_uptime_seconds gauge")
        lines.append(f"swipe_beat_uptime_seconds {uptime:.1f}")
        lines.append("")

        with self._lock:
            self._counter(lines, "swipe_beat_swipes_total", "Applied swipes by direction",
                          dict(self._swipes), "direction")
            self._counter(lines, "swipe_beat_cards_total", "Resolved cards by status",
                          dict(self._cards), "status")
            self._counter(lines, "swipe_beat_beat_matches_total", "Beat-match card outcomes",
                          dict(self._beat_matches), "result")
            self._counter(lines, "swipe_beat_sessions_completed_total", "Completed sessions by mode",
                          dict(self._sessions), "mode")

            lines.append("# HELP swipe_beat_no_swipes_total Gestures below both swipe triggers")
            lines.append("# TYPE swipe_beat_no_swipes_total counter")
            lines.append(f"swipe_beat_no_swipes_total {self._no_swipes}")
            lines.append("")

            lines.append("# HELP swipe_beat_ignored_swipes_total Swipes that arrived with no card to resolve")
            lines.append("# TYPE swipe_beat_ignored_swipes_total counter")
            lines.append(f"swipe_beat_ignored_swipes_total {self._ignored_swipes}")
            lines.append("")

            lines.append("# HELP swipe_beat_clock_regressions_total Ticks ignored because the clock went backwards")
            lines.append("# TYPE swipe_beat_clock_regressions_total counter")
            lines.append(f"swipe_beat_clock_regressions_total {self._clock_regressions}")
            lines.append("")

        lines.append(self._tick_latency.render(
            "swipe_beat_tick_latency_seconds",
            "Time spent handling one clock tick",
        ))
        lines.append("")

        return "\n".join(lines) + "\n"

    @property
    def swipe_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._swipes)

    @property
    def card_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._cards)

    @property
    def beat_match_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._beat_matches)
