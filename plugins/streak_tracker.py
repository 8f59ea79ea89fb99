"""Example swipe-beat plugin: streak tracker.

Counts card outcomes and reports the longest run of correct cards when the
session ends. Load it with ``swipe-beat simulate --plugins plugins/``.
"""

from __future__ import annotations

import logging
from collections import Counter

from swipe_beat.plugins import PluginEvent, SessionPlugin

logger = logging.getLogger("swipe_beat.plugins.streak_tracker")


class StreakTrackerPlugin(SessionPlugin):
    """Tracks the current and best correct-card streaks."""

    name = "streak_tracker"
    version = "1.0.0"
    description = "Logs card streaks and per-status counts"

    def __init__(self):
        super().__init__()
        self._counts: Counter = Counter()
        self.streak = 0
        self.best_streak = 0

        @self.handler("incorrect")
        def on_miss(event: PluginEvent):
            if self.streak >= 5:
                logger.info("💥 Streak of %d broken at %s", self.streak, event.data.get("card_id"))

    def on_startup(self, context: dict):
        self._counts.clear()
        self.streak = 0
        self.best_streak = 0
        logger.info("StreakTracker: watching %s session", context.get("mode", "?"))

    def on_card(self, event: PluginEvent):
        self._counts[event.name] += 1
        super().on_card(event)  # decorator handlers see the streak before it resets
        if event.name == "correct":
            self.streak += 1
            self.best_streak = max(self.best_streak, self.streak)
        else:
            self.streak = 0

    def on_complete(self, event: PluginEvent):
        logger.info(
            "🏁 %s session done: best streak %d, accuracy %.1f%%",
            event.name, self.best_streak, event.data.get("accuracy", 0.0),
        )

    def on_shutdown(self):
        if self._counts:
            logger.info("StreakTracker summary: %s", dict(self._counts))

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)
