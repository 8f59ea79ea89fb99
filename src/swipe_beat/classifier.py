"""Swipe classification from terminal drag gestures.

A drag gesture is reduced to one committed sample at its natural end:
translation ``(dx, dy)`` in logical pixels and release velocity ``(vx, vy)``
in pixels/second. The classifier turns that sample into a direction or
"no swipe". Screen coordinates are used, so positive ``dy`` points down.

Usage:
    classifier = SwipeClassifier()
    result = classifier.classify(dx=140, dy=-20, vx=300, vy=0)
    if result.swiped:
        print(result.direction)  # Direction.RIGHT
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from swipe_beat.cards import Direction

SWIPE_THRESHOLD = 100.0
VELOCITY_THRESHOLD = 500.0


@dataclass(frozen=True)
class SwipeResult:
    """Outcome of classifying one gesture. ``direction`` is None for no swipe."""
    direction: Optional[Direction] = None

    @property
    def swiped(self) -> bool:
        return self.direction is not None


NO_SWIPE = SwipeResult()


@dataclass(frozen=True)
class GestureSample:
    """Terminal drag values delivered once per gesture."""
    dx: float
    dy: float
    vx: float = 0.0
    vy: float = 0.0


@dataclass(frozen=True)
class DragTransform:
    """Per-frame presentation feedback while a card is being dragged."""
    scale: float
    opacity: float
    rotation_degrees: float


class SwipeClassifier:
    """Classifies terminal drag samples into swipe directions.

    A gesture counts as a swipe when either the distance trigger
    (``|dx|`` or ``|dy|`` strictly above ``swipe_threshold``) or the velocity
    trigger (``|vx|`` or ``|vy|`` strictly above ``velocity_threshold``)
    fires. The dominant axis then picks the direction, ties going horizontal.

    Holds configuration only; no state is kept between calls.
    """

    def __init__(
        self,
        swipe_threshold: float = SWIPE_THRESHOLD,
        velocity_threshold: float = VELOCITY_THRESHOLD,
        screen_width: float = 400.0,
        max_rotation: float = 15.0,
    ):
        self.swipe_threshold = swipe_threshold
        self.velocity_threshold = velocity_threshold
        self.screen_width = screen_width
        self.max_rotation = max_rotation

    def classify(self, dx: float, dy: float, vx: float = 0.0, vy: float = 0.0) -> SwipeResult:
        abs_x, abs_y = abs(dx), abs(dy)

        distance_trigger = abs_x > self.swipe_threshold or abs_y > self.swipe_threshold
        velocity_trigger = abs(vx) > self.velocity_threshold or abs(vy) > self.velocity_threshold
        if not (distance_trigger or velocity_trigger):
            return NO_SWIPE

        if abs_x >= abs_y:
            return SwipeResult(Direction.RIGHT if dx > 0 else Direction.LEFT)
        return SwipeResult(Direction.DOWN if dy > 0 else Direction.UP)

    def classify_sample(self, sample: GestureSample) -> SwipeResult:
        return self.classify(sample.dx, sample.dy, sample.vx, sample.vy)

    def classify_path(
        self,
        points: np.ndarray | Sequence[Sequence[float]],
        timestamps: np.ndarray | Sequence[float],
        velocity_window: float = 0.05,
    ) -> SwipeResult:
        """Classify a sampled drag path by reducing it to its terminal sample."""
        sample = self.terminal_sample(points, timestamps, velocity_window)
        if sample is None:
            return NO_SWIPE
        return self.classify_sample(sample)

    @staticmethod
    def terminal_sample(
        points: np.ndarray | Sequence[Sequence[float]],
        timestamps: np.ndarray | Sequence[float],
        velocity_window: float = 0.05,
    ) -> Optional[GestureSample]:
        """Reduce a drag path to ``(dx, dy, vx, vy)``.

        Translation is last point minus first point. Velocity is measured over
        the samples inside the final ``velocity_window`` seconds (at least the
        last two samples).

        Returns None for paths with fewer than two points.
        """
        pts = np.asarray(points, dtype=np.float64)
        times = np.asarray(timestamps, dtype=np.float64)
        if pts.ndim != 2 or len(pts) < 2 or len(times) != len(pts):
            return None

        dx, dy = (pts[-1] - pts[0])[:2]

        # First sample still inside the release window
        start = int(np.searchsorted(times, times[-1] - velocity_window, side="left"))
        start = min(start, len(pts) - 2)
        dt = times[-1] - times[start]
        if dt > 0:
            vx, vy = ((pts[-1] - pts[start]) / dt)[:2]
        else:
            vx, vy = 0.0, 0.0

        return GestureSample(float(dx), float(dy), float(vx), float(vy))

    def drag_feedback(self, dx: float, dy: float) -> DragTransform:
        """Scale, opacity and rotation for an in-progress drag. Clamped."""
        distance = float(np.hypot(dx, dy))
        half_width = self.screen_width / 2
        return DragTransform(
            scale=float(np.interp(distance, [0.0, 150.0], [1.0, 0.95])),
            opacity=float(np.interp(distance, [0.0, 200.0], [1.0, 0.7])),
            rotation_degrees=float(np.interp(
                dx, [-half_width, half_width], [-self.max_rotation, self.max_rotation]
            )),
        )
