"""Beatmaps: static schedules of timed card sequences.

A beatmap lists sequences in time order. Each sequence introduces a short
pattern of directional cards at ``time`` and ends with one beat-match card
whose swipe must land within a tolerance of ``beat_match.beat_time``.

Beatmaps are loaded once, validated, and never mutated. They can be read
from YAML or JSON:

    song: where-is-the-love.mp3
    bpm: 94
    start_offset: 8.0
    sequences:
      - time: 8.1
        pattern: [left, up, right, down]
        beat_match: {direction: left, beat_time: 12.5}
"""

from __future__ import annotations

import json
import math
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from swipe_beat.cards import Direction


class BeatmapError(ValueError):
    """Raised when a beatmap is malformed and a session must not start."""


@dataclass(frozen=True)
class BeatMatch:
    direction: Direction
    beat_time: float


@dataclass(frozen=True)
class Sequence:
    """An ordered group of cards introduced together at ``time`` seconds."""
    time: float
    pattern: tuple[Direction, ...]
    beat_match: BeatMatch

    @property
    def card_count(self) -> int:
        """Pattern cards plus the trailing beat-match card."""
        return len(self.pattern) + 1

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "pattern": [d.value for d in self.pattern],
            "beat_match": {
                "direction": self.beat_match.direction.value,
                "beat_time": self.beat_match.beat_time,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> Sequence:
        try:
            bm = data["beat_match"]
            return cls(
                time=float(data["time"]),
                pattern=tuple(Direction(d) for d in data.get("pattern", [])),
                beat_match=BeatMatch(
                    direction=Direction(bm["direction"]),
                    beat_time=float(bm["beat_time"]),
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BeatmapError(f"Invalid sequence entry {data!r}: {e}") from e


@dataclass(frozen=True)
class Beatmap:
    song_ref: str
    bpm: float
    start_offset: float
    sequences: tuple[Sequence, ...]

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Check schedule invariants. Raises BeatmapError on the first violation."""
        if not math.isfinite(self.bpm) or self.bpm <= 0:
            raise BeatmapError(f"bpm must be positive, got {self.bpm}")
        if not math.isfinite(self.start_offset) or self.start_offset < 0:
            raise BeatmapError(f"start_offset must be non-negative, got {self.start_offset}")

        previous: Optional[float] = None
        for i, seq in enumerate(self.sequences):
            if not (math.isfinite(seq.time) and math.isfinite(seq.beat_match.beat_time)):
                raise BeatmapError(
                    f"Sequence {i} times must be finite, got {seq.time} / {seq.beat_match.beat_time}"
                )
            if previous is not None and seq.time <= previous:
                raise BeatmapError(
                    f"Sequence {i} time {seq.time} is not after previous time {previous}"
                )
            if seq.beat_match.beat_time < seq.time:
                raise BeatmapError(
                    f"Sequence {i} beat_time {seq.beat_match.beat_time} precedes its time {seq.time}"
                )
            previous = seq.time

    def __len__(self) -> int:
        return len(self.sequences)

    def sequence(self, index: int) -> Optional[Sequence]:
        """Sequence at ``index``, or None past the end."""
        if 0 <= index < len(self.sequences):
            return self.sequences[index]
        return None

    @property
    def sequence_times(self) -> np.ndarray:
        return np.array([s.time for s in self.sequences], dtype=np.float64)

    @property
    def beat_times(self) -> np.ndarray:
        return np.array([s.beat_match.beat_time for s in self.sequences], dtype=np.float64)

    def due_index(self, clock_seconds: float) -> int:
        """Number of sequences whose start time has been reached."""
        return int(np.searchsorted(self.sequence_times, clock_seconds, side="right"))

    @property
    def total_cards(self) -> int:
        return sum(s.card_count for s in self.sequences)

    @property
    def duration(self) -> float:
        """Time of the last beat-match instant (or start offset when empty)."""
        if not self.sequences:
            return self.start_offset
        return float(self.beat_times.max())

    def to_dict(self) -> dict:
        return {
            "song": self.song_ref,
            "bpm": self.bpm,
            "start_offset": self.start_offset,
            "sequences": [s.to_dict() for s in self.sequences],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Beatmap:
        if not isinstance(data, dict):
            raise BeatmapError("Beatmap document must be a mapping")
        try:
            return cls(
                song_ref=str(data.get("song", "")),
                bpm=float(data["bpm"]),
                start_offset=float(data.get("start_offset", 0.0)),
                sequences=tuple(Sequence.from_dict(s) for s in data.get("sequences", [])),
            )
        except BeatmapError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise BeatmapError(f"Invalid beatmap: {e}") from e

    @classmethod
    def load(cls, path: str | Path) -> Beatmap:
        """Load from ``.json`` or YAML (anything else) and validate."""
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise BeatmapError(f"Could not read {path}: {e}") from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise BeatmapError(f"Could not parse {path}: {e}") from e
        return cls.from_dict(data)

    def save(self, path: str | Path):
        path = Path(path)
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.dump(self.to_dict(), f, default_flow_style=None, sort_keys=False)

    @classmethod
    def generate(
        cls,
        bpm: float = 120.0,
        start_offset: float = 4.0,
        count: int = 8,
        pattern_length: int = 4,
        beats_per_sequence: int = 8,
        song_ref: str = "",
        rng: Optional[random.Random] = None,
    ) -> Beatmap:
        """Build an on-beat schedule.

        Sequence ``i`` starts ``i * beats_per_sequence`` beats after
        ``start_offset``; its beat-match instant falls on the last beat of that
        block.
        """
        if not math.isfinite(bpm) or bpm <= 0:
            raise BeatmapError(f"bpm must be positive, got {bpm}")
        rng = rng or random.Random()
        beat = 60.0 / bpm
        starts = start_offset + np.arange(count) * beats_per_sequence * beat
        beat_times = starts + (beats_per_sequence - 1) * beat
        directions = list(Direction)

        sequences = tuple(
            Sequence(
                time=round(float(t), 3),
                pattern=tuple(rng.choice(directions) for _ in range(pattern_length)),
                beat_match=BeatMatch(rng.choice(directions), round(float(b), 3)),
            )
            for t, b in zip(starts, beat_times)
        )
        return cls(song_ref=song_ref, bpm=bpm, start_offset=start_offset, sequences=sequences)

    @classmethod
    def with_defaults(cls) -> Beatmap:
        """Demo beatmap: two short sequences after an 8 second intro."""
        return cls(
            song_ref="bep-where-is-the-love.mp3",
            bpm=94.0,
            start_offset=8.0,
            sequences=(
                Sequence(
                    time=8.1,
                    pattern=(Direction.LEFT, Direction.UP, Direction.RIGHT, Direction.DOWN),
                    beat_match=BeatMatch(Direction.LEFT, 12.5),
                ),
                Sequence(
                    time=14.0,
                    pattern=(Direction.UP, Direction.UP, Direction.DOWN, Direction.RIGHT),
                    beat_match=BeatMatch(Direction.RIGHT, 18.2),
                ),
            ),
        )
