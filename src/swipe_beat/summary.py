"""End-of-session result record."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class SessionSummary:
    """Final tally handed to the result consumer once a session completes.

    In rhythm mode ``success_count``/``failed_count`` count beat-match hits and
    misses and ``total_cards`` is the number of sequences. In simple mode they
    count every swiped card and ``total_cards`` is the card limit.
    """
    duration_seconds: float
    success_count: int
    failed_count: int
    total_cards: int

    @property
    def accuracy(self) -> float:
        """Success percentage of ``total_cards`` (0.0 for an empty session)."""
        if self.total_cards <= 0:
            return 0.0
        return self.success_count / self.total_cards * 100.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["accuracy"] = round(self.accuracy, 1)
        return data
