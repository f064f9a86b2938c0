"""Attempt log value types.

The attempt log is the only durable record a drill keeps. It is append-only
and immutable: appending returns a new log, so the scheduler can read a log
without worrying about it changing underneath.
"""

import math
from collections.abc import Iterator
from dataclasses import dataclass

ItemId = str


@dataclass(frozen=True)
class Attempt:
    """One recorded trial against an item."""

    item: ItemId
    error_distance: float  # 0 = perfect response, up to 1
    sequence: int  # Position in the global log, zero-based

    def __post_init__(self) -> None:
        """Reject distances outside [0, 1] and negative sequences."""
        if math.isnan(self.error_distance) or not 0.0 <= self.error_distance <= 1.0:
            raise ValueError(f"error_distance must be in [0, 1], got {self.error_distance!r}")
        if self.sequence < 0:
            raise ValueError(f"sequence must be >= 0, got {self.sequence!r}")


@dataclass(frozen=True)
class AttemptLog:
    """Ordered, append-only sequence of attempts (insertion order = time order)."""

    attempts: tuple[Attempt, ...] = ()

    def __post_init__(self) -> None:
        """Check that sequences are exactly 0..len-1 in log order."""
        for index, attempt in enumerate(self.attempts):
            if attempt.sequence != index:
                raise ValueError(
                    f"attempt {index} has sequence {attempt.sequence}; expected {index}"
                )

    def __len__(self) -> int:
        return len(self.attempts)

    def __iter__(self) -> Iterator[Attempt]:
        return iter(self.attempts)

    def __getitem__(self, index: int) -> Attempt:
        return self.attempts[index]

    def __reversed__(self) -> Iterator[Attempt]:
        return reversed(self.attempts)

    def append(self, item: ItemId, error_distance: float) -> "AttemptLog":
        """Return a new log with one more attempt at the end."""
        attempt = Attempt(item=item, error_distance=error_distance, sequence=len(self.attempts))
        return AttemptLog(self.attempts + (attempt,))

    @classmethod
    def from_records(cls, records: list[tuple[ItemId, float]]) -> "AttemptLog":
        """Build a log from ``(item, error_distance)`` pairs, numbering them in order."""
        return cls(
            tuple(
                Attempt(item=item, error_distance=distance, sequence=i)
                for i, (item, distance) in enumerate(records)
            )
        )
